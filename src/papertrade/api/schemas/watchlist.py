"""Pydantic schemas for watchlist and symbol search endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class WatchlistAddRequest(BaseModel):
    """Request schema for watching a symbol."""

    symbol: str = Field(..., min_length=1, max_length=20, description="Stock symbol")
    company: str = Field(default="", max_length=255, description="Display name; defaults to the symbol")

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class WatchlistResultResponse(BaseModel):
    """Response schema for add/remove."""

    model_config = {"from_attributes": True}

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class WatchlistEntryResponse(BaseModel):
    """A watched symbol with its live quote, when one is available."""

    model_config = {"from_attributes": True}

    symbol: str
    company: str
    added_at: Optional[datetime] = None
    current_price: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    quote_available: bool


class WatchlistResponse(BaseModel):
    """Response schema for the caller's watchlist."""

    items: list[WatchlistEntryResponse]
    count: int


class StockSearchResultResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    description: str


class StockSearchResponse(BaseModel):
    results: list[StockSearchResultResponse]
    count: int
