"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from papertrade.domain.models.enums import TransactionType


class TradeRequest(BaseModel):
    """Request schema for a buy or sell order."""

    symbol: str = Field(..., min_length=1, max_length=20, description="Stock symbol")
    quantity: int = Field(..., gt=0, description="Whole number of shares")
    price: Decimal = Field(..., gt=0, description="Execution price per share")

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class TransactionResponse(BaseModel):
    """Response schema for a single ledger transaction."""

    model_config = {"from_attributes": True}

    txn_id: str
    user_id: str
    symbol: str
    txn_type: TransactionType
    quantity: int
    price: Decimal
    total_amount: Decimal
    date: datetime


class TransactionListResponse(BaseModel):
    """Response schema for transaction history."""

    transactions: list[TransactionResponse]
    count: int


class TradeResponse(BaseModel):
    """Response schema for a buy or sell order."""

    model_config = {"from_attributes": True}

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    transaction: Optional[TransactionResponse] = None


class HoldingResponse(BaseModel):
    """A holding valued at its live quote."""

    model_config = {"from_attributes": True}

    symbol: str
    name: str
    quantity: int
    average_price: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    unrealized_gain: Decimal
    unrealized_gain_percent: Decimal
    change_percent: Decimal
    day_change: Decimal
    quote_available: bool


class PortfolioResponse(BaseModel):
    """Portfolio with aggregate market metrics."""

    model_config = {"from_attributes": True}

    user_id: str
    balance: Decimal
    total_invested: Decimal
    total_equity: Decimal
    total_value: Decimal
    day_change: Decimal
    day_change_percent: Decimal
    holdings: list[HoldingResponse]
    as_of: Optional[datetime] = None


class AnalysisResponse(BaseModel):
    """AI analysis result; `cached` tells whether it was served from cache."""

    model_config = {"from_attributes": True}

    success: bool
    analysis: Optional[dict[str, Any]] = None
    cached: bool = False
    message: Optional[str] = None
