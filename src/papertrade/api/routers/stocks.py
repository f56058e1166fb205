"""Symbol search endpoint."""

from fastapi import APIRouter, Depends, Query

from papertrade.api.deps import get_watchlist_service
from papertrade.api.schemas.watchlist import StockSearchResponse, StockSearchResultResponse
from papertrade.services import WatchlistService

router = APIRouter(prefix="/stocks", tags=["stocks"])


@router.get("/search", response_model=StockSearchResponse)
def search_stocks(
    q: str = Query(default="", max_length=100, description="Ticker or company name"),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """Look up symbols by ticker or company name."""
    results = service.search_stocks(q)
    return StockSearchResponse(
        results=[StockSearchResultResponse.model_validate(r) for r in results],
        count=len(results),
    )
