"""Watchlist API endpoints."""

from fastapi import APIRouter, Depends, Response

from papertrade.api.deps import get_user_id, get_watchlist_service
from papertrade.api.schemas.watchlist import (
    WatchlistAddRequest,
    WatchlistEntryResponse,
    WatchlistResponse,
    WatchlistResultResponse,
)
from papertrade.domain.views import WatchlistResult
from papertrade.services import WatchlistService

router = APIRouter(prefix="/watchlist", tags=["watchlist"])

# Failures not listed here are client errors
_WATCHLIST_FAILURE_STATUS = {
    "PersistenceError": 503,
    "DuplicateWatchlistItem": 409,
}


def _result_response(result: WatchlistResult, response: Response) -> WatchlistResultResponse:
    if not result.success:
        response.status_code = _WATCHLIST_FAILURE_STATUS.get(result.error, 400)
    return WatchlistResultResponse.model_validate(result)


@router.get("", response_model=WatchlistResponse)
def get_watchlist(
    user_id: str = Depends(get_user_id),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """Get the caller's watchlist with live quotes, most recently added first."""
    entries = service.get_watchlist_with_data(user_id)
    return WatchlistResponse(
        items=[WatchlistEntryResponse.model_validate(e) for e in entries],
        count=len(entries),
    )


@router.post("", response_model=WatchlistResultResponse, status_code=201)
def add_to_watchlist(
    data: WatchlistAddRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """Start watching a symbol."""
    return _result_response(service.add(user_id, data.symbol, data.company), response)


@router.delete("/{symbol}", response_model=WatchlistResultResponse)
def remove_from_watchlist(
    symbol: str,
    response: Response,
    user_id: str = Depends(get_user_id),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """Stop watching a symbol. Removing an unwatched symbol succeeds."""
    return _result_response(service.remove(user_id, symbol), response)
