"""Portfolio API endpoints: trading, valuation, history and analysis."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from papertrade.api.deps import get_portfolio_service, get_user_id
from papertrade.api.schemas.portfolio import (
    AnalysisResponse,
    PortfolioResponse,
    TradeRequest,
    TradeResponse,
    TransactionListResponse,
    TransactionResponse,
)
from papertrade.domain.views import TradeResult
from papertrade.services import PortfolioService
from papertrade.services.portfolio_service import EMPTY_PORTFOLIO_MESSAGE

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

# Trade failures not listed here are client errors
_TRADE_FAILURE_STATUS = {
    "PersistenceError": 503,
}


def _trade_response(result: TradeResult, response: Response) -> TradeResponse:
    if not result.success:
        response.status_code = _TRADE_FAILURE_STATUS.get(result.error, 400)
    return TradeResponse.model_validate(result)


@router.get("", response_model=PortfolioResponse)
def get_portfolio(
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Get the caller's portfolio valued at live quotes."""
    return PortfolioResponse.model_validate(service.get_portfolio_with_metrics(user_id))


@router.post("/buy", response_model=TradeResponse)
def buy(
    data: TradeRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Buy shares at the given price."""
    result = service.buy(user_id, data.symbol, data.quantity, data.price)
    return _trade_response(result, response)


@router.post("/sell", response_model=TradeResponse)
def sell(
    data: TradeRequest,
    response: Response,
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Sell shares at the given price."""
    result = service.sell(user_id, data.symbol, data.quantity, data.price)
    return _trade_response(result, response)


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """List the caller's transactions, most recent first."""
    transactions = service.get_transaction_history(user_id, limit)
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        count=len(transactions),
    )


@router.post("/analysis", response_model=AnalysisResponse)
def analyze(
    response: Response,
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Generate (or reuse) an AI analysis of the caller's holdings."""
    result = service.analyze_portfolio(user_id)
    if not result.success:
        response.status_code = 400 if result.message == EMPTY_PORTFOLIO_MESSAGE else 503
    return AnalysisResponse.model_validate(result)
