"""Dependency injection for FastAPI."""

from fastapi import Depends, Header, Request

from papertrade.app_context import AppContext
from papertrade.core.exceptions import ValidationError
from papertrade.services import PortfolioService, WatchlistService


def get_app_context(request: Request) -> AppContext:
    """Provide the AppContext created by the application lifespan."""
    return request.app.state.context


def get_portfolio_service(
    context: AppContext = Depends(get_app_context),
) -> PortfolioService:
    """Provide PortfolioService instance."""
    return context.portfolio_service


def get_watchlist_service(
    context: AppContext = Depends(get_app_context),
) -> WatchlistService:
    """Provide WatchlistService instance."""
    return context.watchlist_service


def get_user_id(x_user_id: str = Header(..., max_length=64)) -> str:
    """Identify the caller from the X-User-Id header."""
    user_id = x_user_id.strip()
    if not user_id:
        raise ValidationError("X-User-Id header must not be empty")
    return user_id
