"""API routers package."""

from papertrade.api.routers.portfolio import router as portfolio_router
from papertrade.api.routers.watchlist import router as watchlist_router
from papertrade.api.routers.stocks import router as stocks_router

__all__ = [
    "portfolio_router",
    "watchlist_router",
    "stocks_router",
]
