"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from papertrade import __version__
from papertrade.app_context import AppContext
from papertrade.config.settings import get_settings
from papertrade.config.logging_config import setup_logging
from papertrade.api.routers import portfolio_router, stocks_router, watchlist_router
from papertrade.core.exceptions import AppError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    context = getattr(app.state, "context", None) or AppContext()
    context.initialize()
    app.state.context = context
    yield
    # Shutdown
    context.close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Paper-trading portfolio ledger with live valuation and AI analysis",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(portfolio_router)
app.include_router(watchlist_router)
app.include_router(stocks_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=400,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
