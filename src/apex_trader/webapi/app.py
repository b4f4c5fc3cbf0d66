"""FastAPI application for the Apex Trader paper trading API."""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.logging import get_logger
from ..ormdb.database import create_tables
from .exceptions import setup_exception_handlers
from .health import router as health_router
from .models.responses import StatusResponse
from .routers import leaderboard_router, portfolio_router, stocks_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Apex Trader API", version=__version__)

    try:
        create_tables()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e), exc_info=True)
        raise RuntimeError(f"Database initialization failed: {str(e)}")

    logger.info("Apex Trader API started successfully")

    yield

    # Shutdown
    logger.info("Apex Trader API shutdown completed")


async def add_request_id_middleware(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        "Request started",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        query_params=str(request.query_params),
        remote_addr=request.client.host if request.client else None,
    )

    response = await call_next(request)

    # Add request ID to response headers
    response.headers["X-Request-ID"] = request_id

    logger.info(
        "Request completed",
        request_id=request_id,
        status_code=response.status_code,
        method=request.method,
        path=request.url.path,
    )

    return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Apex Trader API",
        description="""
        Paper trading backend with achievements, a global leaderboard and
        performance analytics against a benchmark index.

        ## Features

        * **Paper Trading**: Market orders at live quotes with a flat commission
        * **Portfolio**: Cash, positions at weighted average cost, trade history
        * **Achievements**: Unlocked from trading activity, never revoked
        * **Leaderboard**: Top portfolios ranked by value
        * **Analytics**: Daily value reconstructed from trade history vs. SPY
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Add middleware for request tracking
    app.middleware("http")(add_request_id_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health & Status"])
    app.include_router(
        portfolio_router, prefix="/api/v1/portfolio", tags=["Portfolio & Trading"]
    )
    app.include_router(
        leaderboard_router, prefix="/api/v1", tags=["Leaderboard & Achievements"]
    )
    app.include_router(stocks_router, prefix="/api/v1/stocks", tags=["Market Data"])

    @app.get(
        "/api/v1/status",
        response_model=StatusResponse,
        summary="API Status",
        description="API version and endpoint index",
    )
    async def api_status(request: Request) -> StatusResponse:
        request_id = request.state.request_id

        status_data = {
            "api_version": __version__,
            "status": "operational",
            "endpoints": {
                "health": "/api/v1/health",
                "portfolio": "/api/v1/portfolio",
                "trades": "/api/v1/portfolio/trades",
                "analytics": "/api/v1/portfolio/analytics",
                "leaderboard": "/api/v1/leaderboard",
                "achievements": "/api/v1/achievements",
                "stocks": "/api/v1/stocks/{symbol}/quote",
                "docs": "/docs",
            },
        }

        return StatusResponse.create(data=status_data, request_id=request_id)

    return app


# Create the application instance
app = create_app()
