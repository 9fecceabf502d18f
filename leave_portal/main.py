"""Leave Portal — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from leave_portal.ccl.router import router as ccl_router
from leave_portal.common.exceptions import register_exception_handlers
from leave_portal.common.rate_limit import limiter
from leave_portal.config import settings
from leave_portal.dashboard.router import router as dashboard_router
from leave_portal.leave.router import router as leave_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Root logging at the configured level."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info(
        "Leave portal gateway starting (environment=%s, backend=%s)",
        settings.ENVIRONMENT, settings.BACKEND_API_URL,
    )
    yield
    logger.info("Leave portal gateway stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()
    app = FastAPI(
        title="Leave Portal",
        description="College leave and CCL approval workflow gateway",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(ccl_router, prefix="/api/v1/ccl", tags=["ccl"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])

    return app


app = create_app()
