"""ImmoGest - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from immogest import __version__
from immogest.core.config import Settings
from immogest.core.env_validation import validate_environment
from immogest.routers import (
    dashboard_router,
    maintenance_router,
    properties_router,
    tenants_router,
    transactions_router,
    units_router,
)
from immogest.services.context import DataContext

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    ctx: DataContext = app.state.data_context
    # Startup: pick the data source
    await ctx.initialize()
    status = ctx.connection_status()
    logger.info(f"Serving data from the {status.connection_type} source")
    yield
    # Shutdown
    await ctx.aclose()


def create_app(
    settings: Optional[Settings] = None,
    data_context: Optional[DataContext] = None,
) -> FastAPI:
    """Build the application. Exits the process on invalid configuration."""
    settings = validate_environment(settings)
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Property management for landlords and tenants: properties, units, tenants, maintenance and finances, with an offline fallback store.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.data_context = data_context or DataContext(settings)

    # In production, wildcard (*) is blocked by env_validation.py
    allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
    logger.info(f"CORS configured with origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API v1 routers
    app.include_router(properties_router, prefix=settings.api_v1_prefix)
    app.include_router(units_router, prefix=settings.api_v1_prefix)
    app.include_router(tenants_router, prefix=settings.api_v1_prefix)
    app.include_router(maintenance_router, prefix=settings.api_v1_prefix)
    app.include_router(transactions_router, prefix=settings.api_v1_prefix)
    app.include_router(dashboard_router, prefix=settings.api_v1_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        ctx: DataContext = app.state.data_context
        return {
            "status": "healthy",
            "service": settings.app_name,
            "data_source": ctx.connection_status().connection_type,
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else "Disabled in production",
        }

    return app


app = create_app()
