"""
Impact Outcomes - FastAPI Application.

Outcomes reporting service comparing beneficiaries' first and last meetings.

Architecture Layer: Infrastructure
Principles: 12-Factor App, Dependency Injection, Configuration Externalization
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from .api import router as outcomes_router
from .api import set_dependencies
from .config import get_config
from .observability import configure_logging
from .reports import OutcomeReportService
from .repository import get_repository

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    config = get_config()
    configure_logging(config)
    logger.info("outcomes_service_starting", service=config.service.name, env=config.service.env.value)

    report_service = OutcomeReportService(
        get_repository(), max_concurrent_fetches=config.report.max_concurrent_fetches
    )
    set_dependencies(report_service)
    logger.info("outcomes_service_ready")

    yield

    logger.info("outcomes_service_shutdown")
    set_dependencies(None)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_config()

    app = FastAPI(
        title="Impact Outcomes Service",
        description="Longitudinal first/last/delta outcome reports per outcome set",
        version=config.service.version,
        lifespan=lifespan,
        docs_url=None if config.is_production() else "/docs",
        redoc_url=None if config.is_production() else "/redoc",
    )
    app.include_router(outcomes_router)

    @app.get("/health", tags=["health"])
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "service": config.service.name}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "impact_outcomes.main:app",
        host=config.service.host,
        port=config.service.port,
        reload=config.service.env.value == "development",
        log_level=config.service.log_level.lower(),
    )
