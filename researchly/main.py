"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, researchly.api, researchly.observability, researchly.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from researchly import __version__
from researchly.api.deps.container import ServiceContainer
from researchly.api.realtime.gateway import router as realtime_router
from researchly.api.routers import health_router
from researchly.boundary.db.connection import create_tables
from researchly.configs import get_settings
from researchly.observability.logger import configure_logging
from researchly.observability.middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        container: Prebuilt service container (tests); built from settings at
            startup when None

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the service container at startup and release it at shutdown."""
        configure_logging(settings.log_level)
        logger.info("Application startup: logging configured")

        owned = container is None
        try:
            app.state.container = ServiceContainer.from_settings(settings) if owned else container
            if owned and settings.database.create_tables and app.state.container.db_engine is not None:
                await create_tables(app.state.container.db_engine)
            logger.info(
                "Application startup complete",
                extra={"strategy": settings.context.strategy, "environment": settings.environment},
            )
        except Exception as e:
            logger.exception("Failed to initialize application resources", extra={"error": str(e)})
            raise

        yield

        logger.info("Application shutdown")
        if owned:
            await app.state.container.aclose()

    app = FastAPI(
        title="Researchly Assist AI API",
        description="Realtime AI sessions for research paper reading",
        version=__version__,
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(realtime_router)
    app.include_router(health_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "researchly.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
