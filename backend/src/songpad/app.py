"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from songpad.api.routes import songs, webhooks
from songpad.core import timezone  # noqa: F401
from songpad.core.config import Settings, configure_logging
from songpad.core.database import setup_db_session
from songpad.services.synthesis.mureka_client import MurekaClient
from songpad.uow import create_uow_factory

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Startup: build the database session factory, the UoW factory and the
    synthesis client, and store them on app.state for the dependencies.
    Shutdown: dispose of the engine's connection pool.
    """
    settings: Settings = app.state.settings

    session_factory = setup_db_session(settings.database_url, settings.db_pool_size)

    app.state.session_factory = session_factory
    app.state.uow_factory = create_uow_factory(session_factory)
    app.state.synthesis_client = MurekaClient(
        api_key=settings.mureka_api_key,
        base_url=settings.mureka_api_base_url,
        timeout=settings.mureka_request_timeout_seconds,
    )

    logger.info(
        "application.startup",
        db_url=settings.database_url.split("@")[-1],
        mureka_base_url=settings.mureka_api_base_url,
        webhook_signature_check=bool(settings.mureka_webhook_secret),
    )

    yield

    logger.info("application.shutdown")
    engine = session_factory.kw.get("bind")
    if engine is not None:
        await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Optional settings override (tests); loaded from env otherwise

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or Settings()

    configure_logging(settings)

    app = FastAPI(
        title="SongPad Backend API",
        description="Song generation task tracking for the lyric editor",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(songs.router)  # Songs router has prefix="/api/songs" in definition
    app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])

    @app.get("/health")
    async def health_check(response: Response):
        """Health check endpoint with database connectivity test.

        Returns:
            200: {"status": "healthy"} if database connection succeeds
            503: {"status": "unhealthy", "error": {...}} if database connection fails
        """
        try:
            async with app.state.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()

            logger.debug("health_check.success")
            return {"status": "healthy"}

        except Exception as e:
            logger.error(
                "health_check.failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            return {
                "status": "unhealthy",
                "error": {
                    "type": type(e).__name__,
                    "message": str(e),
                },
            }

    return app


# Create app instance for uvicorn
app = create_app()
