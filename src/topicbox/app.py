"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from topicbox.api.auth import BearerTokenAuthorizer
from topicbox.api.errors import install_exception_handlers
from topicbox.api.routes import entries, platform_username, topics
from topicbox.core import timezone  # noqa: F401  (sets TZ=UTC on import)
from topicbox.core.config import Settings, configure_logging
from topicbox.core.database import setup_db_session
from topicbox.services.platform_username import build_platform_checker
from topicbox.services.topic_locks import TopicLocks
from topicbox.uow import create_uow_factory

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Startup wires the collaborators routes pull from app.state: the session
    and UoW factories, the platform username checker, the admin authorizer
    and the per-topic submission locks. Shutdown disposes the engine pool.
    """
    settings = Settings()  # type: ignore[call-arg]
    configure_logging(settings)

    session_factory = setup_db_session(settings.database_url, settings.db_pool_size)

    app.state.session_factory = session_factory
    app.state.uow_factory = create_uow_factory(session_factory)
    app.state.platform_checker = build_platform_checker(
        settings.platform_verify_url, settings.platform_verify_timeout_seconds
    )
    app.state.authorizer = BearerTokenAuthorizer(settings.admin_api_token)
    app.state.topic_locks = TopicLocks()

    logger.info(
        "application.startup",
        db_url=settings.database_url.split("@")[-1],
        uniqueness_scope=settings.uniqueness_scope.value,
        platform_checker=type(app.state.platform_checker).__name__,
    )

    yield

    logger.info("application.shutdown")
    engine = session_factory.kw.get("bind")
    if engine is not None:
        await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = Settings()  # type: ignore[call-arg]

    app = FastAPI(
        title="Topicbox API",
        description="Topic entries with integrity checks, auditing and CSV export",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_exception_handlers(app)

    app.include_router(entries.router)
    app.include_router(topics.router)
    app.include_router(platform_username.router)

    @app.get("/health")
    async def health_check(response: Response):
        """Health check endpoint with database connectivity test.

        Returns:
            200: {"status": "healthy"} if database connection succeeds
            503: {"status": "unhealthy"} if database connection fails (details are logged only)
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
            return {"status": "unhealthy"}

    return app


# Create app instance for uvicorn
app = create_app()
