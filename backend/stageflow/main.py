"""
Application factory.

The lifespan hook configures logging, prepares the database and composes the
scheduling services once; routes receive them through dependency injection.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stageflow.api.main import api_router
from stageflow.application.composition import build_scheduling_services
from stageflow.core.config import SchedulerConfig, Settings, load_settings
from stageflow.core.db import build_engine, init_db
from stageflow.core.observability import get_logger, setup_structured_logging
from stageflow.domain.scheduling.repositories.scheduling_repository import (
    SchedulingRepository,
)
from stageflow.infrastructure.database.repositories import SQLModelSchedulingRepository

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    repository: SchedulingRepository | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use, read from the environment when omitted
        repository: Repository to schedule against; a SQLModel repository on
            ``DATABASE_URL`` when omitted
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_structured_logging(settings)
        repo = repository
        engine = None
        if repo is None:
            engine = build_engine(settings)
            await init_db(engine)
            repo = SQLModelSchedulingRepository(engine)

        app.state.scheduling_services = await build_scheduling_services(
            repo, SchedulerConfig.from_settings(settings)
        )
        logger.info("Application started", environment=settings.ENVIRONMENT)
        yield
        if engine is not None:
            await engine.dispose()
        logger.info("Application stopped")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app
