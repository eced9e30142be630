from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI
from sqlalchemy import text

from records.config import settings
from records.db.session import async_session, create_schema, shutdown
from records.dependencies import DB
from records.logging import get_logger
from records.middleware import RequestIDMiddleware
from records.problems import register_exception_handlers
from records.profiles import database_info, feature_toggles
from records.routers import officer, product
from records.schemas.info import InfoResponse
from records.seed import seed_database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: optional schema creation and sample data. Shutdown: dispose the pool."""
    logger.info(
        "application_starting",
        environment=settings.app_env,
        repository_backend=settings.dao_backend,
    )
    if settings.db_create_schema:
        await create_schema()
    if settings.seed_sample_data:
        await seed_database(async_session, settings.dao_backend)
    yield
    await shutdown()


app = FastAPI(title=settings.app_name, description=settings.app_description, lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)
register_exception_handlers(app)
app.include_router(product.router)
app.include_router(officer.router)


@app.get("/health")
async def health(db: DB) -> dict[str, str]:
    """Health check endpoint. Verifies database connectivity.

    Returns 200 OK only if the database responds to a ping query.
    """
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}


@app.get("/info", response_model=InfoResponse)
async def info() -> InfoResponse:
    """Active profile, the database it implies and the features it switches on."""
    return InfoResponse.model_validate(
        {
            "name": settings.app_name,
            "environment": settings.app_env,
            "description": settings.app_description,
            "repository_backend": settings.dao_backend,
            "database": asdict(database_info(settings.app_env)),
            "features": [asdict(toggle) for toggle in feature_toggles(settings.app_env)],
        }
    )
