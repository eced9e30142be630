from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from records.config import Settings, settings

# Naming conventions for database constraints.
# Without these, Alembic can't autogenerate consistent constraint names across migrations.
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Both repository backends work against the tables registered on
    Base.metadata: the ORM backend through the mapped classes, the SQL
    backend through hand-written statements using the same table names.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def engine_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for create_async_engine.

    Pool sizing and the asyncpg command timeout only make sense for a server
    database; SQLite gets SQLAlchemy's defaults.
    """
    if config.is_sqlite:
        return {"echo": config.db_echo}
    return {
        "pool_size": config.db_pool_size,
        "max_overflow": config.db_max_overflow,
        "pool_timeout": config.db_pool_timeout,
        "pool_recycle": config.db_pool_recycle,
        "pool_pre_ping": config.db_pool_pre_ping,
        "echo": config.db_echo,
        # passed directly to asyncpg.connect()
        "connect_args": {"command_timeout": config.db_statement_timeout},
    }


engine = create_async_engine(settings.database_url, **engine_options(settings))

# expire_on_commit=False keeps objects usable after commit without re-querying,
# accessing expired attributes would otherwise trigger sync I/O.
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides a database session per request.

    The request is the transaction boundary: commits on success, rolls back on
    exception. Services and repositories never call commit() or rollback()
    themselves, so a multi-step operation such as a stock reservation
    (lock row, check, write) runs inside one transaction.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_schema() -> None:
    """Create all tables that don't exist yet. Local runs only; Alembic owns production."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def shutdown() -> None:
    """Close all pooled database connections."""
    await engine.dispose()
