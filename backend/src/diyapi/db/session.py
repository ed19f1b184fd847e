from collections.abc import AsyncGenerator

from sqlalchemy import MetaData
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from diyapi import errs
from diyapi.config import settings

# Naming conventions for database constraints, so Alembic autogenerates
# the same constraint names on every run.
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    The naming_convention ensures all constraints have predictable names,
    which Alembic migrations and the repositories' constraint checks rely on.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_recycle=settings.db_pool_recycle,
    pool_pre_ping=settings.db_pool_pre_ping,
    echo=settings.db_echo,
    # asyncpg driver options, passed directly to asyncpg.connect()
    connect_args={"command_timeout": settings.db_statement_timeout},
)

# expire_on_commit=False keeps objects usable after commit without re-querying,
# accessing expired attributes would otherwise trigger sync I/O.
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides a database session per request.

    Commits on success, rolls back on exception. This is the single place where
    transaction boundaries are managed; services and repositories never call
    commit() or rollback() directly. A failed commit is raised as an
    ``errs.Error`` of kind DATABASE.
    """
    op = "db/session.get_db"
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            raise errs.E(op=op, kind=errs.Kind.DATABASE, err=exc) from exc


async def shutdown() -> None:
    """Close all pooled database connections. Called from the app lifespan."""
    await engine.dispose()
