"""Movie data-access layer.

Query functions only: no business rules, no HTTP concerns. Each function
takes a session and returns models or scalars. SQLAlchemy failures are
raised as ``errs.Error`` values: a unique constraint violation is EXIST,
anything else is DATABASE.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from diyapi import errs
from diyapi.logging import get_logger
from diyapi.models import Movie

MOVIE_EXISTS_CODE = "movie_exists"

logger = get_logger(__name__)


def _database_error(op: str, exc: SQLAlchemyError) -> errs.Error:
    if isinstance(exc, IntegrityError):
        # constraint details stay in the logs, clients get a plain message
        logger.warning("movie_integrity_error", op=op, error=str(exc.orig))
        return errs.E(
            op=op,
            kind=errs.Kind.EXIST,
            code=MOVIE_EXISTS_CODE,
            err="a movie with this title and release date already exists",
        )
    return errs.E(op=op, kind=errs.Kind.DATABASE, err=exc)


async def insert_movie(db: AsyncSession, movie: Movie) -> Movie:
    """Add a movie and flush so constraint violations surface here."""
    op = "repositories/movie.insert_movie"
    db.add(movie)
    try:
        async with db.begin_nested():
            await db.flush()
    except SQLAlchemyError as exc:
        raise _database_error(op, exc) from exc
    return movie


async def update_movie(db: AsyncSession, movie: Movie) -> Movie:
    """Flush pending changes to a loaded movie."""
    op = "repositories/movie.update_movie"
    try:
        async with db.begin_nested():
            await db.flush()
        await db.refresh(movie)
    except SQLAlchemyError as exc:
        raise _database_error(op, exc) from exc
    return movie


async def find_movie_by_external_id(db: AsyncSession, external_id: str) -> Movie | None:
    op = "repositories/movie.find_movie_by_external_id"
    try:
        result = await db.execute(select(Movie).where(Movie.external_id == external_id))
    except SQLAlchemyError as exc:
        raise _database_error(op, exc) from exc
    return result.scalar_one_or_none()


async def list_movies(db: AsyncSession, skip: int, limit: int) -> list[Movie]:
    """Return a page of movies ordered by id."""
    op = "repositories/movie.list_movies"
    stmt = select(Movie).order_by(Movie.id).offset(skip).limit(limit)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise _database_error(op, exc) from exc
    return list(result.scalars().all())


async def count_movies(db: AsyncSession) -> int:
    op = "repositories/movie.count_movies"
    try:
        result = await db.execute(select(func.count(Movie.id)))
    except SQLAlchemyError as exc:
        raise _database_error(op, exc) from exc
    return result.scalar_one()


async def delete_movie(db: AsyncSession, external_id: str) -> int:
    """Delete a movie by external id and return the number of rows removed."""
    op = "repositories/movie.delete_movie"
    try:
        result = await db.execute(delete(Movie).where(Movie.external_id == external_id))
    except SQLAlchemyError as exc:
        raise _database_error(op, exc) from exc
    return result.rowcount  # type: ignore[attr-defined, no-any-return]
