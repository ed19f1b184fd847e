"""Movie business logic.

Validates requests, generates external ids and orchestrates repository
calls. Every failure leaves here as an ``errs.Error`` tagged with the
operation that produced it.
"""

import secrets
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from diyapi import errs
from diyapi.models import Movie
from diyapi.repositories import movie as movie_repo
from diyapi.schemas.movie import MovieRequest
from diyapi.schemas.pagination import Paginated

INVALID_DATE_FORMAT_CODE = "invalid_date_format"

_REQUIRED_FIELDS = ("title", "rated", "director", "writer")


def new_external_id() -> str:
    return secrets.token_hex(16)


def validate_movie_request(r: MovieRequest) -> date:
    """Check a request and return its parsed release date."""
    op = "services/movie.validate_movie_request"

    for field in _REQUIRED_FIELDS:
        if not getattr(r, field).strip():
            raise errs.E(
                op=op, kind=errs.Kind.VALIDATION, param=field, err=errs.MissingField(field)
            )

    if not r.release_date:
        raise errs.E(
            op=op,
            kind=errs.Kind.VALIDATION,
            param="release_date",
            err=errs.MissingField("release_date"),
        )
    try:
        released = datetime.fromisoformat(r.release_date).date()
    except ValueError as exc:
        raise errs.E(
            op=op,
            kind=errs.Kind.VALIDATION,
            code=INVALID_DATE_FORMAT_CODE,
            param="release_date",
            err=exc,
        ) from exc

    if r.run_time <= 0:
        raise errs.E(
            op=op,
            kind=errs.Kind.VALIDATION,
            param="run_time",
            err="run_time must be greater than zero",
        )

    return released


async def create_movie(db: AsyncSession, r: MovieRequest) -> Movie:
    op = "services/movie.create_movie"
    try:
        released = validate_movie_request(r)
        movie = Movie(
            external_id=new_external_id(),
            title=r.title,
            rated=r.rated,
            released=released,
            run_time=r.run_time,
            director=r.director,
            writer=r.writer,
        )
        return await movie_repo.insert_movie(db, movie)
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)


async def find_movie(db: AsyncSession, external_id: str) -> Movie:
    op = "services/movie.find_movie"
    try:
        movie = await movie_repo.find_movie_by_external_id(db, external_id)
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)
    if movie is None:
        raise errs.E(
            op=op,
            kind=errs.Kind.NOT_EXIST,
            param="external_id",
            err=f"movie {external_id} does not exist",
        )
    return movie


async def find_all_movies(db: AsyncSession, skip: int, limit: int) -> Paginated[Movie]:
    op = "services/movie.find_all_movies"
    try:
        items = await movie_repo.list_movies(db, skip, limit)
        total = await movie_repo.count_movies(db)
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)
    return Paginated(items=items, total=total, skip=skip, limit=limit)


async def update_movie(db: AsyncSession, external_id: str, r: MovieRequest) -> Movie:
    op = "services/movie.update_movie"
    try:
        released = validate_movie_request(r)
        movie = await find_movie(db, external_id)
        movie.title = r.title
        movie.rated = r.rated
        movie.released = released
        movie.run_time = r.run_time
        movie.director = r.director
        movie.writer = r.writer
        return await movie_repo.update_movie(db, movie)
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)


async def delete_movie(db: AsyncSession, external_id: str) -> None:
    op = "services/movie.delete_movie"
    try:
        deleted = await movie_repo.delete_movie(db, external_id)
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)
    if deleted == 0:
        raise errs.E(
            op=op,
            kind=errs.Kind.NOT_EXIST,
            param="external_id",
            err=f"movie {external_id} does not exist",
        )
