"""Movie endpoints."""

from fastapi import APIRouter, Query

from diyapi.auth import APIKey
from diyapi.dependencies import DB
from diyapi.schemas.movie import (
    DeleteResponse,
    MovieListResponse,
    MovieRequest,
    MovieResponse,
)
from diyapi.services import movie as movie_service

router = APIRouter(prefix="/movies", tags=["movies"])


@router.post("", response_model=MovieResponse, status_code=201)
async def create_movie(body: MovieRequest, db: DB, _key: APIKey) -> MovieResponse:
    movie = await movie_service.create_movie(db, body)
    return MovieResponse.model_validate(movie)


@router.get("", response_model=MovieListResponse, status_code=200)
async def list_movies(
    db: DB,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> MovieListResponse:
    """List movies, one page at a time."""
    result = await movie_service.find_all_movies(db, skip, limit)
    return MovieListResponse.model_validate(result)


@router.get("/{external_id}", response_model=MovieResponse)
async def get_movie(external_id: str, db: DB) -> MovieResponse:
    movie = await movie_service.find_movie(db, external_id)
    return MovieResponse.model_validate(movie)


@router.put("/{external_id}", response_model=MovieResponse)
async def update_movie(
    external_id: str, body: MovieRequest, db: DB, _key: APIKey
) -> MovieResponse:
    movie = await movie_service.update_movie(db, external_id, body)
    return MovieResponse.model_validate(movie)


@router.delete("/{external_id}", response_model=DeleteResponse)
async def delete_movie(external_id: str, db: DB, _key: APIKey) -> DeleteResponse:
    await movie_service.delete_movie(db, external_id)
    return DeleteResponse(external_id=external_id, deleted=True)
