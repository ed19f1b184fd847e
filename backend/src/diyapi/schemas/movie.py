"""Movie request and response schemas.

Request fields default to empty so that missing values reach the service
layer, which reports them as errs VALIDATION errors naming the field.
"""

from datetime import date, datetime

from pydantic import BaseModel

from diyapi.schemas.pagination import PaginatedResponse


class MovieRequest(BaseModel):
    """Body for creating or replacing a movie. ``release_date`` is ISO 8601."""

    title: str = ""
    rated: str = ""
    release_date: str = ""
    run_time: int = 0
    director: str = ""
    writer: str = ""


class MovieResponse(BaseModel):
    model_config = {"from_attributes": True}

    external_id: str
    title: str
    rated: str
    released: date
    run_time: int
    director: str
    writer: str
    created_at: datetime
    updated_at: datetime


class DeleteResponse(BaseModel):
    external_id: str
    deleted: bool


MovieListResponse = PaginatedResponse[MovieResponse]
