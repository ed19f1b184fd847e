"""Generic pagination types shared by all list endpoints.

PaginatedResponse[T]: Pydantic model for HTTP responses (serializable).
Paginated[T]: plain dataclass for service-layer returns (not serializable).
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Pydantic model for paginated HTTP responses.

    ``from_attributes`` is set so ``model_validate`` can read a ``Paginated``
    dataclass directly::

        result = await find_all_movies(db, skip, limit)
        return MovieListResponse.model_validate(result)

    Use this in routers only; services and repositories stay free of Pydantic.
    """

    model_config = {"from_attributes": True}

    items: list[T]
    total: int
    skip: int
    limit: int


@dataclass
class Paginated(Generic[T]):
    """Page of results returned by the service layer."""

    items: list[T]
    total: int
    skip: int
    limit: int
