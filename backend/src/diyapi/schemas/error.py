"""Error response schemas.

All error responses with a body use the same envelope:
{"error": {"kind": "...", "code": "...", "param": "...", "message": "..."}}.
Fields without a value are left out of the serialized body.
"""

from pydantic import BaseModel


class ServiceError(BaseModel):
    """Inner error object. ``kind`` is the display string of the error's Kind."""

    kind: str | None = None
    code: str | None = None
    param: str | None = None
    message: str | None = None


class ErrResponse(BaseModel):
    """Top-level error envelope returned by all error responses with a body."""

    error: ServiceError
