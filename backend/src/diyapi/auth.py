"""Bearer token authentication for write endpoints.

Requests authenticate with ``Authorization: Bearer <api key>``. Failures
are raised as ``errs.Error`` values of kind UNAUTHENTICATED carrying the
configured realm, which errs.http_error_response turns into a 401 with a
``WWW-Authenticate`` header. Authenticated callers without the rights for
an endpoint get UNAUTHORIZED (403).
"""

import secrets
from collections.abc import Iterable, Sequence
from typing import Annotated

from fastapi import Depends, Request

from diyapi import errs
from diyapi.dependencies import AppSettings

BEARER_TOKEN_TYPE = "Bearer"


def parse_bearer_token(realm: str, values: Sequence[str]) -> str:
    """Return the token from the Authorization header values of a request."""
    if not values:
        raise errs.E(
            kind=errs.Kind.UNAUTHENTICATED,
            realm=realm,
            err="unauthenticated: no Authorization header sent",
        )

    # only one token may be sent
    if len(values) > 1:
        raise errs.E(kind=errs.Kind.UNAUTHENTICATED, realm=realm, err="header value > 1")

    value = values[0]
    if not value.startswith(BEARER_TOKEN_TYPE + " "):
        raise errs.E(
            kind=errs.Kind.UNAUTHENTICATED,
            realm=realm,
            err="unauthenticated: Bearer authentication scheme not found",
        )

    token = value.removeprefix(BEARER_TOKEN_TYPE + " ").strip()
    if not token:
        raise errs.E(
            kind=errs.Kind.UNAUTHENTICATED,
            realm=realm,
            err="unauthenticated: Authorization header sent with Bearer scheme, but no token found",
        )

    return token


def _key_in(token: str, keys: Iterable[str]) -> bool:
    # compare against every key so timing does not reveal which one matched
    found = False
    for key in keys:
        found |= secrets.compare_digest(token.encode(), key.encode())
    return found


async def authenticate(request: Request, settings: AppSettings) -> str:
    """FastAPI dependency returning the caller's API key once it is verified."""
    op = "auth.authenticate"
    realm = settings.auth_realm
    try:
        token = parse_bearer_token(realm, request.headers.getlist("authorization"))
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)

    if not _key_in(token, [*settings.api_keys, *settings.admin_api_keys]):
        raise errs.E(
            op=op,
            kind=errs.Kind.UNAUTHENTICATED,
            realm=realm,
            err="Key does not match any keys for the App",
        )
    return token


async def require_admin(
    token: Annotated[str, Depends(authenticate)], settings: AppSettings
) -> str:
    """FastAPI dependency that only lets admin API keys through."""
    if not _key_in(token, settings.admin_api_keys):
        raise errs.E(
            op="auth.require_admin",
            kind=errs.Kind.UNAUTHORIZED,
            err="API key is not authorized for this operation",
        )
    return token


APIKey = Annotated[str, Depends(authenticate)]
AdminAPIKey = Annotated[str, Depends(require_admin)]
