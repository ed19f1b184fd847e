"""Turning errors into HTTP responses.

``http_error_response`` is the single place where an error leaves the
service. It decides the status code, headers and body for any exception
(or ``None``) and logs it. Authentication and authorization failures get
an empty body so nothing leaks to the caller; internal failures are logged
in full but redacted in the body.
"""

from http import HTTPStatus
from typing import Any

from starlette.responses import JSONResponse, Response
from structlog.stdlib import BoundLogger

from diyapi.errs.errors import Error, as_error
from diyapi.errs.kind import Kind, kind_label
from diyapi.errs.trace import TraceMode, captured_stack, op_stack
from diyapi.schemas.error import ErrResponse, ServiceError

DEFAULT_REALM = "default"
INTERNAL_MESSAGE = "internal server error - please contact support"
UNANTICIPATED_CODE = "Unanticipated"
UNANTICIPATED_MESSAGE = "Unexpected error - contact support"

_BAD_REQUEST_KINDS = frozenset(
    {
        Kind.INVALID,
        Kind.EXIST,
        Kind.NOT_EXIST,
        Kind.PRIVATE,
        Kind.BROKEN_LINK,
        Kind.VALIDATION,
        Kind.INVALID_REQUEST,
    }
)

# Sent whenever a body is written
_BODY_HEADERS = {"X-Content-Type-Options": "nosniff"}


def http_status_code(kind: int) -> int:
    """Map a kind to its HTTP status code.

    Unclassified (``Kind.OTHER``) and unknown kinds are server errors.
    """
    if kind in _BAD_REQUEST_KINDS:
        return HTTPStatus.BAD_REQUEST.value
    return HTTPStatus.INTERNAL_SERVER_ERROR.value


def http_error_response(
    err: BaseException | None,
    logger: BoundLogger,
    *,
    trace_mode: TraceMode = TraceMode.OP_STACK,
) -> Response:
    """Log ``err`` and build the response sent to the client.

    - ``None``: 500 with no body.
    - no ``Error`` anywhere in the chain: 500 with an "unanticipated" body.
    - ``Kind.UNAUTHENTICATED``: 401, no body, ``WWW-Authenticate`` header.
    - ``Kind.UNAUTHORIZED``: 403, no body.
    - an empty ``Error``: 500 with no body.
    - anything else: status from ``http_status_code`` and the JSON envelope.
    """
    if err is None:
        logger.error(
            "nil_error_passed",
            http_statuscode=HTTPStatus.INTERNAL_SERVER_ERROR.value,
            stack_info=True,
        )
        return Response(status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

    e = as_error(err)
    if e is None:
        return _unknown_error_response(err, logger)

    if e.kind == Kind.UNAUTHENTICATED:
        return _unauthenticated_response(e, logger, trace_mode)
    if e.kind == Kind.UNAUTHORIZED:
        return _unauthorized_response(e, logger, trace_mode)
    return _typical_error_response(e, logger, trace_mode)


def error_body(e: Error) -> dict[str, Any]:
    """Build the envelope for an Error, redacting server-side failures."""
    status = http_status_code(e.kind)
    if e.kind in (Kind.INTERNAL, Kind.DATABASE):
        detail = ServiceError(kind=kind_label(Kind.INTERNAL), message=INTERNAL_MESSAGE)
    elif status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        detail = ServiceError(
            kind=kind_label(e.kind),
            code=e.code or None,
            param=e.param or None,
            message=INTERNAL_MESSAGE,
        )
    else:
        detail = ServiceError(
            kind=kind_label(e.kind),
            code=e.code or None,
            param=e.param or None,
            message=str(e) or None,
        )
    return ErrResponse(error=detail).model_dump(exclude_none=True)


def _typical_error_response(e: Error, logger: BoundLogger, trace_mode: TraceMode) -> Response:
    status = http_status_code(e.kind)

    # Should never happen, but an Error with nothing set has nothing to say
    if e.is_zero():
        logger.error("empty_error_response", http_statuscode=status, stack_info=True)
        return Response(status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

    _log_error(
        logger,
        "error_response_sent",
        e,
        trace_mode,
        http_statuscode=status,
        Kind=kind_label(e.kind),
        Parameter=e.param,
        Code=e.code,
    )
    return JSONResponse(status_code=status, content=error_body(e), headers=_BODY_HEADERS)


def _unauthenticated_response(e: Error, logger: BoundLogger, trace_mode: TraceMode) -> Response:
    realm = e.realm or DEFAULT_REALM
    _log_error(
        logger,
        "unauthenticated_request",
        e,
        trace_mode,
        http_statuscode=HTTPStatus.UNAUTHORIZED.value,
        realm=realm,
    )
    return Response(
        status_code=HTTPStatus.UNAUTHORIZED,
        headers={"WWW-Authenticate": f'Bearer realm="{realm}"'},
    )


def _unauthorized_response(e: Error, logger: BoundLogger, trace_mode: TraceMode) -> Response:
    _log_error(
        logger,
        "unauthorized_request",
        e,
        trace_mode,
        http_statuscode=HTTPStatus.FORBIDDEN.value,
    )
    return Response(status_code=HTTPStatus.FORBIDDEN)


def _unknown_error_response(err: BaseException, logger: BoundLogger) -> Response:
    logger.error("unknown_error", error=str(err), exc_info=err)
    body = ErrResponse(
        error=ServiceError(
            kind=kind_label(Kind.UNANTICIPATED),
            code=UNANTICIPATED_CODE,
            message=UNANTICIPATED_MESSAGE,
        )
    ).model_dump(exclude_none=True)
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR, content=body, headers=_BODY_HEADERS
    )


def _log_error(
    logger: BoundLogger,
    event: str,
    e: Error,
    trace_mode: TraceMode,
    **fields: Any,
) -> None:
    """Log with captured frames or, when there are none, the op stack."""
    if trace_mode is TraceMode.CAPTURED_STACK:
        frames = captured_stack(e)
        if frames is not None:
            logger.error(event, error=str(e), stack=frames, **fields)
            return

    ops = op_stack(e)
    if ops:
        fields["stack"] = ops
    logger.error(event, error=str(e), **fields)
