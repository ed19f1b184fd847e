"""Logger settings endpoints.

The errs trace mode lives on ``app.state.trace_mode`` and is passed
explicitly to errs.http_error_response by the exception handlers in main.
"""

from fastapi import APIRouter, Request

from diyapi import errs
from diyapi.auth import AdminAPIKey
from diyapi.logging import log_level, logging_settings, set_log_level, trace_mode_for
from diyapi.schemas.logger import LoggerRequest, LoggerResponse

router = APIRouter(prefix="/logger", tags=["logger"])

_TRUE = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE = frozenset({"0", "f", "false", "n", "no", "off"})


def parse_bool(value: str) -> bool:
    op = "routers/logger.parse_bool"
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise errs.E(
        op=op,
        kind=errs.Kind.VALIDATION,
        param="log_error_stack",
        err="Invalid value sent for log_error_stack",
    )


def _logger_response(request: Request) -> LoggerResponse:
    return LoggerResponse(
        logger_minimum_level=logging_settings.log_level.upper(),
        global_log_level=log_level(),
        log_error_stack=request.app.state.trace_mode is errs.TraceMode.CAPTURED_STACK,
    )


@router.get("", response_model=LoggerResponse)
async def read_logger(request: Request) -> LoggerResponse:
    return _logger_response(request)


@router.put("", response_model=LoggerResponse)
async def update_logger(
    body: LoggerRequest, request: Request, _key: AdminAPIKey
) -> LoggerResponse:
    """Change the root log level and/or the trace mode used for error logs."""
    op = "routers/logger.update_logger"
    try:
        trace_mode = request.app.state.trace_mode
        if body.log_error_stack:
            trace_mode = trace_mode_for(parse_bool(body.log_error_stack))
        if body.global_log_level:
            set_log_level(body.global_log_level)
    except errs.Error as exc:
        raise errs.E(op=op, err=exc)

    request.app.state.trace_mode = trace_mode
    return _logger_response(request)
