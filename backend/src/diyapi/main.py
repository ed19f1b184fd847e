from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from diyapi import errs
from diyapi.db.session import shutdown
from diyapi.dependencies import DB
from diyapi.logging import get_logger, logging_settings
from diyapi.middleware import RequestIDMiddleware
from diyapi.routers import logger as logger_router
from diyapi.routers import movie as movie_router

logger = get_logger(__name__)

INVALID_REQUEST_CODE = "invalid_request"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup runs before the yield, shutdown after it.

    Shutdown closes pooled database connections gracefully.
    """
    yield
    await shutdown()


app = FastAPI(lifespan=lifespan)
app.state.trace_mode = logging_settings.trace_mode
app.add_middleware(RequestIDMiddleware)
app.include_router(movie_router.router)
app.include_router(logger_router.router)


def _error_response(request: Request, exc: BaseException) -> Response:
    return errs.http_error_response(exc, logger, trace_mode=request.app.state.trace_mode)


@app.exception_handler(errs.Error)
async def errs_error_handler(request: Request, exc: errs.Error) -> Response:
    """Send an errs.Error to the client: status, headers and body follow its Kind."""
    return _error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    """Report undecodable or mistyped request input as a 400 invalid request."""
    first = exc.errors()[0] if exc.errors() else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    err = errs.E(
        op="main.request_validation_handler",
        kind=errs.Kind.INVALID_REQUEST,
        code=INVALID_REQUEST_CODE,
        param=".".join(location),
        err=first.get("msg", "invalid request"),
    )
    return _error_response(request, err)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Log unhandled exceptions and return the unanticipated error body.

    No stack traces or messages are leaked to the client.
    """
    return _error_response(request, exc)


@app.get("/health")
async def health(db: DB) -> dict[str, str]:
    """Health check endpoint. Verifies database connectivity.

    Returns 200 OK only if the database responds to a ping query; otherwise
    a DATABASE error whose message is redacted in the response.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise errs.E(op="main.health", kind=errs.Kind.DATABASE, err=exc) from exc
    return {"status": "ok"}
