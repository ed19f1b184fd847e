"""Structured logging configuration.

JSON logs with automatic context binding. Uses structlog with stdlib integration.
Request-scoped context (like request_id) is automatically included in all logs
via structlog.contextvars.
"""

import logging
import logging.config
import sys
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger

from diyapi import errs

# Google Cloud Logging reads "severity" rather than "level"
_GCP_SEVERITY = {
    "critical": "EMERGENCY",
    "exception": "ERROR",
    "error": "ERROR",
    "warning": "WARNING",
    "info": "INFO",
    "debug": "DEBUG",
}


def _add_timestamp(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO 8601 UTC timestamp with timezone offset."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def add_gcp_severity(
    _logger: object,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add a Google Cloud "severity" matching the log method."""
    event_dict["severity"] = _GCP_SEVERITY.get(method_name, "DEFAULT")
    return event_dict


class LoggingSettings(BaseSettings):
    """Logging settings from environment variables."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Log captured stack frames instead of the errs op stack
    log_error_stack: bool = Field(default=False, alias="LOG_ERROR_STACK")
    log_gcp_severity: bool = Field(default=False, alias="LOG_GCP_SEVERITY")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def trace_mode(self) -> errs.TraceMode:
        return trace_mode_for(self.log_error_stack)


def trace_mode_for(log_error_stack: bool) -> errs.TraceMode:
    if log_error_stack:
        return errs.TraceMode.CAPTURED_STACK
    return errs.TraceMode.OP_STACK


def configure_logging(settings: LoggingSettings) -> None:
    """Configure structlog with JSON output to stdout.

    Call once at application startup. After this, all loggers created via
    get_logger() will output JSON with automatic context binding.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.log_gcp_severity:
        processors.append(add_gcp_severity)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.processors.JSONRenderer(),
                    "foreign_pre_chain": processors,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": sys.stdout,
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": settings.log_level,
                    "propagate": True,
                },
            },
        }
    )


def log_level() -> str:
    """Return the root logger's level name, e.g. "INFO"."""
    return logging.getLevelName(logging.getLogger().level)


def set_log_level(name: str) -> None:
    """Set the root logger's level.

    Raises an ``errs.Error`` of kind VALIDATION for an unknown level name.
    """
    op = "logging.set_log_level"
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        raise errs.E(
            op=op,
            kind=errs.Kind.VALIDATION,
            param="global_log_level",
            err=f"unknown log level {name!r}",
        )
    logging.getLogger().setLevel(level)


# Configure once at module import
logging_settings = LoggingSettings()
configure_logging(logging_settings)


def get_logger(name: str) -> BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name, typically __name__

    Returns:
        Logger that outputs JSON with automatic context binding.

    Example:
        logger = get_logger(__name__)
        logger.info("movie_created", external_id="abc123")
        # Output: {"event": "movie_created", "external_id": "abc123", "level": "info", ...}
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
