"""Schemas for reading and changing logger settings at runtime."""

from pydantic import BaseModel


class LoggerRequest(BaseModel):
    """Both fields are optional; only the ones sent are changed.

    ``log_error_stack`` is a boolean string ("true", "false", "1", "0", ...).
    """

    global_log_level: str = ""
    log_error_stack: str = ""


class LoggerResponse(BaseModel):
    """``logger_minimum_level`` is LOG_LEVEL at startup, ``global_log_level`` the current level."""

    logger_minimum_level: str
    global_log_level: str
    log_error_stack: bool
