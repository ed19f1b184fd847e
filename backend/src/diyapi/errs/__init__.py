"""Structured errors and their HTTP surfacing."""

from diyapi.errs.errors import E, Error, Message, as_error, kind_is, match, unwrap
from diyapi.errs.http_response import error_body, http_error_response, http_status_code
from diyapi.errs.kind import UNKNOWN_KIND, Kind, kind_label
from diyapi.errs.trace import TraceMode, captured_stack, op_stack, top_error
from diyapi.errs.validation import InputUnwanted, MissingField

__all__ = [
    "E",
    "Error",
    "InputUnwanted",
    "Kind",
    "Message",
    "MissingField",
    "TraceMode",
    "UNKNOWN_KIND",
    "as_error",
    "captured_stack",
    "error_body",
    "http_error_response",
    "http_status_code",
    "kind_is",
    "kind_label",
    "match",
    "op_stack",
    "top_error",
    "unwrap",
]
