"""Tests for turning errors into HTTP responses."""

import json
from http import HTTPStatus
from typing import Any

import pytest
import structlog
from starlette.responses import Response
from structlog.testing import capture_logs

from diyapi import errs
from diyapi.errs import E, Kind
from diyapi.errs.http_response import INTERNAL_MESSAGE


def _respond(
    err: BaseException | None, trace_mode: errs.TraceMode = errs.TraceMode.OP_STACK
) -> tuple[Response, list[dict[str, Any]]]:
    with capture_logs() as logs:
        response = errs.http_error_response(
            err, structlog.get_logger("test"), trace_mode=trace_mode
        )
    return response, logs


def layer1() -> errs.Error:
    return E(
        op="layer1",
        kind=Kind.VALIDATION,
        param="testParam",
        code="0212",
        err=ValueError("Actual error message"),
    )


def layer4() -> errs.Error:
    e = layer1()
    for op in ("layer2", "layer3", "layer4"):
        e = E(op=op, err=e)
    return e


# ---------------------------------------------------------------------------
# 1. Kind -> status code
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "kind, want",
    [
        (Kind.EXIST, 400),
        (Kind.NOT_EXIST, 400),
        (Kind.INVALID, 400),
        (Kind.PRIVATE, 400),
        (Kind.BROKEN_LINK, 400),
        (Kind.VALIDATION, 400),
        (Kind.INVALID_REQUEST, 400),
        (Kind.OTHER, 500),
        (Kind.IO, 500),
        (Kind.INTERNAL, 500),
        (Kind.DATABASE, 500),
        (Kind.UNANTICIPATED, 500),
        (99, 500),
    ],
)
def test_http_status_code(kind: int, want: int) -> None:
    assert errs.http_status_code(kind) == want


# ---------------------------------------------------------------------------
# 2. Status codes and bodies per branch
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "err, want",
    [
        (None, 500),
        (errs.Error(), 500),
        (E(kind=Kind.UNAUTHENTICATED, err="some error from Google"), 401),
        (E(kind=Kind.UNAUTHORIZED, err="some authorization error"), 403),
        (ValueError("some error"), 500),
    ],
    ids=["nil_error", "empty_error", "unauthenticated", "unauthorized", "not_via_e"],
)
def test_status_code(err: BaseException | None, want: int) -> None:
    response, _ = _respond(err)
    assert response.status_code == want


@pytest.mark.parametrize(
    "err, want",
    [
        (errs.Error(), b""),
        (E(kind=Kind.UNAUTHENTICATED, err="some error from Google"), b""),
        (E(kind=Kind.UNAUTHORIZED, err="some authorization error"), b""),
        (
            E(
                kind=Kind.EXIST,
                param="some_param",
                code="some_code",
                err=ValueError("some error"),
            ),
            b'{"error":{"kind":"item already exists","code":"some_code",'
            b'"param":"some_param","message":"some error"}}',
        ),
        (
            ValueError("some error"),
            b'{"error":{"kind":"unanticipated error","code":"Unanticipated",'
            b'"message":"Unexpected error - contact support"}}',
        ),
        (None, b""),
    ],
    ids=["empty_error", "unauthenticated", "unauthorized", "normal", "not_via_e", "nil_error"],
)
def test_body(err: BaseException | None, want: bytes) -> None:
    response, _ = _respond(err)
    assert response.body == want


def test_nil_error_logged() -> None:
    response, logs = _respond(None)
    assert response.status_code == 500
    assert "content-type" not in response.headers
    assert logs[0]["event"] == "nil_error_passed"
    assert logs[0]["log_level"] == "error"


def test_empty_error_logged_distinctly() -> None:
    _, logs = _respond(errs.Error())
    assert [log["event"] for log in logs] == ["empty_error_response"]


# ---------------------------------------------------------------------------
# 3. Authentication and authorization failures
# ---------------------------------------------------------------------------
def test_unauthenticated_sets_www_authenticate() -> None:
    response, logs = _respond(E(kind=Kind.UNAUTHENTICATED, realm="default"))
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == 'Bearer realm="default"'
    assert response.body == b""
    assert "content-type" not in response.headers
    assert logs[0]["realm"] == "default"
    assert logs[0]["http_statuscode"] == 401


def test_unauthenticated_realm_defaults() -> None:
    original = E(kind=Kind.UNAUTHENTICATED, err="no token")
    response, _ = _respond(original)
    assert response.headers["WWW-Authenticate"] == 'Bearer realm="default"'
    assert original.realm == ""


def test_unauthenticated_realm_from_inner_error() -> None:
    inner = E(kind=Kind.UNAUTHENTICATED, realm="diyapi", err="no token")
    response, _ = _respond(E(op="auth.authenticate", err=inner))
    assert response.headers["WWW-Authenticate"] == 'Bearer realm="diyapi"'


def test_unauthorized_empty_body() -> None:
    response, logs = _respond(E(kind=Kind.UNAUTHORIZED, err="no access"))
    assert response.status_code == 403
    assert response.body == b""
    assert "www-authenticate" not in response.headers
    assert logs[0]["event"] == "unauthorized_request"


# ---------------------------------------------------------------------------
# 4. Typical errors
# ---------------------------------------------------------------------------
def test_typical_error_headers() -> None:
    err = E(kind=Kind.EXIST, code="E1", param="name", err=ValueError("already there"))
    response, _ = _respond(err)
    assert response.status_code == 400
    assert response.headers["content-type"] == "application/json"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert json.loads(response.body) == {
        "error": {
            "kind": "item already exists",
            "code": "E1",
            "param": "name",
            "message": "already there",
        }
    }


def test_empty_fields_omitted() -> None:
    response, _ = _respond(E(kind=Kind.NOT_EXIST, err="gone"))
    assert json.loads(response.body) == {
        "error": {"kind": "item does not exist", "message": "gone"}
    }


@pytest.mark.parametrize("kind", [Kind.DATABASE, Kind.INTERNAL])
def test_internal_errors_redacted(kind: Kind) -> None:
    response, logs = _respond(E(kind=kind, code="db1", err=ValueError("connection refused")))
    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    body = json.loads(response.body)
    assert body == {"error": {"kind": "internal error", "message": INTERNAL_MESSAGE}}
    assert b"connection refused" not in response.body
    # the real message is still logged
    assert logs[0]["error"] == "connection refused"
    assert logs[0]["Kind"] == str(kind)


@pytest.mark.parametrize("kind", [Kind.OTHER, Kind.IO, Kind.UNANTICIPATED])
def test_other_server_errors_redacted(kind: Kind) -> None:
    response, _ = _respond(E(kind=kind, code="disk_full", param="p", err="disk on fire"))
    assert response.status_code == 500
    assert json.loads(response.body) == {
        "error": {
            "kind": str(kind),
            "code": "disk_full",
            "param": "p",
            "message": INTERNAL_MESSAGE,
        }
    }


def test_error_found_behind_foreign_wrapper() -> None:
    wrapper = RuntimeError("wrapped")
    wrapper.__cause__ = E(kind=Kind.VALIDATION, param="title", err="title is required")
    response, _ = _respond(wrapper)
    assert response.status_code == 400


# ---------------------------------------------------------------------------
# 5. Logging and trace modes
# ---------------------------------------------------------------------------
def test_op_stack_logged() -> None:
    response, logs = _respond(layer4())
    assert response.body == (
        b'{"error":{"kind":"input validation error","code":"0212",'
        b'"param":"testParam","message":"Actual error message"}}'
    )
    assert logs == [
        {
            "event": "error_response_sent",
            "log_level": "error",
            "error": "Actual error message",
            "http_statuscode": 400,
            "Kind": "input validation error",
            "Parameter": "testParam",
            "Code": "0212",
            "stack": ["layer1", "layer2", "layer3", "layer4"],
        }
    ]


def test_no_op_stack_field_without_ops() -> None:
    _, logs = _respond(E(kind=Kind.VALIDATION, err="bad"))
    assert "stack" not in logs[0]


def test_captured_stack_logged() -> None:
    _, logs = _respond(E(op="outer", kind=Kind.IO, err="boom"), errs.TraceMode.CAPTURED_STACK)
    stack = logs[0]["stack"]
    assert isinstance(stack, list)
    assert any("test_captured_stack_logged" in frame for frame in stack)


def test_captured_stack_falls_back_to_op_stack() -> None:
    e = E(op="outer", err=E(op="inner", kind=Kind.IO, err=ValueError("never raised")))
    _, logs = _respond(e, errs.TraceMode.CAPTURED_STACK)
    assert logs[0]["stack"] == ["inner", "outer"]


def test_unknown_error_logged() -> None:
    err = ValueError("some error")
    _, logs = _respond(err)
    assert logs[0]["event"] == "unknown_error"
    assert logs[0]["error"] == "some error"
    assert logs[0]["exc_info"] is err
