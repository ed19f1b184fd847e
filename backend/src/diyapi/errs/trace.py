"""Presenting the call path that led to an error.

Two strategies exist. In op-stack mode the ``op`` labels recorded at each
wrap are collected into a stack. In captured-stack mode the innermost cause
is expected to carry real frames: a raised exception's traceback, or the
stack a ``Message`` captured when it was built.
"""

import traceback
from enum import StrEnum

from diyapi.errs.errors import Error, Message, unwrap


class TraceMode(StrEnum):
    OP_STACK = "op_stack"
    CAPTURED_STACK = "captured_stack"


def top_error(err: BaseException) -> BaseException:
    """Unwrap ``err`` until nothing is left and return the innermost cause."""
    current = err
    while (inner := unwrap(current)) is not None:
        current = inner
    return current


def op_stack(err: BaseException | None) -> list[str]:
    """Return the ops recorded along the chain, root cause first.

    The chain is walked from the outermost error inwards and the result
    reversed, so it reads like a call stack.
    """
    ops: list[str] = []
    current = err
    while current is not None:
        if isinstance(current, Error) and current.op:
            ops.append(current.op)
        current = unwrap(current)
    ops.reverse()
    return ops


def captured_stack(err: BaseException) -> list[str] | None:
    """Return the formatted frames carried by the innermost cause, if it has any."""
    top = top_error(err)
    if top.__traceback__ is not None:
        return traceback.format_tb(top.__traceback__)
    if isinstance(top, Message) and top.stack:
        return top.stack.format()
    return None
