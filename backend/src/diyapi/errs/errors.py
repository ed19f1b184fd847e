"""The Error type, its builder and comparison helpers.

An ``Error`` records where a failure happened (``op``), who hit it
(``user``), what class of failure it is (``kind``), which input was at
fault (``param``), a short machine-readable ``code`` for clients, the
authentication ``realm`` and the underlying cause (``err``). Callers wrap
errors on the way up by passing the inner one as ``err``::

    raise errs.E(op="services/movie.create_movie", err=exc) from exc

The builder merges classification from a wrapped ``Error`` into the new
outer one, so kind, code, param and realm each appear once in a chain.
"""

import traceback

from diyapi.errs.kind import Kind


class Message(Exception):
    """Trivial exception built from a plain string.

    Captures the stack at construction, since these are usually never
    raised and so carry no traceback of their own.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.stack = traceback.extract_stack()[:-1]
        super().__init__(text)

    def __str__(self) -> str:
        return self.text


class Error(Exception):
    """Structured application error. Any field may be left unset."""

    def __init__(
        self,
        *,
        op: str = "",
        user: str = "",
        kind: Kind = Kind.OTHER,
        param: str = "",
        code: str = "",
        realm: str = "",
        err: BaseException | None = None,
    ) -> None:
        super().__init__()
        self.op = op
        self.user = user
        self.kind = kind
        self.param = param
        self.code = code
        self.realm = realm
        self.err = err
        self.__cause__ = err

    def __str__(self) -> str:
        if self.err is None:
            return ""
        return str(self.err)

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{name}={value!r}"
            for name, value in (
                ("op", self.op),
                ("user", self.user),
                ("kind", self.kind),
                ("param", self.param),
                ("code", self.code),
                ("realm", self.realm),
                ("err", self.err),
            )
            if value
        )
        return f"Error({fields})"

    def unwrap(self) -> BaseException | None:
        return self.err

    def is_zero(self) -> bool:
        return (
            not self.op
            and not self.user
            and self.kind == Kind.OTHER
            and not self.param
            and not self.code
            and not self.realm
            and self.err is None
        )


def E(
    *,
    op: str = "",
    user: str = "",
    kind: Kind = Kind.OTHER,
    param: str = "",
    code: str = "",
    realm: str = "",
    err: BaseException | str | None = None,
) -> Error:
    """Build an Error from keyword arguments.

    At least one field must be set, otherwise ``TypeError`` is raised:
    an error with no information is a programming mistake. ``kind=Kind.OTHER``
    counts as unset.

    ``err`` may be a message string (wrapped in ``Message``), any exception,
    or another ``Error``. A wrapped ``Error`` is copied, then each of kind,
    code, param and realm is pulled up into the new error when it has none
    of its own, and cleared on the copy so it is only reported once.
    """
    if err is None and not (op or user or kind != Kind.OTHER or param or code or realm):
        raise TypeError("call to errs.E with no arguments")

    cause: BaseException | None
    if err is None or isinstance(err, BaseException):
        cause = err
    elif isinstance(err, str):
        cause = Message(err)
    else:
        raise TypeError(f"errs.E: unknown type {type(err).__name__} for err, value {err!r}")

    if isinstance(cause, Error):
        cause = _copy(cause)

    e = Error(op=op, user=user, kind=kind, param=param, code=code, realm=realm, err=cause)
    if isinstance(cause, Error):
        _merge(e, cause)
    return e


def _copy(e: Error) -> Error:
    dup = Error(
        op=e.op, user=e.user, kind=e.kind, param=e.param, code=e.code, realm=e.realm, err=e.err
    )
    dup.__traceback__ = e.__traceback__
    return dup


def _merge(outer: Error, inner: Error) -> None:
    if inner.kind == outer.kind or outer.kind == Kind.OTHER:
        outer.kind = inner.kind
        inner.kind = Kind.OTHER

    for field in ("code", "param", "realm"):
        outer_value = getattr(outer, field)
        inner_value = getattr(inner, field)
        if inner_value == outer_value or not outer_value:
            setattr(outer, field, inner_value)
            setattr(inner, field, "")


def unwrap(err: BaseException) -> BaseException | None:
    """Return the cause wrapped by ``err``: ``Error.err``, else its explicit ``__cause__``."""
    if isinstance(err, Error):
        return err.err
    return err.__cause__


def as_error(err: BaseException | None) -> Error | None:
    """Return the first Error found while unwrapping ``err``, if any."""
    current = err
    while current is not None:
        if isinstance(current, Error):
            return current
        current = unwrap(current)
    return None


def match(reference: BaseException | None, candidate: BaseException | None) -> bool:
    """Report whether ``candidate`` has every field that is set on ``reference``.

    Intended for tests. Both arguments must be ``Error`` instances. Fields
    unset on the reference are ignored. If the reference's cause is an
    ``Error`` the comparison recurses, otherwise the causes' messages are
    compared.

    >>> got = E(user="joe@blow.com", kind=Kind.IO, code="c1", err="network unreachable")
    >>> match(E(user="joe@blow.com", kind=Kind.IO, err="network unreachable"), got)
    True
    >>> match(E(kind=Kind.DATABASE), got)
    False
    """
    if not isinstance(reference, Error) or not isinstance(candidate, Error):
        return False
    for field in ("op", "user", "param", "code", "realm"):
        value = getattr(reference, field)
        if value and getattr(candidate, field) != value:
            return False
    if reference.kind != Kind.OTHER and candidate.kind != reference.kind:
        return False
    if reference.err is not None:
        if isinstance(reference.err, Error):
            return match(reference.err, candidate.err)
        if candidate.err is None or str(candidate.err) != str(reference.err):
            return False
    return True


def kind_is(kind: Kind, err: BaseException | None) -> bool:
    """Report whether ``err`` is ultimately an Error of the given kind.

    The outermost classified Error decides; unclassified layers defer to
    their cause.
    """
    e = as_error(err)
    if e is None:
        return False
    if e.kind != Kind.OTHER:
        return e.kind == kind
    if e.err is not None:
        return kind_is(kind, e.err)
    return False
