"""Error classification.

Values are shared between clients and servers and may be persisted, so the
list is append-only: never reorder or remove a member, add new ones at the end.
"""

from enum import IntEnum

UNKNOWN_KIND = "unknown error kind"


class Kind(IntEnum):
    """Class of an error. ``OTHER`` is the zero value and means unclassified."""

    OTHER = 0
    INVALID = 1
    IO = 2
    EXIST = 3
    NOT_EXIST = 4
    PRIVATE = 5
    INTERNAL = 6
    BROKEN_LINK = 7
    DATABASE = 8
    VALIDATION = 9
    UNANTICIPATED = 10
    INVALID_REQUEST = 11
    # 401 with an empty body and a WWW-Authenticate header
    UNAUTHENTICATED = 12
    # 403 with an empty body
    UNAUTHORIZED = 13

    def __str__(self) -> str:
        return kind_label(self)


_LABELS: dict[int, str] = {
    Kind.OTHER: "other error",
    Kind.INVALID: "invalid operation",
    Kind.IO: "I/O error",
    Kind.EXIST: "item already exists",
    Kind.NOT_EXIST: "item does not exist",
    Kind.PRIVATE: "information withheld",
    Kind.INTERNAL: "internal error",
    Kind.BROKEN_LINK: "link target does not exist",
    Kind.DATABASE: "database error",
    Kind.VALIDATION: "input validation error",
    Kind.UNANTICIPATED: "unanticipated error",
    Kind.INVALID_REQUEST: "invalid request error",
    Kind.UNAUTHENTICATED: "unauthenticated request",
    Kind.UNAUTHORIZED: "unauthorized request",
}


def kind_label(value: int) -> str:
    """Return the display string for a kind.

    Accepts plain ints as well so values read from elsewhere (older
    releases, stored records) never raise; anything out of range maps to
    ``UNKNOWN_KIND``.
    """
    return _LABELS.get(int(value), UNKNOWN_KIND)
