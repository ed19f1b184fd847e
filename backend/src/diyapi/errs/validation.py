"""Errors for input fields that are missing a value or should not have one."""


class MissingField(Exception):
    """A field that should have a value does not."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} is required")


class InputUnwanted(Exception):
    """A field has a value but should be left empty."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} has a value, but should be empty")
