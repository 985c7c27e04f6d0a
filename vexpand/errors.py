"""Error types raised when a substitution cannot be completed."""

from __future__ import annotations


class SubstError(Exception):
    """A variable was unset (or invalid) where a value was required."""

    prefix = "variable not set"

    def __init__(self, msg: str) -> None:
        self.msg = msg
        super().__init__(f"{self.prefix}: {msg}")


class EmptyError(Exception):
    """A substitution resolved to an empty string where that is forbidden."""

    prefix = "substitution empty"

    def __init__(self, msg: str) -> None:
        self.msg = msg
        super().__init__(f"{self.prefix}: {msg}")


def unset(msg: str) -> SubstError:
    """Build the error reported for an unset variable."""
    return SubstError(msg)


def empty(msg: str) -> EmptyError:
    """Build the error reported for an empty substitution."""
    return EmptyError(msg)