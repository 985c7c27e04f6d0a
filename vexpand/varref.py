"""Variable references and their literal rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class VarForm(enum.Enum):
    """How a variable reference is written: ``$VAR`` or ``${VAR}``."""

    BARE = enum.auto()
    BRACED = enum.auto()


@dataclass(frozen=True)
class VarRef:
    """A variable name together with the form it was written in."""

    name: str
    form: VarForm = VarForm.BARE

    def lit(self) -> str:
        """Return the reference in its literal source form."""
        if self.form is VarForm.BRACED:
            return "${" + self.name + "}"
        return "$" + self.name


def bare_ref(name: str) -> VarRef:
    """Reference rendered as ``$NAME``."""
    return VarRef(name, VarForm.BARE)


def braced_ref(name: str) -> VarRef:
    """Reference rendered as ``${NAME}``."""
    return VarRef(name, VarForm.BRACED)