"""Reading KEY=VALUE variable files and layering them over a lookup."""

from __future__ import annotations

import json
from typing import Callable, Iterable, Optional, TextIO

Lookup = Callable[[str], Optional[str]]


class VarsFileError(ValueError):
    """A variables file could not be parsed."""


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def read_vars(stream: TextIO) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines, skipping blanks and ``#`` comments."""
    result: dict[str, str] = {}
    for raw in stream:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise VarsFileError(f"invalid var line {_quote(line)} (expected KEY=VALUE)")
        result[key.strip()] = value.strip()
    return result


def merge_vars(files: Iterable[str], fallback: Optional[Lookup]) -> Lookup:
    """Return a lookup that prefers variables from ``files`` over ``fallback``.

    Later files override earlier ones. The lookup returns ``None`` for
    names that are not found anywhere.
    """
    merged: dict[str, str] = {}
    for path in files:
        with open(path, encoding="utf-8") as fh:
            try:
                merged.update(read_vars(fh))
            except VarsFileError as exc:
                raise VarsFileError(f"parsing vars in {_quote(str(path))}: {exc}") from exc

    def lookup(name: str) -> Optional[str]:
        if name in merged:
            return merged[name]
        if fallback is None:
            return None
        return fallback(name)

    return lookup