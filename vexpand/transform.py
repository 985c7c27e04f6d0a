"""String transformations used by the expansion operators."""

from __future__ import annotations


def _upper_char(c: str) -> str:
    up = c.upper()
    return up if len(up) == 1 else c


def _lower_char(c: str) -> str:
    low = c.lower()
    return low if len(low) == 1 else c


def transform_case(op: str, s: str) -> str:
    """Apply ``^``/``^^`` (upper) or ``,``/``,,`` (lower) to ``s``."""
    if op == "^^":
        return "".join(map(_upper_char, s))
    if op == ",,":
        return "".join(map(_lower_char, s))
    if op == "^":
        return _upper_char(s[0]) + s[1:] if s else s
    if op == ",":
        return _lower_char(s[0]) + s[1:] if s else s
    return s


def atoi_safe(s: str) -> int:
    """Parse an optionally signed decimal prefix; stop at the first non-digit."""
    sign = 1
    if s.startswith("-"):
        sign = -1
        s = s[1:]
    n = 0
    for c in s:
        if not "0" <= c <= "9":
            break
        n = n * 10 + (ord(c) - ord("0"))
    return sign * n


def parse_offset_len(spec: str) -> tuple[int, int, bool]:
    """Parse ``off[:len]`` into ``(offset, length, has_length)``."""
    left, sep, right = spec.partition(":")
    off = atoi_safe(left)
    if sep:
        return off, atoi_safe(right), True
    return off, 0, False


def substr(spec: str, s: str) -> str:
    """Slice ``s`` by character index according to ``off[:len]``.

    A negative offset counts from the end; indices are clamped to the string.
    """
    off, length, has_len = parse_offset_len(spec)
    n = len(s)
    start = n + off if off < 0 else off
    start = max(0, min(start, n))
    end = n
    if has_len:
        end = max(start, min(start + length, n))
    return s[start:end]


def trim_prefix_all(s: str, prefix: str) -> str:
    """Remove ``prefix`` from the start of ``s`` repeatedly."""
    if not prefix:
        return s
    while s.startswith(prefix):
        s = s[len(prefix):]
    return s


def trim_suffix_all(s: str, suffix: str) -> str:
    """Remove ``suffix`` from the end of ``s`` repeatedly."""
    if not suffix:
        return s
    while s.endswith(suffix):
        s = s[: len(s) - len(suffix)]
    return s