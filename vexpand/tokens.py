"""Tokenizer for the variable-expansion syntax."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, TextIO

_SPECIAL = frozenset("${}:-+=?\\^,/#%@")
_NAME_START = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")
_DIGITS = frozenset("0123456789")


class TokType(enum.Enum):
    """Kinds of tokens produced by the tokenizer."""

    EOF = enum.auto()
    TEXT = enum.auto()
    DOLLAR = enum.auto()
    LBRACE = enum.auto()
    RBRACE = enum.auto()
    COLON = enum.auto()
    OP = enum.auto()
    NAME = enum.auto()
    ESC_DOLLAR = enum.auto()
    CARET = enum.auto()
    COMMA = enum.auto()
    SLASH = enum.auto()
    HASH = enum.auto()
    PERCENT = enum.auto()
    AT = enum.auto()


@dataclass(frozen=True)
class Token:
    """A token and the literal text it came from."""

    type: TokType
    lit: str = ""


_SINGLE = {
    "$": TokType.DOLLAR,
    "{": TokType.LBRACE,
    "}": TokType.RBRACE,
    ":": TokType.COLON,
    "-": TokType.OP,
    "+": TokType.OP,
    "=": TokType.OP,
    "?": TokType.OP,
    "^": TokType.CARET,
    ",": TokType.COMMA,
    "/": TokType.SLASH,
    "#": TokType.HASH,
    "%": TokType.PERCENT,
    "@": TokType.AT,
}

_EOF = Token(TokType.EOF)


def is_name_start(c: str) -> bool:
    """Whether ``c`` may start a variable name."""
    return c in _NAME_START and c != ""


def is_digit(c: str) -> bool:
    """Whether ``c`` is a decimal digit."""
    return c in _DIGITS and c != ""


def is_name_cont(c: str) -> bool:
    """Whether ``c`` may continue a variable name."""
    return is_name_start(c) or is_digit(c)


class Tokenizer:
    """Reads a text stream in chunks and yields tokens."""

    def __init__(self, stream: TextIO, no_escape: bool = False, size: int = 1 << 20) -> None:
        self._stream = stream
        self.no_escape = no_escape
        self._size = max(size, 64)
        self._buf = ""
        self._pos = 0
        self._eof = False

    def _fill(self) -> bool:
        """Read another chunk; return False once the stream is exhausted."""
        if self._eof:
            return False
        data = self._stream.read(self._size)
        if not data:
            self._eof = True
            return False
        self._buf = self._buf[self._pos:] + data
        self._pos = 0
        return True

    def _read(self) -> str:
        if self._pos >= len(self._buf) and not self._fill():
            return ""
        c = self._buf[self._pos]
        self._pos += 1
        return c

    def _unread(self) -> None:
        self._pos -= 1

    def next(self) -> Token:
        """Return the next token, or an EOF token at end of input."""
        c = self._read()
        if not c:
            return _EOF

        if c == "\\" and not self.no_escape:
            nxt = self._read()
            if not nxt:
                return Token(TokType.TEXT, "\\")
            if nxt == "$":
                return Token(TokType.ESC_DOLLAR, "$")
            self._unread()

        kind = _SINGLE.get(c)
        if kind is not None:
            return Token(kind, c)

        if is_name_start(c) or is_digit(c):
            parts = [c]
            while True:
                nxt = self._read()
                if not nxt:
                    break
                if not is_name_cont(nxt):
                    self._unread()
                    break
                parts.append(nxt)
            return Token(TokType.NAME, "".join(parts))

        parts = [c]
        while True:
            nxt = self._read()
            if not nxt:
                break
            if nxt in _SPECIAL or is_name_start(nxt) or is_digit(nxt):
                self._unread()
                break
            parts.append(nxt)
        return Token(TokType.TEXT, "".join(parts))

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next()
            if tok.type is TokType.EOF:
                return
            yield tok

    def emit_until_dollar(self, out) -> Token:
        """Copy text to ``out`` up to an unescaped ``$`` or end of input.

        Returns a DOLLAR token when a ``$`` was consumed, otherwise EOF.
        With escapes enabled, a ``$`` preceded by an odd number of
        backslashes is written literally (dropping one backslash).
        """
        while True:
            idx = self._buf.find("$", self._pos)
            if idx >= 0:
                chunk = self._buf[self._pos:idx]
                self._pos = idx + 1
                if not self.no_escape:
                    slashes = len(chunk) - len(chunk.rstrip("\\"))
                    if slashes % 2 == 1:
                        out.write(chunk[:-1])
                        out.write("$")
                        continue
                if chunk:
                    out.write(chunk)
                return Token(TokType.DOLLAR, "$")

            pending = self._buf[self._pos:]
            held = 0 if self.no_escape else len(pending) - len(pending.rstrip("\\"))
            if len(pending) > held:
                out.write(pending[: len(pending) - held])
            self._pos = len(self._buf) - held
            if not self._fill():
                rest = self._buf[self._pos:]
                if rest:
                    out.write(rest)
                self._pos = len(self._buf)
                return _EOF