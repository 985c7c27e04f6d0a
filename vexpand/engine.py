"""Expansion engine: walks the input and substitutes variable references."""

from __future__ import annotations

import io
import os
from dataclasses import dataclass, field
from typing import Callable, Optional, TextIO

from .errors import SubstError, empty, unset
from .tokens import Token, TokType, Tokenizer
from .transform import substr, transform_case, trim_prefix_all, trim_suffix_all
from .varref import VarRef, bare_ref, braced_ref

Lookup = Callable[[str], Optional[str]]
Setenv = Callable[[str, str], None]

_OP_TOKENS = frozenset(
    {
        TokType.PERCENT,
        TokType.CARET,
        TokType.COMMA,
        TokType.SLASH,
        TokType.COLON,
        TokType.OP,
        TokType.AT,
    }
)
_OPERATOR_TOKENS = _OP_TOKENS | {TokType.HASH}
_CASE_OPS = frozenset({"^", "^^", ",", ",,"})


@dataclass(frozen=True)
class Options:
    """Settings that control how references are expanded."""

    error_unset: bool = False
    keep_unset: bool = False
    error_empty: bool = False
    no_ops: bool = False
    no_escape: bool = False
    colored: bool = False
    backup_ext: str = ""


@dataclass(frozen=True)
class Formatter:
    """Renders substituted values and kept literals, optionally in colour."""

    colored: bool = False

    def _paint(self, code: str, s: str) -> str:
        if not self.colored:
            return s
        return f"\x1b[{code}m{s}\x1b[0m"

    def ok_str(self, s: str) -> str:
        return self._paint("32", s)

    def unset_str(self, s: str) -> str:
        return self._paint("33", s)

    def empty_str(self, s: str) -> str:
        return self._paint("35", s)

    def error_str(self, s: str) -> str:
        return self._paint("31", s)


class _RequiredError(SubstError):
    """Raised by ``${VAR?msg}`` when the variable is missing."""

    def __init__(self, name: str, msg: str) -> None:
        self.msg = msg
        Exception.__init__(self, f"{name}: {msg}")


def _add_op(op: str, c: str) -> str:
    return op + c if len(op) < 2 else op


class Expander:
    """One expansion run: copies text and expands each ``$`` reference."""

    def __init__(self, engine: "Engine", tokenizer: Tokenizer, out) -> None:
        self._engine = engine
        self._tok = tokenizer
        self._out = out

    def run(self) -> None:
        """Process the whole input."""
        while self._tok.emit_until_dollar(self._out).type is TokType.DOLLAR:
            self._after_dollar()

    def _write(self, s: str) -> None:
        if s:
            self._out.write(s)

    def _error_literal(self, s: str) -> None:
        self._write(self._engine.formatter.error_str(s))

    def _after_dollar(self) -> None:
        t = self._tok.next()
        if t.type is TokType.LBRACE:
            self._braced_name()
        elif t.type is TokType.NAME:
            self._write(self._engine._expand_simple(bare_ref(t.lit)))
        else:
            self._write("$" + t.lit)

    def _braced_name(self) -> None:
        name = ""
        op = ""
        while True:
            t: Token = self._tok.next()
            if t.type is TokType.HASH:
                if not name and not op:
                    op = "#"
                    continue
                self._operator(name, _add_op(op, t.lit))
                return
            if t.type in _OP_TOKENS:
                if name and not self._engine.opts.no_ops:
                    self._operator(name, _add_op(op, t.lit))
                else:
                    self._error_literal("${" + name + t.lit)
                return
            if t.type is TokType.NAME:
                name += t.lit
                continue
            if t.type is TokType.RBRACE:
                if op == "#":
                    if not name:
                        self._error_literal("${#}")
                    else:
                        self._write(self._engine._expand_with_op(name, "#len", None))
                else:
                    self._write(self._engine._expand_simple(braced_ref(name)))
                return
            self._error_literal("${" + name + t.lit)
            return

    def _operator(self, name: str, op: str) -> None:
        while True:
            t = self._tok.next()
            if t.type in _OPERATOR_TOKENS:
                if len(op) < 2:
                    op += t.lit
                    continue
                self._word(name, op, t.lit)
                return
            if t.type is TokType.RBRACE:
                self._write(self._engine._expand_with_op(name, op, None))
                return
            self._word(name, op, t.lit)
            return

    def _word(self, name: str, op: str, first: str) -> None:
        parts = [first]
        depth = 0
        while True:
            t = self._tok.next()
            if t.type is TokType.LBRACE:
                depth += 1
                parts.append(t.lit)
            elif t.type is TokType.RBRACE:
                if depth:
                    depth -= 1
                    parts.append(t.lit)
                    continue
                self._write(self._engine._expand_with_op(name, op, "".join(parts)))
                return
            elif t.type is TokType.EOF:
                self._error_literal("${" + name + op + "".join(parts))
                return
            else:
                parts.append(t.lit)


@dataclass
class Engine:
    """Expands variable references in a text stream."""

    label: str = ""
    opts: Options = field(default_factory=Options)
    lookup: Optional[Lookup] = None
    setenv: Optional[Setenv] = None
    formatter: Formatter = field(default_factory=Formatter)

    def __post_init__(self) -> None:
        if self.lookup is None:
            self.lookup = os.environ.get

    def consume(self, reader: TextIO, writer) -> None:
        """Expand everything read from ``reader`` into ``writer``."""
        tok = Tokenizer(reader, self.opts.no_escape, 1 << 20)
        Expander(self, tok, writer).run()
        flush = getattr(writer, "flush", None)
        if flush is not None:
            flush()

    def _expand_word(self, word: Optional[str]) -> str:
        if not word:
            return ""
        out = io.StringIO()
        Expander(self, Tokenizer(io.StringIO(word), self.opts.no_escape), out).run()
        return out.getvalue()

    def _finish(self, name: str, out: str) -> str:
        if self.opts.error_empty and out == "":
            raise empty(self.formatter.empty_str(name))
        return self.formatter.ok_str(out)

    def _expand_simple(self, ref: VarRef) -> str:
        val = self.lookup(ref.name)
        if val is None:
            if self.opts.error_unset:
                raise unset(self.formatter.unset_str(ref.name))
            if self.opts.keep_unset:
                return self.formatter.unset_str(ref.lit())
            return ""
        return self._finish(ref.name, val)

    def _with_value(
        self, name: str, val: Optional[str], literal: str, fn: Callable[[str], str]
    ) -> str:
        if val is None:
            if self.opts.error_unset:
                raise unset(self.formatter.unset_str(name))
            if self.opts.keep_unset:
                return self.formatter.unset_str(literal)
            val = ""
        return self._finish(name, fn(val))

    def _expand_with_op(self, name: str, op: str, word: Optional[str]) -> str:
        val = self.lookup(name)
        is_set = val is not None
        literal = "${" + name + op + (word or "") + "}"

        if op in ("#", "##"):
            return self.trim_prefix(name, op, is_set, val or "", self._expand_word(word))
        if op in ("%", "%%"):
            return self.trim_suffix(name, op, is_set, val or "", self._expand_word(word))

        missing = not is_set or (op.startswith(":") and val == "")
        if op in ("-", ":-"):
            return self._finish(name, self._expand_word(word) if missing else val)
        if op in ("=", ":="):
            if not missing:
                return self._finish(name, val)
            assigned = self._expand_word(word)
            if self.setenv is not None:
                self.setenv(name, assigned)
            return self._finish(name, assigned)
        if op in ("+", ":+"):
            return "" if missing else self._finish(name, self._expand_word(word))
        if op in ("?", ":?"):
            if missing:
                msg = self._expand_word(word) or "parameter null or not set"
                raise _RequiredError(name, msg)
            return self._finish(name, val)
        if op == "#len":
            return self._with_value(name, val, "${#" + name + "}", lambda v: str(len(v)))
        if op in _CASE_OPS and word is None:
            return self._with_value(name, val, literal, lambda v: transform_case(op, v))
        if op == ":" and word is not None:
            spec = self._expand_word(word)
            return self._with_value(name, val, literal, lambda v: substr(spec, v))
        if op in ("/", "//") and word is not None:
            raw_pat, _, raw_repl = word.partition("/")
            pat = self._expand_word(raw_pat)
            if not pat:
                return self.formatter.error_str(literal)
            repl = self._expand_word(raw_repl)
            count = 1 if op == "/" else -1
            return self._with_value(name, val, literal, lambda v: v.replace(pat, repl, count))
        return self.formatter.error_str(literal)

    def trim_prefix(self, name: str, op: str, is_set: bool, val: str, pat: str) -> str:
        """Implement ``${VAR#pat}`` and ``${VAR##pat}``."""
        literal = "${" + name + op + pat + "}"
        if not is_set:
            if self.opts.error_unset:
                raise unset(self.formatter.error_str(name))
            if self.opts.keep_unset:
                return self.formatter.unset_str(literal)
            val = ""
        if pat == "":
            return self.formatter.error_str(literal)
        out = val.removeprefix(pat) if op == "#" else trim_prefix_all(val, pat)
        return self._finish(name, out)

    def trim_suffix(self, name: str, op: str, is_set: bool, val: str, pat: str) -> str:
        """Implement ``${VAR%pat}`` and ``${VAR%%pat}``."""
        literal = "${" + name + op + pat + "}"
        if not is_set:
            if self.opts.error_unset:
                raise unset(self.formatter.unset_str(name))
            if self.opts.keep_unset:
                return self.formatter.unset_str(literal)
            val = ""
        if pat == "":
            return self.formatter.error_str(literal)
        out = val.removesuffix(pat) if op == "%" else trim_suffix_all(val, pat)
        return self._finish(name, out)