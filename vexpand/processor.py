"""Running the expansion engine over streams and files."""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tempfile
import time
from dataclasses import dataclass, field
from typing import Optional, TextIO

from .engine import Engine, Formatter, Lookup, Options, Setenv

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass
class Processor:
    """Binds options, environment access and formatting to the engine."""

    opts: Options = field(default_factory=Options)
    lookup: Optional[Lookup] = None
    setenv: Optional[Setenv] = None
    formatter: Formatter = field(default_factory=Formatter)

    def process_stream(self, label: str, reader: TextIO, writer) -> None:
        """Expand ``reader`` into ``writer`` and flush it."""
        engine = Engine(
            label=label,
            opts=self.opts,
            lookup=self.lookup,
            setenv=self.setenv,
            formatter=self.formatter,
        )
        engine.consume(reader, writer)
        writer.flush()

    def process_in_place(self, path) -> None:
        """Expand a file in place through an atomically renamed temp file.

        Permissions and modification time are preserved; a backup is
        made on a best-effort basis when a backup extension is set.
        """
        path = os.fspath(path)
        directory = os.path.dirname(path) or "."
        base = os.path.basename(path)

        with open(path, encoding=_ENCODING, errors=_ERRORS, newline="") as src:
            st = os.fstat(src.fileno())
            mode = stat.S_IMODE(st.st_mode)
            fd, tmp = tempfile.mkstemp(prefix=f".{base}.vex-", dir=directory)
            try:
                os.chmod(tmp, mode)
                with open(fd, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as out:
                    self.process_stream(path, src, out)
                    out.flush()
                    os.fsync(out.fileno())
            except BaseException:
                with contextlib.suppress(OSError):
                    os.remove(tmp)
                raise

        if self.opts.backup_ext:
            backup = path + self.opts.backup_ext
            _remove_quietly(backup)
            try:
                os.link(path, backup)
            except OSError:
                with contextlib.suppress(OSError):
                    copy_file(path, backup, mode)

        try:
            os.replace(tmp, path)
        except OSError:
            with contextlib.suppress(OSError):
                os.remove(tmp)
            raise

        _sync_dir(directory)
        with contextlib.suppress(OSError):
            os.utime(path, ns=(time.time_ns(), st.st_mtime_ns))


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        with contextlib.suppress(OSError):
            os.rmdir(path)


def _sync_dir(directory: str) -> None:
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def copy_file(src, dst, mode: int) -> None:
    """Copy ``src`` to ``dst``, creating ``dst`` with ``mode``."""
    with open(src, "rb") as s:
        fd = os.open(dst, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
        with open(fd, "wb") as d:
            shutil.copyfileobj(s, d)