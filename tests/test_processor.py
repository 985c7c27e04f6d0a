import io
import os
import stat
import time

import pytest

from vexpand.engine import Formatter, Options
from vexpand.errors import SubstError
from vexpand.processor import Processor, copy_file


def _processor(mapping=None, lookup=None, setenv=None, **opts):
    return Processor(
        opts=Options(**opts),
        lookup=lookup if lookup is not None else (mapping or {}).get,
        setenv=setenv,
        formatter=Formatter(False),
    )


def test_process_stream_expands_with_lookup():
    out = io.StringIO()
    _processor({"NAME": "Ada"}).process_stream("test.txt", io.StringIO("hello ${NAME}"), out)
    assert out.getvalue() == "hello Ada"


def test_process_stream_propagates_error():
    with pytest.raises(SubstError) as exc:
        _processor({}).process_stream("EngineLabel", io.StringIO("${VAR?boom}"), io.StringIO())
    assert str(exc.value) == "VAR: boom"


def test_process_stream_calls_setenv_on_assign_null():
    calls = []
    proc = _processor(
        lookup=lambda name: "",
        setenv=lambda name, val: calls.append((name, val)),
    )
    out = io.StringIO()
    proc.process_stream("label", io.StringIO("${NEW:=value}"), out)
    assert out.getvalue() == "value"
    assert calls == [("NEW", "value")]


def test_process_stream_respects_no_ops():
    text = "${NAME:-x}"
    out = io.StringIO()
    _processor({}, no_ops=True).process_stream("label", io.StringIO(text), out)
    assert out.getvalue() == text


def test_in_place_with_backup_and_meta(tmp_path):
    path = tmp_path / "file.txt"
    orig = "hello ${NAME}"
    path.write_text(orig)
    os.chmod(path, 0o640)
    old_ns = (int(time.time()) - 3 * 3600) * 1_000_000_000
    os.utime(path, ns=(old_ns, old_ns))

    _processor({"NAME": "Ada"}, backup_ext=".bak").process_in_place(path)

    assert path.read_text() == "hello Ada"
    info = os.stat(path)
    assert stat.S_IMODE(info.st_mode) == 0o640
    assert info.st_mtime_ns == old_ns
    assert (tmp_path / "file.txt.bak").read_text() == orig


def test_in_place_replaces_old_backup(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("${NAME}")
    backup = tmp_path / "file.txt.bak"
    backup.write_text("OLD BACKUP")

    _processor(lookup=lambda name: "Ada", backup_ext=".bak").process_in_place(path)

    assert backup.read_text() == "${NAME}"
    assert path.read_text() == "Ada"


def test_in_place_error_cleans_temp(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("${VAR?boom}")

    with pytest.raises(SubstError) as exc:
        _processor({}).process_in_place(path)
    assert str(exc.value) == "VAR: boom"
    leftovers = [p.name for p in tmp_path.iterdir() if p.name.startswith(".file.txt.vex-")]
    assert leftovers == []
    assert path.read_text() == "${VAR?boom}"


def test_in_place_missing_file(tmp_path):
    missing = tmp_path / "does not exist.txt"
    with pytest.raises(FileNotFoundError) as exc:
        _processor({}).process_in_place(missing)
    assert exc.value.filename == str(missing)


def test_in_place_setenv_is_wired(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("${NEW:=value}")
    calls = []
    _processor({}, setenv=lambda name, val: calls.append((name, val))).process_in_place(path)
    assert path.read_text() == "value"
    assert calls == [("NEW", "value")]


def test_in_place_backup_over_directory(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("X=${X:-x}")
    backup = tmp_path / "file.txt.bak"
    backup.mkdir()

    _processor(lookup=lambda name: "y", backup_ext=".bak").process_in_place(path)

    assert backup.is_file()
    assert backup.read_text() == "X=${X:-x}"
    assert path.read_text() == "X=y"


def test_copy_file_success(tmp_path):
    src = tmp_path / "src.txt"
    dst = tmp_path / "dst.txt"
    src.write_bytes(b"copy me")
    copy_file(src, dst, 0o640)
    assert dst.read_bytes() == b"copy me"
    assert stat.S_IMODE(os.stat(dst).st_mode) == 0o640


def test_copy_file_missing_source(tmp_path):
    src = tmp_path / "missing.txt"
    with pytest.raises(FileNotFoundError) as exc:
        copy_file(src, tmp_path / "dst.txt", 0o600)
    assert exc.value.filename == str(src)


def test_copy_file_missing_destination_parent(tmp_path):
    src = tmp_path / "src.txt"
    src.write_text("x")
    (tmp_path / "d").mkdir()
    dst = tmp_path / "d" / "sub" / "inner.txt"
    with pytest.raises(FileNotFoundError) as exc:
        copy_file(src, dst, 0o600)
    assert exc.value.filename == str(dst)