"""Tests for plgen.environment.hostpaths."""

from __future__ import annotations

import pytest

from plgen.environment.hostpaths import apply_host_flags, is_windows, normalize_tool_path
from plgen.errors import TemplateMarkerError

TEMPLATE = "/*\n#cgo CFLAGS: -I/opt/pg/include\n#include \"postgres.h\"\n*/\nimport \"C\"\n"


def test_is_windows() -> None:
    assert is_windows("win32")
    assert not is_windows("linux")
    assert not is_windows("darwin")


def test_normalize_tool_path_strips_output_on_posix() -> None:
    assert normalize_tool_path("/usr/include/postgresql/16/server\n", "linux") == "/usr/include/postgresql/16/server"


def test_normalize_tool_path_expands_short_names_on_windows() -> None:
    calls = []

    def expand(path: str) -> str:
        calls.append(path)
        return path.replace("PROGRA~1", "Program Files")

    result = normalize_tool_path("C:\\PROGRA~1\\PostgreSQL\\16\\include\\server\r\n", "win32", expand)

    assert calls == ["C:\\PROGRA~1\\PostgreSQL\\16\\include\\server"]
    assert result == "C:/Program Files/PostgreSQL/16/include/server"


def test_apply_host_flags_is_identity_off_windows() -> None:
    def library_dir() -> str:
        raise AssertionError("library path must not be queried")

    assert apply_host_flags(TEMPLATE, "/opt/pg/include", library_dir, "linux") == TEMPLATE


def test_apply_host_flags_adds_mingw_flags_after_cflags() -> None:
    result = apply_host_flags(TEMPLATE, "C:/pg/include/server", lambda: "C:/pg/lib", "win32")

    lines = result.split("\n")
    cflags = lines.index("#cgo CFLAGS: -I/opt/pg/include")
    assert lines[cflags + 1] == '#cgo CFLAGS: -I"C:/pg/include/server/port/win32"'
    assert lines[cflags + 2] == '#cgo LDFLAGS: -L"C:/pg/lib" -lpostgres'


def test_apply_host_flags_requires_cflags_directive_on_windows() -> None:
    with pytest.raises(TemplateMarkerError):
        apply_host_flags('import "C"\n', "C:/pg", lambda: "C:/lib", "win32")
