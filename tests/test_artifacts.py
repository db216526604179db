"""Tests for plgen.artifacts."""

from __future__ import annotations

import stat
from pathlib import Path

from plgen.artifacts import ArtifactEmitter
from plgen.models import FunctionDescriptor, Parameter


def _demo_functions():
    return [
        FunctionDescriptor(
            name="Add",
            parameters=(Parameter("a", "int64"), Parameter("b", "int64")),
            results=("int64",),
        ),
        FunctionDescriptor(name="Greet", parameters=(Parameter("name", "string"),), results=("string",)),
    ]


def test_control_file_names_the_extension() -> None:
    control = ArtifactEmitter("demo", _demo_functions()).render_control()

    assert control == (
        "# demo extension\n"
        "comment = 'demo extension'\n"
        "default_version = '0.1'\n"
        "relocatable = true\n"
    )


def test_makefile_delegates_to_pgxs() -> None:
    makefile = ArtifactEmitter("demo", _demo_functions()).render_makefile()

    assert "EXTENSION = demo\n" in makefile
    assert "DATA = demo--0.1.sql" in makefile
    assert "MODULES = demo" in makefile
    assert "PGXS := $(shell $(PG_CONFIG) --pgxs)" in makefile
    assert makefile.rstrip().endswith("include $(PGXS)")


def test_sql_script_lists_statements_in_order() -> None:
    sql = ArtifactEmitter("demo", _demo_functions()).render_sql()

    assert sql.startswith("-- complain if script is sourced in psql, rather than via CREATE EXTENSION\n")
    assert '\\echo Use "CREATE EXTENSION demo" to load this file. \\quit\n' in sql
    assert sql.count("CREATE OR REPLACE FUNCTION") == 2
    assert sql.index("FUNCTION add(") < sql.index("FUNCTION greet(")
    assert "'$libdir/demo', 'Greet'" in sql


def test_version_is_parameterised() -> None:
    emitter = ArtifactEmitter("demo", [], version="1.2")

    assert emitter.sql_filename == "demo--1.2.sql"
    assert "default_version = '1.2'" in emitter.render_control()
    assert "DATA = demo--1.2.sql" in emitter.render_makefile()


def test_write_all_creates_packaging_files(tmp_path: Path) -> None:
    paths = ArtifactEmitter("demo", _demo_functions()).write_all(tmp_path)

    assert [path.name for path in paths] == ["demo--0.1.sql", "demo.control", "Makefile"]
    for path in paths:
        assert path.read_text(encoding="utf-8")
        assert stat.S_IMODE(path.stat().st_mode) == 0o644


def test_output_is_a_pure_function_of_inputs() -> None:
    first = ArtifactEmitter("demo", _demo_functions())
    second = ArtifactEmitter("demo", _demo_functions())

    assert first.render_sql() == second.render_sql()
    assert first.render_control() == second.render_control()
    assert first.render_makefile() == second.render_makefile()
