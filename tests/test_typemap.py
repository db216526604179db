"""Tests for plgen.typemap."""

from __future__ import annotations

import pytest

from plgen.errors import UnmappedTypeError, UnsupportedSignatureError
from plgen.typemap import TYPE_MAP, check_results, display_type, normalize_type, sql_type


@pytest.mark.parametrize(
    ("go_type", "expected"),
    [
        ("bool", "boolean"),
        ("int16", "smallint"),
        ("int32", "integer"),
        ("int", "bigint"),
        ("int64", "bigint"),
        ("float32", "real"),
        ("float64", "double precision"),
        ("string", "text"),
        ("[]byte", "bytea"),
        ("time.Time", "timestamp with time zone"),
        ("[]string", "text[]"),
        ("[]float64", "double precision[]"),
        ("[ ]int32", "integer[]"),
    ],
)
def test_sql_type_maps_supported_types(go_type: str, expected: str) -> None:
    assert sql_type(go_type) == expected


@pytest.mark.parametrize("go_type", ["uint8", "*int64", "map[string]int", "[][]byte", "error", "interface{}"])
def test_sql_type_rejects_unmapped_types(go_type: str) -> None:
    with pytest.raises(UnmappedTypeError) as excinfo:
        sql_type(go_type)

    assert excinfo.value.go_type == display_type(go_type)


@pytest.mark.parametrize(
    ("go_type", "shown"),
    [("chan int", "chan int"), ("struct{ X int }", "struct{ X int }"), ("map[string]  int", "map[string] int")],
)
def test_unmapped_multi_token_types_keep_their_spelling(go_type: str, shown: str) -> None:
    with pytest.raises(UnmappedTypeError) as excinfo:
        sql_type(go_type, "parameters of Add")

    assert excinfo.value.go_type == shown
    assert f"'{shown}'" in str(excinfo.value)


def test_type_map_has_no_byte_array_of_arrays() -> None:
    assert "[][]byte" not in TYPE_MAP
    assert TYPE_MAP["[]byte"] == "bytea"


def test_check_results_accepts_supported_shapes() -> None:
    check_results("F", ())
    check_results("F", ("int64",))
    check_results("F", ("string", "error"))
    check_results("F", ("error",))


@pytest.mark.parametrize(
    "results",
    [("int64", "int64"), ("error", "error"), ("int64", "string", "error")],
)
def test_check_results_rejects_other_shapes(results) -> None:
    with pytest.raises(UnsupportedSignatureError):
        check_results("F", results)


def test_normalize_type_only_drops_whitespace() -> None:
    assert normalize_type(" [ ] int64 ") == "[]int64"
    assert normalize_type("time.Time") == "time.Time"
