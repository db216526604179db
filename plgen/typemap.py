"""Mapping between Go types and PostgreSQL types."""

from __future__ import annotations

from typing import Dict, Sequence

from .errors import UnmappedTypeError, UnsupportedSignatureError
from .models import ERROR_TYPE

_SCALAR_TYPES: Dict[str, str] = {
    "bool": "boolean",
    "int16": "smallint",
    "int32": "integer",
    "int": "bigint",
    "int64": "bigint",
    "float32": "real",
    "float64": "double precision",
    "string": "text",
}

_SPECIAL_TYPES: Dict[str, str] = {
    "[]byte": "bytea",
    "time.Time": "timestamp with time zone",
}

TYPE_MAP: Dict[str, str] = {
    **_SCALAR_TYPES,
    **_SPECIAL_TYPES,
    **{f"[]{go}": f"{sql}[]" for go, sql in _SCALAR_TYPES.items()},
}


def normalize_type(go_type: str) -> str:
    """Canonical spelling of a Go type expression (whitespace removed)."""
    return "".join(go_type.split())


def display_type(go_type: str) -> str:
    """Type text as written, with whitespace runs collapsed for messages."""
    return " ".join(go_type.split())


def sql_type(go_type: str, context: str | None = None) -> str:
    """Return the PostgreSQL type for ``go_type`` or raise ``UnmappedTypeError``."""
    try:
        return TYPE_MAP[normalize_type(go_type)]
    except KeyError:
        raise UnmappedTypeError(display_type(go_type), context) from None


def check_results(function: str, results: Sequence[str]) -> None:
    """Validate a result list against the supported shapes.

    Accepted: nothing, ``T``, ``(T, error)`` and ``error`` where ``T`` is mapped.
    """
    context = f"results of {function}"
    if len(results) > 2:
        raise UnsupportedSignatureError(
            f"{function} returns {len(results)} values; at most (value, error) is supported"
        )
    if len(results) == 2 and results[1] != ERROR_TYPE:
        raise UnsupportedSignatureError(
            f"{function} must return (value, error) when it returns two values"
        )
    if results and results[0] != ERROR_TYPE:
        sql_type(results[0], context)
    elif len(results) == 2:
        raise UnsupportedSignatureError(f"{function} returns (error, error)")


__all__ = ["TYPE_MAP", "check_results", "display_type", "normalize_type", "sql_type"]
