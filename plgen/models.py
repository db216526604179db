"""Core data models shared across plgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Tuple

ERROR_TYPE = "error"


class Shape(Enum):
    """Closed set of result shapes an exported function may have."""

    VOID = "void"
    VALUE = "value"
    VALUE_OR_ERROR = "value_or_error"
    ERROR = "error"


@dataclass(frozen=True)
class GoFile:
    """One parsed Go source file."""

    path: Path
    source: bytes
    tree: Any = field(compare=False, repr=False)

    @property
    def text(self) -> str:
        return self.source.decode("utf-8")


@dataclass(frozen=True)
class SourcePackage:
    """A Go package directory parsed into one ordered set of files."""

    name: str
    directory: Path
    files: Tuple[GoFile, ...]
    doc: str = ""


@dataclass(frozen=True)
class Parameter:
    """A single named function parameter."""

    name: str
    go_type: str


@dataclass(frozen=True)
class FunctionDescriptor:
    """Summary of one exported Go function."""

    name: str
    parameters: Tuple[Parameter, ...] = ()
    results: Tuple[str, ...] = ()
    doc: str = ""

    @property
    def shape(self) -> Shape:
        """Classify the result list; callers validate it first via ``typemap.check_results``."""
        if not self.results:
            return Shape.VOID
        if self.results == (ERROR_TYPE,):
            return Shape.ERROR
        if len(self.results) == 2 and self.results[1] == ERROR_TYPE:
            return Shape.VALUE_OR_ERROR
        return Shape.VALUE

    @property
    def value_type(self) -> str | None:
        """Return the Go type of the returned value, if any."""
        if self.shape in (Shape.VALUE, Shape.VALUE_OR_ERROR):
            return self.results[0]
        return None


def to_unexported(name: str) -> str:
    """Lower the first letter of an exported Go identifier."""
    if not name:
        return name
    return name[0].lower() + name[1:]


def is_exported(name: str) -> bool:
    """Go exports identifiers whose first character is an uppercase letter."""
    return bool(name) and name[0].isupper()


__all__ = [
    "ERROR_TYPE",
    "FunctionDescriptor",
    "GoFile",
    "Parameter",
    "Shape",
    "SourcePackage",
    "is_exported",
    "to_unexported",
]
