"""Formatting and verification of generated Go source."""

from __future__ import annotations

import re
import shutil
import subprocess
from abc import ABC, abstractmethod

from ..errors import FormatError, ToolNotFoundError
from ..logging import get_logger
from .parser import first_error, parse

_BLANK_RUN = re.compile(r"\n{3,}")

FORMATTERS = ("auto", "gofmt", "syntax")


class Formatter(ABC):
    """Contract for turning generated Go text into valid, stable source."""

    @abstractmethod
    def format(self, source: str, name: str = "<generated>") -> str:
        """Return formatted source or raise ``FormatError``."""


class GofmtFormatter(Formatter):
    """Pipes source through the gofmt executable."""

    def __init__(self, executable: str = "gofmt") -> None:
        self.executable = executable

    def format(self, source: str, name: str = "<generated>") -> str:
        try:
            completed = subprocess.run(
                [self.executable],
                input=source,
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"Unable to locate '{self.executable}'. Install the Go toolchain or set formatter: syntax."
            ) from exc
        except subprocess.CalledProcessError as exc:
            raise FormatError(f"gofmt rejected {name}: {exc.stderr.strip()}") from exc
        return completed.stdout


class SyntaxCheckFormatter(Formatter):
    """Verifies source with tree-sitter and normalises whitespace."""

    def format(self, source: str, name: str = "<generated>") -> str:
        tree = parse(source.encode("utf-8"))
        error = first_error(tree.root_node)
        if error is not None:
            line, column = error.start_point
            raise FormatError(f"{name}:{line + 1}:{column + 1}: syntax error in generated source")
        lines = [line.rstrip() for line in source.splitlines()]
        text = "\n".join(lines).strip("\n")
        return _BLANK_RUN.sub("\n\n", text) + "\n"


def create_formatter(name: str = "auto", *, gofmt: str = "gofmt") -> Formatter:
    """Build the formatter selected in configuration."""
    if name == "gofmt":
        return GofmtFormatter(gofmt)
    if name == "syntax":
        return SyntaxCheckFormatter()
    if name == "auto":
        if shutil.which(gofmt):
            return GofmtFormatter(gofmt)
        get_logger("formatter").warning(
            "%s not found on PATH; generated sources are syntax-checked but not gofmt-formatted", gofmt
        )
        return SyntaxCheckFormatter()
    raise ValueError(f"Unknown formatter '{name}'; expected one of {', '.join(FORMATTERS)}")


__all__ = ["FORMATTERS", "Formatter", "GofmtFormatter", "SyntaxCheckFormatter", "create_formatter"]
