"""Exception hierarchy raised by the plgen pipeline."""

from __future__ import annotations


class PlgenError(RuntimeError):
    """Base class for every fatal pipeline error."""


class StructuralError(PlgenError):
    """The analysed Go package cannot be turned into an extension."""


class PackageParseError(StructuralError):
    """A Go source file could not be parsed."""


class MultiplePackagesError(StructuralError):
    """More than one package identifier was found in the directory."""


class NotEntryPackageError(StructuralError):
    """The directory does not hold a ``main`` package."""


class UnsupportedSignatureError(StructuralError):
    """An exported function has a shape the code writer cannot wrap."""


class UnmappedTypeError(StructuralError):
    """A Go type has no PostgreSQL counterpart."""

    def __init__(self, go_type: str, context: str | None = None) -> None:
        self.go_type = go_type
        message = f"Unsupported Go type '{go_type}'"
        if context:
            message += f" in {context}"
        super().__init__(message)


class NameCollisionError(StructuralError):
    """Unexporting a function would clash with an existing name."""


class EnvironmentSetupError(PlgenError):
    """A required tool, template or manifest is missing or failed."""


class ManifestError(EnvironmentSetupError):
    """go.mod is missing or does not list the requested module."""


class TemplateNotFoundError(EnvironmentSetupError):
    """The glue-layer template could not be located or read."""


class ToolNotFoundError(EnvironmentSetupError):
    """An external executable is not installed."""


class ToolFailedError(EnvironmentSetupError):
    """An external executable exited with a non-zero status."""


class GenerationError(PlgenError):
    """Internal consistency failure while generating sources."""


class TemplateMarkerError(GenerationError):
    """The glue-layer template lacks the declaration marker."""


class FormatError(GenerationError):
    """Generated Go source is not syntactically valid."""


__all__ = [
    "EnvironmentSetupError",
    "FormatError",
    "GenerationError",
    "ManifestError",
    "MultiplePackagesError",
    "NameCollisionError",
    "NotEntryPackageError",
    "PackageParseError",
    "PlgenError",
    "StructuralError",
    "TemplateMarkerError",
    "TemplateNotFoundError",
    "ToolFailedError",
    "ToolNotFoundError",
    "UnmappedTypeError",
    "UnsupportedSignatureError",
]
