"""Collaborators that touch the host: go.mod, pl.go, pg_config and the Go toolchain."""

from .compiler import GoCompiler
from .hostpaths import apply_host_flags, normalize_tool_path
from .manifest import GoModResolver
from .native import NativeBuildConfig, PgConfig
from .templates import TemplateSourceConfig, TemplateSourceProvider

__all__ = [
    "GoCompiler",
    "GoModResolver",
    "NativeBuildConfig",
    "PgConfig",
    "TemplateSourceConfig",
    "TemplateSourceProvider",
    "apply_host_flags",
    "normalize_tool_path",
]
