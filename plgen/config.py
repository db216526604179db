"""Configuration loading for plgen (.plgen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .artifacts import DEFAULT_VERSION
from .environment.templates import GLUE_MODULE, TemplateSourceConfig
from .golang.formatter import FORMATTERS

CONFIG_FILENAME = ".plgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolsConfig:
    """Executables invoked during a build."""

    go: str = "go"
    gofmt: str = "gofmt"
    pg_config: str = "pg_config"


@dataclass
class PlgenConfig:
    """Represents the settings defined in .plgen.yml."""

    root: Path
    template: TemplateSourceConfig
    version: str = DEFAULT_VERSION
    output_dir: Optional[Path] = None
    formatter: str = "auto"
    compile: bool = True
    tools: ToolsConfig = field(default_factory=ToolsConfig)

    def __post_init__(self) -> None:
        if self.output_dir is None:
            self.output_dir = self.root / "build"


def load_config(package_path: Path, environ: Mapping[str, str] | None = None) -> PlgenConfig:
    """Load configuration for the package at ``package_path``.

    ``environ`` defaults to ``os.environ``; GOPATH and GOMODCACHE are only read here.
    """
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(Path(package_path))
    root = config_file.parent

    data = _read_config(config_file) if config_file.exists() else {}
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    formatter = _as_str(data.get("formatter")) or "auto"
    if formatter not in FORMATTERS:
        raise ConfigError(
            f"Unknown formatter '{formatter}' in {CONFIG_FILENAME}; expected one of {', '.join(FORMATTERS)}"
        )

    tools_data = _as_dict(data.get("tools"))
    tools = ToolsConfig(
        go=_as_str(tools_data.get("go")) or "go",
        gofmt=_as_str(tools_data.get("gofmt")) or "gofmt",
        pg_config=_as_str(tools_data.get("pg_config")) or "pg_config",
    )

    output_dir_str = _as_str(data.get("output_dir"))
    compile_flag = _as_bool(data.get("compile"))

    return PlgenConfig(
        root=root,
        template=_template_config(root, _as_dict(data.get("template")), env),
        version=_as_str(data.get("version")) or DEFAULT_VERSION,
        output_dir=(root / output_dir_str) if output_dir_str else None,
        formatter=formatter,
        compile=True if compile_flag is None else compile_flag,
        tools=tools,
    )


def default_search_paths(env: Mapping[str, str]) -> List[Path]:
    """GOPATH entries, or the Go default of ``~/go`` when GOPATH is unset."""
    gopath = env.get("GOPATH", "")
    if gopath:
        return [Path(entry) for entry in gopath.split(os.pathsep) if entry]
    return [Path.home() / "go"]


def _template_config(root: Path, data: Dict[str, Any], env: Mapping[str, str]) -> TemplateSourceConfig:
    search_paths = [root / path for path in _as_str_list(data.get("search_paths"))]
    manifest = _as_str(data.get("manifest_path"))
    cache = _as_str(data.get("module_cache_path")) or env.get("GOMODCACHE") or None
    return TemplateSourceConfig(
        search_paths=search_paths or default_search_paths(env),
        manifest_path=root / (manifest or "go.mod"),
        module_cache_path=Path(cache).expanduser() if cache else None,
        module=_as_str(data.get("module")) or GLUE_MODULE,
    )


def _resolve_config_path(package_path: Path) -> Path:
    package_path = package_path.expanduser()
    if package_path.is_dir():
        return (package_path / CONFIG_FILENAME).resolve()
    if package_path.name != CONFIG_FILENAME:
        return (package_path.parent / CONFIG_FILENAME).resolve()
    return package_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "PlgenConfig", "ToolsConfig", "load_config"]
