"""Tests for plgen.config."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from plgen.config import ConfigError, PlgenConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={"GOPATH": str(tmp_path / "gopath")})

    assert isinstance(config, PlgenConfig)
    assert config.root == tmp_path.resolve()
    assert config.version == "0.1"
    assert config.output_dir == tmp_path.resolve() / "build"
    assert config.formatter == "auto"
    assert config.compile is True
    assert config.tools.pg_config == "pg_config"
    assert config.template.search_paths == [tmp_path / "gopath"]
    assert config.template.manifest_path == tmp_path.resolve() / "go.mod"
    assert config.template.module_cache_path is None
    assert config.template.module == "github.com/algonode/plgo"


def test_load_config_reads_go_environment(tmp_path: Path) -> None:
    environ = {
        "GOPATH": os.pathsep.join(["/one", "/two"]),
        "GOMODCACHE": "/cache/mod",
    }

    config = load_config(tmp_path, environ=environ)

    assert config.template.search_paths == [Path("/one"), Path("/two")]
    assert config.template.module_cache_path == Path("/cache/mod")


def test_load_config_defaults_gopath_to_home(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert config.template.search_paths == [Path.home() / "go"]


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".plgen.yml").write_text(
        """
version: "1.0"
output_dir: dist
formatter: syntax
compile: false
tools:
  go: /usr/local/go/bin/go
  pg_config: /usr/lib/postgresql/16/bin/pg_config
template:
  search_paths:
    - vendor/gopath
  manifest_path: deps/go.mod
  module_cache_path: /var/cache/gomod
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path / ".plgen.yml", environ={"GOMODCACHE": "/ignored"})

    root = tmp_path.resolve()
    assert config.version == "1.0"
    assert config.output_dir == root / "dist"
    assert config.formatter == "syntax"
    assert config.compile is False
    assert config.tools.go == "/usr/local/go/bin/go"
    assert config.tools.gofmt == "gofmt"
    assert config.tools.pg_config == "/usr/lib/postgresql/16/bin/pg_config"
    assert config.template.search_paths == [root / "vendor" / "gopath"]
    assert config.template.manifest_path == root / "deps" / "go.mod"
    assert config.template.module_cache_path == Path("/var/cache/gomod")


def test_load_config_rejects_unknown_formatter(tmp_path: Path) -> None:
    (tmp_path / ".plgen.yml").write_text("formatter: clang\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / ".plgen.yml").write_text("tools: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".plgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})
