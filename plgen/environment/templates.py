"""Locating the plgo glue-layer template (pl.go)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

from ..errors import TemplateNotFoundError
from ..logging import get_logger
from .manifest import GoModResolver

GLUE_MODULE = "github.com/algonode/plgo"
GLUE_FILE = "pl.go"


@dataclass
class TemplateSourceConfig:
    """Where to look for the glue-layer template.

    ``search_paths`` are GOPATH-style roots tried first (``<root>/src/<module>``);
    ``manifest_path`` pins the module version used for module-cache lookups in
    ``module_cache_path`` and then ``<root>/pkg/mod`` under each search path.
    """

    search_paths: List[Path] = field(default_factory=list)
    manifest_path: Path = Path("go.mod")
    module_cache_path: Optional[Path] = None
    module: str = GLUE_MODULE


class TemplateSourceProvider:
    """Returns the raw text of the glue-layer template."""

    def __init__(self, config: TemplateSourceConfig, resolver: GoModResolver | None = None) -> None:
        self.config = config
        self._resolver = resolver or GoModResolver(config.manifest_path)
        self.logger = get_logger("templates")

    def locate(self) -> Path:
        for candidate in self._candidates():
            self.logger.debug("Looking for %s at %s", GLUE_FILE, candidate)
            if candidate.is_file():
                return candidate
        raise TemplateNotFoundError(
            f"Package {self.config.module} not installed\n"
            f"please install it with: go get -u {self.config.module}/plgo"
        )

    def read(self) -> str:
        path = self.locate()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateNotFoundError(f"Cannot read plgo package at {path}: {exc}") from exc
        self.logger.info("Using glue template %s", path)
        return text

    def _candidates(self) -> Iterator[Path]:
        module_parts = self.config.module.split("/")
        for root in self.config.search_paths:
            yield Path(root, "src", *module_parts, GLUE_FILE)

        # Only consult go.mod once the development checkouts are exhausted.
        version = self._resolver.version(self.config.module)
        versioned = [*module_parts[:-1], f"{module_parts[-1]}@{version}", GLUE_FILE]
        if self.config.module_cache_path is not None:
            yield Path(self.config.module_cache_path, *versioned)
        for root in self.config.search_paths:
            yield Path(root, "pkg", "mod", *versioned)


__all__ = ["GLUE_FILE", "GLUE_MODULE", "TemplateSourceConfig", "TemplateSourceProvider"]
