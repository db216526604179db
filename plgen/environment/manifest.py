"""go.mod parsing for pinned module versions."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict

from ..errors import ManifestError

_REQUIRE_LINE = re.compile(r"^require\s+(?P<body>[^(].*)$")
_REQUIRE_BLOCK = re.compile(r"^require\s*\($")
_MODULE_VERSION = re.compile(r"^(?P<path>\S+)\s+(?P<version>v\S+)$")


class GoModResolver:
    """Looks up required module versions in a go.mod file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def version(self, module: str) -> str:
        requirements = self.requirements()
        try:
            return requirements[module]
        except KeyError:
            raise ManifestError(f"Cannot find {module} in {self.path}") from None

    def requirements(self) -> Dict[str, str]:
        """Return ``module -> version`` for every require directive."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ManifestError(f"{self.path.name} is missing. Please run go mod init") from exc
        except OSError as exc:
            raise ManifestError(f"Cannot read {self.path}: {exc}") from exc

        requirements: Dict[str, str] = {}
        in_block = False
        for raw in text.splitlines():
            line = raw.split("//", 1)[0].strip()
            if not line:
                continue
            if in_block:
                if line == ")":
                    in_block = False
                    continue
                self._add(requirements, line)
            elif _REQUIRE_BLOCK.match(line):
                in_block = True
            else:
                match = _REQUIRE_LINE.match(line)
                if match:
                    self._add(requirements, match.group("body"))
        return requirements

    @staticmethod
    def _add(requirements: Dict[str, str], entry: str) -> None:
        match = _MODULE_VERSION.match(entry.strip())
        if match:
            requirements[match.group("path").strip('"')] = match.group("version")


__all__ = ["GoModResolver"]
