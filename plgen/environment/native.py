"""Discovery of PostgreSQL build settings through pg_config."""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod

from ..errors import ToolFailedError, ToolNotFoundError
from ..logging import get_logger
from .hostpaths import normalize_tool_path


class NativeBuildConfig(ABC):
    """Capability answering where the PostgreSQL server headers and libraries live."""

    @abstractmethod
    def include_path(self) -> str:
        """Directory holding ``postgres.h``."""

    @abstractmethod
    def library_path(self) -> str:
        """Directory holding the server libraries (used for linking on Windows)."""


class PgConfig(NativeBuildConfig):
    """Queries the ``pg_config`` executable."""

    def __init__(self, executable: str = "pg_config", platform: str | None = None) -> None:
        self.executable = executable
        self.platform = platform
        self.logger = get_logger("native")

    def include_path(self) -> str:
        return self._query("--includedir-server")

    def library_path(self) -> str:
        return self._query("--pkglibdir")

    def _query(self, flag: str) -> str:
        args = [self.executable, flag]
        self.logger.debug("Running %s", " ".join(args))
        try:
            completed = subprocess.run(args, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"Unable to locate '{self.executable}'. Install the PostgreSQL server development package."
            ) from exc
        except subprocess.CalledProcessError as exc:
            raise ToolFailedError(
                f"Cannot run {self.executable} {flag}: exit code {exc.returncode}: {exc.stderr.strip()}"
            ) from exc
        return normalize_tool_path(completed.stdout, self.platform)


__all__ = ["NativeBuildConfig", "PgConfig"]
