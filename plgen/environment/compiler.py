"""Invocation of the Go toolchain on the generated module."""

from __future__ import annotations

import subprocess
from pathlib import Path

from ..errors import ToolFailedError, ToolNotFoundError
from ..logging import get_logger
from .hostpaths import is_windows


def shared_library_name(name: str, platform: str | None = None) -> str:
    return f"{name}.dll" if is_windows(platform) else f"{name}.so"


class GoCompiler:
    """Builds the generated package into a C shared library."""

    def __init__(self, executable: str = "go", platform: str | None = None) -> None:
        self.executable = executable
        self.platform = platform
        self.logger = get_logger("compiler")

    def build(self, build_dir: Path, name: str) -> Path:
        output = shared_library_name(name, self.platform)
        args = [self.executable, "build", "-buildmode=c-shared", "-o", output]
        self.logger.info("Compiling %s in %s", output, build_dir)
        self.logger.debug("Running %s", " ".join(args))
        try:
            subprocess.run(args, cwd=build_dir, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"Unable to locate '{self.executable}'. Install Go from https://go.dev/dl/."
            ) from exc
        except subprocess.CalledProcessError as exc:
            details = (exc.stderr or exc.stdout or "").strip()
            raise ToolFailedError(f"go build failed with exit code {exc.returncode}:\n{details}") from exc
        return Path(build_dir) / output


__all__ = ["GoCompiler", "shared_library_name"]
