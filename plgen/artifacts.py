"""Writes the PostgreSQL packaging files for a generated extension."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Sequence

from .codewriter import code_writer, template_environment
from .errors import EnvironmentSetupError
from .logging import get_logger
from .models import FunctionDescriptor

DEFAULT_VERSION = "0.1"


class ArtifactEmitter:
    """Renders the install script, control file and Makefile of an extension.

    Output depends only on the extension name, its version and the function
    descriptors, in order.
    """

    def __init__(
        self,
        name: str,
        functions: Sequence[FunctionDescriptor],
        version: str = DEFAULT_VERSION,
    ) -> None:
        self.name = name
        self.functions = list(functions)
        self.version = version
        self.logger = get_logger("artifacts")

    @property
    def sql_filename(self) -> str:
        return f"{self.name}--{self.version}.sql"

    @property
    def control_filename(self) -> str:
        return f"{self.name}.control"

    @property
    def makefile_filename(self) -> str:
        return "Makefile"

    def render_sql(self) -> str:
        statements = [code_writer(function).registration_statement(self.name) for function in self.functions]
        return self._render("extension.sql.j2", statements=statements)

    def render_control(self) -> str:
        return self._render("extension.control.j2")

    def render_makefile(self) -> str:
        return self._render("Makefile.j2")

    def write_sql(self, directory: Path) -> Path:
        return self._write(Path(directory) / self.sql_filename, self.render_sql())

    def write_control(self, directory: Path) -> Path:
        return self._write(Path(directory) / self.control_filename, self.render_control())

    def write_makefile(self, directory: Path) -> Path:
        return self._write(Path(directory) / self.makefile_filename, self.render_makefile())

    def write_all(self, directory: Path) -> List[Path]:
        return [self.write_sql(directory), self.write_control(directory), self.write_makefile(directory)]

    def _render(self, template: str, **context: object) -> str:
        values: Dict[str, object] = {"name": self.name, "version": self.version}
        values.update(context)
        return template_environment().get_template(template).render(**values)

    def _write(self, path: Path, text: str) -> Path:
        try:
            path.write_text(text, encoding="utf-8")
            os.chmod(path, 0o644)
        except OSError as exc:
            raise EnvironmentSetupError(f"Cannot write file {path}: {exc}") from exc
        self.logger.debug("Wrote %s", path)
        return path


__all__ = ["ArtifactEmitter", "DEFAULT_VERSION"]
