"""Assembles the temporary Go module that builds into the extension library."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import List, Sequence

from .analyzer import ENTRY_PACKAGE, SourceAnalyzer, import_specs
from .codewriter import CodeWriter, code_writers, template_environment
from .environment.hostpaths import apply_host_flags
from .environment.native import NativeBuildConfig
from .environment.templates import TemplateSourceProvider
from .errors import EnvironmentSetupError, TemplateMarkerError
from .golang.formatter import Formatter, SyntaxCheckFormatter
from .golang.parser import node_text
from .logging import get_logger
from .models import FunctionDescriptor, SourcePackage
from .sanitizer import GLUE_IMPORT, sanitize

DECLARATION_MARKER = "//{funcdec}"
DEFAULT_INCLUDE_DIR = "/usr/include/postgresql/server"

USER_PACKAGE_FILE = "package.go"
GLUE_FILE = "pl.go"
WRAPPERS_FILE = "methods.go"

_PACKAGE_CLAUSE = re.compile(r"^package\s+\w+", re.MULTILINE)


def merge_package(package: SourcePackage) -> str:
    """Merge the package's files into a single Go source file.

    Imports are de-duplicated in first-seen order; every other top-level node
    (declarations and free comments) keeps its file and source order. Comments
    above the ``package`` clause are package docs and are dropped.
    """
    imports: List[str] = []
    chunks: List[str] = []
    for file in package.files:
        for spec in import_specs(file):
            text = node_text(spec, file.source)
            if text not in imports:
                imports.append(text)

        previous = None
        seen_clause = False
        for node in file.tree.root_node.named_children:
            if node.type == "package_clause":
                seen_clause = True
                continue
            if not seen_clause or node.type == "import_declaration":
                continue
            text = node_text(node, file.source)
            if previous is not None and chunks:
                gap = node.start_point[0] - previous.end_point[0]
                if gap == 0:
                    chunks[-1] += (" " if "comment" in (node.type, previous.type) else "; ") + text
                    previous = node
                    continue
                if gap == 1 and previous.type == "comment":
                    chunks[-1] += "\n" + text
                    previous = node
                    continue
            chunks.append(text)
            previous = node

    parts = [f"package {package.name}"]
    if imports:
        parts.append("import (\n" + "".join(f"\t{spec}\n" for spec in imports) + ")")
    parts.extend(chunks)
    return "\n\n".join(parts) + "\n"


class ModuleWriter:
    """Writes the generated Go module for one package into a build directory."""

    def __init__(
        self,
        package_name: str,
        doc: str,
        package: SourcePackage,
        functions: Sequence[CodeWriter],
        *,
        template_provider: TemplateSourceProvider,
        native_config: NativeBuildConfig,
        formatter: Formatter | None = None,
        glue_import: str = GLUE_IMPORT,
        platform: str | None = None,
    ) -> None:
        self.package_name = package_name
        self.doc = doc
        self.package = package
        self.functions = tuple(functions)
        self.template_provider = template_provider
        self.native_config = native_config
        self.formatter = formatter or SyntaxCheckFormatter()
        self.glue_import = glue_import
        self.platform = platform
        self.logger = get_logger("module_writer")

    @classmethod
    def from_directory(
        cls,
        package_path: str | Path,
        *,
        analyzer: SourceAnalyzer | None = None,
        **options: object,
    ) -> "ModuleWriter":
        """Parse the Go package at ``package_path`` and prepare its writer."""
        package, functions = (analyzer or SourceAnalyzer()).analyze(package_path)
        return cls(
            package.directory.name,
            package.doc,
            package,
            code_writers(functions),
            **options,  # type: ignore[arg-type]
        )

    @property
    def descriptors(self) -> List[FunctionDescriptor]:
        return [writer.function for writer in self.functions]

    def write_module(self, build_dir: str | Path | None = None) -> Path:
        """Write package.go, pl.go and methods.go; return the build directory."""
        target = self._prepare_dir(build_dir)
        self.logger.info("Writing module %s to %s", self.package_name, target)
        self.write_user_package(target)
        self.write_glue(target)
        self.write_wrappers(target)
        return target

    def write_user_package(self, build_dir: Path) -> Path:
        return self._write(build_dir / USER_PACKAGE_FILE, self.render_user_package())

    def write_glue(self, build_dir: Path) -> Path:
        return self._write(build_dir / GLUE_FILE, self.render_glue(self.template_provider.read()))

    def write_wrappers(self, build_dir: Path) -> Path:
        return self._write(build_dir / WRAPPERS_FILE, self.render_wrappers())

    def render_user_package(self) -> str:
        sanitized = sanitize(self.package, self.glue_import)
        return self.formatter.format(merge_package(sanitized), USER_PACKAGE_FILE)

    def render_glue(self, template: str) -> str:
        """Rewrite the glue template for this module."""
        if DECLARATION_MARKER not in template:
            raise TemplateMarkerError(
                f"Glue template does not contain the declaration marker {DECLARATION_MARKER}"
            )
        source, count = _PACKAGE_CLAUSE.subn(f"package {ENTRY_PACKAGE}", template, count=1)
        if not count:
            raise TemplateMarkerError("Glue template has no package clause")

        include_dir = self.native_config.include_path()
        self.logger.debug("PostgreSQL server headers in %s", include_dir)
        source = source.replace(DEFAULT_INCLUDE_DIR, include_dir, 1)
        source = apply_host_flags(source, include_dir, self.native_config.library_path, self.platform)

        declarations = "".join(writer.declaration() for writer in self.functions)
        return source.replace(DECLARATION_MARKER, declarations, 1)

    def render_wrappers(self) -> str:
        template = template_environment().get_template("methods.go.j2")
        source = template.render(
            package=ENTRY_PACKAGE,
            wrappers=[writer.wrapper_implementation() for writer in self.functions],
        )
        return self.formatter.format(source, WRAPPERS_FILE)

    @staticmethod
    def _prepare_dir(build_dir: str | Path | None) -> Path:
        try:
            if build_dir is None:
                return Path(tempfile.mkdtemp(prefix="plgen-")).resolve()
            path = Path(build_dir).resolve()
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EnvironmentSetupError(f"Cannot get tempdir: {exc}") from exc
        return path

    def _write(self, path: Path, text: str) -> Path:
        try:
            path.write_text(text, encoding="utf-8")
            os.chmod(path, 0o644)
        except OSError as exc:
            raise EnvironmentSetupError(f"Cannot write file {path}: {exc}") from exc
        self.logger.debug("Wrote %s", path)
        return path


__all__ = [
    "DECLARATION_MARKER",
    "DEFAULT_INCLUDE_DIR",
    "GLUE_FILE",
    "ModuleWriter",
    "USER_PACKAGE_FILE",
    "WRAPPERS_FILE",
    "merge_package",
]
