"""Pipeline orchestration for inspect/build flows."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .analyzer import SourceAnalyzer
from .artifacts import ArtifactEmitter
from .config import PlgenConfig, load_config
from .environment.compiler import GoCompiler
from .environment.native import NativeBuildConfig, PgConfig
from .environment.templates import TemplateSourceProvider
from .errors import EnvironmentSetupError
from .golang.formatter import Formatter, create_formatter
from .logging import get_logger
from .models import FunctionDescriptor
from .module_writer import ModuleWriter

_MODULE_FILES = ("go.mod", "go.sum")


@dataclass
class BuildOutcome:
    """Result of a build run."""

    build_dir: Path
    output_dir: Path
    functions: List[FunctionDescriptor]
    artifacts: List[Path] = field(default_factory=list)
    library: Optional[Path] = None


class Pipeline:
    """Coordinates analysis, module generation, packaging and compilation."""

    def __init__(
        self,
        config: PlgenConfig,
        *,
        analyzer: SourceAnalyzer | None = None,
        template_provider: TemplateSourceProvider | None = None,
        native_config: NativeBuildConfig | None = None,
        formatter: Formatter | None = None,
        compiler: GoCompiler | None = None,
        platform: str | None = None,
    ) -> None:
        self.config = config
        self.analyzer = analyzer or SourceAnalyzer()
        self.template_provider = template_provider or TemplateSourceProvider(config.template)
        self.native_config = native_config or PgConfig(config.tools.pg_config, platform)
        self._formatter = formatter
        self.compiler = compiler or GoCompiler(config.tools.go, platform)
        self.platform = platform
        self.logger = get_logger("pipeline")

    @classmethod
    def for_package(cls, package_path: str | Path, **options: object) -> "Pipeline":
        return cls(load_config(Path(package_path)), **options)  # type: ignore[arg-type]

    @property
    def formatter(self) -> Formatter:
        if self._formatter is None:
            self._formatter = create_formatter(self.config.formatter, gofmt=self.config.tools.gofmt)
        return self._formatter

    def inspect(self) -> ModuleWriter:
        """Analyse the package without writing anything."""
        self.logger.info("Analysing %s", self.config.root)
        return ModuleWriter.from_directory(
            self.config.root,
            analyzer=self.analyzer,
            template_provider=self.template_provider,
            native_config=self.native_config,
            formatter=self.formatter,
            glue_import=self.config.template.module,
            platform=self.platform,
        )

    def build(self, build_dir: str | Path | None = None) -> BuildOutcome:
        """Generate the module and packaging files, compile and export them."""
        writer = self.inspect()
        target = writer.write_module(build_dir)

        emitter = ArtifactEmitter(writer.package_name, writer.descriptors, self.config.version)
        artifacts = emitter.write_all(target)
        self.logger.info("Wrote %s", ", ".join(path.name for path in artifacts))

        library = None
        if self.config.compile:
            self._copy_module_files(target)
            library = self.compiler.build(target, writer.package_name)

        output_dir = self._export(artifacts + ([library] if library else []))
        return BuildOutcome(
            build_dir=target,
            output_dir=output_dir,
            functions=writer.descriptors,
            artifacts=artifacts,
            library=library,
        )

    def _copy_module_files(self, build_dir: Path) -> None:
        for name in _MODULE_FILES:
            source = self.config.root / name
            if source.is_file():
                shutil.copyfile(source, build_dir / name)

    def _export(self, paths: List[Path]) -> Path:
        output_dir = Path(self.config.output_dir or self.config.root / "build")
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            for path in paths:
                shutil.copyfile(path, output_dir / path.name)
        except OSError as exc:
            raise EnvironmentSetupError(f"Cannot export build output to {output_dir}: {exc}") from exc
        self.logger.info("Extension files copied to %s", output_dir)
        return output_dir


__all__ = ["BuildOutcome", "Pipeline"]
