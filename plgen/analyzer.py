"""Source analyzer turning a Go package directory into function descriptors."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

from .errors import (
    MultiplePackagesError,
    NotEntryPackageError,
    PackageParseError,
    StructuralError,
    UnsupportedSignatureError,
)
from .golang.parser import comment_text, first_error, leading_comments, node_text, parse
from .logging import get_logger
from .models import FunctionDescriptor, GoFile, Parameter, SourcePackage, is_exported
from .typemap import check_results, normalize_type, sql_type

ENTRY_PACKAGE = "main"
GO_SUFFIX = ".go"
TEST_SUFFIX = "_test.go"


def is_test_file(name: str) -> bool:
    """Go test files never take part in the generated module."""
    return name.endswith(TEST_SUFFIX)


def is_source_file(path: Path) -> bool:
    return path.is_file() and path.name.endswith(GO_SUFFIX) and not is_test_file(path.name)


def package_name(file: GoFile) -> str | None:
    """Return the identifier of the file's ``package`` clause."""
    for child in file.tree.root_node.named_children:
        if child.type == "package_clause":
            for part in child.named_children:
                if part.type == "package_identifier":
                    return node_text(part, file.source)
    return None


def import_specs(file: GoFile) -> Iterator:
    """Yield every import spec of the file, in source order."""
    for decl in file.tree.root_node.named_children:
        if decl.type != "import_declaration":
            continue
        for child in decl.named_children:
            if child.type == "import_spec":
                yield child
            elif child.type == "import_spec_list":
                yield from (spec for spec in child.named_children if spec.type == "import_spec")


def import_paths(file: GoFile) -> List[str]:
    paths = []
    for spec in import_specs(file):
        path = spec.child_by_field_name("path")
        if path is not None:
            paths.append(node_text(path, file.source).strip('"`'))
    return paths


def top_level_functions(file: GoFile) -> Iterator:
    """Yield plain (receiver-less) function declarations in source order."""
    for child in file.tree.root_node.named_children:
        if child.type == "function_declaration":
            yield child


class SourceAnalyzer:
    """Parses a Go package and enumerates its exported functions."""

    def __init__(self, entry_package: str = ENTRY_PACKAGE) -> None:
        self.entry_package = entry_package
        self.logger = get_logger("analyzer")

    def analyze(self, directory: str | Path) -> Tuple[SourcePackage, List[FunctionDescriptor]]:
        package = self.load_package(directory)
        functions = self.collect_functions(package)
        return package, functions

    def load_package(self, directory: str | Path) -> SourcePackage:
        """Parse every non-test Go file in ``directory`` into one package."""
        root = Path(directory).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Package directory not found: {root}")

        files = [self._parse_file(path) for path in sorted(root.iterdir()) if is_source_file(path)]
        self.logger.debug("Parsed %d Go files in %s", len(files), root)

        names: List[str] = []
        for file in files:
            name = package_name(file)
            if name is not None and name not in names:
                names.append(name)
        if len(names) > 1:
            raise MultiplePackagesError(
                f"More than one package in {root}: {', '.join(names)}"
            )
        if not names or names[0] != self.entry_package:
            raise NotEntryPackageError(f"No package {self.entry_package} in {root}")
        for file in files:
            if "C" in import_paths(file):
                raise StructuralError(f"{file.path}: cgo (import \"C\") is not supported in the user package")

        return SourcePackage(
            name=names[0],
            directory=root,
            files=tuple(files),
            doc=self._package_doc(files),
        )

    def collect_functions(self, package: SourcePackage) -> List[FunctionDescriptor]:
        """Build one descriptor per exported top-level function, in source order."""
        functions: List[FunctionDescriptor] = []
        for file in package.files:
            for node in top_level_functions(file):
                name_node = node.child_by_field_name("name")
                if name_node is None or not is_exported(node_text(name_node, file.source)):
                    continue
                functions.append(self._describe(node, file))
        self.logger.debug(
            "Found %d exported functions: %s",
            len(functions),
            ", ".join(function.name for function in functions) or "(none)",
        )
        return functions

    @staticmethod
    def _parse_file(path: Path) -> GoFile:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise PackageParseError(f"Cannot read {path}: {exc}") from exc
        tree = parse(source)
        error = first_error(tree.root_node)
        if error is not None:
            raise PackageParseError(
                f"Cannot parse package: {path}:{error.start_point[0] + 1}: syntax error"
            )
        return GoFile(path=path, source=source, tree=tree)

    @staticmethod
    def _package_doc(files: Sequence[GoFile]) -> str:
        doc = ""
        for file in files:
            clause = next(
                (child for child in file.tree.root_node.named_children if child.type == "package_clause"),
                None,
            )
            text = comment_text(leading_comments(clause, file.source), file.source) if clause else ""
            doc += text + "\n"
        return doc

    def _describe(self, node, file: GoFile) -> FunctionDescriptor:  # type: ignore[no-untyped-def]
        source = file.source
        name = node_text(node.child_by_field_name("name"), source)
        where = f"{name} ({file.path.name}:{node.start_point[0] + 1})"

        if node.child_by_field_name("type_parameters") is not None:
            raise UnsupportedSignatureError(f"{where}: generic functions cannot be exported")

        parameters: List[Parameter] = []
        for raw_type, names in self._fields(node.child_by_field_name("parameters"), source, where):
            sql_type(raw_type, f"parameters of {name}")
            for param_name in names or [""]:
                if not param_name or param_name == "_":
                    param_name = f"arg{len(parameters)}"
                parameters.append(Parameter(name=param_name, go_type=normalize_type(raw_type)))

        raw_results = self._results(node.child_by_field_name("result"), source, where)
        check_results(name, raw_results)
        results = tuple(normalize_type(go_type) for go_type in raw_results)

        doc = comment_text(leading_comments(node, source), source)
        return FunctionDescriptor(name=name, parameters=tuple(parameters), results=results, doc=doc)

    def _results(self, node, source: bytes, where: str) -> List[str]:  # type: ignore[no-untyped-def]
        if node is None:
            return []
        if node.type != "parameter_list":
            return [node_text(node, source).strip()]
        results: List[str] = []
        for go_type, names in self._fields(node, source, where):
            results.extend([go_type] * max(1, len(names)))
        return results

    @staticmethod
    def _fields(node, source: bytes, where: str) -> Iterator[Tuple[str, List[str]]]:  # type: ignore[no-untyped-def]
        if node is None:
            return
        for child in node.named_children:
            if child.type == "variadic_parameter_declaration":
                raise UnsupportedSignatureError(f"{where}: variadic parameters are not supported")
            if child.type != "parameter_declaration":
                continue
            go_type = node_text(child.child_by_field_name("type"), source).strip()
            names = [node_text(part, source) for part in child.children_by_field_name("name")]
            yield go_type, names


__all__ = [
    "ENTRY_PACKAGE",
    "SourceAnalyzer",
    "is_source_file",
    "import_paths",
    "import_specs",
    "is_test_file",
    "package_name",
    "top_level_functions",
]
