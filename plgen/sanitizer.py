"""Rewrites the user's package so it can live beside the generated sources."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, List, Mapping, Set, Tuple

from .analyzer import top_level_functions
from .codewriter import GLUE_NAMES, RESERVED_NAMES
from .errors import NameCollisionError
from .golang.parser import leading_comments, node_text, parse
from .models import GoFile, SourcePackage, is_exported, to_unexported

GLUE_IMPORT = "github.com/algonode/plgo"
ENTRY_FUNCTION = "main"

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else", "fallthrough",
        "for", "func", "go", "goto", "if", "import", "interface", "map", "package", "range",
        "return", "select", "struct", "switch", "type", "var",
    }
)


@dataclass(frozen=True)
class _Edit:
    start: int
    end: int
    text: bytes = b""


def sanitize(package: SourcePackage, glue_import: str = GLUE_IMPORT) -> SourcePackage:
    """Return a copy of ``package`` without constructs that clash with generated code.

    Removes ``func main``, renames exported functions (and their uses) to their
    unexported form and resolves references to the glue package, which will be
    compiled into the same package. The input package is left untouched.
    """
    renames = {
        name: to_unexported(name)
        for file in package.files
        for name in _function_names(file)
        if is_exported(name)
    }
    _check_collisions(package, renames)
    files = tuple(_sanitize_file(file, renames, glue_import) for file in package.files)
    return replace(package, files=files)


def top_level_names(file: GoFile) -> Set[str]:
    """Names declared at package scope (methods excluded)."""
    names: Set[str] = set(_function_names(file))
    for decl in file.tree.root_node.named_children:
        if decl.type not in {"type_declaration", "var_declaration", "const_declaration"}:
            continue
        for spec in _walk(decl):
            if spec.type in {"type_spec", "type_alias", "var_spec", "const_spec"}:
                for name in spec.children_by_field_name("name"):
                    names.add(node_text(name, file.source))
    return names


def _function_names(file: GoFile) -> List[str]:
    names = []
    for node in top_level_functions(file):
        name = node.child_by_field_name("name")
        if name is not None:
            names.append(node_text(name, file.source))
    return names


def _check_collisions(package: SourcePackage, renames: Mapping[str, str]) -> None:
    existing: Set[str] = set()
    for file in package.files:
        existing |= top_level_names(file)
    for source, target in renames.items():
        if target in GO_KEYWORDS:
            raise NameCollisionError(
                f"Cannot unexport {source}: '{target}' is a Go keyword; rename the function in {package.directory}"
            )
        if target in existing or target in RESERVED_NAMES:
            raise NameCollisionError(
                f"Cannot unexport {source}: '{target}' is already declared or reserved in {package.directory}"
            )
    clashes = sorted(existing & GLUE_NAMES)
    if clashes:
        raise NameCollisionError(
            f"{', '.join(clashes)} in {package.directory} clash with declarations of the generated glue code"
        )


def _sanitize_file(file: GoFile, renames: Mapping[str, str], glue_import: str) -> GoFile:
    source = file.source
    deletions = _entry_point_deletions(file) + _glue_import_deletions(file, glue_import)
    aliases = _glue_aliases(file, glue_import)

    edits: List[_Edit] = list(deletions)
    for node in _walk(file.tree.root_node):
        if _inside(node, deletions):
            continue
        if node.type == "selector_expression" and aliases:
            operand = node.child_by_field_name("operand")
            field = node.child_by_field_name("field")
            if operand is not None and operand.type == "identifier" and node_text(operand, source) in aliases:
                edits.append(_Edit(node.start_byte, node.end_byte, node_text(field, source).encode("utf-8")))
        elif node.type == "qualified_type" and aliases:
            qualifier = node.child_by_field_name("package")
            if qualifier is not None and node_text(qualifier, source) in aliases:
                name = node_text(node.child_by_field_name("name"), source)
                edits.append(_Edit(node.start_byte, node.end_byte, name.encode("utf-8")))
        elif node.type == "identifier" and not _is_composite_key(node):
            target = renames.get(node_text(node, source))
            if target is not None and not _inside(node, edits):
                edits.append(_Edit(node.start_byte, node.end_byte, target.encode("utf-8")))

    if not edits:
        return file
    rewritten = _apply(source, edits)
    return GoFile(path=file.path, source=rewritten, tree=parse(rewritten))


def _entry_point_deletions(file: GoFile) -> List[_Edit]:
    edits = []
    for node in top_level_functions(file):
        name = node.child_by_field_name("name")
        if name is None or node_text(name, file.source) != ENTRY_FUNCTION:
            continue
        comments = leading_comments(node, file.source)
        start = comments[0].start_byte if comments else node.start_byte
        edits.append(_Edit(start, _through_newline(file.source, node.end_byte)))
    return edits


def _glue_import_specs(file: GoFile, glue_import: str) -> Iterator[Tuple[object, object]]:
    for decl in file.tree.root_node.named_children:
        if decl.type != "import_declaration":
            continue
        for spec in _walk(decl):
            if spec.type != "import_spec":
                continue
            path = spec.child_by_field_name("path")
            if path is not None and node_text(path, file.source).strip('"`') == glue_import:
                yield decl, spec


def _glue_import_deletions(file: GoFile, glue_import: str) -> List[_Edit]:
    edits = []
    for decl, spec in _glue_import_specs(file, glue_import):
        specs = [node for node in _walk(decl) if node.type == "import_spec"]
        target = decl if len(specs) == 1 else spec
        edits.append(_Edit(target.start_byte, _through_newline(file.source, target.end_byte)))
    return edits


def _glue_aliases(file: GoFile, glue_import: str) -> Set[str]:
    aliases = set()
    for _, spec in _glue_import_specs(file, glue_import):
        alias = spec.child_by_field_name("name")
        if alias is None:
            aliases.add(glue_import.rsplit("/", 1)[-1])
        elif alias.type == "package_identifier":
            aliases.add(node_text(alias, file.source))
    return aliases


def _walk(node) -> Iterator:  # type: ignore[no-untyped-def]
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _is_composite_key(node) -> bool:  # type: ignore[no-untyped-def]
    """True for the key of a composite literal element such as `Ops{Add: 1}`."""
    element = node
    parent = node.parent
    if parent is not None and parent.type == "literal_element":
        element, parent = parent, parent.parent
    if parent is None or parent.type != "keyed_element" or not parent.named_children:
        return False
    key = parent.named_children[0]
    return key.start_byte == element.start_byte and key.end_byte == element.end_byte


def _inside(node, edits: List[_Edit]) -> bool:  # type: ignore[no-untyped-def]
    return any(edit.start <= node.start_byte and node.end_byte <= edit.end for edit in edits)


def _through_newline(source: bytes, end: int) -> int:
    return end + 1 if source[end : end + 1] == b"\n" else end


def _apply(source: bytes, edits: List[_Edit]) -> bytes:
    result = source
    for edit in sorted(edits, key=lambda item: item.start, reverse=True):
        result = result[: edit.start] + edit.text + result[edit.end :]
    return result


__all__ = ["ENTRY_FUNCTION", "GLUE_IMPORT", "sanitize", "top_level_names"]
