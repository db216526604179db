"""Tree-sitter based Go code parsing."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Optional

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser, Tree


# Comment directives such as //go:noinline or //line are not part of the doc text.
_DIRECTIVE = re.compile(r"^(line |extern |export |[a-z0-9]+:[a-z0-9])")


@lru_cache(maxsize=1)
def _language() -> Language:
    return Language(tsgo.language())


def get_parser() -> Parser:
    """Return a tree-sitter parser for Go."""
    return Parser(_language())


def parse(source: bytes) -> Tree:
    return get_parser().parse(source)


def node_text(node: Node, source: bytes) -> str:
    """Get text content of a tree-sitter node."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def first_error(node: Node) -> Optional[Node]:
    """Find the first ERROR or MISSING node below ``node``, depth first."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = first_error(child)
        if found is not None:
            return found
    return node


def leading_comments(node: Node, source: bytes) -> List[Node]:
    """
    Return the comment group attached to ``node``.

    Go attaches a comment group to a declaration when the last comment ends
    on the line directly above it; consecutive comments must be adjacent too.
    """
    comments: List[Node] = []
    current = node
    prev = node.prev_named_sibling
    while prev is not None and prev.type == "comment":
        if current.start_point[0] - prev.end_point[0] > 1:
            break
        comments.insert(0, prev)
        current = prev
        prev = prev.prev_named_sibling
    return comments


def comment_text(comments: List[Node], source: bytes) -> str:
    """Strip comment markers and directives the way go/ast CommentGroup.Text does."""
    lines: List[str] = []
    for comment in comments:
        raw = node_text(comment, source)
        if raw.startswith("//"):
            body = raw[2:]
            if _DIRECTIVE.match(body):
                continue
            if body.startswith(" "):
                body = body[1:]
            lines.append(body.rstrip())
        elif raw.startswith("/*"):
            for line in raw[2:-2].splitlines():
                lines.append(line.rstrip())
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


__all__ = [
    "comment_text",
    "first_error",
    "get_parser",
    "leading_comments",
    "node_text",
    "parse",
]
