"""Go source parsing and formatting helpers."""

from .formatter import Formatter, GofmtFormatter, SyntaxCheckFormatter, create_formatter
from .parser import comment_text, first_error, get_parser, leading_comments, node_text, parse

__all__ = [
    "Formatter",
    "GofmtFormatter",
    "SyntaxCheckFormatter",
    "comment_text",
    "create_formatter",
    "first_error",
    "get_parser",
    "leading_comments",
    "node_text",
    "parse",
]
