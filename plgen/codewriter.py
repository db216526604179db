"""Per-function code generation: declarations, cgo wrappers and SQL."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Type

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import FunctionDescriptor, Shape, to_unexported
from .typemap import sql_type

TEMPLATES_DIR = Path(__file__).with_name("templates")

# Package-scope names declared by pl.go and methods.go (fmt is imported there).
GLUE_NAMES = frozenset({"fmt", "raiseError", "toDatum", "funcInfo", "Datum"})

# Names an unexported user function must not take: the glue names plus the
# identifiers bound inside every wrapper.
RESERVED_NAMES = GLUE_NAMES | {"main", "fcinfo", "result"}

# Unquoted PostgreSQL keywords that cannot be used as parameter names.
_SQL_RESERVED = frozenset(
    {
        "all", "analyse", "analyze", "and", "any", "array", "as", "asc", "both", "case", "cast",
        "check", "collate", "column", "constraint", "create", "default", "desc", "distinct", "do",
        "else", "end", "except", "false", "for", "foreign", "from", "grant", "group", "having",
        "in", "into", "leading", "limit", "not", "null", "offset", "on", "only", "or", "order",
        "primary", "references", "select", "table", "then", "to", "true", "union", "unique",
        "user", "using", "when", "where", "window", "with",
    }
)


@lru_cache(maxsize=None)
def template_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    """Jinja environment shared by the code writers and the artifact emitter."""
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


def sql_identifier(name: str) -> str:
    if name.lower() in _SQL_RESERVED:
        return f'"{name}"'
    return name


def sql_literal(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


@dataclass(frozen=True)
class _Argument:
    var: str
    go_type: str

    @property
    def ref(self) -> str:
        return f"&{self.var}"


class CodeWriter(ABC):
    """Renders the generated code for one exported function.

    Subclasses only choose the wrapper template for their result shape; the
    argument marshaling and the panic guard are shared.
    """

    shape: Shape
    wrapper_template: str

    def __init__(self, function: FunctionDescriptor) -> None:
        self.function = function

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def callee(self) -> str:
        return to_unexported(self.function.name)

    def declaration(self) -> str:
        """C forward declaration spliced into the glue layer's preamble."""
        return self._render("declaration.c.j2", name=self.name)

    def wrapper_implementation(self) -> str:
        """cgo-exported Go function bridging fmgr calls to the user function."""
        # Callees start with a lowercase letter, so underscore locals never shadow them.
        args = [
            _Argument(var=f"_arg{index}", go_type=parameter.go_type)
            for index, parameter in enumerate(self.function.parameters)
        ]
        return self._render(
            self.wrapper_template,
            name=self.name,
            callee=self.callee,
            args=args,
            call_args=", ".join(arg.var for arg in args),
        )

    def registration_statement(self, module: str) -> str:
        """``CREATE FUNCTION`` statement binding the SQL name to the module symbol."""
        context = f"parameters of {self.name}"
        parameters = [
            f"{sql_identifier(parameter.name)} {sql_type(parameter.go_type, context)}"
            for parameter in self.function.parameters
        ]
        argument_types = [sql_type(parameter.go_type, context) for parameter in self.function.parameters]
        doc = self.function.doc.strip()
        return self._render(
            "function.sql.j2",
            sql_name=self.name.lower(),
            name=self.name,
            module=module,
            parameters=parameters,
            argument_types=argument_types,
            returns=self._returns(),
            comment=sql_literal(doc) if doc else "",
        )

    def _returns(self) -> str:
        value_type = self.function.value_type
        if value_type is None:
            return "void"
        return sql_type(value_type, f"results of {self.name}")

    @staticmethod
    def _render(template: str, **context: object) -> str:
        return template_environment().get_template(template).render(**context)


class VoidFunction(CodeWriter):
    shape = Shape.VOID
    wrapper_template = "wrappers/void.go.j2"


class ValueFunction(CodeWriter):
    shape = Shape.VALUE
    wrapper_template = "wrappers/value.go.j2"


class ValueOrErrorFunction(CodeWriter):
    shape = Shape.VALUE_OR_ERROR
    wrapper_template = "wrappers/value_or_error.go.j2"


class ErrorFunction(CodeWriter):
    shape = Shape.ERROR
    wrapper_template = "wrappers/error.go.j2"


_WRITERS: Dict[Shape, Type[CodeWriter]] = {
    writer.shape: writer for writer in (VoidFunction, ValueFunction, ValueOrErrorFunction, ErrorFunction)
}


def code_writer(function: FunctionDescriptor) -> CodeWriter:
    """Return the writer variant matching the function's result shape."""
    return _WRITERS[function.shape](function)


def code_writers(functions: List[FunctionDescriptor]) -> List[CodeWriter]:
    return [code_writer(function) for function in functions]


__all__ = [
    "CodeWriter",
    "ErrorFunction",
    "GLUE_NAMES",
    "RESERVED_NAMES",
    "TEMPLATES_DIR",
    "ValueFunction",
    "ValueOrErrorFunction",
    "VoidFunction",
    "code_writer",
    "code_writers",
    "sql_identifier",
    "sql_literal",
    "template_environment",
]
