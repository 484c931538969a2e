"""Render parsed statements as an importable Python module.

The generated module targets any SurrealDB client exposing an awaitable
``query(sql, vars)`` method (the official ``surrealdb`` SDK's async clients do).
It contains:

* ``STORED_FUNCTIONS``: the source of every included file, joined by newlines,
* ``define_functions(db)``: sends those definitions to the database,
* one ``async def`` per stored function, calling ``RETURN fn::...($args)``.

A function, a namespace class and the generated helpers never share a Python
name within one scope; such clashes raise :class:`ValueError`.

Functions with a multi-segment path are placed in nested namespace classes, so
``fn::ns::inner`` becomes ``ns.inner(db, ...)``.  Leading comments become the
docstring.  Type hints come from :func:`python_type`, a total mapping over the
closed :data:`~surqlfn.dsl.kind.Kind` set.
"""

from __future__ import annotations

import keyword
from typing import Iterable, List, Sequence

from surqlfn.dsl.ast import FunctionStatement, iter_kinds
from surqlfn.dsl.kind import Array, Either, Geometry, Kind, Option, Primitive, Record, Set
from surqlfn.telemetry.logger import get_logger

from .alias import Alias
from .tree import FunctionTree

_LOGGER = get_logger("surqlfn.codegen")

CONNECTION = "db"
SOURCES_NAME = "STORED_FUNCTIONS"
SOURCE_SEPARATOR = "\n"

_PRIMITIVE_TYPES = {
    Primitive.ANY: "Any",
    Primitive.BOOL: "bool",
    Primitive.BYTES: "bytes",
    Primitive.DATETIME: "datetime.datetime",
    Primitive.DECIMAL: "Decimal",
    Primitive.DURATION: "datetime.timedelta",
    Primitive.FLOAT: "float",
    Primitive.INT: "int",
    Primitive.NUMBER: "int | float | Decimal",
    Primitive.OBJECT: "dict[str, Any]",
    Primitive.POINT: "tuple[float, float]",
    Primitive.STRING: "str",
    Primitive.UUID: "UUID",
}

_HEADER = [
    "from __future__ import annotations",
    "",
    "import datetime",
    "from decimal import Decimal",
    "from typing import Any, Optional",
    "from uuid import UUID",
]


def python_type(kind: Kind) -> str:
    """Return the type hint used for a parameter of ``kind``."""

    if isinstance(kind, Primitive):
        return _PRIMITIVE_TYPES[kind]
    if isinstance(kind, Geometry):
        return "dict[str, Any]"
    if isinstance(kind, Record):
        return "str"
    if isinstance(kind, Option):
        return f"Optional[{python_type(kind.inner)}]"
    if isinstance(kind, (Array, Set)):
        return f"list[{python_type(kind.inner)}]"
    if isinstance(kind, Either):
        return " | ".join(python_type(item) for item in kind.kinds)
    raise TypeError(f"Unhandled kind {kind!r}")


def call_query(statement: FunctionStatement) -> str:
    """Return the SurrealQL used to invoke ``statement``."""

    arguments = ", ".join(f"${name}" for name, _ in statement.parameters)
    return f"RETURN {statement.qualified_name}({arguments})"


def render_module(
    statements: Sequence[FunctionStatement],
    sources: Iterable[str] = (),
    alias: Alias | None = None,
    *,
    origin: str = "",
) -> str:
    """Render the complete module source for ``statements``."""

    alias = alias or Alias()
    for kind in iter_kinds(statements):
        python_type(kind)
    tree = FunctionTree.from_statements(statements)
    title = "Bindings generated by surqlfn"
    title += f" from {origin}." if origin else "."
    lines: List[str] = [f'"""{title}"""', "", *_HEADER, "", ""]
    lines.append(f"{SOURCES_NAME} = {SOURCE_SEPARATOR.join(sources)!r}")
    lines.extend(["", ""])
    define_name = _python_name(alias.transform("define_functions"), "function")
    lines.extend(_emit_define(define_name))
    lines.extend(_emit_tree(tree, alias, indent=0, reserved=(SOURCES_NAME, define_name)))
    _LOGGER.info("rendered %d function wrapper(s)", len(tree))
    return "\n".join(lines).rstrip() + "\n"


def _emit_define(name: str) -> List[str]:
    return [
        f"async def {name}({CONNECTION}: Any) -> Any:",
        _indent('"""Define every included function on the given connection."""', 1),
        _indent(f"return await {CONNECTION}.query({SOURCES_NAME})", 1),
    ]


def _emit_tree(
    tree: FunctionTree,
    alias: Alias,
    indent: int,
    prefix: tuple[str, ...] = (),
    reserved: Sequence[str] = (),
) -> List[str]:
    _check_names(tree, alias, prefix, reserved)
    lines: List[str] = []
    for statement in tree.functions:
        lines.extend(["", ""] if indent == 0 else [""])
        lines.extend(_emit_function(statement, alias, indent))
    for name, child in tree.modules.items():
        lines.extend(["", ""] if indent == 0 else [""])
        lines.append(_indent(f"class {_python_name(name, 'module')}:", indent))
        lines.append(_indent(f'"""Functions under ``fn::...::{name}``."""', indent + 1))
        lines.extend(_emit_tree(child, alias, indent + 1, prefix + (name,)))
    return lines


def _check_names(
    tree: FunctionTree, alias: Alias, prefix: tuple[str, ...], reserved: Sequence[str]
) -> None:
    """Reject two bindings that would share one Python name in the same scope."""

    owners = {name: "a generated helper" for name in reserved}
    claims = [
        (_python_name(alias.transform(statement.name), "function"), statement.qualified_name)
        for statement in tree.functions
    ]
    claims.extend(
        (_python_name(name, "module"), "module fn::" + "::".join(prefix + (name,)))
        for name in tree.modules
    )
    for name, owner in claims:
        if name in owners:
            raise ValueError(f"{owner}: Python name {name!r} is already used by {owners[name]}")
        owners[name] = owner


def _emit_function(statement: FunctionStatement, alias: Alias, indent: int) -> List[str]:
    name = _python_name(alias.transform(statement.name), "function")
    names = _parameter_names(statement)
    parameters = ", ".join(
        [f"{CONNECTION}: Any"]
        + [f"{py_name}: {python_type(kind)}" for py_name, (_, kind) in zip(names, statement.parameters)]
    )
    lines: List[str] = []
    if indent > 0:
        lines.append(_indent("@staticmethod", indent))
    lines.append(_indent(f"async def {name}({parameters}) -> Any:", indent))
    if statement.comments:
        lines.extend(_emit_docstring(statement.comments, indent + 1))
    bindings = ", ".join(
        f"{ident.name!r}: {py_name}" for py_name, (ident, _) in zip(names, statement.parameters)
    )
    query = call_query(statement)
    lines.append(_indent(f"return await {CONNECTION}.query({query!r}, {{{bindings}}})", indent + 1))
    return lines


def _parameter_names(statement: FunctionStatement) -> List[str]:
    """Python argument names for the statement's parameters.

    Keywords such as ``in`` get a trailing underscore; the query variables keep
    their original names.
    """

    names: List[str] = []
    seen = {CONNECTION}
    for ident, _ in statement.parameters:
        name = ident.name + "_" if keyword.iskeyword(ident.name) else ident.name
        name = _python_name(name, "parameter")
        if name in seen:
            raise ValueError(
                f"{statement.qualified_name}: parameter {name!r} clashes with another argument"
            )
        seen.add(name)
        names.append(name)
    return names


def _emit_docstring(comments: Sequence[str], indent: int) -> List[str]:
    escaped = [line.replace("\\", "\\\\").replace('"', '\\"') for line in comments]
    if len(escaped) == 1:
        return [_indent(f'"""{escaped[0]}"""', indent)]
    return [
        _indent(f'"""{escaped[0]}', indent),
        *(_indent(line, indent) if line else "" for line in escaped[1:]),
        _indent('"""', indent),
    ]


def _python_name(name: str, role: str) -> str:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"{role} name {name!r} is not a valid Python identifier")
    return name


def _indent(text: str, level: int) -> str:
    return "    " * level + text


__all__ = ["call_query", "python_type", "render_module"]
