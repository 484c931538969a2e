"""Parsed representation of ``DEFINE FUNCTION`` statements.

The grammar produces a flat, ordered list of :class:`FunctionStatement`
objects.  Bodies are never retained; only the information needed to call a
stored function from client code survives: its documentation comments, its
namespaced path and its ordered, typed parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from .ident import Ident
from .kind import Kind, format_kind

Parameter = tuple[Ident, Kind]


@dataclass(slots=True)
class FunctionStatement:
    """One ``DEFINE FUNCTION fn::...`` definition.

    ``path`` holds the ``::`` separated segments after ``fn::``; a single
    segment denotes a root function, longer paths nest under intermediate
    modules.  ``parameters`` keeps declaration order because downstream callers
    bind arguments positionally.  Duplicate parameter names are accepted.
    """

    path: list[str]
    parameters: list[Parameter] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("function path must have at least one segment")

    @property
    def name(self) -> str:
        return self.path[-1]

    @property
    def namespace(self) -> list[str]:
        return self.path[:-1]

    @property
    def is_root(self) -> bool:
        return len(self.path) == 1

    @property
    def qualified_name(self) -> str:
        return "fn::" + "::".join(self.path)

    def parameter_names(self) -> list[str]:
        return [name.name for name, _ in self.parameters]

    def signature(self) -> str:
        """Render the header as it would appear in source, without a body."""

        params = ", ".join(f"${name}: {format_kind(kind)}" for name, kind in self.parameters)
        return f"{self.qualified_name}({params})"


StatementList = list[FunctionStatement]


def iter_kinds(statements: Sequence[FunctionStatement]) -> Iterator[Kind]:
    """Yield every parameter kind across ``statements`` in declaration order."""

    for statement in statements:
        for _, kind in statement.parameters:
            yield kind


__all__ = ["FunctionStatement", "Parameter", "StatementList", "iter_kinds"]
