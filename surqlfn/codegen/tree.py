"""Group statements into a namespace tree keyed by path segment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from surqlfn.dsl.ast import FunctionStatement


@dataclass(slots=True)
class FunctionTree:
    """Functions defined at this level plus nested modules.

    ``fn::a::b::c`` ends up as function ``c`` inside module ``b`` inside module
    ``a``.  Module order follows first appearance in the statement list.
    """

    functions: list[FunctionStatement] = field(default_factory=list)
    modules: dict[str, "FunctionTree"] = field(default_factory=dict)

    @classmethod
    def from_statements(cls, statements: Iterable[FunctionStatement]) -> "FunctionTree":
        root = cls()
        for statement in statements:
            node = root
            for segment in statement.namespace:
                node = node.modules.setdefault(segment, cls())
            node.functions.append(statement)
        return root

    def walk(self, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], "FunctionTree"]]:
        """Depth-first traversal yielding ``(module_path, subtree)`` pairs."""

        yield prefix, self
        for name, child in self.modules.items():
            yield from child.walk(prefix + (name,))

    def __len__(self) -> int:
        return len(self.functions) + sum(len(child) for child in self.modules.values())


__all__ = ["FunctionTree"]
