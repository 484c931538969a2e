"""Table names, decoded with the identifier quoting rules."""

from __future__ import annotations

from dataclasses import dataclass

from .combinators import separated_list1
from .common import commas, verbar
from .cursor import Cursor
from .ident import escape_ident, ident_raw


@dataclass(frozen=True, order=True, slots=True)
class Table:
    """A database table name.

    Structurally identical to :class:`~surqlfn.dsl.ident.Ident` but never equal
    to one, so parameter names and table references cannot be mixed up.
    """

    name: str

    def __str__(self) -> str:
        return escape_ident(self.name)


def table(cursor: Cursor) -> tuple[Cursor, Table]:
    cursor, value = ident_raw(cursor)
    return cursor, Table(value)


def tables(cursor: Cursor) -> tuple[Cursor, list[Table]]:
    """Comma separated list of one or more tables."""

    return separated_list1(commas, table)(cursor)


def record_tables(cursor: Cursor) -> tuple[Cursor, list[Table]]:
    """Pipe separated list of one or more tables, as used by ``record<...>``."""

    return separated_list1(verbar, table)(cursor)


def format_tables(values: "list[Table] | tuple[Table, ...]", separator: str = ", ") -> str:
    return separator.join(str(value) for value in values)


__all__ = ["Table", "format_tables", "record_tables", "table", "tables"]
