"""Closed type grammar for function parameters.

A :data:`Kind` is one of the keyword variants in :class:`Primitive` or one of
the composite dataclasses below.  Composite kinds nest other kinds, always as a
fresh tree built bottom-up while parsing, so values are immutable, hashable and
acyclic.  ``str(kind)`` renders the canonical source spelling, which parses back
to an equal value.

Grammar (keywords are case-insensitive)::

    kind     := primitive
              | "option<" kind ">"
              | ("array" | "set") [ "<" kind [ "," N ] ">" ]
              | "record" [ "<" table ( "|" table )* ">" ]
              | "either<" kind ( "|" kind )+ ">"
              | "geometry<" subtype ( "|" subtype )* ">"
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Union

from .combinators import separated_list1
from .common import closechevron, commas, is_ident_char, openchevron, verbar
from .cursor import Cursor, DSLParseError
from .table import Table, format_tables, record_tables


class Primitive(Enum):
    """Keyword kinds that take no parameters."""

    ANY = "any"
    BOOL = "bool"
    BYTES = "bytes"
    DATETIME = "datetime"
    DECIMAL = "decimal"
    DURATION = "duration"
    FLOAT = "float"
    INT = "int"
    NUMBER = "number"
    OBJECT = "object"
    POINT = "point"
    STRING = "string"
    UUID = "uuid"

    def __str__(self) -> str:
        return self.value

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC


NUMERIC = frozenset({Primitive.FLOAT, Primitive.INT, Primitive.DECIMAL, Primitive.NUMBER})

GEOMETRY_SUBTYPES = (
    "feature",
    "point",
    "line",
    "polygon",
    "multipoint",
    "multiline",
    "multipolygon",
    "collection",
)


@dataclass(frozen=True, slots=True)
class Geometry:
    subtypes: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "subtypes", tuple(self.subtypes))
        if not self.subtypes:
            raise ValueError("geometry requires at least one subtype")
        unknown = [tag for tag in self.subtypes if tag not in GEOMETRY_SUBTYPES]
        if unknown:
            raise ValueError(f"unknown geometry subtype {unknown[0]!r}")

    def __str__(self) -> str:
        return f"geometry<{' | '.join(self.subtypes)}>"


@dataclass(frozen=True, slots=True)
class Record:
    """Record reference; an empty ``tables`` tuple accepts any table."""

    tables: tuple[Table, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", tuple(self.tables))

    def __str__(self) -> str:
        if not self.tables:
            return "record"
        return f"record<{format_tables(self.tables, ' | ')}>"


@dataclass(frozen=True, slots=True)
class Option:
    inner: "Kind"

    def __str__(self) -> str:
        return f"option<{self.inner}>"


@dataclass(frozen=True, slots=True)
class Array:
    inner: "Kind" = Primitive.ANY
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        _check_limit(self.limit)

    def __str__(self) -> str:
        return _format_collection("array", self.inner, self.limit)


@dataclass(frozen=True, slots=True)
class Set:
    inner: "Kind" = Primitive.ANY
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        _check_limit(self.limit)

    def __str__(self) -> str:
        return _format_collection("set", self.inner, self.limit)


@dataclass(frozen=True, slots=True)
class Either:
    kinds: tuple["Kind", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "kinds", tuple(self.kinds))
        if len(self.kinds) < 2:
            raise ValueError("either requires at least two kinds")

    def __str__(self) -> str:
        return f"either<{' | '.join(str(item) for item in self.kinds)}>"


Kind = Union[Primitive, Geometry, Record, Option, Array, Set, Either]

KIND_TYPES = (Primitive, Geometry, Record, Option, Array, Set, Either)


def format_kind(value: Kind) -> str:
    """Return the canonical source form of ``value``."""

    if not isinstance(value, KIND_TYPES):
        raise TypeError(f"not a kind: {value!r}")
    return str(value)


def _check_limit(limit: Optional[int]) -> None:
    if limit is not None and limit < 0:
        raise ValueError("collection limit must be non-negative")


def _format_collection(keyword: str, inner: Kind, limit: Optional[int]) -> str:
    if limit is None:
        if inner is Primitive.ANY:
            return keyword
        return f"{keyword}<{inner}>"
    return f"{keyword}<{inner}, {limit}>"


# ---------------------------------------------------------------------------
# Parser


def kind(cursor: Cursor) -> tuple[Cursor, Kind]:
    """Parse a single kind starting at ``cursor``."""

    after, word = cursor.take_while(is_ident_char)
    if not word:
        raise cursor.error("Expected a type")
    keyword = word.lower()
    if keyword in _PRIMITIVES:
        return after, _PRIMITIVES[keyword]
    composite = _COMPOSITES.get(keyword)
    if composite is None:
        raise cursor.error(f"Unknown type '{word}'")
    return composite(cursor, after)


_PRIMITIVES: Dict[str, Primitive] = {member.value: member for member in Primitive}


def _option(start: Cursor, cursor: Cursor) -> tuple[Cursor, Kind]:
    cursor, _ = openchevron(cursor)
    cursor, inner = kind(cursor)
    cursor, _ = closechevron(cursor)
    return cursor, Option(inner)


def _collection(factory: Callable[[Kind, Optional[int]], Kind]):
    def parse(start: Cursor, cursor: Cursor) -> tuple[Cursor, Kind]:
        if cursor.peek() != "<":
            return cursor, factory(Primitive.ANY, None)
        cursor, _ = openchevron(cursor)
        cursor, inner = kind(cursor)
        limit: Optional[int] = None
        if _at_comma(cursor):
            cursor, _ = commas(cursor)
            cursor, limit = _limit(cursor)
        cursor, _ = closechevron(cursor)
        return cursor, factory(inner, limit)

    return parse


def _at_comma(cursor: Cursor) -> bool:
    try:
        commas(cursor)
    except DSLParseError:
        return False
    return True


def _limit(cursor: Cursor) -> tuple[Cursor, int]:
    after, digits = cursor.take_while(lambda ch: ch.isascii() and ch.isdigit())
    if not digits:
        raise cursor.error("Expected a non-negative collection limit")
    return after, int(digits)


def _record(start: Cursor, cursor: Cursor) -> tuple[Cursor, Kind]:
    if cursor.peek() != "<":
        return cursor, Record()
    cursor, _ = openchevron(cursor)
    cursor, values = record_tables(cursor)
    cursor, _ = closechevron(cursor)
    return cursor, Record(tuple(values))


def _either(start: Cursor, cursor: Cursor) -> tuple[Cursor, Kind]:
    cursor, _ = openchevron(cursor)
    cursor, values = separated_list1(verbar, kind)(cursor)
    cursor, _ = closechevron(cursor)
    if len(values) < 2:
        raise start.error("either<...> requires at least two kinds")
    return cursor, Either(tuple(values))


def _geometry_subtype(cursor: Cursor) -> tuple[Cursor, str]:
    after, word = cursor.take_while(is_ident_char)
    subtype = word.lower()
    if subtype not in GEOMETRY_SUBTYPES:
        raise cursor.error(f"Unknown geometry subtype '{word}'")
    return after, subtype


def _geometry(start: Cursor, cursor: Cursor) -> tuple[Cursor, Kind]:
    cursor, _ = openchevron(cursor)
    cursor, values = separated_list1(verbar, _geometry_subtype)(cursor)
    cursor, _ = closechevron(cursor)
    return cursor, Geometry(tuple(values))


_COMPOSITES = {
    "option": _option,
    "array": _collection(Array),
    "set": _collection(Set),
    "record": _record,
    "either": _either,
    "geometry": _geometry,
}


__all__ = [
    "Array",
    "Either",
    "GEOMETRY_SUBTYPES",
    "Geometry",
    "KIND_TYPES",
    "Kind",
    "NUMERIC",
    "Option",
    "Primitive",
    "Record",
    "Set",
    "format_kind",
    "kind",
]
