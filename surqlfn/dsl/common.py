"""Punctuation helpers shared by the type and statement grammars."""

from __future__ import annotations

from .combinators import char, many1, multispace0
from .comment import mightbespace
from .cursor import Cursor


def is_ident_char(ch: str) -> bool:
    """Return True for characters allowed in a bare identifier (ASCII only)."""

    return ch.isascii() and (ch.isalnum() or ch == "_")


def _surrounded(symbol: str):
    def parse(cursor: Cursor) -> tuple[Cursor, None]:
        cursor, _ = mightbespace(cursor)
        cursor, _ = char(symbol)(cursor)
        cursor, _ = mightbespace(cursor)
        return cursor, None

    return parse


commas = _surrounded(",")
verbar = _surrounded("|")
colon = _surrounded(":")


def terminators(cursor: Cursor) -> tuple[Cursor, None]:
    """One or more consecutive semicolons ending a statement.

    Comments before the semicolons are skipped.  After them only whitespace is
    consumed, so comments that follow stay attached to the next statement.
    """

    cursor, _ = mightbespace(cursor)
    cursor, _ = many1(char(";"))(cursor)
    cursor, _ = multispace0(cursor)
    return cursor, None


def openparentheses(cursor: Cursor) -> tuple[Cursor, None]:
    cursor, _ = char("(")(cursor)
    cursor, _ = mightbespace(cursor)
    return cursor, None


def closeparentheses(cursor: Cursor) -> tuple[Cursor, None]:
    cursor, _ = mightbespace(cursor)
    cursor, _ = char(")")(cursor)
    return cursor, None


def openchevron(cursor: Cursor) -> tuple[Cursor, None]:
    cursor, _ = char("<")(cursor)
    cursor, _ = mightbespace(cursor)
    return cursor, None


def closechevron(cursor: Cursor) -> tuple[Cursor, None]:
    cursor, _ = mightbespace(cursor)
    cursor, _ = char(">")(cursor)
    return cursor, None


__all__ = [
    "closechevron",
    "closeparentheses",
    "colon",
    "commas",
    "is_ident_char",
    "openchevron",
    "openparentheses",
    "terminators",
    "verbar",
]
