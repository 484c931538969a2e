"""Whitespace and comment handling.

Four comment syntaxes are recognised: ``/* block */`` (non-nesting), and the
line forms ``// ...``, ``-- ...`` and ``# ...``.  The "might be" helpers never
fail; :func:`shouldbespace` requires at least one whitespace run or comment.
"""

from __future__ import annotations

from .combinators import (
    alt,
    many1,
    multispace0,
    multispace1,
    not_line_ending,
    tag,
    take_until,
)
from .cursor import Cursor


def block(cursor: Cursor) -> tuple[Cursor, str]:
    cursor, _ = multispace0(cursor)
    cursor, _ = tag("/*")(cursor)
    cursor, body = take_until("*/")(cursor)
    cursor, _ = tag("*/")(cursor)
    cursor, _ = multispace0(cursor)
    return cursor, body.strip()


def _line_comment(marker: str):
    def parse(cursor: Cursor) -> tuple[Cursor, str]:
        cursor, _ = multispace0(cursor)
        cursor, _ = tag(marker)(cursor)
        cursor, body = not_line_ending(cursor)
        return cursor, body.strip()

    parse.__name__ = f"line_comment_{marker}"
    return parse


slash = _line_comment("//")
dash = _line_comment("--")
hash_ = _line_comment("#")

_any_comment = alt(block, slash, dash, hash_)


def comments(cursor: Cursor) -> tuple[Cursor, list[str]]:
    """Capture one or more comments interleaved with whitespace."""

    cursor, _ = multispace0(cursor)
    cursor, bodies = many1(_any_comment)(cursor)
    cursor, _ = multispace0(cursor)
    return cursor, bodies


def mightbecomment(cursor: Cursor) -> tuple[Cursor, list[str]]:
    """Capture leading comments, returning an empty list when there are none."""

    def blank(inner: Cursor) -> tuple[Cursor, list[str]]:
        inner, _ = multispace0(inner)
        return inner, []

    return alt(comments, blank)(cursor)


def mightbespace(cursor: Cursor) -> tuple[Cursor, None]:
    cursor, _ = mightbecomment(cursor)
    return cursor, None


def shouldbespace(cursor: Cursor) -> tuple[Cursor, None]:
    def space(inner: Cursor) -> tuple[Cursor, None]:
        inner, _ = multispace1(inner)
        return inner, None

    def filler(inner: Cursor) -> tuple[Cursor, None]:
        inner, _ = comments(inner)
        return inner, None

    return alt(filler, space)(cursor)


__all__ = [
    "block",
    "comments",
    "dash",
    "hash_",
    "mightbecomment",
    "mightbespace",
    "shouldbespace",
    "slash",
]
