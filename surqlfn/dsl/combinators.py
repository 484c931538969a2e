"""Prioritised-choice and repetition combinators.

The grammar is linear and unambiguous, so there is no memoisation and no
longest-match logic: :func:`alt` commits to the first alternative that
succeeds, and a failure further along the caller's continuation is never
retried against a different alternative.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from .cursor import Cursor, DSLParseError, Parser

T = TypeVar("T")
S = TypeVar("S")

WHITESPACE = " \t\r\n"


def char(expected: str) -> Parser[str]:
    def parse(cursor: Cursor) -> tuple[Cursor, str]:
        if cursor.peek() != expected:
            raise cursor.error(f"Expected '{expected}'")
        return cursor.advance(), expected

    return parse


def tag(expected: str, *, ignore_case: bool = False) -> Parser[str]:
    def parse(cursor: Cursor) -> tuple[Cursor, str]:
        if not cursor.startswith(expected, ignore_case=ignore_case):
            raise cursor.error(f"Expected '{expected}'")
        return cursor.advance(len(expected)), cursor.peek(len(expected))

    return parse


def take_while1(predicate: Callable[[str], bool], what: str) -> Parser[str]:
    def parse(cursor: Cursor) -> tuple[Cursor, str]:
        after, value = cursor.take_while(predicate)
        if not value:
            raise cursor.error(f"Expected {what}")
        return after, value

    return parse


def take_until(marker: str) -> Parser[str]:
    """Consume everything up to (not including) the first ``marker``."""

    def parse(cursor: Cursor) -> tuple[Cursor, str]:
        index = cursor.find(marker)
        if index < 0:
            raise cursor.error(f"Expected '{marker}'")
        return cursor.jump(index), cursor.source[cursor.offset : index]

    return parse


def multispace0(cursor: Cursor) -> tuple[Cursor, str]:
    return cursor.take_while(lambda ch: ch in WHITESPACE)


def multispace1(cursor: Cursor) -> tuple[Cursor, str]:
    after, value = multispace0(cursor)
    if not value:
        raise cursor.error("Expected whitespace")
    return after, value


def not_line_ending(cursor: Cursor) -> tuple[Cursor, str]:
    return cursor.take_while(lambda ch: ch not in "\r\n")


def alt(*parsers: Parser[T]) -> Parser[T]:
    """Try ``parsers`` in order and return the first success.

    When every alternative fails, the error that reached furthest into the input
    is raised (the last one on ties).  Committed errors are raised immediately.
    """

    def parse(cursor: Cursor) -> tuple[Cursor, T]:
        failure: Optional[DSLParseError] = None
        for parser in parsers:
            try:
                return parser(cursor)
            except DSLParseError as exc:
                if exc.committed:
                    raise
                if failure is None or exc.offset >= failure.offset:
                    failure = exc
        if failure is None:
            raise cursor.error("No alternatives to try")
        raise failure

    return parse


def many0(parser: Parser[T]) -> Parser[list[T]]:
    def parse(cursor: Cursor) -> tuple[Cursor, list[T]]:
        items: list[T] = []
        while True:
            try:
                after, item = parser(cursor)
            except DSLParseError as exc:
                if exc.committed:
                    raise
                return cursor, items
            if after.offset == cursor.offset:
                return cursor, items
            items.append(item)
            cursor = after

    return parse


def many1(parser: Parser[T]) -> Parser[list[T]]:
    def parse(cursor: Cursor) -> tuple[Cursor, list[T]]:
        cursor, first = parser(cursor)
        cursor, rest = many0(parser)(cursor)
        return cursor, [first, *rest]

    return parse


def separated_list0(separator: Parser[S], element: Parser[T]) -> Parser[list[T]]:
    def parse(cursor: Cursor) -> tuple[Cursor, list[T]]:
        try:
            return separated_list1(separator, element)(cursor)
        except DSLParseError as exc:
            if exc.committed:
                raise
            return cursor, []

    return parse


def separated_list1(separator: Parser[S], element: Parser[T]) -> Parser[list[T]]:
    """Parse ``element (separator element)*``.

    A separator that is not followed by an element is left unconsumed, so the
    caller sees the input exactly as it was after the last element.
    """

    def parse(cursor: Cursor) -> tuple[Cursor, list[T]]:
        cursor, first = element(cursor)
        items = [first]
        while True:
            try:
                after_separator, _ = separator(cursor)
                after_element, item = element(after_separator)
            except DSLParseError as exc:
                if exc.committed:
                    raise
                return cursor, items
            if after_element.offset == cursor.offset:
                return cursor, items
            items.append(item)
            cursor = after_element

    return parse


def all_consuming(parser: Parser[T]) -> Parser[T]:
    def parse(cursor: Cursor) -> tuple[Cursor, T]:
        cursor, value = parser(cursor)
        if not cursor.eof:
            raise cursor.error(f"Unexpected trailing input {cursor.rest[:20]!r}")
        return cursor, value

    return parse


def cut(parser: Parser[T]) -> Parser[T]:
    """Mark every failure of ``parser`` as committed."""

    def parse(cursor: Cursor) -> tuple[Cursor, T]:
        try:
            return parser(cursor)
        except DSLParseError as exc:
            if exc.committed:
                raise
            raise DSLParseError(
                exc.message,
                exc.line,
                exc.column,
                exc.filename,
                offset=exc.offset,
                committed=True,
            ) from exc

    return parse


__all__ = [
    "all_consuming",
    "alt",
    "char",
    "cut",
    "many0",
    "many1",
    "multispace0",
    "multispace1",
    "not_line_ending",
    "separated_list0",
    "separated_list1",
    "tag",
    "take_until",
    "take_while1",
]
