"""Statement grammar for SurrealQL ``DEFINE FUNCTION`` files.

A file is a sequence of statements, each terminated by one or more
semicolons::

    -- documentation comment
    DEFINE FUNCTION fn::ns::name($arg: kind, ...) { body };

Leading comments become the statement's documentation.  The body runs from the
opening brace to the *first* closing brace and is discarded; nested braces are
not tracked, so a body containing ``{ ... }`` leaves trailing input that fails
the parse.
"""

from __future__ import annotations

from .ast import FunctionStatement, Parameter, StatementList
from .combinators import (
    all_consuming,
    char,
    cut,
    multispace0,
    separated_list0,
    separated_list1,
    tag,
)
from .comment import mightbecomment, mightbespace, shouldbespace
from .common import closeparentheses, commas, openparentheses, terminators
from .cursor import Cursor, DSLParseError
from .ident import ident, path
from .kind import kind


def parameter(cursor: Cursor) -> tuple[Cursor, Parameter]:
    cursor, _ = char("$")(cursor)
    cursor, name = ident(cursor)
    cursor, _ = mightbespace(cursor)
    cursor, _ = char(":")(cursor)
    cursor, _ = mightbespace(cursor)
    # Past the colon only a type can follow.
    cursor, value = cut(kind)(cursor)
    return cursor, (name, value)


def ignored_block(cursor: Cursor) -> tuple[Cursor, None]:
    """Skip ``{ ... }`` up to the first closing brace."""

    cursor, _ = char("{")(cursor)
    cursor, _ = mightbespace(cursor)
    index = cursor.find("}")
    if index < 0:
        raise cursor.error("Expected '}' closing the function body")
    return cursor.jump(index + 1), None


def function(cursor: Cursor) -> tuple[Cursor, FunctionStatement]:
    cursor, comments = mightbecomment(cursor)
    cursor, _ = mightbespace(cursor)
    cursor, _ = tag("DEFINE", ignore_case=True)(cursor)
    cursor, _ = shouldbespace(cursor)
    cursor, _ = tag("FUNCTION", ignore_case=True)(cursor)
    cursor, _ = shouldbespace(cursor)
    cursor, _ = tag("fn::")(cursor)
    cursor, segments = path(cursor)
    cursor, _ = mightbespace(cursor)
    cursor, _ = openparentheses(cursor)
    cursor, parameters = separated_list0(commas, parameter)(cursor)
    cursor, _ = closeparentheses(cursor)
    cursor, _ = mightbespace(cursor)
    cursor, _ = ignored_block(cursor)
    return cursor, FunctionStatement(path=segments, parameters=parameters, comments=comments)


def functions(cursor: Cursor) -> tuple[Cursor, StatementList]:
    """One or more terminated statements; does not require end of input."""

    cursor, _ = multispace0(cursor)
    cursor, statements = separated_list1(terminators, function)(cursor)
    cursor, _ = terminators(cursor)
    return cursor, statements


def _document(cursor: Cursor) -> tuple[Cursor, StatementList]:
    cursor, statements = functions(cursor)
    cursor, _ = mightbespace(cursor)
    return cursor, statements


def parse_function(source: str, *, filename: str = "<surql>") -> FunctionStatement:
    """Parse exactly one statement (its trailing terminator is optional)."""

    def single(cursor: Cursor) -> tuple[Cursor, FunctionStatement]:
        cursor, statement = function(cursor)
        cursor, _ = mightbespace(cursor)
        if cursor.peek() == ";":
            cursor, _ = terminators(cursor)
            cursor, _ = mightbespace(cursor)
        return cursor, statement

    _, statement = all_consuming(single)(Cursor(source, 0, filename))
    return statement


def parse_functions(source: str, *, filename: str = "<surql>") -> StatementList:
    """Parse a whole file into statements, in source order.

    The entire input must be consumed: anything other than whitespace or
    comments after the final terminator raises :class:`DSLParseError`.
    """

    _, statements = all_consuming(_document)(Cursor(source, 0, filename))
    return statements


__all__ = [
    "DSLParseError",
    "function",
    "functions",
    "ignored_block",
    "parameter",
    "parse_function",
    "parse_functions",
]
