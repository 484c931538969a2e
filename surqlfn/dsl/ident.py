"""Identifier decoding and encoding.

Identifiers may be written bare (``name``), backtick-quoted with backslash
escapes (```a b```) or wrapped in mathematical angle brackets
(``⟨a b⟩``).  All three decode to the same :class:`Ident`; the surface syntax is
not retained.
"""

from __future__ import annotations

from dataclasses import dataclass

from .combinators import alt, separated_list1, tag, take_while1
from .common import is_ident_char
from .cursor import Cursor

BACKTICK = "`"
BRACKET_L = "⟨"
BRACKET_R = "⟩"

_ESCAPES = {
    "\\": "\\",
    "`": "`",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def escape_ident(text: str) -> str:
    """Render ``text`` so that :func:`ident` decodes it back unchanged.

    Bare output is used only when every character is bare-safe and the value is
    not purely numeric; everything else is wrapped in backticks.
    """

    if text and all(is_ident_char(ch) for ch in text) and not text.isdigit():
        return text
    escaped = text.replace("\\", "\\\\").replace(BACKTICK, "\\" + BACKTICK)
    return f"{BACKTICK}{escaped}{BACKTICK}"


@dataclass(frozen=True, order=True, slots=True)
class Ident:
    """Normalised identifier; compares and hashes on the decoded name."""

    name: str

    def __str__(self) -> str:
        return escape_ident(self.name)


def ident_raw(cursor: Cursor) -> tuple[Cursor, str]:
    return alt(_ident_default, _ident_backtick, _ident_brackets)(cursor)


def ident(cursor: Cursor) -> tuple[Cursor, Ident]:
    cursor, value = ident_raw(cursor)
    return cursor, Ident(value)


_bare = take_while1(is_ident_char, "identifier")


def plain(cursor: Cursor) -> tuple[Cursor, Ident]:
    cursor, value = _bare(cursor)
    return cursor, Ident(value)


def path(cursor: Cursor) -> tuple[Cursor, list[str]]:
    """Parse ``segment::segment::...`` using bare segments only."""

    return separated_list1(tag("::"), _bare)(cursor)


def _ident_default(cursor: Cursor) -> tuple[Cursor, str]:
    return _bare(cursor)


def _ident_backtick(cursor: Cursor) -> tuple[Cursor, str]:
    opening = cursor
    cursor, _ = tag(BACKTICK)(cursor)
    chars: list[str] = []
    while True:
        if cursor.eof:
            raise opening.error("Unterminated backtick identifier", committed=True)
        ch = cursor.peek()
        if ch == BACKTICK:
            return cursor.advance(), "".join(chars)
        if ch == "\0":
            raise cursor.error("NUL character in identifier", committed=True)
        if ch == "\\":
            code = cursor.peek(2)[1:]
            if code not in _ESCAPES:
                raise cursor.error(f"Invalid escape sequence '\\{code}'", committed=True)
            chars.append(_ESCAPES[code])
            cursor = cursor.advance(2)
            continue
        chars.append(ch)
        cursor = cursor.advance()


def _ident_brackets(cursor: Cursor) -> tuple[Cursor, str]:
    opening = cursor
    cursor, _ = tag(BRACKET_L)(cursor)
    after, value = cursor.take_while(lambda ch: ch not in (BRACKET_R, "\0"))
    if not value:
        raise after.error("Empty bracket identifier", committed=True)
    if after.peek() != BRACKET_R:
        raise opening.error("Unterminated bracket identifier", committed=True)
    return after.advance(), value


__all__ = ["Ident", "escape_ident", "ident", "ident_raw", "path", "plain"]
