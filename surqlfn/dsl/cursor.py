"""Immutable input cursor shared by every grammar layer.

Each parser in :mod:`surqlfn.dsl` is a plain function taking a :class:`Cursor`
and returning ``(cursor, value)`` where the returned cursor sits after the
consumed text.  Failures are reported by raising :class:`DSLParseError`, which
records the offending offset together with a human friendly line/column pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")


class DSLParseError(RuntimeError):
    """Structured parse error that includes source location information.

    ``committed`` marks failures raised after a production has consumed a
    delimiter that only it can own (an opening backtick, for instance).
    Prioritised choice re-raises such errors instead of trying the next
    alternative.
    """

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        filename: str = "<surql>",
        *,
        offset: int = 0,
        committed: bool = False,
    ) -> None:
        super().__init__(f"{filename}:{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        self.offset = offset
        self.committed = committed

    def __reduce__(self):
        # Keeps errors intact when raised inside process pool workers.
        return (
            self.__class__,
            (self.message, self.line, self.column, self.filename),
            {"offset": self.offset, "committed": self.committed},
        )


@dataclass(frozen=True, slots=True)
class Cursor:
    """Position inside a source string."""

    source: str
    offset: int = 0
    filename: str = "<surql>"

    @property
    def eof(self) -> bool:
        return self.offset >= len(self.source)

    @property
    def rest(self) -> str:
        return self.source[self.offset :]

    def peek(self, count: int = 1) -> str:
        return self.source[self.offset : self.offset + count]

    def startswith(self, text: str, *, ignore_case: bool = False) -> bool:
        chunk = self.peek(len(text))
        if ignore_case:
            return chunk.lower() == text.lower()
        return chunk == text

    def find(self, text: str) -> int:
        """Return the absolute offset of ``text`` at or after the cursor, or -1."""

        return self.source.find(text, self.offset)

    def advance(self, count: int = 1) -> "Cursor":
        target = min(self.offset + count, len(self.source))
        return Cursor(self.source, target, self.filename)

    def jump(self, offset: int) -> "Cursor":
        return Cursor(self.source, offset, self.filename)

    def take_while(self, predicate: Callable[[str], bool]) -> tuple["Cursor", str]:
        end = self.offset
        length = len(self.source)
        while end < length and predicate(self.source[end]):
            end += 1
        return self.jump(end), self.source[self.offset : end]

    def location(self) -> tuple[int, int]:
        """Return the 1-based ``(line, column)`` of the cursor."""

        consumed = self.source[: self.offset]
        line = consumed.count("\n") + 1
        column = self.offset - (consumed.rfind("\n") + 1) + 1
        return line, column

    def error(self, message: str, *, committed: bool = False) -> DSLParseError:
        line, column = self.location()
        return DSLParseError(
            message,
            line,
            column,
            self.filename,
            offset=self.offset,
            committed=committed,
        )


Parsed = tuple[Cursor, T]
Parser = Callable[[Cursor], tuple[Cursor, T]]

__all__ = ["Cursor", "DSLParseError", "Parsed", "Parser"]
