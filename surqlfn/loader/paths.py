"""Resolve ``$NAME`` placeholders inside path templates.

Substitution happens in a single left-to-right pass.  Values are spliced in
verbatim and scanning resumes after the placeholder in the *original* string,
so a value that itself contains ``$OTHER`` is left untouched.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

Lookup = Callable[[str], Optional[str]]


class PathResolutionError(ValueError):
    """Base class for failures while resolving a path template."""


class MissingVariableError(PathResolutionError):
    """Raised when the lookup has no value for a referenced variable."""

    def __init__(self, variable: str) -> None:
        super().__init__(f"Unable to resolve ${variable}")
        self.variable = variable


class MalformedVariableError(PathResolutionError):
    """Raised when ``$`` is not followed by a valid variable name."""

    def __init__(self, rest: str) -> None:
        super().__init__(f'Unable to parse a variable from "{rest}"')
        self.rest = rest


def get_env(variable: str) -> Optional[str]:
    return os.environ.get(variable)


def parse_identifier(text: str) -> Optional[tuple[str, str]]:
    """Split ``text`` into ``(identifier, rest)`` or return ``None``.

    The identifier is the longest prefix made of an ASCII letter or underscore
    followed by ASCII letters, digits or underscores.
    """

    index = 0
    for ch in text:
        if ch == "_" or (ch.isascii() and ch.isalpha()):
            index += 1
        elif index > 0 and ch.isascii() and ch.isdigit():
            index += 1
        else:
            break
    if index == 0:
        return None
    return text[:index], text[index:]


def resolve_path(raw: str, lookup: Lookup = get_env) -> str:
    """Substitute every ``$NAME`` in ``raw`` using ``lookup``."""

    unprocessed = raw
    resolved: list[str] = []
    while True:
        dollar = unprocessed.find("$")
        if dollar < 0:
            break
        resolved.append(unprocessed[:dollar])
        tail = unprocessed[dollar:]
        parsed = parse_identifier(tail[1:])
        if parsed is None:
            raise MalformedVariableError(tail)
        variable, rest = parsed
        value = lookup(variable)
        if value is None:
            raise MissingVariableError(variable)
        resolved.append(value)
        unprocessed = rest
    resolved.append(unprocessed)
    return "".join(resolved)


__all__ = [
    "Lookup",
    "MalformedVariableError",
    "MissingVariableError",
    "PathResolutionError",
    "get_env",
    "parse_identifier",
    "resolve_path",
]
