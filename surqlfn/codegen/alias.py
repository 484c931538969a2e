"""Naming rules applied to generated wrapper functions.

``is`` keeps the function name, ``prefix_$`` prepends ``prefix_`` and
``$_suffix`` appends ``_suffix``; ``$`` stands for the function name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

_HINT = "expected `is`, `$_suffix` or `prefix_$`"


@dataclass(frozen=True, slots=True)
class Alias:
    mode: Literal["is", "prefix", "suffix"] = "is"
    affix: str = ""

    @classmethod
    def parse(cls, text: str) -> "Alias":
        value = text.strip()
        if value == "is":
            return cls()
        if value.count("$") != 1:
            raise ValueError(f"invalid alias {text!r}: {_HINT}")
        if value.endswith("$") and len(value) > 1:
            return cls("prefix", value[:-1])
        if value.startswith("$") and len(value) > 1:
            return cls("suffix", value[1:])
        raise ValueError(f"invalid alias {text!r}: {_HINT}")

    def transform(self, name: str) -> str:
        if self.mode == "prefix":
            return f"{self.affix}{name}"
        if self.mode == "suffix":
            return f"{name}{self.affix}"
        return name

    def __str__(self) -> str:
        if self.mode == "prefix":
            return f"{self.affix}$"
        if self.mode == "suffix":
            return f"${self.affix}"
        return "is"


__all__ = ["Alias"]
