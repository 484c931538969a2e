"""Locate ``.surql`` sources and parse them into statements.

Each file is parsed independently; results are concatenated in the order the
files were given, so file boundaries are not visible in the output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from surqlfn.dsl import grammar
from surqlfn.dsl.ast import FunctionStatement
from surqlfn.telemetry.logger import get_logger
from surqlfn.utils.concurrency import run_parallel

from .paths import Lookup, get_env, resolve_path

DEFAULT_SUFFIX = ".surql"

_LOGGER = get_logger("surqlfn.loader")


@dataclass(frozen=True, slots=True)
class ParsedSource:
    """A source file together with the statements it defines."""

    path: Path
    text: str
    statements: list[FunctionStatement] = field(default_factory=list)


def expand_path(path: Path, suffix: str = DEFAULT_SUFFIX) -> list[Path]:
    """Return ``path`` itself or, for a directory, every matching file below it.

    Directory entries are visited in sorted order so results are stable.
    """

    if path.is_dir():
        found: list[Path] = []
        for entry in sorted(path.iterdir()):
            found.extend(expand_path(entry, suffix))
        return found
    if path.suffix == suffix:
        return [path]
    return []


def resolve_sources(
    templates: Iterable[str],
    lookup: Lookup = get_env,
    *,
    suffix: str = DEFAULT_SUFFIX,
) -> list[Path]:
    """Resolve path templates into a de-duplicated list of source files.

    Raises :class:`FileNotFoundError` for a template that resolves to a missing
    path and propagates :class:`~surqlfn.loader.paths.PathResolutionError`.
    """

    seen: set[Path] = set()
    ordered: list[Path] = []
    for template in templates:
        path = Path(resolve_path(template, lookup))
        if not path.exists():
            raise FileNotFoundError(f"file does not exist: {path} (from {template!r})")
        for candidate in expand_path(path, suffix):
            if candidate in seen:
                continue
            seen.add(candidate)
            ordered.append(candidate)
        _LOGGER.debug("resolved %s to %s", template, path)
    return ordered


def parse_source(path: str | Path) -> ParsedSource:
    source_path = Path(path)
    text = source_path.read_text(encoding="utf-8")
    statements = grammar.parse_functions(text, filename=str(source_path))
    return ParsedSource(path=source_path, text=text, statements=statements)


def parse_file(path: str | Path) -> list[FunctionStatement]:
    return parse_source(path).statements


def load_sources(
    paths: Sequence[Path],
    *,
    parallel: bool = True,
    config: Mapping[str, Any] | None = None,
) -> list[ParsedSource]:
    """Parse every path, in parallel when requested, preserving input order.

    The first failing file aborts the load.  In parallel mode the failure is
    wrapped in :class:`~surqlfn.utils.concurrency.ParallelExecutionError`.
    """

    if not parallel or len(paths) < 2:
        parsed = [parse_source(path) for path in paths]
    else:
        parsed = run_parallel([partial(parse_source, path) for path in paths], config=config)
    for source in parsed:
        _LOGGER.info("parsed %d function(s) from %s", len(source.statements), source.path)
    return parsed


def load_statements(
    paths: Sequence[Path],
    *,
    parallel: bool = True,
    config: Mapping[str, Any] | None = None,
) -> list[FunctionStatement]:
    statements: list[FunctionStatement] = []
    for source in load_sources(paths, parallel=parallel, config=config):
        statements.extend(source.statements)
    return statements


__all__ = [
    "DEFAULT_SUFFIX",
    "ParsedSource",
    "expand_path",
    "load_sources",
    "load_statements",
    "parse_file",
    "parse_source",
    "resolve_sources",
]
