"""Tests for locating and parsing source files."""

from __future__ import annotations

from pathlib import Path

import pytest

from surqlfn.dsl.cursor import DSLParseError
from surqlfn.loader.files import (
    expand_path,
    load_sources,
    load_statements,
    parse_file,
    resolve_sources,
)
from surqlfn.utils.concurrency import ParallelExecutionError

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "surql"


def test_expand_directory_is_sorted_and_recursive() -> None:
    found = expand_path(FIXTURES)
    assert [path.relative_to(FIXTURES).as_posix() for path in found] == [
        "bindings.surql",
        "main.surql",
        "nested/extra.surql",
    ]


def test_expand_ignores_other_suffixes() -> None:
    assert expand_path(FIXTURES / "nested" / "README.txt") == []


def test_resolve_sources_substitutes_and_deduplicates() -> None:
    lookup = {"FIXTURES": str(FIXTURES)}.get
    paths = resolve_sources(["$FIXTURES/main.surql", "$FIXTURES"], lookup)
    assert [path.name for path in paths] == ["main.surql", "bindings.surql", "extra.surql"]


def test_resolve_sources_rejects_missing_paths(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        resolve_sources([str(tmp_path / "missing.surql")])


def test_parse_file_reports_filename(tmp_path: Path) -> None:
    broken = tmp_path / "broken.surql"
    broken.write_text("DEFINE FUNCTION fn::a() {};\nnope", encoding="utf-8")
    with pytest.raises(DSLParseError) as exc:
        parse_file(broken)
    assert exc.value.filename == str(broken)
    assert exc.value.line == 2


@pytest.mark.parametrize("parallel", [True, False])
def test_load_statements_concatenates_in_order(parallel: bool) -> None:
    statements = load_statements(expand_path(FIXTURES), parallel=parallel)
    assert len(statements) == 17
    assert statements[0].qualified_name == "fn::number"
    assert statements[-1].qualified_name == "fn::nested::ping"


def test_load_sources_keeps_text() -> None:
    main = FIXTURES / "main.surql"
    (source,) = load_sources([main])
    assert source.path == main
    assert source.text == main.read_text(encoding="utf-8")
    assert len(source.statements) == 3


def test_parallel_failure_is_wrapped(tmp_path: Path) -> None:
    broken = tmp_path / "broken.surql"
    broken.write_text("DEFINE FUNCTION", encoding="utf-8")
    with pytest.raises(ParallelExecutionError) as exc:
        load_sources([FIXTURES / "main.surql", broken], parallel=True)
    assert exc.value.index == 1
    assert isinstance(exc.value.cause, DSLParseError)


def test_sequential_failure_propagates(tmp_path: Path) -> None:
    broken = tmp_path / "broken.surql"
    broken.write_text("DEFINE FUNCTION", encoding="utf-8")
    with pytest.raises(DSLParseError):
        load_sources([FIXTURES / "main.surql", broken], parallel=False)
