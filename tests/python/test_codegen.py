"""Tests for Python binding generation."""

from __future__ import annotations

import asyncio
import inspect
from pathlib import Path
from typing import Any

import pytest

from surqlfn.codegen.alias import Alias
from surqlfn.codegen.python import call_query, python_type, render_module
from surqlfn.codegen.tree import FunctionTree
from surqlfn.dsl import grammar
from surqlfn.dsl.ast import FunctionStatement
from surqlfn.dsl.ident import Ident
from surqlfn.dsl.kind import Array, Either, Geometry, Option, Primitive, Record, Set
from surqlfn.dsl.table import Table

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "surql"


class FakeDB:
    """Records every query instead of talking to a database."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    async def query(self, *args: Any) -> list[Any]:
        self.calls.append(args)
        return [args]


def load_module(source: str) -> dict[str, Any]:
    namespace: dict[str, Any] = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


def test_tree_groups_by_namespace() -> None:
    statements = grammar.parse_functions((FIXTURES / "bindings.surql").read_text(encoding="utf-8"))
    tree = FunctionTree.from_statements(statements)
    assert len(tree) == 13
    assert [statement.name for statement in tree.functions][:2] == ["number", "string"]
    assert list(tree.modules) == ["composite"]
    assert [prefix for prefix, _ in tree.walk()] == [(), ("composite",)]


@pytest.mark.parametrize(
    ("text", "expected"),
    [("is", Alias()), ("sql_$", Alias("prefix", "sql_")), ("$_fn", Alias("suffix", "_fn"))],
)
def test_alias_parse(text: str, expected: Alias) -> None:
    alias = Alias.parse(text)
    assert alias == expected
    assert str(alias) == text


@pytest.mark.parametrize("text", ["", "$", "a$b$", "plain", "pre$post"])
def test_alias_rejects_unknown_rules(text: str) -> None:
    with pytest.raises(ValueError):
        Alias.parse(text)


def test_alias_transform() -> None:
    assert Alias.parse("sql_$").transform("greet") == "sql_greet"
    assert Alias.parse("$_fn").transform("greet") == "greet_fn"
    assert Alias().transform("greet") == "greet"


def test_call_query_quotes_parameter_names() -> None:
    statement = FunctionStatement(
        path=["ns", "f"],
        parameters=[(Ident("x"), Primitive.INT), (Ident("two words"), Primitive.STRING)],
    )
    assert call_query(statement) == "RETURN fn::ns::f($x, $`two words`)"


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (Primitive.STRING, "str"),
        (Primitive.DATETIME, "datetime.datetime"),
        (Option(Primitive.INT), "Optional[int]"),
        (Array(Primitive.FLOAT, 3), "list[float]"),
        (Set(Option(Primitive.UUID)), "list[Optional[UUID]]"),
        (Record((Table("user"),)), "str"),
        (Geometry(("point",)), "dict[str, Any]"),
        (Either((Primitive.INT, Primitive.STRING)), "int | str"),
    ],
)
def test_python_type(kind, expected: str) -> None:
    assert python_type(kind) == expected


def test_python_type_rejects_other_values() -> None:
    with pytest.raises(TypeError):
        python_type("string")  # type: ignore[arg-type]


def test_generated_module_calls_database() -> None:
    source_text = (FIXTURES / "main.surql").read_text(encoding="utf-8")
    statements = grammar.parse_functions(source_text)
    module = load_module(render_module(statements, [source_text], Alias.parse("gen_$")))
    db = FakeDB()

    asyncio.run(module["gen_greet"](db, "world"))
    asyncio.run(module["gen_define_functions"](db))
    asyncio.run(module["relation_exists"].gen_nested(db, "some:1", "some", "other:2"))

    assert db.calls == [
        ("RETURN fn::greet($name)", {"name": "world"}),
        (source_text,),
        (
            "RETURN fn::relation_exists::nested($in, $tb, $out)",
            {"in": "some:1", "tb": "some", "out": "other:2"},
        ),
    ]
    assert module["STORED_FUNCTIONS"] == source_text


def test_generated_signatures_and_docstrings() -> None:
    statements = grammar.parse_functions((FIXTURES / "main.surql").read_text(encoding="utf-8"))
    module = load_module(render_module(statements, origin="main.surql"))

    assert module["__doc__"] == "Bindings generated by surqlfn from main.surql."
    greet = module["greet"]
    assert inspect.iscoroutinefunction(greet)
    assert inspect.getdoc(greet) == (
        'It is necessary to prefix the name of your function with "fn::"\n'
        "This indicates that it's a custom function"
    )
    assert list(inspect.signature(module["greet_but_with_number"]).parameters) == [
        "db",
        "name",
        "number",
    ]
    nested = module["relation_exists"].nested
    assert list(inspect.signature(nested).parameters) == ["db", "in_", "tb", "out"]
    assert inspect.getdoc(nested) == "A different comment style"


def test_generated_module_covers_every_kind() -> None:
    statements = grammar.parse_functions((FIXTURES / "bindings.surql").read_text(encoding="utf-8"))
    module = load_module(render_module(statements))
    db = FakeDB()
    asyncio.run(module["composite"].bounded(db, [1, 2]))
    assert db.calls == [("RETURN fn::composite::bounded($value)", {"value": [1, 2]})]


def test_parameter_clashing_with_connection_is_rejected() -> None:
    statements = grammar.parse_functions("DEFINE FUNCTION fn::f($db: string) {};")
    with pytest.raises(ValueError):
        render_module(statements)


def test_duplicate_parameters_are_rejected() -> None:
    statements = grammar.parse_functions("DEFINE FUNCTION fn::f($a: int, $a: int) {};")
    with pytest.raises(ValueError):
        render_module(statements)


def test_names_must_be_python_identifiers() -> None:
    statements = grammar.parse_functions("DEFINE FUNCTION fn::f($`two words`: int) {};")
    with pytest.raises(ValueError):
        render_module(statements)


def test_function_and_namespace_with_same_name_are_rejected() -> None:
    statements = grammar.parse_functions(
        "DEFINE FUNCTION fn::greet($name: string) {};\n"
        "DEFINE FUNCTION fn::greet::loud($name: string) {};"
    )
    with pytest.raises(ValueError, match="greet"):
        render_module(statements)


def test_nested_function_and_namespace_with_same_name_are_rejected() -> None:
    statements = grammar.parse_functions(
        "DEFINE FUNCTION fn::a::b() {};\nDEFINE FUNCTION fn::a::b::c() {};"
    )
    with pytest.raises(ValueError, match="fn::a::b"):
        render_module(statements)


def test_same_name_in_different_namespaces_is_allowed() -> None:
    statements = grammar.parse_functions(
        "DEFINE FUNCTION fn::ping() {};\nDEFINE FUNCTION fn::nested::ping() {};"
    )
    module = load_module(render_module(statements))
    db = FakeDB()
    asyncio.run(module["ping"](db))
    asyncio.run(module["nested"].ping(db))
    assert [call[0] for call in db.calls] == ["RETURN fn::ping()", "RETURN fn::nested::ping()"]


@pytest.mark.parametrize(
    ("source", "alias"),
    [
        ("DEFINE FUNCTION fn::define_functions($x: int) {};", "is"),
        ("DEFINE FUNCTION fn::STORED_FUNCTIONS() {};", "is"),
        ("DEFINE FUNCTION fn::define_functions() {};", "gen_$"),
        ("DEFINE FUNCTION fn::define_functions() {};", "$_x"),
    ],
)
def test_generated_helper_names_are_reserved(source: str, alias: str) -> None:
    statements = grammar.parse_functions(source)
    with pytest.raises(ValueError, match="generated helper"):
        render_module(statements, alias=Alias.parse(alias))


def test_helper_name_follows_alias() -> None:
    statements = grammar.parse_functions("DEFINE FUNCTION fn::ping() {};")
    module = load_module(render_module(statements, alias=Alias.parse("gen_$")))
    assert "gen_define_functions" in module
    assert "gen_ping" in module
    assert "define_functions" not in module


def test_sources_are_separated_by_newlines() -> None:
    first = "DEFINE FUNCTION fn::a() {};\n-- trailing note"
    second = "DEFINE FUNCTION fn::b() {};"
    statements = grammar.parse_functions(first) + grammar.parse_functions(second)
    module = load_module(render_module(statements, [first, second]))
    assert module["STORED_FUNCTIONS"] == first + "\n" + second
    assert [s.name for s in grammar.parse_functions(module["STORED_FUNCTIONS"])] == ["a", "b"]
