"""Tests for the DEFINE FUNCTION statement grammar."""

from __future__ import annotations

from pathlib import Path

import pytest

from surqlfn.dsl import grammar
from surqlfn.dsl.ast import FunctionStatement
from surqlfn.dsl.combinators import alt, char, cut
from surqlfn.dsl.cursor import Cursor, DSLParseError
from surqlfn.dsl.ident import Ident
from surqlfn.dsl.kind import Option, Primitive, Record
from surqlfn.dsl.table import Table

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "surql"


def test_single_statement_with_comments() -> None:
    source = "-- a\n-- b\nDEFINE FUNCTION fn::greet($name: string) {RETURN 1;}"
    assert grammar.parse_function(source) == FunctionStatement(
        path=["greet"],
        parameters=[(Ident("name"), Primitive.STRING)],
        comments=["a", "b"],
    )


def test_namespaced_record_parameter() -> None:
    source = "DEFINE FUNCTION fn::ns::inner($x: record<tableA|tableB>) {};"
    statements = grammar.parse_functions(source)
    assert statements == [
        FunctionStatement(
            path=["ns", "inner"],
            parameters=[(Ident("x"), Record((Table("tableA"), Table("tableB"))))],
        )
    ]
    assert statements[0].comments == []


def test_nested_braces_end_body_at_first_closing_brace() -> None:
    source = "DEFINE FUNCTION fn::f() {IF true {RETURN 1;}};"
    with pytest.raises(DSLParseError) as exc:
        grammar.parse_functions(source)
    # The body ends at the first "}", so the second "}" is where parsing stops.
    assert exc.value.offset == source.index("}};") + 1


def test_nested_braces_leave_residue_for_single_statement() -> None:
    source = "DEFINE FUNCTION fn::f() {IF true {RETURN 1;}}"
    with pytest.raises(DSLParseError) as exc:
        grammar.parse_function(source)
    assert exc.value.offset == len(source) - 1


def test_fixture_file() -> None:
    source = (FIXTURES / "main.surql").read_text(encoding="utf-8")
    statements = grammar.parse_functions(source)
    assert statements == [
        FunctionStatement(
            path=["greet"],
            parameters=[(Ident("name"), Primitive.STRING)],
            comments=[
                'It is necessary to prefix the name of your function with "fn::"',
                "This indicates that it's a custom function",
            ],
        ),
        FunctionStatement(
            path=["greet_but_with_number"],
            parameters=[(Ident("name"), Primitive.STRING), (Ident("number"), Primitive.NUMBER)],
            comments=["Same function, different comment style"],
        ),
        FunctionStatement(
            path=["relation_exists", "nested"],
            parameters=[
                (Ident("in"), Record((Table("some"),))),
                (Ident("tb"), Primitive.STRING),
                (Ident("out"), Record((Table("other"),))),
            ],
            comments=["A different comment style"],
        ),
    ]


def test_whitespace_and_comments_between_tokens_do_not_matter() -> None:
    compact = "DEFINE FUNCTION fn::a::b($x:string,$y:option<int>){};"
    spaced = (
        "DEFINE /* c */ FUNCTION\n fn::a::b ( $x : string , -- note\n"
        " $y: option< int > ) /* before body */ { } ;"
    )
    expected = [
        FunctionStatement(
            path=["a", "b"],
            parameters=[(Ident("x"), Primitive.STRING), (Ident("y"), Option(Primitive.INT))],
        )
    ]
    assert grammar.parse_functions(compact) == expected
    assert grammar.parse_functions(spaced) == expected


def test_trailing_residue_fails_whole_parse() -> None:
    valid = "DEFINE FUNCTION fn::a() {};\nDEFINE FUNCTION fn::b() {};\n"
    with pytest.raises(DSLParseError) as exc:
        grammar.parse_functions(valid + "garbage")
    assert exc.value.offset == len(valid)
    assert (exc.value.line, exc.value.column) == (3, 1)
    assert str(exc.value).startswith("<surql>:3:1:")


def test_trailing_invalid_statement_fails_whole_parse() -> None:
    source = "DEFINE FUNCTION fn::a() {};\nDEFINE FUNCTION fn::b($x: strang) {};"
    with pytest.raises(DSLParseError):
        grammar.parse_functions(source)


def test_final_terminator_is_required() -> None:
    with pytest.raises(DSLParseError):
        grammar.parse_functions("DEFINE FUNCTION fn::a() {}")


def test_trailing_comments_are_allowed() -> None:
    statements = grammar.parse_functions("DEFINE FUNCTION fn::a() {};\n-- trailing\n/* end */\n")
    assert [statement.path for statement in statements] == [["a"]]


def test_repeated_semicolons_and_lowercase_keywords() -> None:
    source = "define function fn::a() {};;;\nDeFiNe FuNcTiOn fn::b() {};"
    statements = grammar.parse_functions(source)
    assert [statement.name for statement in statements] == ["a", "b"]


def test_duplicate_parameter_names_are_accepted() -> None:
    statement = grammar.parse_function("DEFINE FUNCTION fn::dup($a: int, $a: string) {}")
    assert statement.parameter_names() == ["a", "a"]


def test_quoted_parameter_names() -> None:
    statement = grammar.parse_function("DEFINE FUNCTION fn::q($`my param`: string, $⟨x⟩: int) {}")
    assert statement.parameters == [
        (Ident("my param"), Primitive.STRING),
        (Ident("x"), Primitive.INT),
    ]


@pytest.mark.parametrize(
    "source",
    [
        "",
        ";",
        "DEFINE FUNCTION fn:: a() {};",
        "DEFINE FUNCTION a() {};",
        "DEFINEFUNCTION fn::a() {};",
        "DEFINE FUNCTION fn::a( {};",
        "DEFINE FUNCTION fn::a() ;",
        "DEFINE FUNCTION fn::a() { RETURN 1;",
    ],
)
def test_malformed_statements(source: str) -> None:
    with pytest.raises(DSLParseError):
        grammar.parse_functions(source)


def test_comments_after_terminator_belong_to_next_statement() -> None:
    source = "DEFINE FUNCTION fn::a() {}; -- about b\nDEFINE FUNCTION fn::b() {};"
    statements = grammar.parse_functions(source)
    assert statements[0].comments == []
    assert statements[1].comments == ["about b"]


def test_filename_is_reported() -> None:
    with pytest.raises(DSLParseError) as exc:
        grammar.parse_functions("oops", filename="broken.surql")
    assert exc.value.filename == "broken.surql"
    assert str(exc.value).startswith("broken.surql:1:1:")


def test_statement_helpers() -> None:
    statement = FunctionStatement(
        path=["ns", "inner"],
        parameters=[(Ident("x"), Record((Table("a"), Table("b"))))],
    )
    assert statement.name == "inner"
    assert statement.namespace == ["ns"]
    assert not statement.is_root
    assert statement.qualified_name == "fn::ns::inner"
    assert statement.signature() == "fn::ns::inner($x: record<a | b>)"


def test_statement_requires_a_path() -> None:
    with pytest.raises(ValueError):
        FunctionStatement(path=[])


@pytest.mark.parametrize(
    "source",
    [
        "DEFINE FUNCTION fn::f($x: strang) {};",
        "DEFINE FUNCTION fn::f($a: int, $x: strang) {};",
    ],
)
def test_unknown_parameter_type_is_reported_at_the_type(source: str) -> None:
    with pytest.raises(DSLParseError) as exc:
        grammar.parse_functions(source)
    assert exc.value.message == "Unknown type 'strang'"
    assert exc.value.offset == source.index("strang")
    assert exc.value.column == source.index("strang") + 1


def test_cut_commits_failures() -> None:
    with pytest.raises(DSLParseError) as exc:
        alt(cut(char("a")), char("b"))(Cursor("b"))
    assert exc.value.committed
    assert exc.value.message == "Expected 'a'"
