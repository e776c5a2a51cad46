"""Tests for the PDL parser."""

from pathlib import Path

import pytest

from sessao.core import ir
from sessao.core.dsl_parser_impl import Parser, ParserProtocol, parse_pdl
from sessao.core.errors import DiagnosticKind, ParseError
from sessao.core.lexer import tokenize
from sessao.core.parser import check, parse, parse_file


def wrap(body: str, types: str = "", roles: str = "Client, Server") -> str:
    """Wrap phase body statements in a one-phase protocol."""
    return f"protocol P {{ roles {roles} {types} phase Main {{ {body} }} }}"


def parse_body(body: str, types: str = "") -> list[ir.Statement]:
    return parse(wrap(body, types)).phases[0].body


def parse_types(types: str) -> list[ir.TypeDef]:
    return parse(wrap("end", types)).types


def parse_error(source: str) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        parse(source)
    return exc_info.value


class TestProtocolStructure:
    """Top-level declarations."""

    def test_parser_satisfies_mixin_interface(self) -> None:
        assert isinstance(Parser(tokenize("protocol P {}")), ParserProtocol)

    def test_hello(self, hello_source: str) -> None:
        protocol = parse(hello_source)
        assert protocol.name == "Hello"
        assert [r.name for r in protocol.roles] == ["Client", "Server"]
        assert protocol.types == []
        assert [p.name for p in protocol.phases] == ["Main"]

        ping, pong, end = protocol.phases[0].body
        assert isinstance(ping, ir.SendStatement)
        assert (ping.sender, ping.receiver, ping.message) == ("Client", "Server", "Ping")
        assert ping.fields == []
        assert isinstance(pong, ir.SendStatement)
        assert (pong.sender, pong.receiver) == ("Server", "Client")
        assert isinstance(end, ir.EndStatement)

    def test_declarations_kept_in_source_order(self) -> None:
        source = (
            "protocol P { roles Client type B = u8 type A = u16 "
            "phase Main { end } phase Second { end } phase First { end } }"
        )
        protocol = parse(source)
        assert [t.name for t in protocol.types] == ["B", "A"]
        assert [p.name for p in protocol.phases] == ["Main", "Second", "First"]
        assert protocol.entry_phase is not None
        assert protocol.entry_phase.name == "Main"

    def test_duplicates_are_parsed_not_rejected(self) -> None:
        protocol = parse(wrap("end", roles="Client, Client"))
        assert [r.name for r in protocol.roles] == ["Client", "Client"]

    def test_lookup_helpers(self, bank_source: str) -> None:
        protocol = parse(bank_source)
        assert protocol.get_role("Auditor") is not None
        assert protocol.get_role("Nobody") is None
        account = protocol.get_type("Account")
        assert account is not None and isinstance(account.body, ir.StructBody)
        assert protocol.get_phase("Heartbeat") is not None
        assert protocol.get_phase("Missing") is None

    def test_spans(self) -> None:
        source = "protocol P { roles A, B phase Main { end } }"
        protocol = parse(source)
        assert (protocol.span.start, protocol.span.end) == (0, 44)
        assert (protocol.roles[1].span.start, protocol.roles[1].span.column) == (22, 23)

        phase = protocol.phases[0]
        assert (phase.span.start, phase.span.end) == (24, 42)
        assert (phase.close_span.start, phase.close_span.end) == (41, 42)
        assert (phase.body[0].span.start, phase.body[0].span.end) == (37, 40)

    def test_close_span_on_its_own_line(self, hello_source: str) -> None:
        phase = parse(hello_source).phases[0]
        assert phase.span.line == 4
        assert (phase.close_span.line, phase.close_span.column) == (8, 5)

    def test_parse_pdl_matches_parse(self, hello_source: str) -> None:
        assert parse_pdl(hello_source) == parse(hello_source)

    def test_parser_requires_eof(self) -> None:
        tokens = tokenize("protocol P {")[:-1]
        with pytest.raises(ValueError):
            Parser(tokens)


class TestTypes:
    """Type expressions and type definitions."""

    def test_alias_to_primitive(self) -> None:
        (typedef,) = parse_types("type Id = u64")
        assert typedef.is_alias
        assert isinstance(typedef.body, ir.AliasBody)
        target = typedef.body.target
        assert isinstance(target, ir.PrimitiveType)
        assert target.primitive == ir.PrimitiveKind.U64

    def test_struct(self) -> None:
        (typedef,) = parse_types("type Point = { x: f64, y: f64, label: string? }")
        assert isinstance(typedef.body, ir.StructBody)
        x, y, label = typedef.body.fields
        assert (x.name, str(x.type), x.optional) == ("x", "f64", False)
        assert (y.name, str(y.type)) == ("y", "f64")
        assert (label.name, str(label.type), label.optional) == ("label", "string", True)

    def test_empty_struct_and_trailing_comma(self) -> None:
        empty, trailing = parse_types("type Unit = {} type Pair = { a: u8, b: u8, }")
        assert isinstance(empty.body, ir.StructBody) and empty.body.fields == []
        assert isinstance(trailing.body, ir.StructBody)
        assert [f.name for f in trailing.body.fields] == ["a", "b"]

    def test_enum(self) -> None:
        (typedef,) = parse_types(
            "type Shape = enum { Circle { radius: f64 }, Square { side: f64 }, Empty }"
        )
        assert typedef.is_enum
        assert isinstance(typedef.body, ir.EnumBody)
        assert [v.name for v in typedef.body.variants] == ["Circle", "Square", "Empty"]
        circle = typedef.body.get_variant("Circle")
        assert circle is not None
        assert [f.name for f in circle.fields] == ["radius"]
        assert typedef.body.get_variant("Triangle") is None

    def test_enum_named_type_is_not_contextual_keyword(self) -> None:
        (typedef,) = parse_types("type Kind = enum")
        assert isinstance(typedef.body, ir.AliasBody)
        assert isinstance(typedef.body.target, ir.NamedType)
        assert typedef.body.target.name == "enum"

    def test_map_alias_with_enum_key(self) -> None:
        _, index, maybe = parse_types(
            "type Status = enum { Open, Closed } "
            "type Index = {Status: u32} "
            "type MaybeIndex = {Status: [u32]}?"
        )
        assert isinstance(index.body, ir.AliasBody)
        target = index.body.target
        assert isinstance(target, ir.MapType)
        assert isinstance(target.key, ir.NamedType)
        assert target.key.name == "Status"
        assert str(target) == "{Status: u32}"

        assert isinstance(maybe.body, ir.AliasBody)
        assert isinstance(maybe.body.target, ir.OptionalType)
        assert str(maybe.body.target) == "{Status: [u32]}?"

    def test_map_alias_with_primitive_key_through_alias(self) -> None:
        _, scores = parse_types("type Key = string type Scores = {Key: [u32]}")
        assert isinstance(scores.body, ir.AliasBody)
        assert str(scores.body.target) == "{Key: [u32]}"
        assert check(wrap("end", types="type Key = string type Scores = {Key: [u32]}")).is_valid

    def test_map_alias_with_non_identifier_key(self) -> None:
        (typedef,) = parse_types("type Grid = {[u8]: u8}")
        assert isinstance(typedef.body, ir.AliasBody)
        assert isinstance(typedef.body.target, ir.MapType)

    def test_struct_first_field_named_like_primitive(self) -> None:
        (typedef,) = parse_types("type Event = { timestamp: u64, seq: u32?, }")
        assert isinstance(typedef.body, ir.StructBody)
        timestamp, seq = typedef.body.fields
        assert (timestamp.name, str(timestamp.type), timestamp.optional) == (
            "timestamp",
            "u64",
            False,
        )
        assert (seq.name, str(seq.type), seq.optional) == ("seq", "u32", True)

    @pytest.mark.parametrize(
        "types,name,field_type,optional",
        [
            ("type Blob = { bytes: [u8] }", "bytes", "[u8]", False),
            ("type Label = { string: string? }", "string", "string", True),
            ("type Id = { uuid: uuid }", "uuid", "uuid", False),
            ("type Ref = { target: Blob } type Blob = { bytes: [u8] }", "target", "Blob", False),
        ],
        ids=["primitive_name", "optional", "same_as_type", "named_type"],
    )
    def test_single_field_struct(
        self, types: str, name: str, field_type: str, optional: bool
    ) -> None:
        typedef = parse_types(types)[0]
        assert isinstance(typedef.body, ir.StructBody)
        (field,) = typedef.body.fields
        assert (field.name, str(field.type), field.optional) == (name, field_type, optional)

    def test_single_entry_with_uppercase_name_and_comma_is_struct(self) -> None:
        (typedef,) = parse_types("type Wrapper = { Inner: u8, }")
        assert isinstance(typedef.body, ir.StructBody)
        assert [f.name for f in typedef.body.fields] == ["Inner"]

    def test_nested_type_expressions(self) -> None:
        (send,) = parse_body(
            "Client -> Server: Data { index: {Key: [Node?]}, maybe: Node??, list: [[u8]] } end"
        )[:1]
        assert isinstance(send, ir.SendStatement)
        index, maybe, nested = send.fields

        assert isinstance(index.type, ir.MapType)
        assert isinstance(index.type.key, ir.NamedType)
        assert str(index.type) == "{Key: [Node?]}"
        assert index.optional is False

        # Only the outermost '?' marks the field optional
        assert maybe.optional is True
        assert isinstance(maybe.type, ir.OptionalType)
        assert str(maybe.type) == "Node?"

        assert str(nested.type) == "[[u8]]"

    def test_all_primitives(self) -> None:
        fields = ", ".join(f"f_{kind.value}: {kind.value}" for kind in ir.PrimitiveKind)
        (typedef,) = parse_types(f"type All = {{ {fields} }}")
        assert isinstance(typedef.body, ir.StructBody)
        kinds = [
            f.type.primitive
            for f in typedef.body.fields
            if isinstance(f.type, ir.PrimitiveType)
        ]
        assert kinds == list(ir.PrimitiveKind)

    def test_typedef_span(self) -> None:
        source = wrap("end", types="type Id = u64")
        (typedef,) = parse(source).types
        assert source[typedef.span.start : typedef.span.end] == "type Id = u64"


class TestStatements:
    """Phase body statements."""

    def test_send_with_fields(self) -> None:
        send = parse_body("Client -> Server: Login { user: string, token: bytes? } end")[0]
        assert isinstance(send, ir.SendStatement)
        assert send.message == "Login"
        assert [(f.name, f.optional) for f in send.fields] == [("user", False), ("token", True)]

    def test_choice_with_guards(self) -> None:
        choice = parse_body(
            "choice @Client {"
            "  Buy when @Client.wallet.has_funds { end }"
            "  Leave { end }"
            "}"
        )[0]
        assert isinstance(choice, ir.ChoiceStatement)
        assert choice.role == "Client"
        buy, leave = choice.branches
        assert buy.name == "Buy"
        assert buy.guard is not None
        assert (buy.guard.role, buy.guard.condition) == ("Client", "wallet.has_funds")
        assert isinstance(buy.body[0], ir.EndStatement)
        assert leave.guard is None

    def test_match_patterns(self) -> None:
        match = parse_body(
            "match Reply.status {"
            '  "ok" => { end }'
            "  ok => { end }"
            "  Status.Closed => { end }"
            "  42 => { end }"
            "  1.5 => { end }"
            "  true => { end }"
            "  _ => { end }"
            "}"
        )[0]
        assert isinstance(match, ir.MatchStatement)
        assert match.expr == "Reply.status"
        assert [arm.pattern for arm in match.arms] == [
            '"ok"',
            "ok",
            "Status.Closed",
            "42",
            "1.5",
            "true",
            "_",
        ]

    def test_continue_and_parallel(self) -> None:
        body = parse_body("parallel { Upload, Heartbeat } continue Main")
        parallel, cont = body
        assert isinstance(parallel, ir.ParallelStatement)
        assert parallel.branches == ["Upload", "Heartbeat"]
        assert isinstance(cont, ir.ContinueStatement)
        assert cont.target == "Main"

    def test_reliability_blocks(self) -> None:
        reliable, unreliable, _ = parse_body(
            "reliable { Client -> Server: A } unreliable { Server -> Client: B } end"
        )
        assert isinstance(reliable, ir.ReliableBlock)
        assert isinstance(reliable.body[0], ir.SendStatement)
        assert isinstance(unreliable, ir.UnreliableBlock)
        assert isinstance(unreliable.body[0], ir.SendStatement)

    def test_walk_statements_is_depth_first(self, bank_source: str) -> None:
        main = parse(bank_source).get_phase("Main")
        assert main is not None
        kinds = [type(s).__name__ for s in ir.walk_statements(main.body)]
        assert kinds == [
            "ChoiceStatement",
            "ReliableBlock",
            "SendStatement",
            "SendStatement",
            "ContinueStatement",
            "ParallelStatement",
            "SendStatement",
            "EndStatement",
        ]

    def test_bank_fixture(self, bank_source: str) -> None:
        protocol = parse(bank_source)
        assert [p.name for p in protocol.phases] == ["Login", "Main", "Statements", "Heartbeat"]
        assert [t.name for t in protocol.types] == ["AccountId", "Status", "Account", "Ledger"]


class TestParseErrors:
    """Fail-fast syntax errors."""

    def test_missing_roles(self) -> None:
        error = parse_error("protocol P { phase Main { end } }")
        assert error.diagnostic.kind == DiagnosticKind.UNEXPECTED_TOKEN
        assert error.diagnostic.message == "expected 'roles', found 'phase'"

    def test_missing_phase(self) -> None:
        error = parse_error("protocol P { roles A }")
        assert error.diagnostic.kind == DiagnosticKind.UNEXPECTED_TOKEN
        assert "'phase'" in error.diagnostic.message

    def test_keyword_as_identifier(self) -> None:
        error = parse_error(wrap("continue end"))
        assert error.diagnostic.kind == DiagnosticKind.SYNTAX
        assert "'end' is a reserved keyword" in error.diagnostic.message

    def test_struct_fields_need_separator(self) -> None:
        error = parse_error(wrap("end", types="type Event = { timestamp: u64 seq: u32 }"))
        assert error.diagnostic.kind == DiagnosticKind.UNEXPECTED_TOKEN
        assert "expected '}'" in error.diagnostic.message

    def test_type_after_phase(self) -> None:
        error = parse_error("protocol P { roles A phase Main { end } type T = u8 }")
        assert "before the first phase" in error.diagnostic.message

    def test_second_roles_clause(self) -> None:
        error = parse_error("protocol P { roles A phase Main { end } roles B }")
        assert "roles must be declared once" in error.diagnostic.message

    def test_empty_enum(self) -> None:
        error = parse_error(wrap("end", types="type E = enum { }"))
        assert error.diagnostic.kind == DiagnosticKind.SYNTAX
        assert "at least one variant" in error.diagnostic.message

    def test_empty_choice(self) -> None:
        error = parse_error(wrap("choice @Client { }"))
        assert error.diagnostic.kind == DiagnosticKind.UNEXPECTED_TOKEN
        assert error.diagnostic.message == "expected branch name, found '}'"

    def test_empty_match(self) -> None:
        error = parse_error(wrap("match x { }"))
        assert error.diagnostic.message == "expected match pattern, found '}'"

    def test_send_missing_colon(self) -> None:
        error = parse_error(wrap("Client -> Server Ping"))
        assert error.diagnostic.message == "expected ':', found identifier 'Ping'"

    def test_unknown_statement(self) -> None:
        error = parse_error(wrap("42"))
        assert error.diagnostic.message == "expected statement, found integer literal 42"

    def test_trailing_input(self, hello_source: str) -> None:
        error = parse_error(hello_source + "protocol Again")
        assert error.diagnostic.message == "expected end of input, found 'protocol'"

    def test_unclosed_phase(self) -> None:
        error = parse_error("protocol P { roles A phase Main { end")
        assert error.diagnostic.message == "expected '}', found end of input"

    def test_error_span(self) -> None:
        error = parse_error("protocol P {\n  roles A\n  phase 7 { end }\n}")
        span = error.diagnostic.span
        assert (span.line, span.column) == (3, 9)

    def test_lexical_error_surfaces_through_parse(self) -> None:
        error = parse_error(wrap("Client - Server: Ping"))
        assert error.diagnostic.kind == DiagnosticKind.LEXICAL


class TestParseFile:
    def test_parse_file(self, pdl_fixtures_dir: Path) -> None:
        protocol = parse_file(pdl_fixtures_dir / "bank.pdl")
        assert protocol.name == "Bank"

    def test_error_message_names_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.pdl"
        path.write_text("protocol Broken {", encoding="utf-8")
        with pytest.raises(ParseError) as exc_info:
            parse_file(path)
        assert str(path) in str(exc_info.value)
        assert exc_info.value.diagnostic.kind == DiagnosticKind.UNEXPECTED_TOKEN
