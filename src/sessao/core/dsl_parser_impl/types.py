"""
Type parsing for the Sessão PDL.

Handles type expressions, field lists, and `type` declarations.
"""

from typing import TYPE_CHECKING, Any

from .. import ir
from ..errors import make_parse_error
from ..ir.location import Span
from ..lexer import Token, TokenType


class TypeParserMixin:
    """
    Mixin providing type expression and type definition parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        expect_identifier: Any
        advance: Any
        match: Any
        current_token: Any
        peek_token: Any
        span_from: Any
        unexpected: Any

    def parse_type(self) -> ir.TypeExpr:
        """
        Parse a type expression.

        Examples:
            u32
            [string]
            {string: Account}
            Node?
        """
        token = self.current_token()
        start = token.span
        base: ir.TypeExpr

        if token.type == TokenType.IDENTIFIER:
            self.advance()
            if token.text in ir.PRIMITIVE_NAMES:
                base = ir.PrimitiveType(primitive=ir.PrimitiveKind(token.text), span=token.span)
            else:
                base = ir.NamedType(name=token.text, span=token.span)

        # [T]
        elif token.type == TokenType.LBRACKET:
            self.advance()
            element = self.parse_type()
            self.expect(TokenType.RBRACKET)
            base = ir.ArrayType(element=element, span=self.span_from(start))

        # {K: V}
        elif token.type == TokenType.LBRACE:
            self.advance()
            key = self.parse_type()
            self.expect(TokenType.COLON)
            value = self.parse_type()
            self.expect(TokenType.RBRACE)
            base = ir.MapType(key=key, value=value, span=self.span_from(start))

        else:
            raise self.unexpected("type")

        # T? (may repeat)
        return self._wrap_optional(base, start)

    def _wrap_optional(self, base: ir.TypeExpr, start: Span) -> ir.TypeExpr:
        while self.match(TokenType.QUESTION):
            self.advance()
            base = ir.OptionalType(inner=base, span=self.span_from(start))
        return base

    def parse_field(self) -> ir.FieldSpec:
        """Parse `name: Type`."""
        name_token = self.expect_identifier("field name")
        self.expect(TokenType.COLON)
        return self._finish_field(name_token, self.parse_type())

    def _finish_field(self, name_token: Token, field_type: ir.TypeExpr) -> ir.FieldSpec:
        """
        Build a field from its name and parsed type.

        A trailing '?' on the field's type marks the field optional rather
        than wrapping the type.
        """
        optional = False
        if isinstance(field_type, ir.OptionalType):
            optional = True
            field_type = field_type.inner

        return ir.FieldSpec(
            name=name_token.text,
            type=field_type,
            optional=optional,
            span=self.span_from(name_token.span),
        )

    def parse_field_list(self) -> list[ir.FieldSpec]:
        """Parse `{ field, field, ... }` (trailing comma allowed)."""
        self.expect(TokenType.LBRACE)
        return self._parse_remaining_fields([])

    def _parse_remaining_fields(self, fields: list[ir.FieldSpec]) -> list[ir.FieldSpec]:
        while not self.match(TokenType.RBRACE):
            fields.append(self.parse_field())
            if not self.match(TokenType.COMMA):
                break
            self.advance()

        self.expect(TokenType.RBRACE)
        return fields


    def parse_enum_body(self) -> ir.EnumBody:
        """
        Parse an enum body.

        Syntax:
            enum { Active, Suspended { reason: string }, Closed }
        """
        enum_token = self.advance()  # contextual 'enum'
        self.expect(TokenType.LBRACE)
        variants: list[ir.EnumVariant] = []

        while not self.match(TokenType.RBRACE):
            name_token = self.expect_identifier("variant name")
            fields: list[ir.FieldSpec] = []
            if self.match(TokenType.LBRACE):
                fields = self.parse_field_list()
            variants.append(
                ir.EnumVariant(
                    name=name_token.text, fields=fields, span=self.span_from(name_token.span)
                )
            )
            if not self.match(TokenType.COMMA):
                break
            self.advance()

        close = self.expect(TokenType.RBRACE)
        if not variants:
            raise make_parse_error(
                "enum must declare at least one variant", enum_token.span.merge(close.span)
            )
        return ir.EnumBody(variants=variants)

    def _starts_entry(self) -> bool:
        """True at `{ Ident :`, which opens either a struct field or a map key."""
        return (
            self.match(TokenType.LBRACE)
            and self.peek_token().type == TokenType.IDENTIFIER
            and self.peek_token(2).type == TokenType.COLON
        )

    def parse_braced_body(self) -> ir.TypeBody:
        """
        Parse a type body that opens with `{ Ident :`.

        A ',' after the first entry makes it a struct. A single entry is a
        map when its key starts with an uppercase letter and a struct field
        otherwise.

        Examples:
            { timestamp: u64, seq: u32 }
            { bytes: [u8] }
            {Status: u32}
        """
        start = self.expect(TokenType.LBRACE).span
        name_token = self.advance()
        self.expect(TokenType.COLON)
        value = self.parse_type()

        if self.match(TokenType.COMMA):
            first = self._finish_field(name_token, value)
            self.advance()
            return ir.StructBody(fields=self._parse_remaining_fields([first]))

        if not name_token.text[:1].isupper():
            first = self._finish_field(name_token, value)
            self.expect(TokenType.RBRACE)
            return ir.StructBody(fields=[first])

        self.expect(TokenType.RBRACE)
        key = ir.NamedType(name=name_token.text, span=name_token.span)
        target = ir.MapType(key=key, value=value, span=self.span_from(start))
        return ir.AliasBody(target=self._wrap_optional(target, start))

    def parse_type_body(self) -> ir.TypeBody:
        token = self.current_token()
        if (
            token.type == TokenType.IDENTIFIER
            and token.text == "enum"
            and self.peek_token().type == TokenType.LBRACE
        ):
            return self.parse_enum_body()

        if self.match(TokenType.LBRACE) and self.peek_token().type == TokenType.RBRACE:
            return ir.StructBody(fields=self.parse_field_list())

        if self._starts_entry():
            return self.parse_braced_body()

        return ir.AliasBody(target=self.parse_type())

    def parse_typedef(self) -> ir.TypeDef:
        """
        Parse a type definition.

        Syntax:
            type Point = { x: f64, y: f64 }
            type Shape = enum { Circle { radius: f64 }, Empty }
            type Names = [string]
        """
        start = self.expect(TokenType.TYPE).span
        name = self.expect_identifier("type name").text
        self.expect(TokenType.EQUALS)
        body = self.parse_type_body()
        return ir.TypeDef(name=name, body=body, span=self.span_from(start))
