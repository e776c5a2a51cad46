"""
Sessão PDL Parser Package.

This package provides a recursive-descent parser for the Sessão PDL.
The parser is built using mixins to separate parsing logic by construct type,
making it easier to maintain and extend.

The main exports are:
- Parser: The complete parser class
- parse_pdl: Convenience function to parse PDL source text

Usage:
    from sessao.core.dsl_parser_impl import parse_pdl

    protocol = parse_pdl(text)
"""

import logging

from .. import ir
from ..errors import make_parse_error
from ..lexer import TokenType, tokenize
from .base import BaseParser, ParserProtocol
from .statements import StatementParserMixin
from .types import TypeParserMixin

logger = logging.getLogger(__name__)


class Parser(
    BaseParser,
    TypeParserMixin,
    StatementParserMixin,
):
    """
    Complete Sessão PDL Parser.

    This class composes all parser mixins to provide full PDL parsing capability:

    - TypeParserMixin: Type expressions, field lists and type definitions
    - StatementParserMixin: Phase bodies (send, choice, match, ...)
    """

    def parse(self) -> ir.Protocol:
        """
        Parse the token stream as one protocol declaration.

        Returns:
            Protocol with every declaration in source order

        Raises:
            ParseError: At the first token that does not fit the grammar
        """
        start = self.expect(TokenType.PROTOCOL).span
        name = self.expect_identifier("protocol name").text
        self.expect(TokenType.LBRACE)

        roles = self.parse_roles()

        types: list[ir.TypeDef] = []
        while self.match(TokenType.TYPE):
            types.append(self.parse_typedef())

        if not self.match(TokenType.PHASE):
            raise self.unexpected("'phase'")

        phases: list[ir.Phase] = []
        while self.match(TokenType.PHASE):
            phases.append(self.parse_phase())

        if self.match(TokenType.TYPE):
            raise make_parse_error(
                "type definitions must appear before the first phase",
                self.current_token().span,
            )
        if self.match(TokenType.ROLES):
            raise make_parse_error(
                "roles must be declared once, at the start of the protocol",
                self.current_token().span,
            )

        self.expect(TokenType.RBRACE)
        span = self.span_from(start)
        self.expect(TokenType.EOF)

        logger.debug(
            "Parsed protocol %s: %d roles, %d types, %d phases",
            name,
            len(roles),
            len(types),
            len(phases),
        )
        return ir.Protocol(name=name, roles=roles, types=types, phases=phases, span=span)

    def parse_roles(self) -> list[ir.Role]:
        """
        Parse the roles clause.

        Syntax:
            roles Client, Server, Auditor
        """
        self.expect(TokenType.ROLES)
        token = self.expect_identifier("role name")
        roles = [ir.Role(name=token.text, span=token.span)]
        while self.match(TokenType.COMMA):
            self.advance()
            token = self.expect_identifier("role name")
            roles.append(ir.Role(name=token.text, span=token.span))
        return roles

    def parse_phase(self) -> ir.Phase:
        """
        Parse a phase declaration.

        Syntax:
            phase Handshake {
                Client -> Server: Hello
                continue Main
            }
        """
        start = self.expect(TokenType.PHASE).span
        name = self.expect_identifier("phase name").text
        body, close_span = self.parse_block()
        return ir.Phase(name=name, body=body, span=self.span_from(start), close_span=close_span)


def parse_pdl(text: str) -> ir.Protocol:
    """
    Parse complete PDL source.

    Args:
        text: PDL source text

    Returns:
        Parsed (not yet validated) Protocol
    """
    # Tokenize
    tokens = tokenize(text)

    # Parse
    parser = Parser(tokens)
    return parser.parse()


__all__ = [
    "Parser",
    "parse_pdl",
    "BaseParser",
    "ParserProtocol",
    "TypeParserMixin",
    "StatementParserMixin",
]
