"""
Base parser class for the Sessão PDL.

Provides common token manipulation and utility methods used by all parser mixins.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..errors import make_parse_error, make_unexpected_token_error
from ..ir.location import Span
from ..lexer import Token, TokenType

if TYPE_CHECKING:
    from .. import ir


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    This allows mypy to understand that mixins will have access to
    BaseParser methods when combined in the final Parser class.
    """

    tokens: list[Token]
    pos: int

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def previous_token(self) -> Token: ...
    def advance(self) -> Token: ...
    def expect(self, token_type: TokenType) -> Token: ...
    def expect_identifier(self, what: str = "identifier") -> Token: ...
    def match(self, *token_types: TokenType) -> bool: ...
    def span_from(self, start: Span) -> Span: ...

    # Methods from other mixins that may be called cross-mixin
    def parse_type(self) -> "ir.TypeExpr": ...
    def parse_field_list(self) -> "list[ir.FieldSpec]": ...
    def parse_block(self) -> "tuple[list[ir.Statement], Span]": ...


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    This class provides the foundation for recursive descent parsing,
    including token navigation, matching, and error generation.
    """

    def __init__(self, tokens: list[Token]):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer, ending with EOF
        """
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token stream must end with an EOF token")
        self.tokens = tokens
        self.pos = 0

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def previous_token(self) -> Token:
        """Most recently consumed token."""
        return self.tokens[max(self.pos - 1, 0)]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            ParseError: If token doesn't match
        """
        token = self.current_token()
        if token.type != token_type:
            raise make_unexpected_token_error(token_type.describe(), token.describe(), token.span)
        return self.advance()

    def expect_identifier(self, what: str = "identifier") -> Token:
        """
        Expect an identifier and consume it.

        Reserved keywords get a dedicated message since they are the most
        common reason an identifier is rejected.
        """
        token = self.current_token()
        if token.type == TokenType.IDENTIFIER:
            return self.advance()

        if token.type.value.isalpha() and token.type.value.islower():
            raise make_parse_error(
                f"'{token.type.value}' is a reserved keyword and cannot be used as {what}",
                token.span,
            )
        raise make_unexpected_token_error(what, token.describe(), token.span)

    def unexpected(self, expected: str) -> Exception:
        """Build an error for the current token given a description of what was expected."""
        token = self.current_token()
        return make_unexpected_token_error(expected, token.describe(), token.span)

    def span_from(self, start: Span) -> Span:
        """Span from `start` through the most recently consumed token."""
        return start.merge(self.previous_token().span)
