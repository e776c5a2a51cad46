"""
Statement parsing for the Sessão PDL.

Handles phase bodies: sends, choices, matches, continue/end, parallel
composition and reliability blocks. Every statement form begins with a
distinct token, so one token of lookahead selects the rule.
"""

from typing import TYPE_CHECKING, Any

from .. import ir
from ..ir.location import Span
from ..lexer import TokenType, quote_string


class StatementParserMixin:
    """
    Mixin providing statement parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        expect_identifier: Any
        advance: Any
        match: Any
        current_token: Any
        span_from: Any
        unexpected: Any
        parse_field_list: Any

    def parse_block(self) -> tuple[list[ir.Statement], Span]:
        """
        Parse `{ Statement* }`.

        Returns:
            Tuple of (statements, span of the closing brace)
        """
        self.expect(TokenType.LBRACE)
        body: list[ir.Statement] = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            body.append(self.parse_statement())
        close = self.expect(TokenType.RBRACE)
        return body, close.span

    def parse_statement(self) -> ir.Statement:
        if self.match(TokenType.IDENTIFIER):
            return self.parse_send()
        elif self.match(TokenType.CHOICE):
            return self.parse_choice()
        elif self.match(TokenType.MATCH):
            return self.parse_match()
        elif self.match(TokenType.CONTINUE):
            start = self.advance().span
            target = self.expect_identifier("phase name").text
            return ir.ContinueStatement(target=target, span=self.span_from(start))
        elif self.match(TokenType.END):
            return ir.EndStatement(span=self.advance().span)
        elif self.match(TokenType.PARALLEL):
            return self.parse_parallel()
        elif self.match(TokenType.RELIABLE):
            start = self.advance().span
            body, _ = self.parse_block()
            return ir.ReliableBlock(body=body, span=self.span_from(start))
        elif self.match(TokenType.UNRELIABLE):
            start = self.advance().span
            body, _ = self.parse_block()
            return ir.UnreliableBlock(body=body, span=self.span_from(start))

        raise self.unexpected("statement")

    def parse_send(self) -> ir.SendStatement:
        """
        Parse a message send.

        Syntax:
            Client -> Server: Login { user: string, token: bytes? }
        """
        sender = self.expect_identifier("role name")
        self.expect(TokenType.ARROW)
        receiver = self.expect_identifier("role name").text
        self.expect(TokenType.COLON)
        message = self.expect_identifier("message name").text

        fields: list[ir.FieldSpec] = []
        if self.match(TokenType.LBRACE):
            fields = self.parse_field_list()

        return ir.SendStatement(
            sender=sender.text,
            receiver=receiver,
            message=message,
            fields=fields,
            span=self.span_from(sender.span),
        )

    def parse_choice(self) -> ir.ChoiceStatement:
        """
        Parse a choice block.

        Syntax:
            choice @Client {
                Buy when @Client.has_funds { ... }
                Leave { ... }
            }
        """
        start = self.expect(TokenType.CHOICE).span
        self.expect(TokenType.AT)
        role = self.expect_identifier("role name").text
        self.expect(TokenType.LBRACE)

        branches = [self.parse_choice_branch()]
        while not self.match(TokenType.RBRACE):
            branches.append(self.parse_choice_branch())
        self.expect(TokenType.RBRACE)

        return ir.ChoiceStatement(role=role, branches=branches, span=self.span_from(start))

    def parse_choice_branch(self) -> ir.ChoiceBranch:
        name_token = self.expect_identifier("branch name")

        guard = None
        if self.match(TokenType.WHEN):
            guard_start = self.advance().span
            self.expect(TokenType.AT)
            role = self.expect_identifier("role name").text
            self.expect(TokenType.DOT)
            condition = self.parse_path("guard condition")
            guard = ir.Guard(role=role, condition=condition, span=self.span_from(guard_start))

        body, _ = self.parse_block()
        return ir.ChoiceBranch(
            name=name_token.text, guard=guard, body=body, span=self.span_from(name_token.span)
        )

    def parse_path(self, what: str = "identifier") -> str:
        """Parse a dotted path such as `Reply.status` into its text."""
        parts = [self.expect_identifier(what).text]
        while self.match(TokenType.DOT):
            self.advance()
            parts.append(self.expect_identifier(what).text)
        return ".".join(parts)

    def parse_match(self) -> ir.MatchStatement:
        """
        Parse a match block.

        Syntax:
            match Reply.status {
                "ok" => { ... }
                _ => { ... }
            }
        """
        start = self.expect(TokenType.MATCH).span
        expr = self.parse_path("match expression")
        self.expect(TokenType.LBRACE)

        arms = [self.parse_match_arm()]
        while not self.match(TokenType.RBRACE):
            arms.append(self.parse_match_arm())
        self.expect(TokenType.RBRACE)

        return ir.MatchStatement(expr=expr, arms=arms, span=self.span_from(start))

    def parse_match_arm(self) -> ir.MatchArm:
        start = self.current_token().span
        pattern = self.parse_pattern()
        self.expect(TokenType.FAT_ARROW)
        body, _ = self.parse_block()
        return ir.MatchArm(pattern=pattern, body=body, span=self.span_from(start))

    def parse_pattern(self) -> str:
        """
        Parse a match pattern into its opaque text.

        String literals keep their quotes so that `"ok"` and `ok` stay
        distinct patterns.
        """
        token = self.current_token()
        if token.type == TokenType.IDENTIFIER:
            return self.parse_path("pattern")
        elif token.type == TokenType.STRING:
            self.advance()
            return quote_string(token.text)
        elif token.type in (TokenType.INTEGER, TokenType.FLOAT):
            self.advance()
            return token.text
        elif token.type in (TokenType.TRUE, TokenType.FALSE):
            self.advance()
            return token.text

        raise self.unexpected("match pattern")

    def parse_parallel(self) -> ir.ParallelStatement:
        """
        Parse parallel composition.

        Syntax:
            parallel { Upload, Heartbeat }
        """
        start = self.expect(TokenType.PARALLEL).span
        self.expect(TokenType.LBRACE)

        branches = [self.expect_identifier("phase name").text]
        while self.match(TokenType.COMMA):
            self.advance()
            branches.append(self.expect_identifier("phase name").text)
        self.expect(TokenType.RBRACE)

        return ir.ParallelStatement(branches=branches, span=self.span_from(start))
