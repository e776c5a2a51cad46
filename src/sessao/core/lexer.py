"""
Lexer/Tokenizer for the Sessão PDL.

Converts raw PDL text into a stream of tokens with source spans.
Whitespace and `//` line comments are skipped; the stream always ends
with a single EOF token.
"""

from dataclasses import dataclass
from enum import Enum

from .errors import DiagnosticKind, make_parse_error
from .ir.location import Span


class TokenType(Enum):
    """Token types in the Sessão PDL."""

    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"

    # Keywords
    PROTOCOL = "protocol"
    ROLES = "roles"
    PHASE = "phase"
    CHOICE = "choice"
    MATCH = "match"
    CONTINUE = "continue"
    END = "end"
    WHEN = "when"
    PARALLEL = "parallel"
    RELIABLE = "reliable"
    UNRELIABLE = "unreliable"
    TYPE = "type"
    TRUE = "true"
    FALSE = "false"

    # Operators
    ARROW = "->"
    FAT_ARROW = "=>"
    EQUALS = "="
    COLON = ":"
    COMMA = ","
    DOT = "."
    AT = "@"
    QUESTION = "?"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LPAREN = "("
    RPAREN = ")"

    # Special
    EOF = "EOF"

    def describe(self) -> str:
        """Name of the token type as used in error messages."""
        if self in _DESCRIPTIONS:
            return _DESCRIPTIONS[self]
        return f"'{self.value}'"


_DESCRIPTIONS = {
    TokenType.IDENTIFIER: "identifier",
    TokenType.STRING: "string literal",
    TokenType.INTEGER: "integer literal",
    TokenType.FLOAT: "float literal",
    TokenType.EOF: "end of input",
}

# Keywords mapping
KEYWORDS = {
    "protocol",
    "roles",
    "phase",
    "choice",
    "match",
    "continue",
    "end",
    "when",
    "parallel",
    "reliable",
    "unreliable",
    "type",
    "true",
    "false",
}

BOOLEAN_LITERALS = {"true", "false"}

SINGLE_CHAR_TOKENS = {
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "@": TokenType.AT,
    "?": TokenType.QUESTION,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}

STRING_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


def quote_string(value: str) -> str:
    """Render a string value as a literal that lexes back to the same value."""
    reverse = {v: k for k, v in STRING_ESCAPES.items()}
    escaped = "".join(f"\\{reverse[ch]}" if ch in reverse else ch for ch in value)
    return f'"{escaped}"'


@dataclass(frozen=True)
class Token:
    """
    A single token in the PDL.

    Attributes:
        type: Type of token
        span: Exact source extent
        text: Identifier name or literal value (including `true`/`false`);
            empty for other keywords and symbols
    """

    type: TokenType
    span: Span
    text: str = ""

    def describe(self) -> str:
        """Human-readable form used in 'found ...' messages."""
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.text}'"
        if self.type == TokenType.STRING:
            return f'string literal "{self.text}"'
        if self.type in (TokenType.INTEGER, TokenType.FLOAT):
            return f"{self.type.describe()} {self.text}"
        return self.type.describe()

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.text!r}, {self.span.line}:{self.span.column})"


def _is_digit(ch: str | None) -> bool:
    return ch is not None and "0" <= ch <= "9"


def _is_identifier_start(ch: str | None) -> bool:
    return ch is not None and (ch.isalpha() or ch == "_")


def _is_identifier_char(ch: str | None) -> bool:
    return ch is not None and (ch.isalpha() or _is_digit(ch) or ch == "_")


class Lexer:
    """
    Lexer for the Sessão PDL.

    Single pass and non-backtracking: every decision is made on the current
    character plus at most one character of lookahead.
    """

    def __init__(self, text: str):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
        """
        self.text = text
        self.pos = 0  # index into text (code points)
        self.offset = 0  # UTF-8 byte offset of pos
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating offsets and line/column."""
        if self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.offset += len(ch.encode("utf-8"))
            self.pos += 1

    def mark(self) -> tuple[int, int, int]:
        """Snapshot of the current position for building spans."""
        return self.offset, self.line, self.column

    def span_from(self, mark: tuple[int, int, int]) -> Span:
        start, line, column = mark
        return Span(start=start, end=self.offset, line=line, column=column)

    def char_span(self) -> Span:
        """Span of the single character at the current position."""
        ch = self.current_char() or ""
        return Span(
            start=self.offset,
            end=self.offset + len(ch.encode("utf-8")),
            line=self.line,
            column=self.column,
        )

    def skip_whitespace_and_comments(self) -> None:
        """Skip whitespace and `//` comments."""
        while True:
            ch = self.current_char()
            if ch is not None and ch.isspace():
                self.advance()
            elif ch == "/" and self.peek_char() == "/":
                while self.current_char() is not None and self.current_char() != "\n":
                    self.advance()
            else:
                return

    def read_string(self) -> Token:
        """Read a double-quoted string literal."""
        start = self.mark()
        quote_span = self.char_span()
        self.advance()  # skip opening quote

        chars = []
        while True:
            current = self.current_char()
            if current is None:
                raise make_parse_error(
                    "unterminated string literal", quote_span, DiagnosticKind.LEXICAL
                )
            if current == '"':
                break

            if current == "\\":
                escape_span = self.char_span()
                self.advance()
                escape_char = self.current_char()
                if escape_char is None:
                    raise make_parse_error(
                        "unterminated string literal", quote_span, DiagnosticKind.LEXICAL
                    )
                if escape_char not in STRING_ESCAPES:
                    raise make_parse_error(
                        f"invalid escape sequence '\\{escape_char}'",
                        escape_span,
                        DiagnosticKind.LEXICAL,
                    )
                chars.append(STRING_ESCAPES[escape_char])
                self.advance()
            else:
                chars.append(current)
                self.advance()

        self.advance()  # skip closing quote
        return Token(TokenType.STRING, self.span_from(start), "".join(chars))

    def read_number(self) -> Token:
        """
        Read an integer or float literal.

        A float is digits, exactly one '.', then more digits.
        """
        start = self.mark()
        chars = []
        while _is_digit(self.current_char()):
            chars.append(self.current_char())
            self.advance()

        if _is_identifier_start(self.current_char()):
            raise make_parse_error(
                f"malformed number '{''.join(chars)}{self.current_char()}'",
                self.char_span(),
                DiagnosticKind.LEXICAL,
            )
        if self.current_char() != ".":
            return Token(TokenType.INTEGER, self.span_from(start), "".join(chars))

        dot_span = self.char_span()
        chars.append(".")
        self.advance()
        if not _is_digit(self.current_char()):
            raise make_parse_error(
                f"malformed number '{''.join(chars)}': expected digits after '.'",
                dot_span,
                DiagnosticKind.LEXICAL,
            )
        while _is_digit(self.current_char()):
            chars.append(self.current_char())
            self.advance()

        if self.current_char() == "." or _is_identifier_start(self.current_char()):
            raise make_parse_error(
                f"malformed number '{''.join(chars)}{self.current_char()}'",
                self.char_span(),
                DiagnosticKind.LEXICAL,
            )
        return Token(TokenType.FLOAT, self.span_from(start), "".join(chars))

    def read_identifier(self) -> Token:
        """Read an identifier or keyword."""
        start = self.mark()
        chars = []
        while _is_identifier_char(self.current_char()):
            chars.append(self.current_char())
            self.advance()

        value = "".join(chars)
        span = self.span_from(start)
        if value in BOOLEAN_LITERALS:
            return Token(TokenType(value), span, value)
        if value in KEYWORDS:
            return Token(TokenType(value), span)
        return Token(TokenType.IDENTIFIER, span, value)

    def read_symbol(self) -> Token:
        """Read an operator or punctuation token, longest match first."""
        start = self.mark()
        ch = self.current_char()
        next_ch = self.peek_char()

        if ch == "-":
            if next_ch == ">":
                self.advance()
                self.advance()
                return Token(TokenType.ARROW, self.span_from(start))
            raise make_parse_error(
                "unexpected character '-' (did you mean '->'?)",
                self.char_span(),
                DiagnosticKind.LEXICAL,
            )

        if ch == "=":
            if next_ch == ">":
                self.advance()
                self.advance()
                return Token(TokenType.FAT_ARROW, self.span_from(start))
            self.advance()
            return Token(TokenType.EQUALS, self.span_from(start))

        if ch in SINGLE_CHAR_TOKENS:
            self.advance()
            return Token(SINGLE_CHAR_TOKENS[ch], self.span_from(start))

        raise make_parse_error(
            f"unexpected character {ch!r} at line {self.line}, column {self.column}",
            self.char_span(),
            DiagnosticKind.LEXICAL,
        )

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            ParseError: On the first lexical error
        """
        while True:
            self.skip_whitespace_and_comments()

            ch = self.current_char()
            if ch is None:
                break

            if ch == '"':
                self.tokens.append(self.read_string())
            elif _is_digit(ch):
                self.tokens.append(self.read_number())
            elif _is_identifier_start(ch):
                self.tokens.append(self.read_identifier())
            else:
                self.tokens.append(self.read_symbol())

        # Add EOF token
        self.tokens.append(Token(TokenType.EOF, self.span_from(self.mark())))

        return self.tokens


def tokenize(text: str) -> list[Token]:
    """
    Convenience function to tokenize PDL text.

    Args:
        text: Source text

    Returns:
        List of tokens
    """
    lexer = Lexer(text)
    return lexer.tokenize()
