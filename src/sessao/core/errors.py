"""
Error types for Sessão PDL lexing, parsing, and analysis.

Problems are described by `Diagnostic` values (kind, message, primary span,
secondary labels). Lexing and parsing are fail-fast and raise a
`ParseError` carrying a single diagnostic; analysis accumulates
diagnostics and raises `ValidationError` only at the API boundary.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .ir.location import Span


class DiagnosticKind(str, Enum):
    """Diagnostic taxonomy."""

    LEXICAL = "lexical"  # Malformed character or token
    SYNTAX = "syntax"  # Grammar or structural violation
    UNEXPECTED_TOKEN = "unexpected_token"
    UNDEFINED = "undefined"  # Reference to an unknown role/type/phase
    DUPLICATE = "duplicate"  # Conflicting declaration
    TYPE = "type"  # Static well-formedness violation
    INTERNAL = "internal"  # Defect in this tool, never user-caused


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Label(BaseModel):
    """A secondary message attached to another source location."""

    message: str
    span: Span

    model_config = ConfigDict(frozen=True)


class Diagnostic(BaseModel):
    """
    A structured, span-anchored problem report.

    Attributes:
        kind: Diagnostic category
        message: Human-readable description
        span: Primary source location
        labels: Secondary (message, span) annotations
        severity: ERROR blocks validation, WARNING does not
        subject: What the diagnostic is about ("role", "type", "phase", ...)
        name: The offending name, when there is one
    """

    kind: DiagnosticKind
    message: str
    span: Span
    labels: list[Label] = Field(default_factory=list)
    severity: Severity = Severity.ERROR
    subject: str | None = None
    name: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def with_severity(self, severity: Severity) -> Diagnostic:
        return self.model_copy(update={"severity": severity})

    def __str__(self) -> str:
        return f"{self.span}: {self.severity.value}[{self.kind.value}]: {self.message}"


class SessaoError(Exception):
    """Base exception for all Sessão errors."""

    def __init__(self, message: str, diagnostics: list[Diagnostic] | None = None):
        self.message = message
        self.diagnostics = list(diagnostics or [])
        super().__init__(message)


class ParseError(SessaoError):
    """
    Raised when PDL source cannot be tokenized or parsed.

    Examples:
    - Unknown character or unterminated string
    - Unexpected token
    - Missing phase declarations
    """

    @property
    def diagnostic(self) -> Diagnostic:
        return self.diagnostics[0]


class ValidationError(SessaoError):
    """
    Raised when a Protocol fails semantic analysis.

    Examples:
    - Send between undeclared roles
    - Continue to a phase that does not exist
    - Phase body that can fall off its end
    - Ambiguous unguarded choice branches
    """

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]


class InternalError(SessaoError):
    """Raised when the analyzer meets a tree it cannot have produced."""

    @property
    def diagnostic(self) -> Diagnostic:
        return self.diagnostics[0]


class ConfigError(SessaoError):
    """Raised when analyzer options cannot be loaded."""

    pass


def make_parse_error(
    message: str, span: Span, kind: DiagnosticKind = DiagnosticKind.SYNTAX
) -> ParseError:
    """
    Helper to create a ParseError carrying one diagnostic.

    Args:
        message: Error description
        span: Location of the offending text
        kind: LEXICAL or SYNTAX

    Returns:
        ParseError with its diagnostic attached
    """
    diagnostic = Diagnostic(kind=kind, message=message, span=span)
    return ParseError(f"{span}: {message}", [diagnostic])


def make_unexpected_token_error(expected: str, found: str, span: Span) -> ParseError:
    """Helper for the common 'expected X, found Y' parse failure."""
    message = f"expected {expected}, found {found}"
    diagnostic = Diagnostic(kind=DiagnosticKind.UNEXPECTED_TOKEN, message=message, span=span)
    return ParseError(f"{span}: {message}", [diagnostic])


def make_internal_error(message: str, span: Span) -> InternalError:
    diagnostic = Diagnostic(
        kind=DiagnosticKind.INTERNAL, message=f"internal error: {message}", span=span
    )
    return InternalError(f"{span}: internal error: {message}", [diagnostic])


def make_validation_error(diagnostics: list[Diagnostic]) -> ValidationError:
    """
    Helper to create a ValidationError summarising accumulated diagnostics.

    Args:
        diagnostics: Every diagnostic produced by analysis, errors and warnings

    Returns:
        ValidationError whose message lists the errors
    """
    errors = [d for d in diagnostics if d.is_error]
    lines = [f"Protocol validation failed with {len(errors)} error(s):"]
    lines.extend(f"  - {d}" for d in errors)
    return ValidationError("\n".join(lines), diagnostics)
