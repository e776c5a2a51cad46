"""Core Sessão functionality: IR, lexer, parser, analyzer, formatter, configuration."""

from . import ir
from .analyzer import AnalysisResult, analyze
from .config import AnalyzerOptions, load_options
from .errors import (
    ConfigError,
    Diagnostic,
    DiagnosticKind,
    InternalError,
    Label,
    ParseError,
    SessaoError,
    Severity,
    ValidationError,
)
from .formatter import format_protocol
from .lexer import Token, TokenType, tokenize
from .parser import check, parse, parse_and_validate, parse_file

__all__ = [
    "ir",
    # Errors
    "SessaoError",
    "ParseError",
    "ValidationError",
    "InternalError",
    "ConfigError",
    "Diagnostic",
    "DiagnosticKind",
    "Severity",
    "Label",
    # Lexing and parsing
    "Token",
    "TokenType",
    "tokenize",
    "parse",
    "parse_file",
    # Analysis
    "AnalysisResult",
    "AnalyzerOptions",
    "analyze",
    "check",
    "load_options",
    "parse_and_validate",
    # Output
    "format_protocol",
]
