"""
Sessão - Protocol Definition Language front end.

Parses `.pdl` descriptions of multiparty session protocols (roles, message
types, phases) and validates them for downstream code generators, checkers
and simulators.
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

# Re-export commonly used types for convenience
from .core import ir
from .core.analyzer import AnalysisResult, analyze
from .core.config import AnalyzerOptions, load_options
from .core.errors import (
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
from .core.formatter import format_protocol
from .core.lexer import Token, TokenType, tokenize
from .core.parser import check, parse, parse_and_validate, parse_file


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    # In editable mode, read directly from pyproject.toml for live updates
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    # Fall back to installed metadata
    try:
        return _metadata_version("sessao-lang")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "SessaoError",
    "ParseError",
    "ValidationError",
    "InternalError",
    "ConfigError",
    "Diagnostic",
    "DiagnosticKind",
    "Severity",
    "Label",
    "Token",
    "TokenType",
    "tokenize",
    "parse",
    "parse_file",
    "parse_and_validate",
    "check",
    "analyze",
    "AnalysisResult",
    "AnalyzerOptions",
    "load_options",
    "format_protocol",
]
