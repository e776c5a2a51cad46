import logging
from pathlib import Path

from . import ir
from .analyzer import AnalysisResult, analyze
from .config import AnalyzerOptions
from .dsl_parser_impl import parse_pdl
from .errors import ParseError, make_validation_error

logger = logging.getLogger(__name__)


def parse(source: str, file: Path | None = None) -> ir.Protocol:
    """
    Tokenize and parse PDL source into a Protocol.

    Args:
        source: PDL source text
        file: Path the source was read from, used only in error messages

    Returns:
        Parsed (not yet validated) Protocol

    Raises:
        ParseError: On the first lexical or syntax error
    """
    try:
        return parse_pdl(source)
    except ParseError as e:
        if file is None:
            raise
        # Include file context in the message; diagnostics stay as they are
        raise ParseError(f"{file}:{e.message}", e.diagnostics) from e


def parse_file(path: Path) -> ir.Protocol:
    """
    Parse a `.pdl` file.

    Args:
        path: UTF-8 encoded PDL file

    Returns:
        Parsed (not yet validated) Protocol
    """
    logger.debug("Parsing %s", path)
    return parse(path.read_text(encoding="utf-8"), path)


def check(source: str, options: AnalyzerOptions | None = None) -> AnalysisResult:
    """
    Parse and analyze source, reporting every problem as a diagnostic.

    Lexical and syntax failures become the single diagnostic of the
    result; internal errors still propagate.

    Args:
        source: PDL source text
        options: Analyzer options (defaults when None)

    Returns:
        AnalysisResult
    """
    try:
        protocol = parse(source)
    except ParseError as e:
        return AnalysisResult(protocol=None, diagnostics=list(e.diagnostics))
    return analyze(protocol, options)


def parse_and_validate(source: str, options: AnalyzerOptions | None = None) -> ir.Protocol:
    """
    Parse and analyze source, returning a validated Protocol.

    Warnings are logged and do not fail validation.

    Args:
        source: PDL source text
        options: Analyzer options (defaults when None)

    Returns:
        Validated Protocol

    Raises:
        ParseError: On the first lexical or syntax error
        ValidationError: If analysis found errors; carries every diagnostic
    """
    protocol = parse(source)
    result = analyze(protocol, options)

    if result.protocol is None:
        raise make_validation_error(result.diagnostics)

    for warning in result.warnings:
        logger.warning("%s", warning)
    return result.protocol
