"""
Semantic analysis of parsed Sessão protocols.

Runs the validation passes in a fixed order over one protocol and collects
their diagnostics. Analysis never raises for user errors; the caller decides
what to do with the result.
"""

import logging
from dataclasses import dataclass, field

from . import ir
from .config import AnalyzerOptions
from .errors import Diagnostic, Severity
from .flow import build_flow_graph
from .symbols import collect_symbols
from .validator import (
    validate_choices,
    validate_flow,
    validate_matches,
    validate_reachability,
    validate_roles,
    validate_types,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Outcome of analyzing one protocol.

    Attributes:
        protocol: The analyzed protocol when no error was found, else None
        diagnostics: Every diagnostic, errors and warnings, in pass order
    """

    protocol: ir.Protocol | None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def is_valid(self) -> bool:
        return self.protocol is not None


def analyze(protocol: ir.Protocol, options: AnalyzerOptions | None = None) -> AnalysisResult:
    """
    Analyze a protocol for semantic errors and warnings.

    Performs, in order:
    - Symbol collection (duplicate roles/types/phases, primitive shadowing)
    - Type resolution (undefined types, alias cycles, map keys)
    - Role resolution (send/choice/guard roles, self-sends, field names)
    - Phase flow (continue/parallel targets, fall-through, dead statements)
    - Reachability from the entry phase
    - Choice well-formedness
    - Match well-formedness

    Every pass runs even when earlier passes found errors.

    Args:
        protocol: Parsed protocol
        options: Analyzer options (defaults when None)

    Returns:
        AnalysisResult; `protocol` is set only when there are no errors
    """
    options = options or AnalyzerOptions()
    diagnostics: list[Diagnostic] = []

    symbols, found = collect_symbols(protocol)
    logger.debug("symbols: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    found = validate_types(protocol, symbols)
    logger.debug("types: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    found = validate_roles(protocol, symbols)
    logger.debug("roles: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    found = validate_flow(protocol, symbols, options)
    logger.debug("flow: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    graph = build_flow_graph(protocol, symbols)
    found = validate_reachability(protocol, graph, options)
    logger.debug("reachability: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    found = validate_choices(protocol)
    logger.debug("choices: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    found = validate_matches(protocol)
    logger.debug("matches: %d diagnostic(s)", len(found))
    diagnostics.extend(found)

    if options.warnings_as_errors:
        diagnostics = [d if d.is_error else d.with_severity(Severity.ERROR) for d in diagnostics]

    has_errors = any(d.is_error for d in diagnostics)
    logger.debug(
        "Analyzed protocol %s: %d diagnostic(s), valid=%s",
        protocol.name,
        len(diagnostics),
        not has_errors,
    )
    return AnalysisResult(protocol=None if has_errors else protocol, diagnostics=diagnostics)
