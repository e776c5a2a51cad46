"""
Symbol tables for Sessão protocols.

Handles declaration collection and duplicate detection for roles, types and
phases. Tables are rebuilt for every analysis and never stored on the tree.
"""

from dataclasses import dataclass, field

from . import ir
from .errors import Diagnostic, DiagnosticKind, Label
from .ir.location import Span


@dataclass
class SymbolTable:
    """
    Name tables for one protocol.

    The first declaration of a name wins; later duplicates are reported and
    otherwise ignored.
    """

    roles: dict[str, ir.Role] = field(default_factory=dict)
    types: dict[str, ir.TypeDef] = field(default_factory=dict)
    phases: dict[str, ir.Phase] = field(default_factory=dict)

    # Position of each live phase in Protocol.phases (flow graph node ids)
    phase_index: dict[str, int] = field(default_factory=dict)

    def add_role(self, role: ir.Role) -> None:
        self.roles.setdefault(role.name, role)

    def add_type(self, typedef: ir.TypeDef) -> None:
        self.types.setdefault(typedef.name, typedef)

    def add_phase(self, phase: ir.Phase, index: int) -> None:
        if phase.name not in self.phases:
            self.phases[phase.name] = phase
            self.phase_index[phase.name] = index

    def has_role(self, name: str) -> bool:
        return name in self.roles

    def has_phase(self, name: str) -> bool:
        return name in self.phases

    def resolve_type(self, name: str) -> ir.TypeDef | None:
        return self.types.get(name)


def duplicate_diagnostics(subject: str, entries: list[tuple[str, Span]]) -> list[Diagnostic]:
    """
    Report names declared more than once in an ordered list.

    Produces exactly one diagnostic per duplicated name, pinned at its second
    declaration, with labels pointing at the first declaration and at any
    further repeats.

    Args:
        subject: What is being declared ("role", "field", "branch", ...)
        entries: (name, span) pairs in declaration order

    Returns:
        List of DUPLICATE diagnostics in order of first repeat
    """
    seen: dict[str, list[Span]] = {}
    for name, span in entries:
        seen.setdefault(name, []).append(span)

    diagnostics = []
    for name, spans in seen.items():
        if len(spans) < 2:
            continue
        labels = [Label(message="first declared here", span=spans[0])]
        labels.extend(Label(message="declared again here", span=span) for span in spans[2:])
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.DUPLICATE,
                message=f"duplicate {subject}: '{name}'",
                span=spans[1],
                labels=labels,
                subject=subject,
                name=name,
            )
        )
    # Sort by the position of the reported (second) declaration
    diagnostics.sort(key=lambda d: d.span.start)
    return diagnostics


def collect_symbols(protocol: ir.Protocol) -> tuple[SymbolTable, list[Diagnostic]]:
    """
    Build the role, type and phase tables for a protocol.

    Checks:
    - Role, type and phase names are unique
    - Type names do not shadow primitive types
    - At least one phase is declared

    Returns:
        Tuple of (symbol table, diagnostics)
    """
    symbols = SymbolTable()
    diagnostics: list[Diagnostic] = []

    for role in protocol.roles:
        symbols.add_role(role)
    diagnostics.extend(duplicate_diagnostics("role", [(r.name, r.span) for r in protocol.roles]))

    for typedef in protocol.types:
        if typedef.name in ir.PRIMITIVE_NAMES:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.TYPE,
                    message=f"type '{typedef.name}' shadows the primitive type of the same name",
                    span=typedef.span,
                    subject="type",
                    name=typedef.name,
                )
            )
        symbols.add_type(typedef)
    diagnostics.extend(duplicate_diagnostics("type", [(t.name, t.span) for t in protocol.types]))

    for index, phase in enumerate(protocol.phases):
        symbols.add_phase(phase, index)
    diagnostics.extend(duplicate_diagnostics("phase", [(p.name, p.span) for p in protocol.phases]))

    if not protocol.phases:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.TYPE,
                message=f"protocol '{protocol.name}' declares no phases",
                span=protocol.span,
                subject="protocol",
                name=protocol.name,
            )
        )

    return symbols, diagnostics
