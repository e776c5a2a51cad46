"""
Semantic validation passes for Sessão protocols.

Each pass inspects the whole protocol against a prebuilt symbol table and
returns its own list of diagnostics; the analyzer concatenates them. No pass
modifies the tree.
"""

from . import ir
from .config import AnalyzerOptions
from .errors import Diagnostic, DiagnosticKind, Label, Severity, make_internal_error
from .flow import (
    FlowGraph,
    body_terminates,
    fallthrough_sites,
    phase_references,
    unreachable_statements,
)
from .ir.location import Span
from .symbols import SymbolTable, duplicate_diagnostics

LEVEL_SEVERITY = {"warning": Severity.WARNING, "error": Severity.ERROR}


# =============================================================================
# Tree walking helpers
# =============================================================================


def iter_statements(protocol: ir.Protocol):
    """Yield (phase, statement) for every statement in every phase, depth first."""
    for phase in protocol.phases:
        for statement in ir.walk_statements(phase.body):
            yield phase, statement


def iter_field_lists(protocol: ir.Protocol):
    """Yield (owner description, fields) for every field list in the protocol."""
    for typedef in protocol.types:
        if isinstance(typedef.body, ir.StructBody):
            yield f"struct '{typedef.name}'", typedef.body.fields
        elif isinstance(typedef.body, ir.EnumBody):
            for variant in typedef.body.variants:
                yield f"variant '{typedef.name}.{variant.name}'", variant.fields
    for _, statement in iter_statements(protocol):
        if isinstance(statement, ir.SendStatement):
            yield f"message '{statement.message}'", statement.fields


def iter_type_exprs(type_expr: ir.TypeExpr):
    """Yield a type expression and all of its components, outermost first."""
    yield type_expr
    if isinstance(type_expr, ir.ArrayType):
        yield from iter_type_exprs(type_expr.element)
    elif isinstance(type_expr, ir.MapType):
        yield from iter_type_exprs(type_expr.key)
        yield from iter_type_exprs(type_expr.value)
    elif isinstance(type_expr, ir.OptionalType):
        yield from iter_type_exprs(type_expr.inner)
    elif not isinstance(type_expr, (ir.PrimitiveType, ir.NamedType)):
        raise make_internal_error(
            f"unknown type expression {type(type_expr).__name__}",
            getattr(type_expr, "span", Span.dummy()),
        )


def _type_roots(protocol: ir.Protocol):
    """Every top-level type expression written in the protocol, in source order."""
    for typedef in protocol.types:
        if isinstance(typedef.body, ir.AliasBody):
            yield typedef.body.target
        elif isinstance(typedef.body, ir.StructBody):
            yield from (field.type for field in typedef.body.fields)
        elif isinstance(typedef.body, ir.EnumBody):
            for variant in typedef.body.variants:
                yield from (field.type for field in variant.fields)
    for _, statement in iter_statements(protocol):
        if isinstance(statement, ir.SendStatement):
            yield from (field.type for field in statement.fields)


# =============================================================================
# Type resolution
# =============================================================================


def _follow_alias(name: str, symbols: SymbolTable) -> ir.TypeDef | ir.TypeExpr | None:
    """
    Resolve a type name through alias chains.

    Returns:
        The first non-alias TypeDef, or the first non-named alias target,
        or None when the chain is unresolved or cyclic
    """
    seen: set[str] = set()
    while name not in seen:
        seen.add(name)
        typedef = symbols.resolve_type(name)
        if typedef is None:
            return None
        if not isinstance(typedef.body, ir.AliasBody):
            return typedef
        target = typedef.body.target
        if not isinstance(target, ir.NamedType):
            return target
        name = target.name
    return None


def _check_map_key(map_type: ir.MapType, symbols: SymbolTable) -> Diagnostic | None:
    key = map_type.key
    if isinstance(key, ir.PrimitiveType):
        return None

    resolved: ir.TypeDef | ir.TypeExpr | None = key
    if isinstance(key, ir.NamedType):
        resolved = _follow_alias(key.name, symbols)
        if resolved is None:
            # Undefined or cyclic, reported elsewhere
            return None
        if isinstance(resolved, ir.TypeDef) and resolved.is_enum:
            return None
        if isinstance(resolved, ir.PrimitiveType):
            return None

    return Diagnostic(
        kind=DiagnosticKind.TYPE,
        message=f"map key must be a primitive or enum type, found '{key}'",
        span=key.span,
        labels=[Label(message="in this map type", span=map_type.span)],
        subject="type",
        name=str(key),
    )


def _alias_cycles(protocol: ir.Protocol, symbols: SymbolTable) -> list[list[str]]:
    """Alias chains that lead back to themselves with no indirection."""
    cycles = []
    visited: set[str] = set()

    for typedef in protocol.types:
        if typedef.name in visited or symbols.resolve_type(typedef.name) is not typedef:
            continue
        path: list[str] = []
        current: ir.TypeDef | None = typedef
        while current is not None and isinstance(current.body, ir.AliasBody):
            if current.name in path:
                cycles.append(path[path.index(current.name) :])
                break
            if current.name in visited:
                break
            path.append(current.name)
            target = current.body.target
            if not isinstance(target, ir.NamedType):
                break
            current = symbols.resolve_type(target.name)
        visited.update(path)

    return cycles


def validate_types(protocol: ir.Protocol, symbols: SymbolTable) -> list[Diagnostic]:
    """
    Resolve every named type and check type shapes.

    Checks:
    - Named types refer to declared type definitions
    - Aliases are not defined in terms of themselves without indirection
    - Map keys are primitives or enums

    Returns:
        List of diagnostics
    """
    diagnostics: list[Diagnostic] = []

    for root in _type_roots(protocol):
        for type_expr in iter_type_exprs(root):
            if isinstance(type_expr, ir.NamedType):
                if symbols.resolve_type(type_expr.name) is None:
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.UNDEFINED,
                            message=f"undefined type: '{type_expr.name}'",
                            span=type_expr.span,
                            subject="type",
                            name=type_expr.name,
                        )
                    )
            elif isinstance(type_expr, ir.MapType):
                key_error = _check_map_key(type_expr, symbols)
                if key_error:
                    diagnostics.append(key_error)

    for cycle in _alias_cycles(protocol, symbols):
        head = symbols.types[cycle[0]]
        if len(cycle) == 1:
            message = (
                f"illegal recursive alias: '{head.name}' is defined as itself; "
                "recursion needs a struct field, optional, array or map in between"
            )
        else:
            chain = " -> ".join([*cycle, cycle[0]])
            message = f"illegal recursive alias: {chain}"
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.TYPE,
                message=message,
                span=head.span,
                labels=[
                    Label(message=f"'{name}' is part of the cycle", span=symbols.types[name].span)
                    for name in cycle[1:]
                ],
                subject="type",
                name=head.name,
            )
        )

    return diagnostics


# =============================================================================
# Role and message resolution
# =============================================================================


def _undefined_role(name: str, span: Span) -> Diagnostic:
    return Diagnostic(
        kind=DiagnosticKind.UNDEFINED,
        message=f"undefined role: '{name}'",
        span=span,
        subject="role",
        name=name,
    )


def validate_roles(protocol: ir.Protocol, symbols: SymbolTable) -> list[Diagnostic]:
    """
    Resolve role references and check message shapes.

    Checks:
    - Send sender/receiver, choice roles and guard roles are declared
    - A role never sends to itself
    - Field names are unique within each struct, variant and message
    - Variant names are unique within each enum

    Returns:
        List of diagnostics
    """
    diagnostics: list[Diagnostic] = []

    for _, statement in iter_statements(protocol):
        if isinstance(statement, ir.SendStatement):
            for name in dict.fromkeys((statement.sender, statement.receiver)):
                if not symbols.has_role(name):
                    diagnostics.append(_undefined_role(name, statement.span))
            if statement.sender == statement.receiver:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.TYPE,
                        message=f"role '{statement.sender}' cannot send a message to itself",
                        span=statement.span,
                        subject="role",
                        name=statement.sender,
                    )
                )

        elif isinstance(statement, ir.ChoiceStatement):
            if not symbols.has_role(statement.role):
                diagnostics.append(_undefined_role(statement.role, statement.span))
            for branch in statement.branches:
                if branch.guard and not symbols.has_role(branch.guard.role):
                    diagnostics.append(_undefined_role(branch.guard.role, branch.guard.span))

        elif not isinstance(
            statement,
            (
                ir.MatchStatement,
                ir.ContinueStatement,
                ir.EndStatement,
                ir.ParallelStatement,
                ir.ReliableBlock,
                ir.UnreliableBlock,
            ),
        ):
            raise make_internal_error(
                f"unknown statement {type(statement).__name__}",
                getattr(statement, "span", Span.dummy()),
            )

    for _, fields in iter_field_lists(protocol):
        diagnostics.extend(duplicate_diagnostics("field", [(f.name, f.span) for f in fields]))

    for typedef in protocol.types:
        if isinstance(typedef.body, ir.EnumBody):
            variants = typedef.body.variants
            diagnostics.extend(
                duplicate_diagnostics("variant", [(v.name, v.span) for v in variants])
            )

    return diagnostics


# =============================================================================
# Phase flow
# =============================================================================


def validate_flow(
    protocol: ir.Protocol, symbols: SymbolTable, options: AnalyzerOptions
) -> list[Diagnostic]:
    """
    Check continuation targets and phase termination.

    Checks:
    - Continue targets and parallel branches name declared phases
    - No path through a phase body falls off its end
    - No statement follows end/continue/parallel in the same block

    Returns:
        List of diagnostics
    """
    diagnostics: list[Diagnostic] = []

    for phase in protocol.phases:
        for target, span in phase_references(phase.body):
            if not symbols.has_phase(target):
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNDEFINED,
                        message=f"undefined phase: '{target}'",
                        span=span,
                        subject="phase",
                        name=target,
                    )
                )

        if not body_terminates(phase.body):
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.SYNTAX,
                    message=(
                        f"phase '{phase.name}' can reach its end without "
                        "'end', 'continue' or 'parallel'"
                    ),
                    span=phase.close_span,
                    labels=[
                        Label(message=message, span=span)
                        for message, span in fallthrough_sites(phase.body)
                    ],
                    subject="phase",
                    name=phase.name,
                )
            )

        severity = LEVEL_SEVERITY.get(options.unreachable_statements)
        if severity is None:
            continue
        for terminal, dead in unreachable_statements(phase.body):
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.SYNTAX,
                    message="unreachable statement",
                    span=dead.span,
                    labels=[Label(message="control never passes this point", span=terminal.span)],
                    severity=severity,
                    subject="statement",
                )
            )

    return diagnostics


def validate_reachability(
    protocol: ir.Protocol, graph: FlowGraph, options: AnalyzerOptions
) -> list[Diagnostic]:
    """
    Report phases the entry phase can never reach.

    The first declared phase is the entry point; edges come from continue
    and parallel statements.

    Returns:
        List of diagnostics (warnings unless configured otherwise)
    """
    severity = LEVEL_SEVERITY.get(options.unreachable_phases)
    if severity is None or not protocol.phases:
        return []

    entry = protocol.phases[0]
    reachable = graph.reachable_from(0)

    diagnostics = []
    for node in sorted(graph.names):
        if node in reachable:
            continue
        phase = protocol.phases[node]
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.TYPE,
                message=f"phase '{phase.name}' is unreachable from entry phase '{entry.name}'",
                span=phase.span,
                severity=severity,
                subject="phase",
                name=phase.name,
            )
        )
    return diagnostics


# =============================================================================
# Choice and match shape
# =============================================================================


def validate_choices(protocol: ir.Protocol) -> list[Diagnostic]:
    """
    Check choice well-formedness.

    Checks:
    - At least two branches
    - Unique branch names
    - At most one branch without a guard

    Returns:
        List of diagnostics
    """
    diagnostics: list[Diagnostic] = []

    for _, statement in iter_statements(protocol):
        if not isinstance(statement, ir.ChoiceStatement):
            continue

        if len(statement.branches) < 2:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.TYPE,
                    message=(
                        f"choice by '{statement.role}' has {len(statement.branches)} "
                        "branch(es); a choice needs at least two"
                    ),
                    span=statement.span,
                    subject="choice",
                    name=statement.role,
                )
            )

        diagnostics.extend(
            duplicate_diagnostics("branch", [(b.name, b.span) for b in statement.branches])
        )

        unguarded = [branch for branch in statement.branches if branch.guard is None]
        if len(unguarded) > 1:
            names = ", ".join(f"'{branch.name}'" for branch in unguarded)
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.TYPE,
                    message=(
                        f"ambiguous unconditional branches {names}: "
                        "only one branch may omit its 'when' guard"
                    ),
                    span=statement.span,
                    labels=[
                        Label(message=f"branch '{branch.name}' has no guard", span=branch.span)
                        for branch in unguarded
                    ],
                    subject="choice",
                    name=statement.role,
                )
            )

    return diagnostics


def validate_matches(protocol: ir.Protocol) -> list[Diagnostic]:
    """
    Check match well-formedness.

    Checks:
    - At least one arm
    - Unique arm patterns

    Returns:
        List of diagnostics
    """
    diagnostics: list[Diagnostic] = []

    for _, statement in iter_statements(protocol):
        if not isinstance(statement, ir.MatchStatement):
            continue

        if not statement.arms:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.TYPE,
                    message=f"match on '{statement.expr}' has no arms",
                    span=statement.span,
                    subject="match",
                    name=statement.expr,
                )
            )

        diagnostics.extend(
            duplicate_diagnostics("pattern", [(a.pattern, a.span) for a in statement.arms])
        )

    return diagnostics
