"""
Phase flow graph for Sessão protocols.

Phases are the nodes; Continue targets and Parallel branches found anywhere
in a phase's statement tree are the edges. The graph is built from a symbol
table for one analysis and discarded afterwards, so the AST itself never
holds phase-to-phase links.
"""

from collections import deque
from dataclasses import dataclass, field

from . import ir
from .ir.location import Span
from .symbols import SymbolTable


@dataclass
class FlowGraph:
    """
    Successor sets keyed by phase position in Protocol.phases.

    Attributes:
        names: Phase name for every node id
        successors: Node id -> ids of phases it can transfer control to
    """

    names: dict[int, str] = field(default_factory=dict)
    successors: dict[int, set[int]] = field(default_factory=dict)

    def add_node(self, node: int, name: str) -> None:
        self.names[node] = name
        self.successors.setdefault(node, set())

    def add_edge(self, source: int, target: int) -> None:
        self.successors.setdefault(source, set()).add(target)

    def reachable_from(self, entry: int) -> set[int]:
        """Breadth-first traversal from `entry`."""
        reachable: set[int] = set()
        queue = deque([entry])
        while queue:
            node = queue.popleft()
            if node in reachable:
                continue
            reachable.add(node)
            queue.extend(self.successors.get(node, ()))
        return reachable


def phase_references(body: list[ir.Statement]) -> list[tuple[str, Span]]:
    """
    Every phase name a statement tree transfers control to.

    Returns:
        (phase name, span of the referring statement) in source order
    """
    references = []
    for statement in ir.walk_statements(body):
        if isinstance(statement, ir.ContinueStatement):
            references.append((statement.target, statement.span))
        elif isinstance(statement, ir.ParallelStatement):
            references.extend((branch, statement.span) for branch in statement.branches)
    return references


def build_flow_graph(protocol: ir.Protocol, symbols: SymbolTable) -> FlowGraph:
    """
    Build the flow graph over the live (first-declared) phases.

    References to undeclared phases contribute no edge.
    """
    graph = FlowGraph()
    for name, index in symbols.phase_index.items():
        graph.add_node(index, name)

    for name, index in symbols.phase_index.items():
        phase = symbols.phases[name]
        for target, _ in phase_references(phase.body):
            if target in symbols.phase_index:
                graph.add_edge(index, symbols.phase_index[target])

    return graph


def statement_terminates(statement: ir.Statement) -> bool:
    """True when every path through the statement ends the phase."""
    if isinstance(statement, ir.TERMINAL_STATEMENTS):
        return True
    if isinstance(statement, ir.ChoiceStatement):
        return bool(statement.branches) and all(
            body_terminates(branch.body) for branch in statement.branches
        )
    if isinstance(statement, ir.MatchStatement):
        return bool(statement.arms) and all(body_terminates(arm.body) for arm in statement.arms)
    if isinstance(statement, (ir.ReliableBlock, ir.UnreliableBlock)):
        return body_terminates(statement.body)
    return False


def body_terminates(body: list[ir.Statement]) -> bool:
    """True when no path through the statement list falls off its end."""
    return any(statement_terminates(statement) for statement in body)


def fallthrough_sites(body: list[ir.Statement]) -> list[tuple[str, Span]]:
    """
    Branches and arms through which control can fall off the end of a body.

    Returns:
        (description, span) for each offending choice branch or match arm,
        innermost first within each branch
    """
    if body_terminates(body):
        return []

    sites: list[tuple[str, Span]] = []
    for statement in body:
        if isinstance(statement, ir.ChoiceStatement):
            for branch in statement.branches:
                if not body_terminates(branch.body):
                    sites.extend(fallthrough_sites(branch.body))
                    sites.append((f"branch '{branch.name}' can fall through", branch.span))
        elif isinstance(statement, ir.MatchStatement):
            for arm in statement.arms:
                if not body_terminates(arm.body):
                    sites.extend(fallthrough_sites(arm.body))
                    sites.append((f"arm {arm.pattern} can fall through", arm.span))
        elif isinstance(statement, (ir.ReliableBlock, ir.UnreliableBlock)):
            sites.extend(fallthrough_sites(statement.body))
    return sites


def unreachable_statements(body: list[ir.Statement]) -> list[tuple[ir.Statement, ir.Statement]]:
    """
    Statements that follow a terminating statement in the same list.

    Returns:
        (terminating statement, first statement after it) for every
        statement list in the tree where this happens
    """
    found = []
    for position, statement in enumerate(body):
        if statement_terminates(statement) and position + 1 < len(body):
            found.append((statement, body[position + 1]))
            break
    for statement in body:
        for nested in ir.child_bodies(statement):
            found.extend(unreachable_statements(nested))
    return found
