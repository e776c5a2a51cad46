"""
Statement types for Sessão IR.

Phases are made of statements. The statement family is closed: every
consumer (parser, validator, flow graph, formatter) handles each of the
eight variants explicitly.

Examples:
    - Client -> Server: Ping { id: u32 }
    - choice @Client { Buy when @Client.has_funds { ... } Leave { ... } }
    - match Reply.status { "ok" => { ... } _ => { ... } }
    - continue Main
    - parallel { Upload, Heartbeat }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .location import Span
from .types import FieldSpec


class SendStatement(BaseModel):
    """
    A message send from one role to another.

    The message name plus its fields declare an anonymous message type
    usable only at this send site.

    Attributes:
        sender: Sending role (the 'from' side of the arrow)
        receiver: Receiving role (the 'to' side of the arrow)
        message: Message name
        fields: Inline message fields
    """

    sender: str
    receiver: str
    message: str
    fields: list[FieldSpec] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class Guard(BaseModel):
    """
    A runtime predicate on a role's state gating a choice branch.

    The condition is opaque at this layer: when @Client.has_token
    yields Guard(role="Client", condition="has_token").
    """

    role: str
    condition: str
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class ChoiceBranch(BaseModel):
    name: str
    guard: Guard | None = None
    body: list[Statement] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class ChoiceStatement(BaseModel):
    """A point where `role` selects among named branches."""

    role: str
    branches: list[ChoiceBranch] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class MatchArm(BaseModel):
    pattern: str
    body: list[Statement] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class MatchStatement(BaseModel):
    """
    Dispatch on a value.

    `expr` is an opaque dotted path (e.g. "Reply.status") and arm patterns
    are opaque strings; string literal patterns keep their quotes.
    """

    expr: str
    arms: list[MatchArm] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class ContinueStatement(BaseModel):
    """Jump to another named phase."""

    target: str
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class EndStatement(BaseModel):
    """Terminate the protocol."""

    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class ParallelStatement(BaseModel):
    """Concurrent execution of the named phases."""

    branches: list[str] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class ReliableBlock(BaseModel):
    """Statements delivered over a reliable channel."""

    body: list[Statement] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class UnreliableBlock(BaseModel):
    """Statements delivered over an unreliable channel."""

    body: list[Statement] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


# Union type for phase statements
Statement = (
    SendStatement
    | ChoiceStatement
    | MatchStatement
    | ContinueStatement
    | EndStatement
    | ParallelStatement
    | ReliableBlock
    | UnreliableBlock
)

TERMINAL_STATEMENTS = (ContinueStatement, EndStatement, ParallelStatement)


def child_bodies(statement: Statement) -> list[list[Statement]]:
    """Nested statement lists directly owned by a statement."""
    if isinstance(statement, ChoiceStatement):
        return [branch.body for branch in statement.branches]
    if isinstance(statement, MatchStatement):
        return [arm.body for arm in statement.arms]
    if isinstance(statement, (ReliableBlock, UnreliableBlock)):
        return [statement.body]
    return []


def walk_statements(body: list[Statement]):
    """Yield every statement in a body, depth first, in source order."""
    for statement in body:
        yield statement
        for nested in child_bodies(statement):
            yield from walk_statements(nested)


# Update forward references for recursive types
ChoiceBranch.model_rebuild()
ChoiceStatement.model_rebuild()
MatchArm.model_rebuild()
MatchStatement.model_rebuild()
ReliableBlock.model_rebuild()
UnreliableBlock.model_rebuild()
