"""
Protocol specification types for Sessão IR.

A Protocol is the root of the tree: it exclusively owns its roles, type
definitions and phases. Every cross reference (roles in sends, phases in
continue/parallel, named types) is a name resolved by lookup during
analysis, so the tree stays acyclic even though the phase flow it
describes is not.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .location import Span
from .statements import Statement
from .types import TypeDef


class Role(BaseModel):
    """A named protocol participant (e.g. Client, Server)."""

    name: str
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class Phase(BaseModel):
    """
    A named, ordered block of statements; the unit of continuation.

    Attributes:
        name: Phase identifier
        body: Statements in source order
        span: Span of the whole declaration
        close_span: Span of the closing brace
    """

    name: str
    body: list[Statement] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)
    close_span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class Protocol(BaseModel):
    """
    A complete protocol definition.

    Syntax:
        protocol Hello {
            roles Client, Server
            phase Main {
                Client -> Server: Ping
                Server -> Client: Pong
                end
            }
        }
    """

    name: str
    roles: list[Role] = Field(default_factory=list)
    types: list[TypeDef] = Field(default_factory=list)
    phases: list[Phase] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    def get_role(self, name: str) -> Role | None:
        for role in self.roles:
            if role.name == name:
                return role
        return None

    def get_type(self, name: str) -> TypeDef | None:
        for typedef in self.types:
            if typedef.name == name:
                return typedef
        return None

    def get_phase(self, name: str) -> Phase | None:
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None

    @property
    def entry_phase(self) -> Phase | None:
        """The first declared phase, where execution starts."""
        return self.phases[0] if self.phases else None


Phase.model_rebuild()
Protocol.model_rebuild()
