"""
Sessão Intermediate Representation (IR) types.

This package contains the AST produced by the parser and consumed by the
analyzer and downstream tools. Types are organized into logical submodules;
all of them are re-exported here.
"""

# Locations
from .location import Span

# Protocol
from .protocol import Phase, Protocol, Role

# Statements
from .statements import (
    TERMINAL_STATEMENTS,
    ChoiceBranch,
    ChoiceStatement,
    ContinueStatement,
    EndStatement,
    Guard,
    MatchArm,
    MatchStatement,
    ParallelStatement,
    ReliableBlock,
    SendStatement,
    Statement,
    UnreliableBlock,
    child_bodies,
    walk_statements,
)

# Types
from .types import (
    PRIMITIVE_NAMES,
    AliasBody,
    ArrayType,
    EnumBody,
    EnumVariant,
    FieldSpec,
    MapType,
    NamedType,
    OptionalType,
    PrimitiveKind,
    PrimitiveType,
    StructBody,
    TypeBody,
    TypeDef,
    TypeExpr,
)

__all__ = [
    # Locations
    "Span",
    # Types
    "PRIMITIVE_NAMES",
    "PrimitiveKind",
    "PrimitiveType",
    "ArrayType",
    "MapType",
    "OptionalType",
    "NamedType",
    "TypeExpr",
    "FieldSpec",
    "EnumVariant",
    "StructBody",
    "EnumBody",
    "AliasBody",
    "TypeBody",
    "TypeDef",
    # Statements
    "SendStatement",
    "Guard",
    "ChoiceBranch",
    "ChoiceStatement",
    "MatchArm",
    "MatchStatement",
    "ContinueStatement",
    "EndStatement",
    "ParallelStatement",
    "ReliableBlock",
    "UnreliableBlock",
    "Statement",
    "TERMINAL_STATEMENTS",
    "child_bodies",
    "walk_statements",
    # Protocol
    "Role",
    "Phase",
    "Protocol",
]
