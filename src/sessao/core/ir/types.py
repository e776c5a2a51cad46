"""
Type definitions for Sessão IR.

This module contains the type expression family (primitives, arrays, maps,
optionals and named references), fields, and the bodies of user type
definitions.

Examples:
    - u32: PrimitiveType(primitive=U32)
    - [string]: ArrayType(element=PrimitiveType(primitive=STRING))
    - {string: u64}: MapType(key=..., value=...)
    - Node?: OptionalType(inner=NamedType(name="Node"))
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .location import Span


class PrimitiveKind(str, Enum):
    """Built-in scalar types."""

    BOOL = "bool"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    STRING = "string"
    UUID = "uuid"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"


PRIMITIVE_NAMES = frozenset(kind.value for kind in PrimitiveKind)


class PrimitiveType(BaseModel):
    """A built-in scalar type."""

    primitive: PrimitiveKind
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.primitive.value


class ArrayType(BaseModel):
    """Homogeneous sequence: [T]"""

    element: TypeExpr
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"[{self.element}]"


class MapType(BaseModel):
    """Key/value mapping: {K: V}"""

    key: TypeExpr
    value: TypeExpr
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{{{self.key}: {self.value}}}"


class OptionalType(BaseModel):
    """Possibly-absent value: T?"""

    inner: TypeExpr
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.inner}?"


class NamedType(BaseModel):
    """Reference to a user type definition, resolved by name during analysis."""

    name: str
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


TypeExpr = PrimitiveType | ArrayType | MapType | OptionalType | NamedType


class FieldSpec(BaseModel):
    """
    A named, typed field of a struct, enum variant, or inline message.

    Attributes:
        name: Field identifier
        type: Field type expression
        optional: True when the field was declared with a trailing '?'
    """

    name: str
    type: TypeExpr
    optional: bool = False
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class EnumVariant(BaseModel):
    """A single enum variant, optionally carrying fields."""

    name: str
    fields: list[FieldSpec] = Field(default_factory=list)
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)


class StructBody(BaseModel):
    fields: list[FieldSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class EnumBody(BaseModel):
    variants: list[EnumVariant] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_variant(self, name: str) -> EnumVariant | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None


class AliasBody(BaseModel):
    target: TypeExpr

    model_config = ConfigDict(frozen=True)


TypeBody = StructBody | EnumBody | AliasBody


class TypeDef(BaseModel):
    """
    A user type definition.

    Syntax:
        type Point = { x: f64, y: f64 }
        type Shape = enum { Circle { radius: f64 }, Empty }
        type Points = [Point]
    """

    name: str
    body: TypeBody
    span: Span = Field(default_factory=Span.dummy)

    model_config = ConfigDict(frozen=True)

    @property
    def is_enum(self) -> bool:
        return isinstance(self.body, EnumBody)

    @property
    def is_alias(self) -> bool:
        return isinstance(self.body, AliasBody)


# Update forward references for recursive types
ArrayType.model_rebuild()
MapType.model_rebuild()
OptionalType.model_rebuild()
FieldSpec.model_rebuild()
EnumVariant.model_rebuild()
StructBody.model_rebuild()
EnumBody.model_rebuild()
AliasBody.model_rebuild()
TypeDef.model_rebuild()
