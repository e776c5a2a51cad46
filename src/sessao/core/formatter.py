"""
PDL source generation from the Sessão IR.

Renders a Protocol back to canonical PDL text. The output parses to a tree
equal to the input apart from spans.
"""

from . import ir
from .errors import make_internal_error

INDENT = "    "


def format_type(type_expr: ir.TypeExpr) -> str:
    """Render a type expression, e.g. `{string: [u32]}?`."""
    if isinstance(
        type_expr, (ir.PrimitiveType, ir.NamedType, ir.ArrayType, ir.MapType, ir.OptionalType)
    ):
        return str(type_expr)
    raise make_internal_error(
        f"cannot format type expression {type(type_expr).__name__}", type_expr.span
    )


def format_field(field: ir.FieldSpec) -> str:
    suffix = "?" if field.optional else ""
    return f"{field.name}: {format_type(field.type)}{suffix}"


def format_fields(fields: list[ir.FieldSpec]) -> str:
    if not fields:
        return "{}"
    return "{ " + ", ".join(format_field(f) for f in fields) + " }"


def format_typedef(typedef: ir.TypeDef) -> str:
    """Render a `type Name = ...` declaration on one line."""
    body = typedef.body
    if isinstance(body, ir.StructBody):
        rendered = format_fields(body.fields)
        if len(body.fields) == 1 and body.fields[0].name[:1].isupper():
            # `{ Key: T }` alone reads back as a map alias
            rendered = rendered[:-2] + ", }"
    elif isinstance(body, ir.EnumBody):
        variants = []
        for variant in body.variants:
            if variant.fields:
                variants.append(f"{variant.name} {format_fields(variant.fields)}")
            else:
                variants.append(variant.name)
        rendered = "enum { " + ", ".join(variants) + " }"
    elif isinstance(body, ir.AliasBody):
        rendered = format_type(body.target)
    else:
        raise make_internal_error(f"cannot format type body {type(body).__name__}", typedef.span)
    return f"type {typedef.name} = {rendered}"


def _format_body(body: list[ir.Statement], depth: int) -> list[str]:
    lines = []
    for statement in body:
        lines.extend(_format_statement(statement, depth))
    return lines


def _format_block(header: str, body: list[ir.Statement], depth: int) -> list[str]:
    pad = INDENT * depth
    return [f"{pad}{header}{{", *_format_body(body, depth + 1), f"{pad}}}"]


def _format_statement(statement: ir.Statement, depth: int) -> list[str]:
    pad = INDENT * depth

    if isinstance(statement, ir.SendStatement):
        line = f"{pad}{statement.sender} -> {statement.receiver}: {statement.message}"
        if statement.fields:
            line += " " + format_fields(statement.fields)
        return [line]

    if isinstance(statement, ir.ChoiceStatement):
        lines = [f"{pad}choice @{statement.role} {{"]
        for branch in statement.branches:
            header = branch.name + " "
            if branch.guard:
                header += f"when @{branch.guard.role}.{branch.guard.condition} "
            lines.extend(_format_block(header, branch.body, depth + 1))
        lines.append(f"{pad}}}")
        return lines

    if isinstance(statement, ir.MatchStatement):
        lines = [f"{pad}match {statement.expr} {{"]
        for arm in statement.arms:
            lines.extend(_format_block(f"{arm.pattern} => ", arm.body, depth + 1))
        lines.append(f"{pad}}}")
        return lines

    if isinstance(statement, ir.ContinueStatement):
        return [f"{pad}continue {statement.target}"]

    if isinstance(statement, ir.EndStatement):
        return [f"{pad}end"]

    if isinstance(statement, ir.ParallelStatement):
        return [f"{pad}parallel {{ {', '.join(statement.branches)} }}"]

    if isinstance(statement, ir.ReliableBlock):
        return _format_block("reliable ", statement.body, depth)

    if isinstance(statement, ir.UnreliableBlock):
        return _format_block("unreliable ", statement.body, depth)

    raise make_internal_error(
        f"cannot format statement {type(statement).__name__}", statement.span
    )


def format_protocol(protocol: ir.Protocol) -> str:
    """
    Render a protocol as canonical PDL source.

    Args:
        protocol: Parsed or hand-built protocol

    Returns:
        PDL text ending with a newline
    """
    lines = [f"protocol {protocol.name} {{"]
    lines.append(f"{INDENT}roles {', '.join(role.name for role in protocol.roles)}")

    if protocol.types:
        lines.append("")
        lines.extend(f"{INDENT}{format_typedef(typedef)}" for typedef in protocol.types)

    for phase in protocol.phases:
        lines.append("")
        lines.extend(_format_block(f"phase {phase.name} ", phase.body, 1))

    lines.append("}")
    return "\n".join(lines) + "\n"


__all__ = ["format_protocol", "format_typedef", "format_type"]
