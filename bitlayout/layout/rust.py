"""Rust code generator for bit-field structs."""

from typing import Any

from jinja2 import Environment, PackageLoader

from .bits import AccessorPlan, accessor_plan
from .scalars import is_bool, is_integral, is_signed
from .types import (
    BinaryExpr,
    FieldDecl,
    FieldRead,
    LayoutError,
    Literal,
    LiteralPlan,
    Path,
    SetterCall,
    StructLiteral,
    StructShape,
    ZeroArray,
)

env = Environment(
    loader=PackageLoader("bitlayout.layout", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

struct_template = env.get_template("struct.rs.j2")
module_template = env.get_template("module.rs.j2")
literal_template = env.get_template("literal.rs.j2")

BINARY_OPERATORS = {
    "add": "+",
    "sub": "-",
    "mul": "*",
    "div": "/",
}


def _field_type(field: FieldDecl) -> str:
    if field.array_len is None:
        return field.type_name
    return f"[{field.type_name}; {field.array_len}]"


def _hex_mask(plan: AccessorPlan) -> str:
    return f"{plan.mask:#x}_u128"


def accessor_plans(shape: StructShape) -> list[AccessorPlan]:
    """Accessor plans for every packed member, in field order."""
    plans: list[AccessorPlan] = []
    for field in shape.bitfield_groups:
        for member in field.packed:
            if not is_integral(member.ty):
                raise LayoutError(f"Bit-field {member.name} has non-integral type {member.ty}")
            plans.append(
                accessor_plan(
                    field.name,
                    field.array_len or 0,
                    member,
                    signed=is_signed(member.ty),
                    boolean=is_bool(member.ty),
                )
            )
    return plans


def render_expr(expr: Any) -> str:
    """Render an expression node as Rust source."""
    if isinstance(expr, Literal):
        return expr.text
    if isinstance(expr, Path):
        return expr.name
    if isinstance(expr, ZeroArray):
        return f"[0; {expr.length}]"
    if isinstance(expr, FieldRead):
        return f"{render_expr(expr.receiver)}.{expr.field}()"
    if isinstance(expr, BinaryExpr):
        lhs = render_expr(expr.lhs)
        rhs = render_expr(expr.rhs)
        if isinstance(expr.lhs, BinaryExpr):
            lhs = f"({lhs})"
        if isinstance(expr.rhs, BinaryExpr):
            rhs = f"({rhs})"
        return f"{lhs} {BINARY_OPERATORS[expr.op]} {rhs}"
    if isinstance(expr, SetterCall):
        call = f"{expr.setter}({render_expr(expr.argument)})"
        if expr.receiver is None:
            return call
        return f"{render_expr(expr.receiver)}.{call}"
    if isinstance(expr, StructLiteral):
        fields = ", ".join(f"{name}: {render_expr(value)}" for name, value in expr.fields.items())
        return f"{expr.name} {{ {fields} }}"
    if isinstance(expr, (bool, int)):
        return str(expr).lower() if isinstance(expr, bool) else str(expr)
    if isinstance(expr, str):
        return expr
    raise LayoutError(f"Cannot render expression {expr!r}")


def render_struct(shape: StructShape) -> str:
    """Render one struct declaration with its getters and setters."""
    return struct_template.render(
        shape=shape,
        plans=accessor_plans(shape),
        field_type=_field_type,
        hex_mask=_hex_mask,
        BLANK_LINE="",
    )


def render_literal(plan: LiteralPlan) -> str:
    """Render a two-phase struct literal as a Rust block expression."""
    return literal_template.render(plan=plan, render_expr=render_expr)


def render(shapes: list[StructShape], comments: list[str] | None = None) -> str:
    """Render a Rust module holding every struct."""
    return module_template.render(
        structs=[render_struct(shape).rstrip("\n") for shape in shapes],
        comments=comments or [],
        BLANK_LINE="",
    )
