"""Rewriting of assignments to bit-field lvalues into setter calls."""

from enum import StrEnum
from typing import Any

from .types import BinaryExpr, SetterCall, UnsupportedOperatorError


class AssignOp(StrEnum):
    """Assignment operators accepted on a bit-field lvalue."""

    ASSIGN = "="
    ADD = "+="
    SUBTRACT = "-="
    MULTIPLY = "*="
    DIVIDE = "/="


# Compound assignment -> the binary operator it applies
BINARY_OPS: dict[AssignOp, str] = {
    AssignOp.ADD: "add",
    AssignOp.SUBTRACT: "sub",
    AssignOp.MULTIPLY: "mul",
    AssignOp.DIVIDE: "div",
}


def parse_op(op: str) -> AssignOp:
    try:
        return AssignOp(op)
    except ValueError:
        raise UnsupportedOperatorError(str(op)) from None


class CompoundAssignDesugarer:
    """Turn `lhs op= rhs` on a bit-field into a single setter call."""

    def desugar(
        self,
        op: str,
        field_name: str,
        lhs: Any,
        rhs: Any,
        receiver: Any | None = None,
    ) -> SetterCall:
        """Desugar an assignment.

        Args:
            op: C assignment operator ("=", "+=", "-=", "*=", "/=")
            field_name: Name of the bit-field being assigned
            lhs: Expression reading the field's current value
            rhs: Translated right-hand side
            receiver: Struct expression owning the setter, if any

        Raises:
            UnsupportedOperatorError: For any other operator.
        """
        assign_op = parse_op(op)

        if assign_op == AssignOp.ASSIGN:
            return SetterCall(field_name, rhs, receiver)

        return SetterCall(field_name, BinaryExpr(BINARY_OPS[assign_op], lhs, rhs), receiver)


def desugar(
    op: str, field_name: str, lhs: Any, rhs: Any, receiver: Any | None = None
) -> SetterCall:
    return CompoundAssignDesugarer().desugar(op, field_name, lhs, rhs, receiver)
