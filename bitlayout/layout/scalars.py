"""C scalar types and the default translation collaborators built on them."""

import re
from typing import Any, Protocol

from .types import (
    ExprTranslationError,
    Literal,
    Path,
    TranslationContext,
    TypeConversionError,
)

# C scalar type -> (Rust type, size in bits)
C_SCALARS: dict[str, tuple[str, int]] = {
    "_Bool": ("bool", 8),
    "bool": ("bool", 8),
    "char": ("libc::c_char", 8),
    "signed char": ("libc::c_schar", 8),
    "unsigned char": ("libc::c_uchar", 8),
    "short": ("libc::c_short", 16),
    "signed short": ("libc::c_short", 16),
    "unsigned short": ("libc::c_ushort", 16),
    "int": ("libc::c_int", 32),
    "signed": ("libc::c_int", 32),
    "signed int": ("libc::c_int", 32),
    "unsigned": ("libc::c_uint", 32),
    "unsigned int": ("libc::c_uint", 32),
    "long": ("libc::c_long", 64),
    "signed long": ("libc::c_long", 64),
    "unsigned long": ("libc::c_ulong", 64),
    "long long": ("libc::c_longlong", 64),
    "signed long long": ("libc::c_longlong", 64),
    "unsigned long long": ("libc::c_ulonglong", 64),
    "int8_t": ("i8", 8),
    "int16_t": ("i16", 16),
    "int32_t": ("i32", 32),
    "int64_t": ("i64", 64),
    "uint8_t": ("u8", 8),
    "uint16_t": ("u16", 16),
    "uint32_t": ("u32", 32),
    "uint64_t": ("u64", 64),
    "float": ("libc::c_float", 32),
    "double": ("libc::c_double", 64),
}

SIGNED_TYPES = frozenset(
    [
        "libc::c_char",
        "libc::c_schar",
        "libc::c_short",
        "libc::c_int",
        "libc::c_long",
        "libc::c_longlong",
        "i8",
        "i16",
        "i32",
        "i64",
    ]
)

FLOAT_TYPES = frozenset(["libc::c_float", "libc::c_double"])

_INT_LITERAL = re.compile(r"^(-?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)([uUlL]*)$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class TypeConverter(Protocol):
    def convert_type(self, ctype: Any) -> str: ...


class DefaultProvider(Protocol):
    def implicit_default(self, ctype: Any, is_static: bool) -> Any: ...


class ExprTranslator(Protocol):
    def convert_expr(self, ctx: TranslationContext, expr: Any) -> Any: ...


def normalize(ctype: str) -> str:
    """Collapse whitespace in a C type name."""
    return " ".join(str(ctype).split())


def storage_bits(ctype: str) -> int | None:
    """Size in bits of a C scalar, None if unknown."""
    entry = C_SCALARS.get(normalize(ctype))
    return entry[1] if entry else None


def is_signed(ty: str) -> bool:
    return ty in SIGNED_TYPES


def is_bool(ty: str) -> bool:
    return ty == "bool"


def is_integral(ty: str) -> bool:
    return ty not in FLOAT_TYPES


class CTypeConverter:
    """Convert C scalar type names to Rust type names."""

    def convert_type(self, ctype: Any) -> str:
        entry = C_SCALARS.get(normalize(ctype))
        if entry is None:
            raise TypeConversionError(f"Unknown C type: {ctype}")
        return entry[0]


class CDefaultProvider:
    """Implicit zero values for C scalars."""

    def __init__(self, types: TypeConverter | None = None):
        self.types = types or CTypeConverter()

    def implicit_default(self, ctype: Any, is_static: bool) -> Literal:
        ty = self.types.convert_type(ctype)
        if is_bool(ty):
            return Literal("false")
        if ty in FLOAT_TYPES:
            return Literal("0.0")
        return Literal("0")


class CExprTranslator:
    """Translate C integer literals and identifiers used as initializers."""

    def convert_expr(self, ctx: TranslationContext, expr: Any) -> Literal | Path:
        if isinstance(expr, bool):
            return Literal("true" if expr else "false")
        if isinstance(expr, int):
            return Literal(str(expr))

        text = str(expr).strip()
        if text in ("true", "false"):
            return Literal(text)

        match = _INT_LITERAL.match(text)
        if match:
            sign, digits, _suffix = match.groups()
            # C octal literals: 017 -> 0o17
            if len(digits) > 1 and digits[0] == "0" and digits[1] not in "xX":
                digits = "0o" + digits[1:]
            return Literal(sign + digits)

        if _IDENTIFIER.match(text):
            return Path(text)

        raise ExprTranslationError(f"Cannot translate initializer expression: {expr!r}")
