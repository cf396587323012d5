"""Type definitions for bit-field layout classification and synthesis."""

from dataclasses import dataclass
from typing import Any

from dataclasses_json import DataClassJsonMixin


class LayoutError(RuntimeError):
    """Raised when a struct or expression cannot be translated."""


class TypeConversionError(LayoutError):
    """Raised when a field's C type has no target representation."""


class ExprTranslationError(LayoutError):
    """Raised when an initializer expression cannot be translated."""


class ArityError(LayoutError):
    """Raised when a struct literal has more initializers than fields."""


class UnsupportedError(LayoutError):
    """Raised for bit-field constructs that are deliberately not translated."""


class UnsupportedOperatorError(UnsupportedError):
    """Raised for assignment operators that cannot target a bit-field."""

    def __init__(self, op: str):
        super().__init__(f"unimplemented operator {op} on bit-field")
        self.op = op


@dataclass(frozen=True)
class FieldDescriptor(DataClassJsonMixin):
    """ABI description of one C struct member.

    For bit_width:
    - None: regular (non bit-field) member
    - 0: zero-width marker, closes the open bit-group
    - N: bit-field of N bits
    """

    name: str
    semantic_type: Any
    bit_width: int | None
    bit_offset: int
    storage_unit_width: int

    @property
    def is_bitfield(self) -> bool:
        return self.bit_width is not None

    @property
    def is_zero_width(self) -> bool:
        return self.bit_width == 0


@dataclass(frozen=True)
class StructDecl(DataClassJsonMixin):
    """A C record declaration as reported by the ABI."""

    name: str
    platform_alignment: int
    platform_byte_size: int
    fields: list[FieldDescriptor]
    manual_alignment: int | None = None
    is_union: bool = False

    @property
    def has_bitfields(self) -> bool:
        return any(f.is_bitfield for f in self.fields)


@dataclass(frozen=True)
class PackedMember(DataClassJsonMixin):
    """A bit-field packed into a bit-group, with an inclusive bit range."""

    name: str
    ty: str
    bit_range: tuple[int, int]

    @property
    def bits(self) -> str:
        start, end = self.bit_range
        return f"{start}..={end}"

    @property
    def width(self) -> int:
        start, end = self.bit_range
        return end - start + 1


@dataclass(frozen=True)
class BitGroup(DataClassJsonMixin):
    """Consecutive bit-fields sharing one byte array."""

    start_bit: int
    name: str
    byte_size: int
    members: tuple[PackedMember, ...]


@dataclass(frozen=True)
class Padding(DataClassJsonMixin):
    """Bytes not backing any named field."""

    byte_size: int


@dataclass(frozen=True)
class Regular(DataClassJsonMixin):
    """An untouched non bit-field member."""

    name: str
    ctype: Any
    ty: str
    byte_size: int


FieldClass = BitGroup | Padding | Regular


@dataclass(frozen=True)
class FieldDecl(DataClassJsonMixin):
    """A field of the emitted struct.

    For array_len:
    - None: plain field of type type_name
    - N: fixed-size array [type_name; N]
    """

    name: str
    type_name: str
    array_len: int | None = None
    packed: tuple[PackedMember, ...] = ()


@dataclass(frozen=True)
class StructShape(DataClassJsonMixin):
    """Abstract description of an emitted bit-field struct."""

    name: str
    alignment: int
    fields: tuple[FieldDecl, ...]
    repr: tuple[str, ...]
    traits: tuple[str, ...] = ("Clone", "Copy")
    bitfield: bool = True

    @property
    def bitfield_groups(self) -> list[FieldDecl]:
        return [f for f in self.fields if f.packed]


# Expression nodes exchanged with the expression and default collaborators.


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Path:
    name: str


@dataclass(frozen=True)
class ZeroArray:
    length: int


@dataclass(frozen=True)
class FieldRead:
    """Getter read of a packed member: `receiver.field()`."""

    receiver: Any
    field: str


@dataclass(frozen=True)
class BinaryExpr:
    op: str
    lhs: Any
    rhs: Any


@dataclass(frozen=True)
class StructLiteral:
    name: str
    fields: dict[str, Any]


@dataclass(frozen=True)
class SetterCall:
    """Invocation of a packed member's setter."""

    field_name: str
    argument: Any
    receiver: Any | None = None

    @property
    def setter(self) -> str:
        return f"set_{self.field_name}"


@dataclass(frozen=True)
class LiteralPlan:
    """Two-phase struct literal: build base_fields, then apply setter_calls in order."""

    struct_name: str
    base_fields: dict[str, Any]
    setter_calls: tuple[SetterCall, ...]
    binding: str = "init"


@dataclass(frozen=True)
class TranslationContext:
    """Expression context handed to collaborators."""

    is_static: bool = False
    used: bool = True
