"""Bit arithmetic behind the synthesized getters and setters.

Bit-group storage is little-endian: bit N of a group lives in byte N // 8 at
bit position N % 8. The Rust templates render an AccessorPlan, and read_bits /
write_bits perform the same arithmetic on Python byte buffers.
"""

from dataclasses import dataclass

from .types import LayoutError, PackedMember


@dataclass(frozen=True)
class AccessorPlan:
    """How to read and write one packed member of a bit-group."""

    group: str
    member: str
    ty: str
    first_byte: int
    last_byte: int
    shift: int
    width: int
    signed: bool = False
    boolean: bool = False

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1

    @property
    def byte_indices(self) -> range:
        return range(self.first_byte, self.last_byte + 1)

    @property
    def window_bits(self) -> int:
        return (self.last_byte - self.first_byte + 1) * 8


def accessor_plan(
    group: str,
    byte_size: int,
    member: PackedMember,
    *,
    signed: bool = False,
    boolean: bool = False,
) -> AccessorPlan:
    """Plan accessors for a member of a byte_size-byte bit-group."""
    start, end = member.bit_range
    if start < 0 or end < start:
        raise LayoutError(f"Invalid bit range {member.bits} for {member.name}")
    if end >= byte_size * 8:
        raise LayoutError(
            f"Bit range {member.bits} of {member.name} exceeds the {byte_size} bytes of {group}"
        )
    if member.width > 64:
        raise LayoutError(f"Bit-field {member.name} is wider than 64 bits")

    first_byte = start // 8
    return AccessorPlan(
        group=group,
        member=member.name,
        ty=member.ty,
        first_byte=first_byte,
        last_byte=end // 8,
        shift=start - first_byte * 8,
        width=member.width,
        signed=signed,
        boolean=boolean,
    )


def _check_range(data: bytes | bytearray, bit_range: tuple[int, int]) -> None:
    start, end = bit_range
    if start < 0 or end < start or end >= len(data) * 8:
        raise LayoutError(f"Bit range {start}..={end} outside a {len(data)}-byte buffer")


def read_bits(data: bytes | bytearray, bit_range: tuple[int, int], signed: bool = False) -> int:
    """Read the inclusive bit_range of data, sign-extending if signed."""
    start, end = bit_range
    _check_range(data, bit_range)
    width = end - start + 1
    raw = int.from_bytes(data, "little")
    value = (raw >> start) & ((1 << width) - 1)
    if signed and value >> (width - 1):
        value -= 1 << width
    return value


def write_bits(data: bytearray, bit_range: tuple[int, int], value: int) -> None:
    """Store value, truncated to the field width, into the inclusive bit_range of data."""
    start, end = bit_range
    _check_range(data, bit_range)
    mask = (1 << (end - start + 1)) - 1
    raw = int.from_bytes(data, "little")
    raw = (raw & ~(mask << start)) | ((value & mask) << start)
    data[:] = raw.to_bytes(len(data), "little")
