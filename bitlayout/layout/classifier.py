"""Grouping of C struct members into bit-groups, padding and regular fields."""

import logging
from dataclasses import dataclass, field

from .scalars import CTypeConverter, TypeConverter
from .types import BitGroup, FieldClass, FieldDescriptor, PackedMember, Padding, Regular

logger = logging.getLogger(__name__)


@dataclass
class _OpenGroup:
    """Bit-group still accepting members."""

    start_bit: int
    names: list[str]
    byte_size: int
    members: list[PackedMember]

    def close(self) -> BitGroup:
        return BitGroup(
            start_bit=self.start_bit,
            name="_".join(self.names),
            byte_size=self.byte_size,
            members=tuple(self.members),
        )


@dataclass
class _Fold:
    """Accumulator threaded through one classification pass."""

    classes: list[FieldClass] = field(default_factory=list)
    group: _OpenGroup | None = None
    next_byte_pos: int = 0
    encountered_bytes: set[int] = field(default_factory=set)

    def close_group(self) -> None:
        if self.group is not None:
            group = self.group.close()
            logger.debug("Closed bit-group %s (%d bytes)", group.name, group.byte_size)
            self.classes.append(group)
            self.group = None

    def pad(self, byte_size: int) -> None:
        logger.debug("Padding %d bytes at byte %d", byte_size, self.next_byte_pos)
        self.classes.append(Padding(byte_size))

    def claim_bytes(self, bit_offset: int, bit_width: int) -> int:
        """Record the bytes spanned by a bit-field, returning how many were new."""
        spanned = set(range(bit_offset // 8, (bit_offset + bit_width - 1) // 8 + 1))
        new = spanned - self.encountered_bytes
        self.encountered_bytes |= new
        return len(new)

    def marker(self) -> None:
        # Zero-width bit-fields occupy no storage, they only end the group
        self.close_group()

    def regular(self, desc: FieldDescriptor, ty: str) -> None:
        self.close_group()

        byte_diff = desc.bit_offset // 8 - self.next_byte_pos
        if byte_diff > 1:
            self.pad(byte_diff)

        self.classes.append(
            Regular(
                name=desc.name,
                ctype=desc.semantic_type,
                ty=ty,
                byte_size=desc.storage_unit_width // 8,
            )
        )
        self.next_byte_pos = (desc.bit_offset + desc.storage_unit_width) // 8

    def bitfield(self, desc: FieldDescriptor, ty: str, bit_width: int) -> None:
        bit_offset = desc.bit_offset

        if bit_offset // 8 > self.next_byte_pos:
            self.pad(bit_offset // 8 - self.next_byte_pos)

        if self.group is None:
            self.group = _OpenGroup(start_bit=bit_offset, names=[], byte_size=0, members=[])

        group = self.group
        group.names.append(desc.name)
        group.byte_size += self.claim_bytes(bit_offset, bit_width)

        bit_start = bit_offset - group.start_bit
        bit_end = bit_start + bit_width - 1
        group.members.append(PackedMember(desc.name, ty, (bit_start, bit_end)))

        self.next_byte_pos = (bit_offset + bit_width) // 8 + 1

    def finish(self, platform_byte_size: int) -> list[FieldClass]:
        self.close_group()

        byte_diff = platform_byte_size - self.next_byte_pos
        if byte_diff > 0:
            self.pad(byte_diff)

        return self.classes


def layout_size(classes: list[FieldClass]) -> int:
    """Total bytes explicitly claimed by a classified layout."""
    return sum(c.byte_size for c in classes)


class FieldClassifier:
    """Classify the members of one struct into bit-groups, padding and regular fields."""

    def __init__(self, types: TypeConverter | None = None):
        self.types = types or CTypeConverter()

    def classify(
        self, fields: list[FieldDescriptor], platform_byte_size: int
    ) -> list[FieldClass]:
        """Merge adjacent bit-fields into groups and insert ABI padding.

        Raises whatever LayoutError the type converter raises for a field.
        """
        fold = _Fold()

        for desc in fields:
            ty = self.types.convert_type(desc.semantic_type)

            if desc.bit_width is None:
                fold.regular(desc, ty)
            elif desc.bit_width == 0:
                fold.marker()
            else:
                fold.bitfield(desc, ty, desc.bit_width)

        classes = fold.finish(platform_byte_size)

        claimed = layout_size(classes)
        if claimed != platform_byte_size:
            # Scalar alignment may fill the gap, but a group ending on a byte
            # boundary leaves the cursor one byte ahead and shifts later bit-groups
            logger.warning(
                "Layout claims %d of %d bytes explicitly", claimed, platform_byte_size
            )

        return classes


def classify(
    fields: list[FieldDescriptor],
    platform_byte_size: int,
    types: TypeConverter | None = None,
) -> list[FieldClass]:
    """Classify struct members with the given (or default C) type converter."""
    return FieldClassifier(types).classify(fields, platform_byte_size)
