"""Mapping of classified layouts onto emitted struct shapes."""

from collections.abc import Iterator

from .types import BitGroup, FieldClass, FieldDecl, Padding, Regular, StructShape


def padding_name(index: int) -> str:
    """Name of the index-th padding field: _pad, _pad2, _pad3, ..."""
    return "_pad" if index == 0 else f"_pad{index + 1}"


def named_classes(classes: list[FieldClass]) -> Iterator[tuple[str, FieldClass]]:
    """Pair every classified entry with the name of the struct field backing it."""
    padding_count = 0
    for cls in classes:
        if isinstance(cls, BitGroup):
            yield cls.name, cls
        elif isinstance(cls, Padding):
            yield padding_name(padding_count), cls
            padding_count += 1
        else:
            yield cls.name, cls


class LayoutEmitter:
    """Build the declaration of a bit-field struct from its classified layout."""

    def field_decl(self, name: str, cls: FieldClass) -> FieldDecl:
        if isinstance(cls, BitGroup):
            return FieldDecl(name=name, type_name="u8", array_len=cls.byte_size, packed=cls.members)
        if isinstance(cls, Padding):
            return FieldDecl(name=name, type_name="u8", array_len=cls.byte_size)
        if isinstance(cls, Regular):
            return FieldDecl(name=name, type_name=cls.ty)
        raise TypeError(f"Not a field class: {cls!r}")

    def emit(
        self,
        name: str,
        manual_alignment: int | None,
        platform_alignment: int,
        classes: list[FieldClass],
    ) -> StructShape:
        """Emit the struct shape; a manual alignment overrides the platform one."""
        alignment = manual_alignment if manual_alignment is not None else platform_alignment
        fields = tuple(self.field_decl(n, cls) for n, cls in named_classes(classes))

        return StructShape(
            name=name,
            alignment=alignment,
            fields=fields,
            repr=("C", f"align({alignment})"),
        )


def emit(
    name: str,
    manual_alignment: int | None,
    platform_alignment: int,
    classes: list[FieldClass],
) -> StructShape:
    return LayoutEmitter().emit(name, manual_alignment, platform_alignment, classes)
