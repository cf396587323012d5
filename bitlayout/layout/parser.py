"""Struct layout description parser using Lark."""

import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.visitors import Transformer

from .scalars import normalize, storage_bits
from .types import FieldDescriptor, LayoutError, StructDecl

_g_parser: Lark | None = None


class ValidationError(LayoutError):
    """Raised when a layout description is inconsistent."""


@dataclass
class _Setting:
    name: str
    value: int


@dataclass
class _CType:
    value: str


@dataclass
class _Width:
    value: int


@dataclass
class _Storage:
    value: int


@dataclass
class _Member:
    name: str
    ctype: str
    bit_offset: int
    bit_width: int | None
    storage_bits: int | None


@dataclass
class _Record:
    name: str
    entries: list[Any]
    is_union: bool


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")
    return filtered[0].value


class TreeTransformer(Transformer):
    """Transform parse tree into struct declarations."""

    def ctype(self, args: list[Any]) -> _CType:
        return _CType(value=normalize(" ".join(str(a) for a in args)))

    def width(self, args: list[Any]) -> _Width:
        return _Width(value=int(args[0]))

    def storage(self, args: list[Any]) -> _Storage:
        return _Storage(value=int(args[0]))

    def setting(self, args: list[Any]) -> _Setting:
        return _Setting(name=str(args[0]), value=int(args[1]))

    def member(self, args: list[Any]) -> _Member:
        return _Member(
            name=str(args[0]),
            ctype=_find_one(args, _CType),
            bit_offset=int(args[2]),
            bit_width=_find_one(args, _Width),
            storage_bits=_find_one(args, _Storage),
        )

    def struct(self, args: list[Any]) -> _Record:
        return _Record(name=str(args[0]), entries=args[1:], is_union=False)

    def union(self, args: list[Any]) -> _Record:
        return _Record(name=str(args[0]), entries=args[1:], is_union=True)


def _build_decl(record: _Record) -> StructDecl:
    name = record.name
    entries = record.entries
    settings: dict[str, int] = {}
    for setting in _filter(entries, _Setting):
        if setting.name in settings:
            raise ValidationError(f"{name}: {setting.name} given more than once")
        settings[setting.name] = setting.value

    for required in ("size", "align"):
        if required not in settings:
            raise ValidationError(f"{name}: missing {required}")

    fields: list[FieldDescriptor] = []
    seen: set[str] = set()
    for member in _filter(entries, _Member):
        # Zero-width markers are unnamed in C, so they may repeat
        if member.bit_width != 0:
            if member.name in seen:
                raise ValidationError(f"{name}: duplicate member {member.name}")
            seen.add(member.name)

        storage = member.storage_bits
        if storage is None:
            storage = storage_bits(member.ctype)
        if storage is None:
            raise ValidationError(
                f"{name}.{member.name}: unknown storage width for {member.ctype}, give it as /bits"
            )

        fields.append(
            FieldDescriptor(
                name=member.name,
                semantic_type=member.ctype,
                bit_width=member.bit_width,
                bit_offset=member.bit_offset,
                storage_unit_width=storage,
            )
        )

    return StructDecl(
        name=name,
        platform_alignment=settings["align"],
        platform_byte_size=settings["size"],
        fields=fields,
        manual_alignment=settings.get("manual_align"),
        is_union=record.is_union,
    )


def _is_power_of_two(value: int) -> bool:
    return value > 0 and not value & (value - 1)


def validate(decls: list[StructDecl]) -> None:
    """Validate parsed layout descriptions."""
    names: set[str] = set()
    for decl in decls:
        if decl.name in names:
            raise ValidationError(f"{decl.name} declared more than once")
        names.add(decl.name)

        if not _is_power_of_two(decl.platform_alignment):
            raise ValidationError(f"{decl.name}: align must be a power of two")

        if decl.manual_alignment is not None and not _is_power_of_two(decl.manual_alignment):
            raise ValidationError(f"{decl.name}: manual_align must be a power of two")


def parse(text: str) -> list[StructDecl]:
    """Parse a layout description file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/layout.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    records = _filter(TreeTransformer().transform(tree).children, _Record)
    decls = [_build_decl(record) for record in records]

    validate(decls)

    return decls
