"""Zero and literal initializers for bit-field structs."""

from itertools import zip_longest
from typing import Any, Callable

from .emitter import named_classes
from .scalars import CDefaultProvider, CExprTranslator, DefaultProvider, ExprTranslator
from .types import (
    ArityError,
    BitGroup,
    FieldClass,
    FieldDescriptor,
    LiteralPlan,
    Padding,
    Regular,
    SetterCall,
    TranslationContext,
    UnsupportedError,
    ZeroArray,
)

# Sentinel for a descriptor without a supplied initializer
_MISSING: Any = object()


class InitializerSynthesizer:
    """Synthesize initial values for the fields of a bit-field struct."""

    def __init__(
        self,
        defaults: DefaultProvider | None = None,
        exprs: ExprTranslator | None = None,
    ):
        self.defaults = defaults or CDefaultProvider()
        self.exprs = exprs or CExprTranslator()

    def _zeroed_storage(
        self, classes: list[FieldClass], regular: Callable[[Regular], Any] | None = None
    ) -> dict[str, Any]:
        """Zero arrays for every bit-group and padding field.

        Regular fields are included only when a value callback is given.
        """
        fields: dict[str, Any] = {}
        for name, cls in named_classes(classes):
            if isinstance(cls, (BitGroup, Padding)):
                fields[name] = ZeroArray(cls.byte_size)
            elif regular is not None:
                fields[name] = regular(cls)
        return fields

    def zero_initializer(
        self, classes: list[FieldClass], is_static: bool = False
    ) -> dict[str, Any]:
        """Values for an all-zero instance, in struct field order."""
        return self._zeroed_storage(
            classes, lambda cls: self.defaults.implicit_default(cls.ctype, is_static)
        )

    def literal_initializer(
        self,
        struct_name: str,
        classes: list[FieldClass],
        fields: list[FieldDescriptor],
        supplied: list[Any],
        ctx: TranslationContext | None = None,
    ) -> LiteralPlan:
        """Plan a struct literal: zeroed base value, then one setter per bit-field.

        Initializers pair positionally with the declared fields, zero-width
        markers excluded. Fields without an initializer get the implicit
        default, or stay zero inside their bit-group.
        """
        ctx = ctx or TranslationContext()
        if ctx.is_static:
            raise UnsupportedError(
                f"Static initializer for bit-field struct {struct_name} is not supported"
            )

        # Zero-width bit-fields are layout markers, not initializable members
        members = [f for f in fields if not f.is_zero_width]
        if len(supplied) > len(members):
            raise ArityError(
                f"Struct literal for {struct_name} has {len(supplied)} initializers"
                f" but only {len(members)} fields"
            )

        base_fields = self._zeroed_storage(classes)
        setter_calls: list[SetterCall] = []

        for expr, desc in zip_longest(supplied, members, fillvalue=_MISSING):
            if expr is _MISSING:
                if not desc.is_bitfield:
                    base_fields[desc.name] = self.defaults.implicit_default(
                        desc.semantic_type, ctx.is_static
                    )
                continue

            value = self.exprs.convert_expr(ctx, expr)
            if desc.is_bitfield:
                setter_calls.append(SetterCall(desc.name, value))
            else:
                base_fields[desc.name] = value

        return LiteralPlan(
            struct_name=struct_name,
            base_fields=base_fields,
            setter_calls=tuple(setter_calls),
        )
