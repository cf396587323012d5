"""Per-struct translation of bit-field declarations, initializers and assignments."""

import logging
from typing import Any

from .assign import CompoundAssignDesugarer
from .classifier import FieldClassifier
from .emitter import LayoutEmitter
from .initializer import InitializerSynthesizer
from .scalars import (
    CDefaultProvider,
    CExprTranslator,
    CTypeConverter,
    DefaultProvider,
    ExprTranslator,
    TypeConverter,
)
from .types import (
    FieldClass,
    LiteralPlan,
    SetterCall,
    StructDecl,
    StructLiteral,
    StructShape,
    TranslationContext,
    UnsupportedError,
)

logger = logging.getLogger(__name__)


class BitfieldTranslator:
    """Translate bit-field structs using pluggable type, default and expression collaborators.

    Every call works on its own inputs only, so one translator may be shared
    between independent struct declarations.
    """

    def __init__(
        self,
        types: TypeConverter | None = None,
        defaults: DefaultProvider | None = None,
        exprs: ExprTranslator | None = None,
    ):
        self.types = types or CTypeConverter()
        self.classifier = FieldClassifier(self.types)
        self.emitter = LayoutEmitter()
        self.initializers = InitializerSynthesizer(
            defaults or CDefaultProvider(self.types),
            exprs or CExprTranslator(),
        )
        self.assignments = CompoundAssignDesugarer()

    def classify(self, decl: StructDecl) -> list[FieldClass]:
        if decl.is_union and decl.has_bitfields:
            raise UnsupportedError(f"Bit-fields inside union {decl.name} are not supported")
        return self.classifier.classify(decl.fields, decl.platform_byte_size)

    def convert_struct_decl(self, decl: StructDecl) -> StructShape:
        """Declaration of the Rust struct standing in for decl."""
        shape = self.emitter.emit(
            decl.name,
            decl.manual_alignment,
            decl.platform_alignment,
            self.classify(decl),
        )
        logger.debug(
            "Translated struct %s: %d fields, %d bit-groups, align %d",
            shape.name,
            len(shape.fields),
            len(shape.bitfield_groups),
            shape.alignment,
        )
        return shape

    def zero_initializer(self, decl: StructDecl, is_static: bool = False) -> StructLiteral:
        fields = self.initializers.zero_initializer(self.classify(decl), is_static)
        return StructLiteral(decl.name, fields)

    def literal_initializer(
        self,
        decl: StructDecl,
        supplied: list[Any],
        ctx: TranslationContext | None = None,
    ) -> LiteralPlan:
        return self.initializers.literal_initializer(
            decl.name, self.classify(decl), decl.fields, supplied, ctx
        )

    def assignment(
        self,
        op: str,
        field_name: str,
        lhs: Any,
        rhs: Any,
        receiver: Any | None = None,
    ) -> SetterCall:
        return self.assignments.desugar(op, field_name, lhs, rhs, receiver)
