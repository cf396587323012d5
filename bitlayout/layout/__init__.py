"""Bit-field struct layout and accessor synthesis."""

from .assign import AssignOp as AssignOp
from .assign import CompoundAssignDesugarer as CompoundAssignDesugarer
from .classifier import FieldClassifier as FieldClassifier
from .classifier import classify as classify
from .emitter import LayoutEmitter as LayoutEmitter
from .emitter import emit as emit
from .initializer import InitializerSynthesizer as InitializerSynthesizer
from .parser import ValidationError as ValidationError
from .parser import parse as parse
from .translator import BitfieldTranslator as BitfieldTranslator
from .types import *
