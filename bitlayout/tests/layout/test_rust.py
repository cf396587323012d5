"""Tests for Rust code generation."""

import pytest

from bitlayout.layout import BitfieldTranslator, parse
from bitlayout.layout.rust import accessor_plans, render, render_expr, render_literal, render_struct
from bitlayout.layout.types import (
    BinaryExpr,
    FieldDecl,
    FieldRead,
    LayoutError,
    Literal,
    PackedMember,
    Path,
    SetterCall,
    StructLiteral,
    StructShape,
    ZeroArray,
)

FOO = """
struct Foo {
    size = 16
    align = 8
    bf1: short @ 0 : 10
    bf2: unsigned char @ 10 : 6
    non_bf: unsigned long @ 64
}
"""


@pytest.fixture
def foo():
    return parse(FOO)[0]


@pytest.fixture
def translator():
    return BitfieldTranslator()


def describe_render_struct():
    def declares_repr_c_struct(expect, foo, translator):
        code = render_struct(translator.convert_struct_decl(foo))

        expect("#[derive(Clone, Copy)]" in code) == True
        expect("#[repr(C, align(8))]" in code) == True
        expect("pub struct Foo {" in code) == True
        expect("    pub bf1_bf2: [u8; 2],\n" in code) == True
        expect("    pub _pad: [u8; 5],\n" in code) == True
        expect("    pub non_bf: libc::c_ulong,\n" in code) == True
        expect("/// bf1: libc::c_short, bits 0..=9" in code) == True

    def generates_signed_getter(expect, foo, translator):
        code = render_struct(translator.convert_struct_decl(foo))

        expect("pub fn bf1(&self) -> libc::c_short {" in code) == True
        expect("raw |= (self.bf1_bf2[1] as u128) << 8;" in code) == True
        expect("let val = (raw >> 0) & 0x3ff_u128;" in code) == True
        expect("(((val << 118) as i128) >> 118) as libc::c_short" in code) == True

    def generates_setter(expect, foo, translator):
        code = render_struct(translator.convert_struct_decl(foo))

        expect("pub fn set_bf2(&mut self, val: libc::c_uchar) {" in code) == True
        expect("raw &= !(0x3f_u128 << 2);" in code) == True
        expect("raw |= ((val as u128) & 0x3f_u128) << 2;" in code) == True
        expect("self.bf1_bf2[1] = (raw >> 0) as u8;" in code) == True

    def generates_bool_getter(expect, translator):
        (decl,) = parse("struct B { size = 1 align = 1 flag: _Bool @ 0 : 1 }")
        code = render_struct(translator.convert_struct_decl(decl))

        expect("pub fn flag(&self) -> bool {" in code) == True
        expect("        val != 0\n" in code) == True

    def rejects_float_bitfields():
        shape = StructShape(
            name="F",
            alignment=4,
            fields=(FieldDecl("x", "u8", 1, (PackedMember("x", "libc::c_float", (0, 3)),)),),
            repr=("C", "align(4)"),
        )
        with pytest.raises(LayoutError, match="non-integral"):
            accessor_plans(shape)

    def renders_module(expect, foo, translator):
        code = render([translator.convert_struct_decl(foo)], comments=["from foo.h"])

        expect(code.startswith("// Generated by bitlayout. Do not edit.\n// from foo.h\n")) == True
        expect("pub struct Foo {" in code) == True


def describe_render_expr():
    def renders_setter_call_with_receiver(expect):
        call = SetterCall(
            "x", BinaryExpr("add", FieldRead(Path("s"), "x"), Literal("1")), Path("s")
        )

        expect(render_expr(call)) == "s.set_x(s.x() + 1)"

    def parenthesizes_nested_binaries(expect):
        inner = BinaryExpr("sub", Path("a"), Path("b"))

        expect(render_expr(BinaryExpr("mul", inner, Literal("2")))) == "(a - b) * 2"

    def renders_zero_struct(expect):
        expr = StructLiteral("Foo", {"bf1_bf2": ZeroArray(2), "non_bf": Literal("0")})

        expect(render_expr(expr)) == "Foo { bf1_bf2: [0; 2], non_bf: 0 }"

    def rejects_unknown_nodes():
        with pytest.raises(LayoutError):
            render_expr(object())


def describe_render_literal():
    def renders_two_phase_block(expect, foo, translator):
        code = render_literal(translator.literal_initializer(foo, [-12, 34, 32]))

        expect(code) == (
            "{\n"
            "    let mut init = Foo {\n"
            "        bf1_bf2: [0; 2],\n"
            "        _pad: [0; 5],\n"
            "        non_bf: 32,\n"
            "    };\n"
            "    init.set_bf1(-12);\n"
            "    init.set_bf2(34);\n"
            "    init\n"
            "}\n"
        )
