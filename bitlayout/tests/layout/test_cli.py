"""Tests for CLI interface."""

import json
import os
import tempfile

from click.testing import CliRunner

from bitlayout.layout.cli import cli

FILE_DIR = os.path.dirname(os.path.realpath(__file__))
LAYOUT = f"{FILE_DIR}/structs.layout"


def describe_gen_command():
    def generates_rust_code(expect):
        runner = CliRunner()
        with tempfile.NamedTemporaryFile(suffix=".rs", delete=False) as f:
            output_file = f.name

        try:
            result = runner.invoke(cli, ["gen", "-i", LAYOUT, "-o", output_file])
            expect(result.exit_code) == 0
            with open(output_file) as f:
                content = f.read()
            expect("pub struct Foo {" in content) == True
            expect("pub fn set_count(&mut self, val: libc::c_uint) {" in content) == True
            expect("pub struct Plain" in content) == False
        finally:
            os.unlink(output_file)

    def fails_on_union_bitfields(expect):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("union.layout", "w") as f:
                f.write("union U { size = 4 align = 4 a: int @ 0 : 3 }")

            result = runner.invoke(cli, ["gen", "-i", "union.layout", "-o", "out.rs"])

        expect(result.exit_code) == 1
        expect("not supported" in result.output) == True

    def fails_on_syntax_errors(expect):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("bad.layout", "w") as f:
                f.write("struct {")

            result = runner.invoke(cli, ["gen", "-i", "bad.layout", "-o", "out.rs"])

        expect(result.exit_code) == 1
        expect(result.output.startswith("error:")) == True


def describe_info_command():
    def shows_layout_table(expect):
        result = CliRunner().invoke(cli, ["info", "-i", LAYOUT])

        expect(result.exit_code) == 0
        expect("Foo" in result.output) == True
        expect("(16 bytes, align 8)" in result.output) == True
        expect("bf1_bf2" in result.output) == True
        expect("_pad2" in result.output) == True

    def outputs_json(expect):
        result = CliRunner().invoke(cli, ["info", "-i", LAYOUT, "--json"])

        expect(result.exit_code) == 0
        data = json.loads(result.output)
        expect(data["Foo"]["size"]) == 16
        expect(data["Flags"]["align"]) == 8
        group = data["Foo"]["layout"][0]
        expect(group["kind"]) == "bitfield"
        expect(group["name"]) == "bf1_bf2"
        expect(group["byte_size"]) == 2
        expect(data["Foo"]["layout"][1]) == {"kind": "padding", "byte_size": 5}


def describe_init_command():
    def prints_literal_block(expect):
        result = CliRunner().invoke(
            cli, ["init", "-i", LAYOUT, "-s", "Foo", "--expr=-12", "--expr=34", "--expr=32"]
        )

        expect(result.exit_code) == 0
        expect("let mut init = Foo {" in result.output) == True
        expect("    init.set_bf1(-12);\n" in result.output) == True
        expect("        non_bf: 32,\n" in result.output) == True

    def prints_zero_initializer(expect):
        result = CliRunner().invoke(cli, ["init", "-i", LAYOUT, "-s", "Foo", "--zero"])

        expect(result.exit_code) == 0
        expect(result.output) == "Foo { bf1_bf2: [0; 2], _pad: [0; 5], non_bf: 0 }\n"

    def rejects_too_many_initializers(expect):
        result = CliRunner().invoke(
            cli, ["init", "-i", LAYOUT, "-s", "Plain", "--expr=1", "--expr=2"]
        )

        expect(result.exit_code) == 1
        expect("2 initializers but only 1 fields" in result.output) == True

    def rejects_unknown_struct(expect):
        result = CliRunner().invoke(cli, ["init", "-i", LAYOUT, "-s", "Nope", "--zero"])

        expect(result.exit_code) == 1
        expect("Unknown struct: Nope" in result.output) == True

    def rejects_static_literals(expect):
        result = CliRunner().invoke(
            cli, ["init", "-i", LAYOUT, "-s", "Foo", "--static", "--expr=1"]
        )

        expect(result.exit_code) == 1
        expect("not supported" in result.output) == True
