# tests/test_printer.py
"""
Tests for the pretty-printer: AST → C++ text.
"""

import pytest

from resgen import ast as A
from resgen.printer import IndentingWriter, PrettyPrinter, render


class TestIndentingWriter:

    def test_indents_each_line(self):
        w = IndentingWriter("  ")
        with w.indented():
            w.writeln("a")
            w.writeln("b")
        w.write("c")
        assert w.getvalue() == "  a\n  b\nc"

    def test_blank_lines_carry_no_indent(self):
        w = IndentingWriter()
        w.indent()
        w.writeln()
        w.writeln("x")
        assert w.getvalue() == "\n\tx\n"

    def test_indent_inserted_lazily(self):
        w = IndentingWriter()
        w.write("{")
        w.indent()
        w.write(" x")
        assert w.getvalue() == "{ x"

    def test_outdent_never_negative(self):
        w = IndentingWriter()
        w.outdent()
        w.outdent()
        assert w.indent_level == 0
        w.write("x")
        assert w.getvalue() == "x"


class TestScalars:

    @pytest.mark.parametrize("value, width, expected", [
        (10, 16, "0x000A"),
        (255, 8, "0xFF"),
        (0x100918, 32, "0x00100918"),
        (0x8C20, 32, "0x00008C20"),
        (0, 8, "0x00"),
    ])
    def test_hex(self, value, width, expected):
        assert render(A.hex_literal(value, width)) == expected

    def test_integer_is_decimal(self):
        assert render(A.IntegerLiteral(4098)) == "4098"

    def test_booleans(self):
        assert render(A.BooleanLiteral(True)) == "true"
        assert render(A.BooleanLiteral(False)) == "false"

    def test_string_quoted(self):
        assert render(A.StringLiteral("Realtek")) == '"Realtek"'

    def test_string_escaped(self):
        assert render(A.StringLiteral('a"b\\c')) == '"a\\"b\\\\c"'

    @pytest.mark.parametrize("content, expected", [
        ("a\nb", '"a\\nb"'),
        ("a\r\tb", '"a\\r\\tb"'),
        ("a\x017", '"a\\0017"'),
        ("\x7f", '"\\177"'),
    ], ids=["newline", "cr-tab", "octal", "delete"])
    def test_string_control_characters(self, content, expected):
        assert render(A.StringLiteral(content)) == expected

    def test_string_with_newline_stays_on_one_line(self):
        node = A.Literal((A.StringLiteral("two\nlines"),))
        assert render(node) == '{\n\t"two\\nlines"\n}'

    def test_null_pointer(self):
        assert render(A.NULL_POINTER) == "nullptr"

    def test_array_lookup_of_address(self):
        node = A.ArrayLookup(A.AddressOf(A.Identifier("ADDPR(kextTable)")), A.IntegerLiteral(1))
        assert render(node) == "&ADDPR(kextTable)[1]"


class TestLiterals:

    def test_literal_layout(self):
        node = A.Literal((A.IntegerLiteral(1), A.StringLiteral("x")))
        assert render(node) == '{\n\t1,\n\t"x"\n}'

    def test_empty_literal(self):
        assert render(A.Literal()) == "{\n\n}"

    def test_nested_literal_indentation(self):
        node = A.Literal((A.Literal((A.BooleanLiteral(False),)), A.IntegerLiteral(2)))
        assert render(node) == "{\n\t{\n\t\tfalse\n\t},\n\t2\n}"

    def test_custom_indent(self):
        node = A.Literal((A.IntegerLiteral(1),))
        assert render(node, "    ") == "{\n    1\n}"

    def test_bytes_on_one_line(self):
        node = A.literal_of(b"\x01\xab")
        assert render(node) == "{\n\t0x01, 0xAB\n}"

    def test_sixteen_bytes_do_not_wrap(self):
        text = render(A.literal_of(bytes(16)))
        body = text.split("\n")[1:-1]
        assert body == ["\t" + ", ".join(["0x00"] * 16)]

    def test_seventeen_bytes_wrap_once(self):
        text = render(A.literal_of(bytes(range(17))))
        lines = text.split("\n")
        assert lines[0] == "{"
        assert lines[1].endswith("0x0F,")
        assert lines[1].count("0x") == 16
        assert lines[2] == "\t0x10"
        assert lines[3] == "}"

    def test_thirty_two_bytes_no_trailing_separator(self):
        text = render(A.literal_of(bytes(32)))
        assert text.count(",\n") == 1
        assert text.endswith("0x00\n}")


class TestDeclarations:

    def test_array_variable(self):
        types = A.TypeRegistry()
        var = A.Variable.named(types.bytes, "file0").make_static().make_constant()
        assert render(var) == "static const uint8_t file0[]"

    def test_string_array_variable(self):
        types = A.TypeRegistry()
        var = A.Variable.named(types.string_array, "tree0")
        assert render(var) == "char* tree0[]"

    def test_struct_array(self):
        types = A.TypeRegistry()
        var = A.Variable.named(types.struct_array("CodecModInfo::File"), "layouts0")
        assert render(var) == "CodecModInfo::File layouts0[]"

    def test_assign_ends_with_blank_line(self):
        types = A.TypeRegistry()
        node = A.Assign.const(types.size, "ADDPR(kextTableSize)", A.IntegerLiteral(2))
        assert render(node) == "const size_t ADDPR(kextTableSize) = 2;\n\n"

    def test_static_assign_of_literal(self):
        types = A.TypeRegistry()
        node = A.Assign.static_const(types.uint_array(32), "revisions0",
                                     A.Literal((A.hex_literal(0x100918, 32),)))
        assert render(node) == (
            "static const uint32_t revisions0[] = {\n\t0x00100918\n};\n\n"
        )

    def test_include(self):
        assert render(A.Include("kern_resources.hpp")) == '#include "kern_resources.hpp"\n\n'

    def test_comment(self):
        assert render(A.CommentLine("MARK:- Kexts Section\n")) == "// MARK:- Kexts Section\n\n"

    def test_source_code_in_order(self):
        src = A.SourceCode()
        src.append(A.CommentLine("a"))
        src.extend([A.CommentLine("b"), A.Include("h.hpp")])
        assert render(src) == '// a\n// b\n#include "h.hpp"\n\n'

    def test_block_in_order(self):
        block = A.Block([A.CommentLine("x"), A.CommentLine("y")])
        out = IndentingWriter()
        PrettyPrinter(out).visit(block)
        assert out.getvalue() == "// x\n// y\n"

    def test_str_renders(self):
        assert str(A.Identifier("kextTable")) == "kextTable"
