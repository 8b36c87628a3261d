# tests/test_ast.py
"""
Tests for the C++ AST node model and the visitor contract.
"""

import dataclasses

import pytest

from resgen import ast as A
from resgen.visitor import ASTVisitor


def _kind_visitor():
    """A visitor whose every visit method returns its own name."""
    methods = {
        name: (lambda self, node, _name=name: _name)
        for name in ASTVisitor.__abstractmethods__
    }
    return type(ASTVisitor)("KindVisitor", (ASTVisitor,), methods)()


class TestDispatch:

    @pytest.mark.parametrize("node, method", [
        (A.Literal(), "visit_literal"),
        (A.BytesLiteral(), "visit_bytes_literal"),
        (A.IntegerLiteral(1), "visit_integer_literal"),
        (A.HexadecimalIntegerLiteral(1), "visit_hexadecimal_integer_literal"),
        (A.BooleanLiteral(True), "visit_boolean_literal"),
        (A.StringLiteral("s"), "visit_string_literal"),
        (A.Identifier("x"), "visit_identifier"),
        (A.NULL_POINTER, "visit_null_pointer"),
        (A.AddressOf(A.Identifier("x")), "visit_address_of"),
        (A.ArrayLookup(A.Identifier("x"), A.IntegerLiteral(0)), "visit_array_lookup"),
        (A.Variable.named(A.SizeType(), "n"), "visit_variable"),
        (A.Assign.declare(A.SizeType(), "n", A.IntegerLiteral(0)), "visit_assign"),
        (A.Include("h"), "visit_include"),
        (A.CommentLine("c"), "visit_comment_line"),
        (A.SourceCode(), "visit_source_code"),
        (A.Block(), "visit_block"),
        (A.SizeType(), "visit_size_type"),
        (A.UIntType(8), "visit_uint_type"),
        (A.CharType(), "visit_char_type"),
        (A.PointerType(A.CharType()), "visit_pointer_type"),
        (A.ArrayType(A.CharType()), "visit_array_type"),
        (A.StructType("KextPatch"), "visit_struct_type"),
    ], ids=lambda v: v if isinstance(v, str) else type(v).__name__)
    def test_accept_routes_to_own_method(self, node, method):
        assert _kind_visitor().visit(node) == method

    def test_subclass_routes_to_subclass_method(self):
        # BytesLiteral is a Literal but must not be printed as one
        assert A.BytesLiteral().accept(_kind_visitor()) == "visit_bytes_literal"

    def test_incomplete_visitor_cannot_be_built(self):
        class Partial(ASTVisitor):
            def visit_literal(self, node):
                return None

        with pytest.raises(TypeError):
            Partial()


class TestNodes:

    def test_nodes_are_frozen(self):
        node = A.IntegerLiteral(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.value = 2

    def test_literal_contents_become_tuple(self):
        node = A.Literal([A.IntegerLiteral(1), A.IntegerLiteral(2)])
        assert isinstance(node.contents, tuple)
        assert len(node) == 2
        assert node[1] == A.IntegerLiteral(2)

    def test_make_static_returns_copy(self):
        var = A.Variable.named(A.SizeType(), "n")
        static = var.make_static()
        assert static is not var
        assert static.is_static and not var.is_static
        assert static.make_constant().is_constant

    def test_assign_forms(self):
        value = A.IntegerLiteral(0)
        t = A.SizeType()
        assert not A.Assign.declare(t, "a", value).variable.is_static
        assert A.Assign.static(t, "a", value).variable.is_static
        assert not A.Assign.static(t, "a", value).variable.is_constant
        assert A.Assign.const(t, "a", value).variable.is_constant
        both = A.Assign.static_const(t, "a", value).variable
        assert both.is_static and both.is_constant

    def test_source_code_is_append_only_sequence(self):
        src = A.SourceCode()
        src.append(A.CommentLine("a"))
        src.extend([A.CommentLine("b")])
        assert len(src) == 2
        assert [s.content for s in src] == ["a", "b"]

    def test_hex_default_width(self):
        assert A.hex_literal(5).width == 8
        assert isinstance(A.hex_literal(5), A.IntegerLiteral)


class TestLiteralOf:

    def test_bool_before_int(self):
        assert A.literal_of(True) == A.BooleanLiteral(True)

    def test_int(self):
        assert A.literal_of(3) == A.IntegerLiteral(3)

    def test_str(self):
        assert A.literal_of("x") == A.StringLiteral("x")

    def test_bytes(self):
        node = A.literal_of(b"\x01\xff")
        assert isinstance(node, A.BytesLiteral)
        assert list(node) == [A.HexadecimalIntegerLiteral(1), A.HexadecimalIntegerLiteral(255)]

    def test_node_passes_through(self):
        ident = A.Identifier("x")
        assert A.literal_of(ident) is ident

    def test_unsupported(self):
        with pytest.raises(TypeError):
            A.literal_of(1.5)


class TestTypeRegistry:

    def test_struct_memoized(self):
        types = A.TypeRegistry()
        assert types.struct("KextPatch") is types.struct("KextPatch")
        assert "KextPatch" in types
        assert len(types) == 1

    def test_registries_are_independent(self):
        a, b = A.TypeRegistry(), A.TypeRegistry()
        a.struct("VendorModInfo")
        assert "VendorModInfo" not in b

    def test_builtin_types(self):
        types = A.TypeRegistry()
        assert types.bytes == A.ArrayType(A.UIntType(8))
        assert types.string == A.PointerType(A.CharType())
        assert types.struct_array("X") == A.ArrayType(A.StructType("X"))
