"""
resgen/printer.py
=================

Renders the C++ AST as indented source text.

``IndentingWriter`` owns the text buffer and the indentation depth;
``PrettyPrinter`` is an ``ASTVisitor`` that knows the C++ surface syntax
of each node and nothing about resources.
"""

from __future__ import annotations

from contextlib import contextmanager
from io import StringIO
from typing import Iterator

from resgen import ast as A
from resgen.visitor import ASTVisitor

__all__ = [
    "BYTES_PER_LINE",
    "escape_c_string",
    "IndentingWriter",
    "PrettyPrinter",
    "render",
]

#: Elements of a ``BytesLiteral`` printed on one line.
BYTES_PER_LINE = 16

_C_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_c_string(text: str) -> str:
    """Escape *text* for use inside a C string literal.

    Control characters without a short escape become three-digit octal
    escapes, which never absorb a following character.
    """
    out = []
    for ch in text:
        if ch in _C_ESCAPES:
            out.append(_C_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\{ord(ch):03o}")
        else:
            out.append(ch)
    return "".join(out)


class IndentingWriter:
    """Text accumulator with indentation tracking.

    Indentation is written lazily: it is emitted in front of the first
    character of each non-empty line, so blank lines carry no trailing
    whitespace.
    """

    def __init__(self, indent_str: str = "\t") -> None:
        self._buffer = StringIO()
        self._indent_str = indent_str
        self._indent_level = 0
        self._at_line_start = True

    @property
    def indent_level(self) -> int:
        return self._indent_level

    def write(self, text: str) -> None:
        """Write *text* without a trailing newline."""
        for i, line in enumerate(text.split("\n")):
            if i > 0:
                self._buffer.write("\n")
                self._at_line_start = True
            if not line:
                continue
            if self._at_line_start:
                self._buffer.write(self._indent_str * self._indent_level)
                self._at_line_start = False
            self._buffer.write(line)

    def writeln(self, text: str = "") -> None:
        """Write *text* followed by a newline."""
        self.write(text + "\n")

    def indent(self) -> None:
        self._indent_level += 1

    def outdent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    @contextmanager
    def indented(self) -> Iterator["IndentingWriter"]:
        """Context manager for one extra level of indentation."""
        self.indent()
        try:
            yield self
        finally:
            self.outdent()

    def getvalue(self) -> str:
        return self._buffer.getvalue()


class PrettyPrinter(ASTVisitor[None]):
    """Prints AST nodes through an ``IndentingWriter``."""

    def __init__(self, writer: IndentingWriter) -> None:
        self.writer = writer

    # --- General ---

    def visit_variable(self, node: A.Variable) -> None:
        if node.is_static:
            self.writer.write("static ")
        if node.is_constant:
            self.writer.write("const ")
        node.type.accept(self)
        self.writer.write(" ")
        node.identifier.accept(self)
        if isinstance(node.type, A.ArrayType):
            self.writer.write("[]")

    def visit_source_code(self, node: A.SourceCode) -> None:
        for statement in node:
            statement.accept(self)

    # --- Expressions ---

    def visit_literal(self, node: A.Literal) -> None:
        self.writer.writeln("{")
        with self.writer.indented():
            last = len(node) - 1
            for index, element in enumerate(node):
                element.accept(self)
                if index != last:
                    self.writer.writeln(",")
        self.writer.writeln()
        self.writer.write("}")

    def visit_bytes_literal(self, node: A.BytesLiteral) -> None:
        self.writer.writeln("{")
        with self.writer.indented():
            count = len(node)
            for index, element in enumerate(node):
                element.accept(self)
                if index + 1 == count:
                    continue
                if (index + 1) % BYTES_PER_LINE == 0:
                    self.writer.writeln(",")
                else:
                    self.writer.write(", ")
        self.writer.writeln()
        self.writer.write("}")

    def visit_boolean_literal(self, node: A.BooleanLiteral) -> None:
        self.writer.write("true" if node.value else "false")

    def visit_integer_literal(self, node: A.IntegerLiteral) -> None:
        self.writer.write(str(node.value))

    def visit_hexadecimal_integer_literal(
        self, node: A.HexadecimalIntegerLiteral
    ) -> None:
        digits = max(node.width // 4, 1)
        self.writer.write(f"0x{node.value:0{digits}X}")

    def visit_string_literal(self, node: A.StringLiteral) -> None:
        self.writer.write(f'"{escape_c_string(node.content)}"')

    def visit_identifier(self, node: A.Identifier) -> None:
        self.writer.write(node.name)

    def visit_array_lookup(self, node: A.ArrayLookup) -> None:
        node.array.accept(self)
        self.writer.write("[")
        node.index.accept(self)
        self.writer.write("]")

    def visit_address_of(self, node: A.AddressOf) -> None:
        self.writer.write("&")
        node.expression.accept(self)

    def visit_null_pointer(self, node: A.NullPointer) -> None:
        self.writer.write("nullptr")

    # --- Statements ---

    def visit_block(self, node: A.Block) -> None:
        for statement in node:
            statement.accept(self)

    def visit_assign(self, node: A.Assign) -> None:
        node.variable.accept(self)
        self.writer.write(" = ")
        node.value.accept(self)
        self.writer.writeln(";")
        self.writer.writeln()

    def visit_include(self, node: A.Include) -> None:
        self.writer.writeln(f'#include "{node.header}"')
        self.writer.writeln()

    def visit_comment_line(self, node: A.CommentLine) -> None:
        self.writer.write("// ")
        self.writer.writeln(node.content)

    # --- Types ---

    def visit_array_type(self, node: A.ArrayType) -> None:
        node.element_type.accept(self)

    def visit_char_type(self, node: A.CharType) -> None:
        self.writer.write("char")

    def visit_pointer_type(self, node: A.PointerType) -> None:
        node.pointee_type.accept(self)
        self.writer.write("*")

    def visit_size_type(self, node: A.SizeType) -> None:
        self.writer.write("size_t")

    def visit_struct_type(self, node: A.StructType) -> None:
        self.writer.write(node.name)

    def visit_uint_type(self, node: A.UIntType) -> None:
        self.writer.write(f"uint{node.num_bits}_t")


def render(node: A.Node, indent_str: str = "\t") -> str:
    """Render *node* to a string."""
    writer = IndentingWriter(indent_str)
    node.accept(PrettyPrinter(writer))
    return writer.getvalue()
