"""
resgen/visitor.py
=================

Visitor contract for the C++ AST.

``ASTVisitor`` declares one abstract ``visit_X`` method per node variant in
``resgen.ast``.  A subclass that leaves any of them unimplemented cannot be
instantiated, so adding a node variant forces every backend to handle it.
"""

from __future__ import annotations

import abc
from typing import Generic, TypeVar

from resgen import ast as A

__all__ = ["ASTVisitor"]

T = TypeVar("T")


class ASTVisitor(abc.ABC, Generic[T]):
    """Abstract base class for AST visitors.

    Each ``visit_X`` method corresponds to an AST node type and is reached
    through ``node.accept(visitor)``.
    """

    def visit(self, node: A.Node) -> T:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)

    # --- General ---

    @abc.abstractmethod
    def visit_variable(self, node: A.Variable) -> T: ...

    @abc.abstractmethod
    def visit_source_code(self, node: A.SourceCode) -> T: ...

    # --- Expressions ---

    @abc.abstractmethod
    def visit_literal(self, node: A.Literal) -> T: ...

    @abc.abstractmethod
    def visit_bytes_literal(self, node: A.BytesLiteral) -> T: ...

    @abc.abstractmethod
    def visit_boolean_literal(self, node: A.BooleanLiteral) -> T: ...

    @abc.abstractmethod
    def visit_integer_literal(self, node: A.IntegerLiteral) -> T: ...

    @abc.abstractmethod
    def visit_hexadecimal_integer_literal(
        self, node: A.HexadecimalIntegerLiteral
    ) -> T: ...

    @abc.abstractmethod
    def visit_string_literal(self, node: A.StringLiteral) -> T: ...

    @abc.abstractmethod
    def visit_identifier(self, node: A.Identifier) -> T: ...

    @abc.abstractmethod
    def visit_array_lookup(self, node: A.ArrayLookup) -> T: ...

    @abc.abstractmethod
    def visit_address_of(self, node: A.AddressOf) -> T: ...

    @abc.abstractmethod
    def visit_null_pointer(self, node: A.NullPointer) -> T: ...

    # --- Statements ---

    @abc.abstractmethod
    def visit_block(self, node: A.Block) -> T: ...

    @abc.abstractmethod
    def visit_assign(self, node: A.Assign) -> T: ...

    @abc.abstractmethod
    def visit_include(self, node: A.Include) -> T: ...

    @abc.abstractmethod
    def visit_comment_line(self, node: A.CommentLine) -> T: ...

    # --- Types ---

    @abc.abstractmethod
    def visit_array_type(self, node: A.ArrayType) -> T: ...

    @abc.abstractmethod
    def visit_char_type(self, node: A.CharType) -> T: ...

    @abc.abstractmethod
    def visit_pointer_type(self, node: A.PointerType) -> T: ...

    @abc.abstractmethod
    def visit_size_type(self, node: A.SizeType) -> T: ...

    @abc.abstractmethod
    def visit_struct_type(self, node: A.StructType) -> T: ...

    @abc.abstractmethod
    def visit_uint_type(self, node: A.UIntType) -> T: ...
