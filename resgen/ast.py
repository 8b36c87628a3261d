"""resgen/ast.py – AST of the C++ constructs emitted by the resource compiler.

The resource compiler never writes text directly.  It builds a small tree
of C++ declarations, literals, statements and types, and a separate
visitor (``resgen.printer.PrettyPrinter``) renders that tree.

Design invariants
-----------------
* Every node except ``SourceCode`` and ``Block`` is a frozen dataclass.
* Nodes that carry children use tuples, never lists.
* ``SourceCode`` and ``Block`` are append-only while the compiler runs
  and read-only while the printer runs.
* Nodes have no behaviour beyond ``accept``, which routes to exactly one
  ``visit_<variant>`` method of the visitor (double dispatch).

Module layout
-------------
§1  Node roots
§2  Types
§3  Expressions
§4  Declarations & statements
§5  Containers
§6  Type registry & literal helpers
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Tuple,
    TypeVar,
    Union,
    overload,
)

if TYPE_CHECKING:
    from resgen.visitor import ASTVisitor

__all__ = [
    "Node",
    "Expression",
    "Statement",
    "Type",
    "ArrayType",
    "CharType",
    "PointerType",
    "SizeType",
    "StructType",
    "UIntType",
    "Literal",
    "BytesLiteral",
    "BooleanLiteral",
    "IntegerLiteral",
    "HexadecimalIntegerLiteral",
    "StringLiteral",
    "Identifier",
    "ArrayLookup",
    "AddressOf",
    "NullPointer",
    "NULL_POINTER",
    "Variable",
    "Assign",
    "Include",
    "CommentLine",
    "SourceCode",
    "Block",
    "TypeRegistry",
    "literal_of",
    "hex_literal",
]

T = TypeVar("T")


# ════════════════════════════════════════════════════════════════════════
# §1  Node roots
# ════════════════════════════════════════════════════════════════════════


class Node:
    """Root of the AST class hierarchy."""

    __slots__ = ()

    def accept(self, visitor: ASTVisitor[T]) -> T:
        raise NotImplementedError(
            f"{type(self).__name__} does not implement accept()"
        )

    def __str__(self) -> str:
        from resgen.printer import render

        return render(self)


class Expression(Node):
    """A node that produces a value."""

    __slots__ = ()


class Statement(Node):
    """A node that may appear at the top level of a ``SourceCode``."""

    __slots__ = ()


class Type(Node):
    """A C++ type."""

    __slots__ = ()


# ════════════════════════════════════════════════════════════════════════
# §2  Types
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ArrayType(Type):
    """``T[]``; the ``[]`` suffix is printed after the variable name."""

    element_type: Type

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_array_type(self)


@dataclass(frozen=True, slots=True)
class CharType(Type):
    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_char_type(self)


@dataclass(frozen=True, slots=True)
class PointerType(Type):
    pointee_type: Type

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_pointer_type(self)


@dataclass(frozen=True, slots=True)
class SizeType(Type):
    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_size_type(self)


@dataclass(frozen=True, slots=True)
class StructType(Type):
    """A named aggregate type declared by the host project's headers."""

    name: str

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_struct_type(self)


@dataclass(frozen=True, slots=True)
class UIntType(Type):
    """``uint<num_bits>_t``."""

    num_bits: int

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_uint_type(self)


# ════════════════════════════════════════════════════════════════════════
# §3  Expressions
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Literal(Expression):
    """A brace-enclosed initializer list.

    Used for both array and struct literals: ``{ a, b, c }``.
    """

    contents: Tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.contents, tuple):
            object.__setattr__(self, "contents", tuple(self.contents))

    def __len__(self) -> int:
        return len(self.contents)

    def __iter__(self) -> Iterator[Expression]:
        return iter(self.contents)

    @overload
    def __getitem__(self, index: int) -> Expression: ...
    @overload
    def __getitem__(self, index: slice) -> Tuple[Expression, ...]: ...

    def __getitem__(self, index):
        return self.contents[index]

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_literal(self)


@dataclass(frozen=True, slots=True)
class BytesLiteral(Literal):
    """A ``Literal`` of byte values, printed 16 elements per line."""

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_bytes_literal(self)


@dataclass(frozen=True, slots=True)
class BooleanLiteral(Expression):
    value: bool

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_boolean_literal(self)


@dataclass(frozen=True, slots=True)
class IntegerLiteral(Expression):
    value: int

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_integer_literal(self)


@dataclass(frozen=True, slots=True)
class HexadecimalIntegerLiteral(IntegerLiteral):
    """An integer printed in hex with ``width // 4`` zero-padded digits."""

    width: int = 8

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_hexadecimal_integer_literal(self)


@dataclass(frozen=True, slots=True)
class StringLiteral(Expression):
    content: str

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_string_literal(self)


@dataclass(frozen=True, slots=True)
class Identifier(Expression):
    name: str

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_identifier(self)


@dataclass(frozen=True, slots=True)
class ArrayLookup(Expression):
    """``array[index]``."""

    array: Expression
    index: Expression

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_array_lookup(self)


@dataclass(frozen=True, slots=True)
class AddressOf(Expression):
    """``&expression``."""

    expression: Expression

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_address_of(self)


@dataclass(frozen=True, slots=True)
class NullPointer(Expression):
    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_null_pointer(self)


#: The one ``nullptr`` expression.
NULL_POINTER = NullPointer()


# ════════════════════════════════════════════════════════════════════════
# §4  Declarations & statements
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Variable(Node):
    """A variable declaration: storage flags, type and identifier."""

    type: Type
    identifier: Identifier
    is_static: bool = False
    is_constant: bool = False

    @classmethod
    def named(cls, type: Type, name: str) -> Variable:
        return cls(type, Identifier(name))

    def make_static(self) -> Variable:
        return dataclasses.replace(self, is_static=True)

    def make_constant(self) -> Variable:
        return dataclasses.replace(self, is_constant=True)

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_variable(self)


@dataclass(frozen=True, slots=True)
class Assign(Statement):
    """``<variable> = <value>;``"""

    variable: Variable
    value: Expression

    @classmethod
    def declare(cls, type: Type, name: str, value: Expression) -> Assign:
        return cls(Variable.named(type, name), value)

    @classmethod
    def static(cls, type: Type, name: str, value: Expression) -> Assign:
        return cls(Variable.named(type, name).make_static(), value)

    @classmethod
    def const(cls, type: Type, name: str, value: Expression) -> Assign:
        return cls(Variable.named(type, name).make_constant(), value)

    @classmethod
    def static_const(cls, type: Type, name: str, value: Expression) -> Assign:
        variable = Variable.named(type, name).make_static().make_constant()
        return cls(variable, value)

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_assign(self)


@dataclass(frozen=True, slots=True)
class Include(Statement):
    """``#include "<header>"``"""

    header: str

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_include(self)


@dataclass(frozen=True, slots=True)
class CommentLine(Statement):
    """``// <content>``"""

    content: str

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_comment_line(self)


# ════════════════════════════════════════════════════════════════════════
# §5  Containers
# ════════════════════════════════════════════════════════════════════════


class _StatementSequence(Statement):
    """Append-only ordered statements shared by ``SourceCode`` and ``Block``."""

    __slots__ = ()

    statements: List[Statement]

    def append(self, statement: Statement) -> None:
        self.statements.append(statement)

    def extend(self, statements: Iterable[Statement]) -> None:
        self.statements.extend(statements)

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.statements)

    def __getitem__(self, index: int) -> Statement:
        return self.statements[index]


@dataclass(eq=False, slots=True)
class SourceCode(_StatementSequence):
    """The root of a generated translation unit."""

    statements: List[Statement] = field(default_factory=list)

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_source_code(self)


@dataclass(eq=False, slots=True)
class Block(_StatementSequence):
    statements: List[Statement] = field(default_factory=list)

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_block(self)


# ════════════════════════════════════════════════════════════════════════
# §6  Type registry & literal helpers
# ════════════════════════════════════════════════════════════════════════


class TypeRegistry:
    """Mints and memoizes the struct types used by one compilation.

    The compiler receives a registry by reference instead of consulting
    a process-wide cache, so two compilations never share state.
    """

    def __init__(self) -> None:
        self._structs: Dict[str, StructType] = {}
        self.uint8 = UIntType(8)
        self.uint32 = UIntType(32)
        self.size = SizeType()
        self.char = CharType()
        self.string = PointerType(self.char)
        self.string_array = ArrayType(self.string)
        self.bytes = ArrayType(self.uint8)

    def struct(self, name: str) -> StructType:
        try:
            return self._structs[name]
        except KeyError:
            struct_type = self._structs[name] = StructType(name)
            return struct_type

    def struct_array(self, name: str) -> ArrayType:
        return ArrayType(self.struct(name))

    def uint_array(self, num_bits: int) -> ArrayType:
        return ArrayType(UIntType(num_bits))

    def __contains__(self, name: object) -> bool:
        return name in self._structs

    def __len__(self) -> int:
        return len(self._structs)


def hex_literal(value: int, width: int = 8) -> HexadecimalIntegerLiteral:
    return HexadecimalIntegerLiteral(value, width)


def literal_of(value: Union[bool, int, str, bytes, bytearray, Any]) -> Expression:
    """Convert a plain Python value to the matching literal node.

    ``bool`` → ``BooleanLiteral``, ``int`` → ``IntegerLiteral``,
    ``str`` → ``StringLiteral``, ``bytes`` → ``BytesLiteral`` of 8-bit
    hex literals.  Nodes are returned unchanged.
    """
    if isinstance(value, Expression):
        return value
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return BooleanLiteral(value)
    if isinstance(value, int):
        return IntegerLiteral(value)
    if isinstance(value, str):
        return StringLiteral(value)
    if isinstance(value, (bytes, bytearray)):
        return BytesLiteral(tuple(HexadecimalIntegerLiteral(b) for b in value))
    raise TypeError(f"no literal form for {type(value).__name__}")
