"""
Data models for the reflection-to-header translator.

This module contains the descriptors the translator works on: the recursive
representation of a reflected shader type, the named symbols a linked program
exposes, and the result of collecting structs and bindings from them.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto


class BasicKind(Enum):
    """Basic kind of a reflected type."""

    FLOAT = auto()
    INT = auto()
    UINT = auto()
    BOOL = auto()
    STRUCT = auto()
    UNKNOWN = auto()


# Shapes


@dataclass(frozen=True)
class Scalar:
    """A single component."""


@dataclass(frozen=True)
class Vector:
    """A vector of 2 to 4 components."""

    size: int

    def __post_init__(self) -> None:
        if not 2 <= self.size <= 4:
            raise ValueError(f"Vector size must be between 2 and 4, got {self.size}")


@dataclass(frozen=True)
class Matrix:
    """A column-major matrix."""

    cols: int
    rows: int

    def __post_init__(self) -> None:
        if not (2 <= self.cols <= 4 and 2 <= self.rows <= 4):
            raise ValueError(
                "Matrix dimensions must be between 2 and 4, "
                f"got {self.cols}x{self.rows}"
            )


Shape = Scalar | Vector | Matrix

SCALAR = Scalar()


@dataclass(frozen=True)
class ArrayInfo:
    """Array dimension of a type.

    Attributes:
        extent: Number of elements, or None for an unbounded (runtime) array
    """

    extent: int | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.extent is None

    def __str__(self) -> str:
        if self.extent is None:
            return "[]"
        return f"[{self.extent}]"


@dataclass(frozen=True)
class StructMember:
    """Named member of a struct type."""

    name: str
    type: "TypeDescriptor"


@dataclass(frozen=True)
class TypeDescriptor:
    """Recursive representation of one reflected type.

    Attributes:
        kind: Basic kind of the type
        shape: Scalar, vector or matrix shape
        array: Array dimension, if the type is an array
        struct_name: Shader-level type name, present only for structs
        members: Ordered struct members, present only for structs
    """

    kind: BasicKind
    shape: Shape = SCALAR
    array: ArrayInfo | None = None
    struct_name: str | None = None
    members: tuple[StructMember, ...] = ()

    def __post_init__(self) -> None:
        if self.kind == BasicKind.STRUCT:
            if not self.struct_name:
                raise ValueError("Struct types require a struct name")
            if self.shape != SCALAR:
                raise ValueError(f"Struct '{self.struct_name}' cannot have a shape")
        elif self.struct_name is not None or self.members:
            raise ValueError(f"Only struct types carry a name and members: {self.kind}")

    @property
    def is_struct(self) -> bool:
        return self.kind == BasicKind.STRUCT

    @property
    def is_unbounded_array(self) -> bool:
        return self.array is not None and self.array.is_unbounded


def scalar(kind: BasicKind) -> TypeDescriptor:
    """Create a scalar type descriptor."""
    return TypeDescriptor(kind)


def vector(kind: BasicKind, size: int) -> TypeDescriptor:
    """Create a vector type descriptor."""
    return TypeDescriptor(kind, Vector(size))


def matrix(cols: int, rows: int | None = None) -> TypeDescriptor:
    """Create a float matrix type descriptor (square when rows is omitted)."""
    return TypeDescriptor(BasicKind.FLOAT, Matrix(cols, rows or cols))


def struct(name: str, members: list[tuple[str, TypeDescriptor]]) -> TypeDescriptor:
    """Create a struct type descriptor from (field name, type) pairs."""
    return TypeDescriptor(
        BasicKind.STRUCT,
        struct_name=name,
        members=tuple(StructMember(n, t) for n, t in members),
    )


def array_of(element: TypeDescriptor, extent: int | None = None) -> TypeDescriptor:
    """Wrap a type descriptor in an array (unbounded when extent is None)."""
    return TypeDescriptor(
        element.kind,
        element.shape,
        ArrayInfo(extent),
        element.struct_name,
        element.members,
    )


# Reflected symbols


class SymbolCategory(Enum):
    """Category of a named entity exposed by reflection."""

    UNIFORM_BLOCK = auto()
    BUFFER_BLOCK = auto()
    PIPE_INPUT = auto()
    PIPE_OUTPUT = auto()
    LOOSE_UNIFORM = auto()


@dataclass(frozen=True)
class ReflectedSymbol:
    """A named, bound or located entity of a linked program.

    Attributes:
        name: Reflected name (block name, variable name)
        category: What kind of entity this is
        binding: Binding number for blocks and uniforms, location for pipe I/O
        type: Type of the entity
    """

    name: str
    category: SymbolCategory
    binding: int
    type: TypeDescriptor


@dataclass
class ReflectionView:
    """Read-only view of a linked program's reflection data.

    Attributes:
        uniform_blocks: Uniform blocks in reflected order
        buffer_blocks: Buffer (storage) blocks in reflected order
        pipe_inputs: Stage inputs in reflected order
        pipe_outputs: Stage outputs in reflected order
        loose_uniforms: Uniform variables not grouped into a block
        stages: Stages the program has compiled code for
    """

    uniform_blocks: list[ReflectedSymbol] = field(default_factory=list)
    buffer_blocks: list[ReflectedSymbol] = field(default_factory=list)
    pipe_inputs: list[ReflectedSymbol] = field(default_factory=list)
    pipe_outputs: list[ReflectedSymbol] = field(default_factory=list)
    loose_uniforms: list[ReflectedSymbol] = field(default_factory=list)
    stages: list[str] = field(default_factory=list)

    def symbols(self) -> Iterator[ReflectedSymbol]:
        """Iterate over all symbols in collection order."""
        yield from self.uniform_blocks
        yield from self.buffer_blocks
        yield from self.pipe_inputs
        yield from self.pipe_outputs
        yield from self.loose_uniforms


@dataclass
class CollectedSymbols:
    """Structs and defines gathered from a reflection view.

    Attributes:
        structs: Struct types keyed by name, in insertion order
        handled_names: Uniform names already covered by an emitted block
        block_bindings: Uniform and buffer blocks that get a binding define
        locations: Pipe inputs and outputs that get a location define
        uniform_bindings: Loose uniforms that get a binding define
    """

    structs: dict[str, TypeDescriptor] = field(default_factory=dict)
    handled_names: set[str] = field(default_factory=set)
    block_bindings: list[ReflectedSymbol] = field(default_factory=list)
    locations: list[ReflectedSymbol] = field(default_factory=list)
    uniform_bindings: list[ReflectedSymbol] = field(default_factory=list)
