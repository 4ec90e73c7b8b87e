"""
Size and alignment of reflected types.

Sizes are raw packed sizes: a struct is the plain sum of its members, padding is
only added when its body is laid out. Alignment follows the block packing rules
the generated structs are matched against: scalars align to 4, two and four
component vectors to their size, three component vectors and matrices to 16.
A struct aligns to the sum of its members' alignments.
"""

from shader2h.errors import UnsupportedTypeError
from shader2h.translator.constants import (
    MATRIX_ALIGNMENT,
    SCALAR_ALIGNMENT,
    SCALAR_SIZE,
    VEC3_ALIGNMENT,
)
from shader2h.translator.models import (
    BasicKind,
    Matrix,
    Scalar,
    TypeDescriptor,
    Vector,
)
from shader2h.translator.names import canonical_name


def size_of(type_desc: TypeDescriptor) -> int:
    """Get the packed byte size of a type.

    Unbounded arrays contribute zero bytes since their extent is only known at
    runtime.

    Raises:
        UnsupportedTypeError: If the type or any struct member has an unknown kind
    """
    match type_desc.kind:
        case BasicKind.FLOAT | BasicKind.INT | BasicKind.UINT | BasicKind.BOOL:
            size = SCALAR_SIZE
        case BasicKind.STRUCT:
            size = sum(size_of(member.type) for member in type_desc.members)
        case BasicKind.UNKNOWN:
            raise UnsupportedTypeError(canonical_name(type_desc))

    match type_desc.shape:
        case Scalar():
            pass
        case Vector(size=components):
            size *= components
        case Matrix(cols=cols, rows=rows):
            size *= cols * rows

    if type_desc.array is not None:
        size *= type_desc.array.extent or 0
    return size


def alignment_of(type_desc: TypeDescriptor) -> int:
    """Get the byte boundary a field of this type must start on.

    Arrays align like their element type. A struct without members has an
    alignment of zero.

    Raises:
        UnsupportedTypeError: If the type or any struct member has an unknown kind
    """
    match type_desc.kind:
        case BasicKind.FLOAT | BasicKind.INT | BasicKind.UINT | BasicKind.BOOL:
            alignment = SCALAR_ALIGNMENT
        case BasicKind.STRUCT:
            alignment = sum(alignment_of(member.type) for member in type_desc.members)
        case BasicKind.UNKNOWN:
            raise UnsupportedTypeError(canonical_name(type_desc))

    match type_desc.shape:
        case Scalar():
            return alignment
        case Vector(size=3):
            return VEC3_ALIGNMENT
        case Vector(size=components):
            return alignment * components
        case Matrix():
            return MATRIX_ALIGNMENT
