"""Type name resolution: shader-level names and C field declarations."""

from shader2h.config import GeneratorConfig
from shader2h.errors import UnsupportedTypeError
from shader2h.translator.constants import (
    C_SCALAR_TYPES,
    SHADER_SCALAR_NAMES,
    UNKNOWN_TYPE_NAME,
)
from shader2h.translator.models import (
    BasicKind,
    Matrix,
    Scalar,
    TypeDescriptor,
    Vector,
)


def canonical_name(type_desc: TypeDescriptor) -> str:
    """Get the shader-level name of a type, used for custom override lookups.

    Scalars keep their own name, float vectors and matrices become ``vecN`` and
    ``matN``/``matCxR``, other vectors append the size to the scalar name
    (``int3``). Arrays append ``[N]`` or ``[]``. Unknown kinds resolve to
    ``"unknown"``, which callers must reject.

    Args:
        type_desc: Type to name

    Returns:
        Canonical name such as ``vec3``, ``mat3x4``, ``uint[8]`` or ``Light[4]``
    """
    match type_desc.kind:
        case BasicKind.STRUCT:
            name = type_desc.struct_name or ""
        case BasicKind.FLOAT | BasicKind.INT | BasicKind.UINT | BasicKind.BOOL:
            name = _shaped_name(type_desc)
        case BasicKind.UNKNOWN:
            return UNKNOWN_TYPE_NAME

    if type_desc.array is not None:
        name += str(type_desc.array)
    return name


def _shaped_name(type_desc: TypeDescriptor) -> str:
    base = SHADER_SCALAR_NAMES[type_desc.kind]
    match type_desc.shape:
        case Scalar():
            return base
        case Vector(size=size):
            if base == "float":
                base = "vec"
            return f"{base}{size}"
        case Matrix(cols=cols, rows=rows):
            if base == "float":
                base = "mat"
            if cols == rows:
                return f"{base}{cols}"
            return f"{base}{cols}x{rows}"


def field_declaration(
    type_desc: TypeDescriptor, field_name: str, config: GeneratorConfig
) -> str:
    """Build the C declaration of a struct field, without the trailing semicolon.

    A custom override for the canonical name is used verbatim. Otherwise vectors
    become ``T name[N]``, matrices ``T name[C][R]`` and arrays put their extent on
    the field name ahead of the shape dimensions.

    Args:
        type_desc: Type of the field
        field_name: Name of the field
        config: Generator configuration with prefixes and overrides

    Returns:
        Declaration such as ``float color[3]`` or ``uint32_t ids[]``

    Raises:
        UnsupportedTypeError: If the type has an unknown basic kind
    """
    type_name = canonical_name(type_desc)
    if type_desc.kind == BasicKind.UNKNOWN:
        raise UnsupportedTypeError(type_name, field_name)

    override = config.custom_type_overrides.get(type_name)
    if override is not None:
        return f"{override} {field_name}"

    match type_desc.kind:
        case BasicKind.STRUCT:
            c_type = f"{config.struct_prefix}{type_desc.struct_name}"
        case BasicKind.FLOAT | BasicKind.INT | BasicKind.UINT | BasicKind.BOOL:
            c_type = C_SCALAR_TYPES[type_desc.kind]
        case BasicKind.UNKNOWN:
            raise UnsupportedTypeError(type_name, field_name)

    declarator = field_name
    if type_desc.array is not None:
        declarator += str(type_desc.array)
    match type_desc.shape:
        case Vector(size=size):
            declarator += f"[{size}]"
        case Matrix(cols=cols, rows=rows):
            declarator += f"[{cols}][{rows}]"

    return f"{c_type} {declarator}"
