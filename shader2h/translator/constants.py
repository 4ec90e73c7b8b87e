"""Constants used by the header translator."""

from shader2h.translator.models import BasicKind

# Fixed text around the generated declarations
HEADER_PRELUDE = """#pragma once
#include <stddef.h>
#include <stdint.h>

#ifdef __cplusplus
extern "C" {
#endif
"""

HEADER_POSTLUDE = """#ifdef __cplusplus
}
#endif
"""

# Define prefixes: bindings share one namespace, locations another
BINDING_PREFIX = "SLOT"
LOCATION_PREFIX = "ATTR"

WORDS_PER_LINE = 8
INDENT = "    "

# Shader-level names of the scalar kinds
SHADER_SCALAR_NAMES: dict[BasicKind, str] = {
    BasicKind.FLOAT: "float",
    BasicKind.INT: "int",
    BasicKind.UINT: "uint",
    BasicKind.BOOL: "bool",
}

# C field types of the scalar kinds; shader booleans occupy 4 bytes
C_SCALAR_TYPES: dict[BasicKind, str] = {
    BasicKind.FLOAT: "float",
    BasicKind.INT: "int32_t",
    BasicKind.UINT: "uint32_t",
    BasicKind.BOOL: "uint32_t",
}

SCALAR_SIZE = 4
SCALAR_ALIGNMENT = 4
VEC3_ALIGNMENT = 16
MATRIX_ALIGNMENT = 16

UNKNOWN_TYPE_NAME = "unknown"
