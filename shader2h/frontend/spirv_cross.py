"""
Reflection of SPIR-V modules through ``spirv-cross --reflect``.

This module converts the JSON reflection document into a ReflectionView. Only
the information the translator needs is copied out: names, bindings, locations
and type shapes.
"""

import json
import re
import subprocess
from pathlib import Path
from typing import Any

from loguru import logger

from shader2h.errors import ReflectionError, ShaderIOError
from shader2h.translator.models import (
    BasicKind,
    ReflectedSymbol,
    ReflectionView,
    StructMember,
    SymbolCategory,
    TypeDescriptor,
    array_of,
    matrix,
    scalar,
    vector,
)

SPIRV_CROSS_EXE = "spirv-cross"

SCALAR_KINDS: dict[str, BasicKind] = {
    "float": BasicKind.FLOAT,
    "int": BasicKind.INT,
    "uint": BasicKind.UINT,
    "bool": BasicKind.BOOL,
}

VECTOR_PREFIXES: dict[str, BasicKind] = {
    "": BasicKind.FLOAT,
    "i": BasicKind.INT,
    "u": BasicKind.UINT,
    "b": BasicKind.BOOL,
}

VECTOR_PATTERN = re.compile(r"^([iub]?)vec([234])$")
MATRIX_PATTERN = re.compile(r"^mat([234])(?:x([234]))?$")

# Opaque resources that are bound like loose uniforms
LOOSE_UNIFORM_SECTIONS = (
    "textures",
    "separate_images",
    "separate_samplers",
    "images",
    "acceleration_structures",
)

# Push constant blocks have no binding
UNBOUND = -1


def reflect_spirv(
    spirv_path: Path, executable: str = SPIRV_CROSS_EXE
) -> ReflectionView:
    """Run spirv-cross on a SPIR-V module and parse its reflection.

    Raises:
        ReflectionError: If spirv-cross fails or its output cannot be parsed
    """
    try:
        result = subprocess.run(
            [executable, str(spirv_path), "--reflect"],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise ReflectionError(f"Reflection tool not found: {executable}") from e

    if result.returncode != 0:
        raise ReflectionError(
            "Failed to build reflection", (result.stdout + result.stderr).strip()
        )
    return parse_reflection(_decode(result.stdout, str(spirv_path)))


def load_reflection(path: Path) -> ReflectionView:
    """Load a reflection document previously written by spirv-cross."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ShaderIOError("Failed to open file", path) from e
    return parse_reflection(_decode(text, str(path)))


def _decode(text: str, source: str) -> dict[str, Any]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReflectionError(f"Invalid reflection JSON from {source}", str(e)) from e
    if not isinstance(document, dict):
        raise ReflectionError(f"Invalid reflection JSON from {source}")
    return document


def parse_reflection(document: dict[str, Any]) -> ReflectionView:
    """Convert a spirv-cross reflection document into a ReflectionView.

    Args:
        document: Decoded JSON document

    Returns:
        ReflectionView with symbols in reflected order

    Raises:
        ReflectionError: If the document is missing required entries
    """
    parser = _TypeParser(document.get("types", {}))
    view = ReflectionView()

    try:
        view.stages = [entry["mode"] for entry in document.get("entryPoints", [])]

        for entry in document.get("ubos", []):
            view.uniform_blocks.append(
                parser.symbol(entry, SymbolCategory.UNIFORM_BLOCK, "binding")
            )
        for entry in document.get("push_constants", []):
            view.uniform_blocks.append(
                parser.symbol(entry, SymbolCategory.UNIFORM_BLOCK, "binding")
            )
        for entry in document.get("ssbos", []):
            view.buffer_blocks.append(
                parser.symbol(entry, SymbolCategory.BUFFER_BLOCK, "binding")
            )
        for entry in document.get("inputs", []):
            view.pipe_inputs.append(
                parser.symbol(entry, SymbolCategory.PIPE_INPUT, "location")
            )
        for entry in document.get("outputs", []):
            view.pipe_outputs.append(
                parser.symbol(entry, SymbolCategory.PIPE_OUTPUT, "location")
            )
        for section in LOOSE_UNIFORM_SECTIONS:
            for entry in document.get(section, []):
                view.loose_uniforms.append(
                    parser.symbol(entry, SymbolCategory.LOOSE_UNIFORM, "binding")
                )
    except (KeyError, TypeError) as e:
        raise ReflectionError("Malformed reflection document", repr(e)) from e

    logger.debug(
        f"Reflected {len(view.uniform_blocks)} uniform blocks, "
        f"{len(view.buffer_blocks)} buffer blocks, {len(view.pipe_inputs)} inputs, "
        f"{len(view.pipe_outputs)} outputs, {len(view.loose_uniforms)} uniforms"
    )
    return view


class _TypeParser:
    """Builds type descriptors from reflected type names and the type table."""

    def __init__(self, types: dict[str, Any]):
        self.types = types
        self.structs: dict[str, TypeDescriptor] = {}

    def symbol(
        self, entry: dict[str, Any], category: SymbolCategory, slot_key: str
    ) -> ReflectedSymbol:
        return ReflectedSymbol(
            name=entry["name"],
            category=category,
            binding=entry.get(slot_key, UNBOUND),
            type=self.parse(entry),
        )

    def parse(self, entry: dict[str, Any]) -> TypeDescriptor:
        """Parse the type of a symbol or struct member entry."""
        base = self._base_type(entry["type"])

        dimensions = entry.get("array")
        if not dimensions:
            return base

        # Dimensions are listed innermost first; the outermost one is kept
        literal = entry.get("array_size_is_literal") or [True] * len(dimensions)
        if len(dimensions) > 1:
            logger.warning(
                f"Array '{entry['name']}' has {len(dimensions)} dimensions, "
                "only the outermost is kept"
            )
        if not literal[-1]:
            logger.warning(
                f"Array '{entry['name']}' is sized by a specialization constant"
            )
            return TypeDescriptor(BasicKind.UNKNOWN)
        return array_of(base, dimensions[-1] or None)

    def _base_type(self, type_name: str) -> TypeDescriptor:
        if type_name in self.types:
            return self._struct(type_name)
        if type_name in SCALAR_KINDS:
            return scalar(SCALAR_KINDS[type_name])
        if match := VECTOR_PATTERN.match(type_name):
            return vector(VECTOR_PREFIXES[match.group(1)], int(match.group(2)))
        if match := MATRIX_PATTERN.match(type_name):
            cols = int(match.group(1))
            return matrix(cols, int(match.group(2) or cols))
        if type_name.startswith("_"):
            raise ReflectionError(f"Unknown type id {type_name} in reflection")
        return TypeDescriptor(BasicKind.UNKNOWN)

    def _struct(self, type_id: str) -> TypeDescriptor:
        if type_id not in self.structs:
            entry = self.types[type_id]
            members = tuple(
                StructMember(member["name"], self.parse(member))
                for member in entry.get("members", [])
            )
            self.structs[type_id] = TypeDescriptor(
                BasicKind.STRUCT, struct_name=entry["name"], members=members
            )
        return self.structs[type_id]
