"""Generator configuration and the helpers the CLI uses to assemble it."""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from loguru import logger


class ShaderStage(Enum):
    """Shader pipeline stage, valued by its glslang stage name."""

    VERTEX = "vert"
    FRAGMENT = "frag"
    COMPUTE = "comp"

    @property
    def execution_model(self) -> str:
        """Stage name as listed in SPIR-V reflection entry points."""
        return self.value

    @classmethod
    def parse(cls, name: str) -> "ShaderStage":
        """Parse a stage name such as "vert" or "vertex"."""
        aliases = {
            "vert": cls.VERTEX,
            "vertex": cls.VERTEX,
            "frag": cls.FRAGMENT,
            "fragment": cls.FRAGMENT,
            "comp": cls.COMPUTE,
            "compute": cls.COMPUTE,
        }
        try:
            return aliases[name.lower()]
        except KeyError:
            raise ValueError(f"Unknown stage {name}") from None

    @classmethod
    def guess(cls, file_name: str) -> "ShaderStage":
        """Guess the stage from a file name, defaulting to vertex."""
        for stage in cls:
            if f".{stage.value}" in file_name:
                return stage
        logger.warning(f"Cannot guess stage of {file_name}, assuming vertex shader")
        return cls.VERTEX


@dataclass(frozen=True)
class GeneratorConfig:
    """Immutable configuration consumed by the translator.

    Attributes:
        shader_name: Identifier embedded in every define and struct name
        struct_prefix: Prefix for generated struct type names
        global_prefix: Prefix for the payload, size and name constants
        custom_type_overrides: Canonical shader type name -> C field type
        extra_prelude: Text inserted verbatim after the fixed prelude
    """

    shader_name: str
    struct_prefix: str = ""
    global_prefix: str = ""
    custom_type_overrides: dict[str, str] = field(default_factory=dict)
    extra_prelude: str = ""


def derive_shader_name(input_file: str | Path) -> str:
    """Derive a C identifier from a shader file name.

    Examples:
        >>> derive_shader_name("shaders/basic.vert")
        'basic_vert'
    """
    name = re.sub(r"\W", "_", Path(input_file).name, flags=re.ASCII)
    if name[:1].isdigit():
        name = f"_{name}"
    return name


def default_output_path(input_file: str | Path) -> Path:
    """Header path for an input: its base name minus the last suffix, plus ".h".

    The header lands in the current directory, not next to the input.
    """
    return Path(Path(input_file).stem + ".h")


def parse_type_map(entries: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` custom type mappings; later entries win."""
    overrides: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid type map {entry}")
        overrides[key] = value
    return overrides
