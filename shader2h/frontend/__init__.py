"""Adapters to the shader compiler and the reflection tool."""

from shader2h.frontend.includes import IncludeResolver, expand_includes
from shader2h.frontend.pipeline import CompiledShader, compile_shader
from shader2h.frontend.spirv_cross import load_reflection, parse_reflection

__all__ = [
    "CompiledShader",
    "IncludeResolver",
    "compile_shader",
    "expand_includes",
    "load_reflection",
    "parse_reflection",
]
