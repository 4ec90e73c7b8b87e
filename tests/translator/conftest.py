"""
Pytest configuration and shared fixtures for translator tests.

This module contains reflected types and views that are shared across multiple
test modules.
"""

import pytest

from shader2h.config import GeneratorConfig
from shader2h.translator.models import (
    BasicKind,
    ReflectedSymbol,
    ReflectionView,
    SymbolCategory,
    TypeDescriptor,
    array_of,
    matrix,
    scalar,
    struct,
    vector,
)


@pytest.fixture
def config():
    """Fixture providing a configuration without prefixes or overrides."""
    return GeneratorConfig(shader_name="basic")


@pytest.fixture
def globals_type():
    """Fixture providing the Globals block type."""
    return struct(
        "Globals",
        [
            ("viewProj", matrix(4)),
            ("lightDir", vector(BasicKind.FLOAT, 3)),
            ("time", scalar(BasicKind.FLOAT)),
        ],
    )


@pytest.fixture
def light_type():
    """Fixture providing a Light struct type."""
    return struct(
        "Light",
        [
            ("position", vector(BasicKind.FLOAT, 3)),
            ("intensity", scalar(BasicKind.FLOAT)),
        ],
    )


@pytest.fixture
def globals_view(globals_type):
    """Fixture providing a vertex shader view with one uniform block."""
    return ReflectionView(
        uniform_blocks=[
            ReflectedSymbol("Globals", SymbolCategory.UNIFORM_BLOCK, 0, globals_type)
        ],
        pipe_inputs=[
            ReflectedSymbol(
                "inPosition",
                SymbolCategory.PIPE_INPUT,
                0,
                vector(BasicKind.FLOAT, 3),
            )
        ],
        pipe_outputs=[
            ReflectedSymbol(
                "outColor", SymbolCategory.PIPE_OUTPUT, 0, vector(BasicKind.FLOAT, 4)
            )
        ],
        loose_uniforms=[
            ReflectedSymbol(
                "time", SymbolCategory.LOOSE_UNIFORM, 0, scalar(BasicKind.FLOAT)
            ),
            ReflectedSymbol(
                "albedo",
                SymbolCategory.LOOSE_UNIFORM,
                1,
                TypeDescriptor(BasicKind.UNKNOWN),
            ),
        ],
        stages=["vert"],
    )


@pytest.fixture
def particles_view(light_type):
    """Fixture providing a compute shader view with buffer blocks."""
    particle = struct(
        "Particle",
        [
            ("position", vector(BasicKind.FLOAT, 4)),
            ("velocity", vector(BasicKind.FLOAT, 4)),
        ],
    )
    particles = struct(
        "Particles",
        [
            ("count", scalar(BasicKind.UINT)),
            ("items", array_of(particle)),
        ],
    )
    lights = struct("Lights", [("lights", array_of(light_type, 4))])
    return ReflectionView(
        buffer_blocks=[
            ReflectedSymbol("Particles", SymbolCategory.BUFFER_BLOCK, 1, particles),
            ReflectedSymbol("", SymbolCategory.BUFFER_BLOCK, 2, lights),
        ],
        loose_uniforms=[
            ReflectedSymbol(
                "Particles.count",
                SymbolCategory.LOOSE_UNIFORM,
                1,
                scalar(BasicKind.UINT),
            ),
            ReflectedSymbol(
                "lights", SymbolCategory.LOOSE_UNIFORM, 2, array_of(light_type, 4)
            ),
        ],
        stages=["comp"],
    )
