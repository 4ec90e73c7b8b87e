"""Shared fixtures for frontend tests."""

import pytest


@pytest.fixture
def reflection_document():
    """Fixture providing a spirv-cross reflection document of a vertex shader."""
    return {
        "entryPoints": [{"name": "main", "mode": "vert"}],
        "types": {
            "_12": {
                "name": "Light",
                "members": [
                    {"name": "position", "type": "vec3", "offset": 0},
                    {"name": "intensity", "type": "float", "offset": 12},
                ],
            },
            "_15": {
                "name": "Globals",
                "members": [
                    {
                        "name": "viewProj",
                        "type": "mat4",
                        "offset": 0,
                        "matrix_stride": 16,
                    },
                    {
                        "name": "lights",
                        "type": "_12",
                        "array": [4],
                        "array_size_is_literal": [True],
                        "offset": 64,
                        "array_stride": 16,
                    },
                    {"name": "flags", "type": "uvec2", "offset": 128},
                    {"name": "normalMatrix", "type": "mat3x4", "offset": 144},
                ],
            },
            "_20": {
                "name": "Instances",
                "members": [
                    {"name": "count", "type": "uint", "offset": 0},
                    {
                        "name": "transforms",
                        "type": "mat4",
                        "array": [0],
                        "array_size_is_literal": [True],
                        "offset": 16,
                    },
                ],
            },
            "_25": {
                "name": "Push",
                "members": [{"name": "index", "type": "int", "offset": 0}],
            },
        },
        "inputs": [
            {"type": "vec3", "name": "inPosition", "location": 0},
            {"type": "vec2", "name": "inUV", "location": 1},
        ],
        "outputs": [{"type": "vec2", "name": "outUV", "location": 0}],
        "textures": [
            {"type": "sampler2D", "name": "albedo", "set": 0, "binding": 2}
        ],
        "ubos": [
            {
                "type": "_15",
                "name": "Globals",
                "block_size": 192,
                "set": 0,
                "binding": 0,
            }
        ],
        "ssbos": [
            {
                "type": "_20",
                "name": "Instances",
                "block_size": 16,
                "set": 0,
                "binding": 1,
            }
        ],
        "push_constants": [
            {"type": "_25", "name": "Push", "push_constant": True}
        ],
    }
