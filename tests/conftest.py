"""Fixtures and configuration for pytest."""

import shutil

import pytest

REQUIRED_TOOLS = ("glslangValidator", "spirv-cross")


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "tools: mark test as requiring glslangValidator and spirv-cross"
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip tests that need the shader tools when they are not installed."""
    missing = [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]
    if not missing:
        return
    skip_tools = pytest.mark.skip(reason=f"missing tools: {', '.join(missing)}")
    for item in items:
        if "tools" in item.keywords:
            item.add_marker(skip_tools)
