"""Compilation of GLSL source to SPIR-V through glslangValidator."""

import subprocess
from pathlib import Path
from tempfile import TemporaryDirectory

import numpy as np
from numpy.typing import NDArray

from shader2h.config import ShaderStage
from shader2h.errors import FrontEndError, ShaderIOError

GLSLANG_EXE = "glslangValidator"
# Vulkan 1.2 client, which targets SPIR-V 1.5
TARGET_ENV = "vulkan1.2"
SPIRV_MAGIC = 0x07230203


def compile_to_spirv(
    source: str,
    stage: ShaderStage,
    source_name: str,
    executable: str = GLSLANG_EXE,
) -> NDArray[np.uint32]:
    """Compile preprocessed GLSL source into SPIR-V words.

    Args:
        source: Shader source with includes already expanded
        stage: Stage to compile the source as
        source_name: Name used in error messages
        executable: glslangValidator executable

    Returns:
        SPIR-V module as 32-bit words

    Raises:
        FrontEndError: If the source fails to parse or link; the compiler
            output is kept unchanged in the error
    """
    with TemporaryDirectory() as temp_dir:
        output = Path(temp_dir) / f"{stage.value}.spv"
        cmd = [
            executable,
            "-V",
            "--target-env",
            TARGET_ENV,
            "-S",
            stage.value,
            "--stdin",
            "-o",
            str(output),
        ]
        try:
            result = subprocess.run(
                cmd, input=source, capture_output=True, text=True, check=False
            )
        except FileNotFoundError as e:
            raise FrontEndError(f"Shader compiler not found: {executable}") from e

        if result.returncode != 0:
            raise FrontEndError(
                f"Failed to compile {source_name}", result.stdout + result.stderr
            )
        return read_spirv(output)


def read_spirv(path: Path) -> NDArray[np.uint32]:
    """Read a SPIR-V module from disk as little-endian 32-bit words.

    Raises:
        ShaderIOError: If the file cannot be read or is not a SPIR-V module
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ShaderIOError("Failed to open file", path) from e

    if len(data) % 4 != 0 or len(data) < 4:
        raise ShaderIOError("Not a SPIR-V module", path)
    words = np.frombuffer(data, dtype="<u4").astype(np.uint32)
    if words[0] != SPIRV_MAGIC:
        raise ShaderIOError("Not a SPIR-V module", path)
    return words
