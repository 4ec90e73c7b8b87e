"""Compile a shader file and reflect it, ready for translation."""

from dataclasses import dataclass, field
from pathlib import Path
from tempfile import TemporaryDirectory

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from shader2h.config import ShaderStage
from shader2h.errors import MissingStageError, ShaderIOError
from shader2h.frontend.glslang import GLSLANG_EXE, compile_to_spirv, read_spirv
from shader2h.frontend.includes import IncludeResolver
from shader2h.frontend.spirv_cross import SPIRV_CROSS_EXE, reflect_spirv
from shader2h.translator.models import ReflectionView

SPIRV_SUFFIX = ".spv"


@dataclass
class CompiledShader:
    """Compiled payload and reflection of one shader stage.

    Attributes:
        payload: SPIR-V module as 32-bit words
        reflection: Reflection view of the linked program
        dependencies: Source files read, root file first
    """

    payload: NDArray[np.uint32]
    reflection: ReflectionView
    dependencies: list[Path] = field(default_factory=list)


def compile_shader(
    input_file: Path,
    stage: ShaderStage,
    include_dirs: list[Path] | None = None,
    glslang: str = GLSLANG_EXE,
    spirv_cross: str = SPIRV_CROSS_EXE,
) -> CompiledShader:
    """Compile a shader file for one stage and reflect the result.

    GLSL sources have their local includes expanded and are compiled with
    glslangValidator. Precompiled ``.spv`` modules skip compilation.

    Args:
        input_file: GLSL source or SPIR-V module
        stage: Stage to compile and translate
        include_dirs: Extra include search directories
        glslang: glslangValidator executable
        spirv_cross: spirv-cross executable

    Returns:
        CompiledShader for the requested stage

    Raises:
        ShaderIOError: If the input or an include cannot be read
        FrontEndError: If the source fails to compile
        ReflectionError: If reflection cannot be built
        MissingStageError: If the module has no code for the stage
    """
    if not input_file.is_file():
        raise ShaderIOError("Failed to open file", input_file)

    if input_file.suffix == SPIRV_SUFFIX:
        logger.info(f"Reading precompiled SPIR-V from {input_file}")
        payload = read_spirv(input_file)
        reflection = reflect_spirv(input_file, spirv_cross)
        dependencies = [input_file]
    else:
        resolver = IncludeResolver(input_file, list(include_dirs or []))
        source = resolver.expand()
        logger.info(f"Compiling {input_file} as {stage.name.lower()} shader")
        payload = compile_to_spirv(source, stage, str(input_file), glslang)
        with TemporaryDirectory() as temp_dir:
            spirv_path = Path(temp_dir) / f"{input_file.name}{SPIRV_SUFFIX}"
            payload.astype("<u4").tofile(spirv_path)
            reflection = reflect_spirv(spirv_path, spirv_cross)
        dependencies = list(resolver.visited)

    if stage.execution_model not in reflection.stages:
        raise MissingStageError(stage.value, reflection.stages)

    logger.info(f"Compiled {input_file}: {len(payload)} words")
    return CompiledShader(payload, reflection, dependencies)
