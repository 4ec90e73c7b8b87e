from shader2h.config import GeneratorConfig, ShaderStage
from shader2h.errors import Shader2hError
from shader2h.translator import translate

__version__ = "0.1.0"


__all__ = [
    "GeneratorConfig",
    "Shader2hError",
    "ShaderStage",
    "translate",
]
