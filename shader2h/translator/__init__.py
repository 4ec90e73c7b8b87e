"""Reflection-to-header translator.

Turns the reflection view of a linked shader program and its compiled payload
into a self-contained C header with binding defines and layout-matching structs.
"""

from collections.abc import Sequence

from loguru import logger

from shader2h.config import GeneratorConfig
from shader2h.errors import MissingStageError
from shader2h.translator.emitter import HeaderEmitter
from shader2h.translator.models import ReflectionView


def translate(
    view: ReflectionView,
    payload: Sequence[int],
    config: GeneratorConfig,
    stage: str | None = None,
) -> str:
    """Translate a reflection view and payload into header text.

    Args:
        view: Reflection view of the linked program
        payload: Compiled instruction stream as 32-bit words
        config: Generator configuration
        stage: Requested stage, only used to report a missing payload

    Returns:
        Complete header text

    Raises:
        MissingStageError: If the payload is empty
        UnsupportedTypeError: If a struct uses a type that cannot be laid out
    """
    if len(payload) == 0:
        raise MissingStageError(stage or "requested", view.stages)

    logger.info(f"Translating reflection of {config.shader_name}")
    return HeaderEmitter(config).emit(view, payload)


__all__ = ["translate", "HeaderEmitter"]
