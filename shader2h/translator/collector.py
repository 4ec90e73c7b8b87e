"""
Symbol and struct collection for the header translator.

This module walks every reflected symbol once, in a fixed order, to find the
struct types that need a C definition and the defines the header must carry.
"""

from dataclasses import replace

from loguru import logger

from shader2h.translator.models import (
    CollectedSymbols,
    ReflectedSymbol,
    ReflectionView,
    TypeDescriptor,
)


def collect_symbols(view: ReflectionView) -> CollectedSymbols:
    """Collect structs, handled uniform names and defines from a reflection view.

    Symbols are visited as uniform blocks, buffer blocks, pipe inputs, pipe
    outputs and finally loose uniforms. Block members mark their uniform names
    as handled so the same names are not emitted again as loose uniforms.

    Args:
        view: Reflection view of the linked program

    Returns:
        CollectedSymbols with structs in definition order
    """
    collected = CollectedSymbols()

    for block in view.uniform_blocks:
        _collect_block(block, collected, qualify=False)
    for block in view.buffer_blocks:
        # Members of a named buffer block are reflected as "Block.member"
        _collect_block(block, collected, qualify=bool(block.name))

    collected.locations.extend(view.pipe_inputs)
    collected.locations.extend(view.pipe_outputs)

    for uniform in view.loose_uniforms:
        if uniform.name in collected.handled_names:
            logger.debug(f"Skipping uniform {uniform.name}, handled by its block")
            continue
        collected.uniform_bindings.append(uniform)
        if uniform.type.is_struct:
            name = uniform.type.struct_name or uniform.name
            _register_struct(name, uniform.type, collected)

    logger.debug(
        f"Collected {len(collected.structs)} structs: {list(collected.structs)}"
    )
    return collected


def _collect_block(
    block: ReflectedSymbol, collected: CollectedSymbols, qualify: bool
) -> None:
    if not block.name and block.type.struct_name:
        # Nameless blocks define their binding under the block type name
        collected.block_bindings.append(replace(block, name=block.type.struct_name))
    else:
        collected.block_bindings.append(block)

    if not block.type.is_struct:
        logger.debug(f"Block {block.name} is not a struct type, no body emitted")
        return

    for member in block.type.members:
        if qualify:
            collected.handled_names.add(f"{block.name}.{member.name}")
        else:
            collected.handled_names.add(member.name)

    _register_struct(block.name or block.type.struct_name or "", block.type, collected)


def _register_struct(
    name: str, type_desc: TypeDescriptor, collected: CollectedSymbols
) -> None:
    """Register a struct after the structs its members use, once per name."""
    if name in collected.structs:
        return
    for member in type_desc.members:
        if member.type.is_struct and member.type.struct_name:
            _register_struct(member.type.struct_name, member.type, collected)
    collected.structs[name] = type_desc
    logger.debug(f"Registered struct {name} with {len(type_desc.members)} members")
