"""Header emitter that assembles the generated C header text."""

from collections.abc import Sequence

from loguru import logger

from shader2h.config import GeneratorConfig
from shader2h.translator.collector import collect_symbols
from shader2h.translator.constants import (
    BINDING_PREFIX,
    HEADER_POSTLUDE,
    HEADER_PRELUDE,
    INDENT,
    LOCATION_PREFIX,
    WORDS_PER_LINE,
)
from shader2h.translator.models import ReflectedSymbol, ReflectionView
from shader2h.translator.structs import StructLayout, build_layout


class HeaderEmitter:
    """Generates a C header from a reflection view and a compiled payload."""

    def __init__(self, config: GeneratorConfig):
        self.config = config

    def emit(self, view: ReflectionView, payload: Sequence[int]) -> str:
        """Generate the complete header text.

        Every struct is laid out before any text is produced, so an unsupported
        type fails the whole header instead of leaving a broken struct behind.
        """
        collected = collect_symbols(view)
        layouts = [
            build_layout(name, type_desc, self.config)
            for name, type_desc in collected.structs.items()
        ]

        lines: list[str] = [HEADER_PRELUDE.rstrip("\n")]

        if self.config.extra_prelude:
            lines.append(self.config.extra_prelude.rstrip("\n"))

        lines.extend(self._emit_payload(payload))

        # Binding defines for blocks, location defines for stage I/O
        for symbol in collected.block_bindings:
            lines.append(self._emit_define(BINDING_PREFIX, symbol))
        for symbol in collected.locations:
            lines.append(self._emit_define(LOCATION_PREFIX, symbol))
        for symbol in collected.uniform_bindings:
            lines.append(self._emit_define(BINDING_PREFIX, symbol))

        # Forward declarations first so bodies may name any struct
        for layout in layouts:
            lines.append(self._emit_forward_declaration(layout.name))
        for layout in layouts:
            lines.extend(self._emit_struct(layout))

        lines.append(HEADER_POSTLUDE.rstrip("\n"))

        logger.debug(
            f"Emitted header for {self.config.shader_name}: {len(payload)} words, "
            f"{len(layouts)} structs"
        )
        return "\n".join(lines) + "\n"

    def _emit_payload(self, payload: Sequence[int]) -> list[str]:
        prefix = f"{self.config.global_prefix}{self.config.shader_name}"
        words = [str(int(word)) for word in payload]
        rows = [
            INDENT + ",".join(words[i : i + WORDS_PER_LINE])
            for i in range(0, len(words), WORDS_PER_LINE)
        ]
        return [
            f"static const uint32_t {prefix}_spv[] = {{",
            ",\n".join(rows),
            "};",
            f"static const size_t {prefix}_spv_size = {len(words)};",
            f'static const char* {prefix}_name = "{self.config.shader_name}";',
        ]

    def _emit_define(self, category_prefix: str, symbol: ReflectedSymbol) -> str:
        name = f"{category_prefix}_{self.config.shader_name}_{symbol.name}"
        return f"#define {name} {symbol.binding}"

    def _struct_tag(self, name: str) -> str:
        return f"{self.config.struct_prefix}{self.config.shader_name}_{name}"

    def _emit_forward_declaration(self, name: str) -> str:
        alias = f"{self.config.struct_prefix}{name}"
        return f"typedef struct {self._struct_tag(name)} {alias};"

    def _emit_struct(self, layout: StructLayout) -> list[str]:
        tag = self._struct_tag(layout.name)
        lines = [f"/// Struct for {layout.name}", f"typedef struct {tag} {{"]
        for declaration in layout.declarations():
            lines.append(f"{INDENT}{declaration};")
        lines.append(f"}} {tag};")
        return lines
