"""Struct layout: field declarations interleaved with explicit padding."""

from dataclasses import dataclass, field

from loguru import logger

from shader2h.config import GeneratorConfig
from shader2h.errors import UnsupportedTypeError
from shader2h.translator.layout import alignment_of, size_of
from shader2h.translator.models import TypeDescriptor
from shader2h.translator.names import field_declaration


@dataclass
class PaddingEntry:
    """Explicit padding bytes inserted into a struct body."""

    name: str
    size: int
    offset: int

    @property
    def declaration(self) -> str:
        return f"uint8_t {self.name}[{self.size}]"


@dataclass
class FieldEntry:
    """A struct member placed at its offset."""

    name: str
    declaration: str
    offset: int
    size: int
    alignment: int


LayoutEntry = PaddingEntry | FieldEntry


@dataclass
class StructLayout:
    """Laid out body of one struct.

    Attributes:
        name: Struct name
        entries: Fields and padding in declaration order
        size: Byte size including inserted padding
        alignment: Largest member alignment
    """

    name: str
    entries: list[LayoutEntry] = field(default_factory=list)
    size: int = 0
    alignment: int = 0

    @property
    def padding(self) -> list[PaddingEntry]:
        return [e for e in self.entries if isinstance(e, PaddingEntry)]

    def declarations(self) -> list[str]:
        return [entry.declaration for entry in self.entries]


def build_layout(
    struct_name: str, type_desc: TypeDescriptor, config: GeneratorConfig
) -> StructLayout:
    """Lay out the members of a struct following the block packing rules.

    Members are placed in reflected order. Whenever the running offset is not a
    multiple of the next member's alignment, a padding field closing the gap is
    inserted before it. The struct is closed with trailing padding up to the
    largest member alignment, unless its last member is an unbounded array.

    Args:
        struct_name: Name of the struct, used in errors and logs
        type_desc: Struct type descriptor
        config: Generator configuration passed to field declarations

    Returns:
        StructLayout with the ordered field and padding entries

    Raises:
        UnsupportedTypeError: If any member type has an unknown basic kind
    """
    layout = StructLayout(name=struct_name)
    offset = 0

    try:
        for member in type_desc.members:
            alignment = alignment_of(member.type)
            layout.alignment = max(layout.alignment, alignment)

            # Empty nested structs align to zero and never need a gap
            if alignment and offset % alignment:
                offset = _pad(layout, alignment - offset % alignment, offset)

            size = size_of(member.type)
            layout.entries.append(
                FieldEntry(
                    name=member.name,
                    declaration=field_declaration(member.type, member.name, config),
                    offset=offset,
                    size=size,
                    alignment=alignment,
                )
            )
            offset += size
    except UnsupportedTypeError as e:
        raise e.in_struct(struct_name) from e

    members = type_desc.members
    ends_unbounded = bool(members) and members[-1].type.is_unbounded_array
    if layout.alignment and offset % layout.alignment and not ends_unbounded:
        offset = _pad(layout, layout.alignment - offset % layout.alignment, offset)

    layout.size = offset
    logger.debug(
        f"Laid out struct {struct_name}: size {layout.size}, "
        f"alignment {layout.alignment}, padding {[p.size for p in layout.padding]}"
    )
    return layout


def _pad(layout: StructLayout, gap: int, offset: int) -> int:
    name = f"_padding{len(layout.padding)}"
    layout.entries.append(PaddingEntry(name=name, size=gap, offset=offset))
    return offset + gap
