"""
Local include resolution for shader sources.

``#include "file"`` directives are expanded before the source reaches the
compiler. Lookups start next to the including file, then fall back to the
directory of the root shader and the configured include directories.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from shader2h.errors import ShaderIOError

INCLUDE_PATTERN = re.compile(
    r'^[ \t]*#[ \t]*include[ \t]+"([^"]+)"[^\n]*$', re.MULTILINE
)

# Directives that only exist to enable #include in the compiler
INCLUDE_EXTENSION_PATTERN = re.compile(
    r"^[ \t]*#[ \t]*extension[ \t]+GL_GOOGLE_include_directive\b[^\n]*$", re.MULTILINE
)

VERSION_PATTERN = re.compile(r"^[ \t]*#[ \t]*version\b[^\n]*$", re.MULTILINE)

# Lets #line directives name the file a line came from
LINE_DIRECTIVE_EXTENSION = "#extension GL_GOOGLE_cpp_style_line_directive : require"


@dataclass
class IncludeResolver:
    """Resolves include names for one translation.

    Attributes:
        root_file: Shader file the translation started from
        include_dirs: Extra directories searched after the local ones
        visited: Every file read so far, root file included
    """

    root_file: Path
    include_dirs: list[Path] = field(default_factory=list)
    visited: list[Path] = field(default_factory=list)

    def resolve(self, header_name: str, includer: Path | None = None) -> Path:
        """Find the file a local include refers to.

        Args:
            header_name: Name inside the include quotes
            includer: File containing the directive, if known

        Returns:
            Path of the included file

        Raises:
            ShaderIOError: If no candidate exists
        """
        bases = []
        if includer is not None:
            bases.append(includer.parent)
        bases.append(self.root_file.parent)
        bases.extend(self.include_dirs)

        for base in bases:
            candidate = base / header_name
            if candidate.is_file():
                return candidate
        raise ShaderIOError("Failed to open include file", bases[0] / header_name)

    def read(self, path: Path) -> str:
        """Read a source file and remember it as a dependency."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ShaderIOError("Failed to open file", path) from e
        if path not in self.visited:
            self.visited.append(path)
        return text

    def expand(self) -> str:
        """Read the root file and expand all of its includes.

        When anything was included, line directives naming the original files are
        enabled so compiler diagnostics point at the right file and line.
        """
        source = expand_includes(self.read(self.root_file), self.root_file, self)
        if len(self.visited) > 1:
            source = enable_line_directives(source, self.root_file)
        return source


def expand_includes(
    source: str,
    source_path: Path,
    resolver: IncludeResolver,
    stack: tuple[Path, ...] = (),
) -> str:
    """Recursively replace local ``#include`` directives with file contents.

    Args:
        source: Source text to expand
        source_path: File the source text came from
        resolver: Resolver used for every lookup
        stack: Files currently being expanded, to detect cycles

    Returns:
        Source text without include directives

    Raises:
        ShaderIOError: If an include is missing or includes itself
    """
    stack = (*stack, source_path.resolve())

    def replace(match: re.Match[str]) -> str:
        included_path = resolver.resolve(match.group(1), source_path)
        if included_path.resolve() in stack:
            raise ShaderIOError("Include cycle detected", included_path)
        logger.debug(f"Including {included_path} from {source_path}")
        included = resolver.read(included_path)
        expanded = expand_includes(included, included_path, resolver, stack)
        # Resume numbering at the line after the directive
        next_line = match.string.count("\n", 0, match.start()) + 2
        return "\n".join(
            [
                _line_directive(1, included_path),
                expanded.rstrip("\n"),
                _line_directive(next_line, source_path),
            ]
        )

    source = INCLUDE_EXTENSION_PATTERN.sub("", source)
    return INCLUDE_PATTERN.sub(replace, source)


def enable_line_directives(source: str, source_path: Path) -> str:
    """Enable file names in ``#line`` directives right after ``#version``.

    The inserted lines are followed by a directive restoring the numbering of
    the root file, so positions after ``#version`` are unchanged.
    """
    match = VERSION_PATTERN.search(source)
    if match is None:
        logger.warning(f"No #version in {source_path}, line directives not enabled")
        return source

    next_line = source.count("\n", 0, match.start()) + 2
    insert = f"\n{LINE_DIRECTIVE_EXTENSION}\n{_line_directive(next_line, source_path)}"
    return source[: match.end()] + insert + source[match.end() :]


def _line_directive(line: int, path: Path) -> str:
    return f'#line {line} "{path.as_posix()}"'
