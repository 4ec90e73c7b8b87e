"""Command line interface for shader2h.

This module provides a command-line interface for compiling GLSL shaders and
generating C headers with the SPIR-V payload, binding defines and
layout-matching structs.
"""

import os
import stat
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from shader2h.config import (
    GeneratorConfig,
    ShaderStage,
    default_output_path,
    derive_shader_name,
    parse_type_map,
)
from shader2h.errors import Shader2hError, ShaderIOError
from shader2h.frontend import CompiledShader, compile_shader
from shader2h.translator import translate
from shader2h.translator.collector import collect_symbols
from shader2h.translator.structs import FieldEntry, build_layout

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="shader2h",
    help=(
        "Compile GLSL shaders into C headers with SPIR-V, bindings and structs. "
        "Commands: generate, watch, inspect."
    ),
    add_completion=False,
)


@dataclass
class GenerateOptions:
    """Options shared by the generate and watch commands."""

    input_file: Path
    output: Path | None = None
    stage: str = ""
    prefix: str = ""
    global_prefix: str = ""
    type_map: list[str] = field(default_factory=list)
    prelude: Path | None = None
    include_dirs: list[Path] = field(default_factory=list)
    name: str = ""
    banner: bool = False

    @property
    def output_path(self) -> Path:
        return self.output or default_output_path(self.input_file)

    def shader_stage(self) -> ShaderStage:
        if self.stage:
            return ShaderStage.parse(self.stage)
        return ShaderStage.guess(self.input_file.name)

    def build_config(self) -> GeneratorConfig:
        """Assemble the generator configuration from the options.

        Raises:
            ValueError: If a type map entry is malformed
            ShaderIOError: If the prelude file cannot be read
        """
        extra_prelude = ""
        if self.prelude is not None:
            try:
                extra_prelude = self.prelude.read_text(encoding="utf-8")
            except OSError as e:
                raise ShaderIOError(
                    "Failed to open extra prelude file", self.prelude
                ) from e

        return GeneratorConfig(
            shader_name=self.name or derive_shader_name(self.input_file),
            struct_prefix=self.prefix,
            global_prefix=self.global_prefix,
            custom_type_overrides=parse_type_map(self.type_map),
            extra_prelude=extra_prelude,
        )


def _add_header_comments(header: str, source_file: Path, stage: ShaderStage) -> str:
    """Add a banner comment with the tool version and generation time.

    Args:
        header: Generated header text
        source_file: Shader the header was generated from
        stage: Compiled stage

    Returns:
        Header with banner comments
    """
    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    banner = f"// Generated by shader2h v{__import__('shader2h').__version__}\n"
    banner += f"// Generation time: {timestamp}\n"
    banner += f"// Source file: {source_file.name}\n"
    banner += f"// Stage: {stage.name.lower()}\n"
    return banner + header


def _write_atomic(path: Path, text: str) -> None:
    """Write text to a file so that readers never see a partial header."""
    directory = path.parent if str(path.parent) else Path(".")
    try:
        f = NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, prefix=f".{path.name}.", delete=False
        )
    except OSError as e:
        raise ShaderIOError("Failed to open output file", path) from e

    temp_path = Path(f.name)
    try:
        with f:
            f.write(text)
        # Temporary files are created owner-only
        os.chmod(temp_path, _header_mode(path))
        os.replace(temp_path, path)
    except (OSError, UnicodeError) as e:
        temp_path.unlink(missing_ok=True)
        raise ShaderIOError("Failed to write output file", path) from e


def _header_mode(path: Path) -> int:
    """Permissions for a header: those of the file it replaces, else the umask's."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _generate(options: GenerateOptions) -> CompiledShader:
    """Compile, translate and write one header.

    Returns:
        The compiled shader, for its dependency list

    Raises:
        Shader2hError: On any compilation, translation or I/O failure
        ValueError: If the stage or a type map entry is invalid
    """
    stage = options.shader_stage()
    config = options.build_config()

    compiled = compile_shader(options.input_file, stage, options.include_dirs)
    header = translate(compiled.reflection, compiled.payload, config, stage.value)
    if options.banner:
        header = _add_header_comments(header, options.input_file, stage)

    output = options.output_path
    logger.info(f"Writing header to {output}...")
    _write_atomic(output, header)
    logger.info(f"Header written to {output}")
    return compiled


# Define reusable arguments and options
INPUT_ARG = typer.Argument(..., help="GLSL shader source or SPIR-V module")
OUTPUT_OPT = typer.Option(
    None, "--output", "-o", help="Output header (default: <input name>.h)"
)
STAGE_OPT = typer.Option(
    "", "--stage", "-s", help="Shader stage (vert, frag, comp); guessed if omitted"
)
PREFIX_OPT = typer.Option("", "--prefix", "-p", help="Struct prefix")
GLOBAL_PREFIX_OPT = typer.Option("", "--global-prefix", "-g", help="Global prefix")
MAP_OPT = typer.Option(
    [], "--map", "-m", help="Custom type map KEY=VALUE, e.g. vec4=float4"
)
PRELUDE_OPT = typer.Option(None, "--prelude", "-P", help="Extra prelude file")
INCLUDE_OPT = typer.Option([], "--include", "-I", help="Include search directory")
NAME_OPT = typer.Option("", "--name", help="Shader name (default: from file name)")
BANNER_OPT = typer.Option(
    False, "--banner", help="Add a comment with version and generation time"
)


@typed_command(app.command("generate"))
def generate_header(
    input_file: Path = INPUT_ARG,
    output: Path | None = OUTPUT_OPT,
    stage: str = STAGE_OPT,
    prefix: str = PREFIX_OPT,
    global_prefix: str = GLOBAL_PREFIX_OPT,
    type_map: list[str] = MAP_OPT,
    prelude: Path | None = PRELUDE_OPT,
    include_dirs: list[Path] = INCLUDE_OPT,
    name: str = NAME_OPT,
    banner: bool = BANNER_OPT,
) -> None:
    """Generate a C header from a shader.

    Compiles the shader to SPIR-V and writes a header with the payload,
    binding and location defines and structs for every block.

    Example: shader2h generate shaders/basic.vert -o basic.h -p Gfx
    """
    options = GenerateOptions(
        input_file,
        output,
        stage,
        prefix,
        global_prefix,
        type_map,
        prelude,
        include_dirs,
        name,
        banner,
    )
    try:
        _generate(options)
    except Shader2hError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e
    except ValueError as e:
        logger.error(f"Invalid option: {e}")
        raise typer.Exit(1) from e


class HeaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler for shader source changes."""

    def __init__(self, options: GenerateOptions):
        """Initialize header change handler.

        Args:
            options: Generation options to rerun on every change
        """
        self.options = options
        self.watched: set[str] = {os.path.abspath(options.input_file)}
        self.needs_regeneration = False

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if os.path.abspath(str(event.src_path)) in self.watched:
            logger.info(f"Detected changes in {event.src_path}")
            self.needs_regeneration = True

    def regenerate(self) -> None:
        """Regenerate the header, logging failures instead of raising."""
        self.needs_regeneration = False
        try:
            compiled = _generate(self.options)
        except (Shader2hError, ValueError) as e:
            logger.error(f"Error generating header: {e}")
            return
        self.watched = {os.path.abspath(path) for path in compiled.dependencies}

    def directories(self) -> set[str]:
        return {os.path.dirname(path) for path in self.watched}


@typed_command(app.command("watch"))
def watch_shader(
    input_file: Path = INPUT_ARG,
    output: Path | None = OUTPUT_OPT,
    stage: str = STAGE_OPT,
    prefix: str = PREFIX_OPT,
    global_prefix: str = GLOBAL_PREFIX_OPT,
    type_map: list[str] = MAP_OPT,
    prelude: Path | None = PRELUDE_OPT,
    include_dirs: list[Path] = INCLUDE_OPT,
    name: str = NAME_OPT,
    banner: bool = BANNER_OPT,
) -> None:
    """Watch a shader and its includes and regenerate the header on changes.

    Example: shader2h watch shaders/basic.frag -I shaders/common
    """
    options = GenerateOptions(
        input_file,
        output,
        stage,
        prefix,
        global_prefix,
        type_map,
        prelude,
        include_dirs,
        name,
        banner,
    )
    handler = HeaderChangeHandler(options)
    handler.regenerate()

    # Watch the directories of the sources, not the files themselves
    observer = watchdog.observers.Observer()
    for directory in handler.directories():
        observer.schedule(handler, path=directory, recursive=False)
    observer.start()

    logger.info("Watching for changes (press Ctrl+C to exit)...")
    try:
        while True:
            if handler.needs_regeneration:
                handler.regenerate()
            time.sleep(0.1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


@typed_command(app.command("inspect"))
def inspect_layouts(
    input_file: Path = INPUT_ARG,
    stage: str = STAGE_OPT,
    include_dirs: list[Path] = INCLUDE_OPT,
) -> None:
    """Print the computed layout of every struct in a shader.

    Example: shader2h inspect shaders/particles.comp
    """
    options = GenerateOptions(input_file, stage=stage, include_dirs=include_dirs)
    try:
        config = options.build_config()
        compiled = compile_shader(input_file, options.shader_stage(), include_dirs)
        collected = collect_symbols(compiled.reflection)
        for struct_name, type_desc in collected.structs.items():
            layout = build_layout(struct_name, type_desc, config)
            typer.echo(
                f"struct {struct_name} "
                f"(size {layout.size}, alignment {layout.alignment})"
            )
            for entry in layout.entries:
                if isinstance(entry, FieldEntry):
                    typer.echo(
                        f"  {entry.offset:5d} {entry.size:5d} {entry.alignment:3d}  "
                        f"{entry.declaration}"
                    )
                else:
                    typer.echo(f"  {entry.offset:5d} {entry.size:5d}      (padding)")
    except Shader2hError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e
    except ValueError as e:
        logger.error(f"Invalid option: {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
