"""Tests for the shader2h command-line interface."""

import os
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
from typer.testing import CliRunner
from watchdog.events import FileModifiedEvent

from shader2h.config import ShaderStage
from shader2h.errors import FrontEndError, ShaderIOError
from shader2h.frontend import CompiledShader
from shader2h.main import GenerateOptions, HeaderChangeHandler, _write_atomic, app
from shader2h.translator.models import (
    BasicKind,
    ReflectedSymbol,
    ReflectionView,
    SymbolCategory,
    matrix,
    scalar,
    struct,
    vector,
)

runner = CliRunner()

WORDS = np.array([0x07230203, 0x00010500, 0, 1, 0], dtype=np.uint32)


@pytest.fixture
def sample_shader_file(tmp_path):
    """Create a vertex shader file for testing."""
    path = tmp_path / "basic.vert"
    path.write_text("#version 450\nvoid main() {}\n")
    return path


@pytest.fixture
def compiled(sample_shader_file):
    """Fixture providing the compiled form of the sample shader."""
    globals_type = struct(
        "Globals",
        [
            ("viewProj", matrix(4)),
            ("color", vector(BasicKind.FLOAT, 4)),
            ("time", scalar(BasicKind.FLOAT)),
        ],
    )
    view = ReflectionView(
        uniform_blocks=[
            ReflectedSymbol("Globals", SymbolCategory.UNIFORM_BLOCK, 0, globals_type)
        ],
        stages=["vert"],
    )
    return CompiledShader(WORDS, view, [sample_shader_file])


def test_help():
    """Test that the CLI help command works."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "generate" in result.stdout


def test_generate_help():
    """Test that the generate command help works."""
    result = runner.invoke(app, ["generate", "--help"])
    assert result.exit_code == 0
    assert "--prefix" in result.stdout


def test_generate_to_file(sample_shader_file, compiled, tmp_path):
    """Test generating a header with prefixes and a type map."""
    # Arrange
    output = tmp_path / "out" / "basic.h"
    output.parent.mkdir()

    # Act
    with patch("shader2h.main.compile_shader", return_value=compiled) as compile_mock:
        result = runner.invoke(
            app,
            [
                "generate",
                str(sample_shader_file),
                "-o",
                str(output),
                "-p",
                "Gfx",
                "-g",
                "g_",
                "-m",
                "vec4=float4",
            ],
        )

    # Assert
    assert result.exit_code == 0
    assert compile_mock.call_args.args[1] == ShaderStage.VERTEX
    content = output.read_text()
    assert "static const uint32_t g_basic_vert_spv[] = {" in content
    assert "#define SLOT_basic_vert_Globals 0" in content
    assert "typedef struct Gfxbasic_vert_Globals GfxGlobals;" in content
    assert "    float4 color;" in content
    assert list(output.parent.iterdir()) == [output]


def test_generate_default_output(sample_shader_file, compiled, tmp_path):
    """Test that the header defaults to <name>.h in the current directory."""
    with runner.isolated_filesystem(temp_dir=tmp_path):
        with patch("shader2h.main.compile_shader", return_value=compiled):
            result = runner.invoke(app, ["generate", str(sample_shader_file)])

        assert result.exit_code == 0
        assert Path("basic.h").exists()


def test_generate_with_stage_and_name(sample_shader_file, compiled, tmp_path):
    """Test explicit stage and shader name options."""
    # Arrange
    output = tmp_path / "custom.h"
    compiled.reflection.stages = ["frag"]

    # Act
    with patch("shader2h.main.compile_shader", return_value=compiled) as compile_mock:
        result = runner.invoke(
            app,
            [
                "generate",
                str(sample_shader_file),
                "-o",
                str(output),
                "-s",
                "fragment",
                "--name",
                "custom",
            ],
        )

    # Assert
    assert result.exit_code == 0
    assert compile_mock.call_args.args[1] == ShaderStage.FRAGMENT
    assert "#define SLOT_custom_Globals 0" in output.read_text()


def test_generate_with_prelude_and_banner(sample_shader_file, compiled, tmp_path):
    """Test the extra prelude file and the banner comment."""
    # Arrange
    prelude = tmp_path / "prelude.h"
    prelude.write_text('#include "engine_types.h"\n')
    output = tmp_path / "basic.h"

    # Act
    with patch("shader2h.main.compile_shader", return_value=compiled):
        result = runner.invoke(
            app,
            [
                "generate",
                str(sample_shader_file),
                "-o",
                str(output),
                "-P",
                str(prelude),
                "--banner",
            ],
        )

    # Assert
    assert result.exit_code == 0
    content = output.read_text()
    assert content.startswith("// Generated by shader2h v")
    assert "// Source file: basic.vert" in content
    assert '#include "engine_types.h"\n' in content


def test_invalid_type_map(sample_shader_file, compiled, tmp_path):
    """Test that a type map without '=' is rejected."""
    output = tmp_path / "basic.h"
    with patch("shader2h.main.compile_shader", return_value=compiled):
        result = runner.invoke(
            app, ["generate", str(sample_shader_file), "-o", str(output), "-m", "vec4"]
        )

    assert result.exit_code == 1
    assert not output.exists()


def test_invalid_stage(sample_shader_file, tmp_path):
    """Test that an unknown stage is rejected."""
    output = str(tmp_path / "a.h")
    result = runner.invoke(
        app, ["generate", str(sample_shader_file), "-o", output, "-s", "geom"]
    )
    assert result.exit_code == 1


def test_missing_prelude(sample_shader_file, tmp_path):
    """Test that a missing prelude file is an error."""
    result = runner.invoke(
        app,
        [
            "generate",
            str(sample_shader_file),
            "-o",
            str(tmp_path / "a.h"),
            "-P",
            str(tmp_path / "missing.h"),
        ],
    )
    assert result.exit_code == 1


def test_compile_failure_leaves_no_header(sample_shader_file, tmp_path):
    """Test that a failed compilation does not write or replace the header."""
    # Arrange
    output = tmp_path / "basic.h"
    output.write_text("// previous header\n")
    error = FrontEndError("Failed to compile basic.vert", "ERROR: 0:1: syntax error")

    # Act
    with patch("shader2h.main.compile_shader", side_effect=error):
        result = runner.invoke(
            app, ["generate", str(sample_shader_file), "-o", str(output)]
        )

    # Assert
    assert result.exit_code == 1
    assert output.read_text() == "// previous header\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["basic.h", "basic.vert"]


def test_inspect(sample_shader_file, compiled):
    """Test printing struct layouts."""
    with patch("shader2h.main.compile_shader", return_value=compiled):
        result = runner.invoke(app, ["inspect", str(sample_shader_file)])

    assert result.exit_code == 0
    assert "struct Globals (size 96, alignment 16)" in result.stdout
    assert "float viewProj[4][4]" in result.stdout
    assert "(padding)" in result.stdout


class TestHeaderChangeHandler:
    """Test cases for the watch command's event handler."""

    def test_regenerate_tracks_dependencies(
        self, sample_shader_file, compiled, tmp_path
    ):
        """Test that included files are watched after a regeneration."""
        # Arrange
        include = tmp_path / "common.glsl"
        compiled.dependencies = [sample_shader_file, include]
        options = GenerateOptions(sample_shader_file, output=tmp_path / "basic.h")
        handler = HeaderChangeHandler(options)

        # Act
        with patch("shader2h.main.compile_shader", return_value=compiled):
            handler.regenerate()
        handler.on_modified(FileModifiedEvent(str(include)))

        # Assert
        assert (tmp_path / "basic.h").exists()
        assert handler.needs_regeneration
        assert handler.directories() == {str(tmp_path)}

    def test_failure_keeps_watching(self, sample_shader_file, tmp_path):
        """Test that a failed regeneration is logged and not raised."""
        options = GenerateOptions(sample_shader_file, output=tmp_path / "basic.h")
        handler = HeaderChangeHandler(options)
        handler.needs_regeneration = True

        with patch("shader2h.main.compile_shader", side_effect=FrontEndError("bad")):
            handler.regenerate()

        assert not handler.needs_regeneration
        assert handler.watched == {str(sample_shader_file)}

    def test_ignores_unrelated_files(self, sample_shader_file, tmp_path):
        """Test that changes to other files do not trigger a regeneration."""
        handler = HeaderChangeHandler(GenerateOptions(sample_shader_file))
        handler.on_modified(FileModifiedEvent(str(tmp_path / "other.txt")))
        assert not handler.needs_regeneration


class TestWriteAtomic:
    """Test cases for writing the header file."""

    @pytest.fixture
    def umask(self):
        """Fixture setting a known umask for the duration of a test."""
        previous = os.umask(0o022)
        yield 0o022
        os.umask(previous)

    def test_new_header_follows_umask(self, tmp_path, umask):
        """Test that a new header is readable by everyone, like a plain write."""
        # Arrange
        output = tmp_path / "basic.h"

        # Act
        _write_atomic(output, "#pragma once\n")

        # Assert
        assert output.read_text() == "#pragma once\n"
        assert output.stat().st_mode & 0o777 == 0o666 & ~umask

    def test_replaced_header_keeps_its_mode(self, tmp_path, umask):
        """Test that regenerating a header keeps the permissions it had."""
        output = tmp_path / "basic.h"
        output.write_text("// old\n")
        output.chmod(0o640)

        _write_atomic(output, "// new\n")

        assert output.read_text() == "// new\n"
        assert output.stat().st_mode & 0o777 == 0o640

    def test_text_is_utf8(self, tmp_path):
        """Test that the header is written as UTF-8 whatever the locale."""
        output = tmp_path / "basic.h"

        _write_atomic(output, "// Lichtstärke\n")

        assert output.read_bytes() == "// Lichtstärke\n".encode("utf-8")

    def test_encoding_failure_leaves_no_files(self, tmp_path):
        """Test that an unencodable header fails and leaves nothing behind."""
        output = tmp_path / "basic.h"

        with pytest.raises(ShaderIOError) as excinfo:
            _write_atomic(output, "// \ud800\n")

        assert excinfo.value.path == output
        assert list(tmp_path.iterdir()) == []
