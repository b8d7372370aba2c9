"""
CLI Tests
=========

Tests for the lc3asm and lc3run command-line tools, run in-process with
click's CliRunner. Covers output files, error reporting and exit codes.
"""

import pytest
from click.testing import CliRunner

from lc3_sdk import __version__
from lc3_sdk.assembler import assemble
from lc3_sdk.cli.errors import ExitCode
from lc3_sdk.cli.lc3asm import main as lc3asm
from lc3_sdk.cli.lc3run import main as lc3run
from lc3_sdk.image import ObjectImage


ECHO_SOURCE = ".ORIG x3000\nGETC\nOUT\nGETC\nOUT\nHALT\n.END\n"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write(tmp_path, name: str, text: str):
    path = tmp_path / name
    path.write_text(text)
    return path


# =============================================================================
# lc3asm Tests
# =============================================================================

class TestLc3asm:
    """The assembler command."""

    def test_help(self, runner):
        result = runner.invoke(lc3asm, ["--help"])
        assert result.exit_code == 0
        assert "Assemble LC-3 source code" in result.output

    def test_version(self, runner):
        result = runner.invoke(lc3asm, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_default_output(self, runner, hello_asm):
        result = runner.invoke(lc3asm, [str(hello_asm)])
        assert result.exit_code == ExitCode.SUCCESS
        obj = hello_asm.with_suffix(".obj")
        assert obj.read_bytes() == bytes.fromhex("3000e002f022f025004800490000")

    def test_all_outputs(self, runner, hello_asm, tmp_path):
        obj = tmp_path / "out.obj"
        lst = tmp_path / "out.lst"
        sym = tmp_path / "out.sym"
        result = runner.invoke(lc3asm, [str(hello_asm), "-o", str(obj), "-l", str(lst), "-s", str(sym)])
        assert result.exit_code == 0
        assert ObjectImage.read(obj).start == 0x3000
        assert "LC-3 Assembler Listing" in lst.read_text()
        assert "MSG x3003" in sym.read_text()

    def test_verbose(self, runner, hello_asm):
        result = runner.invoke(lc3asm, [str(hello_asm), "-v"])
        assert result.exit_code == 0
        assert "Assembly complete: 6 words at x3000" in result.output
        assert "Defined 1 symbols" in result.output

    def test_assembly_errors(self, runner, tmp_path):
        source = write(tmp_path, "bad.asm", ".ORIG x3000\nADD R8, R1, R1\nLD R0, NOPE\n.END\n")
        result = runner.invoke(lc3asm, [str(source)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "bad.asm:2:5: error: 'R8' is not a register" in result.output
        assert "undefined label 'NOPE'" in result.output
        assert "2 errors" in result.output
        assert not source.with_suffix(".obj").exists()

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(lc3asm, [str(tmp_path / "missing.asm")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_warning_reported(self, runner, tmp_path):
        source = write(tmp_path, "late.asm", ".ORIG x3000\nHALT\n.END\nJUNK\n")
        result = runner.invoke(lc3asm, [str(source)])
        assert result.exit_code == 0
        assert "warning: line 4: content after .END is ignored" in result.output

    def test_tokens(self, runner, hello_asm):
        result = runner.invoke(lc3asm, ["--tokens", str(hello_asm)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].split() == ["1:0-5", "DIRECTIVE", "'.ORIG'"]
        assert any("STRING" in line and '\'"HI"\'' in line for line in lines)
        assert not any("WHITESPACE" in line for line in lines)
        assert not hello_asm.with_suffix(".obj").exists()


# =============================================================================
# lc3run Tests
# =============================================================================

class TestLc3run:
    """The emulator command."""

    def test_run_source(self, runner, hello_asm):
        result = runner.invoke(lc3run, [str(hello_asm)])
        assert result.exit_code == ExitCode.SUCCESS
        assert result.output == "HI"

    def test_run_object_file(self, runner, hello_source, tmp_path):
        obj = tmp_path / "hello.obj"
        assemble(hello_source).image.write(obj)
        result = runner.invoke(lc3run, [str(obj)])
        assert result.exit_code == 0
        assert result.output == "HI"

    def test_scripted_input(self, runner, tmp_path):
        source = write(tmp_path, "echo.asm", ECHO_SOURCE)
        result = runner.invoke(lc3run, [str(source), "--input", "ab"])
        assert result.exit_code == 0
        assert result.output == "ab"

    def test_piped_input(self, runner, tmp_path):
        source = write(tmp_path, "echo.asm", ECHO_SOURCE)
        result = runner.invoke(lc3run, [str(source)], input="xy")
        assert result.exit_code == 0
        assert result.output == "xy"

    def test_step_limit(self, runner, tmp_path, infinite_loop_source):
        source = write(tmp_path, "spin.asm", infinite_loop_source)
        result = runner.invoke(lc3run, [str(source), "--max-steps", "100"])
        assert result.exit_code == ExitCode.STEP_LIMIT
        assert "step limit of 100 reached at x3000" in result.output

    def test_step_limit_from_environment(self, runner, tmp_path, infinite_loop_source):
        source = write(tmp_path, "spin.asm", infinite_loop_source)
        result = runner.invoke(lc3run, [str(source)], env={"LC3_MAX_STEPS": "50"})
        assert result.exit_code == ExitCode.STEP_LIMIT
        assert "step limit of 50" in result.output

    def test_negative_step_limit_rejected(self, runner, hello_asm):
        result = runner.invoke(lc3run, [str(hello_asm), "--max-steps", "-1"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_trace(self, runner, hello_asm):
        result = runner.invoke(lc3run, [str(hello_asm), "--trace"])
        assert result.exit_code == 0
        assert "[trace] x3000: E002  LEA R0, MSG" in result.output
        assert "[trace] x3002: F025  HALT" in result.output

    def test_registers(self, runner, hello_asm):
        result = runner.invoke(lc3run, [str(hello_asm), "--registers"])
        assert result.exit_code == 0
        assert "R0 x3003" in result.output
        assert "PC x3003  CC P" in result.output

    def test_assembly_error(self, runner, tmp_path):
        source = write(tmp_path, "bad.asm", ".ORIG x3000\nBR NOWHERE\n.END\n")
        result = runner.invoke(lc3run, [str(source)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "undefined label 'NOWHERE'" in result.output

    def test_execution_error(self, runner, tmp_path):
        obj = tmp_path / "illegal.obj"
        ObjectImage.from_words(0x3000, [0xD000]).write(obj)
        result = runner.invoke(lc3run, [str(obj)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Execution error: illegal opcode" in result.output

    def test_bad_object_file(self, runner, tmp_path):
        obj = tmp_path / "bad.obj"
        obj.write_bytes(b"\x30\x00\x01")
        result = runner.invoke(lc3run, [str(obj)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Load error: object file has an odd length" in result.output

    def test_missing_program(self, runner, tmp_path):
        result = runner.invoke(lc3run, [str(tmp_path / "missing.obj")])
        assert result.exit_code == ExitCode.INVALID_ARGS
