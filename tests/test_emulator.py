"""
Emulator Facade Tests
=====================

Tests for the Emulator class: program loading from images, object files
and source, execution control, and state inspection.
"""

import pytest

from lc3_sdk.assembler import AssemblyFailed, assemble
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.emulator import (
    BufferConsole,
    ConditionCode,
    Emulator,
    StopReason,
    TerminalConsole,
)
from lc3_sdk.errors import (
    ExecutionHaltedError,
    IllegalOpcodeError,
    LC3Error,
    ObjectFileError,
)
from lc3_sdk.image import ObjectImage


@pytest.fixture
def emu() -> Emulator:
    """Fixture: emulator with an in-memory console."""
    return Emulator()


# =============================================================================
# Loading Tests
# =============================================================================

class TestLoading:
    """Getting a program into the machine."""

    def test_load_source(self, emu, hello_source):
        emu.load_source(hello_source)
        assert emu.pc == 0x3000
        assert emu.is_running
        assert emu.read_word(0x3000) == 0xE002
        assert emu.symbols == {0x3003: "MSG"}

    def test_load_source_failure(self, emu):
        with pytest.raises(AssemblyFailed):
            emu.load_source(".ORIG x3000\nBR NOWHERE\n.END")

    def test_load_image(self, emu):
        emu.load_image(ObjectImage.from_words(0x4000, [0xF025]))
        assert emu.pc == 0x4000
        assert emu.condition is None

    def test_load_obj(self, emu, hello_source, tmp_path):
        path = tmp_path / "hello.obj"
        assemble(hello_source).image.write(path)
        emu.load_obj(path)
        assert emu.read_word(0x3003) == 0x48
        assert emu.symbols == {}

    def test_load_bad_obj(self, emu, tmp_path):
        path = tmp_path / "bad.obj"
        path.write_bytes(b"\x30\x00\x01")
        with pytest.raises(ObjectFileError):
            emu.load_obj(path)

    def test_load_file_by_suffix(self, emu, hello_asm, tmp_path):
        emu.load_file(hello_asm)
        assert emu.symbols == {0x3003: "MSG"}

        obj = tmp_path / "hello.obj"
        assemble(hello_asm.read_text()).image.write(obj)
        emu.load_file(obj)
        assert emu.symbols == {}
        assert emu.read_word(0x3000) == 0xE002

    def test_reload_clears_state(self, emu, hello_source):
        emu.load_source(hello_source)
        emu.run()
        emu.load_source(hello_source)
        assert emu.is_running
        assert emu.registers == [0] * 8
        assert emu.total_steps == 0

    def test_reset(self, emu, hello_source):
        emu.load_source(hello_source)
        emu.run()
        emu.write_word(0x3000, 0xF025)
        emu.reset()
        assert emu.is_running
        assert emu.pc == 0x3000
        assert emu.read_word(0x3000) == 0xE002

    def test_reset_without_program(self, emu):
        with pytest.raises(LC3Error):
            emu.reset()


# =============================================================================
# Execution Tests
# =============================================================================

class TestExecution:
    """step() and run()."""

    def test_end_to_end_hello(self, emu, hello_source):
        """The program prints HI and halts."""
        emu.load_source(hello_source)
        result = emu.run()
        assert result.reason == StopReason.HALTED
        assert emu.output == "HI"
        assert not emu.is_running
        assert emu.total_steps == 3

    def test_step(self, emu, hello_source):
        emu.load_source(hello_source)
        outcome = emu.step()
        assert outcome.instruction == 0xE002
        assert emu.registers[0] == 0x3003
        assert emu.condition == ConditionCode.POSITIVE
        assert emu.step().output == "HI"
        assert emu.step().halted
        with pytest.raises(ExecutionHaltedError):
            emu.step()
        assert emu.total_steps == 3

    def test_step_error_counts(self, emu):
        emu.load_image(ObjectImage.from_words(0x3000, [0xD000]))
        with pytest.raises(IllegalOpcodeError):
            emu.step()
        assert emu.total_steps == 1
        assert not emu.is_running

    def test_runaway_guard(self, emu, infinite_loop_source):
        emu.load_source(infinite_loop_source)
        result = emu.run(max_steps=100)
        assert result.reason == StopReason.MAX_STEPS
        assert result.steps == 100
        assert emu.is_running

    def test_default_budget_from_config(self, infinite_loop_source):
        emu = Emulator(ToolchainConfig(max_steps=25))
        emu.load_source(infinite_loop_source)
        result = emu.run()
        assert result.steps == 25

    def test_run_continues(self, emu, infinite_loop_source):
        emu.load_source(infinite_loop_source)
        emu.run(max_steps=10)
        emu.run(max_steps=5)
        assert emu.total_steps == 15

    def test_on_step_hook(self, emu, hello_source):
        seen = []
        emu.on_step = lambda outcome: seen.append(outcome.address)
        emu.load_source(hello_source)
        emu.run()
        assert seen == [0x3000, 0x3001, 0x3002]

    def test_scripted_input(self):
        console = BufferConsole("ab")
        emu = Emulator(console=console)
        emu.load_source(".ORIG x3000\nGETC\nOUT\nGETC\nOUT\nHALT\n.END")
        emu.run()
        assert emu.output == "ab"

    def test_in_prompt_from_config(self):
        emu = Emulator(ToolchainConfig(in_prompt="> "), BufferConsole("q"))
        emu.load_source(".ORIG x3000\nIN\nHALT\n.END")
        emu.run()
        assert emu.output == "> q"


# =============================================================================
# Inspection Tests
# =============================================================================

class TestInspection:
    """Registers, memory and console output."""

    def test_registers_are_a_copy(self, emu, hello_source):
        emu.load_source(hello_source)
        emu.registers[0] = 99
        assert emu.registers[0] == 0

    def test_write_word(self, emu, hello_source):
        emu.load_source(hello_source)
        emu.write_word(0x4000, 0x1FFFF)
        assert emu.read_word(0x4000) == 0xFFFF

    def test_output_requires_recording_console(self):
        emu = Emulator(console=TerminalConsole(""))
        with pytest.raises(LC3Error):
            emu.output

    def test_register_dump(self, emu, hello_source):
        emu.load_source(hello_source)
        emu.run()
        dump = emu.register_dump().splitlines()
        assert dump[0] == "R0 x3003  R1 x0000  R2 x0000  R3 x0000"
        assert dump[1] == "R4 x0000  R5 x0000  R6 x0000  R7 x3003"
        assert dump[2] == "PC x3003  CC P"

    def test_register_dump_cleared_flags(self, emu):
        emu.load_image(ObjectImage.from_words(0x3000, [0xF025]))
        assert emu.register_dump().endswith("CC -")

    def test_disassemble_at(self, emu, hello_source):
        emu.load_source(hello_source)
        lines = emu.disassemble_at(0x3000, 3)
        assert lines[0].startswith("x3000: E002  LEA R0, MSG")
        assert lines[1] == "x3001: F022  PUTS"
        assert lines[2] == "x3002: F025  HALT"

    def test_repr(self, emu):
        assert repr(emu).startswith("Emulator(CPUState(")
