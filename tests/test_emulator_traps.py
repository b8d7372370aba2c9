"""
TRAP Routine and Console Tests
==============================

Tests for the built-in TRAP routines and the console collaborators:
- GETC, OUT, PUTS, IN, PUTSP and HALT behavior
- R7 linkage and condition codes across a TRAP
- Unknown vectors
- BufferConsole, TerminalConsole and RecordingConsole
"""

import io

import pytest

from lc3_sdk.cpu import TrapVector
from lc3_sdk.emulator import (
    BufferConsole,
    ConditionCode,
    DEFAULT_IN_PROMPT,
    RecordingConsole,
    TerminalConsole,
    step,
)
from lc3_sdk.emulator.traps import execute_trap, resolve_trap
from lc3_sdk.errors import UnknownTrapError


# =============================================================================
# Input Routines
# =============================================================================

class TestGetc:
    """TRAP x20: read one character, no echo."""

    def test_reads_character(self, machine):
        state = machine(0xF020)
        console = BufferConsole("a")
        step(state, console)
        assert state.registers[0] == ord("a")
        assert console.output == ""
        assert console.pending_input == 0

    def test_end_of_input_reads_zero(self, machine):
        state = machine(0xF020)
        state.registers[0] = 0x1234
        step(state, BufferConsole())
        assert state.registers[0] == 0


class TestIn:
    """TRAP x23: prompt, read, echo."""

    def test_prompt_and_echo(self, machine):
        state = machine(0xF023)
        console = BufferConsole("z")
        outcome = step(state, console)
        assert state.registers[0] == ord("z")
        assert console.output == DEFAULT_IN_PROMPT + "z"
        assert outcome.output == console.output

    def test_custom_prompt(self, machine):
        state = machine(0xF023)
        console = BufferConsole("y")
        step(state, console, in_prompt="? ")
        assert console.output == "? y"


# =============================================================================
# Output Routines
# =============================================================================

class TestOut:
    """TRAP x21: write R0[7:0]."""

    def test_writes_character(self, machine, console):
        state = machine(0xF021)
        state.registers[0] = ord("A")
        step(state, console)
        assert console.output == "A"

    def test_uses_low_byte(self, machine, console):
        state = machine(0xF021)
        state.registers[0] = 0x1241
        step(state, console)
        assert console.output == "A"


class TestPuts:
    """TRAP x22: one character per word, up to a zero word."""

    def test_writes_string(self, assembled, console):
        state = assembled('.ORIG x3000\nLEA R0, S\nPUTS\nHALT\nS .STRINGZ "Hello, LC-3!\\n"\n.END')
        step(state, console)
        step(state, console)
        assert console.output == "Hello, LC-3!\n"

    def test_empty_string(self, machine, console):
        state = machine(0xF022, 0x0000)
        state.registers[0] = 0x3001
        step(state, console)
        assert console.output == ""

    def test_stops_at_zero_word(self, machine, console):
        state = machine(0xF022, 0x0041, 0x0000, 0x0042)
        state.registers[0] = 0x3001
        step(state, console)
        assert console.output == "A"


class TestPutsp:
    """TRAP x24: two characters per word, low byte first."""

    def test_packed_string(self, machine, console):
        state = machine(0xF024, 0x6548, 0x6C6C, 0x006F, 0x0000)
        state.registers[0] = 0x3001
        step(state, console)
        assert console.output == "Hello"

    def test_even_length(self, machine, console):
        state = machine(0xF024, 0x6948, 0x0000)
        state.registers[0] = 0x3001
        step(state, console)
        assert console.output == "Hi"


# =============================================================================
# HALT and Linkage
# =============================================================================

class TestHalt:
    """TRAP x25: stop the machine."""

    def test_halt(self, machine, console):
        state = machine(0xF025)
        outcome = step(state, console)
        assert outcome.halted
        assert not state.running
        assert console.output == ""

    def test_trap_instruction_form(self, machine):
        state = machine(0xF025)
        step(state)
        assert state.pc == 0x3001


class TestLinkage:
    """R7 and the condition code across a TRAP."""

    @pytest.mark.parametrize("word", [0xF020, 0xF021, 0xF022, 0xF023, 0xF024, 0xF025])
    def test_r7_holds_return_address(self, machine, word):
        state = machine(word)
        step(state, BufferConsole("q"))
        assert state.registers[7] == 0x3001

    def test_execution_continues_after_trap(self, machine, console):
        state = machine(0xF021, 0x1261)
        state.registers[0] = ord("!")
        step(state, console)
        step(state, console)
        assert state.pc == 0x3002
        assert state.registers[1] == 1

    def test_flags_unchanged(self, machine):
        state = machine(0xF020)
        state.condition = ConditionCode.NEGATIVE
        step(state, BufferConsole("x"))
        assert state.condition == ConditionCode.NEGATIVE


class TestUnknownTrap:
    """Vectors without a built-in routine."""

    def test_unknown_vector(self, machine):
        state = machine(0xF0FF)
        with pytest.raises(UnknownTrapError) as exc_info:
            step(state)
        error = exc_info.value
        assert error.vector == 0xFF
        assert error.kind == "UnknownTrap"
        assert error.address == 0x3000
        assert not state.running

    def test_unknown_vector_leaves_r7(self, machine):
        state = machine(0xF000)
        state.registers[7] = 0x1234
        with pytest.raises(UnknownTrapError):
            step(state)
        assert state.registers[7] == 0x1234

    def test_resolve_trap(self):
        assert resolve_trap(0x3000, 0xF022) == TrapVector.PUTS
        with pytest.raises(UnknownTrapError):
            resolve_trap(0x3000, 0xF026)

    def test_execute_trap_directly(self, machine, console):
        state = machine(0x0000)
        state.registers[0] = ord("#")
        execute_trap(state, TrapVector.OUT, console)
        assert console.output == "#"


# =============================================================================
# Console Tests
# =============================================================================

class TestBufferConsole:
    """In-memory console."""

    def test_feed(self):
        console = BufferConsole("a")
        console.feed("bc")
        assert [console.read_char() for _ in range(4)] == ["a", "b", "c", "\0"]

    def test_output(self):
        console = BufferConsole()
        console.write_char("x")
        console.write_string("yz")
        assert console.output == "xyz"
        console.clear_output()
        assert console.output == ""


class TestTerminalConsole:
    """Terminal console with scripted input."""

    def test_scripted_input(self):
        console = TerminalConsole("hi")
        assert console.read_char() == "h"
        assert console.read_char() == "i"
        assert console.read_char() == "\0"

    def test_writes_to_stdout(self, capsys):
        console = TerminalConsole("")
        console.write_string("abc")
        console.write_char("d")
        assert capsys.readouterr().out == "abcd"

    def test_piped_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("xy"))
        console = TerminalConsole()
        assert console.read_char() == "x"
        assert console.read_char() == "y"
        assert console.read_char() == "\0"


class TestRecordingConsole:
    """Forwarding console that remembers output."""

    def test_records_and_forwards(self):
        inner = BufferConsole("k")
        recorder = RecordingConsole(inner)
        recorder.write_string("ab")
        recorder.write_char("c")
        assert recorder.read_char() == "k"
        assert recorder.captured == "abc"
        assert inner.output == "abc"
