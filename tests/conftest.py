"""
LC-3 SDK - Test Configuration
=============================

Shared fixtures for the unit tests:
- Source programs used across several test modules
- Helpers that assemble and load a program in one call
"""

from pathlib import Path

import pytest

from lc3_sdk.assembler import assemble
from lc3_sdk.emulator import BufferConsole, CPUState, load
from lc3_sdk.image import ObjectImage


HELLO_SOURCE = """\
.ORIG x3000
LEA R0, MSG
TRAP x22
HALT
MSG .STRINGZ "HI"
.END
"""

COUNTDOWN_SOURCE = """\
; Print 3, 2, 1 then halt
        .ORIG x3000
        LD    R1, COUNT
        LD    R2, ASCII
LOOP    ADD   R0, R1, R2
        OUT
        ADD   R1, R1, #-1
        BRp   LOOP
        HALT
COUNT   .FILL #3
ASCII   .FILL x30
        .END
"""

INFINITE_LOOP_SOURCE = """\
.ORIG x3000
SPIN BRnzp SPIN
.END
"""


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def hello_source() -> str:
    """Fixture: the LEA/PUTS/HALT program that prints "HI"."""
    return HELLO_SOURCE


@pytest.fixture
def countdown_source() -> str:
    """Fixture: a loop that prints "321" using OUT and BRp."""
    return COUNTDOWN_SOURCE


@pytest.fixture
def infinite_loop_source() -> str:
    """Fixture: a program that branches to itself forever."""
    return INFINITE_LOOP_SOURCE


@pytest.fixture
def hello_asm(tmp_path: Path) -> Path:
    """Fixture: HELLO_SOURCE written to a .asm file."""
    path = tmp_path / "hello.asm"
    path.write_text(HELLO_SOURCE)
    return path


# ═══════════════════════════════════════════════════════════════════════════════
# MACHINE FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def console() -> BufferConsole:
    """Fixture: an empty in-memory console."""
    return BufferConsole()


@pytest.fixture
def machine():
    """
    Fixture: factory that loads raw words at x3000.

    Usage:
        state = machine(0x1261, 0xF025)
    """
    def _load(*words: int, start: int = 0x3000) -> CPUState:
        return load(ObjectImage.from_words(start, list(words)))
    return _load


@pytest.fixture
def assembled():
    """
    Fixture: factory that assembles source and loads it.

    Fails the test with the error report if the source does not assemble.
    """
    def _assemble(source: str) -> CPUState:
        result = assemble(source)
        assert result.ok, "\n".join(str(e) for e in result.errors)
        return load(result.image)
    return _assemble
