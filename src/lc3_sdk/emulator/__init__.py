"""
LC-3 Emulator
=============

An instruction-cycle emulator for the LC-3.

The core is functional: ``load`` builds a CPUState from an ObjectImage,
``step`` executes one instruction and ``run`` steps under a budget. The
Emulator class wraps these with program loading and inspection helpers.

Usage:
    from lc3_sdk.emulator import BufferConsole, load, run

    state = load(image)
    console = BufferConsole()
    result = run(state, console, max_steps=100_000)
    print(console.output, result.reason)
"""

from lc3_sdk.emulator.console import BufferConsole, ConsoleProtocol, RecordingConsole, TerminalConsole
from lc3_sdk.emulator.cpu import (
    ConditionCode,
    CPUState,
    RunResult,
    StepOutcome,
    StopReason,
    load,
    run,
    step,
)
from lc3_sdk.emulator.emulator import Emulator
from lc3_sdk.emulator.memory import Memory
from lc3_sdk.emulator.traps import DEFAULT_IN_PROMPT

__all__ = [
    # Main interface
    "Emulator",
    "load",
    "step",
    "run",
    # State
    "CPUState",
    "ConditionCode",
    "Memory",
    "StepOutcome",
    "StopReason",
    "RunResult",
    # Console
    "ConsoleProtocol",
    "BufferConsole",
    "TerminalConsole",
    "RecordingConsole",
    "DEFAULT_IN_PROMPT",
]
