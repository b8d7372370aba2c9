"""
Built-in TRAP Routines
======================

The machine has no operating system image, so TRAP vectors are served by
Python routines instead of code in memory. The linkage is the ISA's: the
CPU saves the return address in R7 before a routine runs, and execution
continues at that address afterwards. No stack frame is pushed.

| Vector | Alias | Behavior                                               |
|--------|-------|--------------------------------------------------------|
| x20    | GETC  | Read one character into R0 (no echo)                   |
| x21    | OUT   | Write the character in R0[7:0]                        |
| x22    | PUTS  | Write the string at R0, one character per word         |
| x23    | IN    | Write a prompt, read one character into R0, echo it    |
| x24    | PUTSP | Write the string at R0, two characters per word        |
| x25    | HALT  | Stop the machine                                       |

Routines do not change the condition codes. Any other vector raises
UnknownTrapError.
"""

import logging

from lc3_sdk.cpu import MEMORY_SIZE, WORD_MASK, TrapVector
from lc3_sdk.emulator.console import ConsoleProtocol
from lc3_sdk.errors import UnknownTrapError

logger = logging.getLogger(__name__)


DEFAULT_IN_PROMPT = "Input a character> "

TRAP_VECTORS = frozenset(v.value for v in TrapVector)


def resolve_trap(address: int, instruction: int) -> TrapVector:
    """
    Return the routine selected by a TRAP instruction.

    Raises:
        UnknownTrapError: If the vector has no built-in routine
    """
    vector = instruction & 0xFF
    if vector not in TRAP_VECTORS:
        raise UnknownTrapError(address, instruction)
    return TrapVector(vector)


def execute_trap(state, vector: TrapVector, console: ConsoleProtocol,
                 in_prompt: str = DEFAULT_IN_PROMPT) -> None:
    """
    Run a built-in routine against a CPU state.

    Args:
        state: The CPUState to operate on
        vector: The routine to run
        console: Console collaborator for character I/O
        in_prompt: Text written by IN before it reads
    """
    logger.debug(f"TRAP x{vector.value:02X} ({vector.name}) at PC=x{state.pc:04X}")
    registers = state.registers

    match vector:
        case TrapVector.GETC:
            registers[0] = ord(console.read_char()) & WORD_MASK
        case TrapVector.OUT:
            console.write_char(chr(registers[0] & 0xFF))
        case TrapVector.PUTS:
            console.write_string("".join(chr(word & 0xFF) for word in _string_words(state, registers[0])))
        case TrapVector.IN:
            console.write_string(in_prompt)
            char = console.read_char()
            console.write_char(char)
            registers[0] = ord(char) & WORD_MASK
        case TrapVector.PUTSP:
            console.write_string(_packed_string(state, registers[0]))
        case TrapVector.HALT:
            state.running = False


def _string_words(state, address: int) -> list[int]:
    """Words from `address` up to (not including) the first zero word."""
    words = []
    for offset in range(MEMORY_SIZE):
        word = state.memory.read(address + offset)
        if word == 0:
            break
        words.append(word)
    return words


def _packed_string(state, address: int) -> str:
    """Decode a PUTSP string: low byte first, then high byte unless zero."""
    chars = []
    for word in _string_words(state, address):
        chars.append(chr(word & 0xFF))
        high = word >> 8
        if high == 0:
            break
        chars.append(chr(high))
    return "".join(chars)
