"""
LC-3 Instruction Set Definition
===============================

This module defines the LC-3 instruction set: opcode numbers, the operand
layout of every assembler mnemonic, the directive names, the trap vectors
and the bit-manipulation helpers the assembler and emulator share.

Machine Model
-------------
- 16-bit words, 65536-word address space
- Eight general-purpose registers R0-R7
- 16-bit program counter, incremented before operands are evaluated
- Condition codes N, Z, P; exactly one is set by flag-setting instructions

Instruction Word Layout
-----------------------
Every instruction is one word. Bits 15-12 hold the opcode; the remaining
twelve bits are operand fields:

| Field       | Bits   | Used by                                  |
|-------------|--------|------------------------------------------|
| DR / SR     | 11-9   | ADD AND NOT LD LDI LDR LEA (DR), ST STI STR (SR) |
| SR1 / BaseR | 8-6    | ADD AND NOT (SR1), JMP JSRR LDR STR (BaseR) |
| imm flag    | 5      | ADD AND (1 = immediate form)             |
| imm5        | 4-0    | ADD AND                                  |
| SR2         | 2-0    | ADD AND (register form)                  |
| offset6     | 5-0    | LDR STR                                  |
| PCoffset9   | 8-0    | BR LD LDI LEA ST STI                     |
| PCoffset11  | 10-0   | JSR                                      |
| trapvect8   | 7-0    | TRAP                                     |
| n z p       | 11-9   | BR                                       |

Reference
---------
Patt & Patel, "Introduction to Computing Systems", Appendix A.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional


# =============================================================================
# Machine Constants
# =============================================================================

WORD_BITS = 16
WORD_MASK = 0xFFFF
MEMORY_SIZE = 1 << WORD_BITS
REGISTER_COUNT = 8

# Return-address register for JSR/JSRR/TRAP
LINK_REGISTER = 7


# =============================================================================
# Opcodes
# =============================================================================

class Opcode(IntEnum):
    """The sixteen values of the 4-bit opcode field."""
    BR = 0b0000
    ADD = 0b0001
    LD = 0b0010
    ST = 0b0011
    JSR = 0b0100     # JSR and JSRR
    AND = 0b0101
    LDR = 0b0110
    STR = 0b0111
    RTI = 0b1000
    NOT = 0b1001
    LDI = 0b1010
    STI = 0b1011
    JMP = 0b1100     # JMP and RET
    RESERVED = 0b1101
    LEA = 0b1110
    TRAP = 0b1111


class TrapVector(IntEnum):
    """Built-in trap routines."""
    GETC = 0x20   # Read one character into R0, no echo
    OUT = 0x21    # Write the character in R0
    PUTS = 0x22   # Write the string at R0, one character per word
    IN = 0x23     # Prompt, read and echo one character into R0
    PUTSP = 0x24  # Write the string at R0, two characters per word
    HALT = 0x25   # Stop the machine


# =============================================================================
# Operand Kinds
# =============================================================================

class OperandKind(Enum):
    """
    Operand slots of an assembler instruction.

    Each kind knows which bits of the instruction word it fills.
    """
    DR = auto()           # Register in bits 11-9
    SR = auto()           # Register in bits 8-6
    SR2_OR_IMM5 = auto()  # Register in bits 2-0, or imm flag + imm5
    OFFSET6 = auto()      # Signed 6-bit base offset
    PC_OFFSET9 = auto()   # Label or signed 9-bit PC-relative offset
    PC_OFFSET11 = auto()  # Label or signed 11-bit PC-relative offset
    TRAPVECT8 = auto()    # Unsigned 8-bit trap vector

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return {
            OperandKind.DR: "register",
            OperandKind.SR: "register",
            OperandKind.SR2_OR_IMM5: "register or 5-bit immediate",
            OperandKind.OFFSET6: "6-bit offset",
            OperandKind.PC_OFFSET9: "label or 9-bit offset",
            OperandKind.PC_OFFSET11: "label or 11-bit offset",
            OperandKind.TRAPVECT8: "8-bit trap vector",
        }[self]


# Signed field widths, in bits
IMM5_BITS = 5
OFFSET6_BITS = 6
PC_OFFSET9_BITS = 9
PC_OFFSET11_BITS = 11
TRAPVECT_BITS = 8


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding template for one assembler mnemonic.

    Attributes:
        mnemonic: Upper-case mnemonic (e.g. "BRNZ", "HALT")
        opcode: Opcode field value
        base: Instruction word with every fixed bit already set
        operands: Operand slots, in source order
    """
    mnemonic: str
    opcode: Opcode
    base: int
    operands: tuple[OperandKind, ...] = ()

    def __repr__(self) -> str:
        ops = ", ".join(k.name for k in self.operands)
        return f"InstructionInfo({self.mnemonic}, x{self.base:04X}, [{ops}])"


def _build_table() -> dict[str, InstructionInfo]:
    """Build the mnemonic table, including BR variants and trap aliases."""
    table: dict[str, InstructionInfo] = {}

    def add(mnemonic: str, opcode: Opcode, base: int, *operands: OperandKind) -> None:
        table[mnemonic] = InstructionInfo(mnemonic, opcode, base, tuple(operands))

    add("ADD", Opcode.ADD, 0x1000, OperandKind.DR, OperandKind.SR, OperandKind.SR2_OR_IMM5)
    add("AND", Opcode.AND, 0x5000, OperandKind.DR, OperandKind.SR, OperandKind.SR2_OR_IMM5)
    add("NOT", Opcode.NOT, 0x903F, OperandKind.DR, OperandKind.SR)

    # Plain BR branches on every condition
    add("BR", Opcode.BR, 0x0E00, OperandKind.PC_OFFSET9)
    for flags in ("N", "Z", "P", "NZ", "NP", "ZP", "NZP"):
        nzp = (("N" in flags) << 2) | (("Z" in flags) << 1) | ("P" in flags)
        add(f"BR{flags}", Opcode.BR, nzp << 9, OperandKind.PC_OFFSET9)

    add("JMP", Opcode.JMP, 0xC000, OperandKind.SR)
    add("RET", Opcode.JMP, 0xC000 | (LINK_REGISTER << 6))
    add("JSR", Opcode.JSR, 0x4800, OperandKind.PC_OFFSET11)
    add("JSRR", Opcode.JSR, 0x4000, OperandKind.SR)

    add("LD", Opcode.LD, 0x2000, OperandKind.DR, OperandKind.PC_OFFSET9)
    add("LDI", Opcode.LDI, 0xA000, OperandKind.DR, OperandKind.PC_OFFSET9)
    add("LEA", Opcode.LEA, 0xE000, OperandKind.DR, OperandKind.PC_OFFSET9)
    add("ST", Opcode.ST, 0x3000, OperandKind.DR, OperandKind.PC_OFFSET9)
    add("STI", Opcode.STI, 0xB000, OperandKind.DR, OperandKind.PC_OFFSET9)
    add("LDR", Opcode.LDR, 0x6000, OperandKind.DR, OperandKind.SR, OperandKind.OFFSET6)
    add("STR", Opcode.STR, 0x7000, OperandKind.DR, OperandKind.SR, OperandKind.OFFSET6)

    add("TRAP", Opcode.TRAP, 0xF000, OperandKind.TRAPVECT8)
    add("RTI", Opcode.RTI, 0x8000)

    for vector in TrapVector:
        add(vector.name, Opcode.TRAP, 0xF000 | vector.value)

    return table


INSTRUCTION_TABLE: dict[str, InstructionInfo] = _build_table()

MNEMONICS = frozenset(INSTRUCTION_TABLE)

TRAP_ALIASES = frozenset(v.name for v in TrapVector)

DIRECTIVES = frozenset({".ORIG", ".FILL", ".BLKW", ".STRINGZ", ".END"})


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """Look up a mnemonic, case-insensitively."""
    return INSTRUCTION_TABLE.get(mnemonic.upper())


def is_mnemonic(word: str) -> bool:
    """True if `word` is an instruction mnemonic or trap alias."""
    return word.upper() in MNEMONICS


def is_directive(word: str) -> bool:
    """True if `word` is an assembler directive."""
    return word.upper() in DIRECTIVES


# =============================================================================
# Bit Helpers
# =============================================================================

def signed_range(bits: int) -> tuple[int, int]:
    """Return the (min, max) of a two's-complement field of `bits` bits."""
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def fits_signed(value: int, bits: int) -> bool:
    """True if `value` can be stored in a signed field of `bits` bits."""
    low, high = signed_range(bits)
    return low <= value <= high


def sign_extend(value: int, bits: int) -> int:
    """
    Sign-extend the low `bits` bits of `value` to a 16-bit word.

    >>> hex(sign_extend(0x1F, 5))
    '0xffff'
    """
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        value |= WORD_MASK << bits
    return value & WORD_MASK


def to_signed(word: int) -> int:
    """Interpret a 16-bit word as a two's-complement integer."""
    word &= WORD_MASK
    return word - MEMORY_SIZE if word & 0x8000 else word


def field(word: int, high: int, low: int) -> int:
    """Extract bits high..low (inclusive) of `word`."""
    return (word >> low) & ((1 << (high - low + 1)) - 1)
