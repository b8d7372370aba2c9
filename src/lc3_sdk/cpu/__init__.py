"""
LC-3 SDK CPU Package
====================

This package contains the LC-3 architecture definitions used by every
tool in the SDK: the assembler (which encodes instructions), the
disassembler (which decodes them) and the emulator (which executes them).
Keeping them in one place means the three can never disagree about an
opcode or a field width.

Modules:
    lc3: Opcode numbers, mnemonic table, directives, trap vectors and
         bit helpers for encoding and decoding.

Usage:
    from lc3_sdk.cpu import (
        Opcode,
        InstructionInfo,
        INSTRUCTION_TABLE,
        get_instruction_info,
    )
"""

from lc3_sdk.cpu.lc3 import (
    # Machine constants
    WORD_BITS,
    WORD_MASK,
    MEMORY_SIZE,
    REGISTER_COUNT,
    LINK_REGISTER,
    # Core types
    Opcode,
    TrapVector,
    OperandKind,
    InstructionInfo,
    # Field widths
    IMM5_BITS,
    OFFSET6_BITS,
    PC_OFFSET9_BITS,
    PC_OFFSET11_BITS,
    TRAPVECT_BITS,
    # Instruction set reference tables
    INSTRUCTION_TABLE,
    MNEMONICS,
    TRAP_ALIASES,
    DIRECTIVES,
    # Lookup functions
    get_instruction_info,
    is_mnemonic,
    is_directive,
    # Bit helpers
    signed_range,
    fits_signed,
    sign_extend,
    to_signed,
    field,
)

__all__ = [
    "WORD_BITS",
    "WORD_MASK",
    "MEMORY_SIZE",
    "REGISTER_COUNT",
    "LINK_REGISTER",
    "Opcode",
    "TrapVector",
    "OperandKind",
    "InstructionInfo",
    "IMM5_BITS",
    "OFFSET6_BITS",
    "PC_OFFSET9_BITS",
    "PC_OFFSET11_BITS",
    "TRAPVECT_BITS",
    "INSTRUCTION_TABLE",
    "MNEMONICS",
    "TRAP_ALIASES",
    "DIRECTIVES",
    "get_instruction_info",
    "is_mnemonic",
    "is_directive",
    "signed_range",
    "fits_signed",
    "sign_extend",
    "to_signed",
    "field",
]
