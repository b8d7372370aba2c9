"""
LC-3 SDK Disassembler Module
============================

Decodes LC-3 machine words back into assembler syntax. The emulator's
trace output and the ``lc3run --trace`` option are built on it.

Usage:
    from lc3_sdk.disassembler import LC3Disassembler

    disasm = LC3Disassembler({0x3003: "MSG"})
    print(disasm.disassemble_to_text(image.body(), image.start))
"""

from lc3_sdk.disassembler.lc3 import DisassembledInstruction, LC3Disassembler, disassemble_word

__all__ = [
    "LC3Disassembler",
    "DisassembledInstruction",
    "disassemble_word",
]
