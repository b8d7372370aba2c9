"""
LC-3 Disassembler Tests
=======================

Tests for decoding machine words back into assembler syntax, including
label substitution for PC-relative operands and handling of words that
are not instructions.
"""

import pytest

from lc3_sdk.assembler import assemble
from lc3_sdk.disassembler import DisassembledInstruction, LC3Disassembler, disassemble_word


# =============================================================================
# Single Word Tests
# =============================================================================

class TestDisassembleWord:
    """One word at a time, without symbols."""

    @pytest.mark.parametrize("word, text", [
        (0x1283, "ADD R1, R2, R3"),
        (0x127F, "ADD R1, R1, #-1"),
        (0x5020, "AND R0, R0, #0"),
        (0x94FF, "NOT R2, R3"),
        (0x0FFF, "BRnzp #-1"),
        (0x0402, "BRz #2"),
        (0x0C05, "BRnz #5"),
        (0xC080, "JMP R2"),
        (0xC1C0, "RET"),
        (0x4801, "JSR #1"),
        (0x40C0, "JSRR R3"),
        (0x2202, "LD R1, #2"),
        (0xA3FF, "LDI R1, #-1"),
        (0x64FC, "LDR R2, R3, #-4"),
        (0xE003, "LEA R0, #3"),
        (0x3800, "ST R4, #0"),
        (0xBA01, "STI R5, #1"),
        (0x7DDF, "STR R6, R7, #31"),
        (0x8000, "RTI"),
        (0xF020, "GETC"),
        (0xF025, "HALT"),
        (0xF0FF, "TRAP xFF"),
    ])
    def test_instruction_text(self, word, text):
        assert disassemble_word(word) == text

    def test_zero_word_is_data(self):
        assert disassemble_word(0x0000) == ".FILL x0000"

    def test_reserved_opcode_is_data(self):
        instr = LC3Disassembler().disassemble_one(0xD123, 0x3000)
        assert instr.text == ".FILL xD123"
        assert instr.comment == "illegal opcode"

    def test_every_word_decodes(self):
        """No 16-bit value raises."""
        disasm = LC3Disassembler()
        for word in range(0, 0x10000, 7):
            assert disasm.disassemble_one(word, 0x3000).mnemonic

    def test_symbol_substitution(self):
        assert disassemble_word(0xE002, 0x3000, {0x3003: "MSG"}) == "LEA R0, MSG"


# =============================================================================
# Disassembler Class Tests
# =============================================================================

class TestLC3Disassembler:
    """Sequences, images and formatting."""

    def test_target_comment(self):
        instr = LC3Disassembler().disassemble_one(0x0FFE, 0x3005)
        assert instr.operand_str == "#-2"
        assert instr.comment == "x3004"

    def test_str_format(self):
        instr = DisassembledInstruction(0x3000, 0xF025, "HALT")
        assert str(instr) == "x3000: F025  HALT"

    def test_to_dict(self):
        instr = LC3Disassembler({0x3003: "MSG"}).disassemble_one(0xE002, 0x3000)
        assert instr.to_dict() == {
            "address": "x3000",
            "word": "xE002",
            "mnemonic": "LEA",
            "operand": "R0, MSG",
            "comment": "x3003",
        }

    def test_opcode_property(self):
        instr = LC3Disassembler().disassemble_one(0x1283)
        assert instr.opcode.name == "ADD"

    def test_disassemble_count(self):
        result = LC3Disassembler().disassemble([0x1283, 0xF025, 0x0000], 0x3000, count=2)
        assert [i.address for i in result] == [0x3000, 0x3001]

    def test_add_symbols(self):
        disasm = LC3Disassembler()
        disasm.add_symbols({0x3000: "LOOP"})
        assert disasm.disassemble_one(0x0FFF, 0x3000).operand_str == "LOOP"

    def test_disassemble_image(self, countdown_source):
        result = assemble(countdown_source)
        disasm = LC3Disassembler(result.symbols.by_address())
        texts = [instr.text for instr in disasm.disassemble_image(result.image)]
        assert texts[:7] == [
            "LD R1, COUNT",
            "LD R2, ASCII",
            "ADD R0, R1, R2",
            "OUT",
            "ADD R1, R1, #-1",
            "BRp LOOP",
            "HALT",
        ]

    def test_reassembles_to_same_words(self, countdown_source):
        """Disassembled code assembles back to the original words."""
        result = assemble(countdown_source)
        disasm = LC3Disassembler()
        lines = [instr.text for instr in disasm.disassemble_image(result.image)][:7]
        again = assemble(".ORIG x3000\n" + "\n".join(lines) + "\n.END\n")
        assert again.image.body() == result.image.body()[:7]

    def test_disassemble_to_text(self):
        text = LC3Disassembler().disassemble_to_text([0xF021, 0xF025], 0x3000)
        assert text == "x3000: F021  OUT\nx3001: F025  HALT"
