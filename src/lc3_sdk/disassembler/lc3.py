"""
LC-3 Disassembler
=================

Decodes LC-3 instruction words back into assembly language. This is the
inverse of the assembler's Pass 2 and is used for execution traces and
for inspecting object files.

Output uses the assembler's own syntax, so a disassembly can be fed back
to ``lc3asm``:

- PC-relative operands are written as the label at the target when one
  is known, otherwise as a signed ``#offset``; the absolute target always
  appears in the comment.
- Trap vectors with a built-in routine use the alias (``PUTS``, ``HALT``).
- Words that are not instructions (the reserved opcode, BR with no
  condition bits) are written as ``.FILL``.

Usage:
    disasm = LC3Disassembler()
    for instr in disasm.disassemble(words, start_address=0x3000):
        print(instr)

    disassemble_word(0xE002, 0x3000)   # "LEA R0, #2"
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from lc3_sdk.cpu import (
    IMM5_BITS,
    LINK_REGISTER,
    OFFSET6_BITS,
    PC_OFFSET9_BITS,
    PC_OFFSET11_BITS,
    WORD_MASK,
    Opcode,
    TrapVector,
    field,
    sign_extend,
    to_signed,
)
from lc3_sdk.image import ObjectImage


TRAP_VECTORS = frozenset(v.value for v in TrapVector)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single decoded word.

    Attributes:
        address: Memory address of the word
        word: The 16-bit instruction word
        mnemonic: Instruction mnemonic or ``.FILL``
        operand_str: Formatted operands
        comment: Optional note (branch target, illegal opcode)
    """
    address: int
    word: int
    mnemonic: str
    operand_str: str = ""
    comment: str = ""

    @property
    def opcode(self) -> Opcode:
        return Opcode(self.word >> 12)

    @property
    def text(self) -> str:
        """The instruction in assembler syntax, without address or comment."""
        return f"{self.mnemonic} {self.operand_str}" if self.operand_str else self.mnemonic

    def __str__(self) -> str:
        """Format as listing line: ADDRESS: WORD  INSTRUCTION ; COMMENT"""
        if self.comment:
            return f"x{self.address:04X}: {self.word:04X}  {self.text:<20} ; {self.comment}"
        return f"x{self.address:04X}: {self.word:04X}  {self.text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"x{self.address:04X}",
            "word": f"x{self.word:04X}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "comment": self.comment,
        }


# =============================================================================
# LC-3 Disassembler
# =============================================================================

class LC3Disassembler:
    """
    Disassembler for LC-3 machine code.

    Attributes:
        _symbol_table: Maps addresses to label names for PC-relative operands
    """

    def __init__(self, symbol_table: Optional[dict[int, str]] = None):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Optional dict mapping addresses to symbol names.
                         Used to write branch and load targets as labels.
        """
        self._symbol_table = dict(symbol_table or {})

    def add_symbols(self, symbols: dict[int, str]) -> None:
        self._symbol_table.update(symbols)

    def disassemble_one(self, word: int, address: int = 0) -> DisassembledInstruction:
        """
        Decode a single word.

        Args:
            word: The 16-bit word
            address: Address the word was fetched from (for PC-relative targets)

        Returns:
            DisassembledInstruction; never raises for any 16-bit value
        """
        word &= WORD_MASK
        dr = field(word, 11, 9)
        sr = field(word, 8, 6)

        def instr(mnemonic: str, operands: str = "", comment: str = "") -> DisassembledInstruction:
            return DisassembledInstruction(address, word, mnemonic, operands, comment)

        def data(comment: str) -> DisassembledInstruction:
            return instr(".FILL", f"x{word:04X}", comment)

        match Opcode(word >> 12):
            case Opcode.ADD | Opcode.AND as op:
                if word & 0x20:
                    third = f"#{to_signed(sign_extend(word, IMM5_BITS))}"
                else:
                    third = f"R{field(word, 2, 0)}"
                return instr(op.name, f"R{dr}, R{sr}, {third}")
            case Opcode.NOT:
                return instr("NOT", f"R{dr}, R{sr}")
            case Opcode.BR:
                if dr == 0:
                    return data("")
                flags = "".join(flag for flag, bit in (("n", 4), ("z", 2), ("p", 1)) if dr & bit)
                operand, target = self._pc_relative(word, address, PC_OFFSET9_BITS)
                return instr(f"BR{flags}", operand, target)
            case Opcode.LD | Opcode.LDI | Opcode.LEA | Opcode.ST | Opcode.STI as op:
                operand, target = self._pc_relative(word, address, PC_OFFSET9_BITS)
                return instr(op.name, f"R{dr}, {operand}", target)
            case Opcode.LDR | Opcode.STR as op:
                offset = to_signed(sign_extend(word, OFFSET6_BITS))
                return instr(op.name, f"R{dr}, R{sr}, #{offset}")
            case Opcode.JSR:
                if word & 0x0800:
                    operand, target = self._pc_relative(word, address, PC_OFFSET11_BITS)
                    return instr("JSR", operand, target)
                return instr("JSRR", f"R{sr}")
            case Opcode.JMP:
                if sr == LINK_REGISTER:
                    return instr("RET")
                return instr("JMP", f"R{sr}")
            case Opcode.TRAP:
                vector = word & 0xFF
                if vector in TRAP_VECTORS and field(word, 11, 8) == 0:
                    return instr(TrapVector(vector).name)
                return instr("TRAP", f"x{vector:02X}")
            case Opcode.RTI:
                return instr("RTI")
            case Opcode.RESERVED:
                return data("illegal opcode")

    def _pc_relative(self, word: int, address: int, bits: int) -> tuple[str, str]:
        """Return (operand, comment) for a PC-relative field."""
        offset = to_signed(sign_extend(word, bits))
        target = (address + 1 + offset) & WORD_MASK
        operand = self._symbol_table.get(target, f"#{offset}")
        return operand, f"x{target:04X}"

    def disassemble(self, words: Iterable[int], start_address: int = 0,
                    count: Optional[int] = None) -> list[DisassembledInstruction]:
        """
        Disassemble consecutive words.

        Args:
            words: Words to decode, the first at start_address
            start_address: Memory address of the first word
            count: Maximum number of words to decode (None = all)

        Returns:
            List of DisassembledInstruction objects
        """
        result = []
        for index, word in enumerate(words):
            if count is not None and index >= count:
                break
            result.append(self.disassemble_one(word, (start_address + index) & WORD_MASK))
        return result

    def disassemble_image(self, image: ObjectImage) -> list[DisassembledInstruction]:
        """Disassemble the whole body of an object image."""
        return self.disassemble(image.body(), image.start)

    def disassemble_to_text(self, words: Iterable[int], start_address: int = 0,
                            count: Optional[int] = None) -> str:
        """
        Disassemble and return formatted text output.

        Returns:
            Multi-line string with disassembly listing
        """
        return "\n".join(str(instr) for instr in self.disassemble(words, start_address, count))


def disassemble_word(word: int, address: int = 0, symbols: Optional[dict[int, str]] = None) -> str:
    """
    Disassemble one word to assembler text.

    >>> disassemble_word(0xF025)
    'HALT'
    """
    return LC3Disassembler(symbols).disassemble_one(word, address).text
