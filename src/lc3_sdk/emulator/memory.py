"""
Memory Subsystem for the LC-3 Emulator
======================================

The LC-3 has a flat, word-addressed memory of 65536 16-bit words. There
is no ROM, no banking and no memory-mapped I/O in this machine: console
I/O happens only through TRAP routines.

Memory Map (by convention only, nothing is enforced):
    x0000-x00FF  Trap vector table
    x0100-x01FF  Interrupt vector table
    x0200-x2FFF  Operating system
    x3000-xFDFF  User programs
    xFE00-xFFFF  Device registers
"""

from array import array
from typing import Iterable

from lc3_sdk.cpu import MEMORY_SIZE, WORD_MASK
from lc3_sdk.image import ObjectImage


class Memory:
    """
    64K words of RAM.

    Addresses and values are masked to 16 bits, so address arithmetic in
    the CPU may wrap freely.

    Example:
        >>> mem = Memory()
        >>> mem.write(0x3000, 0x1234)
        >>> hex(mem.read(0x3000))
        '0x1234'
    """

    def __init__(self):
        self._data = array("H", bytes(2 * MEMORY_SIZE))

    def read(self, address: int) -> int:
        return self._data[address & WORD_MASK]

    def write(self, address: int, value: int) -> None:
        self._data[address & WORD_MASK] = value & WORD_MASK

    def read_block(self, address: int, count: int) -> list[int]:
        """Read `count` consecutive words, wrapping at the end of memory."""
        return [self.read(address + offset) for offset in range(count)]

    def write_block(self, address: int, words: Iterable[int]) -> None:
        for offset, word in enumerate(words):
            self.write(address + offset, word)

    def load(self, image: ObjectImage) -> None:
        """Copy an object image's words into memory."""
        for address, word in image.items():
            self.write(address, word)

    def clear(self) -> None:
        """Zero every word."""
        self._data = array("H", bytes(2 * MEMORY_SIZE))

    def __len__(self) -> int:
        return MEMORY_SIZE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Memory):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        used = sum(1 for word in self._data if word)
        return f"Memory({used} non-zero words)"
