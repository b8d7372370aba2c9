"""
LC-3 Object Image
=================

An ObjectImage is the assembler's output and the emulator's input: a
start address plus the words that belong in memory.

Object File Format
------------------
An object file is a stream of big-endian 16-bit words::

    +--------+--------+--------+-----+
    | start  | word 0 | word 1 | ... |
    +--------+--------+--------+-----+

Word 0 is loaded at the start address, word 1 at start + 1, and so on.
The body is contiguous; gaps left by the assembler are filled with zero.

Example
-------
>>> image = ObjectImage.from_words(0x3000, [0xE002, 0xF022, 0xF025])
>>> image.to_bytes().hex()
'3000e002f022f025'
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Union
import struct

from lc3_sdk.cpu import MEMORY_SIZE, WORD_MASK
from lc3_sdk.errors import ObjectFileError


@dataclass(frozen=True, eq=False)
class ObjectImage:
    """
    Immutable memory image produced by the assembler.

    Attributes:
        start: Address of the first word, and the initial PC
        words: Read-only mapping of address to 16-bit word
    """
    start: int
    words: Mapping[int, int]

    def __post_init__(self):
        if not 0 <= self.start <= WORD_MASK:
            raise ValueError(f"start address out of range: {self.start}")
        frozen = {address: word & WORD_MASK for address, word in sorted(self.words.items())}
        object.__setattr__(self, "words", MappingProxyType(frozen))

    @classmethod
    def from_words(cls, start: int, words: Sequence[int]) -> "ObjectImage":
        """Build an image whose words sit contiguously from `start`."""
        return cls(start, {start + i: word for i, word in enumerate(words)})

    @property
    def end(self) -> int:
        """Address just past the last word (equal to start for an empty image)."""
        return max(self.words) + 1 if self.words else self.start

    def body(self) -> list[int]:
        """The contiguous words from start to end, zero-filled."""
        return [self.words.get(address, 0) for address in range(self.start, self.end)]

    def items(self) -> Iterator[tuple[int, int]]:
        """(address, word) pairs in address order."""
        return iter(self.words.items())

    def __len__(self) -> int:
        return self.end - self.start

    def __getitem__(self, address: int) -> int:
        return self.words.get(address, 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectImage):
            return NotImplemented
        return self.start == other.start and dict(self.words) == dict(other.words)

    def __hash__(self) -> int:
        return hash((self.start, tuple(self.words.items())))

    def __repr__(self) -> str:
        return f"ObjectImage(start=x{self.start:04X}, {len(self)} words)"

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_bytes(self) -> bytes:
        """Encode as an object file: start word, then the body."""
        body = self.body()
        return struct.pack(f">{len(body) + 1}H", self.start, *body)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ObjectImage":
        """
        Decode an object file.

        Raises:
            ObjectFileError: If the data is not a valid word stream
        """
        if len(data) < 2:
            raise ObjectFileError("object file is too short: missing start address")
        if len(data) % 2:
            raise ObjectFileError(f"object file has an odd length ({len(data)} bytes)")

        start, *body = struct.unpack(f">{len(data) // 2}H", data)
        if start + len(body) > MEMORY_SIZE:
            raise ObjectFileError(
                f"object file holds {len(body)} words, which do not fit from x{start:04X}"
            )
        return cls.from_words(start, body)

    def write(self, path: Union[str, Path]) -> None:
        """Write the image to an object file."""
        Path(path).write_bytes(self.to_bytes())

    @classmethod
    def read(cls, path: Union[str, Path]) -> "ObjectImage":
        """
        Read an object file.

        Raises:
            ObjectFileError: If the file is not a valid object file
            OSError: If the file cannot be read
        """
        return cls.from_bytes(Path(path).read_bytes())
