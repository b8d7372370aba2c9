"""
LC-3 Assembler - Pass 2 (Code Generator)
========================================

The second pass walks the same source lines as Pass 1, now with a
complete symbol table, and turns each line into memory words.

Encoding
--------
Every instruction starts from the fixed bits of its InstructionInfo
template; each operand then ORs its field into place:

- Registers must be R0-R7 (bits 11-9 for DR, 8-6 for SR/BaseR, 2-0 for SR2)
- imm5 sets bit 5 and stores a signed value in -16..15
- offset6 stores a signed value in -32..31
- PCoffset9 / PCoffset11 store ``target - (address + 1)``; a numeric
  operand is taken as the offset itself
- trapvect8 stores an unsigned value in 0..255

Data Directives
---------------
- ``.FILL value``: one word; a label or a number in -32768..65535
- ``.BLKW n``: n zero words
- ``.STRINGZ "s"``: one word per character, then a terminating zero

The pass keeps going after an error so that every problem is reported.
An image is produced only when no errors were found.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import logging

from lc3_sdk.assembler.lexer import Token, TokenKind, parse_immediate
from lc3_sdk.assembler.parser import SourceLine, split_lines
from lc3_sdk.assembler.symbols import AddressWalker, SymbolTable, blkw_count, stringz_text
from lc3_sdk.cpu import (
    IMM5_BITS,
    MEMORY_SIZE,
    OFFSET6_BITS,
    PC_OFFSET9_BITS,
    PC_OFFSET11_BITS,
    REGISTER_COUNT,
    WORD_MASK,
    OperandKind,
    fits_signed,
    get_instruction_info,
    signed_range,
)
from lc3_sdk.errors import (
    AssemblerError,
    ErrorCollector,
    InvalidRegisterError,
    MalformedOperandError,
    OffsetOutOfRangeError,
    TooManyErrors,
    UndefinedLabelError,
)
from lc3_sdk.image import ObjectImage

logger = logging.getLogger(__name__)


# Words shown per listing entry before the rest is summarized
LISTING_WORD_LIMIT = 4


# =============================================================================
# Listing
# =============================================================================

@dataclass(frozen=True)
class ListingEntry:
    """
    One source line with the words it produced.

    Attributes:
        address: Address of the first word, or None before the origin
        words: Words emitted for the line (empty for labels, comments, etc.)
        line: The source line
    """
    address: Optional[int]
    words: tuple[int, ...]
    line: SourceLine

    def format(self) -> list[str]:
        """Render as listing rows: address, word, line number, source."""
        number = f"{self.line.number:4d}"
        if not self.words:
            address = f"x{self.address:04X}" if self.address is not None else "     "
            return [f"{address}        {number}  {self.line.text}"]

        rows = [f"x{self.address:04X}  {self.words[0]:04X}  {number}  {self.line.text}"]
        shown = self.words[1:LISTING_WORD_LIMIT]
        for offset, word in enumerate(shown, start=1):
            rows.append(f"x{(self.address + offset) & WORD_MASK:04X}  {word:04X}")
        hidden = len(self.words) - 1 - len(shown)
        if hidden:
            rows.append(f"             ... {hidden} more word{'s' if hidden != 1 else ''}")
        return rows


# =============================================================================
# Pass 2
# =============================================================================

class Encoder:
    """
    Pass 2 of the assembler.

    Usage:
        encoder = Encoder(symbol_table)
        image = encoder.encode(lines)
        if image is None:
            print(encoder.get_error_report())

    Attributes:
        symbols: Symbol table from Pass 1
        listing: One ListingEntry per line walked
        origin: Address from .ORIG, or None
    """

    def __init__(self, symbols: SymbolTable, max_errors: int = 100,
                 errors: Optional[ErrorCollector] = None):
        self.symbols = symbols
        self.listing: list[ListingEntry] = []
        self.origin: Optional[int] = None
        self._errors = errors if errors is not None else ErrorCollector(max_errors)

    @property
    def errors(self) -> list[AssemblerError]:
        return self._errors.errors

    @property
    def warnings(self) -> list[str]:
        return self._errors.warnings

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        return self._errors.report()

    def encode(self, lines: list[SourceLine]) -> Optional[ObjectImage]:
        """
        Run Pass 2 over the given lines.

        Returns:
            The object image, or None if any error was found
        """
        walker = AddressWalker(self._errors)
        words: dict[int, int] = {}
        self.listing = []

        try:
            for line, address in walker.walk(lines):
                emitted = self._encode_line(line, address)
                for offset, word in enumerate(emitted):
                    if address + offset < MEMORY_SIZE:
                        words[address + offset] = word
                self.listing.append(ListingEntry(address, tuple(emitted), line))
        except TooManyErrors:
            pass

        self.origin = walker.origin
        image = None
        if self.origin is not None and not self._errors.has_errors():
            image = ObjectImage(self.origin, words)

        logger.debug(
            f"Pass 2: {len(words)} words, {len(self.errors)} errors"
            + (f", image {image!r}" if image else "")
        )
        return image

    def _encode_line(self, line: SourceLine, address: Optional[int]) -> list[int]:
        """Encode one line, collecting its errors. Returns the emitted words."""
        if address is None:
            return []
        if line.problems:
            self._errors.extend(line.problems)
            return []
        if line.operation is None or line.mnemonic in (".ORIG", ".END"):
            return []

        try:
            if line.is_directive:
                return self._encode_directive(line)
            return [self._encode_instruction(line, address)]
        except AssemblerError as e:
            self._errors.add(e)
            return []

    # =========================================================================
    # Instructions
    # =========================================================================

    def _encode_instruction(self, line: SourceLine, address: int) -> int:
        info = get_instruction_info(line.mnemonic)

        if len(line.operands) != len(info.operands):
            if info.operands:
                expected = ", ".join(str(kind) for kind in info.operands)
                message = (
                    f"{info.mnemonic} expects {len(info.operands)} operand"
                    f"{'s' if len(info.operands) != 1 else ''} ({expected}), "
                    f"got {len(line.operands)}"
                )
            else:
                message = f"{info.mnemonic} takes no operands"
            raise line.error(MalformedOperandError, message, line.operation)

        word = info.base
        for kind, token in zip(info.operands, line.operands):
            word |= self._encode_operand(kind, token, line, address)
        return word & WORD_MASK

    def _encode_operand(self, kind: OperandKind, token: Token, line: SourceLine, address: int) -> int:
        """Return the bits `token` contributes to the instruction word."""
        match kind:
            case OperandKind.DR:
                return self._register(token, line) << 9
            case OperandKind.SR:
                return self._register(token, line) << 6
            case OperandKind.SR2_OR_IMM5:
                if token.kind == TokenKind.REGISTER:
                    return self._register(token, line)
                if token.kind == TokenKind.IMMEDIATE:
                    return 0x20 | self._signed_field(token, line, parse_immediate(token.lexeme), IMM5_BITS)
            case OperandKind.OFFSET6:
                if token.kind == TokenKind.IMMEDIATE:
                    return self._signed_field(token, line, parse_immediate(token.lexeme), OFFSET6_BITS)
            case OperandKind.PC_OFFSET9 | OperandKind.PC_OFFSET11:
                bits = PC_OFFSET9_BITS if kind == OperandKind.PC_OFFSET9 else PC_OFFSET11_BITS
                if token.kind == TokenKind.LABEL:
                    offset = self._resolve(token, line) - (address + 1)
                    return self._signed_field(token, line, offset, bits)
                if token.kind == TokenKind.IMMEDIATE:
                    return self._signed_field(token, line, parse_immediate(token.lexeme), bits)
            case OperandKind.TRAPVECT8:
                if token.kind == TokenKind.IMMEDIATE:
                    vector = parse_immediate(token.lexeme)
                    if not 0 <= vector <= 0xFF:
                        raise OffsetOutOfRangeError(
                            token.lexeme, vector, 0, 0xFF, location=token.location, source_line=line.text
                        )
                    return vector

        raise line.error(MalformedOperandError, f"expected {kind}, found '{token.lexeme}'", token)

    def _register(self, token: Token, line: SourceLine) -> int:
        if token.kind == TokenKind.REGISTER:
            number = int(token.lexeme[1:])
            if number < REGISTER_COUNT:
                return number
        raise InvalidRegisterError(token.lexeme, location=token.location, source_line=line.text)

    def _signed_field(self, token: Token, line: SourceLine, value: int, bits: int) -> int:
        """Check `value` fits a signed field of `bits` bits and return its encoding."""
        if not fits_signed(value, bits):
            minimum, maximum = signed_range(bits)
            raise OffsetOutOfRangeError(
                token.label_name, value, minimum, maximum, location=token.location, source_line=line.text
            )
        return value & ((1 << bits) - 1)

    def _resolve(self, token: Token, line: SourceLine) -> int:
        name = token.label_name
        if name not in self.symbols:
            raise UndefinedLabelError(
                name,
                location=token.location,
                source_line=line.text,
                similar_labels=self.symbols.similar(name),
            )
        return self.symbols[name]

    # =========================================================================
    # Directives
    # =========================================================================

    def _encode_directive(self, line: SourceLine) -> list[int]:
        match line.mnemonic:
            case ".FILL":
                return [self._fill_value(line)]
            case ".BLKW":
                return [0] * blkw_count(line)
            case ".STRINGZ":
                text = stringz_text(line)
                if any(ord(char) > WORD_MASK for char in text):
                    raise line.error(
                        MalformedOperandError, "string holds a character wider than 16 bits", line.operands[0]
                    )
                return [ord(char) for char in text] + [0]
        return []

    def _fill_value(self, line: SourceLine) -> int:
        if len(line.operands) != 1:
            raise line.error(MalformedOperandError, ".FILL takes one value", line.operation)

        token = line.operands[0]
        if token.kind == TokenKind.LABEL:
            return self._resolve(token, line)
        if token.kind == TokenKind.IMMEDIATE:
            value = parse_immediate(token.lexeme)
            if not -0x8000 <= value <= WORD_MASK:
                raise OffsetOutOfRangeError(
                    token.lexeme, value, -0x8000, WORD_MASK, location=token.location, source_line=line.text
                )
            return value & WORD_MASK
        raise line.error(MalformedOperandError, f"expected a label or number, found '{token.lexeme}'", token)

    # =========================================================================
    # Output
    # =========================================================================

    def get_listing(self) -> str:
        """Get the assembly listing as a string."""
        return format_listing(self.listing, self.symbols)

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing file."""
        Path(filepath).write_text(self.get_listing())


def format_listing(listing: Iterable[ListingEntry], symbols: SymbolTable) -> str:
    """
    Render a listing.

    Returns:
        The listing showing addresses, generated words, and source lines,
        followed by the symbol table.
    """
    lines = [
        "LC-3 Assembler Listing",
        "=" * 60,
        "",
        "Addr   Word  Line  Source",
        "-" * 60,
    ]
    for entry in listing:
        lines.extend(entry.format())
    lines.append("")
    lines.append("Symbol Table")
    lines.append("-" * 30)
    for symbol in sorted(symbols.symbols(), key=lambda s: s.name.upper()):
        lines.append(f"{symbol.name:20s} = x{symbol.address:04X}")
    return "\n".join(lines) + "\n"


def encode(tokens: Iterable[Token], symbol_table: SymbolTable,
           max_errors: int = 100) -> tuple[Optional[ObjectImage], list[AssemblerError]]:
    """
    Run Pass 2 over a token stream.

    Args:
        tokens: Token stream from ``tokenize()``
        symbol_table: Table produced by Pass 1 over the same tokens
        max_errors: Stop collecting after this many errors

    Returns:
        (image or None, list of errors)
    """
    encoder = Encoder(symbol_table, max_errors=max_errors)
    image = encoder.encode(split_lines(tokens))
    return image, list(encoder.errors)
