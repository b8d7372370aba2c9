"""
LC-3 Assembler - Pass 1 (Symbol Table Builder)
==============================================

The first pass walks the source lines with an address cursor and records
the address of every label. No code is emitted; the only job is to know,
before Pass 2 starts, where everything will live. Forward references need
no special handling because every label is placed before any operand is
resolved.

Address Cursor
--------------
- ``.ORIG addr`` sets the cursor. It must precede all other content.
- Each instruction and ``.FILL`` advances the cursor by 1 word.
- ``.BLKW n`` advances it by n words (``.BLKW 0`` does not move it).
- ``.STRINGZ "s"`` advances it by len(s) + 1 words.
- ``.END`` stops the scan; anything after it is ignored.

Example
-------
>>> from lc3_sdk.assembler.lexer import tokenize
>>> from lc3_sdk.assembler.symbols import build_symbols
>>> table, errors = build_symbols(tokenize(".ORIG x3000\\nLOOP BR LOOP\\n.END"))
>>> hex(table["loop"])
'0x3000'
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional
import logging

from lc3_sdk.assembler.lexer import Token, TokenKind, parse_immediate
from lc3_sdk.assembler.parser import SourceLine, decode_string, split_lines
from lc3_sdk.cpu import MEMORY_SIZE, WORD_MASK
from lc3_sdk.errors import (
    AssemblerError,
    DuplicateLabelError,
    ErrorCollector,
    MalformedOperandError,
    MissingOriginError,
    OffsetOutOfRangeError,
    SourceLocation,
    TooManyErrors,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Table
# =============================================================================

@dataclass(frozen=True)
class Symbol:
    """
    A label and the address it resolved to.

    Attributes:
        name: The label as first written in the source
        address: 16-bit address
        location: Where the label was defined
    """
    name: str
    address: int
    location: Optional[SourceLocation] = None


class SymbolTable(Mapping):
    """
    Case-insensitive mapping from label name to 16-bit address.

    The table is filled by Pass 1 and only read by Pass 2. Lookups ignore
    case, so ``table["Loop"]`` and ``table["LOOP"]`` are the same entry.
    Iteration yields label names as written, in definition order.
    """

    def __init__(self):
        self._symbols: dict[str, Symbol] = {}

    def define(self, name: str, address: int, location: Optional[SourceLocation] = None,
               source_line: Optional[str] = None) -> Symbol:
        """
        Record a label.

        Raises:
            DuplicateLabelError: If the label (ignoring case) already exists
        """
        key = name.upper()
        if key in self._symbols:
            raise DuplicateLabelError(
                name,
                location=location,
                original_location=self._symbols[key].location,
                source_line=source_line,
            )
        symbol = Symbol(name=name, address=address & WORD_MASK, location=location)
        self._symbols[key] = symbol
        return symbol

    def get_symbol(self, name: str) -> Optional[Symbol]:
        """Return the full Symbol record for `name`, or None."""
        return self._symbols.get(name.upper())

    def symbols(self) -> list[Symbol]:
        """All symbols in definition order."""
        return list(self._symbols.values())

    def by_address(self) -> dict[int, str]:
        """Map each address to the first label defined there."""
        result: dict[int, str] = {}
        for symbol in self._symbols.values():
            result.setdefault(symbol.address, symbol.name)
        return result

    def similar(self, name: str) -> list[str]:
        """
        Find labels with similar names for error hints.

        Uses a simple edit distance heuristic.
        """
        name_upper = name.upper()
        similar = []
        for key, symbol in self._symbols.items():
            if abs(len(key) - len(name_upper)) <= 1 and _edit_distance(name_upper, key) <= 2:
                similar.append(symbol.name)
        return similar[:3]

    # Mapping protocol

    def __getitem__(self, name: str) -> int:
        return self._symbols[name.upper()].address

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self._symbols

    def __iter__(self) -> Iterator[str]:
        return (symbol.name for symbol in self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        entries = ", ".join(f"{s.name}=x{s.address:04X}" for s in self._symbols.values())
        return f"SymbolTable({entries})"


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current = [i + 1]
        for j, c2 in enumerate(s2):
            current.append(min(previous[j + 1] + 1, current[j] + 1, previous[j] + (c1 != c2)))
        previous = current
    return previous[-1]


# =============================================================================
# Line Sizing (shared by both passes)
# =============================================================================

def origin_operand(line: SourceLine) -> int:
    """
    Return the address named by a .ORIG line.

    Raises:
        MalformedOperandError: If the operand is missing or not a number
        OffsetOutOfRangeError: If the address does not fit in 16 bits
    """
    if len(line.operands) != 1 or line.operands[0].kind != TokenKind.IMMEDIATE:
        raise line.error(MalformedOperandError, ".ORIG takes one numeric address", line.operation)
    token = line.operands[0]
    value = parse_immediate(token.lexeme)
    if not 0 <= value <= WORD_MASK:
        raise OffsetOutOfRangeError(
            token.lexeme, value, 0, WORD_MASK, location=token.location, source_line=line.text
        )
    return value


def blkw_count(line: SourceLine) -> int:
    """
    Return the word count reserved by a .BLKW line.

    Raises:
        MalformedOperandError: If the operand is missing or not a number
        OffsetOutOfRangeError: If the count is negative or too large
    """
    if len(line.operands) != 1 or line.operands[0].kind != TokenKind.IMMEDIATE:
        raise line.error(MalformedOperandError, ".BLKW takes one numeric word count", line.operation)
    token = line.operands[0]
    count = parse_immediate(token.lexeme)
    if not 0 <= count <= WORD_MASK:
        raise OffsetOutOfRangeError(
            token.lexeme, count, 0, WORD_MASK, location=token.location, source_line=line.text
        )
    return count


def stringz_text(line: SourceLine) -> str:
    """
    Return the decoded text of a .STRINGZ line.

    Raises:
        MalformedOperandError: If the operand is not a single string literal
    """
    if len(line.operands) != 1 or line.operands[0].kind != TokenKind.STRING:
        raise line.error(MalformedOperandError, ".STRINGZ takes one quoted string", line.operation)
    return decode_string(line, line.operands[0])


def word_count(line: SourceLine) -> int:
    """
    Number of words a line occupies once encoded.

    Raises:
        AssemblerError: If a sizing operand (.BLKW count, .STRINGZ text) is bad
    """
    match line.mnemonic:
        case None | ".ORIG" | ".END":
            return 0
        case ".BLKW":
            return blkw_count(line)
        case ".STRINGZ":
            return len(stringz_text(line)) + 1
        case _:
            return 1


# =============================================================================
# Address Cursor
# =============================================================================

class AddressWalker:
    """
    Walks source lines with the address cursor.

    Both passes drive the same walker, so they agree on every address and
    report .ORIG and sizing problems identically (the collector drops the
    repeats). Each line up to and including .END is yielded together with
    the address it starts at, or None while no origin is established.

    Attributes:
        origin: Address from .ORIG, or None if none was accepted
        end_address: Cursor value when the walk stopped
    """

    def __init__(self, errors: ErrorCollector):
        self.errors = errors
        self.origin: Optional[int] = None
        self.end_address: Optional[int] = None

    def walk(self, lines: list[SourceLine]) -> Iterator[tuple[SourceLine, Optional[int]]]:
        cursor: Optional[int] = None
        seen_content = False
        missing_reported = False
        overflow_reported = False

        for index, line in enumerate(lines):
            if line.is_blank:
                yield line, cursor
                continue

            if line.mnemonic == ".ORIG":
                if self.origin is not None:
                    self.errors.add(line.error(
                        MalformedOperandError, "only one .ORIG is allowed per program", line.operation
                    ))
                elif seen_content:
                    self.errors.add(MissingOriginError(
                        ".ORIG must come before any other content",
                        location=line.operation.location,
                        source_line=line.text,
                    ))
                    missing_reported = True
                else:
                    if line.label is not None:
                        self.errors.add(line.error(
                            MalformedOperandError, "a label cannot be placed on a .ORIG line", line.label
                        ))
                    try:
                        self.origin = cursor = origin_operand(line)
                    except AssemblerError as e:
                        self.errors.add(e)
                        missing_reported = True
                yield line, cursor
                continue

            seen_content = True

            if cursor is None:
                if not missing_reported:
                    self.errors.add(MissingOriginError(location=line.location, source_line=line.text))
                    missing_reported = True
                yield line, None
                continue

            yield line, cursor

            if line.mnemonic == ".END":
                self._warn_trailing(lines[index + 1:])
                break

            try:
                size = word_count(line)
            except AssemblerError as e:
                self.errors.add(e)
                size = 0

            cursor += size
            if cursor > MEMORY_SIZE and not overflow_reported:
                self.errors.add(line.error(
                    MalformedOperandError,
                    f"program extends past the end of memory (x{MEMORY_SIZE - 1:04X})",
                    line.operation,
                ))
                overflow_reported = True

        if self.origin is None and not missing_reported:
            self.errors.add(MissingOriginError())

        self.end_address = cursor

    def _warn_trailing(self, rest: list[SourceLine]) -> None:
        trailing = [line for line in rest if not line.is_blank]
        if trailing:
            message = f"line {trailing[0].number}: content after .END is ignored"
            if message not in self.errors.warnings:
                self.errors.add_warning(message)
                logger.warning(message)


# =============================================================================
# Pass 1
# =============================================================================

class SymbolBuilder:
    """
    Pass 1 of the assembler.

    Walks source lines once and produces the symbol table plus every error
    found along the way. No code is emitted.

    Attributes:
        symbols: The table being built
        origin: Address from .ORIG, or None if none was seen
        end_address: Cursor value when the scan stopped
    """

    def __init__(self, max_errors: int = 100, errors: Optional[ErrorCollector] = None):
        self.symbols = SymbolTable()
        self.origin: Optional[int] = None
        self.end_address: Optional[int] = None
        self._errors = errors if errors is not None else ErrorCollector(max_errors)

    @property
    def errors(self) -> list[AssemblerError]:
        return self._errors.errors

    @property
    def warnings(self) -> list[str]:
        return self._errors.warnings

    def build(self, lines: list[SourceLine]) -> SymbolTable:
        """
        Run Pass 1 over the given lines.

        Returns:
            The completed symbol table (possibly partial if errors occurred)
        """
        walker = AddressWalker(self._errors)
        try:
            for line, address in walker.walk(lines):
                if address is None or line.label is None or line.mnemonic == ".ORIG":
                    continue
                try:
                    self.symbols.define(line.label.label_name, address, line.label.location, line.text)
                except DuplicateLabelError as e:
                    self._errors.add(e)
        except TooManyErrors:
            pass

        self.origin = walker.origin
        self.end_address = walker.end_address
        logger.debug(
            f"Pass 1: {len(self.symbols)} labels, "
            f"{len(self.errors)} errors, origin="
            f"{'none' if self.origin is None else f'x{self.origin:04X}'}"
        )
        return self.symbols


def build_symbols(tokens: Iterable[Token], max_errors: int = 100) -> tuple[SymbolTable, list[AssemblerError]]:
    """
    Run Pass 1 over a token stream.

    Args:
        tokens: Token stream from ``tokenize()``
        max_errors: Stop collecting after this many errors

    Returns:
        (symbol table, list of errors)
    """
    builder = SymbolBuilder(max_errors=max_errors)
    table = builder.build(split_lines(tokens))
    return table, list(builder.errors)
