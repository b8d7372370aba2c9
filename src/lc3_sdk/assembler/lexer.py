"""
LC-3 Assembly Language Lexer
============================

This module implements the lexer (tokenizer) for LC-3 assembly language.
It converts source text into a flat stream of classified tokens that both
the assembler passes and an editor's syntax highlighter consume.

The lexer is *total*: it never raises. Text it cannot classify becomes an
UNKNOWN token, so highlighting degrades gracefully and the assembler can
report the problem with a precise location.

It is also *lossless*: whitespace, separators, comments and newlines are
tokens too, so concatenating every lexeme reproduces the input exactly.

Token Kinds
-----------
- OPCODE: Instruction mnemonics and trap aliases (ADD, BRnz, HALT, ...)
- DIRECTIVE: .ORIG, .FILL, .BLKW, .STRINGZ, .END
- REGISTER: R followed by digits (R0-R7 are valid; R8 is caught later)
- IMMEDIATE: Hex (x3000), decimal (#-5), or bare decimal (42)
- LABEL: Identifiers, optionally ending in ':' at a definition
- STRING: Double-quoted text, with backslash escapes honored
- COMMENT: ';' to end of line
- SEPARATOR: ','
- WHITESPACE: Runs of spaces and tabs
- NEWLINE: '\\n', '\\r\\n' or '\\r'
- UNKNOWN: Anything else, including unterminated strings

Classification is case-insensitive for mnemonics, directives, registers
and hex prefixes. Numeric range checks happen at encode time, never here.

Example
-------
>>> from lc3_sdk.assembler.lexer import tokenize
>>> for token in tokenize("LOOP ADD R1, R1, #-1"):
...     print(token)
Token(LABEL, 'LOOP', 1:0-4)
Token(WHITESPACE, ' ', 1:4-5)
Token(OPCODE, 'ADD', 1:5-8)
...
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator
import re

from lc3_sdk.cpu import MNEMONICS, DIRECTIVES
from lc3_sdk.errors import SourceLocation


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """Lexical categories of LC-3 assembly source."""

    OPCODE = auto()
    DIRECTIVE = auto()
    REGISTER = auto()
    IMMEDIATE = auto()
    LABEL = auto()
    STRING = auto()
    COMMENT = auto()
    SEPARATOR = auto()
    WHITESPACE = auto()
    NEWLINE = auto()
    UNKNOWN = auto()


# Kinds that carry no meaning for the assembler
TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.COMMENT, TokenKind.NEWLINE})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single classified run of source text.

    Columns are 0-based and half-open, so for the text of the token's line
    ``line_text[column_start:column_end] == lexeme``.

    Attributes:
        kind: The TokenKind classification
        lexeme: The exact source text
        line: Line number in source (1-indexed)
        column_start: First column of the lexeme (0-based)
        column_end: Column just past the lexeme
        filename: Name of the source file
    """
    kind: TokenKind
    lexeme: str
    line: int
    column_start: int
    column_end: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        return (
            f"Token({self.kind.name}, {self.lexeme!r}, "
            f"{self.line}:{self.column_start}-{self.column_end})"
        )

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation (1-indexed column) for error reporting."""
        return SourceLocation(self.filename, self.line, self.column_start + 1)

    @property
    def is_trivia(self) -> bool:
        """True for whitespace, comments and newlines."""
        return self.kind in TRIVIA

    @property
    def label_name(self) -> str:
        """The label name without a trailing definition colon."""
        return self.lexeme[:-1] if self.lexeme.endswith(":") else self.lexeme

    def to_dict(self) -> dict:
        """Return the span record handed to an editor's highlighter."""
        return {
            "kind": self.kind.name.lower(),
            "lexeme": self.lexeme,
            "line": self.line,
            "column_start": self.column_start,
            "column_end": self.column_end,
        }


# =============================================================================
# Word Classification
# =============================================================================

REGISTER_PATTERN = re.compile(r"[Rr][0-9]+")
IMMEDIATE_PATTERN = re.compile(r"[xX][0-9a-fA-F]+|#[+-]?[0-9]+|[+-]?[0-9]+")
LABEL_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*:?")

# Characters that end a word
WORD_DELIMITERS = frozenset(" \t\f\v\r\n,;\"")


def classify_word(word: str) -> TokenKind:
    """
    Classify a delimited word of source text.

    Priority order: opcode, directive, register, immediate, label. A word
    matching none of them is UNKNOWN.
    """
    upper = word.upper()
    if upper in MNEMONICS:
        return TokenKind.OPCODE
    if upper in DIRECTIVES:
        return TokenKind.DIRECTIVE
    if REGISTER_PATTERN.fullmatch(word):
        return TokenKind.REGISTER
    if IMMEDIATE_PATTERN.fullmatch(word):
        return TokenKind.IMMEDIATE
    if LABEL_PATTERN.fullmatch(word):
        return TokenKind.LABEL
    return TokenKind.UNKNOWN


def parse_immediate(lexeme: str) -> int:
    """
    Convert an IMMEDIATE lexeme to an integer.

    Hex literals are unsigned (xFFFF is 65535); decimal literals keep their
    sign. Whether the value fits is decided by the encoder.

    Raises:
        ValueError: If the lexeme is not an immediate
    """
    if lexeme[:1] in ("x", "X"):
        return int(lexeme[1:], 16)
    if lexeme.startswith("#"):
        return int(lexeme[1:], 10)
    return int(lexeme, 10)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes LC-3 assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Each call starts a fresh scan, so the lexer may be iterated any
        number of times.

        Yields:
            Token objects covering every character of the source
        """
        source = self.source
        length = len(source)
        pos = 0
        line = 1
        line_start = 0

        while pos < length:
            start = pos
            char = source[pos]

            if char == "\n" or char == "\r":
                pos += 2 if source.startswith("\r\n", pos) else 1
                yield self._token(TokenKind.NEWLINE, start, pos, line, line_start)
                line += 1
                line_start = pos
                continue

            if char.isspace():
                while pos < length and source[pos].isspace() and source[pos] not in "\r\n":
                    pos += 1
                kind = TokenKind.WHITESPACE
            elif char == ";":
                pos = self._end_of_line(pos)
                kind = TokenKind.COMMENT
            elif char == ",":
                pos += 1
                kind = TokenKind.SEPARATOR
            elif char == '"':
                pos, terminated = self._scan_string(pos)
                kind = TokenKind.STRING if terminated else TokenKind.UNKNOWN
            else:
                while pos < length and source[pos] not in WORD_DELIMITERS:
                    pos += 1
                kind = classify_word(source[start:pos])

            yield self._token(kind, start, pos, line, line_start)

    def __iter__(self) -> Iterator[Token]:
        return self.tokenize()

    # =========================================================================
    # Scanning Helpers
    # =========================================================================

    def _end_of_line(self, pos: int) -> int:
        """Return the position of the next line break (or end of source)."""
        while pos < len(self.source) and self.source[pos] not in "\r\n":
            pos += 1
        return pos

    def _scan_string(self, pos: int) -> tuple[int, bool]:
        """
        Scan a double-quoted string starting at the opening quote.

        Returns:
            (position after the string, whether a closing quote was found).
            An unterminated string runs to the end of the line.
        """
        source = self.source
        pos += 1
        while pos < len(source) and source[pos] not in "\r\n":
            if source[pos] == "\\" and pos + 1 < len(source) and source[pos + 1] not in "\r\n":
                pos += 2
                continue
            if source[pos] == '"':
                return pos + 1, True
            pos += 1
        return pos, False

    def _token(self, kind: TokenKind, start: int, end: int, line: int, line_start: int) -> Token:
        return Token(
            kind=kind,
            lexeme=self.source[start:end],
            line=line,
            column_start=start - line_start,
            column_end=end - line_start,
            filename=self.filename,
        )


# =============================================================================
# Restartable Token Stream
# =============================================================================

class TokenStream:
    """
    A lazy, restartable sequence of tokens.

    Nothing is scanned until the stream is iterated, and every iteration
    rescans from the start, so several consumers can walk the same stream.
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def __iter__(self) -> Iterator[Token]:
        return Lexer(self.source, self.filename).tokenize()

    def __repr__(self) -> str:
        return f"TokenStream({self.filename!r}, {len(self.source)} chars)"


def tokenize(source: str, filename: str = "<input>") -> TokenStream:
    """
    Tokenize source text.

    Never fails: unrecognized text is returned as UNKNOWN tokens.

    Args:
        source: LC-3 assembly source
        filename: Name used in token locations

    Returns:
        A restartable TokenStream
    """
    return TokenStream(source, filename)


def detokenize(tokens: Iterable[Token]) -> str:
    """Concatenate lexemes back into source text."""
    return "".join(token.lexeme for token in tokens)
