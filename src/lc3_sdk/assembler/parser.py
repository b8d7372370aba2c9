"""
LC-3 Assembly Line Parser
=========================

This module groups the lexer's flat token stream into source lines. Both
assembler passes walk the same list of lines: Pass 1 to size them and
record labels, Pass 2 to encode them.

Line Structure
--------------
Every non-blank line has the shape::

    [LABEL[:]]  [OPCODE | DIRECTIVE  [operand {, operand}]]  [; comment]

| Example                    | label | operation | operands        |
|----------------------------|-------|-----------|-----------------|
| ``LOOP ADD R1, R1, #-1``   | LOOP  | ADD       | R1, R1, #-1     |
| ``     BRp LOOP``          |       | BRp       | LOOP            |
| ``MSG .STRINGZ "HI"``      | MSG   | .STRINGZ  | "HI"            |
| ``DONE``                   | DONE  |           |                 |

Structural problems (unrecognized text, stray separators, operands with no
operation) are recorded on the line as MalformedOperandError so that the
encoder can report them alongside operand errors.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from lc3_sdk.assembler.lexer import Token, TokenKind, detokenize
from lc3_sdk.errors import AssemblerError, MalformedOperandError, SourceLocation


# =============================================================================
# Source Line Data Class
# =============================================================================

@dataclass
class SourceLine:
    """
    One line of source, split into its parts.

    Attributes:
        number: Line number (1-indexed)
        text: The line's source text without its line break
        label: Label token defined on this line, if any
        operation: OPCODE or DIRECTIVE token, if any
        operands: Operand tokens in order (separators removed)
        problems: Structural errors found while splitting the line
        filename: Name of the source file
    """
    number: int
    text: str
    filename: str = "<input>"
    label: Optional[Token] = None
    operation: Optional[Token] = None
    operands: list[Token] = field(default_factory=list)
    problems: list[AssemblerError] = field(default_factory=list)

    @property
    def is_blank(self) -> bool:
        """True if the line holds only whitespace and comments."""
        return self.label is None and self.operation is None and not self.operands and not self.problems

    @property
    def mnemonic(self) -> Optional[str]:
        """Upper-case operation name (e.g. "ADD", ".FILL"), or None."""
        return self.operation.lexeme.upper() if self.operation else None

    @property
    def is_directive(self) -> bool:
        return self.operation is not None and self.operation.kind == TokenKind.DIRECTIVE

    @property
    def is_instruction(self) -> bool:
        return self.operation is not None and self.operation.kind == TokenKind.OPCODE

    def error(self, error_type: type[AssemblerError], message: str, token: Optional[Token] = None,
              **kwargs) -> AssemblerError:
        """Build an error of `error_type` located at `token` (or the line start)."""
        location = token.location if token else self.location
        return error_type(message, location=location, source_line=self.text, **kwargs)

    @property
    def location(self) -> SourceLocation:
        """Location of the first significant token, or column 1 of the line."""
        anchor = self.label or self.operation or (self.operands[0] if self.operands else None)
        if anchor is not None:
            return anchor.location
        return SourceLocation(self.filename, self.number, 1)


# =============================================================================
# Line Splitting
# =============================================================================

def split_lines(tokens: Iterable[Token]) -> list[SourceLine]:
    """
    Group a token stream into SourceLine records.

    Blank and comment-only lines are kept (with no parts) so that line
    numbers and listings stay aligned with the source.

    Args:
        tokens: Tokens from the lexer (trivia included)

    Returns:
        One SourceLine per physical line of source
    """
    lines: list[SourceLine] = []
    current: list[Token] = []

    for token in tokens:
        if token.kind == TokenKind.NEWLINE:
            lines.append(parse_line(token.line, current))
            current = []
            continue
        current.append(token)

    if current:
        lines.append(parse_line(current[-1].line, current))

    return lines


def parse_line(number: int, tokens: list[Token]) -> SourceLine:
    """
    Split the tokens of one line into label, operation and operands.

    Args:
        number: Line number (1-indexed)
        tokens: The line's tokens, excluding its NEWLINE

    Returns:
        SourceLine with any structural problems recorded
    """
    filename = tokens[0].filename if tokens else "<input>"
    line = SourceLine(number=number, text=detokenize(tokens), filename=filename)
    significant = [t for t in tokens if not t.is_trivia]

    for token in significant:
        if token.kind == TokenKind.UNKNOWN:
            if token.lexeme.startswith('"'):
                message = "unterminated string literal"
            else:
                message = f"unrecognized text '{token.lexeme}'"
            line.problems.append(line.error(MalformedOperandError, message, token))

    known = [t for t in significant if t.kind != TokenKind.UNKNOWN]
    if not known:
        return line

    index = 0
    if known[0].kind == TokenKind.LABEL:
        line.label = known[0]
        index = 1

    if index < len(known) and known[index].kind in (TokenKind.OPCODE, TokenKind.DIRECTIVE):
        line.operation = known[index]
        index += 1

    # Operands keep their UNKNOWN tokens so separators are checked in place
    start = 0
    if index:
        start = next(i for i, t in enumerate(significant) if t is known[index - 1]) + 1
    _collect_operands(line, significant[start:])
    return line


def _collect_operands(line: SourceLine, tokens: list[Token]) -> None:
    """
    Collect comma-separated operands, recording separator mistakes.

    UNKNOWN tokens fill an operand slot but are not collected; they were
    already reported by parse_line.
    """
    if not tokens:
        return

    if line.operation is None:
        stray = next((t for t in tokens if t.kind != TokenKind.UNKNOWN), None)
        if stray is not None:
            line.problems.append(line.error(
                MalformedOperandError,
                f"expected an instruction or directive, found '{stray.lexeme}'",
                stray,
            ))
        return

    expect_operand = True
    for token in tokens:
        if token.kind == TokenKind.SEPARATOR:
            if expect_operand:
                line.problems.append(line.error(MalformedOperandError, "unexpected ','", token))
            expect_operand = True
            continue
        if token.kind == TokenKind.UNKNOWN:
            expect_operand = False
            continue
        if token.kind in (TokenKind.OPCODE, TokenKind.DIRECTIVE):
            line.problems.append(line.error(
                MalformedOperandError,
                f"'{token.lexeme}' cannot be an operand; put each instruction on its own line",
                token,
            ))
        line.operands.append(token)
        expect_operand = False

    if expect_operand:
        line.problems.append(line.error(MalformedOperandError, "trailing ','", tokens[-1]))


# =============================================================================
# Operand Helpers
# =============================================================================

ESCAPE_SEQUENCES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "0": "\0",
}


def decode_string(line: SourceLine, token: Token) -> str:
    """
    Return the text of a STRING token with escape sequences applied.

    Raises:
        MalformedOperandError: For an unknown escape sequence
    """
    body = token.lexeme[1:-1]
    chars: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\":
            escape = body[index + 1:index + 2]
            if escape not in ESCAPE_SEQUENCES:
                raise line.error(MalformedOperandError, f"unknown escape sequence '\\{escape}'", token)
            chars.append(ESCAPE_SEQUENCES[escape])
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)
