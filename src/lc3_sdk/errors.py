"""
LC-3 SDK Error Hierarchy
========================

This module defines the exception hierarchy for the entire LC-3 SDK.
All exceptions inherit from LC3Error, allowing callers to catch all
toolchain errors with a single except clause if desired.

Exception Hierarchy
-------------------
LC3Error (base)
├── AssemblerError (assembler-related)
│   ├── MissingOriginError - no .ORIG, or .ORIG after other content
│   ├── DuplicateLabelError - label defined more than once
│   ├── UndefinedLabelError - operand references an unknown label
│   ├── InvalidRegisterError - register operand is not R0-R7
│   ├── OffsetOutOfRangeError - value does not fit its instruction field
│   ├── MalformedOperandError - wrong operand count, kind or syntax
│   └── TooManyErrors - error collection cap reached
├── ObjectFileError - malformed object file
└── ExecutionError (virtual machine)
    ├── IllegalOpcodeError - opcode outside the instruction set
    ├── UnknownTrapError - TRAP vector with no built-in routine
    ├── UnsupportedOpcodeError - RTI in the single-mode machine
    └── ExecutionHaltedError - step requested on a halted machine

Lexing never fails: unrecognized text becomes an UNKNOWN token, so there
is no lexer exception.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class LC3Error(Exception):
    """
    Base exception for all LC-3 SDK errors.

    Example:
        try:
            emulator.run()
        except LC3Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(LC3Error):
    """
    Base exception for all assembler errors.

    Assembly errors are collected across the whole source rather than
    raised one at a time, so each instance is also a plain record that an
    editor can render: ``kind``, ``line`` and ``message``.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    kind = "AssemblerError"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Source line number of the error, if known."""
        return self.location.line if self.location else None

    def to_dict(self) -> dict:
        """Return the {kind, line, message} record handed to the UI layer."""
        return {"kind": self.kind, "line": self.line, "message": self.message}

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            hello.asm:4:9: error: undefined label 'MSH'
                LEA R0, MSH
                        ^
            hint: did you mean 'MSG'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssemblerError):
            return NotImplemented
        return (self.kind, self.location, self.message) == (
            other.kind, other.location, other.message
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.location, self.message))


class MissingOriginError(AssemblerError):
    """
    The program has no .ORIG directive, or .ORIG appears after other content.

    Every program must start with `.ORIG address` before any instruction or
    data, because the address cursor has no defined starting point otherwise.
    """

    kind = "MissingOrigin"

    def __init__(
        self,
        message: str = "program must begin with .ORIG",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            message,
            location=location,
            hint="start the program with a line such as '.ORIG x3000'",
            source_line=source_line,
        )


class DuplicateLabelError(AssemblerError):
    """
    Label defined multiple times.

    Labels are case-insensitive, so `Loop` and `LOOP` collide. The hint
    points at the first definition.
    """

    kind = "DuplicateLabel"

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedLabelError(AssemblerError):
    """
    Reference to a label that is never defined.

    Raised during the second pass. Similarly spelled labels are offered
    as a hint to help catch typos.
    """

    kind = "UndefinedLabel"

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InvalidRegisterError(AssemblerError):
    """
    A register operand does not name R0-R7.

    Example:
        ADD R8, R1, R2   ; Error: there are only eight registers
    """

    kind = "InvalidRegister"

    def __init__(
        self,
        operand: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operand = operand
        super().__init__(
            f"'{operand}' is not a register (expected R0-R7)",
            location=location,
            source_line=source_line,
        )


class OffsetOutOfRangeError(AssemblerError):
    """
    A value does not fit the instruction field it is encoded into.

    Covers PC-relative offsets (9/11 bits), immediates (5 bits), base
    offsets (6 bits), trap vectors (8 bits) and 16-bit data words.

    When a PC-relative target is too far away, consider loading its
    address from a nearby `.FILL` with LDI, or jumping through a register.
    """

    kind = "OffsetOutOfRange"

    def __init__(
        self,
        operand: str,
        value: int,
        minimum: int,
        maximum: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operand = operand
        self.value = value
        self.minimum = minimum
        self.maximum = maximum

        super().__init__(
            f"'{operand}' is out of range (value {value}, allowed {minimum}..{maximum})",
            location=location,
            hint=f"the field holds values from {minimum} to {maximum}",
            source_line=source_line,
        )


class MalformedOperandError(AssemblerError):
    """
    An operand list is syntactically wrong.

    Examples:
        - Wrong number of operands (`ADD R1, R2`)
        - Wrong operand kind (`LD R1, #5` where a label is expected)
        - Unrecognized text on the line
        - Unterminated string or unknown escape sequence
    """

    kind = "MalformedOperand"


class TooManyErrors(AssemblerError):
    """
    Raised when too many errors have been encountered.

    This prevents a hopelessly broken source file from producing an
    unbounded report.
    """

    kind = "TooManyErrors"

    def __init__(self, message: str = "Too many errors"):
        super().__init__(message)


# =============================================================================
# Object File Exceptions
# =============================================================================

class ObjectFileError(LC3Error):
    """
    Invalid object file.

    Raised when reading an object file that:
    - Is shorter than its one-word header
    - Has an odd number of bytes
    - Holds more words than fit between its start address and xFFFF
    """
    pass


# =============================================================================
# Execution Exceptions
# =============================================================================

class ExecutionError(LC3Error):
    """
    Base exception for virtual machine errors.

    Execution errors are fatal to the current run: the machine is halted
    before the error is raised, and the error reports the address of the
    offending instruction and the fetched word.

    Attributes:
        message: The error description
        address: Address the instruction was fetched from
        instruction: The 16-bit instruction word
    """

    kind = "ExecutionError"

    def __init__(self, message: str, address: int, instruction: int):
        self.message = message
        self.address = address
        self.instruction = instruction
        super().__init__(
            f"{message} at x{address:04X} (instruction x{instruction:04X})"
        )

    @property
    def opcode(self) -> int:
        """The 4-bit opcode field of the offending instruction."""
        return (self.instruction >> 12) & 0xF


class IllegalOpcodeError(ExecutionError):
    """The opcode field selects no instruction (the reserved opcode 1101)."""

    kind = "IllegalOpcode"

    def __init__(self, address: int, instruction: int):
        super().__init__(
            f"illegal opcode {(instruction >> 12) & 0xF:04b}",
            address,
            instruction,
        )


class UnknownTrapError(ExecutionError):
    """A TRAP instruction names a vector with no built-in routine."""

    kind = "UnknownTrap"

    def __init__(self, address: int, instruction: int):
        self.vector = instruction & 0xFF
        super().__init__(f"unknown trap vector x{self.vector:02X}", address, instruction)


class UnsupportedOpcodeError(ExecutionError):
    """
    The instruction exists in the ISA but this machine cannot execute it.

    RTI requires supervisor mode, which the single-mode machine lacks.
    """

    kind = "UnsupportedOpcode"

    def __init__(self, mnemonic: str, address: int, instruction: int):
        self.mnemonic = mnemonic
        super().__init__(f"unsupported instruction {mnemonic}", address, instruction)


class ExecutionHaltedError(ExecutionError):
    """A step was requested after the machine stopped running."""

    kind = "ExecutionHalted"

    def __init__(self, address: int, instruction: int):
        super().__init__("machine is halted", address, instruction)


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    Both assembler passes use this to keep going after an error, so that
    every problem in a source file is reported in one run.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(UndefinedLabelError("LOOP", location))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[str] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Errors equal to one already collected are ignored.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        if error in self.errors:
            return
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"Too many errors ({self.max_errors}), stopping")

    def extend(self, errors: list[AssemblerError]) -> None:
        """Add several errors, preserving order."""
        for error in errors:
            self.add(error)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors and warnings
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
