"""
LC-3 SDK
========

A toolchain for the LC-3, the 16-bit instructional machine used in
introductory computer-organization courses: eight general-purpose
registers, a program counter, N/Z/P condition codes and 64K words of
memory.

The SDK has three layers:

- **Lexer**: classifies source text into tokens for editors and the
  assembler. Lexing never fails, and the tokens concatenate back to the
  exact source.
- **Assembler**: two passes. Pass 1 builds the symbol table, Pass 2
  encodes instructions and directives into an object image. All errors in
  a file are reported together.
- **Emulator**: fetch-decode-execute virtual machine with the built-in
  TRAP routines (GETC, OUT, PUTS, IN, PUTSP, HALT).

Quick Start
-----------
Assemble and run a program:
    >>> from lc3_sdk import assemble, Emulator
    >>> result = assemble(open("hello.asm").read())
    >>> emu = Emulator()
    >>> emu.load_image(result.image)
    >>> emu.run()

Highlight source in an editor:
    >>> from lc3_sdk import tokenize
    >>> for token in tokenize("ADD R1, R1, #1"):
    ...     print(token.kind.name, repr(token.lexeme))

Or use the command-line tools:
    $ lc3asm hello.asm -o hello.obj
    $ lc3run hello.obj

Version History
---------------
1.0.0 - Initial release with lexer, assembler, emulator and disassembler
"""

__version__ = "1.0.0"
__author__ = "LC-3 SDK Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from lc3_sdk.assembler import (
    Assembler,
    AssemblyFailed,
    AssemblyResult,
    Token,
    TokenKind,
    assemble,
    build_symbols,
    encode,
    tokenize,
)
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.disassembler import LC3Disassembler, disassemble_word
from lc3_sdk.emulator import (
    BufferConsole,
    ConditionCode,
    CPUState,
    Emulator,
    RunResult,
    StepOutcome,
    StopReason,
    TerminalConsole,
    load,
    run,
    step,
)
from lc3_sdk.errors import (
    LC3Error,
    SourceLocation,
    AssemblerError,
    MissingOriginError,
    DuplicateLabelError,
    UndefinedLabelError,
    InvalidRegisterError,
    OffsetOutOfRangeError,
    MalformedOperandError,
    TooManyErrors,
    ObjectFileError,
    ExecutionError,
    IllegalOpcodeError,
    UnknownTrapError,
    UnsupportedOpcodeError,
    ExecutionHaltedError,
)
from lc3_sdk.image import ObjectImage

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Lexer and assembler
    "tokenize",
    "Token",
    "TokenKind",
    "build_symbols",
    "encode",
    "assemble",
    "Assembler",
    "AssemblyFailed",
    "AssemblyResult",
    "ObjectImage",
    # Emulator
    "load",
    "step",
    "run",
    "Emulator",
    "CPUState",
    "ConditionCode",
    "StepOutcome",
    "StopReason",
    "RunResult",
    "BufferConsole",
    "TerminalConsole",
    # Disassembler
    "LC3Disassembler",
    "disassemble_word",
    # Configuration
    "ToolchainConfig",
    # Errors
    "LC3Error",
    "SourceLocation",
    "AssemblerError",
    "MissingOriginError",
    "DuplicateLabelError",
    "UndefinedLabelError",
    "InvalidRegisterError",
    "OffsetOutOfRangeError",
    "MalformedOperandError",
    "TooManyErrors",
    "ObjectFileError",
    "ExecutionError",
    "IllegalOpcodeError",
    "UnknownTrapError",
    "UnsupportedOpcodeError",
    "ExecutionHaltedError",
]
