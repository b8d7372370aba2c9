"""
LC-3 Assembler - Main Interface
===============================

This module provides the ``assemble`` entry point and the Assembler class.
Both coordinate the lexer, Pass 1 (symbol table) and Pass 2 (encoder) to
turn LC-3 source into an ObjectImage.

Assembly is all-or-nothing: any error suppresses the image, and every
error found in the source is returned together so that an editor can show
them all at once.

Example Usage
-------------
>>> from lc3_sdk.assembler import assemble
>>> result = assemble('''
... .ORIG x3000
...     LEA R0, MSG
...     PUTS
...     HALT
... MSG .STRINGZ "HI"
... .END
... ''')
>>> result.ok
True
>>> [hex(w) for w in result.image.body()[:3]]
['0xe002', '0xf022', '0xf025']

Command-Line Usage
------------------
    $ lc3asm hello.asm -o hello.obj -l hello.lst -s hello.sym
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from lc3_sdk.assembler.codegen import Encoder, ListingEntry, format_listing
from lc3_sdk.assembler.lexer import tokenize
from lc3_sdk.assembler.parser import split_lines
from lc3_sdk.assembler.symbols import SymbolBuilder, SymbolTable
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.errors import AssemblerError, ErrorCollector, LC3Error
from lc3_sdk.image import ObjectImage

logger = logging.getLogger(__name__)


# =============================================================================
# Assembly Result
# =============================================================================

@dataclass(frozen=True)
class AssemblyResult:
    """
    Outcome of one assembly run.

    Exactly one of these holds: ``image`` is set and ``errors`` is empty,
    or ``image`` is None and ``errors`` lists every problem found.

    Attributes:
        image: The object image, or None if assembly failed
        errors: Errors from both passes, in source order
        symbols: Symbol table from Pass 1 (possibly partial)
        listing: Listing entries from Pass 2
        warnings: Non-fatal diagnostics (e.g. content after .END)
    """
    image: Optional[ObjectImage]
    errors: tuple[AssemblerError, ...] = ()
    symbols: SymbolTable = field(default_factory=SymbolTable)
    listing: tuple[ListingEntry, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.image is not None

    def error_records(self) -> list[dict]:
        """Errors as {kind, line, message} records."""
        return [error.to_dict() for error in self.errors]


class AssemblyFailed(LC3Error):
    """
    Raised by the Assembler class when a source has errors.

    Attributes:
        errors: Every error found, in source order
        report: The formatted error report
    """

    def __init__(self, errors: list[AssemblerError], report: str):
        self.errors = errors
        self.report = report
        count = len(errors)
        super().__init__(f"assembly failed with {count} error{'s' if count != 1 else ''}")


def _source_order(error: AssemblerError) -> tuple[int, int]:
    if error.location is None:
        return (1 << 31, 0)
    return (error.location.line, error.location.column)


# =============================================================================
# Functional Interface
# =============================================================================

def assemble(source: str, filename: str = "<input>", max_errors: int = 100) -> AssemblyResult:
    """
    Assemble LC-3 source text.

    Runs Pass 1 and then Pass 2 over the same lines, collecting errors from
    both into one list. An error seen by both passes is reported once.

    Args:
        source: Assembly source code
        filename: Name used in error locations
        max_errors: Stop collecting after this many errors

    Returns:
        AssemblyResult with either an image or the list of errors
    """
    lines = split_lines(tokenize(source, filename))
    collector = ErrorCollector(max_errors)

    builder = SymbolBuilder(errors=collector)
    symbols = builder.build(lines)

    encoder = Encoder(symbols, errors=collector)
    image = encoder.encode(lines)

    errors = sorted(collector.errors, key=_source_order)
    if errors:
        image = None
        logger.debug(f"Assembly of {filename} failed: {len(errors)} errors")
    else:
        logger.debug(f"Assembled {filename}: {image!r}")

    return AssemblyResult(
        image=image,
        errors=tuple(errors),
        symbols=symbols,
        listing=tuple(encoder.listing),
        warnings=tuple(collector.warnings),
    )


# =============================================================================
# Assembler Class
# =============================================================================

class Assembler:
    """
    Main LC-3 assembler class.

    Wraps ``assemble`` with file handling and output writers, keeping the
    result of the last run for inspection.

    Example:
        asm = Assembler()
        asm.assemble_file("hello.asm")
        asm.write_obj("hello.obj")
        asm.write_listing("hello.lst")
    """

    def __init__(self, config: Optional[ToolchainConfig] = None):
        self._config = config or ToolchainConfig()
        self._result: Optional[AssemblyResult] = None
        self._collector = ErrorCollector(self._config.max_errors)

    def assemble_string(self, source: str, filename: str = "<input>") -> ObjectImage:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The assembled ObjectImage

        Raises:
            AssemblyFailed: If the source has any error
        """
        logger.info(f"Assembling {filename}")
        self._result = assemble(source, filename, self._config.max_errors)

        self._collector = ErrorCollector(self._config.max_errors)
        self._collector.errors.extend(self._result.errors)
        self._collector.warnings.extend(self._result.warnings)

        if not self._result.ok:
            raise AssemblyFailed(list(self._result.errors), self.get_error_report())

        logger.info(f"Assembled {len(self._result.image)} words at x{self._result.image.start:04X}")
        return self._result.image

    def assemble_file(self, filepath: str | Path) -> ObjectImage:
        """
        Assemble source code from a file.

        Raises:
            AssemblyFailed: If the source has any error
            FileNotFoundError: If the source file does not exist
        """
        filepath = Path(filepath)
        return self.assemble_string(filepath.read_text(), str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    @property
    def result(self) -> AssemblyResult:
        if self._result is None:
            raise LC3Error("nothing has been assembled yet")
        return self._result

    def get_image(self) -> ObjectImage:
        if self.result.image is None:
            raise LC3Error("the last assembly failed; no image is available")
        return self.result.image

    def get_symbols(self) -> dict[str, int]:
        """Get the symbol table as a plain {name: address} dict."""
        return dict(self.result.symbols.items())

    def get_listing(self) -> str:
        return format_listing(self.result.listing, self.result.symbols)

    def write_obj(self, filepath: str | Path) -> None:
        """Write the object file (start word, then the memory image)."""
        self.get_image().write(filepath)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing shows addresses, generated words, and source lines.
        """
        Path(filepath).write_text(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by lc3asm\n")
            for symbol in self.result.symbols.symbols():
                f.write(f"{symbol.name} x{symbol.address:04X}\n")

    def has_errors(self) -> bool:
        return self._collector.has_errors()

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            Error report string
        """
        return self._collector.report()
