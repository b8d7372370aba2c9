"""
lc3asm - LC-3 Assembler Command-Line Interface
==============================================

This module implements the command-line interface for the LC-3 assembler.

Usage Examples
--------------
Basic assembly:
    $ lc3asm hello.asm

With output file:
    $ lc3asm hello.asm -o hello.obj

Generate all output files:
    $ lc3asm hello.asm -o hello.obj -l hello.lst -s hello.sym

Show the token stream (what an editor highlighter sees):
    $ lc3asm --tokens hello.asm

Verbose mode:
    $ lc3asm -v hello.asm
"""

from pathlib import Path
from typing import Optional

import click

from lc3_sdk import __version__
from lc3_sdk.assembler import Assembler, TokenKind, tokenize
from lc3_sdk.cli import setup_logging
from lc3_sdk.cli.errors import handle_cli_exception
from lc3_sdk.config import ToolchainConfig


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output object file (default: input.obj)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the classified token stream instead of assembling",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lc3asm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    tokens: bool,
    verbose: bool,
) -> None:
    """
    Assemble LC-3 source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The object file holds big-endian 16-bit words: the start address,
    then the program image. Run it with lc3run.

    \b
    Examples:
        lc3asm hello.asm              # Outputs hello.obj
        lc3asm hello.asm -o out.obj   # Specify output file
        lc3asm --tokens hello.asm     # Dump tokens
    """
    config = ToolchainConfig.from_env()
    setup_logging(verbose, config)

    try:
        if tokens:
            _print_tokens(input_file)
            return

        output_file = output if output is not None else input_file.with_suffix(".obj")
        asm = Assembler(config)

        if verbose:
            click.echo(f"Assembling {input_file}...")

        image = asm.assemble_file(input_file)

        for warning in asm.result.warnings:
            click.echo(f"warning: {warning}", err=True)

        asm.write_obj(output_file)
        if verbose:
            click.echo(f"Wrote {len(image)} words to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Assembly complete: {len(image)} words at x{image.start:04X}")
            click.echo(f"Defined {len(asm.get_symbols())} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


def _print_tokens(input_file: Path) -> None:
    """Print one line per non-whitespace token: position, kind, lexeme."""
    for token in tokenize(input_file.read_text(), str(input_file)):
        if token.kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE):
            continue
        span = f"{token.line}:{token.column_start}-{token.column_end}"
        click.echo(f"{span:<12} {token.kind.name:<10} {token.lexeme!r}")


if __name__ == "__main__":
    main()
