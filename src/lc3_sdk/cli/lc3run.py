"""
lc3run - LC-3 Emulator Command-Line Interface
=============================================

Runs an LC-3 program on the emulator with the terminal as its console.

PROGRAM may be an object file from lc3asm or an assembly source file
(.asm, .s, .lc3), which is assembled first.

Usage Examples
--------------
Run an object file:
    $ lc3run hello.obj

Assemble and run in one go:
    $ lc3run hello.asm

Script the program's keyboard input:
    $ lc3run echo.asm --input "abc"

Trace every instruction and show registers at the end:
    $ lc3run hello.asm --trace --registers

Exit Codes
----------
    0  Program halted
    1  Assembly error, bad object file, or execution error
    2  Invalid arguments or missing files
    3  Internal error
    4  Step limit reached before the program halted
"""

from pathlib import Path
from typing import Optional
import sys

import click

from lc3_sdk import __version__
from lc3_sdk.cli import setup_logging
from lc3_sdk.cli.errors import ExitCode, handle_cli_exception
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.disassembler import LC3Disassembler
from lc3_sdk.emulator import Emulator, StepOutcome, StopReason, TerminalConsole


@click.command()
@click.argument(
    "program",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-n", "--max-steps",
    type=click.IntRange(min=0),
    default=None,
    help="Stop after this many instructions (default: 1000000, or LC3_MAX_STEPS)",
)
@click.option(
    "-i", "--input", "input_text",
    default=None,
    help="Characters to feed to GETC/IN instead of reading the terminal",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print each executed instruction to stderr",
)
@click.option(
    "-r", "--registers",
    is_flag=True,
    help="Print the registers when the program stops",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lc3run")
def main(
    program: Path,
    max_steps: Optional[int],
    input_text: Optional[str],
    trace: bool,
    registers: bool,
    verbose: bool,
) -> None:
    """
    Run an LC-3 program.

    PROGRAM is an object file (.obj) or an assembly source file (.asm).

    \b
    Examples:
        lc3run hello.obj
        lc3run hello.asm --trace
        lc3run echo.asm --input "abc" --max-steps 5000
    """
    config = ToolchainConfig.from_env()
    if max_steps is not None:
        config.max_steps = max_steps
    setup_logging(verbose, config)

    try:
        emu = Emulator(config, console=TerminalConsole(input_text))
        emu.load_file(program)

        if trace:
            disasm = LC3Disassembler(emu.symbols)

            def print_step(outcome: StepOutcome) -> None:
                instr = disasm.disassemble_one(outcome.instruction, outcome.address)
                click.echo(f"[trace] {instr}", err=True)

            emu.on_step = print_step

        if verbose:
            click.echo(f"Running {program} from x{emu.pc:04X}...", err=True)

        result = emu.run()

        if registers:
            click.echo("", err=True)
            click.echo(emu.register_dump(), err=True)

        if verbose:
            click.echo(f"\n{result}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Load")

    match result.reason:
        case StopReason.ERROR:
            handle_cli_exception(result.error, verbose=verbose)
        case StopReason.MAX_STEPS:
            click.echo(
                f"\nStopped: step limit of {config.max_steps} reached at x{emu.pc:04X}", err=True
            )
            sys.exit(ExitCode.STEP_LIMIT)


if __name__ == "__main__":
    main()
