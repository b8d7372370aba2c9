#!/usr/bin/env python3
"""
LC-3 Toolchain Demo
===================

This script demonstrates how to use the LC-3 SDK to:
1. Assemble a source file and inspect errors, symbols and the listing
2. Load the program into the emulator and run it to completion
3. Single-step with a trace hook
4. Feed scripted keyboard input to a program

Usage:
    pip install -e .
    python examples/emulator_demo.py
"""

from pathlib import Path

from lc3_sdk import BufferConsole, Emulator, assemble
from lc3_sdk.assembler.codegen import format_listing
from lc3_sdk.disassembler import LC3Disassembler

PROGRAMS = Path(__file__).parent / "programs"


def main():
    # ==========================================================================
    # 1. Assemble
    # ==========================================================================
    source = (PROGRAMS / "countdown.asm").read_text()
    result = assemble(source, filename="countdown.asm")
    if not result.ok:
        for record in result.error_records():
            print(record)
        return

    print(f"Assembled {len(result.image.body())} words at x{result.image.start:04X}")
    for name, address in result.symbols.items():
        print(f"  {name:<8} x{address:04X}")
    print()
    print(format_listing(result.listing, result.symbols))

    # A broken source reports every problem at once
    broken = assemble(".ORIG x3000\nADD R9, R1, #40\nBR NOWHERE\n.END\n")
    print(f"\nBroken source: {[e['kind'] for e in broken.error_records()]}")

    # ==========================================================================
    # 2. Run
    # ==========================================================================
    emu = Emulator()
    emu.load_image(result.image)
    run = emu.run()
    print(f"\nStopped: {run.reason.name} after {run.steps} steps")
    print(f"Output: {emu.output!r}")
    print(emu.register_dump())

    # ==========================================================================
    # 3. Trace
    # ==========================================================================
    disasm = LC3Disassembler(result.symbols.by_address())
    emu.on_step = lambda outcome: print(
        f"  {disasm.disassemble_one(outcome.instruction, outcome.address)}"
    )
    emu.reset()
    for _ in range(4):
        emu.step()

    # ==========================================================================
    # 4. Scripted input
    # ==========================================================================
    emu = Emulator(console=BufferConsole("hello, world."))
    emu.load_file(PROGRAMS / "echo.asm")
    emu.run(max_steps=10_000)
    print(f"\nEcho: {emu.output!r}")


if __name__ == "__main__":
    main()
