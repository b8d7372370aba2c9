"""
LC-3 Emulator - Main Orchestrator
=================================

This module provides the `Emulator` class, a stateful wrapper around the
functional CPU core (``load``/``step``/``run``) for tools and tests.

The Emulator class:
- Loads programs from object images, object files or assembly source
- Provides execution control (step, run, reset)
- Offers register, memory and console output inspection
- Calls an optional hook after every instruction (tracing)

Example usage:
    >>> from lc3_sdk.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_source('''
    ... .ORIG x3000
    ...     LEA R0, MSG
    ...     PUTS
    ...     HALT
    ... MSG .STRINGZ "HI"
    ... .END
    ... ''')
    >>> emu.run().reason
    <StopReason.HALTED: 1>
    >>> emu.output
    'HI'
"""

from pathlib import Path
from typing import Callable, Optional, Union
import logging

from lc3_sdk.assembler import Assembler
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.disassembler import LC3Disassembler
from lc3_sdk.emulator.console import BufferConsole, ConsoleProtocol
from lc3_sdk.emulator.cpu import (
    ConditionCode,
    CPUState,
    RunResult,
    StepOutcome,
    load,
    run,
    step,
)
from lc3_sdk.errors import ExecutionError, ExecutionHaltedError, LC3Error
from lc3_sdk.image import ObjectImage

logger = logging.getLogger(__name__)


# Source files are assembled; anything else is read as an object file
SOURCE_SUFFIXES = frozenset({".asm", ".s", ".lc3"})


class Emulator:
    """
    LC-3 emulator with a console and an optional step hook.

    Attributes:
        config: Toolchain configuration (step budget, IN prompt)
        console: Console collaborator used by TRAP routines
        state: Current CPU state
        on_step: Optional callable invoked with each StepOutcome
    """

    def __init__(self, config: Optional[ToolchainConfig] = None,
                 console: Optional[ConsoleProtocol] = None):
        """
        Initialize the emulator.

        Args:
            config: ToolchainConfig; defaults are used if None
            console: Console for TRAP I/O; a BufferConsole if None
        """
        self.config = config or ToolchainConfig()
        self.console: ConsoleProtocol = console if console is not None else BufferConsole()
        self.state = CPUState()
        self.on_step: Optional[Callable[[StepOutcome], None]] = None
        self._image: Optional[ObjectImage] = None
        self._symbols: dict[int, str] = {}
        self._total_steps = 0

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_image(self, image: ObjectImage) -> None:
        """Load an object image into a fresh machine."""
        self._image = image
        self.state = load(image)
        self._total_steps = 0
        logger.info(f"Loaded {len(image)} words at x{image.start:04X}")

    def load_obj(self, path: Union[str, Path]) -> None:
        """
        Load an object file.

        Raises:
            ObjectFileError: If the file is not a valid object file
        """
        self._symbols = {}
        self.load_image(ObjectImage.read(path))

    def load_source(self, source: str, filename: str = "<input>") -> None:
        """
        Assemble source text and load the result.

        Raises:
            AssemblyFailed: If the source has errors
        """
        assembler = Assembler(self.config)
        image = assembler.assemble_string(source, filename)
        self._symbols = assembler.result.symbols.by_address()
        self.load_image(image)

    def load_file(self, path: Union[str, Path]) -> None:
        """Load an assembly source file or an object file, by suffix."""
        path = Path(path)
        if path.suffix.lower() in SOURCE_SUFFIXES:
            self.load_source(path.read_text(), str(path))
        else:
            self.load_obj(path)

    def reset(self) -> None:
        """Reload the last image into a fresh machine."""
        if self._image is None:
            raise LC3Error("no program has been loaded")
        self.load_image(self._image)

    # =========================================================================
    # Execution Control
    # =========================================================================

    def step(self) -> StepOutcome:
        """
        Execute a single instruction.

        Raises:
            ExecutionError: If the instruction cannot be executed
        """
        try:
            outcome = step(self.state, self.console, self.config.in_prompt)
        except ExecutionHaltedError:
            raise
        except ExecutionError:
            self._total_steps += 1
            raise
        self._total_steps += 1
        if self.on_step is not None:
            self.on_step(outcome)
        return outcome

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """
        Run until HALT, an execution error, or the step budget is spent.

        Args:
            max_steps: Step budget; the config's max_steps if None

        Returns:
            RunResult describing why execution stopped
        """
        budget = self.config.max_steps if max_steps is None else max_steps
        result = run(self.state, self.console, budget, self.config.in_prompt, on_step=self.on_step)
        self._total_steps += result.steps
        logger.info(str(result))
        return result

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def registers(self) -> list[int]:
        """Copy of R0-R7."""
        return list(self.state.registers)

    @property
    def pc(self) -> int:
        return self.state.pc

    @property
    def condition(self) -> Optional[ConditionCode]:
        return self.state.condition

    @property
    def is_running(self) -> bool:
        return self.state.running

    @property
    def symbols(self) -> dict[int, str]:
        """Address-to-label map of the loaded program (empty for object files)."""
        return dict(self._symbols)

    @property
    def total_steps(self) -> int:
        """Instructions executed since the last load."""
        return self._total_steps

    @property
    def output(self) -> str:
        """
        Console output so far.

        Only available when the console records output (BufferConsole).
        """
        if not isinstance(self.console, BufferConsole):
            raise LC3Error("the console does not record output")
        return self.console.output

    def read_word(self, address: int) -> int:
        return self.state.memory.read(address)

    def write_word(self, address: int, value: int) -> None:
        self.state.memory.write(address, value)

    def register_dump(self) -> str:
        """
        Format registers for display.

        Example:
            R0 x0000  R1 x0000  R2 x0000  R3 x0000
            R4 x0000  R5 x0000  R6 x0000  R7 x3003
            PC x3003  CC Z
        """
        regs = self.state.registers
        rows = [
            "  ".join(f"R{i} x{regs[i]:04X}" for i in range(0, 4)),
            "  ".join(f"R{i} x{regs[i]:04X}" for i in range(4, 8)),
            f"PC x{self.state.pc:04X}  CC {self.state.condition.letter if self.state.condition else '-'}",
        ]
        return "\n".join(rows)

    def disassemble_at(self, address: int, count: int = 10) -> list[str]:
        """Disassemble `count` words of memory starting at `address`."""
        disasm = LC3Disassembler(self._symbols)
        words = self.state.memory.read_block(address, count)
        return [str(instr) for instr in disasm.disassemble(words, address)]

    def __repr__(self) -> str:
        return f"Emulator({self.state!r})"
