"""
LC-3 CPU Emulator
=================

The instruction cycle of the LC-3, written as plain functions over a
CPUState so that the state can be inspected, compared and copied freely.

Instruction Cycle
-----------------
1. Fetch the word at PC (a halted machine raises ExecutionHaltedError)
2. Increment PC; PC-relative operands are measured from the new value
3. Decode the 4-bit opcode
4. Execute; ADD, AND, NOT, LD, LDI, LDR and LEA set the condition code

Condition Code
--------------
Exactly one of N, Z, P holds after a flag-setting instruction, so the
condition code is a single ConditionCode value. After ``load`` it is None
(cleared). A conditional branch tests its n/z/p bits against it; BR with
all three bits set is taken unconditionally, even while cleared.

Errors
------
IllegalOpcodeError (opcode 1101), UnsupportedOpcodeError (RTI) and
UnknownTrapError halt the machine before they are raised.

Example:
    >>> state = load(image)
    >>> console = BufferConsole()
    >>> result = run(state, console, max_steps=10_000)
    >>> result.reason
    <StopReason.HALTED: 1>
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional
import logging

from lc3_sdk.cpu import (
    IMM5_BITS,
    LINK_REGISTER,
    OFFSET6_BITS,
    PC_OFFSET9_BITS,
    PC_OFFSET11_BITS,
    REGISTER_COUNT,
    WORD_MASK,
    Opcode,
    field as bits,
    sign_extend,
    to_signed,
)
from lc3_sdk.emulator.console import BufferConsole, ConsoleProtocol, RecordingConsole
from lc3_sdk.emulator.memory import Memory
from lc3_sdk.emulator.traps import DEFAULT_IN_PROMPT, execute_trap, resolve_trap
from lc3_sdk.errors import (
    ExecutionError,
    ExecutionHaltedError,
    IllegalOpcodeError,
    UnsupportedOpcodeError,
)
from lc3_sdk.image import ObjectImage

logger = logging.getLogger(__name__)


# =============================================================================
# CPU State
# =============================================================================

class ConditionCode(Enum):
    """The N/Z/P condition code. The value is its nzp bit pattern."""
    NEGATIVE = 0b100
    ZERO = 0b010
    POSITIVE = 0b001

    @classmethod
    def from_word(cls, word: int) -> "ConditionCode":
        """Classify a 16-bit result by its two's-complement sign."""
        value = to_signed(word)
        if value < 0:
            return cls.NEGATIVE
        if value == 0:
            return cls.ZERO
        return cls.POSITIVE

    @property
    def letter(self) -> str:
        return self.name[0]


@dataclass
class CPUState:
    """
    Complete machine state.

    Attributes:
        registers: R0-R7, each a 16-bit unsigned value
        pc: Program counter
        condition: Current condition code, or None when cleared
        memory: 64K words
        running: False once HALT runs or an execution error occurs
    """
    registers: list[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    pc: int = 0
    condition: Optional[ConditionCode] = None
    memory: Memory = field(default_factory=Memory)
    running: bool = False

    def set_register(self, register: int, value: int) -> None:
        """Write a register and set the condition code from the value."""
        value &= WORD_MASK
        self.registers[register] = value
        self.condition = ConditionCode.from_word(value)

    def __repr__(self) -> str:
        regs = " ".join(f"R{i}=x{value:04X}" for i, value in enumerate(self.registers))
        cc = self.condition.letter if self.condition else "-"
        status = "running" if self.running else "halted"
        return f"CPUState(PC=x{self.pc:04X} {regs} CC={cc} {status})"


@dataclass(frozen=True)
class StepOutcome:
    """
    What a single step did.

    Attributes:
        address: Address the instruction was fetched from
        instruction: The executed word
        halted: True if the machine is no longer running after the step
        output: Console output written during the step
    """
    address: int
    instruction: int
    halted: bool
    output: str = ""


class StopReason(Enum):
    """Why ``run`` returned."""
    HALTED = auto()      # HALT trap executed (or machine already halted)
    MAX_STEPS = auto()   # Step budget exhausted
    ERROR = auto()       # An execution error stopped the machine


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of ``run``.

    Attributes:
        reason: Why execution stopped
        steps: Instructions executed by this call, counting one that failed
        state: The terminal CPU state (the same object that was run)
        output: Console output written during the run
        error: The execution error, when reason is ERROR
    """
    reason: StopReason
    steps: int
    state: CPUState
    output: str = ""
    error: Optional[ExecutionError] = None

    @property
    def halted(self) -> bool:
        return self.reason == StopReason.HALTED

    def __str__(self) -> str:
        match self.reason:
            case StopReason.HALTED:
                return f"Halted after {self.steps} steps"
            case StopReason.MAX_STEPS:
                return f"Stopped after {self.steps} steps (step limit reached)"
            case StopReason.ERROR:
                return f"Stopped after {self.steps} steps: {self.error}"


# =============================================================================
# Load / Step / Run
# =============================================================================

def load(image: ObjectImage) -> CPUState:
    """
    Create a fresh machine with `image` in memory.

    PC is set to the image's start address, registers are zero, the
    condition code is cleared and the machine is running.
    """
    state = CPUState(pc=image.start, running=True)
    state.memory.load(image)
    logger.debug(f"Loaded {len(image)} words at x{image.start:04X}")
    return state


def step(state: CPUState, console: Optional[ConsoleProtocol] = None,
         in_prompt: str = DEFAULT_IN_PROMPT) -> StepOutcome:
    """
    Execute exactly one instruction.

    Args:
        state: Machine to advance (mutated in place)
        console: Console for TRAP I/O (output is discarded if omitted)
        in_prompt: Prompt written by the IN trap

    Returns:
        StepOutcome describing the step

    Raises:
        ExecutionHaltedError: If the machine is not running
        IllegalOpcodeError: For the reserved opcode
        UnsupportedOpcodeError: For RTI
        UnknownTrapError: For a TRAP vector with no routine
    """
    address = state.pc
    instruction = state.memory.read(address)
    if not state.running:
        raise ExecutionHaltedError(address, instruction)

    state.pc = (address + 1) & WORD_MASK
    recorder = RecordingConsole(console if console is not None else BufferConsole())

    try:
        _execute(state, address, instruction, recorder, in_prompt)
    except ExecutionError:
        state.running = False
        raise

    return StepOutcome(address, instruction, halted=not state.running, output=recorder.captured)


def run(state: CPUState, console: Optional[ConsoleProtocol] = None, max_steps: int = 1_000_000,
        in_prompt: str = DEFAULT_IN_PROMPT,
        on_step: Optional[Callable[[StepOutcome], None]] = None) -> RunResult:
    """
    Step until the machine halts, an error occurs, or `max_steps` run.

    Never executes more than `max_steps` instructions. A machine that is
    already halted returns HALTED with zero steps.

    Args:
        state: Machine to run (mutated in place)
        console: Console for TRAP I/O
        max_steps: Step budget
        in_prompt: Prompt written by the IN trap
        on_step: Called with each StepOutcome (tracing)

    Returns:
        RunResult with the reason for stopping
    """
    steps = 0
    output: list[str] = []

    while state.running:
        if steps >= max_steps:
            logger.debug(f"Step budget of {max_steps} exhausted at PC=x{state.pc:04X}")
            return RunResult(StopReason.MAX_STEPS, steps, state, "".join(output))
        try:
            outcome = step(state, console, in_prompt)
        except ExecutionError as e:
            logger.debug(f"Execution error after {steps} steps: {e}")
            return RunResult(StopReason.ERROR, steps + 1, state, "".join(output), e)
        steps += 1
        output.append(outcome.output)
        if on_step is not None:
            on_step(outcome)

    logger.debug(f"Halted after {steps} steps at PC=x{state.pc:04X}")
    return RunResult(StopReason.HALTED, steps, state, "".join(output))


# =============================================================================
# Instruction Execution
# =============================================================================

def _execute(state: CPUState, address: int, instruction: int,
             console: ConsoleProtocol, in_prompt: str) -> None:
    """Execute one decoded instruction. PC has already been incremented."""
    regs = state.registers
    memory = state.memory
    pc = state.pc
    dr = bits(instruction, 11, 9)
    sr1 = bits(instruction, 8, 6)

    def operand2() -> int:
        if instruction & 0x20:
            return sign_extend(instruction, IMM5_BITS)
        return regs[bits(instruction, 2, 0)]

    def pc_offset9() -> int:
        return (pc + sign_extend(instruction, PC_OFFSET9_BITS)) & WORD_MASK

    def base_offset6() -> int:
        return (regs[sr1] + sign_extend(instruction, OFFSET6_BITS)) & WORD_MASK

    match Opcode(instruction >> 12):
        case Opcode.ADD:
            state.set_register(dr, regs[sr1] + operand2())
        case Opcode.AND:
            state.set_register(dr, regs[sr1] & operand2())
        case Opcode.NOT:
            state.set_register(dr, ~regs[sr1])
        case Opcode.BR:
            nzp = dr
            taken = nzp == 0b111 or (state.condition is not None and nzp & state.condition.value)
            if taken:
                state.pc = pc_offset9()
        case Opcode.JMP:
            state.pc = regs[sr1]
        case Opcode.JSR:
            if instruction & 0x0800:
                target = (pc + sign_extend(instruction, PC_OFFSET11_BITS)) & WORD_MASK
            else:
                target = regs[sr1]
            regs[LINK_REGISTER] = pc
            state.pc = target
        case Opcode.LD:
            state.set_register(dr, memory.read(pc_offset9()))
        case Opcode.LDI:
            state.set_register(dr, memory.read(memory.read(pc_offset9())))
        case Opcode.LDR:
            state.set_register(dr, memory.read(base_offset6()))
        case Opcode.LEA:
            state.set_register(dr, pc_offset9())
        case Opcode.ST:
            memory.write(pc_offset9(), regs[dr])
        case Opcode.STI:
            memory.write(memory.read(pc_offset9()), regs[dr])
        case Opcode.STR:
            memory.write(base_offset6(), regs[dr])
        case Opcode.TRAP:
            vector = resolve_trap(address, instruction)
            regs[LINK_REGISTER] = pc
            execute_trap(state, vector, console, in_prompt)
        case Opcode.RTI:
            raise UnsupportedOpcodeError("RTI", address, instruction)
        case Opcode.RESERVED:
            raise IllegalOpcodeError(address, instruction)
