"""
Execution engine for Tyr.

Fetch-execute loop over a loaded ``Program`` and a fixed-capacity integer
stack. Slot 0 of the stack is a sentinel base cell; pushes fill slots
``1..stack_size``. ``_increment_sp`` and ``_decrement_sp`` are the only code
that moves the stack pointer.

A run ends in one of three ways:
 - HALT executes -> ``VMStatus.HALTED``
 - pc runs past the last instruction -> ``VMStatus.COMPLETED``
 - a ``VMFault`` is raised; nothing is rolled back
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional
import logging

from ..config import VMConfig
from ..errors import (
    ArithmeticFault,
    IllegalAddress,
    IllegalJumpTarget,
    StackOverflow,
    StackUnderflow,
    StepLimitExceeded,
    VMFault,
)
from .bytecode import I64_MAX, I64_MIN, Instruction, Opcode, Program

logger = logging.getLogger("tyr.vm")


class VMStatus(Enum):
    RUNNING = "running"
    HALTED = "halted"
    COMPLETED = "completed"


@dataclass
class VMState:
    pc: int = 0
    sp: int = 0
    stack: List[int] = field(default_factory=list)
    steps: int = 0


def _check_i64(value: int) -> int:
    if not I64_MIN <= value <= I64_MAX:
        raise ArithmeticFault(f"Integer overflow: {value} does not fit in 64 bits")
    return value


def _trunc_div(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticFault("Division by zero")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _trunc_mod(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticFault("Modulo by zero")
    # sign follows the dividend
    return a - b * _trunc_div(a, b)


# top OP below: the most recently pushed value is the left operand
_BINARY = {
    Opcode.ADD: lambda top, below: top + below,
    Opcode.SUB: lambda top, below: top - below,
    Opcode.MUL: lambda top, below: top * below,
    Opcode.DIV: _trunc_div,
    Opcode.MOD: _trunc_mod,
    Opcode.AND: lambda top, below: top & below,
    Opcode.OR: lambda top, below: top | below,
}


class VM:
    def __init__(self, program: Program, config: Optional[VMConfig] = None,
                 output: Optional[Callable[[str], None]] = None):
        self.program = program
        # read-only from here on
        self.symbols = program.symbols
        self.config = config or VMConfig()
        self.capacity = self.config.stack_size
        self.output = output or print
        self.state = VMState(stack=[0] * (self.capacity + 1))
        self.status = VMStatus.RUNNING

    # -----------------------
    # Inspection
    # -----------------------
    @property
    def pc(self) -> int:
        return self.state.pc

    @property
    def sp(self) -> int:
        return self.state.sp

    @property
    def depth(self) -> int:
        """Number of values pushed above the sentinel slot."""
        return self.state.sp

    @property
    def top(self) -> int:
        return self.state.stack[self.state.sp]

    def stack_snapshot(self) -> List[int]:
        """Live stack values, bottom first (sentinel excluded)."""
        return list(self.state.stack[1:self.state.sp + 1])

    # -----------------------
    # Driver
    # -----------------------
    def run(self) -> VMStatus:
        while self.status is VMStatus.RUNNING:
            self.step()
        logger.info("%s finished: %s after %d steps", self.program.source, self.status.value, self.state.steps)
        return self.status

    def step(self) -> VMStatus:
        """Execute a single instruction and return the resulting status."""
        if self.status is not VMStatus.RUNNING:
            return self.status

        pc = self.state.pc
        if pc >= len(self.program):
            self.status = VMStatus.COMPLETED
            return self.status

        instr = self.program[pc]
        max_steps = self.config.max_steps
        if max_steps is not None and self.state.steps >= max_steps:
            fault = StepLimitExceeded(max_steps, pc, instr)
            logger.warning("fault: %s", fault)
            raise fault

        self.state.steps += 1
        if self.config.trace:
            logger.debug("pc=%04d sp=%02d top=%d  %s", pc, self.state.sp, self.top, instr)

        try:
            target = self._execute(instr)
        except VMFault as fault:
            if fault.pc is None:
                fault.pc = pc
                fault.instruction = instr
            logger.warning("fault: %s", fault)
            raise

        # Jumps land on their target; everything else falls through
        self.state.pc = pc + 1 if target is None else target
        return self.status

    def _execute(self, instr: Instruction) -> Optional[int]:
        """Run one instruction. Returns the jump target, or None to fall through."""
        op = instr.opcode
        if op == Opcode.LOAD_CONST:
            self._load_const(instr.operand)
        elif op in _BINARY:
            self._binary(_BINARY[op])
        elif op == Opcode.NEG:
            self.state.stack[self.state.sp] = _check_i64(-self.top)
        elif op == Opcode.DUP:
            value = self.top
            self._increment_sp()
            self.state.stack[self.state.sp] = value
        elif op == Opcode.LOAD_INDIRECT:
            self._load_indirect()
        elif op == Opcode.STORE_INDIRECT:
            self._store_indirect()
        elif op == Opcode.LOAD_VAR:
            self._load_const(instr.operand)
            self._load_indirect()
        elif op == Opcode.STORE_VAR:
            self._load_const(instr.operand)
            self._store_indirect()
        elif op == Opcode.JUMP:
            return self._resolve(instr.operand)
        elif op == Opcode.JUMP_IF_ZERO:
            if self.top == 0:
                return self._resolve(instr.operand)
            self._decrement_sp()
        elif op == Opcode.JUMP_INDEXED:
            return self._jump_indexed(instr.operand)
        elif op == Opcode.PRINT:
            self.output(instr.operand)
        elif op == Opcode.HALT:
            self.status = VMStatus.HALTED
            return self.state.pc
        elif op in (Opcode.LABEL, Opcode.NOP):
            pass
        else:
            raise VMFault(f"Unknown opcode {op!r}")
        return None

    # -----------------------
    # Stack pointer gatekeepers
    # -----------------------
    def _increment_sp(self):
        if self.state.sp == self.capacity:
            raise StackOverflow(f"Stack overflow: capacity {self.capacity} exceeded")
        self.state.sp += 1

    def _decrement_sp(self):
        if self.state.sp == 0:
            raise StackUnderflow("Stack underflow")
        self.state.sp -= 1

    # -----------------------
    # Instruction helpers
    # -----------------------
    def _load_const(self, value: int):
        self._increment_sp()
        self.state.stack[self.state.sp] = value

    def _binary(self, fn: Callable[[int, int], int]):
        self._decrement_sp()
        stack, sp = self.state.stack, self.state.sp
        stack[sp] = _check_i64(fn(stack[sp + 1], stack[sp]))

    def _stack_address(self, value: int) -> int:
        if value < 0 or value > self.capacity:
            raise IllegalAddress(f"Illegal stack address {value} (valid range 0..{self.capacity})")
        return value

    def _load_indirect(self):
        address = self._stack_address(self.top)
        self.state.stack[self.state.sp] = self.state.stack[address]

    def _store_indirect(self):
        address = self._stack_address(self.top)
        self._decrement_sp()
        self.state.stack[address] = self.state.stack[self.state.sp]

    def _resolve(self, label: str) -> int:
        address = self.symbols.get(label)
        if address is None:
            raise IllegalJumpTarget(f"Illegal jump target '{label}'")
        return address

    def _jump_indexed(self, offset: int) -> int:
        address = self.top
        if address < 0:
            raise IllegalAddress(f"Illegal jump address {address}")
        self._decrement_sp()
        target = address + offset
        if target < 0:
            raise IllegalAddress(f"Illegal jump address {address} + {offset}")
        return target


def run_program(program: Program, config: Optional[VMConfig] = None,
                output: Optional[Callable[[str], None]] = None) -> VMStatus:
    """Convenience wrapper: build a VM for ``program`` and run it to the end."""
    return VM(program, config=config, output=output).run()
