"""
Tyr Virtual Machine - instruction set, symbol table and execution engine.
"""

from .bytecode import Instruction, Opcode, Program
from .symbols import SymbolTable
from .vm import VM, VMState, VMStatus, run_program

__all__ = [
    'Instruction', 'Opcode', 'Program',
    'SymbolTable',
    'VM', 'VMState', 'VMStatus', 'run_program',
]
