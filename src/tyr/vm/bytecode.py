"""
Instruction set for the Tyr VM.

Every operation is one ``Opcode`` tag plus at most one literal operand,
bundled in an immutable ``Instruction``. A loaded ``Program`` is the ordered
instruction tuple together with the frozen symbol table the parser built;
program addresses are indices into that tuple.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple, Union

from .symbols import SymbolTable

I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1


class Opcode(IntEnum):
    """Closed set of operations understood by the VM."""
    # Stack operations
    LOAD_CONST = 1      # Push literal
    LOAD_INDIRECT = 2   # Replace top address with stack[address]
    STORE_INDIRECT = 3  # Pop address, store the value below it there
    LOAD_VAR = 4        # LOAD_CONST + LOAD_INDIRECT
    STORE_VAR = 5       # LOAD_CONST + STORE_INDIRECT
    DUP = 6

    # Arithmetic / bitwise
    ADD = 10
    SUB = 11
    MUL = 12
    DIV = 13
    MOD = 14
    NEG = 15
    AND = 16
    OR = 17

    # Control flow
    JUMP = 20
    JUMP_IF_ZERO = 21
    JUMP_INDEXED = 22
    LABEL = 23
    HALT = 24

    # I/O
    PRINT = 30

    NOP = 255


# Source mnemonic for each opcode (LABEL has none; it is written "name:")
MNEMONICS = {
    Opcode.PRINT: "PRINT",
    Opcode.HALT: "HALT",
    Opcode.NOP: "NOP",
    Opcode.ADD: "ADD",
    Opcode.SUB: "SUB",
    Opcode.MUL: "MUL",
    Opcode.DIV: "DIV",
    Opcode.MOD: "MOD",
    Opcode.AND: "AND",
    Opcode.OR: "OR",
    Opcode.NEG: "NEG",
    Opcode.DUP: "DUP",
    Opcode.LOAD_INDIRECT: "LOAD",
    Opcode.STORE_INDIRECT: "STORE",
    Opcode.LOAD_CONST: "LOADC",
    Opcode.LOAD_VAR: "LOADV",
    Opcode.STORE_VAR: "STOREV",
    Opcode.JUMP: "JMP",
    Opcode.JUMP_IF_ZERO: "JMPZ",
    Opcode.JUMP_INDEXED: "JMPI",
}

OPCODES_BY_MNEMONIC = {mnemonic: opcode for opcode, mnemonic in MNEMONICS.items()}

INTEGER_OPERAND = frozenset({
    Opcode.LOAD_CONST, Opcode.LOAD_VAR, Opcode.STORE_VAR, Opcode.JUMP_INDEXED,
})
TEXT_OPERAND = frozenset({Opcode.PRINT, Opcode.JUMP, Opcode.JUMP_IF_ZERO})


@dataclass(frozen=True)
class Instruction:
    """One decoded instruction.

    ``operand`` is an ``int`` for LOADC/LOADV/STOREV/JMPI, a ``str`` for
    PRINT/JMP/JMPZ and for LABEL (the label name), otherwise ``None``.
    ``address`` is only set on LABEL and records the address the parser
    bound the name to.
    """
    opcode: Opcode
    operand: Union[int, str, None] = None
    address: Optional[int] = None

    @classmethod
    def print_(cls, text: str) -> "Instruction":
        return cls(Opcode.PRINT, text)

    @classmethod
    def load_const(cls, value: int) -> "Instruction":
        return cls(Opcode.LOAD_CONST, value)

    @classmethod
    def load_var(cls, value: int) -> "Instruction":
        return cls(Opcode.LOAD_VAR, value)

    @classmethod
    def store_var(cls, value: int) -> "Instruction":
        return cls(Opcode.STORE_VAR, value)

    @classmethod
    def jump(cls, label: str) -> "Instruction":
        return cls(Opcode.JUMP, label)

    @classmethod
    def jump_if_zero(cls, label: str) -> "Instruction":
        return cls(Opcode.JUMP_IF_ZERO, label)

    @classmethod
    def jump_indexed(cls, offset: int) -> "Instruction":
        return cls(Opcode.JUMP_INDEXED, offset)

    @classmethod
    def label(cls, name: str, address: int) -> "Instruction":
        return cls(Opcode.LABEL, name, address)

    @classmethod
    def simple(cls, opcode: Opcode) -> "Instruction":
        """Build an operand-less instruction (ADD, HALT, NOP, ...)."""
        if opcode in INTEGER_OPERAND or opcode in TEXT_OPERAND or opcode == Opcode.LABEL:
            raise ValueError(f"{opcode.name} requires an operand")
        return cls(opcode)

    def __str__(self) -> str:
        if self.opcode == Opcode.LABEL:
            return f"{self.operand}:"
        mnemonic = MNEMONICS[self.opcode]
        if self.operand is None:
            return mnemonic
        return f"{mnemonic} {self.operand}"


class Program:
    """
    A loaded program: instruction sequence plus resolved labels.
    Produced by the loader, consumed read-only by the VM.
    """
    def __init__(self, instructions, symbols: SymbolTable, source: str = "<string>"):
        self.instructions: Tuple[Instruction, ...] = tuple(instructions)
        self.symbols = symbols
        self.source = source

    def __len__(self):
        return len(self.instructions)

    def __getitem__(self, idx: int) -> Instruction:
        return self.instructions[idx]

    def __iter__(self):
        return iter(self.instructions)

    def labels_at(self, address: int):
        """Names of the labels that resolve to ``address``."""
        return [name for name, target in self.symbols.items() if target == address]

    def disassemble(self) -> str:
        """Human-readable listing: one line per instruction plus the label table."""
        lines = []
        lines.append(f"Program {self.source} ({len(self.instructions)} instructions, {len(self.symbols)} labels)")
        lines.append("=" * 60)

        lines.append("\nInstructions:")
        for i, instr in enumerate(self.instructions):
            marks = ", ".join(self.labels_at(i))
            if marks:
                lines.append(f"  {i:4d}  {str(instr):30s} <- {marks}")
            else:
                lines.append(f"  {i:4d}  {instr}")

        if len(self.symbols):
            lines.append("\nLabels:")
            for name, address in sorted(self.symbols.items(), key=lambda kv: kv[1]):
                lines.append(f"  {name:20s} {address}")

        return "\n".join(lines)

    def __repr__(self):
        return f"Program({self.source!r}, {len(self.instructions)} instructions, {len(self.symbols)} labels)"
