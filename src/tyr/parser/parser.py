"""
Line parser for Tyr assembly.

Each source line becomes exactly one ``Instruction``. Label declarations are
resolved here: the parser binds the label name to an address in the symbol
table as it reads the line, so the VM never has to scan for labels.
"""
import logging
import re
from typing import List, Optional

from ..errors import IntegerParseFailure, LabelError, MissingOperandError
from ..vm.bytecode import (
    I64_MAX,
    I64_MIN,
    INTEGER_OPERAND,
    OPCODES_BY_MNEMONIC,
    TEXT_OPERAND,
    Instruction,
    Opcode,
)
from ..vm.symbols import SymbolTable

logger = logging.getLogger("tyr.parser")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class Parser:
    """
    Single-pass, line-at-a-time parser.

    ``line`` is the 1-based number of the next line to be parsed. A label
    declared on line ``n`` resolves to address ``n``, which is the index of
    the instruction that follows the label.
    """

    def __init__(self, symbols: Optional[SymbolTable] = None):
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.line = 1

    def parse_line(self, text: str) -> Instruction:
        """Parse one line. The line counter advances even when parsing fails."""
        try:
            return self._parse(text)
        finally:
            self.line += 1

    def _parse(self, text: str) -> Instruction:
        tokens = text.split()
        if not tokens:
            return Instruction.simple(Opcode.NOP)

        opcode = OPCODES_BY_MNEMONIC.get(tokens[0])
        if opcode is None:
            return self._parse_label(tokens, text)

        if opcode in INTEGER_OPERAND:
            return Instruction(opcode, self._extract_int(tokens, text))
        if opcode in TEXT_OPERAND:
            return Instruction(opcode, self._extract_arg(tokens, text))
        return Instruction.simple(opcode)

    def _parse_label(self, tokens: List[str], text: str) -> Instruction:
        label = tokens[0]
        if not label.endswith(":"):
            raise LabelError(
                f"Illegal label name '{label}' - labels must end with a colon",
                line_number=self.line, line=text,
            )

        name = label[:-1]
        if not name:
            raise LabelError("Empty label name", line_number=self.line, line=text)

        if self.symbols.is_duplicate(name):
            raise LabelError(
                f"Duplicate label '{name}' on line {self.line} "
                f"(first declared for address {self.symbols.get(name)})",
                line_number=self.line, line=text,
            )

        self.symbols.insert(name, self.line)
        logger.debug("label %s -> %d", name, self.line)
        return Instruction.label(name, self.line)

    def _extract_arg(self, tokens: List[str], text: str) -> str:
        if len(tokens) < 2:
            raise MissingOperandError(
                f"Missing operand for {tokens[0]}", line_number=self.line, line=text,
            )
        return tokens[1]

    def _extract_int(self, tokens: List[str], text: str) -> int:
        raw = self._extract_arg(tokens, text)
        if not _INTEGER_RE.fullmatch(raw):
            raise IntegerParseFailure(
                f"Invalid integer operand '{raw}' for {tokens[0]}",
                line_number=self.line, line=text,
            )
        value = int(raw)
        if not I64_MIN <= value <= I64_MAX:
            raise IntegerParseFailure(
                f"Integer operand '{raw}' for {tokens[0]} is out of 64-bit range",
                line_number=self.line, line=text,
            )
        return value
