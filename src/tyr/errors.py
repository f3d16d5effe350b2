"""
Error taxonomy for the Tyr interpreter.

Two families live here:

- ``ParseError`` and its subclasses are raised while a program is loaded.
  Loading stops at the first one, so no partial program ever reaches the VM.
- ``VMFault`` and its subclasses are raised while a program runs. A fault
  ends the run; the stack is left as it was when the fault happened.
"""

from typing import Any, Optional


class TyrError(Exception):
    """Base class for every error raised by the tyr package."""


class ConfigError(TyrError):
    """Raised when a configuration value is missing or invalid."""


# ---------------------------------------------------------------------------
# Load-time errors
# ---------------------------------------------------------------------------

class ParseError(TyrError):
    """Raised when a source line cannot be turned into an instruction."""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 line: Optional[str] = None, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.line = line
        self.source = source

    def format(self) -> str:
        location = self.source or "<string>"
        if self.line_number is not None:
            location = f"{location}:{self.line_number}"
        return f"{location}: {self.message}"

    def __str__(self) -> str:
        if self.line_number is None and self.source is None:
            return self.message
        return self.format()


class IntegerParseFailure(ParseError):
    """Operand is not a valid signed 64-bit integer."""


class LabelError(ParseError):
    """Label declaration is malformed or already declared."""


class MissingOperandError(ParseError):
    """A mnemonic that needs an operand was given none."""


# ---------------------------------------------------------------------------
# Run-time faults
# ---------------------------------------------------------------------------

class VMFault(TyrError):
    """Unrecoverable run-time condition that aborts execution."""

    def __init__(self, message: str, pc: Optional[int] = None, instruction: Any = None):
        super().__init__(message)
        self.message = message
        self.pc = pc
        self.instruction = instruction

    def __str__(self) -> str:
        if self.pc is None:
            return self.message
        if self.instruction is None:
            return f"{self.message} (pc={self.pc})"
        return f"{self.message} (pc={self.pc}, instruction '{self.instruction}')"


class StackOverflow(VMFault):
    """Push attempted with the stack already at capacity."""


class StackUnderflow(VMFault):
    """Pop attempted below the sentinel slot."""


class IllegalAddress(VMFault):
    """Negative or out-of-range address used for indirect access or an indexed jump."""


class IllegalJumpTarget(VMFault):
    """Jump to a label that was never declared."""


class ArithmeticFault(VMFault):
    """Division by zero or a result outside the signed 64-bit range."""


class StepLimitExceeded(VMFault):
    """Raised when a run executes more instructions than its step limit allows."""

    def __init__(self, max_steps: int, pc: Optional[int] = None, instruction: Any = None):
        super().__init__(f"Step limit exceeded: {max_steps} instructions", pc, instruction)
        self.max_steps = max_steps
