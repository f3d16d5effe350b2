"""
Tyr - a small stack-based bytecode interpreter.

Source lines are parsed into instructions (labels are resolved while
parsing) and executed against a fixed-capacity integer stack.
"""

__version__ = "0.1.0"

from .config import VMConfig, load_config
from .errors import ParseError, TyrError, VMFault
from .loader import load_file, load_lines, load_source
from .vm import VM, VMStatus, run_program

__all__ = [
    '__version__',
    'VMConfig', 'load_config',
    'TyrError', 'ParseError', 'VMFault',
    'load_file', 'load_lines', 'load_source',
    'VM', 'VMStatus', 'run_program',
]
