"""
Program loading: source lines in, ``Program`` out.

Loading is fail-fast. The first ``ParseError`` stops it and is re-raised with
the source name attached; no partial program is returned.
"""
import io
import logging
from pathlib import Path
from typing import Iterable, Union

from .errors import ParseError
from .parser import Parser
from .vm.bytecode import Program
from .vm.symbols import SymbolTable

logger = logging.getLogger("tyr.loader")


def load_lines(lines: Iterable[str], source: str = "<string>") -> Program:
    """Parse every line and return the loaded program with a frozen symbol table."""
    parser = Parser(SymbolTable())
    instructions = []

    for line in lines:
        try:
            instructions.append(parser.parse_line(line.rstrip("\r\n")))
        except ParseError as error:
            error.source = source
            logger.warning("load of %s failed: %s", source, error.message)
            raise

    program = Program(instructions, parser.symbols.freeze(), source=source)
    logger.info("loaded %s: %d instructions, %d labels", source, len(program), len(program.symbols))
    return program


def load_source(text: str, source: str = "<string>") -> Program:
    # same line splitting as a file handle in text mode
    return load_lines(io.StringIO(text, newline=None), source=source)


def load_file(path: Union[str, Path]) -> Program:
    """Read a UTF-8 program file line by line. Open failures raise ``OSError``."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        return load_lines(handle, source=str(path))
