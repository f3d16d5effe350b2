"""Program loading from strings, iterables and files."""

import os

import pytest

from tyr.errors import IntegerParseFailure, LabelError
from tyr.loader import load_file, load_lines, load_source
from tyr.vm.bytecode import Instruction, Opcode


def test_load_source_addresses_match_indices():
    program = load_source("LOADC 1\nloop:\nADD\nJMP loop")

    assert len(program) == 4
    assert program[1] == Instruction.label("loop", 2)
    assert program[2] == Instruction(Opcode.ADD)
    # label resolves to the instruction after it
    assert program.symbols.get("loop") == 2
    assert program.labels_at(2) == ["loop"]
    assert program.symbols.frozen


def test_load_lines_strips_newlines():
    program = load_lines(["PRINT hi\n", "HALT\r\n"])
    assert list(program) == [Instruction.print_("hi"), Instruction(Opcode.HALT)]


def test_load_stops_at_first_error():
    seen = []

    def lines():
        for text in ("NOP", "LOADC x", "bad"):
            seen.append(text)
            yield text

    with pytest.raises(IntegerParseFailure) as exc:
        load_lines(lines(), source="prog.tyr")

    assert seen == ["NOP", "LOADC x"]
    assert exc.value.source == "prog.tyr"
    assert str(exc.value).startswith("prog.tyr:2:")


def test_load_file(programs_dir):
    program = load_file(os.path.join(programs_dir, "countdown.tyr"))

    assert program.symbols.get("loop") == 2
    assert program.symbols.get("done") == 9
    assert program.source.endswith("countdown.tyr")


def test_load_file_duplicate_label(programs_dir):
    with pytest.raises(LabelError) as exc:
        load_file(os.path.join(programs_dir, "duplicate_label.tyr"))
    assert exc.value.line_number == 4


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_file(tmp_path / "missing.tyr")


def test_disassemble_lists_labels():
    listing = load_source("start:\nLOADC 2\nJMP start").disassemble()

    assert "3 instructions, 1 labels" in listing
    assert "LOADC 2" in listing
    assert "<- start" in listing
    assert "JMP start" in listing


def test_source_and_file_split_lines_alike(tmp_path):
    text = "JMP end\nPRINT a\u2028b\r\nend:\rPRINT reached\n"
    path = tmp_path / "separators.tyr"
    path.write_bytes(text.encode("utf-8"))

    from_source = load_source(text)
    from_file = load_file(path)

    assert len(from_source) == len(from_file) == 4
    assert list(from_source) == list(from_file)
    assert dict(from_source.symbols.items()) == dict(from_file.symbols.items()) == {"end": 3}
