"""End-to-end tests for the `tyr` command line."""

import os

import pytest
from click.testing import CliRunner

from tyr.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


def _program(programs_dir, name):
    return os.path.join(programs_dir, name)


def test_jmpz_output(runner, programs_dir):
    result = runner.invoke(cli, ["run", _program(programs_dir, "jmpz.tyr")])

    assert result.exit_code == 0
    assert result.output == "Goodbye!\n"


def test_run_completes_without_halt(runner, programs_dir):
    result = runner.invoke(cli, ["run", _program(programs_dir, "variables.tyr")])

    assert result.exit_code == 0
    assert "stored" in result.output


def test_run_fault_exits_nonzero(runner, programs_dir):
    result = runner.invoke(cli, ["run", _program(programs_dir, "divide_by_zero.tyr")])

    assert result.exit_code == 1


def test_run_parse_error_exits_nonzero(runner, programs_dir):
    result = runner.invoke(cli, ["run", _program(programs_dir, "duplicate_label.tyr")])

    assert result.exit_code == 1


def test_run_step_limit(runner, programs_dir):
    result = runner.invoke(cli, ["run", "--max-steps", "5", _program(programs_dir, "countdown.tyr")])

    assert result.exit_code == 1
    assert result.output.count("tick") == 1


def test_run_invalid_stack_size(runner, programs_dir):
    result = runner.invoke(cli, ["run", "--stack-size", "0", _program(programs_dir, "jmpz.tyr")])

    assert result.exit_code == 1


def test_run_missing_file(runner, tmp_path):
    result = runner.invoke(cli, ["run", str(tmp_path / "missing.tyr")])

    assert result.exit_code == 2


def test_check(runner, programs_dir):
    ok = runner.invoke(cli, ["check", _program(programs_dir, "countdown.tyr")])
    bad = runner.invoke(cli, ["check", _program(programs_dir, "duplicate_label.tyr")])

    assert ok.exit_code == 0
    assert "11 instructions" in ok.output
    assert bad.exit_code == 1


def test_disasm(runner, programs_dir):
    result = runner.invoke(cli, ["disasm", _program(programs_dir, "jmpz.tyr")])

    assert result.exit_code == 0
    assert "JUMP_IF_ZERO" in result.output
    assert "bye" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


@pytest.mark.parametrize("command", ["run", "check", "disasm"])
def test_undecodable_file(runner, tmp_path, command):
    path = tmp_path / "latin1.tyr"
    path.write_bytes(b"PRINT \xff\nHALT\n")

    result = runner.invoke(cli, [command, str(path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
