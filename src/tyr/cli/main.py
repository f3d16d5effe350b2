# src/tyr/cli/main.py
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config import load_config
from ..errors import ConfigError, ParseError, VMFault
from ..loader import load_file
from ..vm import VM

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger("tyr.cli")


def _configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_or_exit(file):
    try:
        return load_file(file)
    except ParseError as error:
        err_console.print(f"[bold red]Parse error:[/bold red] {escape(str(error))}")
        if error.line is not None:
            err_console.print(f"  [dim]{error.line_number}:[/dim] {escape(error.line)}", highlight=False)
        sys.exit(1)
    except (OSError, UnicodeDecodeError) as error:
        err_console.print(f"[bold red]Cannot read {escape(str(file))}:[/bold red] {escape(str(error))}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="tyr")
def cli():
    """Tyr - stack-based bytecode interpreter"""
    pass


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--stack-size', type=int, default=None, help="Operand stack capacity (default 50).")
@click.option('--max-steps', type=int, default=None, help="Abort after this many instructions.")
@click.option('--trace', is_flag=True, help="Log every executed instruction.")
@click.option('-v', '--verbose', is_flag=True, help="Enable debug logging.")
def run(file, stack_size, max_steps, trace, verbose):
    """Run a Tyr program"""
    try:
        config = load_config(stack_size=stack_size, max_steps=max_steps, trace=trace or None)
    except ConfigError as error:
        err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(error))}")
        sys.exit(1)
    _configure_logging(verbose or config.trace)

    program = _load_or_exit(file)
    vm = VM(program, config=config, output=click.echo)
    try:
        status = vm.run()
    except VMFault as fault:
        err_console.print(f"[bold red]Runtime fault:[/bold red] {escape(str(fault))}")
        err_console.print(f"  [dim]sp={vm.sp} stack={escape(str(vm.stack_snapshot()))}[/dim]")
        sys.exit(1)

    logger.debug("exit status: %s", status.value)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def check(file):
    """Check that a Tyr file loads"""
    program = _load_or_exit(file)
    console.print(
        f"[bold green]OK:[/bold green] {len(program)} instructions, {len(program.symbols)} labels"
    )


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def disasm(file):
    """Show the instruction listing and label table of a Tyr file"""
    program = _load_or_exit(file)

    table = Table(title=f"Instructions ({program.source})")
    table.add_column("Addr", style="yellow", justify="right")
    table.add_column("Opcode", style="cyan")
    table.add_column("Operand", style="green")
    table.add_column("Labels", style="magenta")
    for addr, instr in enumerate(program):
        operand = "" if instr.operand is None else str(instr.operand)
        table.add_row(str(addr), instr.opcode.name, operand, ", ".join(program.labels_at(addr)))
    console.print(table)

    if len(program.symbols):
        labels = Table(title="Labels")
        labels.add_column("Name", style="magenta")
        labels.add_column("Address", style="yellow", justify="right")
        for name, address in sorted(program.symbols.items(), key=lambda kv: kv[1]):
            labels.add_row(name, str(address))
        console.print(labels)


if __name__ == "__main__":
    cli()
