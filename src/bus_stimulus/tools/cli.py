#
# Bus Stimulus Engine - Command Line Interface
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Click-based CLI for checking and dry-running stimulus scripts.
#

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bus_stimulus.engine.config import (
    EngineConfig, PRELOAD_POLICIES, DEFAULT_PRELOAD_TIMEOUT, DEFAULT_POLL_INTERVAL, DEFAULT_MAX_POLLS,
)
from bus_stimulus.engine.interpreter import StimulusEngine
from bus_stimulus.errors import ConfigurationError, ScriptResourceError, ScriptSyntaxError
from bus_stimulus.model.memory import MemoryStore, ModelClock, ModelTransactor, ModelPreloadPort
from bus_stimulus.script.source import ScriptSource
from .export import export_trace


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_time=False, show_path=False)],
        force=True,
    )


def results_table(results, title: str) -> Table:
    """Rich table summarising a run."""
    table = Table(title=title, show_header=True, header_style="bold", border_style="dim")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Total checks", str(results.total))
    table.add_row("Passed", f"[green]{results.passed}[/]")
    table.add_row("Failed", f"[red]{results.failed}[/]" if results.failed else "0")
    table.add_row("Script errors", f"[yellow]{results.errors}[/]" if results.errors else "0")
    table.add_row("Preload timeouts", f"[yellow]{results.timeouts}[/]" if results.timeouts else "0")
    if results.last_error:
        table.add_row("Last error", results.last_error)
    return table


@click.group()
@click.version_option(version='0.1.0')
@click.option('-v', '--verbose', is_flag=True, help='Log every command')
def cli(verbose: bool):
    """Bus Stimulus Engine - AHB/AXI script tools.

    Scripts hold one command per line, '#' starts a comment:

    \b
      AHB WRITE 0x1000 0xDEAD
      AHB READ  0x1000 0xDEAD
      AXI READ  0x2000 WRAP 1 0xAAAA 0xBBBB
      WAIT 10
      PRELOAD top.u_mem data/image.hex
    """
    setup_logging(verbose)


@cli.command()
@click.argument('script', type=click.Path(exists=True, dir_okay=False))
@click.option('-w', '--axi-width', default='64', type=click.Choice(['64', '128']), help='AXI data width')
def check(script: str, axi_width: str):
    """Parse a script without executing it.

    Reports every line that would be rejected.

    Example:
      bus-stim check smoke.stim
    """
    try:
        engine = StimulusEngine(config=EngineConfig(axi_data_width=int(axi_width)))
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    lines = 0
    errors = 0
    try:
        for line_number, text in ScriptSource(script):
            lines += 1
            try:
                engine.parse(text, line_number)
            except ScriptSyntaxError as e:
                errors += 1
                click.echo(f"{script}:{e}", err=True)
    except ScriptResourceError as e:
        raise click.ClickException(str(e))

    click.echo(f"{script}: {lines} commands, {errors} errors")
    if errors:
        sys.exit(1)


async def run_on_model(script, config: EngineConfig, base_dir: Path, records: list) -> StimulusEngine:
    """Execute a script against the behavioural memory model."""
    memory = MemoryStore()
    clock = ModelClock()
    engine = StimulusEngine(
        ahb=ModelTransactor(memory, 32, clock),
        axi=ModelTransactor(memory, config.axi_data_width, clock),
        clock=clock,
        preload=ModelPreloadPort(default=memory, base_dir=base_dir),
        config=config,
        trace=[records.append],
    )
    await engine.run(script)
    return engine


@cli.command()
@click.argument('script', type=click.Path(exists=True, dir_okay=False))
@click.option('-w', '--axi-width', default='64', type=click.Choice(['64', '128']), help='AXI data width')
@click.option('--preload-timeout', default=DEFAULT_PRELOAD_TIMEOUT, type=float,
              help='Preload wait bound (ns)')
@click.option('--preload-policy', default=PRELOAD_POLICIES[0], type=click.Choice(PRELOAD_POLICIES),
              help='Action when a preload wait times out')
@click.option('--poll-interval', default=DEFAULT_POLL_INTERVAL, help='Cycles between POLL reads')
@click.option('--max-polls', default=DEFAULT_MAX_POLLS, help='Default POLL read limit')
@click.option('--strict', is_flag=True, help='Script errors and timeouts fail the run')
@click.option('-t', '--trace', 'trace_file', type=click.Path(dir_okay=False),
              help='Write trace to file (.jsonl or .csv)')
def run(script: str, axi_width: str, preload_timeout: float, preload_policy: str,
        poll_interval: int, max_polls: int, strict: bool, trace_file: str):
    """Execute a script against the behavioural memory model.

    AHB and AXI share one sparse memory. PRELOAD loads $readmemh-style
    files (relative to the script) into the same memory.

    Example:
      bus-stim run smoke.stim -t smoke.jsonl
    """
    try:
        config = EngineConfig(
            axi_data_width=int(axi_width),
            preload_timeout=preload_timeout,
            preload_timeout_policy=preload_policy,
            poll_interval=poll_interval,
            max_polls=max_polls,
            strict=strict,
        ).validate()
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    records = []
    script_path = Path(script)
    engine = asyncio.run(run_on_model(script_path, config, script_path.parent, records))

    console = Console()
    passed = engine.report_results()
    console.print(results_table(engine.results, f"{script_path.name}: {'PASS' if passed else 'FAIL'}"))

    if trace_file:
        count = export_trace(records, Path(trace_file))
        click.echo(f"Wrote {count:,} trace records to {trace_file}")

    if not passed:
        sys.exit(1)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
