"""
Command-line interface for Sysreport.

Provides commands for showing, deciding on and sending the machine report.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sysreport import __version__
from sysreport.config import Config
from sysreport.core import ReportCore, ReportMode, ReportResult
from sysreport.errors import DuplicateReportError, ReportError
from sysreport.prompt import Decision

# stdout carries the report and the interactive question
console = Console(stderr=True)


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging with rich handler."""
    handlers: list[logging.Handler] = [RichHandler(console=console, rich_tracebacks=True)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="sysreport")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """
    Sysreport - Machine report collection with consent.

    Show what would be reported about this machine, then send either the
    full report or an opt-out notice.
    """
    ctx.ensure_object(dict)

    ctx.obj["config"] = Config.load(config) if config else Config.load()

    log_level = "DEBUG" if verbose else ctx.obj["config"].log_level
    setup_logging(log_level, ctx.obj["config"].log_file)
    ctx.obj["verbose"] = verbose


def _report_options(func):
    func = click.option(
        "--url",
        help="Endpoint to send the report to (overrides configuration)",
    )(func)
    func = click.option(
        "-f",
        "--force",
        is_flag=True,
        help="Collect and send again even if a report was already sent",
    )(func)
    return func


def _run_report(ctx: click.Context, run: Callable[[ReportCore], ReportResult]) -> None:
    """Run a report and turn its outcome into console output and exit code."""
    core = ReportCore(ctx.obj["config"])

    try:
        result = run(core)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        console.print("Set SYSREPORT_UPLOAD_URL, configure it in the config file or pass --url.")
        sys.exit(1)
    except DuplicateReportError as e:
        console.print(f"[yellow]{escape(str(e))}[/]")
        console.print("Run again with [cyan]--force[/] to replace it.")
        sys.exit(1)
    except ReportError as e:
        console.print(f"[red]✗ {escape(str(e))}[/]")
        sys.exit(1)

    _display_result(result)


def _display_result(result: ReportResult) -> None:
    """Summarize what was recorded and sent."""
    if result.aborted:
        console.print("[yellow]Nothing was reported.[/]")
        return

    if result.decision is Decision.DECLINE:
        console.print("[green]✓ Opt-out notice sent[/]")
    else:
        console.print("[green]✓ Report sent[/]")
    console.print(f"[dim]Saved to: {result.path}[/]")


@main.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the report that would be sent, without sending it."""
    core = ReportCore(ctx.obj["config"])
    try:
        data = core.collect()
    except ReportError as e:
        console.print(f"[red]✗ {escape(str(e))}[/]")
        sys.exit(1)
    click.echo(data.decode("utf-8"))


@main.command()
@_report_options
@click.pass_context
def interactive(ctx: click.Context, force: bool, url: str | None) -> None:
    """
    Show the report and ask whether to send it.

    Answer y to send the report, n to send an opt-out notice, or q to quit
    without recording or sending anything.
    """
    _run_report(ctx, lambda core: core.collect_and_send(ReportMode.INTERACTIVE, force, url))


@main.command()
@_report_options
@click.pass_context
def auto(ctx: click.Context, force: bool, url: str | None) -> None:
    """Send the full report without asking."""
    _run_report(ctx, lambda core: core.collect_and_send(ReportMode.AUTO, force, url))


@main.command()
@click.argument("answer", type=click.Choice(["yes", "no"], case_sensitive=False))
@_report_options
@click.pass_context
def send(ctx: click.Context, answer: str, force: bool, url: str | None) -> None:
    """
    Send a decision without prompting.

    "yes" sends the full report, "no" sends an opt-out notice.
    """
    agree = answer.lower() == "yes"
    _run_report(ctx, lambda core: core.send_decision(agree, force, url))


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration, report cache state and connection status."""
    config: Config = ctx.obj["config"]
    core = ReportCore(config)

    console.print()
    console.print(Panel.fit("[bold]Sysreport Status[/]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Version", __version__)
    table.add_row("Upload URL", config.upload_url or "[dim]Not configured[/]")
    table.add_row("Report File", str(core.store.path))
    table.add_row("Report Sent", "Yes" if core.store.exists() else "No")
    table.add_row("Log Level", config.log_level)

    console.print(table)

    if config.upload_url:
        from sysreport.uploader import Uploader

        console.print()
        if Uploader(config).test_connection():
            console.print("[green]✓ Server is reachable[/]")
        else:
            console.print("[red]✗ Server is not reachable[/]")


@main.command()
@click.option("--yes", "assume_yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx: click.Context, assume_yes: bool) -> None:
    """
    Forget the recorded report.

    The next run will collect and send again without --force.
    """
    core = ReportCore(ctx.obj["config"])

    if not core.store.exists():
        console.print("[dim]No report recorded.[/]")
        return

    if not assume_yes and not click.confirm(
        f"Remove the recorded report {core.store.path}?", err=True
    ):
        console.print("[yellow]Cancelled[/]")
        return

    core.store.clear()
    console.print(f"[green]✓[/] Removed {core.store.path}")


@main.command("list")
def list_available() -> None:
    """List all available collectors."""
    from sysreport.collectors import COLLECTORS

    table = Table(title="Available Collectors", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for name, cls in COLLECTORS.items():
        table.add_row(name, cls.description)

    console.print()
    console.print(table)


if __name__ == "__main__":
    main()
