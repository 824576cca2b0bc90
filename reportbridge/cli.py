#!/usr/bin/env python3
"""
ReportBridge CLI - Test Run Reporting Adapter

Usage:
    reportbridge send <results.json> --config <reportbridge.yaml> [OPTIONS]
    reportbridge validate <reportbridge.yaml>
    reportbridge --version
"""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .client import LaunchResult, ReportClientError, create_client
from .config import ReporterConfig, load_config
from .reporting import (
    AggregatedResult,
    AttachmentCollector,
    HierarchyError,
    ReportingDriver,
    ResultAggregator,
    ResultLinkPersistError,
)
from .reporting.driver import RESULT_LINK_VARIABLE

app = typer.Typer(
    name="reportbridge",
    help="📡 ReportBridge - mirror test runs into ReportPortal",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"📡 ReportBridge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
):
    """
    📡 ReportBridge - mirror test runs into ReportPortal

    Send test results as a nested launch → suite → test → step report.
    """
    pass


def configure_logging(debug: bool) -> None:
    """Route package logs through rich."""
    handler = RichHandler(console=console, show_path=False, show_time=False)
    logger = logging.getLogger("reportbridge")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False


def load_results(path: Path) -> AggregatedResult:
    """Load a worker-aggregated result from a JSON file."""
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("Results file must contain a JSON object")
    return AggregatedResult.from_dict(data)


async def send_results_async(config: ReporterConfig, result: AggregatedResult) -> LaunchResult | None:
    """Run one reporting pass for an aggregated result."""
    client = create_client(config)
    driver = ReportingDriver(
        config,
        client,
        ResultAggregator(),
        AttachmentCollector(config.output_dir, clock=client.now),
    )
    async with client:
        return await driver.run(result)


@app.command()
def send(
    results_file: Path = typer.Argument(
        ...,
        help="Path to the aggregated results JSON file",
        exists=True,
        readable=True,
    ),
    config_file: Path = typer.Option(
        Path("reportbridge.yaml"), "--config", "-c",
        help="Path to the reporter configuration YAML file"
    ),
    debug: bool = typer.Option(
        False, "--debug",
        help="Log every report item as it is created"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only show errors and the launch link"
    ),
):
    """
    Send an aggregated test result to ReportPortal.

    Opens a launch, reports every suite, test and step, attaches failure
    logs, and writes the launch link for CI tooling.
    """
    config, validation = load_config(config_file)
    if not validation.is_valid:
        console.print(f"\n[red]❌ Invalid configuration:[/red]")
        console.print(str(validation))
        raise typer.Exit(code=1)

    configure_logging(debug or config.debug)

    if not config.enabled:
        console.print("[yellow]⚠️  Reporting is disabled in the configuration; nothing sent[/yellow]")
        raise typer.Exit(code=0)

    try:
        result = load_results(results_file)
    except (ValueError, OSError) as e:
        console.print(f"[red]❌ Could not read results:[/red] {e}")
        raise typer.Exit(code=1)

    if not quiet:
        console.print(f"\n📄 Results: {results_file}")
        console.print(
            f"   Suites: {len(result.suites)}  "
            f"Passed: {len(result.passed)}  Failed: {len(result.failed)}"
        )
        console.print(f"📡 Sending to {config.endpoint} (project {config.project})...\n")

    try:
        launch = asyncio.run(send_results_async(config, result))
    except ReportClientError as e:
        console.print(f"[red]❌ Could not open launch:[/red] {e}")
        raise typer.Exit(code=1)
    except ResultLinkPersistError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)
    except HierarchyError as e:
        console.print(f"[red]❌ Report is incomplete:[/red] {e}")
        raise typer.Exit(code=1)

    if launch is None:
        console.print("[red]❌ Launch could not be finished[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✅ Launch finished:[/green] {launch.link}")
    if not quiet:
        console.print(f"📁 Link saved: {config.result_link_file}")


@app.command()
def validate(
    config_file: Path = typer.Argument(
        ...,
        help="Path to the reporter configuration YAML file",
        exists=True,
        readable=True,
    ),
):
    """
    Validate a reporter configuration file.

    Check the settings and report any errors without contacting the backend.
    """
    console.print(f"\n📄 Validating: {config_file}")

    config, validation = load_config(config_file)

    if not validation.is_valid:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation))
        raise typer.Exit(code=1)

    console.print(f"\n[green]✅ Valid configuration[/green]")

    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("enabled", str(config.enabled))
    table.add_row("endpoint", config.endpoint or "-")
    table.add_row("project", config.project or "-")
    table.add_row("token", config.masked_token or "-")
    table.add_row("launch_name", config.launch_name or "-")
    table.add_row("launch_attributes", ", ".join(
        f"{a.key}:{a.value}" if a.key else a.value for a in config.launch_attributes
    ) or "-")
    table.add_row("rerun", f"{config.rerun} ({config.rerun_of})" if config.rerun_of else str(config.rerun))
    table.add_row("runs_with_workers", str(config.runs_with_workers))
    table.add_row("output_dir", str(config.output_dir))
    table.add_row("result_link_file", str(config.result_link_file))

    console.print()
    console.print(table)


@app.command()
def info():
    """
    Show information about ReportBridge.
    """
    console.print(f"""
📡 [bold]ReportBridge[/bold] v{__version__}

Test run reporting adapter for ReportPortal

[bold]Features:[/bold]
  • Launch → suite → test → step hierarchy
  • Nested meta-steps for higher-level actions
  • Screenshots and screen recordings on failure
  • Worker-aggregated (sharded) results
  • Launch link exported for CI ({RESULT_LINK_VARIABLE})

[bold]Quick Start:[/bold]
  reportbridge validate reportbridge.yaml
  reportbridge send output/results.json -c reportbridge.yaml
""")


if __name__ == "__main__":
    app()
