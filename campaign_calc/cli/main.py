"""
CLI interface for Campaign Calc.

Runs calculations and rounds results per context, reports flight pacing,
and lists the registered calculation versions and rounding policies.
"""

import logging
import sys
from datetime import date, datetime
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from campaign_calc.core.decimal_value import DecimalValue
from campaign_calc.core.engine import CalculationResult, create_engine
from campaign_calc.core.errors import CalculationEngineError
from campaign_calc.core.pacing import PacingStatus
from campaign_calc.sdk import CalculationService

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

_HANDLED_ERRORS = (CalculationEngineError, ValueError, TypeError, FileNotFoundError, yaml.YAMLError)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity to stderr"),
):
    """Campaign Calc CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )
    if ctx.invoked_subcommand is None:
        console.print("Campaign Calc - Use --help to see available commands")


@app.command(context_settings={"ignore_unknown_options": True})
def calculate(
    name: str = typer.Argument(..., help="Calculation name, e.g. marginPercentage"),
    values: Optional[List[str]] = typer.Argument(None, help="Decimal-literal inputs"),
    version: Optional[str] = typer.Option(
        None,
        "--version",
        help="Calculation version id (defaults to the current version)"
    ),
    context: Optional[str] = typer.Option(
        None,
        "--context",
        "-c",
        help="Platform/unit tag of the value, e.g. youtube:views"
    ),
    round_to: Optional[List[str]] = typer.Option(
        None,
        "--round",
        "-r",
        help="Rounding context to apply to the result (repeatable)"
    ),
    tolerance: Optional[str] = typer.Option(
        None,
        "--tolerance",
        "-t",
        help="Tolerance for compareAmounts"
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        help="Rounding policy YAML file"
    ),
):
    """
    Run a calculation at full precision and optionally round it.

    Aggregate calculations (aggregatePlanCost, aggregatePlanUnits) take all
    values as a single list of plan amounts.
    """
    try:
        engine = create_engine(config_path=config)
        inputs = [DecimalValue(value) for value in values or []]

        calculation = engine.get_version(version).get_calculation(name)
        if calculation is not None and calculation.takes_sequence:
            args = (inputs,)
        else:
            args = tuple(inputs)

        kwargs = {}
        if tolerance is not None:
            kwargs["tolerance"] = DecimalValue(tolerance)

        result = engine.calculate(name, *args, version=version, context=context, **kwargs)
        rounded = [engine.with_precision(result, rounding) for rounding in round_to or []]
    except _HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    _display_result(result, rounded)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def versions():
    """List registered calculation versions."""
    engine = create_engine()
    current = engine.registry.current_version_id

    table = Table(title="Calculation Versions")
    table.add_column("Version")
    table.add_column("Effective")
    table.add_column("Deprecated")
    table.add_column("Calculations", justify="right")
    table.add_column("Description")

    for version in engine.registry.versions():
        marker = " (current)" if version.version_id == current else ""
        table.add_row(
            f"{version.version_id}{marker}",
            version.effective_date.isoformat(),
            version.deprecated.isoformat() if version.deprecated else "-",
            str(len(version.calculations)),
            version.description,
        )

    console.print(table)


@app.command()
def contexts(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        help="Rounding policy YAML file"
    ),
):
    """List rounding contexts and platform/unit overrides."""
    try:
        policies = create_engine(config_path=config).policies
    except _HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title="Rounding Policies")
    table.add_column("Context")
    table.add_column("Places", justify="right")
    table.add_column("Mode")
    table.add_column("Notes")

    for key, rule in policies.contexts().items():
        notes = []
        if key in policies.overrides:
            notes.append("override")
        if policies.is_percent(key):
            notes.append("percent")
        if key in policies.fixed_contexts:
            notes.append("fixed")
        table.add_row(key, str(rule.places), rule.mode.name, ", ".join(notes))

    console.print(table)


@app.command()
def pacing(
    planned_total: str = typer.Argument(..., help="Planned total for the flight (budget or units)"),
    actual: str = typer.Argument(..., help="Actual delivery so far"),
    start: datetime = typer.Option(..., "--start", formats=["%Y-%m-%d"], help="Flight start date"),
    end: datetime = typer.Option(..., "--end", formats=["%Y-%m-%d"], help="Flight end date"),
    as_of: Optional[datetime] = typer.Option(
        None,
        "--as-of",
        formats=["%Y-%m-%d"],
        help="Date to measure pacing on (defaults to today)"
    ),
    version: Optional[str] = typer.Option(
        None,
        "--version",
        help="Calculation version id (defaults to the current version)"
    ),
):
    """Show how delivery compares with an even flight schedule."""
    try:
        service = CalculationService(create_engine())
        report = service.pacing_status(
            DecimalValue(planned_total),
            DecimalValue(actual),
            start.date(),
            end.date(),
            as_of.date() if as_of is not None else date.today(),
            version=version,
        )
    except _HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    status_color = {
        PacingStatus.AT_RISK: "red",
        PacingStatus.BEHIND: "yellow",
        PacingStatus.ON_PACE: "green",
        PacingStatus.AHEAD: "red",
    }[report.status]

    console.print("\n[bold]Pacing Result[/bold]")
    console.print("-" * 40)
    console.print(f"Version: {report.calculation_version}")
    console.print(f"Days elapsed: {report.elapsed_days} of {report.total_days}")
    console.print(f"On-pace target: {report.on_pace_target}")
    console.print(f"Pacing: {report.pacing_index}%")
    console.print(f"Status: [{status_color}]{report.status.name}[/]")
    sys.exit(EXIT_CODE_PASS)


def _display_result(result: CalculationResult, rounded) -> None:
    """Display a calculation result and its roundings."""
    console.print("\n[bold]Calculation Result[/bold]")
    console.print("-" * 40)
    console.print(f"Calculation: {result.calculation_name}")
    console.print(f"Version: {result.calculation_version}")
    console.print(f"Formula: {result.formula}")
    if result.context:
        console.print(f"Context: {result.context}")
    console.print(f"Value: {result.value}", soft_wrap=True)

    for item in rounded:
        console.print(f"Rounded ({item.context}, {item.precision} places): {item.formatted_value}")


if __name__ == "__main__":
    app()
