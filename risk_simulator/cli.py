"""Command-line interface for the Project Risk Simulator.

Built with Typer and rich formatting.

Features:
- Monte Carlo simulation in a background worker with live progress
- Risk register import (Excel, CSV, JSON) and template generation
- Register summaries and deterministic verification
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .core.audit import DeterminismVerifier
from .core.data_models import SimulationResult
from .core.exceptions import RiskSimulatorError
from .core.logging_config import setup_logging
from .core.messages import Done, RunRequest
from .core.risk_model import RiskModel
from .core.worker import SimulationWorker
from .io.io_csv import CSVImporter
from .io.io_json import JSONImporter
from .reporting.reporting import ReportGenerator
from .templates.template_generator import TEMPLATE_FORMATS, TemplateGenerator, template_filename

app: typer.Typer = typer.Typer(help="Monte Carlo schedule and budget risk simulator for projects")
console: Console = Console()

EXIT_CANCELLED = 130


@app.command()
def run(
    risks: str = typer.Option(..., "--risks", "-r", help="Risk register (Excel, CSV, or JSON)"),
    config: Optional[str] = typer.Option(None, "--config", help="Configuration file (JSON or YAML)"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", help="Number of trials (1-50000)"),
    delay_slack: Optional[float] = typer.Option(None, "--delay-slack", help="Allowed delay in days"),
    budget_slack: Optional[float] = typer.Option(None, "--budget-slack", help="Allowed cost in budget units"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducibility"),
    backend: Optional[str] = typer.Option(None, "--backend", help="Trial loop backend (python or numba)"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Run the Monte Carlo risk simulation."""
    setup_logging(log_level="DEBUG" if verbose else "WARNING")

    try:
        risks_data = _load_risks_data(risks)
        config_data = _load_config_data(config)

        # Override config with CLI parameters
        overrides = {
            'iterations': iterations,
            'delay_slack': delay_slack,
            'budget_slack': budget_slack,
            'seed': seed,
            'backend': backend,
        }
        config_data.update({key: value for key, value in overrides.items() if value is not None})

        request = RunRequest.model_validate({**config_data, 'risks': risks_data})
    except RiskSimulatorError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if verbose:
        console.print("\n[bold blue]Project Risk Simulator - Monte Carlo Simulation[/bold blue]")
        console.print("=" * 60)
        console.print(f"Risk rows: {len(request.risks)}  Iterations: {request.iterations:,}  Backend: {request.backend}")

    worker = SimulationWorker()
    try:
        result = _run_with_progress(worker, request, show_progress=not as_json)
    except KeyboardInterrupt:
        worker.cancel()
        console.print("[orange3]Simulation cancelled: no result[/orange3]")
        raise typer.Exit(EXIT_CANCELLED)
    except RiskSimulatorError as e:
        console.print(f"[red]Simulation failed: {e.message}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    _display_results_summary(result, verbose)


@app.command()
def template(
    format: str = typer.Argument("json", help="Output format (json, csv, excel)"),
    output: str = typer.Option(".", "--output", "-o", help="Output directory"),
):
    """Generate a sample risk register template."""
    if format not in TEMPLATE_FORMATS:
        console.print(f"[red]Unknown template format: {format} (choose from {', '.join(TEMPLATE_FORMATS)})[/red]")
        raise typer.Exit(1)

    file_path = Path(output) / template_filename(format)
    try:
        TemplateGenerator.generate_template(format, str(file_path))
    except OSError as e:
        console.print(f"[red]Error generating template: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Template created: {file_path}[/green]")


@app.command()
def info(
    risks: str = typer.Option(..., "--risks", "-r", help="Risk register (Excel, CSV, or JSON)"),
):
    """Summarize a risk register without running a simulation."""
    try:
        risks_data = _load_risks_data(risks)
    except (RiskSimulatorError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    model = RiskModel(risks_data)
    summary = model.summary

    console.print(f"\n[bold blue]Risk Register: {Path(risks).name}[/bold blue]")
    console.print(f"Rows: {summary.rows_seen}  Active: {len(model.active_risks)}  "
                  f"Dropped: {len(summary.dropped_indices)}  Kill risks: {len(model.kill_risks)}")
    if summary.rows_truncated:
        console.print(f"[orange3]{summary.rows_truncated} rows beyond the 50-row limit were ignored[/orange3]")

    table = Table(title="Active Risks")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Likelihood", justify="right")
    table.add_column("Kill", justify="center")
    table.add_column("Mean Delay / Run", justify="right")
    table.add_column("Mean Cost / Run", justify="right")

    for impact in model.expected_impacts():
        table.add_row(
            str(impact['index'] + 1),
            impact['name'] or "-",
            f"{impact['probability']:.1%}",
            "yes" if impact['kill'] else "",
            f"{impact['expected_delay']:,.2f}",
            f"{impact['expected_cost']:,.2f}",
        )

    console.print(table)


@app.command()
def verify(
    risks: str = typer.Option(..., "--risks", "-r", help="Risk register"),
    config: Optional[str] = typer.Option(None, "--config", help="Configuration file"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed to test"),
    runs: int = typer.Option(3, "--runs", help="Number of verification runs"),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-n", help="Number of trials"),
):
    """Verify simulation reproducibility."""
    console.print(f"[yellow]Verifying reproducibility with {runs} runs...[/yellow]")

    try:
        risks_data = _load_risks_data(risks)
        config_data = _load_config_data(config)
        if seed is not None:
            config_data['seed'] = seed
        if iterations is not None:
            config_data['iterations'] = iterations

        verification_result = DeterminismVerifier.verify_reproducibility(config_data, risks_data, runs)
    except (RiskSimulatorError, ValueError) as e:
        console.print(f"[red]Verification error: {e}[/red]")
        raise typer.Exit(1)

    if verification_result['reproducible']:
        console.print(f"[green]Simulation is reproducible across {runs} runs[/green]")
        console.print(f"Random seed: {verification_result['config_seed']}")
    else:
        console.print("[red]Simulation is not reproducible[/red]")
        console.print(f"Reason: {verification_result.get('reason', 'Unknown')}")

    if verification_result['runs']:
        table = Table(title="Verification Runs")
        table.add_column("Run")
        table.add_column("Success")
        table.add_column("P90 Late")
        table.add_column("Hash")

        for run_info in verification_result['runs']:
            table.add_row(
                str(run_info['run_number']),
                f"{run_info['success_pct']:.2%}",
                f"{run_info['p90_late']:,.2f}",
                run_info['result_hash'][:8] + "...",
            )

        console.print(table)

    if not verification_result['reproducible']:
        raise typer.Exit(1)


def _run_with_progress(worker: SimulationWorker, request: RunRequest, show_progress: bool) -> SimulationResult:
    """Drive the worker, feeding progress messages into a rich progress bar."""
    with Progress(
        TextColumn("[bold green]Simulating"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task("simulate", total=request.iterations)
        worker.start(request)
        for message in worker.messages():
            if isinstance(message, Done):
                progress.update(task, completed=request.iterations)
                return message.result
            progress.update(task, completed=message.done + 1)

    raise RiskSimulatorError("Simulation worker stopped without a result")


def _load_risks_data(file_path: str) -> List[Dict[str, Any]]:
    """Load risk rows from file."""
    path = Path(file_path)

    if not path.exists():
        raise ValueError(f"Risks file not found: {file_path}")

    if path.suffix.lower() in ['.xlsx', '.xlsm']:
        return CSVImporter().import_risks_from_excel(file_path)
    elif path.suffix.lower() == '.csv':
        return CSVImporter().import_risks_from_csv(file_path)
    elif path.suffix.lower() in ['.json', '.yaml', '.yml']:
        return JSONImporter().import_risks(file_path)
    else:
        raise ValueError(f"Unsupported risks file format: {path.suffix}")


def _load_config_data(file_path: Optional[str]) -> Dict[str, Any]:
    """Load configuration data, or an empty dict for defaults."""
    if not file_path:
        return {}
    return JSONImporter().import_configuration(file_path)


def _display_results_summary(result: SimulationResult, verbose: bool) -> None:
    """Display simulation results summary."""
    report = ReportGenerator(result)
    summary = report.generate_summary()

    console.print("\n[bold green]Simulation Results[/bold green]")

    table = Table(title="Outcomes")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="magenta")

    table.add_row("Runs", f"{result.runs:,}")
    table.add_row("Seed", str(result.seed))
    table.add_row("Active risks", str(result.active_risk_count))
    table.add_row("Likelihood of success", f"{result.success_pct:.2%}")
    table.add_row("Killed", f"{result.killed_pct:.2%}")
    table.add_row("Budget exceeded", f"{result.budget_exceeded_pct:.2%}")
    table.add_row("Expected delay (not killed)", f"{result.expected_delay_not_killed:,.2f} days")
    table.add_row("Expected cost (not killed)", f"{result.expected_cost_not_killed:,.2f}")

    console.print(table)

    pct_table = Table(title="Percentiles (not killed)")
    pct_table.add_column("Percentile", style="cyan")
    pct_table.add_column("Delay of late runs (days)", justify="right")
    pct_table.add_column("Budget overrun", justify="right")

    late = summary['late_percentiles']
    overrun = summary['overrun_percentiles']
    for key in late:
        pct_table.add_row(key, f"{late[key]:,.2f}", f"{overrun[key]:,.2f}")

    console.print(pct_table)

    console.print("\n[bold]Late delay distribution[/bold]")
    for line in report.delay_histogram_lines():
        console.print(line, highlight=False)

    console.print("\n[bold]Budget overrun distribution[/bold]")
    for line in report.budget_histogram_lines():
        console.print(line, highlight=False)

    if verbose:
        console.print("\n[bold]Key insights[/bold]")
        for insight in summary['key_insights']:
            console.print(f"  • {insight}")


if __name__ == "__main__":
    app()
