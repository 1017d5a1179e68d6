"""CLI application using Typer."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="strideminder",
    help="Gait quality monitoring from accelerometer data",
    no_args_is_help=True,
)
console = Console()

# Sub-applications
config_app = typer.Typer(help="Configuration management")
db_app = typer.Typer(help="Database management")

app.add_typer(config_app, name="config")
app.add_typer(db_app, name="db")

GRANULARITIES = ["raw", "hourly", "daily", "monthly"]


def _format_ms(timestamp_ms: int) -> str:
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _parse_granularity(value: str):
    from strideminder.aggregation import Granularity

    try:
        return Granularity(value.lower())
    except ValueError:
        console.print(f"[red]Unknown granularity '{value}'. Use one of: {', '.join(GRANULARITIES)}[/red]")
        raise typer.Exit(1)


def _records_table(title: str, records) -> Table:
    table = Table(title=title)
    table.add_column("Timestamp (UTC)", style="cyan")
    table.add_column("Step reg.", justify="right")
    table.add_column("Stride reg.", justify="right")
    table.add_column("Step sym.", justify="right")
    table.add_column("Cadence", justify="right")

    for r in records:
        table.add_row(
            _format_ms(r.timestamp_ms),
            f"{r.step_regularity:.3f}",
            f"{r.stride_regularity:.3f}",
            f"{r.step_symmetry:.3f}",
            f"{r.cadence:.1f}",
        )
    return table


def _aggregator():
    from strideminder.aggregation import AggregateStore, BucketCalendar, TemporalAggregator
    from strideminder.core.config import get_settings

    settings = get_settings()
    return TemporalAggregator(AggregateStore(), BucketCalendar(settings.aggregation.timezone))


# ============================================================================
# Config commands
# ============================================================================


@config_app.command("show")
def config_show():
    """Show current configuration."""
    from strideminder.core.config import get_settings

    settings = get_settings()
    data = settings.to_dict()

    console.print("[bold]Current Configuration[/bold]\n")

    for section, values in data.items():
        console.print(f"[cyan]{section}:[/cyan]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")
        console.print()


@config_app.command("init")
def config_init(
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file path")] = Path(
        "config/settings.yaml"
    ),
):
    """Initialize configuration file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Abort()

    yaml_content = """# StrideMinder Configuration

database:
  # STRIDEMINDER_DATABASE_URL overrides this
  url: sqlite:///data/strideminder.db
  echo: false

processing:
  # Autocorrelation RMS at or below this is not walking
  walking_rms_threshold: 0.25
  required_crossings: 5
  max_lag: null

acquisition:
  batch_duration_ns: 10000000000
  batch_capacity: 1500
  workers: 2

aggregation:
  # IANA timezone for hour/day/month boundaries
  timezone: UTC

logging:
  level: INFO
"""

    path.write_text(yaml_content)
    console.print(f"[green]Created config at {path}[/green]")


# ============================================================================
# Database commands
# ============================================================================


@db_app.command("init")
def db_init():
    """Create the gait parameter tables."""
    from strideminder.core.config import get_settings
    from strideminder.core.database import init_db

    init_db()
    console.print(f"[green]Initialized database at {get_settings().database.url}[/green]")


# ============================================================================
# Processing commands
# ============================================================================


@app.command("process")
def process(
    path: Annotated[Path, typer.Argument(help="CSV file with t_ns,x,y,z columns")],
    start_ms: Annotated[
        Optional[int],
        typer.Option("--start-ms", help="Wall-clock time of the first sample (ms since epoch)"),
    ] = None,
    ingest: Annotated[bool, typer.Option("--ingest/--no-ingest", help="Store metrics")] = False,
):
    """Analyze a recorded accelerometer stream batch by batch."""
    from strideminder.acquisition import BatchCollector, iter_batches, load_samples_csv
    from strideminder.core.config import get_settings
    from strideminder.core.database import init_db
    from strideminder.core.errors import ProcessingError, StorageError
    from strideminder.processing import GaitPipeline

    settings = get_settings()

    try:
        data = load_samples_csv(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if start_ms is None:
        start_ms = int(path.stat().st_mtime * 1000)

    collector = BatchCollector(
        duration_ns=settings.acquisition.batch_duration_ns,
        capacity=settings.acquisition.batch_capacity,
    )
    pipeline = GaitPipeline.from_config(settings.processing)

    aggregator = None
    if ingest:
        init_db()
        aggregator = _aggregator()

    table = Table(title=f"Batches: {path.name}")
    table.add_column("Start (UTC)", style="cyan")
    table.add_column("Samples", justify="right")
    table.add_column("Result")
    table.add_column("RMS", justify="right")
    table.add_column("Step reg.", justify="right")
    table.add_column("Stride reg.", justify="right")
    table.add_column("Step sym.", justify="right")
    table.add_column("Cadence", justify="right")

    walking = 0
    for batch in iter_batches(data, collector, start_time_ms=start_ms):
        try:
            analysis = pipeline.analyze(batch)
        except ProcessingError as e:
            table.add_row(_format_ms(batch.start_time_ms), str(len(batch)), f"[red]{e}[/red]")
            continue

        m = analysis.metrics
        if m is None:
            table.add_row(
                _format_ms(batch.start_time_ms),
                str(len(batch)),
                f"[yellow]{analysis.classification.value}[/yellow]",
                f"{analysis.rms:.3f}",
            )
            continue

        walking += 1
        table.add_row(
            _format_ms(batch.start_time_ms),
            str(len(batch)),
            "[green]walking[/green]",
            f"{analysis.rms:.3f}",
            f"{m.step_regularity:.3f}",
            f"{m.stride_regularity:.3f}",
            f"{m.step_symmetry:.3f}",
            f"{m.cadence:.1f}",
        )
        if aggregator is not None:
            try:
                aggregator.ingest(m)
            except StorageError as e:
                console.print(f"[red]{e}[/red]")
                raise typer.Exit(1)

    console.print(table)
    console.print(f"\n[bold]{walking}[/bold] walking batch(es)")
    if aggregator is not None:
        console.print(f"[green]Stored {walking} record(s)[/green]")


# ============================================================================
# Query commands
# ============================================================================


@app.command("query")
def query(
    granularity: Annotated[str, typer.Argument(help="raw, hourly, daily or monthly")],
    start: Annotated[int, typer.Option("--start", help="Start (ms since epoch, inclusive)")] = 0,
    end: Annotated[
        Optional[int], typer.Option("--end", help="End (ms since epoch, inclusive)")
    ] = None,
):
    """List stored records in a time range."""
    from strideminder.aggregation import AggregateStore
    from strideminder.core.database import init_db
    from strideminder.core.errors import StorageError

    level = _parse_granularity(granularity)
    init_db()
    store = AggregateStore()

    try:
        if end is None:
            end = store.last_timestamp(level)
        records = store.query(level, start, end) if end is not None else []
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not records:
        console.print("[yellow]No records found[/yellow]")
        return

    console.print(_records_table(f"{level.value.capitalize()} gait parameters", records))


@app.command("history")
def history(
    granularity: Annotated[str, typer.Argument(help="raw, hourly, daily or monthly")] = "hourly",
    window: Annotated[str, typer.Option("--window", "-w", help="day, month or year")] = "day",
):
    """Show records leading up to the most recent measurement."""
    from strideminder.aggregation import HISTORY_WINDOWS, AggregateStore
    from strideminder.core.database import init_db

    level = _parse_granularity(granularity)
    if window not in HISTORY_WINDOWS:
        console.print(f"[red]Unknown window '{window}'. Use one of: {', '.join(HISTORY_WINDOWS)}[/red]")
        raise typer.Exit(1)

    init_db()
    records = AggregateStore().history(level, HISTORY_WINDOWS[window])

    if not records:
        console.print("[yellow]No records found[/yellow]")
        return

    console.print(_records_table(f"Last {window}: {level.value} gait parameters", records))


@app.command("last")
def last(
    granularity: Annotated[str, typer.Argument(help="raw, hourly, daily or monthly")] = "raw",
):
    """Show the timestamp of the most recent record."""
    from strideminder.aggregation import AggregateStore
    from strideminder.core.database import init_db

    level = _parse_granularity(granularity)
    init_db()
    timestamp = AggregateStore().last_timestamp(level)

    if timestamp is None:
        console.print(f"[yellow]No {level.value} records[/yellow]")
    else:
        console.print(f"{timestamp} ({_format_ms(timestamp)} UTC)")


# ============================================================================
# Main entry point
# ============================================================================


@app.callback()
def main(
    config: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="Settings YAML file")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Gait quality monitoring from accelerometer data."""
    from strideminder.core.config import get_settings, reload_settings

    settings = reload_settings(config) if config else get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.logging.level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


if __name__ == "__main__":
    app()
