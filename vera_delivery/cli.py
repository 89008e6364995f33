"""Command-line interface for the delivery analytics pipeline using Typer.

Features:
- `analyze` command that transcribes a recording (blob URL or local file) and
  prints its delivery summary.
- `summarize` command that runs the analytics engine on saved word timings
  without any network or FFmpeg access.
- JSON output (camelCase, as consumed by the report layer) for both commands.
"""

import json
import pathlib
from typing import Annotated, Any

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from vera_delivery import __version__
from vera_delivery.analytics.engine import compute_delivery_analytics
from vera_delivery.analytics.models import DeliveryAnalytics, TimestampedWord
from vera_delivery.analytics.summary import format_analytics_summary
from vera_delivery.config import PipelineConfig, TranscriptionConfig, UIConfig
from vera_delivery.errors import DeliveryPipelineError, user_facing_message
from vera_delivery.pipeline import ProcessResult, process_file
from vera_delivery.utils.constant import TRANSCRIBE_CONCURRENCY
from vera_delivery.utils.logging_config import configure_logging

_WORDS_ADAPTER = TypeAdapter(list[TimestampedWord])


def version_callback(value: bool) -> None:
    """Show the application's version and exit.

    Args:
        value: When True, print the version and exit.

    Raises:
        typer.Exit: Always raised after printing when value is True.

    """
    if value:
        print(f"vera-delivery version: {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="vera-delivery",
    help="Transcribe presentation recordings and analyse their delivery.",
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the application's version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Print help when no subcommand is given.

    Raises:
        typer.Exit: Raised to terminate after displaying help.

    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _setup_logging(ui: UIConfig) -> None:
    # JSON goes to stdout, so keep log lines out of it unless asked for.
    quiet = ui.quiet or (ui.as_json and not ui.verbose)
    configure_logging(verbose=ui.verbose, quiet=quiet)


def _metrics_table(analytics: DeliveryAnalytics, chunk_count: int | None = None) -> Table:
    table = Table(title="Delivery metrics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Duration", f"{analytics.total_duration_seconds:.1f}s")
    table.add_row("Words", str(len(analytics.words)))
    if chunk_count is not None:
        table.add_row("Chunks", str(chunk_count))
    table.add_row("Average pace", f"{analytics.average_wpm} WPM")
    table.add_row("Fillers", f"{analytics.total_filler_count} ({analytics.fillers_per_minute:g}/min)")
    table.add_row("Pauses", str(analytics.total_pause_count))
    if analytics.energy_windows:
        table.add_row("Volume", f"{analytics.average_energy_db:g} dB")
    if analytics.average_pitch_hz:
        table.add_row("Pitch", f"{analytics.average_pitch_hz:g} Hz")
    return table


def _render_result(console: Console, result: ProcessResult) -> None:
    console.rule("[bold]Transcript")
    console.print(result.transcript or "[dim](no speech detected)[/dim]")
    console.print()
    console.print(_metrics_table(result.analytics, result.chunk_count))
    console.rule("[bold]Delivery summary")
    console.print(format_analytics_summary(result.analytics), markup=False)


@app.command()
def analyze(
    source: Annotated[
        str,
        typer.Argument(help="Blob URL or local path of the recording to analyse."),
    ],
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            help="Original upload name; its extension decides the format. "
            "Defaults to the last component of SOURCE.",
        ),
    ] = None,
    concurrency: Annotated[
        int,
        typer.Option(
            "--concurrency",
            min=1,
            help="Maximum number of chunks transcribed at once.",
        ),
    ] = TRANSCRIBE_CONCURRENCY,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the full result as camelCase JSON."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable detailed debug logging."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", help="Suppress log output."),
    ] = False,
) -> None:
    """Transcribe a recording and report its delivery analytics.

    Raises:
        typer.Exit: With code 1 when the job fails.

    """
    ui = UIConfig(verbose=verbose, quiet=quiet, as_json=json_output)
    _setup_logging(ui)
    config = PipelineConfig(transcription=TranscriptionConfig(concurrency=concurrency))

    try:
        result = process_file(source, name, config=config)
    except (DeliveryPipelineError, FileNotFoundError) as exc:
        Console(stderr=True).print(f"[bold red]Error:[/bold red] {user_facing_message(exc)}")
        if verbose:
            Console(stderr=True).print(f"[dim]{type(exc).__name__}: {exc}[/dim]")
        raise typer.Exit(code=1) from exc

    if ui.as_json:
        typer.echo(result.model_dump_json(by_alias=True, indent=2))
        return
    _render_result(Console(), result)


def _load_words(path: pathlib.Path) -> list[TimestampedWord]:
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("analytics", data)
        data = data.get("words") if isinstance(data, dict) else None
    if not isinstance(data, list):
        raise ValueError("expected a list of words or an object with a 'words' list")
    return _WORDS_ADAPTER.validate_python(data)


@app.command()
def summarize(
    words_json: Annotated[
        pathlib.Path,
        typer.Argument(
            exists=True,
            dir_okay=False,
            readable=True,
            help="JSON list of {word, start, end} objects, or a saved result.",
        ),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the analytics as camelCase JSON."),
    ] = False,
) -> None:
    """Compute delivery analytics from saved word timings.

    Raises:
        typer.Exit: With code 1 when the file cannot be parsed.

    """
    try:
        words = _load_words(words_json)
    except (ValueError, ValidationError) as exc:
        Console(stderr=True).print(f"[bold red]Error:[/bold red] Invalid words file: {exc}")
        raise typer.Exit(code=1) from exc

    analytics = compute_delivery_analytics(words)
    if json_output:
        typer.echo(analytics.model_dump_json(by_alias=True, indent=2))
        return
    console = Console()
    console.print(_metrics_table(analytics))
    console.print(format_analytics_summary(analytics), markup=False)


if __name__ == "__main__":
    app()
