"""
Command-line interface for Bougie candlestick recognition.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import Config
from .data.csv_loader import filter_by_date, read_candlesticks
from .exceptions import BougieError, DataLoadError
from .logger import configure_from_config, get_pattern_adapter
from .models.market_data import CandleDirection
from .strategies.recognition_engine import RecognitionEngine, match_sentiment


console = Console()

SENTIMENT_STYLES = {
    CandleDirection.BULLISH: "green",
    CandleDirection.BEARISH: "red",
    CandleDirection.NEUTRAL: "yellow",
}

DATE_OPTION = click.DateTime(formats=["%Y-%m-%d"])


@click.group()
@click.version_option(version=__version__, prog_name="bougie")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .env configuration file"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging"
)
@click.pass_context
def main(ctx: click.Context, config: Optional[Path], verbose: bool) -> None:
    """
    Bougie: Candlestick Pattern Recognition

    Derives candle anatomy from daily OHLCV bars and lists where each of the
    24 single- and two-candle patterns occurs.
    """
    ctx.ensure_object(dict)

    try:
        if config:
            ctx.obj["config"] = Config.load_from_env(str(config))
        else:
            ctx.obj["config"] = Config.load_from_env()
    except (ValidationError, ValueError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if verbose:
        ctx.obj["config"].logging.level = "DEBUG"

    configure_from_config(ctx.obj["config"].logging)
    ctx.obj["logger"] = logging.getLogger("bougie.cli")


def _load_engine_input(config: Config, csv_path: Optional[Path], start, end):
    """Resolve the data file, load it and apply the date range."""
    path = csv_path or config.data.data_file
    if not path:
        raise DataLoadError("No data file given; pass CSV or set DATA_FILE")

    bars = read_candlesticks(path)
    start_date = start.date() if start else None
    end_date = end.date() if end else None
    return filter_by_date(bars, start_date, end_date)


@main.command()
@click.pass_context
def patterns(ctx: click.Context) -> None:
    """List the pattern catalogue."""
    engine = RecognitionEngine.from_config(ctx.obj["config"])

    table = Table(title="🕯️ Pattern Catalogue", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Pattern", style="cyan")
    table.add_column("Lookback", justify="right")
    table.add_column("Tolerance", justify="right", style="green")

    for ordinal, rule in enumerate(engine.rule_catalogue()):
        table.add_row(str(ordinal), rule.name, str(rule.lookback), f"{rule.tolerance:.2%}")

    console.print(table)


@main.command()
@click.argument("csv_path", required=False, type=click.Path(path_type=Path))
@click.option("--start", type=DATE_OPTION, default=None, help="First date to include (YYYY-MM-DD)")
@click.option("--end", type=DATE_OPTION, default=None, help="Last date to include (YYYY-MM-DD)")
@click.option("--pattern", "-p", "pattern_names", multiple=True, help="Show matches of a pattern (repeatable)")
@click.option("--dump", is_flag=True, help="Print the anatomy and flags of every derived candle")
@click.pass_context
def analyze(ctx: click.Context, csv_path: Optional[Path], start, end,
            pattern_names: Tuple[str, ...], dump: bool) -> None:
    """Run pattern recognition over a CSV file of daily bars."""
    config: Config = ctx.obj["config"]
    logger = get_pattern_adapter(ctx.obj["logger"], symbol=str(csv_path or config.data.data_file))

    try:
        bars = _load_engine_input(config, csv_path, start, end)
    except BougieError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    engine = RecognitionEngine.from_config(config)
    result = engine.analyze_raw(bars)
    logger.info(f"Recognized {result.total_matches} matches over {len(result.candles)} bars")

    if not result.candles:
        console.print("[yellow]ℹ[/yellow] No bars in the selected range")
        return

    if dump:
        for index, candle in enumerate(result.candles):
            console.print(Panel(candle.describe(), title=f"Bar {index}", style="blue"))

    first, last = result.candles[0].date, result.candles[-1].date
    console.print(f"[blue]📊 {len(result.candles)} bars from {first} to {last}[/blue]")

    summary = Table(title="Pattern Matches", show_header=True, header_style="bold magenta")
    summary.add_column("Pattern", style="cyan")
    summary.add_column("Matches", justify="right", style="green")
    for name, count in engine.summary().items():
        summary.add_row(name, str(count))
    console.print(summary)

    for name in pattern_names:
        if result.ordinal_of(name) is None:
            console.print(f"[yellow]ℹ[/yellow] Unknown pattern: {name}")
            continue

        spans = engine.marker_spans_by_name(name)
        table = Table(title=f"{name} ({len(spans)})", show_header=True)
        table.add_column("Index", justify="right", style="dim")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Close", justify="right")

        for first_index, last_index in spans:
            candle = engine.derived_at(last_index)
            style = SENTIMENT_STYLES[match_sentiment(name, candle)]
            table.add_row(
                str(last_index),
                str(engine.derived_at(first_index).date),
                str(candle.date),
                f"{candle.close:.2f}",
                style=style
            )
        console.print(table)


@main.command()
@click.argument("csv_path", type=click.Path(path_type=Path))
@click.argument("index", type=int)
@click.option("--start", type=DATE_OPTION, default=None, help="First date to include (YYYY-MM-DD)")
@click.option("--end", type=DATE_OPTION, default=None, help="Last date to include (YYYY-MM-DD)")
@click.pass_context
def inspect(ctx: click.Context, csv_path: Path, index: int, start, end) -> None:
    """Show the anatomy of one bar and the patterns completing on it."""
    config: Config = ctx.obj["config"]

    try:
        bars = _load_engine_input(config, csv_path, start, end)
    except BougieError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    engine = RecognitionEngine.from_config(config)
    engine.analyze_raw(bars)

    candle = engine.derived_at(index)
    if candle is None:
        console.print(f"[red]✗[/red] Index {index} out of range (0..{len(bars) - 1})")
        sys.exit(1)

    console.print(Panel(candle.describe(), title=f"Bar {index}", style="blue"))

    matched = [
        rule.name for ordinal, rule in enumerate(engine.rule_catalogue())
        if index in engine.matches_by_index(ordinal)
    ]
    if matched:
        for name in matched:
            style = SENTIMENT_STYLES[match_sentiment(name, candle)]
            console.print(f"[{style}]●[/{style}] {name}")
    else:
        console.print("[dim]No pattern completes on this bar[/dim]")


if __name__ == "__main__":
    main()
