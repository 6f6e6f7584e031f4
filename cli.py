"""CLI interface for STRATSEL."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from stratsel.backtest import PerformanceAggregator
from stratsel.config import Config, load_config
from stratsel.data import ParquetCandleSource, UniverseLoader
from stratsel.scheduler import BatchScheduler
from stratsel.store import ResultStore, ResultStoreError
from stratsel.strategies import StrategyRegistry, default_registry
from stratsel.types import Asset
from stratsel.utils import configure_logging, sanitize_symbol

app = typer.Typer(
    name="stratsel",
    help="STRATSEL - Strategy backtest and selection engine",
    add_completion=False,
)

console = Console()

# Menu numbers accepted by --timeframes
TIMEFRAME_MENU = {
    "1": "15Min",
    "2": "1Hour",
    "3": "4Hour",
    "4": "1day",
    "5": "1week",
}


def _load(config_path: Optional[str]) -> Config:
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    configure_logging(config.log_level, config.log_file)
    return config


def _split(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [s.strip() for s in raw.split(",") if s.strip()]


def _registry(strategies: Optional[str]) -> StrategyRegistry:
    registry = default_registry()
    names = _split(strategies)
    if not names:
        return registry
    try:
        return registry.select(names)
    except KeyError as e:
        console.print(f"[red]{e}. Available: {', '.join(registry.list_strategies())}[/red]")
        raise typer.Exit(code=1)


def _timeframes(raw: Optional[str], default: List[str]) -> List[str]:
    choices = [TIMEFRAME_MENU.get(c, c) for c in _split(raw)]
    return choices or list(default)


@app.command()
def backtest(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    symbols: Optional[str] = typer.Option(None, "--symbols", "-s", help="Comma-separated list of symbols"),
    strategies: Optional[str] = typer.Option(None, "--strategies", help="Comma-separated list of strategies"),
    retry_failed: bool = typer.Option(False, "--retry-failed", help="Queue failed symbols for another attempt"),
):
    """Backtest the universe and store the best strategy per symbol/timeframe."""
    config = _load(config_path)
    registry = _registry(strategies)

    if symbols:
        assets = [Asset(symbol=s, name=s) for s in (sanitize_symbol(x) for x in _split(symbols)) if s]
    else:
        loader = UniverseLoader(config.data.universe_file, config.data.benchmark_symbol)
        try:
            assets = loader.load_assets()
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]Could not load universe: {e}[/red]")
            raise typer.Exit(code=1)

    console.print(f"Tradable symbols: {len(assets)} | Strategies: {', '.join(registry.list_strategies())}")

    if retry_failed:
        config.scheduler.retry_failed = True

    try:
        store = ResultStore(config.store.results_path)
        aggregator = PerformanceAggregator(ParquetCandleSource(config.data.data_dir), config.simulation)
        scheduler = BatchScheduler(aggregator, store, config.data.timeframes, config.scheduler)
        summary = scheduler.run(assets, registry)
    except ResultStoreError as e:
        console.print(f"[red]Fatal: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Batch Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Symbols", str(summary.total))
    table.add_row("Processed", str(summary.processed))
    table.add_row("Skipped (retested)", str(summary.skipped))
    table.add_row("Failed", str(len(summary.failed)))
    table.add_row("Elapsed", f"{summary.elapsed / 60:.1f} min")
    table.add_row("Stored results", str(len(store)))
    console.print(table)


@app.command()
def single(
    symbol: str = typer.Argument(..., help="Stock symbol"),
    timeframes: Optional[str] = typer.Option(
        None, "--timeframes", "-t",
        help="Comma-separated timeframes or menu numbers (1=15Min 2=1Hour 3=4Hour 4=1day 5=1week)",
    ),
    strategies: Optional[str] = typer.Option(None, "--strategies", help="Comma-separated list of strategies"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path"),
):
    """Backtest one symbol and print the result without storing it."""
    config = _load(config_path)
    clean = sanitize_symbol(symbol)
    if clean is None:
        console.print(f"[red]Invalid symbol: {symbol}[/red]")
        raise typer.Exit(code=1)

    aggregator = PerformanceAggregator(ParquetCandleSource(config.data.data_dir), config.simulation)
    result = aggregator.select_best(
        clean,
        _timeframes(timeframes, config.data.timeframes),
        _registry(strategies),
    )

    payload = result.to_dict()
    payload.pop("replaced", None)
    payload.pop("retested", None)
    console.print(Panel("Single Backtest Result", border_style="blue"))
    console.print_json(json.dumps(payload))


@app.command()
def results(
    top: int = typer.Option(20, "--top", "-n", help="Number of results to show"),
    symbol: Optional[str] = typer.Option(None, "--symbol", "-s", help="Show a single symbol"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path"),
):
    """Show stored results."""
    config = _load(config_path)
    store = ResultStore(config.store.results_path, read_only=True)

    entries = store.results()
    if symbol:
        entries = [r for r in entries if r.symbol == (sanitize_symbol(symbol) or symbol)]

    if not entries:
        console.print("[yellow]No stored results[/yellow]")
        return

    entries = sorted(entries, key=lambda r: r.overall_win_rate, reverse=True)[:top]

    table = Table(title=f"Backtest Results ({store.path})")
    table.add_column("Symbol", style="cyan")
    table.add_column("Overall", style="green")
    for tf in config.data.timeframes:
        table.add_column(tf, style="magenta")
    table.add_column("Retested", style="yellow")

    for entry in entries:
        cells = []
        for tf in config.data.timeframes:
            tf_result = entry.timeframes.get(tf)
            if tf_result is None or not tf_result.strategy:
                cells.append("-")
            else:
                cells.append(f"{tf_result.strategy} {tf_result.win_rate:.1f}% ({tf_result.trades})")
        table.add_row(entry.symbol, f"{entry.overall_win_rate:.2f}%", *cells, entry.retested)

    console.print(table)


@app.command()
def reset(
    symbols: Optional[str] = typer.Option(None, "--symbols", "-s", help="Comma-separated symbols, all when omitted"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path"),
):
    """Clear retested flags so the next backtest run processes symbols again."""
    config = _load(config_path)
    if not Path(config.store.results_path).expanduser().exists():
        console.print("[yellow]No stored results[/yellow]")
        return

    try:
        store = ResultStore(config.store.results_path)
        changed = store.reset_retested(_split(symbols) or None)
    except ResultStoreError as e:
        console.print(f"[red]Fatal: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Reset {changed} entries[/green]")


@app.command("strategies")
def list_strategies():
    """List built-in strategies."""
    registry = default_registry()

    table = Table(title="Strategies")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="magenta")
    table.add_column("Description", style="green")

    for name, strategy in registry.items():
        table.add_row(name, strategy.__class__.__name__, strategy.get_description())

    console.print(table)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", "-s", help="Show current configuration"),
    validate: bool = typer.Option(False, "--validate", "-v", help="Validate configuration"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Configuration file path"),
):
    """Manage configuration."""
    if show:
        config = _load(config_path)
        sim = config.simulation

        config_text = f"""
Name: {config.name}
Description: {config.description}

Data Configuration:
  Data Directory: {config.data.data_dir}
  Timeframes: {', '.join(config.data.timeframes)}
  Universe File: {config.data.universe_file}

Simulation Configuration:
  Warm-up / Lookback / Cooldown: {sim.warmup_bars} / {sim.lookback} / {sim.cooldown}
  Max Holding Bars: {sim.max_holding_bars}
  Initial Balance: ${sim.initial_balance:,.2f}
  Risk Fraction: {sim.risk_fraction:.1%} (min ${sim.min_risk_amount:,.2f})
  Stop / Target / Lock (ATR): {sim.stop_factor} / {sim.target_factor} / {sim.lock_factor}

Scheduler Configuration:
  Concurrency: {config.scheduler.concurrency}
  Round Delay: {config.scheduler.round_delay}s

Results File: {config.store.results_path}
        """

        console.print(Panel(config_text, title="STRATSEL Configuration", border_style="blue"))

    elif validate:
        try:
            load_config(config_path)
            console.print("[green]Configuration is valid[/green]")
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]Configuration validation failed: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

    else:
        console.print("Use --show to display configuration or --validate to validate it")


@app.command()
def version():
    """Show version information."""
    from stratsel import __version__

    console.print(Panel(f"STRATSEL\nVersion: {__version__}", title="Version Information", border_style="green"))


if __name__ == "__main__":
    app()
