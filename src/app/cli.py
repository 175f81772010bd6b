"""Click CLI for Bollinger Band Lab.

Entry point: ``bblab`` (installed via pyproject.toml) or ``python -m app.cli``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import click
import pandas as pd
from rich.console import Console
from rich.table import Table

from app.config import get_config, load_band_settings
from app.display import format_date, format_price, format_volume
from app.logging import get_logger, setup_logging
from indicators.settings import BandSettings, Source

logger = get_logger(__name__)
console = Console()

_DEFAULT_ROWS = 20


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error(message: str) -> None:
    """Print a styled error message and exit."""
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise SystemExit(1)


def _section(name: str) -> dict[str, Any]:
    """Config section *name*, or an empty dict when it is not configured."""
    try:
        return get_config(name) or {}
    except KeyError:
        return {}


def _resolve_settings(
    length: Optional[int],
    mult: Optional[float],
    offset: Optional[int],
    source: Optional[str],
) -> BandSettings:
    """Config settings with any CLI overrides applied."""
    overrides: dict[str, Any] = {}
    if length is not None:
        overrides["length"] = length
    if mult is not None:
        overrides["std_dev_multiplier"] = mult
    if offset is not None:
        overrides["offset"] = offset
    if source is not None:
        overrides["source"] = source
    return load_band_settings().replace(**overrides)


def _sample_frame(candles: Optional[int], seed: Optional[int]) -> pd.DataFrame:
    from data.sample import DEFAULT_CANDLES, generate_sample_candles  # lazy import

    cfg = _section("sample")
    return generate_sample_candles(
        n=candles if candles is not None else cfg.get("candles", DEFAULT_CANDLES),
        start=str(cfg.get("start", "2024-01-01")),
        base_price=float(cfg.get("base_price", 100.0)),
        seed=seed if seed is not None else cfg.get("seed"),
    )


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(package_name="bollinger-band-lab")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Bollinger Band Lab -- compute Bollinger Bands over OHLCV candles."""
    if verbose:
        setup_logging("DEBUG", force=True)
    else:
        level = get_config().get("log_level")
        if level:
            setup_logging(str(level), force=True)


# ---------------------------------------------------------------------------
# bands
# ---------------------------------------------------------------------------

@cli.command()
@click.option(
    "--csv",
    "csv_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="OHLCV CSV file (default: generated sample data).",
)
@click.option("--length", type=int, default=None, help="Window length in bars.")
@click.option("--mult", type=float, default=None, help="Standard deviation multiplier.")
@click.option("--offset", type=int, default=None, help="Shift output values by N bars.")
@click.option(
    "--source",
    type=click.Choice([s.value for s in Source], case_sensitive=False),
    default=None,
    help="Candle field to compute from.",
)
@click.option("--candles", type=int, default=None, help="Sample size when no CSV is given.")
@click.option("--seed", type=int, default=None, help="Sample data seed.")
@click.option("--rows", type=int, default=None, help="Show the last N rows.")
@click.option(
    "--output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the full band table to this CSV file.",
)
def bands(
    csv_path: Optional[Path],
    length: Optional[int],
    mult: Optional[float],
    offset: Optional[int],
    source: Optional[str],
    candles: Optional[int],
    seed: Optional[int],
    rows: Optional[int],
    output: Optional[Path],
) -> None:
    """Compute Bollinger Bands and print the most recent rows."""
    from data.candles import read_candles_csv  # lazy import
    from indicators.core import bollinger_bands

    try:
        settings = _resolve_settings(length, mult, offset, source)
    except ValueError as exc:
        _error(str(exc))

    try:
        df = read_candles_csv(csv_path) if csv_path else _sample_frame(candles, seed)
        result = bollinger_bands(df, settings)
    except Exception as exc:
        logger.exception("bands failed")
        _error(str(exc))

    logger.info(
        "bands: %d rows length=%d mult=%s offset=%d source=%s",
        len(result),
        settings.length,
        settings.std_dev_multiplier,
        settings.offset,
        settings.source.value,
    )

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        result.to_csv(output, index=False)
        console.print(f"[green]Wrote[/green] {len(result)} rows to {output}")

    if result.empty:
        console.print("[yellow]No candles to compute.[/yellow]")
        return

    n_rows = rows if rows is not None else _section("display").get("rows", _DEFAULT_ROWS)
    shown = result.tail(n_rows)
    candles_shown = df.reset_index(drop=True).iloc[shown.index]

    table = Table(
        title=(
            f"Bollinger Bands ({settings.length}, {settings.std_dev_multiplier:g}, "
            f"{settings.source.value}, offset {settings.offset})"
        )
    )
    table.add_column("Date", style="bold")
    table.add_column(settings.source.value.capitalize(), justify="right")
    table.add_column("Upper", justify="right", style="blue")
    table.add_column("Basis", justify="right", style="dark_orange")
    table.add_column("Lower", justify="right", style="blue")
    table.add_column("Volume", justify="right", style="dim")

    # itertuples keeps per-column dtypes; NaN bands must stay float.
    for band, price, volume in zip(
        shown.itertuples(index=False),
        candles_shown[settings.source.value],
        candles_shown["volume"],
    ):
        table.add_row(
            format_date(band.timestamp),
            format_price(price),
            format_price(band.upper),
            format_price(band.basis),
            format_price(band.lower),
            format_volume(volume),
        )

    console.print(table)


# ---------------------------------------------------------------------------
# sample
# ---------------------------------------------------------------------------

@cli.command()
@click.option(
    "--output",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="CSV file to write.",
)
@click.option("--candles", type=int, default=None, help="Number of daily candles.")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible data.")
def sample(output: Path, candles: Optional[int], seed: Optional[int]) -> None:
    """Write synthetic daily OHLCV candles to a CSV file."""
    from data.candles import write_candles_csv  # lazy import

    try:
        df = _sample_frame(candles, seed)
        write_candles_csv(df, output)
    except Exception as exc:
        logger.exception("sample failed")
        _error(str(exc))

    console.print(f"[green]Done.[/green] Wrote {len(df)} candles to {output}.")


# ---------------------------------------------------------------------------
# show-config
# ---------------------------------------------------------------------------

@cli.command("show-config")
def show_config() -> None:
    """Print the effective Bollinger Band settings."""
    try:
        settings = load_band_settings()
    except ValueError as exc:
        _error(f"Invalid 'bollinger' config: {exc}")

    table = Table(title="Band Settings")
    table.add_column("Setting", style="bold")
    table.add_column("Value", justify="right")
    for key, value in settings.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


if __name__ == "__main__":
    cli()
