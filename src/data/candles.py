"""Candle records and conversion to the canonical OHLCV DataFrame.

Every candle frame in this project has the columns in :data:`CANDLE_COLUMNS`:

* ``timestamp`` -- timezone-aware UTC :class:`datetime64[ns, UTC]`
* ``open``, ``high``, ``low``, ``close``, ``volume`` -- float64

Rows keep the order they were given in.  Callers are responsible for
supplying candles strictly ordered by timestamp without duplicates; the
loaders only warn when that does not hold.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from app.logging import get_logger

logger = get_logger(__name__)

CANDLE_COLUMNS: list[str] = ["timestamp", "open", "high", "low", "close", "volume"]

_PRICE_COLUMNS: tuple[str, ...] = ("open", "high", "low", "close", "volume")


@dataclass(frozen=True)
class Candle:
    """One OHLCV sample.

    ``timestamp`` is a :class:`datetime` or Unix epoch milliseconds.
    """

    timestamp: Union[datetime, int, float]
    open: float
    high: float
    low: float
    close: float
    volume: float


def _to_utc(timestamps: pd.Series) -> pd.Series:
    """Parse epoch milliseconds or datetime-like values into UTC datetimes."""
    if pd.api.types.is_numeric_dtype(timestamps):
        return pd.to_datetime(timestamps, unit="ms", utc=True)
    return pd.to_datetime(timestamps, utc=True)


def _warn_if_unordered(df: pd.DataFrame, origin: str) -> None:
    if len(df) > 1 and not df["timestamp"].is_monotonic_increasing:
        logger.warning("Candle timestamps in %s are not in increasing order", origin)
    elif df["timestamp"].duplicated().any():
        logger.warning("Candle timestamps in %s contain duplicates", origin)


def empty_frame() -> pd.DataFrame:
    """Return a zero-row candle frame with the canonical columns."""
    return pd.DataFrame(columns=CANDLE_COLUMNS)


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """Build a canonical candle DataFrame from :class:`Candle` records."""
    rows = [astuple(c) for c in candles]
    if not rows:
        return empty_frame()

    df = pd.DataFrame(rows, columns=CANDLE_COLUMNS)
    df["timestamp"] = _to_utc(df["timestamp"])
    for col in _PRICE_COLUMNS:
        df[col] = df[col].astype("float64")

    _warn_if_unordered(df, "candle list")
    return df


def read_candles_csv(path: Path) -> pd.DataFrame:
    """Read an OHLCV CSV file with a header row into a candle DataFrame.

    Numeric timestamps are taken as Unix epoch milliseconds; anything else
    is parsed as a datetime string.  Extra columns are dropped.  Returns an
    empty DataFrame for zero-byte files.

    Raises:
        KeyError: If a required column is missing.
    """
    path = Path(path)
    if path.stat().st_size == 0:
        logger.warning("Skipping empty file: %s", path)
        return empty_frame()

    df = pd.read_csv(path)
    missing = [c for c in CANDLE_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"{path.name} is missing column(s): {', '.join(missing)}")

    df = df[CANDLE_COLUMNS].copy()
    df["timestamp"] = _to_utc(df["timestamp"])
    for col in _PRICE_COLUMNS:
        df[col] = df[col].astype("float64")

    logger.info("Read %d candles from %s", len(df), path)
    _warn_if_unordered(df, path.name)
    return df


def write_candles_csv(df: pd.DataFrame, path: Path) -> Path:
    """Write a candle frame to CSV with epoch-millisecond timestamps."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    out = df[CANDLE_COLUMNS].copy()
    out["timestamp"] = (
        out["timestamp"] - pd.Timestamp("1970-01-01", tz="UTC")
    ) // pd.Timedelta(milliseconds=1)
    out.to_csv(path, index=False)

    logger.info("Wrote %d candles to %s", len(out), path)
    return path
