"""Bollinger Band engine implemented as pure functions on pandas Series/DataFrames.

Each stage is a standalone function: source extraction, rolling mean, rolling
dispersion, band composition and offset shifting.  :func:`bollinger_bands`
chains them.  NaN marks positions that are undefined, either for lack of
lookback data or because an offset shifted them out of range.  No stage
raises for those positions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from indicators.settings import BandSettings, MAType, Source

logger = logging.getLogger(__name__)

BAND_COLUMNS: list[str] = ["timestamp", "basis", "upper", "lower"]

_DISPERSION_BLOCK_ELEMENTS: int = 1 << 20


@dataclass(frozen=True)
class BandPoint:
    """One output row, aligned with the candle at the same position.

    ``basis``, ``upper`` and ``lower`` are NaN where undefined.
    """

    timestamp: Any
    basis: float
    upper: float
    lower: float


# ---------------------------------------------------------------------------
# Source extraction
# ---------------------------------------------------------------------------

_SOURCE_COLUMNS: dict[Source, str] = {
    Source.OPEN: "open",
    Source.HIGH: "high",
    Source.LOW: "low",
    Source.CLOSE: "close",
}


def extract_source(candles: pd.DataFrame, source: Source) -> pd.Series:
    """Project each candle to the price field named by *source*.

    Args:
        candles: OHLCV DataFrame.
        source:  Field selector.

    Returns:
        A float64 Series with a fresh RangeIndex, one value per candle.

    Raises:
        KeyError: If *candles* lacks the selected column.
    """
    column = _SOURCE_COLUMNS[source]
    if column not in candles.columns:
        raise KeyError(f"Candle data has no '{column}' column")
    return candles[column].astype("float64").reset_index(drop=True)


# ---------------------------------------------------------------------------
# Moving averages
# ---------------------------------------------------------------------------


def rolling_mean(series: pd.Series, length: int) -> pd.Series:
    """Simple Moving Average.

    Args:
        series: Price or value series.
        length: Window length.

    Returns:
        A Series of the rolling arithmetic mean.  The first ``length - 1``
        values will be NaN.
    """
    return series.rolling(window=length, min_periods=length).mean()


MOVING_AVERAGES: dict[MAType, Callable[[pd.Series, int], pd.Series]] = {
    MAType.SMA: rolling_mean,
}


# ---------------------------------------------------------------------------
# Dispersion
# ---------------------------------------------------------------------------


def rolling_dispersion(series: pd.Series, mean: pd.Series, length: int) -> pd.Series:
    """Rolling population standard deviation about a precomputed mean.

    The variance at position ``i`` is the average squared deviation of the
    ``length`` values ending at ``i`` from ``mean[i]`` (divided by
    ``length``, not ``length - 1``).  Wherever ``mean`` is NaN the result is
    NaN too.

    Args:
        series: Value series the mean was computed from.
        mean:   Rolling mean of *series*, position-aligned with it.
        length: Window length used for *mean*.

    Returns:
        Rolling population standard deviation, same index as *series*.
    """
    values = series.to_numpy(dtype="float64")
    centre = mean.to_numpy(dtype="float64")
    result = np.full(len(values), np.nan)

    if len(values) >= length:
        windows = sliding_window_view(values, length)
        centres = centre[length - 1:]
        out = result[length - 1:]
        # Deviations are materialised a block of windows at a time, so peak
        # memory stays near _DISPERSION_BLOCK_ELEMENTS floats for any n.
        step = max(1, _DISPERSION_BLOCK_ELEMENTS // length)
        for start in range(0, len(windows), step):
            stop = start + step
            deviations = windows[start:stop] - centres[start:stop, np.newaxis]
            out[start:stop] = np.sqrt((deviations ** 2).mean(axis=1))

    result[np.isnan(centre)] = np.nan
    return pd.Series(result, index=series.index)


# ---------------------------------------------------------------------------
# Band composition
# ---------------------------------------------------------------------------


def compose_bands(
    mean: pd.Series,
    dispersion: pd.Series,
    multiplier: float,
) -> tuple[pd.Series, pd.Series]:
    """Upper and lower bands at ``mean +/- multiplier * dispersion``.

    Both bands are NaN wherever either input is NaN.

    Returns:
        ``(upper, lower)``.
    """
    defined = mean.notna() & dispersion.notna()
    width = multiplier * dispersion
    upper = (mean + width).where(defined)
    lower = (mean - width).where(defined)
    return upper, lower


def apply_offset(series: pd.Series, offset: int) -> pd.Series:
    """Shift values by *offset* positions: ``out[i] = series[i - offset]``.

    Positions whose source index falls outside the series become NaN.  A
    positive offset lags, a negative one looks ahead, and 0 returns an
    equal copy.
    """
    return series.shift(offset)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def bollinger_bands(
    candles: pd.DataFrame,
    settings: BandSettings | None = None,
) -> pd.DataFrame:
    """Bollinger Bands over an OHLCV DataFrame.

    Args:
        candles:  OHLCV DataFrame ordered by increasing timestamp.  Rows are
                  used in the given order; nothing is sorted or dropped.
                  Timestamps come from the ``timestamp`` column, or from the
                  index when that column is absent.
        settings: Band parameters.  Defaults to :class:`BandSettings`.

    Returns:
        A DataFrame with columns ``timestamp``, ``basis``, ``upper``,
        ``lower`` and one row per candle.  Values are shifted by
        ``settings.offset``; timestamps are not.
    """
    settings = settings or BandSettings()
    logger.debug("bollinger_bands: %d candles, settings=%s", len(candles), settings.to_dict())

    values = extract_source(candles, settings.source)
    basis = MOVING_AVERAGES[settings.ma_type](values, settings.length)
    dispersion = rolling_dispersion(values, basis, settings.length)
    upper, lower = compose_bands(basis, dispersion, settings.std_dev_multiplier)

    if "timestamp" in candles.columns:
        timestamps = candles["timestamp"].reset_index(drop=True)
    else:
        timestamps = pd.Series(candles.index, name="timestamp")

    return pd.DataFrame(
        {
            "timestamp": timestamps,
            "basis": apply_offset(basis, settings.offset),
            "upper": apply_offset(upper, settings.offset),
            "lower": apply_offset(lower, settings.offset),
        },
        columns=BAND_COLUMNS,
    )


def to_band_points(bands: pd.DataFrame) -> list[BandPoint]:
    """Convert a :func:`bollinger_bands` result into :class:`BandPoint` records."""
    return [
        BandPoint(
            timestamp=row.timestamp,
            basis=float(row.basis),
            upper=float(row.upper),
            lower=float(row.lower),
        )
        for row in bands.itertuples(index=False)
    ]
