"""Synthetic OHLCV data for demos and tests.

Produces a daily random walk: each bar moves a reference price by up to +/-2,
never below a floor of 50, then scatters open/close inside a high/low range of
up to 2% around it.  The next bar walks from the previous close.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from data.candles import CANDLE_COLUMNS, empty_frame

DEFAULT_CANDLES: int = 300
PRICE_FLOOR: float = 50.0
MAX_STEP: float = 2.0
INTRADAY_RANGE: float = 0.02
VOLUME_RANGE: tuple[int, int] = (100_000, 1_100_000)


def generate_sample_candles(
    n: int = DEFAULT_CANDLES,
    start: str = "2024-01-01",
    base_price: float = 100.0,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate *n* daily candles starting at *start*.

    Args:
        n:          Number of candles.
        start:      Date of the first candle (UTC midnight).
        base_price: Reference price before the first step.
        seed:       Seed for :func:`numpy.random.default_rng`.  The same seed
                    always yields the same frame.

    Returns:
        A canonical candle DataFrame with prices rounded to 2 decimals and
        integer-valued volume.

    Raises:
        ValueError: If *n* is negative.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    if n == 0:
        return empty_frame()

    rng = np.random.default_rng(seed)
    rows: list[list[float]] = []
    price = float(base_price)

    for _ in range(n):
        price = max(price + rng.uniform(-MAX_STEP, MAX_STEP), PRICE_FLOOR)

        high = price * (1.0 + rng.random() * INTRADAY_RANGE)
        low = price * (1.0 - rng.random() * INTRADAY_RANGE)
        open_ = low + rng.random() * (high - low)
        close = low + rng.random() * (high - low)
        volume = float(rng.integers(*VOLUME_RANGE))

        rows.append([round(open_, 2), round(high, 2), round(low, 2), round(close, 2), volume])
        price = close

    df = pd.DataFrame(rows, columns=CANDLE_COLUMNS[1:])
    df.insert(0, "timestamp", pd.date_range(start, periods=n, freq="D", tz="UTC"))
    return df
