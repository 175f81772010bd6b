"""Data layer -- candle records, CSV loading, and sample data.

Quick usage::

    from data import read_candles_csv, generate_sample_candles

    df = read_candles_csv(Path("btc_daily.csv"))
    demo = generate_sample_candles(300, seed=7)
"""

from data.candles import (
    CANDLE_COLUMNS,
    Candle,
    candles_to_frame,
    read_candles_csv,
    write_candles_csv,
)
from data.sample import generate_sample_candles

__all__ = [
    "CANDLE_COLUMNS",
    "Candle",
    "candles_to_frame",
    "generate_sample_candles",
    "read_candles_csv",
    "write_candles_csv",
]
