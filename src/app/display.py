"""Text formatting for candle and band values shown in the CLI."""

from __future__ import annotations

from typing import Any

import pandas as pd

MISSING: str = "-"


def format_price(value: float) -> str:
    """Two decimals, or :data:`MISSING` for NaN/NaT/None."""
    if pd.isna(value):
        return MISSING
    return f"{value:.2f}"


def format_volume(volume: float) -> str:
    """Compact volume: ``1.2M``, ``3.4K``, or the plain integer below 1000."""
    if volume >= 1_000_000:
        return f"{volume / 1_000_000:.1f}M"
    if volume >= 1_000:
        return f"{volume / 1_000:.1f}K"
    return str(int(volume))


def format_date(timestamp: Any) -> str:
    """Date as ``Jan 05, 2024``; epoch milliseconds are accepted too."""
    if isinstance(timestamp, (int, float)):
        ts = pd.Timestamp(timestamp, unit="ms", tz="UTC")
    else:
        ts = pd.Timestamp(timestamp)
    if pd.isna(ts):
        return MISSING
    return ts.strftime("%b %d, %Y")
