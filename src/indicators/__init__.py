"""Bollinger Band indicator engine.

Pure-function implementation built on numpy and pandas.  Every call is a
full recomputation from ``(candles, settings)``; nothing is cached or kept
between calls.
"""

from indicators.core import (
    BAND_COLUMNS,
    BandPoint,
    apply_offset,
    bollinger_bands,
    compose_bands,
    extract_source,
    rolling_dispersion,
    rolling_mean,
    to_band_points,
)
from indicators.settings import DEFAULT_SETTINGS, BandSettings, MAType, Source

__all__ = [
    "BAND_COLUMNS",
    "BandPoint",
    "BandSettings",
    "DEFAULT_SETTINGS",
    "MAType",
    "Source",
    "apply_offset",
    "bollinger_bands",
    "compose_bands",
    "extract_source",
    "rolling_dispersion",
    "rolling_mean",
    "to_band_points",
]
