"""Shared test fixtures for Bollinger Band Lab.

Provides reusable OHLCV DataFrames and an isolated configuration so tests
never read a developer's local ``config/config.yaml``.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

import app.config as app_config


@pytest.fixture()
def sample_ohlcv_df() -> pd.DataFrame:
    """A 100-row OHLCV DataFrame with realistic daily price data.

    The series starts at $100 and follows a random walk with moderate
    volatility.  Volume oscillates around 1 000 000 shares.
    """
    rng = np.random.default_rng(42)
    n = 100

    log_returns = rng.normal(loc=0.0005, scale=0.015, size=n)
    close = 100.0 * np.exp(np.cumsum(log_returns))

    high = close * (1.0 + rng.uniform(0.001, 0.02, size=n))
    low = close * (1.0 - rng.uniform(0.001, 0.02, size=n))
    open_ = low + rng.uniform(0.3, 0.7, size=n) * (high - low)
    volume = rng.integers(500_000, 2_000_000, size=n).astype(float)

    timestamps = pd.date_range("2024-01-01", periods=n, freq="D", tz="UTC")

    return pd.DataFrame(
        {
            "timestamp": timestamps,
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
            "volume": volume,
        }
    )


@pytest.fixture()
def small_ohlcv_df() -> pd.DataFrame:
    """A 5-row OHLCV DataFrame whose closes are 1..5.

    Opens, highs and lows are offset from the close by fixed amounts so each
    source field gives an easily hand-checked series.
    """
    close = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    timestamps = pd.date_range("2024-06-01", periods=len(close), freq="D", tz="UTC")

    return pd.DataFrame(
        {
            "timestamp": timestamps,
            "open": close - 0.5,
            "high": close + 1.0,
            "low": close - 1.0,
            "close": close,
            "volume": np.full(len(close), 1_000_000.0),
        }
    )


@pytest.fixture()
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the config loader at a temp directory and clear BBL_* env vars.

    Returns a callable that writes ``config.yaml`` content into that
    directory.
    """
    config_path = tmp_path / "config.yaml"
    monkeypatch.setattr(app_config, "_CONFIG_PATH", config_path)
    monkeypatch.setattr(app_config, "_CONFIG_EXAMPLE_PATH", tmp_path / "missing.yaml")
    for env_var in app_config._ENV_OVERRIDES:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setattr(app_config, "_instance", None)

    def write(text: str) -> Path:
        config_path.write_text(text)
        app_config.load_config(reload=True)
        return config_path

    yield write

    app_config._instance = None
