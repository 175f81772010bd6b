"""Tests for candle conversion, CSV round-trips and sample data generation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import pytest

from data.candles import (
    CANDLE_COLUMNS,
    Candle,
    candles_to_frame,
    read_candles_csv,
    write_candles_csv,
)
from data.sample import PRICE_FLOOR, generate_sample_candles
from indicators.core import bollinger_bands
from indicators.settings import BandSettings


# ---------------------------------------------------------------------------
# Candle records
# ---------------------------------------------------------------------------

class TestCandlesToFrame:
    def test_epoch_millis(self) -> None:
        candles = [
            Candle(1_704_067_200_000, 1.0, 2.0, 0.5, 1.5, 100.0),
            Candle(1_704_153_600_000, 1.5, 2.5, 1.0, 2.0, 200.0),
        ]
        df = candles_to_frame(candles)

        assert list(df.columns) == CANDLE_COLUMNS
        assert df["timestamp"].iloc[0] == pd.Timestamp("2024-01-01", tz="UTC")
        assert df["close"].tolist() == [1.5, 2.0]
        assert df["volume"].dtype == "float64"

    def test_datetimes(self) -> None:
        ts = datetime(2024, 3, 1, tzinfo=timezone.utc)
        df = candles_to_frame([Candle(ts, 1, 1, 1, 1, 1)])
        assert df["timestamp"].iloc[0] == pd.Timestamp(ts)

    def test_empty(self) -> None:
        df = candles_to_frame([])
        assert df.empty
        assert list(df.columns) == CANDLE_COLUMNS

    def test_order_preserved_with_warning(self, caplog) -> None:
        candles = [
            Candle(2_000, 1, 1, 1, 2.0, 1),
            Candle(1_000, 1, 1, 1, 1.0, 1),
        ]
        with caplog.at_level(logging.WARNING, logger="data.candles"):
            df = candles_to_frame(candles)

        assert df["close"].tolist() == [2.0, 1.0]
        assert "not in increasing order" in caplog.text

    def test_duplicates_warned(self, caplog) -> None:
        candles = [Candle(1_000, 1, 1, 1, 1, 1), Candle(1_000, 1, 1, 1, 1, 1)]
        with caplog.at_level(logging.WARNING, logger="data.candles"):
            candles_to_frame(candles)
        assert "duplicates" in caplog.text


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

class TestCandlesCsv:
    def test_round_trip(self, sample_ohlcv_df: pd.DataFrame, tmp_path: Path) -> None:
        path = write_candles_csv(sample_ohlcv_df, tmp_path / "out" / "candles.csv")
        loaded = read_candles_csv(path)

        assert list(loaded.columns) == CANDLE_COLUMNS
        pd.testing.assert_series_equal(
            loaded["timestamp"], sample_ohlcv_df["timestamp"], check_dtype=False
        )
        pd.testing.assert_series_equal(loaded["close"], sample_ohlcv_df["close"])

    def test_iso_timestamps_and_extra_columns(self, tmp_path: Path) -> None:
        path = tmp_path / "iso.csv"
        path.write_text(
            "timestamp,open,high,low,close,volume,trades\n"
            "2024-01-01T00:00:00Z,1,2,0.5,1.5,10,3\n"
            "2024-01-02T00:00:00Z,1.5,2.5,1,2,20,4\n"
        )
        df = read_candles_csv(path)

        assert list(df.columns) == CANDLE_COLUMNS
        assert df["timestamp"].iloc[1] == pd.Timestamp("2024-01-02", tz="UTC")
        assert df["open"].dtype == "float64"

    def test_missing_column(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_text("timestamp,open,high,low,volume\n1,1,1,1,1\n")
        with pytest.raises(KeyError, match="close"):
            read_candles_csv(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.touch()
        df = read_candles_csv(path)
        assert df.empty
        assert list(df.columns) == CANDLE_COLUMNS


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

class TestSampleCandles:
    def test_shape(self) -> None:
        df = generate_sample_candles(seed=1)
        assert len(df) == 300
        assert list(df.columns) == CANDLE_COLUMNS
        assert df["timestamp"].is_monotonic_increasing
        assert df["timestamp"].is_unique
        assert df["timestamp"].iloc[0] == pd.Timestamp("2024-01-01", tz="UTC")

    def test_daily_spacing(self) -> None:
        df = generate_sample_candles(10, start="2023-05-01", seed=1)
        assert (df["timestamp"].diff().dropna() == pd.Timedelta(days=1)).all()

    def test_seed_is_reproducible(self) -> None:
        pd.testing.assert_frame_equal(
            generate_sample_candles(50, seed=7), generate_sample_candles(50, seed=7)
        )

    def test_ohlc_consistency(self) -> None:
        df = generate_sample_candles(500, seed=3)
        assert (df["low"] <= df["open"]).all()
        assert (df["low"] <= df["close"]).all()
        assert (df["open"] <= df["high"]).all()
        assert (df["close"] <= df["high"]).all()

    def test_value_ranges(self) -> None:
        df = generate_sample_candles(500, seed=11)
        assert (df["volume"] >= 100_000).all()
        assert (df["volume"] < 1_100_000).all()
        # The floor applies to the reference price; lows can dip 2% under it.
        assert (df["low"] >= round(PRICE_FLOOR * 0.98, 2) - 0.01).all()
        assert ((df[["open", "high", "low", "close"]] * 100).round(6) % 1 == 0).all().all()

    def test_zero_and_negative(self) -> None:
        assert generate_sample_candles(0).empty
        with pytest.raises(ValueError):
            generate_sample_candles(-1)

    def test_feeds_engine(self) -> None:
        df = generate_sample_candles(60, seed=5)
        result = bollinger_bands(df, BandSettings(length=20))
        assert len(result) == 60
        assert result["basis"].iloc[19:].notna().all()
