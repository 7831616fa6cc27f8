"""Shared test fixtures for the quantitative signal engine."""

import math
from collections.abc import Callable

import pytest

from quantsignal.config import AnalysisSettings, AppSettings
from quantsignal.models import PricePoint, SeriesInput

SeriesFactory = Callable[..., SeriesInput]


def _series(
    n: int = 60,
    start: float = 100.0,
    drift: float = 0.5,
    wave: float = 2.0,
    volume: float = 1_000_000.0,
) -> SeriesInput:
    closes = [start + drift * i + wave * math.sin(i / 3) for i in range(n)]
    opens = [closes[0]] + closes[:-1]
    highs = [max(o, c) * 1.01 for o, c in zip(opens, closes)]
    lows = [min(o, c) * 0.99 for o, c in zip(opens, closes)]
    volumes = [volume * (1 + 0.1 * math.cos(i / 4)) for i in range(n)]
    return SeriesInput(opens=opens, highs=highs, lows=lows, closes=closes, volumes=volumes)


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (debug logging, fail-fast batch)."""
    return AppSettings(
        log_level="DEBUG",
        analysis=AnalysisSettings(batch_concurrency=0, isolate_failures=False),
    )


@pytest.fixture
def btc_price() -> PricePoint:
    """BTC snapshot with a full 24h range and ATH/ATL."""
    return PricePoint(
        symbol="BTC",
        name="Bitcoin",
        price=50_000.0,
        market_cap=1_000_000_000_000.0,
        volume_24h=30_000_000_000.0,
        change_24h=2.5,
        high_24h=51_000.0,
        low_24h=48_500.0,
        ath=69_000.0,
        atl=67.0,
        timestamp=1_700_000_000.0,
    )


@pytest.fixture
def bare_price() -> PricePoint:
    """Snapshot with no 24h range, ATH or ATL."""
    return PricePoint(symbol="BARE", price=10.0, timestamp=1_700_000_000.0)


@pytest.fixture
def make_price() -> Callable[..., PricePoint]:
    """Factory for snapshots; keyword arguments override the defaults."""

    def _make(symbol: str = "ASSET", **overrides: float) -> PricePoint:
        fields = {
            "price": 100.0,
            "market_cap": 1_000_000_000.0,
            "volume_24h": 50_000_000.0,
            "change_24h": 0.0,
            "high_24h": 104.0,
            "low_24h": 97.0,
            "ath": 150.0,
            "atl": 5.0,
            "timestamp": 1_700_000_000.0,
        }
        fields.update(overrides)
        return PricePoint(symbol=symbol, **fields)

    return _make


@pytest.fixture
def make_series() -> SeriesFactory:
    """Factory for a deterministic OHLCV series (drift plus a sine wave)."""
    return _series


@pytest.fixture
def uptrend_series() -> SeriesInput:
    """60 bars of steady advance with mild oscillation."""
    return _series(n=60, drift=1.0, wave=1.0)
