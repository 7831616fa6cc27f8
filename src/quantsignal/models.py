"""Shared input records and the discrete trading signal.

Records are frozen: an analysis never mutates its inputs, which is what lets
the formula fan-out share them across worker threads without coordination.
"""

import time
from dataclasses import dataclass, field
from enum import Enum

from quantsignal.exceptions import InvalidSeriesError
from quantsignal.mathutils import simple_returns


class Signal(str, Enum):
    """Overall trading action."""

    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"

    @property
    def is_bullish(self) -> bool:
        return self in (Signal.STRONG_BUY, Signal.BUY)


@dataclass(frozen=True)
class PricePoint:
    """Single market-data snapshot for one asset.

    Several snapshot formulas assume ``price > 0``; a non-positive price
    makes them fall back to their neutral result.
    """

    symbol: str
    price: float
    market_cap: float = 0.0
    volume_24h: float = 0.0
    change_24h: float = 0.0  # percent
    high_24h: float | None = None
    low_24h: float | None = None
    ath: float | None = None
    atl: float | None = None
    name: str | None = None
    timestamp: float = field(default_factory=time.time)

    @property
    def has_range(self) -> bool:
        """True when both 24h high and low are present and non-zero."""
        return bool(self.high_24h) and bool(self.low_24h)


@dataclass(frozen=True)
class SeriesInput:
    """Index-aligned OHLCV history, oldest first.

    Args:
        opens, highs, lows, closes, volumes: Equal-length price/volume arrays.
        benchmark_closes: Optional market benchmark closes used for Beta.

    Raises:
        InvalidSeriesError: If the OHLCV arrays differ in length.
    """

    opens: tuple[float, ...]
    highs: tuple[float, ...]
    lows: tuple[float, ...]
    closes: tuple[float, ...]
    volumes: tuple[float, ...]
    benchmark_closes: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so the record stays immutable.
        for name in ("opens", "highs", "lows", "closes", "volumes"):
            object.__setattr__(self, name, tuple(float(v) for v in getattr(self, name)))
        if self.benchmark_closes is not None:
            object.__setattr__(
                self, "benchmark_closes", tuple(float(v) for v in self.benchmark_closes)
            )

        lengths = {
            len(self.opens),
            len(self.highs),
            len(self.lows),
            len(self.closes),
            len(self.volumes),
        }
        if len(lengths) != 1:
            raise InvalidSeriesError(
                "OHLCV arrays must share one length, got "
                f"opens={len(self.opens)} highs={len(self.highs)} "
                f"lows={len(self.lows)} closes={len(self.closes)} "
                f"volumes={len(self.volumes)}"
            )

    def __len__(self) -> int:
        return len(self.closes)

    def returns(self) -> list[float]:
        """Simple returns of the close series."""
        return simple_returns(self.closes)

    def benchmark_returns(self) -> list[float]:
        """Simple returns of the benchmark series, empty when absent."""
        if self.benchmark_closes is None:
            return []
        return simple_returns(self.benchmark_closes)
