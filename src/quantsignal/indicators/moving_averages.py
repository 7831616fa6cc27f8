"""Simple and exponential moving averages.

The EMA is seeded with the SMA of the first ``period`` values, then updated
with the standard recursive formula:
    alpha = 2 / (period + 1)
    EMA_t = alpha * price_t + (1 - alpha) * EMA_{t-1}

Values are returned at full precision; callers round at their own boundary.
"""

from collections.abc import Sequence

from quantsignal.indicators.models import EMAResult, SMAResult
from quantsignal.mathutils import ema_alpha, mean


def calculate_sma(prices: Sequence[float], period: int = 20) -> SMAResult:
    """Simple moving average of the last ``period`` prices (0 when empty)."""
    return SMAResult(value=mean(prices[-period:]), period=period)


def calculate_sma_series(prices: Sequence[float], period: int = 20) -> list[float]:
    """SMA for every full window, oldest first."""
    return [mean(prices[i - period + 1 : i + 1]) for i in range(period - 1, len(prices))]


def calculate_ema(
    prices: Sequence[float],
    period: int = 20,
    previous_ema: float | None = None,
) -> EMAResult:
    """Exponential moving average of ``prices``.

    Args:
        prices: Prices ordered oldest first.
        period: EMA period.
        previous_ema: Seed to continue from. When omitted, the SMA of the
            first ``period`` prices is the seed and updating starts after it.

    Returns:
        EMAResult with the final EMA value. A series shorter than ``period``
        yields its plain mean; an empty series yields 0.
    """
    alpha = ema_alpha(period)
    if previous_ema is None:
        ema = mean(prices[:period])
        start = period
    else:
        ema = previous_ema
        start = 0

    for price in prices[start:]:
        ema = price * alpha + ema * (1 - alpha)

    return EMAResult(value=ema, period=period, alpha=alpha)


def calculate_ema_series(prices: Sequence[float], period: int = 20) -> list[float]:
    """EMA at every point from the seed onward (first value = SMA seed)."""
    if not prices:
        return []
    alpha = ema_alpha(period)
    ema = mean(prices[:period])
    series = [ema]
    for price in prices[period:]:
        ema = price * alpha + ema * (1 - alpha)
        series.append(ema)
    return series
