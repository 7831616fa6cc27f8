"""Statistical primitives shared by every formula.

All functions are total: empty or degenerate input yields 0 (or the neutral
value documented per function) rather than an exception, NaN or infinity.
Intermediate values stay at full float precision; rounding happens only at
formula boundaries through ``round_half_up``.
"""

import math
from collections.abc import Callable, Sequence
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import TypeVar

T = TypeVar("T")

#: Above 2**53 a float has no fractional part left to round.
_MAX_ROUNDABLE = 2.0**53


def round_half_up(value: float, places: int = 2) -> float:
    """Round at a fixed number of decimal places, halves toward +infinity.

    Python's ``round`` uses banker's rounding (42.5 -> 42); scores in this
    package round 42.5 up to 43 and -42.5 up to -42. Non-finite values, and
    magnitudes where a float no longer carries fractional digits, are
    returned unchanged.
    """
    if not math.isfinite(value) or abs(value) >= _MAX_ROUNDABLE:
        return value
    exponent = Decimal(1).scaleb(-places)
    exact = Decimal(repr(value))
    if exact < 0:
        return -float((-exact).quantize(exponent, rounding=ROUND_HALF_DOWN))
    return float(exact.quantize(exponent, rounding=ROUND_HALF_UP))


def round_score(value: float) -> int:
    """Round a score to the nearest integer, halves toward +infinity."""
    return int(round_half_up(value, 0))


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """Divide, returning ``fallback`` when the denominator is zero."""
    if denominator == 0:
        return fallback
    return numerator / denominator


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def variance(values: Sequence[float], sample: bool = False) -> float:
    """Population variance, or sample variance (n-1) when ``sample`` is True.

    Sample variance of a single value falls back to 0.
    """
    n = len(values)
    if n == 0:
        return 0.0
    divisor = n - 1 if sample else n
    if divisor == 0 or all(v == values[0] for v in values):
        return 0.0
    avg = mean(values)
    return math.fsum((v - avg) ** 2 for v in values) / divisor


def standard_deviation(values: Sequence[float], sample: bool = False) -> float:
    """Square root of ``variance``. A constant series gives exactly 0."""
    return math.sqrt(variance(values, sample))


def covariance(x: Sequence[float], y: Sequence[float]) -> float:
    """Population covariance. Mismatched or empty input gives 0."""
    if len(x) != len(y) or not x:
        return 0.0
    mean_x = mean(x)
    mean_y = mean(y)
    return math.fsum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y)) / len(x)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation. Zero-variance input gives 0, never NaN."""
    if len(x) != len(y) or not x:
        return 0.0
    std_x = standard_deviation(x)
    std_y = standard_deviation(y)
    if std_x == 0 or std_y == 0:
        return 0.0
    return covariance(x, y) / (std_x * std_y)


def median(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def percentile(values: Sequence[float], pct: float) -> float:
    """Linearly interpolated percentile, ``pct`` in [0, 100].

    Empty input or an out-of-range ``pct`` gives 0.
    """
    if not values or pct < 0 or pct > 100:
        return 0.0
    return quantile(sorted(values), pct / 100)


def quantile(sorted_values: Sequence[float], q: float) -> float:
    """Interpolated quantile of an already sorted sequence, ``q`` in [0, 1]."""
    if not sorted_values:
        return 0.0
    index = q * (len(sorted_values) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return sorted_values[lower]
    weight = index - lower
    return sorted_values[lower] * (1 - weight) + sorted_values[upper] * weight


def z_score(value: float, avg: float, std_dev: float) -> float:
    return safe_divide(value - avg, std_dev)


def ema_alpha(period: int) -> float:
    """Smoothing factor ``2 / (period + 1)``."""
    return 2 / (period + 1)


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def normalize(value: float, lower: float, upper: float) -> float:
    """Map ``value`` onto 0..1 relative to [lower, upper]; 0.5 if the range is empty."""
    if upper == lower:
        return 0.5
    return (value - lower) / (upper - lower)


def log_returns(prices: Sequence[float]) -> list[float]:
    """Natural log returns. Pairs with a non-positive price contribute 0."""
    returns: list[float] = []
    for prev, curr in zip(prices, prices[1:]):
        if prev > 0 and curr > 0:
            returns.append(math.log(curr / prev))
        else:
            returns.append(0.0)
    return returns


def simple_returns(prices: Sequence[float]) -> list[float]:
    """Arithmetic returns. A zero previous price contributes 0."""
    return [safe_divide(curr - prev, prev) for prev, curr in zip(prices, prices[1:])]


def align_tail(*series: Sequence[float]) -> list[list[float]]:
    """Trim every series to the shortest length, keeping the most recent values."""
    n = min((len(s) for s in series), default=0)
    if n == 0:
        return [[] for _ in series]
    return [list(s[len(s) - n :]) for s in series]


def rolling_window(
    values: Sequence[float], window: int, fn: Callable[[Sequence[float]], T]
) -> list[T]:
    """Apply ``fn`` to every full window of length ``window``."""
    if window <= 0:
        return []
    return [fn(values[i - window + 1 : i + 1]) for i in range(window - 1, len(values))]
