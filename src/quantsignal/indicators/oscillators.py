"""Oscillators: CCI, Awesome Oscillator, DPO, Relative Vigor Index, Ultimate.

These read the same OHLC history as the momentum formulas but measure
deviation from a cycle or a multi-window blend rather than raw momentum.
Short input gives a neutral reading instead of a partial computation.
"""

from collections.abc import Sequence

from quantsignal.indicators.models import (
    AwesomeOscillatorResult,
    CCIResult,
    CCISignal,
    Crossover,
    CyclePhase,
    Direction,
    DPOResult,
    HistogramColor,
    MomentumChange,
    MomentumSign,
    OscillatorSignal,
    RVIResult,
    UltimateOscillatorResult,
)
from quantsignal.indicators.momentum import (
    classify_graded_trend,
    classify_oscillator,
    momentum_sign,
)
from quantsignal.mathutils import align_tail, mean, round_half_up, safe_divide

#: Lambert's constant: scales CCI so most readings fall within +/-100.
CCI_CONSTANT = 0.015


def _direction(value: float, midpoint: float = 0.0) -> Direction:
    if value > midpoint:
        return Direction.BULLISH
    if value < midpoint:
        return Direction.BEARISH
    return Direction.NEUTRAL


# ---------------------------------------------------------------------------
# CCI
# ---------------------------------------------------------------------------


def _cci(window: Sequence[float], current: float) -> float:
    sma = mean(window)
    mean_deviation = mean([abs(tp - sma) for tp in window])
    return safe_divide(current - sma, CCI_CONSTANT * mean_deviation)


def calculate_cci(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
) -> CCIResult:
    """Commodity Channel Index over the typical price (H + L + C) / 3.

    CCI = (TP - SMA(TP)) / (0.015 * mean absolute deviation). Signal and
    trend share the +/-100 and +/-200 bands. Zero deviation gives 0.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    typical = [(h + l + c) / 3 for h, l, c in zip(highs, lows, closes)]
    cci = _cci(typical[-period:], typical[-1]) if typical else 0.0

    if cci > 200:
        signal = CCISignal.EXTREME_OVERBOUGHT
    elif cci > 100:
        signal = CCISignal.OVERBOUGHT
    elif cci < -200:
        signal = CCISignal.EXTREME_OVERSOLD
    elif cci < -100:
        signal = CCISignal.OVERSOLD
    else:
        signal = CCISignal.NEUTRAL

    return CCIResult(
        value=round_half_up(cci, 2),
        signal=signal,
        trend=classify_graded_trend(cci, 200, 100),
    )


# ---------------------------------------------------------------------------
# Awesome Oscillator
# ---------------------------------------------------------------------------


def _awesome(midpoints: Sequence[float], fast_period: int, slow_period: int) -> float:
    return mean(midpoints[-fast_period:]) - mean(midpoints[-slow_period:])


def calculate_awesome_oscillator(
    highs: Sequence[float],
    lows: Sequence[float],
    fast_period: int = 5,
    slow_period: int = 34,
) -> AwesomeOscillatorResult:
    """Fast minus slow SMA of the bar midpoints (H + L) / 2.

    Momentum compares against the previous bar's value; the histogram is
    GREEN only while it increases. Fewer than ``slow_period`` bars give 0.
    """
    highs, lows = align_tail(highs, lows)
    midpoints = [(h + l) / 2 for h, l in zip(highs, lows)]
    if len(midpoints) < slow_period:
        return AwesomeOscillatorResult(
            value=0.0,
            signal=Direction.NEUTRAL,
            momentum=MomentumChange.STABLE,
            histogram=HistogramColor.RED,
        )

    ao = _awesome(midpoints, fast_period, slow_period)

    momentum = MomentumChange.STABLE
    if len(midpoints) > slow_period:
        previous = _awesome(midpoints[:-1], fast_period, slow_period)
        if ao > previous:
            momentum = MomentumChange.INCREASING
        elif ao < previous:
            momentum = MomentumChange.DECREASING

    return AwesomeOscillatorResult(
        value=round_half_up(ao, 2),
        signal=_direction(ao),
        momentum=momentum,
        histogram=(
            HistogramColor.GREEN if momentum is MomentumChange.INCREASING else HistogramColor.RED
        ),
    )


# ---------------------------------------------------------------------------
# Detrended Price Oscillator
# ---------------------------------------------------------------------------


def calculate_dpo(closes: Sequence[float], period: int = 20) -> DPOResult:
    """Detrended Price Oscillator: last close minus an SMA displaced back.

    The SMA window ends ``period // 2 + 1`` bars before the last close.
    Signal: more than 2% of the SMA above it is OVERBOUGHT, below OVERSOLD.
    Cycle: a positive but shrinking DPO is a PEAK, a negative but rising one
    a TROUGH. Fewer than ``period + displacement`` closes give 0.
    """
    displacement = period // 2 + 1
    if len(closes) < period + displacement:
        return DPOResult(value=0.0, signal=OscillatorSignal.NEUTRAL, cycle=CyclePhase.NEUTRAL)

    displaced = len(closes) - displacement
    sma = mean(closes[displaced - period + 1 : displaced + 1])
    dpo = closes[-1] - sma
    previous = closes[-2] - mean(closes[displaced - period : displaced])

    threshold = sma * 0.02
    if dpo > threshold:
        signal = OscillatorSignal.OVERBOUGHT
    elif dpo < -threshold:
        signal = OscillatorSignal.OVERSOLD
    else:
        signal = OscillatorSignal.NEUTRAL

    if 0 < dpo < previous:
        cycle = CyclePhase.PEAK
    elif previous < dpo < 0:
        cycle = CyclePhase.TROUGH
    else:
        cycle = CyclePhase.NEUTRAL

    return DPOResult(value=round_half_up(dpo, 2), signal=signal, cycle=cycle)


# ---------------------------------------------------------------------------
# Relative Vigor Index
# ---------------------------------------------------------------------------


def _symmetric_weighted(values: Sequence[float], index: int) -> float:
    return (
        values[index] + 2 * values[index - 1] + 2 * values[index - 2] + values[index - 3]
    ) / 6


def calculate_rvi(
    opens: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 10,
) -> RVIResult:
    """Relative Vigor Index: smoothed (close - open) over smoothed (high - low).

    Each bar's ranges are 1-2-2-1 weighted over four bars, then averaged over
    ``period``. The signal line is the 4-value SMA of the RVI series.
    Momentum: >0.05 POSITIVE, <-0.05 NEGATIVE. Fewer than ``period + 3``
    bars give 0.
    """
    opens, highs, lows, closes = align_tail(opens, highs, lows, closes)
    close_open = [c - o for o, c in zip(opens, closes)]
    high_low = [h - l for h, l in zip(highs, lows)]
    numerators = [_symmetric_weighted(close_open, i) for i in range(3, len(closes))]
    denominators = [_symmetric_weighted(high_low, i) for i in range(3, len(closes))]

    if len(numerators) < period:
        return RVIResult(
            rvi=0.0,
            signal_line=0.0,
            crossover=Crossover.NONE,
            momentum=MomentumSign.NEUTRAL,
        )

    rvi_series = [
        safe_divide(
            mean(numerators[i - period + 1 : i + 1]),
            mean(denominators[i - period + 1 : i + 1]),
        )
        for i in range(period - 1, len(numerators))
    ]
    rvi = rvi_series[-1]
    signal_line = mean(rvi_series[-4:]) if len(rvi_series) >= 4 else rvi

    crossover = Crossover.NONE
    if len(rvi_series) >= 2:
        prev_rvi = rvi_series[-2]
        prev_signal = mean(rvi_series[-5:-1]) if len(rvi_series) >= 5 else prev_rvi
        if prev_rvi <= prev_signal and rvi > signal_line:
            crossover = Crossover.BULLISH
        elif prev_rvi >= prev_signal and rvi < signal_line:
            crossover = Crossover.BEARISH

    return RVIResult(
        rvi=round_half_up(rvi, 3),
        signal_line=round_half_up(signal_line, 3),
        crossover=crossover,
        momentum=momentum_sign(rvi, 0.05),
    )


# ---------------------------------------------------------------------------
# Ultimate Oscillator
# ---------------------------------------------------------------------------


def calculate_ultimate_oscillator(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    short_period: int = 7,
    medium_period: int = 14,
    long_period: int = 28,
) -> UltimateOscillatorResult:
    """Ultimate Oscillator: buying pressure over true range on three windows.

    Per bar, buying pressure is close - min(low, prev close) and true range
    max(high, prev close) - min(low, prev close). The three pressure ratios
    blend 4:2:1 into 0-100. Signal: >70 OVERBOUGHT, <30 OVERSOLD; trend
    splits at 50. Fewer than two bars read 50.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    pressure: list[float] = []
    ranges: list[float] = []
    for i in range(1, len(closes)):
        reference_low = min(lows[i], closes[i - 1])
        pressure.append(closes[i] - reference_low)
        ranges.append(max(highs[i], closes[i - 1]) - reference_low)

    if not pressure:
        uo = 50.0
    else:
        short, medium, long_ = (
            safe_divide(sum(pressure[-p:]), sum(ranges[-p:]))
            for p in (short_period, medium_period, long_period)
        )
        uo = 100 * (4 * short + 2 * medium + long_) / 7

    return UltimateOscillatorResult(
        value=round_half_up(uo, 2),
        signal=classify_oscillator(uo, 70, 30),
        trend=_direction(uo, 50),
    )
