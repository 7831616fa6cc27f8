"""Trend formulas: ADX, Parabolic SAR and Supertrend.

Moving averages live in ``moving_averages`` and are re-exported here.
Series shorter than a formula's window produce a neutral result.
"""

from collections.abc import Sequence

from quantsignal.indicators.models import (
    ADXResult,
    Direction,
    ParabolicSARResult,
    SupertrendResult,
    TrendStrength,
)
from quantsignal.indicators.moving_averages import (
    calculate_ema,
    calculate_ema_series,
    calculate_sma,
    calculate_sma_series,
)
from quantsignal.indicators.volatility import true_range_series
from quantsignal.mathutils import align_tail, mean, round_half_up, safe_divide

#: ADX +DI/-DI spread beyond which the trend has a direction.
_DI_SPREAD = 5.0


def classify_trend_strength(adx: float) -> TrendStrength:
    """Bucket ADX at 20/25/40/50."""
    if adx < 20:
        return TrendStrength.VERY_WEAK
    if adx < 25:
        return TrendStrength.WEAK
    if adx < 40:
        return TrendStrength.MODERATE
    if adx < 50:
        return TrendStrength.STRONG
    return TrendStrength.VERY_STRONG


def classify_trend_direction(plus_di: float, minus_di: float) -> Direction:
    diff = plus_di - minus_di
    if diff > _DI_SPREAD:
        return Direction.BULLISH
    if diff < -_DI_SPREAD:
        return Direction.BEARISH
    return Direction.NEUTRAL


def _directional_movement(
    highs: Sequence[float], lows: Sequence[float]
) -> tuple[list[float], list[float]]:
    plus_dm: list[float] = []
    minus_dm: list[float] = []
    for i in range(1, len(highs)):
        up_move = highs[i] - highs[i - 1]
        down_move = lows[i - 1] - lows[i]
        if up_move > down_move and up_move > 0:
            plus_dm.append(up_move)
            minus_dm.append(0.0)
        elif down_move > up_move and down_move > 0:
            plus_dm.append(0.0)
            minus_dm.append(down_move)
        else:
            plus_dm.append(0.0)
            minus_dm.append(0.0)
    return plus_dm, minus_dm


def calculate_adx(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> ADXResult:
    """Average Directional Index with +DI/-DI.

    +DI/-DI come from EMA-smoothed directional movement over EMA-smoothed
    true range. ADX is the EMA of the rolling-window DX series. Needs at
    least ``period + 1`` bars for a DX value; fewer yields ADX 0.

    Classification:
        trend_strength: <20 VERY_WEAK, <25 WEAK, <40 MODERATE, <50 STRONG,
            else VERY_STRONG.
        trend_direction: BULLISH when +DI - -DI > 5, BEARISH when < -5,
            else NEUTRAL.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    if len(closes) < 2:
        return ADXResult(
            adx=0.0,
            plus_di=0.0,
            minus_di=0.0,
            trend_strength=TrendStrength.VERY_WEAK,
            trend_direction=Direction.NEUTRAL,
        )

    plus_dm, minus_dm = _directional_movement(highs, lows)
    tr_series = true_range_series(highs, lows, closes)

    smoothed_tr = calculate_ema(tr_series, period).value
    plus_di = safe_divide(100 * calculate_ema(plus_dm, period).value, smoothed_tr)
    minus_di = safe_divide(100 * calculate_ema(minus_dm, period).value, smoothed_tr)

    dx_series: list[float] = []
    for i in range(period - 1, len(plus_dm)):
        window = slice(i - period + 1, i + 1)
        avg_tr = mean(tr_series[window])
        pdi = safe_divide(100 * mean(plus_dm[window]), avg_tr)
        mdi = safe_divide(100 * mean(minus_dm[window]), avg_tr)
        dx_series.append(safe_divide(100 * abs(pdi - mdi), pdi + mdi))

    adx = calculate_ema(dx_series, period).value if dx_series else 0.0

    return ADXResult(
        adx=round_half_up(adx, 2),
        plus_di=round_half_up(plus_di, 2),
        minus_di=round_half_up(minus_di, 2),
        trend_strength=classify_trend_strength(adx),
        trend_direction=classify_trend_direction(plus_di, minus_di),
    )


def calculate_parabolic_sar(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    af_start: float = 0.02,
    af_increment: float = 0.02,
    af_max: float = 0.2,
) -> ParabolicSARResult:
    """Wilder's Parabolic Stop-and-Reverse.

    The initial trend is taken from the first two closes. Each bar the SAR
    moves toward the extreme point by the acceleration factor, is capped by
    the prior two bars' lows (uptrend) or highs (downtrend), and flips when
    price penetrates it.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    if len(closes) < 2:
        first_close = closes[0] if closes else 0.0
        first_high = highs[0] if highs else 0.0
        return ParabolicSARResult(
            sar=round_half_up(first_close, 2),
            trend=Direction.BULLISH,
            is_reversal=False,
            af=af_start,
            ep=round_half_up(first_high, 2),
        )

    trend = Direction.BULLISH if closes[1] > closes[0] else Direction.BEARISH
    sar = lows[0] if trend is Direction.BULLISH else highs[0]
    ep = highs[1] if trend is Direction.BULLISH else lows[1]
    af = af_start
    is_reversal = False

    for i in range(2, len(closes)):
        sar = sar + af * (ep - sar)

        if trend is Direction.BULLISH:
            sar = min(sar, lows[i - 1], lows[i - 2])
            if lows[i] < sar:
                trend = Direction.BEARISH
                sar, ep, af = ep, lows[i], af_start
                is_reversal = True
            else:
                if highs[i] > ep:
                    ep = highs[i]
                    af = min(af + af_increment, af_max)
                is_reversal = False
        else:
            sar = max(sar, highs[i - 1], highs[i - 2])
            if highs[i] > sar:
                trend = Direction.BULLISH
                sar, ep, af = ep, highs[i], af_start
                is_reversal = True
            else:
                if lows[i] < ep:
                    ep = lows[i]
                    af = min(af + af_increment, af_max)
                is_reversal = False

    return ParabolicSARResult(
        sar=round_half_up(sar, 2),
        trend=trend,
        is_reversal=is_reversal,
        af=round_half_up(af, 3),
        ep=round_half_up(ep, 2),
    )


def calculate_supertrend(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 10,
    multiplier: float = 3.0,
) -> SupertrendResult:
    """ATR-band trend follower.

    Bands sit ``multiplier`` ATRs around the last bar's (high + low) / 2.
    A close above the midpoint is BULLISH with the lower band as the line,
    otherwise BEARISH with the upper band. Fewer than ``period + 1`` bars
    gives a NEUTRAL result pinned to the last close.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    if len(closes) < period + 1:
        last = closes[-1] if closes else 0.0
        return SupertrendResult(
            value=round_half_up(last, 2),
            trend=Direction.NEUTRAL,
            is_reversal=False,
            upper_band=round_half_up(last, 2),
            lower_band=round_half_up(last, 2),
        )

    # Unrounded ATR keeps band math at full precision.
    atr = calculate_ema(true_range_series(highs, lows, closes), period).value

    hl2 = (highs[-1] + lows[-1]) / 2
    upper_band = hl2 + multiplier * atr
    lower_band = hl2 - multiplier * atr

    if closes[-1] > hl2:
        trend, value = Direction.BULLISH, lower_band
    else:
        trend, value = Direction.BEARISH, upper_band

    is_reversal = False
    if len(closes) > period + 1:
        prev_hl2 = (highs[-2] + lows[-2]) / 2
        prev_trend = Direction.BULLISH if closes[-2] > prev_hl2 else Direction.BEARISH
        is_reversal = trend is not prev_trend

    return SupertrendResult(
        value=round_half_up(value, 2),
        trend=trend,
        is_reversal=is_reversal,
        upper_band=round_half_up(upper_band, 2),
        lower_band=round_half_up(lower_band, 2),
    )


__all__ = [
    "calculate_adx",
    "calculate_ema",
    "calculate_ema_series",
    "calculate_parabolic_sar",
    "calculate_sma",
    "calculate_sma_series",
    "calculate_supertrend",
    "classify_trend_direction",
    "classify_trend_strength",
]
