"""Mean-reversion formulas: %B, Bollinger width, distance from MA, Keltner width.

These formulas take already computed bands or averages, so the same code
serves snapshot mode (bands from the 24h range) and series mode (rolling
bands over a close history).
"""

from quantsignal.indicators.models import (
    BandPosition,
    BollingerBands,
    BollingerWidthResult,
    DistanceFromMAResult,
    DistanceSignal,
    KeltnerWidthResult,
    MeanReversionScoreResult,
    PercentBResult,
    PercentBSignal,
    ReversionComponents,
    SqueezeLevel,
    StrengthLevel,
    TradeBias,
    VolatilityLevel,
    WidthTrend,
)
from quantsignal.mathutils import round_half_up, round_score, safe_divide

#: Distance from the mean (percent) that qualifies as a reversion setup.
_DISTANCE_SETUP = 5.0


def calculate_percent_b(price: float, bands: BollingerBands) -> PercentBResult:
    """Position of ``price`` within the bands (0 = lower, 1 = upper).

    Signal: >1.2 EXTREME_OVERBOUGHT, >0.8 OVERBOUGHT, <-0.2 EXTREME_OVERSOLD,
    <0.2 OVERSOLD. A value outside [0, 1] is a band breach and a mean
    reversion setup. Zero-width bands give 0.5.
    """
    value = safe_divide(
        price - bands.lower_band, bands.upper_band - bands.lower_band, fallback=0.5
    )

    if value > 1.2:
        signal = PercentBSignal.EXTREME_OVERBOUGHT
    elif value > 0.8:
        signal = PercentBSignal.OVERBOUGHT
    elif value < -0.2:
        signal = PercentBSignal.EXTREME_OVERSOLD
    elif value < 0.2:
        signal = PercentBSignal.OVERSOLD
    else:
        signal = PercentBSignal.NEUTRAL

    if value > 1.0:
        position = BandPosition.ABOVE_BANDS
    elif value > 0.6:
        position = BandPosition.UPPER_HALF
    elif value > 0.4:
        position = BandPosition.MIDDLE
    elif value >= 0.0:
        position = BandPosition.LOWER_HALF
    else:
        position = BandPosition.BELOW_BANDS

    return PercentBResult(
        value=round_half_up(value, 4),
        signal=signal,
        position=position,
        mean_reversion_setup=value > 1.0 or value < 0.0,
    )


def calculate_bollinger_width(bands: BollingerBands) -> BollingerWidthResult:
    """Band width relative to the middle band.

    Squeeze: <0.05 TIGHT, <0.10 MODERATE, <0.20 NORMAL, else WIDE.
    Trend: <0.08 NARROWING, >0.18 WIDENING, else STABLE.
    """
    width = safe_divide(bands.upper_band - bands.lower_band, bands.middle_band)

    if width < 0.05:
        squeeze = SqueezeLevel.TIGHT
    elif width < 0.10:
        squeeze = SqueezeLevel.MODERATE
    elif width < 0.20:
        squeeze = SqueezeLevel.NORMAL
    else:
        squeeze = SqueezeLevel.WIDE

    if width < 0.08:
        trend = WidthTrend.NARROWING
    elif width > 0.18:
        trend = WidthTrend.WIDENING
    else:
        trend = WidthTrend.STABLE

    return BollingerWidthResult(
        width=round_half_up(width, 4),
        width_percent=round_half_up(width * 100, 2),
        squeeze=squeeze,
        trend=trend,
    )


def typical_price(price: float, high_24h: float | None, low_24h: float | None) -> float:
    """(high + low + price) / 3, or the price itself without a 24h range."""
    if high_24h and low_24h:
        return (high_24h + low_24h + price) / 3
    return price


def calculate_distance_from_ma(price: float, moving_average: float) -> DistanceFromMAResult:
    """Percent distance of ``price`` from ``moving_average``.

    Signal: >10 EXTREME_ABOVE, >5 ABOVE, <-10 EXTREME_BELOW, <-5 BELOW.
    Strength is ``5 * |distance|`` capped at 100. A zero average gives 0.
    """
    distance = safe_divide(price - moving_average, moving_average) * 100

    if distance > 10:
        signal = DistanceSignal.EXTREME_ABOVE
    elif distance > 5:
        signal = DistanceSignal.ABOVE
    elif distance < -10:
        signal = DistanceSignal.EXTREME_BELOW
    elif distance < -5:
        signal = DistanceSignal.BELOW
    else:
        signal = DistanceSignal.NEUTRAL

    return DistanceFromMAResult(
        distance=round_half_up(distance, 2),
        signal=signal,
        mean_reversion_setup=abs(distance) > _DISTANCE_SETUP,
        strength=round_score(min(abs(distance) * 5, 100)),
    )


def snapshot_keltner_width(
    price: float,
    high_24h: float | None,
    low_24h: float | None,
    multiplier: float = 2.0,
) -> float:
    """Keltner channel width (fraction of price) approximated from the 24h range.

    ATR is taken as half the 24h range, or 2% of price without one.
    """
    if high_24h and low_24h:
        atr = (high_24h - low_24h) / 2
    else:
        atr = price * 0.02
    return safe_divide(2 * multiplier * atr, price)


def calculate_keltner_width(width: float) -> KeltnerWidthResult:
    """Classify a Keltner channel width given as a fraction of the middle line.

    Volatility: <0.04 VERY_LOW, <0.08 LOW, <0.15 NORMAL, <0.25 HIGH,
    else VERY_HIGH.
    """
    if width < 0.04:
        volatility = VolatilityLevel.VERY_LOW
    elif width < 0.08:
        volatility = VolatilityLevel.LOW
    elif width < 0.15:
        volatility = VolatilityLevel.NORMAL
    elif width < 0.25:
        volatility = VolatilityLevel.HIGH
    else:
        volatility = VolatilityLevel.VERY_HIGH

    return KeltnerWidthResult(
        width=round_half_up(width, 4),
        width_percent=round_half_up(width * 100, 2),
        volatility=volatility,
    )


def classify_strength(score: float) -> StrengthLevel:
    if score > 80:
        return StrengthLevel.VERY_STRONG
    if score > 60:
        return StrengthLevel.STRONG
    if score > 40:
        return StrengthLevel.MODERATE
    if score > 20:
        return StrengthLevel.WEAK
    return StrengthLevel.VERY_WEAK


def calculate_mean_reversion_score(
    percent_b: PercentBResult,
    bollinger_width: BollingerWidthResult,
    distance: DistanceFromMAResult,
    keltner_width: KeltnerWidthResult,
    percent_b_weight: float = 0.30,
    bollinger_width_weight: float = 0.25,
    distance_weight: float = 0.25,
    keltner_width_weight: float = 0.20,
) -> MeanReversionScoreResult:
    """Blend the four mean-reversion readings into a 0-100 strength score.

    Component scores:
        %B: 100 when outside [0, 1], else |%B - 0.5| * 200.
        Bollinger width: TIGHT 100, MODERATE 70, else 40.
        Distance from MA: min(|distance| * 5, 100).
        Keltner width: VERY_LOW 100, LOW 70, else 40.

    Direction is BUY when %B < 0.2 or distance < -5, SELL when %B > 0.8 or
    distance > 5, else NEUTRAL.

    Returns:
        MeanReversionScoreResult with the rounded score, direction, strength
        bucket (80/60/40/20) and the rounded component scores.
    """
    pct_b = percent_b.value
    if percent_b.is_breach:
        pct_b_score = 100.0
    else:
        pct_b_score = abs(pct_b - 0.5) * 200

    if bollinger_width.squeeze is SqueezeLevel.TIGHT:
        width_score = 100.0
    elif bollinger_width.squeeze is SqueezeLevel.MODERATE:
        width_score = 70.0
    else:
        width_score = 40.0

    distance_score = min(abs(distance.distance) * 5, 100)

    if keltner_width.volatility is VolatilityLevel.VERY_LOW:
        keltner_score = 100.0
    elif keltner_width.volatility is VolatilityLevel.LOW:
        keltner_score = 70.0
    else:
        keltner_score = 40.0

    score = (
        pct_b_score * percent_b_weight
        + width_score * bollinger_width_weight
        + distance_score * distance_weight
        + keltner_score * keltner_width_weight
    )

    if pct_b < 0.2 or distance.distance < -_DISTANCE_SETUP:
        direction = TradeBias.BUY
    elif pct_b > 0.8 or distance.distance > _DISTANCE_SETUP:
        direction = TradeBias.SELL
    else:
        direction = TradeBias.NEUTRAL

    return MeanReversionScoreResult(
        score=round_score(score),
        direction=direction,
        strength=classify_strength(score),
        components=ReversionComponents(
            percent_b=round_score(pct_b_score),
            bollinger_width=round_score(width_score),
            distance_from_ma=round_score(distance_score),
            keltner_width=round_score(keltner_score),
        ),
    )
