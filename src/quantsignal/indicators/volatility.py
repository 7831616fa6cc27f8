"""Volatility formulas: Bollinger Bands and squeeze, ATR, Keltner and Donchian
channels, and the Garman-Klass, Parkinson and close-to-close estimators.

Bollinger Bands come in two modes. Snapshot mode approximates the bands from a
single price and its 24h high/low, treating the three as the sample:
    middle = (high + low + price) / 3
    std    = sqrt(sum((x - middle)^2) / 3)
    bands  = middle +/- k * std
Series mode uses a true rolling SMA and population standard deviation over
the last ``period`` closes.
"""

import math
from collections.abc import Sequence

from quantsignal.indicators.models import (
    AnnualizedVolatilityResult,
    ATRResult,
    BollingerBands,
    BollingerSqueeze,
    BreakoutSignal,
    ChannelPosition,
    Direction,
    DonchianChannelsResult,
    GarmanKlassLevel,
    GarmanKlassResult,
    KeltnerChannelsResult,
    VolatilityLevel,
)
from quantsignal.indicators.moving_averages import calculate_ema
from quantsignal.mathutils import (
    align_tail,
    log_returns,
    mean,
    round_half_up,
    round_score,
    safe_divide,
    standard_deviation,
)

#: Bandwidth below which the bands are considered squeezed.
SQUEEZE_THRESHOLD = 0.1

#: Garman-Klass close-to-open coefficient.
GK_CONSTANT = 2 * math.log(2) - 1

#: Garman-Klass efficiency relative to close-to-close volatility.
GK_EFFICIENCY = 7.4

#: Parkinson range scaling, 1 / (4 ln 2).
PARKINSON_CONSTANT = 1 / (4 * math.log(2))


# ---------------------------------------------------------------------------
# Bollinger Bands
# ---------------------------------------------------------------------------


def default_bands(price: float) -> BollingerBands:
    """Fixed +/-10% bands used when no range data is available."""
    return BollingerBands(
        upper_band=price * 1.1,
        middle_band=price,
        lower_band=price * 0.9,
        bandwidth=0.2,
        percent_b=0.5,
    )


def _bands(price: float, middle: float, std: float, std_dev: float) -> BollingerBands:
    upper = middle + std_dev * std
    lower = middle - std_dev * std
    return BollingerBands(
        upper_band=upper,
        middle_band=middle,
        lower_band=lower,
        bandwidth=safe_divide(upper - lower, middle),
        percent_b=safe_divide(price - lower, upper - lower, fallback=0.5),
    )


def calculate_bollinger_bands(
    price: float,
    high_24h: float | None = None,
    low_24h: float | None = None,
    std_dev: float = 2.0,
) -> BollingerBands:
    """Snapshot Bollinger Bands from a price and its 24h range.

    Values are kept at full precision since they feed %B, width and squeeze
    detection downstream.

    Args:
        price: Current price.
        high_24h: 24h high, or None when unavailable.
        low_24h: 24h low, or None when unavailable.
        std_dev: Band width in standard deviations.

    Returns:
        BollingerBands. Missing high or low yields ``default_bands(price)``.
        Zero-width bands report %B 0.5.
    """
    if high_24h is None or low_24h is None:
        return default_bands(price)

    middle = (high_24h + low_24h + price) / 3
    std = standard_deviation([high_24h, low_24h, price])
    return _bands(price, middle, std, std_dev)


def calculate_bollinger_bands_series(
    closes: Sequence[float], period: int = 20, std_dev: float = 2.0
) -> BollingerBands:
    """Rolling Bollinger Bands over the last ``period`` closes.

    Fewer than ``period`` closes falls back to default bands around the last
    close (or 0 when empty).
    """
    if len(closes) < period or period <= 0:
        return default_bands(closes[-1] if closes else 0.0)

    window = closes[-period:]
    return _bands(closes[-1], mean(window), standard_deviation(window), std_dev)


def detect_bollinger_squeeze(
    bands: BollingerBands, threshold: float = SQUEEZE_THRESHOLD
) -> BollingerSqueeze:
    """Detect a volatility squeeze and its likely breakout direction.

    Squeezing when bandwidth < ``threshold``; intensity is how far below the
    threshold the bandwidth sits (0-100). While squeezing, %B > 0.6 leans
    BULLISH and %B < 0.4 leans BEARISH with confidence 60 plus the distance
    past the boundary in percent, capped at 100. Otherwise NEUTRAL at 50.
    """
    is_squeezing = bands.bandwidth < threshold
    if not is_squeezing:
        return BollingerSqueeze(
            is_squeezing=False,
            bandwidth=bands.bandwidth,
            squeeze_intensity=0,
            breakout_direction=Direction.NEUTRAL,
            confidence=50,
        )

    intensity = round_score((1 - bands.bandwidth / threshold) * 100)
    percent_b = bands.percent_b
    if percent_b > 0.6:
        direction = Direction.BULLISH
        confidence = min(100, 60 + round_score((percent_b - 0.6) * 100))
    elif percent_b < 0.4:
        direction = Direction.BEARISH
        confidence = min(100, 60 + round_score((0.4 - percent_b) * 100))
    else:
        direction = Direction.NEUTRAL
        confidence = 50

    return BollingerSqueeze(
        is_squeezing=True,
        bandwidth=bands.bandwidth,
        squeeze_intensity=intensity,
        breakout_direction=direction,
        confidence=confidence,
    )


# ---------------------------------------------------------------------------
# Average True Range
# ---------------------------------------------------------------------------


def calculate_true_range(high: float, low: float, previous_close: float) -> float:
    return max(high - low, abs(high - previous_close), abs(low - previous_close))


def true_range_series(
    highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]
) -> list[float]:
    """True range for every bar after the first."""
    highs, lows, closes = align_tail(highs, lows, closes)
    return [
        calculate_true_range(highs[i], lows[i], closes[i - 1]) for i in range(1, len(closes))
    ]


def classify_volatility_level(normalized_atr: float) -> VolatilityLevel:
    """Bucket ATR as a percent of price at 1/2/4/6."""
    if normalized_atr < 1:
        return VolatilityLevel.VERY_LOW
    if normalized_atr < 2:
        return VolatilityLevel.LOW
    if normalized_atr < 4:
        return VolatilityLevel.NORMAL
    if normalized_atr < 6:
        return VolatilityLevel.HIGH
    return VolatilityLevel.VERY_HIGH


def calculate_atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> ATRResult:
    """Average True Range: SMA-seeded EMA of the true-range series.

    Args:
        highs: High prices, oldest first.
        lows: Low prices, oldest first.
        closes: Close prices, oldest first.
        period: Smoothing period.

    Returns:
        ATRResult with the ATR, ATR as a percent of the last close, and a
        volatility level. Fewer than two bars gives ATR 0.
    """
    tr_series = true_range_series(highs, lows, closes)
    atr = calculate_ema(tr_series, period).value
    last_close = closes[-1] if closes else 0.0
    normalized = safe_divide(atr, last_close) * 100

    return ATRResult(
        value=round_half_up(atr, 2),
        normalized_atr=round_half_up(normalized, 2),
        volatility_level=classify_volatility_level(normalized),
    )


# ---------------------------------------------------------------------------
# Keltner Channels
# ---------------------------------------------------------------------------


def calculate_keltner_channels(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
    multiplier: float = 2.0,
) -> KeltnerChannelsResult:
    """EMA-centred channels ``multiplier`` ATRs wide.

    ``width`` is the channel width as a percent of the middle line and
    ``position`` the last close's place inside the channel (0 = lower,
    1 = upper, 0.5 for a zero-width channel).
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    middle = calculate_ema(closes, period).value
    atr = calculate_ema(true_range_series(highs, lows, closes), period).value

    upper = middle + multiplier * atr
    lower = middle - multiplier * atr
    width = safe_divide(upper - lower, middle) * 100

    current = closes[-1] if closes else 0.0
    position = safe_divide(current - lower, upper - lower, fallback=0.5)

    if current > upper:
        signal = ChannelPosition.ABOVE
    elif current < lower:
        signal = ChannelPosition.BELOW
    else:
        signal = ChannelPosition.WITHIN

    return KeltnerChannelsResult(
        upper=round_half_up(upper, 2),
        middle=round_half_up(middle, 2),
        lower=round_half_up(lower, 2),
        width=round_half_up(width, 2),
        position=round_half_up(position, 3),
        signal=signal,
    )


# ---------------------------------------------------------------------------
# Garman-Klass
# ---------------------------------------------------------------------------


def classify_garman_klass(annualized: float) -> GarmanKlassLevel:
    """Bucket annualized volatility (percent) at 10/20/40/60."""
    if annualized < 10:
        return GarmanKlassLevel.VERY_LOW
    if annualized < 20:
        return GarmanKlassLevel.LOW
    if annualized < 40:
        return GarmanKlassLevel.MODERATE
    if annualized < 60:
        return GarmanKlassLevel.HIGH
    return GarmanKlassLevel.VERY_HIGH


def _garman_klass_term(open_: float, high: float, low: float, close: float) -> float:
    # Non-positive prices have no log; such bars contribute nothing.
    if min(open_, high, low, close) <= 0:
        return 0.0
    log_hl = math.log(high / low)
    log_co = math.log(close / open_)
    return 0.5 * log_hl * log_hl - GK_CONSTANT * log_co * log_co


def calculate_garman_klass_volatility(
    opens: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 30,
    annualization_factor: int = 252,
) -> GarmanKlassResult:
    """Garman-Klass OHLC volatility over the last ``period`` bars.

    Per bar: 0.5 * ln(H/L)^2 - (2 ln 2 - 1) * ln(C/O)^2. The daily volatility
    is sqrt(sum / period) and the annualized value is
    daily * sqrt(annualization_factor) * 100.

    Args:
        opens: Open prices, oldest first.
        highs: High prices, oldest first.
        lows: Low prices, oldest first.
        closes: Close prices, oldest first.
        period: Number of bars in the estimate. Fewer bars yields a zero
            (VERY_LOW) result.
        annualization_factor: Trading periods per year.

    Returns:
        GarmanKlassResult with annualized volatility in percent.
    """
    opens, highs, lows, closes = align_tail(opens, highs, lows, closes)
    if period <= 0 or len(closes) < period:
        return GarmanKlassResult(
            value=0.0,
            daily_vol=0.0,
            level=GarmanKlassLevel.VERY_LOW,
            efficiency=GK_EFFICIENCY,
        )

    total = math.fsum(
        _garman_klass_term(o, h, l, c)
        for o, h, l, c in zip(
            opens[-period:], highs[-period:], lows[-period:], closes[-period:]
        )
    )
    # A strongly trending open-to-close move can push the sum below zero.
    daily_vol = math.sqrt(max(total, 0.0) / period)
    annualized = daily_vol * math.sqrt(annualization_factor) * 100

    return GarmanKlassResult(
        value=round_half_up(annualized, 2),
        daily_vol=round_half_up(daily_vol, 4),
        level=classify_garman_klass(annualized),
        efficiency=GK_EFFICIENCY,
    )


# ---------------------------------------------------------------------------
# Range and close-to-close estimators
# ---------------------------------------------------------------------------


def _annualized_result(daily_vol: float, annualization_factor: int) -> AnnualizedVolatilityResult:
    annualized = daily_vol * math.sqrt(annualization_factor) * 100
    return AnnualizedVolatilityResult(
        value=round_half_up(annualized, 2),
        daily_vol=round_half_up(daily_vol, 4),
        level=classify_garman_klass(annualized),
    )


def calculate_parkinson_volatility(
    highs: Sequence[float],
    lows: Sequence[float],
    period: int = 30,
    annualization_factor: int = 252,
) -> AnnualizedVolatilityResult:
    """Parkinson high-low volatility over the last ``period`` bars.

    daily = sqrt(sum(ln(H/L)^2) / (4 ln 2 * period)), annualized as for
    Garman-Klass and bucketed the same way. Bars with a non-positive high or
    low contribute nothing; fewer than ``period`` bars give 0.
    """
    highs, lows = align_tail(highs, lows)
    if period <= 0 or len(highs) < period:
        return _annualized_result(0.0, annualization_factor)

    total = math.fsum(
        math.log(h / l) ** 2 for h, l in zip(highs[-period:], lows[-period:]) if h > 0 and l > 0
    )
    daily_vol = math.sqrt(PARKINSON_CONSTANT * total / period)
    return _annualized_result(daily_vol, annualization_factor)


def calculate_historical_volatility(
    closes: Sequence[float],
    period: int = 30,
    annualization_factor: int = 252,
) -> AnnualizedVolatilityResult:
    """Close-to-close volatility: population std of the last ``period`` log returns.

    Needs ``period + 1`` closes; fewer give 0.
    """
    returns = log_returns(closes)
    if period <= 0 or len(returns) < period:
        return _annualized_result(0.0, annualization_factor)
    return _annualized_result(standard_deviation(returns[-period:]), annualization_factor)


def calculate_donchian_channels(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
) -> DonchianChannelsResult:
    """Highest high and lowest low over the last ``period`` bars.

    ``width`` is the channel width as a percent of the midpoint and
    ``position`` the last close's place inside it (0.5 for a flat channel).
    A close at or beyond a boundary is a breakout; a flat channel never is.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    if not closes:
        return DonchianChannelsResult(
            upper=0.0,
            middle=0.0,
            lower=0.0,
            width=0.0,
            position=0.5,
            signal=BreakoutSignal.NEUTRAL,
        )

    upper = max(highs[-period:])
    lower = min(lows[-period:])
    middle = (upper + lower) / 2
    current = closes[-1]

    if upper == lower:
        signal = BreakoutSignal.NEUTRAL
    elif current >= upper:
        signal = BreakoutSignal.BULLISH_BREAKOUT
    elif current <= lower:
        signal = BreakoutSignal.BEARISH_BREAKOUT
    else:
        signal = BreakoutSignal.NEUTRAL

    return DonchianChannelsResult(
        upper=round_half_up(upper, 2),
        middle=round_half_up(middle, 2),
        lower=round_half_up(lower, 2),
        width=round_half_up(safe_divide(upper - lower, middle) * 100, 2),
        position=round_half_up(safe_divide(current - lower, upper - lower, fallback=0.5), 3),
        signal=signal,
    )
