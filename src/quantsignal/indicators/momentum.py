"""Momentum formulas: RSI, RSI divergence, MACD, Stochastic, Williams %R and ROC.

RSI has two modes. Snapshot mode approximates it from the 24h change,
blended with where the price sits between its all-time low and high:
    rsi = 50 + 3 * change_24h
    rsi = 0.8 * rsi + 0.2 * 100 * (price - atl) / (ath - atl)   # when ath > atl
    rsi = clamp(rsi, 10, 90)
Series mode is Wilder's RSI over a close history.
"""

from collections.abc import Sequence

from quantsignal.indicators.models import (
    Crossover,
    Direction,
    DivergenceType,
    GradedTrend,
    MACDResult,
    MomentumSign,
    OscillatorSignal,
    PriceAction,
    ROCResult,
    RSIDivergence,
    RSIResult,
    RSISignal,
    StochasticResult,
    WilliamsRResult,
)
from quantsignal.indicators.moving_averages import calculate_ema_series
from quantsignal.mathutils import (
    align_tail,
    clamp,
    mean,
    round_half_up,
    round_score,
    safe_divide,
)

#: RSI above this reads OVERBOUGHT, below its mirror OVERSOLD.
RSI_OVERBOUGHT = 65.0
RSI_OVERSOLD = 35.0

#: Snapshot divergence: price within 10% of ATH or 50% above ATL.
_NEAR_ATH_RATIO = 0.9
_NEAR_ATL_RATIO = 1.5


def classify_rsi(rsi: float) -> RSISignal:
    if rsi > RSI_OVERBOUGHT:
        return RSISignal.OVERBOUGHT
    if rsi < RSI_OVERSOLD:
        return RSISignal.OVERSOLD
    return RSISignal.NEUTRAL


def _rsi_result(rsi: float) -> RSIResult:
    return RSIResult(
        rsi=round_half_up(rsi, 1),
        signal=classify_rsi(rsi),
        momentum=(rsi - 50) / 50,
    )


def calculate_rsi(
    price: float,
    change_24h: float,
    ath: float | None = None,
    atl: float | None = None,
) -> RSIResult:
    """Approximate RSI from a single snapshot.

    Args:
        price: Current price.
        change_24h: 24h price change in percent.
        ath: All-time high, or None.
        atl: All-time low, or None.

    Returns:
        RSIResult with RSI in [10, 90] rounded to one decimal, its signal
        (>65 OVERBOUGHT, <35 OVERSOLD) and momentum in [-0.8, 0.8].
    """
    rsi = 50 + change_24h * 3

    if ath and atl and ath > atl:
        position = (price - atl) / (ath - atl)
        rsi = rsi * 0.8 + position * 100 * 0.2

    return _rsi_result(clamp(rsi, 10, 90))


def rsi_values(closes: Sequence[float], period: int = 14) -> list[float]:
    """Wilder RSI for every close from index ``period`` onward.

    A window with no losses reads 100, and a flat window reads 50.
    """
    if period <= 0 or len(closes) <= period:
        return []

    gains: list[float] = []
    losses: list[float] = []
    for prev, curr in zip(closes, closes[1:]):
        change = curr - prev
        gains.append(max(change, 0.0))
        losses.append(max(-change, 0.0))

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    values = [_wilder_rsi(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        values.append(_wilder_rsi(avg_gain, avg_loss))

    return values


def _wilder_rsi(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def calculate_rsi_series(closes: Sequence[float], period: int = 14) -> RSIResult:
    """Wilder RSI of a close history.

    Needs ``period + 1`` closes; fewer yields a neutral RSI of 50.
    """
    values = rsi_values(closes, period)
    return _rsi_result(values[-1] if values else 50.0)


def _no_divergence(rsi: float, price_action: PriceAction = PriceAction.NEUTRAL) -> RSIDivergence:
    return RSIDivergence(
        has_divergence=False,
        divergence_type=DivergenceType.NONE,
        strength=0,
        rsi=rsi,
        price_action=price_action,
    )


def detect_rsi_divergence(
    price: float,
    rsi: RSIResult,
    ath: float | None = None,
    atl: float | None = None,
) -> RSIDivergence:
    """Snapshot divergence between price extremes and RSI.

    Near the all-time high (price/ATH > 0.9) the price is making a higher
    high; an RSI below 70 there is a BEARISH divergence with strength
    ``2 * (70 - rsi)``. Otherwise near the all-time low (price/ATL < 1.5) the
    price is making a lower low; an RSI above 30 is a BULLISH divergence with
    strength ``2 * (rsi - 30)``. Strength is capped at 100. Without both ATH
    and ATL there is no divergence.
    """
    if not ath or not atl:
        return _no_divergence(rsi.rsi)

    if price / ath > _NEAR_ATH_RATIO:
        if rsi.rsi < 70:
            return RSIDivergence(
                has_divergence=True,
                divergence_type=DivergenceType.BEARISH,
                strength=min(round_score((70 - rsi.rsi) * 2), 100),
                rsi=rsi.rsi,
                price_action=PriceAction.HIGHER_HIGH,
            )
        return _no_divergence(rsi.rsi, PriceAction.HIGHER_HIGH)

    if price / atl < _NEAR_ATL_RATIO:
        if rsi.rsi > 30:
            return RSIDivergence(
                has_divergence=True,
                divergence_type=DivergenceType.BULLISH,
                strength=min(round_score((rsi.rsi - 30) * 2), 100),
                rsi=rsi.rsi,
                price_action=PriceAction.LOWER_LOW,
            )
        return _no_divergence(rsi.rsi, PriceAction.LOWER_LOW)

    return _no_divergence(rsi.rsi)


def detect_series_divergence(
    closes: Sequence[float], period: int = 14, lookback: int = 14
) -> RSIDivergence:
    """Divergence between price direction and RSI direction over ``lookback``.

    Price rising while RSI falls is BEARISH; price falling while RSI rises is
    BULLISH. Strength is ``2 * |RSI change|`` capped at 100. Too little data
    for ``lookback`` RSI readings gives no divergence.
    """
    values = rsi_values(closes, period)
    if lookback <= 0 or len(values) <= lookback:
        last_rsi = round_half_up(values[-1], 1) if values else 50.0
        return _no_divergence(last_rsi)

    price_delta = closes[-1] - closes[-1 - lookback]
    rsi_delta = values[-1] - values[-1 - lookback]
    last_rsi = round_half_up(values[-1], 1)
    strength = min(round_score(abs(rsi_delta) * 2), 100)

    if price_delta > 0 and rsi_delta < 0:
        return RSIDivergence(
            has_divergence=True,
            divergence_type=DivergenceType.BEARISH,
            strength=strength,
            rsi=last_rsi,
            price_action=PriceAction.HIGHER_HIGH,
        )
    if price_delta < 0 and rsi_delta > 0:
        return RSIDivergence(
            has_divergence=True,
            divergence_type=DivergenceType.BULLISH,
            strength=strength,
            rsi=last_rsi,
            price_action=PriceAction.LOWER_LOW,
        )

    if price_delta > 0:
        action = PriceAction.HIGHER_HIGH
    elif price_delta < 0:
        action = PriceAction.LOWER_LOW
    else:
        action = PriceAction.NEUTRAL
    return _no_divergence(last_rsi, action)


def calculate_macd(
    prices: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """Moving Average Convergence Divergence.

    MACD is the fast EMA minus the slow EMA, the signal line is the EMA of
    the MACD series, and the histogram is their difference. The fast and slow
    EMA series are aligned on their most recent values.

    Trend is BULLISH when MACD > 0 and histogram > 0, BEARISH when both are
    negative, otherwise NEUTRAL. Empty input gives all zeros.
    """
    fast, slow = align_tail(
        calculate_ema_series(prices, fast_period),
        calculate_ema_series(prices, slow_period),
    )
    macd_series = [f - s for f, s in zip(fast, slow)]
    if not macd_series:
        return MACDResult(macd=0.0, signal=0.0, histogram=0.0, trend=Direction.NEUTRAL)

    signal_series = calculate_ema_series(macd_series, signal_period)
    macd = macd_series[-1]
    signal = signal_series[-1]
    histogram = macd - signal

    if macd > 0 and histogram > 0:
        trend = Direction.BULLISH
    elif macd < 0 and histogram < 0:
        trend = Direction.BEARISH
    else:
        trend = Direction.NEUTRAL

    return MACDResult(
        macd=round_half_up(macd, 4),
        signal=round_half_up(signal, 4),
        histogram=round_half_up(histogram, 4),
        trend=trend,
    )


def calculate_macd_from_price(
    price: float,
    high_24h: float | None = None,
    low_24h: float | None = None,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """MACD over the 24h path [low, price, high], periods capped at its length."""
    if high_24h and low_24h:
        prices = [low_24h, price, high_24h]
    else:
        prices = [price]
    n = len(prices)
    return calculate_macd(
        prices,
        min(fast_period, n),
        min(slow_period, n),
        min(signal_period, n),
    )


# ---------------------------------------------------------------------------
# Range oscillators and rate of change
# ---------------------------------------------------------------------------


def _percent_k(highs: Sequence[float], lows: Sequence[float], close: float) -> float:
    highest = max(highs)
    lowest = min(lows)
    return safe_divide(close - lowest, highest - lowest, fallback=0.5) * 100


def stochastic_k_values(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    k_period: int = 14,
) -> list[float]:
    """%K for every full ``k_period`` window, oldest first."""
    highs, lows, closes = align_tail(highs, lows, closes)
    return [
        _percent_k(highs[i - k_period + 1 : i + 1], lows[i - k_period + 1 : i + 1], closes[i])
        for i in range(k_period - 1, len(closes))
    ]


def classify_oscillator(value: float, overbought: float, oversold: float) -> OscillatorSignal:
    if value > overbought:
        return OscillatorSignal.OVERBOUGHT
    if value < oversold:
        return OscillatorSignal.OVERSOLD
    return OscillatorSignal.NEUTRAL


def calculate_stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    k_period: int = 14,
    d_period: int = 3,
) -> StochasticResult:
    """Stochastic oscillator.

    %K = 100 * (close - lowest low) / (highest high - lowest low) over the last
    ``k_period`` bars; a flat range reads 50. %D is the SMA of the last
    ``d_period`` %K values. Signal: >80 OVERBOUGHT, <20 OVERSOLD. Crossover
    compares %K against %D on the last two bars.

    With fewer than ``k_period`` bars %K uses what is available and %D
    equals %K. Empty input gives 50/50.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    if not closes:
        return StochasticResult(
            k=50.0, d=50.0, signal=OscillatorSignal.NEUTRAL, crossover=Crossover.NONE
        )

    k = _percent_k(highs[-k_period:], lows[-k_period:], closes[-1])
    k_series = stochastic_k_values(highs, lows, closes, k_period)
    d = mean(k_series[-d_period:]) if k_series else k

    crossover = Crossover.NONE
    if len(k_series) >= 2:
        prev_k = k_series[-2]
        prev_d = mean(k_series[-d_period - 1 : -1])
        if prev_k <= prev_d and k > d:
            crossover = Crossover.BULLISH
        elif prev_k >= prev_d and k < d:
            crossover = Crossover.BEARISH

    return StochasticResult(
        k=round_half_up(k, 2),
        d=round_half_up(d, 2),
        signal=classify_oscillator(k, 80, 20),
        crossover=crossover,
    )


def calculate_williams_r(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> WilliamsRResult:
    """Williams %R: -100 * (highest high - close) / (highest high - lowest low).

    Ranges from -100 to 0; a flat range or empty input reads -50. Signal:
    >-20 OVERBOUGHT, <-80 OVERSOLD. Momentum is BULLISH above -50 and BEARISH
    below it.
    """
    highs, lows, closes = align_tail(highs, lows, closes)
    value = -50.0
    if closes:
        highest = max(highs[-period:])
        lowest = min(lows[-period:])
        value = -100 * safe_divide(highest - closes[-1], highest - lowest, fallback=0.5)

    if value > -50:
        momentum = Direction.BULLISH
    elif value < -50:
        momentum = Direction.BEARISH
    else:
        momentum = Direction.NEUTRAL

    return WilliamsRResult(
        value=round_half_up(value, 2),
        signal=classify_oscillator(value, -20, -80),
        momentum=momentum,
    )


def classify_graded_trend(value: float, strong: float, weak: float = 0.0) -> GradedTrend:
    """Five-way direction: beyond ``strong`` is STRONG, beyond ``weak`` plain."""
    if value > strong:
        return GradedTrend.STRONG_BULLISH
    if value > weak:
        return GradedTrend.BULLISH
    if value < -strong:
        return GradedTrend.STRONG_BEARISH
    if value < -weak:
        return GradedTrend.BEARISH
    return GradedTrend.NEUTRAL


def momentum_sign(value: float, dead_zone: float = 0.0) -> MomentumSign:
    if value > dead_zone:
        return MomentumSign.POSITIVE
    if value < -dead_zone:
        return MomentumSign.NEGATIVE
    return MomentumSign.NEUTRAL


def calculate_roc(prices: Sequence[float], period: int = 12) -> ROCResult:
    """Rate of change: percent move of the last price over ``period`` bars.

    Signal: >10 STRONG_BULLISH, >0 BULLISH, <-10 STRONG_BEARISH, <0 BEARISH.
    ``period`` or fewer prices, or a zero reference price, give 0.
    """
    value = 0.0
    if len(prices) > period:
        past = prices[-1 - period]
        value = safe_divide(prices[-1] - past, past) * 100

    return ROCResult(
        value=round_half_up(value, 2),
        signal=classify_graded_trend(value, 10),
        momentum=momentum_sign(value),
    )
