"""Composite scoring: folds category formula results into bounded scores.

Three composites are produced from formula outputs that were already
computed by the engine; nothing here recomputes an indicator:

- Momentum (-100..100): RSI, divergence, MACD trend and ADX direction.
- Mean reversion: a signed direction score (-100..100) from %B and distance
  from the moving average, plus the unsigned 0..100 strength blend.
- Volatility (0..100): Bollinger position, RSI extremity and normalized
  range. The score is the base risk handed to the risk contextualizer.

Weights come from ScoringSettings so each blend can be audited in isolation.
"""

from quantsignal.config import ScoringSettings
from quantsignal.indicators.models import (
    ADXResult,
    BollingerBands,
    Direction,
    DistanceFromMAResult,
    DivergenceType,
    MACDResult,
    MeanReversionScoreResult,
    PercentBResult,
    RSIDivergence,
    RSIResult,
)
from quantsignal.mathutils import clamp, round_half_up, round_score, safe_divide
from quantsignal.models import PricePoint
from quantsignal.signals.models import (
    CompositeScores,
    FormulaResults,
    MarketMetrics,
    MeanReversionComposite,
    MomentumComposite,
    MomentumSignal,
    ReversionSignal,
    VolatilityComposite,
    VolatilityRegime,
)

#: Normalized volatility assumed when the 24h range is missing.
_DEFAULT_VOLATILITY = 0.5

#: Momentum bucket edges (strict).
_STRONG_MOMENTUM = 60
_MOMENTUM = 20

#: Mean-reversion direction score beyond which price is stretched.
_REVERSION_EXTREME = 40

#: Regime quality used by the overall quality score.
_REGIME_QUALITY: dict[VolatilityRegime, float] = {
    VolatilityRegime.NORMAL: 80.0,
    VolatilityRegime.HIGH: 60.0,
    VolatilityRegime.LOW: 40.0,
    VolatilityRegime.EXTREME: 20.0,
}


def compute_market_metrics(price: PricePoint) -> MarketMetrics:
    """Derive range, ATH distance and liquidity ratios from a snapshot.

    Missing optional fields degrade to neutral values: volatility 0.5 and a
    daily range of 0 without high/low, an ATH distance of 0 without an ATH,
    and a volume/market-cap ratio of 0 with no market cap.
    """
    if price.has_range and price.price > 0:
        spread = price.high_24h - price.low_24h
        volatility = spread / price.price
        daily_range = spread / price.price * 100
    else:
        volatility = _DEFAULT_VOLATILITY
        daily_range = 0.0

    if price.ath:
        ath_distance = (price.ath - price.price) / price.ath * 100
    else:
        ath_distance = 0.0

    return MarketMetrics(
        volatility=volatility,
        daily_range=round_half_up(daily_range, 2),
        ath_distance=round_half_up(ath_distance, 2),
        volume_to_market_cap_ratio=round_half_up(
            safe_divide(price.volume_24h, price.market_cap), 4
        ),
    )


def classify_momentum(score: float) -> MomentumSignal:
    if score > _STRONG_MOMENTUM:
        return MomentumSignal.STRONG_BULLISH
    if score > _MOMENTUM:
        return MomentumSignal.BULLISH
    if score < -_STRONG_MOMENTUM:
        return MomentumSignal.STRONG_BEARISH
    if score < -_MOMENTUM:
        return MomentumSignal.BEARISH
    return MomentumSignal.NEUTRAL


def _direction_sign(direction: Direction) -> int:
    if direction is Direction.BULLISH:
        return 1
    if direction is Direction.BEARISH:
        return -1
    return 0


def compute_momentum_composite(
    rsi: RSIResult,
    divergence: RSIDivergence,
    macd: MACDResult,
    adx: ADXResult,
    settings: ScoringSettings,
) -> MomentumComposite:
    """Blend momentum readings into a -100..100 score.

    Terms (each in -100..100):
        RSI: ``(rsi - 50) * 2``.
        Divergence: ``+strength`` when bullish, ``-strength`` when bearish.
        MACD: +100 / -100 / 0 by MACD trend.
        ADX: ``min(adx * 2, 100)`` signed by the DI direction.

    Args:
        rsi: RSI reading.
        divergence: Price/RSI divergence reading.
        macd: MACD reading.
        adx: ADX reading. A neutral ADX contributes nothing.
        settings: Momentum weights.

    Returns:
        MomentumComposite with the rounded score, its bucket and the weighted
        terms.
    """
    rsi_term = (rsi.rsi - 50) * 2

    if not divergence.has_divergence:
        divergence_term = 0.0
    elif divergence.divergence_type is DivergenceType.BULLISH:
        divergence_term = float(divergence.strength)
    else:
        divergence_term = -float(divergence.strength)

    macd_term = 100.0 * _direction_sign(macd.trend)
    adx_term = min(adx.adx * 2, 100) * _direction_sign(adx.trend_direction)

    rsi_component = rsi_term * settings.momentum_rsi
    divergence_component = divergence_term * settings.momentum_divergence
    macd_component = macd_term * settings.momentum_macd
    adx_component = adx_term * settings.momentum_adx

    raw = rsi_component + divergence_component + macd_component + adx_component
    score = int(clamp(round_score(raw), -100, 100))

    return MomentumComposite(
        score=score,
        signal=classify_momentum(score),
        rsi_component=round_half_up(rsi_component, 2),
        divergence_component=round_half_up(divergence_component, 2),
        macd_component=round_half_up(macd_component, 2),
        adx_component=round_half_up(adx_component, 2),
    )


def compute_mean_reversion_composite(
    percent_b: PercentBResult,
    distance: DistanceFromMAResult,
    strength: MeanReversionScoreResult,
    settings: ScoringSettings,
) -> MeanReversionComposite:
    """Signed mean-reversion direction plus the precomputed strength blend.

    Direction score = ``(%B - 0.5) * 200`` and ``clamp(distance * 10, -100,
    100)`` blended by the reversion weights, clamped to -100..100. Below -40
    the asset is OVERSOLD, above 40 OVERBOUGHT.
    """
    percent_b_term = (percent_b.value - 0.5) * 200
    distance_term = clamp(distance.distance * 10, -100, 100)

    percent_b_component = percent_b_term * settings.reversion_percent_b
    distance_component = distance_term * settings.reversion_distance
    score = int(clamp(round_score(percent_b_component + distance_component), -100, 100))

    if score < -_REVERSION_EXTREME:
        signal = ReversionSignal.OVERSOLD
    elif score > _REVERSION_EXTREME:
        signal = ReversionSignal.OVERBOUGHT
    else:
        signal = ReversionSignal.NEUTRAL

    return MeanReversionComposite(
        score=score,
        signal=signal,
        percent_b_component=round_half_up(percent_b_component, 2),
        distance_component=round_half_up(distance_component, 2),
        strength=strength.score,
        direction=strength.direction,
    )


def classify_regime(regime_score: float) -> VolatilityRegime:
    if regime_score > 75:
        return VolatilityRegime.EXTREME
    if regime_score > 50:
        return VolatilityRegime.HIGH
    if regime_score > 25:
        return VolatilityRegime.NORMAL
    return VolatilityRegime.LOW


def compute_volatility_composite(
    bands: BollingerBands,
    rsi: RSIResult,
    metrics: MarketMetrics,
    bandwidth_percent: float,
    settings: ScoringSettings,
) -> VolatilityComposite:
    """Risk score (0..100) and volatility regime.

    Risk terms, each 0..1: ``|%B - 0.5| * 2`` capped at 1, ``|rsi - 50| / 50``
    and ``min(volatility, 1)``.

    Regime terms, each capped at 100: Bollinger width percent * 10, daily
    range percent * 10 and ``100 - ath_distance``.

    Args:
        bands: Bollinger bands of the analysis.
        rsi: RSI reading.
        metrics: Snapshot-derived ratios.
        bandwidth_percent: Bollinger bandwidth in percent.
        settings: Risk and regime weights.
    """
    bollinger_risk = min(abs(bands.percent_b - 0.5) * 2, 1)
    rsi_risk = abs(rsi.rsi - 50) / 50
    volatility_risk = min(metrics.volatility, 1)

    bollinger_component = bollinger_risk * settings.risk_bollinger * 100
    rsi_component = rsi_risk * settings.risk_rsi * 100
    volatility_component = volatility_risk * settings.risk_volatility * 100
    score = int(
        clamp(round_score(bollinger_component + rsi_component + volatility_component), 0, 100)
    )

    regime_raw = (
        min(100, bandwidth_percent * 10) * settings.regime_bollinger_width
        + min(100, metrics.daily_range * 10) * settings.regime_daily_range
        + min(100, 100 - metrics.ath_distance) * settings.regime_ath_distance
    )
    regime_score = int(clamp(round_score(regime_raw), 0, 100))

    return VolatilityComposite(
        score=score,
        bollinger_component=round_half_up(bollinger_component, 2),
        rsi_component=round_half_up(rsi_component, 2),
        volatility_component=round_half_up(volatility_component, 2),
        regime_score=regime_score,
        regime=classify_regime(regime_score),
    )


def compute_overall_quality(
    momentum: MomentumComposite,
    mean_reversion: MeanReversionComposite,
    volatility: VolatilityComposite,
    settings: ScoringSettings,
) -> int:
    """0..100 quality: momentum conviction, a tradeable regime, a clear stretch."""
    quality = (
        abs(momentum.score) * settings.quality_momentum
        + _REGIME_QUALITY[volatility.regime] * settings.quality_volatility
        + abs(mean_reversion.score) * settings.quality_mean_reversion
    )
    return int(clamp(round_score(quality), 0, 100))


def compute_composite_scores(
    formulas: FormulaResults,
    metrics: MarketMetrics,
    settings: ScoringSettings | None = None,
) -> CompositeScores:
    """Build all composites and the overall quality from joined formula results.

    Args:
        formulas: Formula outputs of one analysis.
        metrics: Snapshot-derived ratios for the same asset.
        settings: Composite weights. Defaults apply when omitted.

    Returns:
        CompositeScores for the analysis.
    """
    settings = settings or ScoringSettings()

    momentum = compute_momentum_composite(
        formulas.rsi, formulas.divergence, formulas.macd, formulas.adx, settings
    )
    mean_reversion = compute_mean_reversion_composite(
        formulas.percent_b, formulas.distance_from_ma, formulas.mean_reversion, settings
    )
    volatility = compute_volatility_composite(
        formulas.bollinger_bands,
        formulas.rsi,
        metrics,
        formulas.bollinger_width.width_percent,
        settings,
    )

    return CompositeScores(
        momentum=momentum,
        mean_reversion=mean_reversion,
        volatility=volatility,
        overall_quality=compute_overall_quality(momentum, mean_reversion, volatility, settings),
    )
