"""Signal classifier: blended composite score to a discrete trading signal.

Stateless. The same composites always map to the same signal; there is no
hysteresis between calls.
"""

from quantsignal.config import SignalSettings
from quantsignal.indicators.models import (
    BollingerSqueeze,
    Direction,
    DivergenceType,
    RSIDivergence,
)
from quantsignal.mathutils import clamp, round_half_up, round_score
from quantsignal.models import Signal
from quantsignal.signals.models import SignalClassification


def score_to_signal(score: float, settings: SignalSettings | None = None) -> Signal:
    """Map a combined score to a signal with strict thresholds.

    ``> 60`` STRONG_BUY, ``> 20`` BUY, ``< -60`` STRONG_SELL, ``< -20`` SELL,
    else HOLD. A score of exactly 60 is BUY and exactly 20 is HOLD.
    """
    settings = settings or SignalSettings()
    if score > settings.strong_threshold:
        return Signal.STRONG_BUY
    if score > settings.threshold:
        return Signal.BUY
    if score < -settings.strong_threshold:
        return Signal.STRONG_SELL
    if score < -settings.threshold:
        return Signal.SELL
    return Signal.HOLD


def squeeze_boost(squeeze: BollingerSqueeze, settings: SignalSettings | None = None) -> float:
    """Breakout confirmation: ``+/-boost * confidence / 100`` while squeezing."""
    settings = settings or SignalSettings()
    if not squeeze.is_squeezing:
        return 0.0
    if squeeze.breakout_direction is Direction.BULLISH:
        return settings.squeeze_boost * squeeze.confidence / 100
    if squeeze.breakout_direction is Direction.BEARISH:
        return -settings.squeeze_boost * squeeze.confidence / 100
    return 0.0


def divergence_boost(
    divergence: RSIDivergence, settings: SignalSettings | None = None
) -> float:
    """Reversal confirmation: ``+/-boost * strength / 100`` on a divergence."""
    settings = settings or SignalSettings()
    if not divergence.has_divergence:
        return 0.0
    if divergence.divergence_type is DivergenceType.BULLISH:
        return settings.divergence_boost * divergence.strength / 100
    if divergence.divergence_type is DivergenceType.BEARISH:
        return -settings.divergence_boost * divergence.strength / 100
    return 0.0


def classify_signal(
    momentum_score: float,
    mean_reversion_score: float,
    squeeze: BollingerSqueeze,
    divergence: RSIDivergence,
    overall_quality: float,
    settings: SignalSettings | None = None,
) -> SignalClassification:
    """Blend composites, apply confirmation boosts and classify.

    combined = momentum * 0.7 + mean_reversion * 0.3 + squeeze boost +
    divergence boost, clamped to [-100, 100] and held at 2 decimals so that
    threshold comparisons are exact.

    Args:
        momentum_score: Momentum composite, -100..100.
        mean_reversion_score: Mean-reversion direction score, -100..100.
        squeeze: Bollinger squeeze reading.
        divergence: RSI divergence reading.
        overall_quality: Quality from the composite scorer, 0..100.
        settings: Blend weights, boosts and thresholds.

    Returns:
        SignalClassification. Confidence is
        ``min(100, round(|combined| * 0.6 + quality * 0.4))``.
    """
    settings = settings or SignalSettings()

    base = (
        momentum_score * settings.momentum_weight
        + mean_reversion_score * settings.mean_reversion_weight
    )
    squeeze_part = squeeze_boost(squeeze, settings)
    divergence_part = divergence_boost(divergence, settings)
    combined = round_half_up(clamp(base + squeeze_part + divergence_part, -100, 100), 2)

    confidence = round_score(
        abs(combined) * settings.confidence_strength_weight
        + overall_quality * settings.confidence_quality_weight
    )

    return SignalClassification(
        base_score=round_half_up(base, 2),
        squeeze_boost=round_half_up(squeeze_part, 2),
        divergence_boost=round_half_up(divergence_part, 2),
        combined_score=combined,
        signal=score_to_signal(combined, settings),
        confidence=int(clamp(confidence, 0, 100)),
    )
