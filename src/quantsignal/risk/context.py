"""Risk contextualizer: adjusts a base risk score with external factors.

Rules are applied independently and composed multiplicatively:
  - Treasury (only with institutional holdings): accumulation scales risk by
    0.85; distribution scales it by 1.1 and sets a floor of 45.
  - Liquidation (only with liquidation data): a HIGH nearby cluster scales
    risk by 1.3 and sets a floor of 60; MEDIUM scales it by 1.15.

Final risk = clamp(max(floor, base * multipliers), 0, 100), rounded half up.
Several floors combine by maximum, never by sum.
"""

from quantsignal.config import RiskContextSettings
from quantsignal.mathutils import clamp, round_score
from quantsignal.risk.models import (
    FundingBias,
    LiquidationContext,
    LiquidationRisk,
    RiskContext,
    RiskLevel,
    TreasuryContext,
)

DEFAULT_EXPLANATION = "Standard risk assessment"

#: Funding rate beyond which one side of the market is crowded.
_FUNDING_BIAS_THRESHOLD = 0.01


def classify_risk_level(
    risk: float, settings: RiskContextSettings | None = None
) -> RiskLevel:
    """Map a 0-100 risk to LOW (<30), MEDIUM (<50), HIGH (<75) or EXTREME."""
    settings = settings or RiskContextSettings()
    if risk < settings.level_low:
        return RiskLevel.LOW
    if risk < settings.level_medium:
        return RiskLevel.MEDIUM
    if risk < settings.level_high:
        return RiskLevel.HIGH
    return RiskLevel.EXTREME


def compute_risk_context(
    base_risk: float,
    treasury: TreasuryContext | None = None,
    liquidation: LiquidationContext | None = None,
    settings: RiskContextSettings | None = None,
) -> RiskContext:
    """Contextualize ``base_risk`` with optional treasury and liquidation data.

    Args:
        base_risk: Risk score from the volatility composite, 0-100.
        treasury: Institutional holdings context, or None.
        liquidation: Liquidation clustering context, or None.
        settings: Multipliers, floors and level boundaries. Defaults apply
            when omitted.

    Returns:
        RiskContext with the applied multipliers, the effective floor, the
        final integer risk, its level, and the reasons that fired (treasury
        first, then liquidation) or a default explanation.
    """
    settings = settings or RiskContextSettings()
    treasury_multiplier = 1.0
    liquidation_multiplier = 1.0
    risk_floor = 0.0
    reasons: list[str] = []

    if treasury is not None and treasury.has_institutional_holdings:
        signal = treasury.accumulation_signal
        if signal.is_accumulation:
            treasury_multiplier = settings.accumulation_multiplier
            reasons.append("Institutional accumulation")
        elif signal.is_distribution:
            treasury_multiplier = settings.distribution_multiplier
            risk_floor = max(risk_floor, settings.distribution_floor)
            reasons.append("Institutional distribution")

    if liquidation is not None and liquidation.has_liquidation_data:
        if liquidation.nearby_liquidation_risk is LiquidationRisk.HIGH:
            liquidation_multiplier = settings.liquidation_high_multiplier
            risk_floor = max(risk_floor, settings.liquidation_high_floor)
            reasons.append("Liquidation cluster nearby")
        elif liquidation.nearby_liquidation_risk is LiquidationRisk.MEDIUM:
            liquidation_multiplier = settings.liquidation_medium_multiplier
            reasons.append("Elevated liquidation exposure")

    adjusted = base_risk * treasury_multiplier * liquidation_multiplier
    final_risk = clamp(max(risk_floor, adjusted), 0, 100)

    return RiskContext(
        base_risk=base_risk,
        treasury_multiplier=treasury_multiplier,
        liquidation_multiplier=liquidation_multiplier,
        risk_floor=risk_floor,
        final_risk=round_score(final_risk),
        risk_level=classify_risk_level(final_risk, settings),
        explanation=" + ".join(reasons) if reasons else DEFAULT_EXPLANATION,
    )


def classify_funding_bias(funding_rate: float) -> FundingBias:
    """LONG_HEAVY above 0.01, SHORT_HEAVY below -0.01, else NEUTRAL."""
    if funding_rate > _FUNDING_BIAS_THRESHOLD:
        return FundingBias.LONG_HEAVY
    if funding_rate < -_FUNDING_BIAS_THRESHOLD:
        return FundingBias.SHORT_HEAVY
    return FundingBias.NEUTRAL
