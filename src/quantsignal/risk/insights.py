"""Human-readable insights from the risk context and external data."""

from quantsignal.models import Signal
from quantsignal.risk.models import DerivativesContext, RiskContext, RiskLevel, TreasuryContext

#: Absolute funding rate above which a trade is considered crowded.
EXTREME_FUNDING_RATE = 0.05


def generate_insights(
    signal: Signal,
    risk_context: RiskContext,
    treasury: TreasuryContext | None = None,
    derivatives: DerivativesContext | None = None,
) -> list[str]:
    """Collect the insight sentences that apply, in a fixed order.

    Args:
        signal: Classified trading signal.
        risk_context: Contextualized risk for the same asset.
        treasury: Institutional holdings context, or None.
        derivatives: Derivatives positioning context, or None.

    Returns:
        Insight strings: institutional accumulation, extreme funding, then
        low-risk bullish support. Empty when none apply.
    """
    insights: list[str] = []

    if treasury is not None and treasury.has_institutional_holdings and treasury.net_change_30d > 0:
        insights.append(
            f"Institutions accumulated {treasury.net_change_30d:.1f}% more in 30d"
        )

    if derivatives is not None and abs(derivatives.funding_rate) > EXTREME_FUNDING_RATE:
        insights.append(
            f"Extreme funding rate ({derivatives.funding_rate * 100:.2f}%) - crowded trade"
        )

    if risk_context.risk_level is RiskLevel.LOW and signal.is_bullish:
        insights.append("Low risk environment supports bullish signals")

    return insights
