"""Risk contextualization from external institutional and liquidation data."""

from quantsignal.risk.context import (
    classify_funding_bias,
    classify_risk_level,
    compute_risk_context,
)
from quantsignal.risk.insights import generate_insights
from quantsignal.risk.models import (
    AccumulationSignal,
    AssetContext,
    DerivativesContext,
    DominantSide,
    FundingBias,
    LiquidationContext,
    LiquidationRisk,
    RiskContext,
    RiskLevel,
    TreasuryContext,
)

__all__ = [
    "AccumulationSignal",
    "AssetContext",
    "DerivativesContext",
    "DominantSide",
    "FundingBias",
    "LiquidationContext",
    "LiquidationRisk",
    "RiskContext",
    "RiskLevel",
    "TreasuryContext",
    "classify_funding_bias",
    "classify_risk_level",
    "compute_risk_context",
    "generate_insights",
]
