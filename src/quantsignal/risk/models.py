"""External context records and the contextualized risk result.

Treasury, liquidation and derivatives contexts are supplied by external
collaborators; only the fields the risk contextualizer and insight helper read
are modelled.
"""

from dataclasses import dataclass
from enum import Enum


class AccumulationSignal(str, Enum):
    """Institutional holdings trend over the last 30 days."""

    STRONG_BUY = "strong_buy"
    BUY = "buy"
    NEUTRAL = "neutral"
    SELL = "sell"
    STRONG_SELL = "strong_sell"

    @property
    def is_accumulation(self) -> bool:
        return self in (AccumulationSignal.STRONG_BUY, AccumulationSignal.BUY)

    @property
    def is_distribution(self) -> bool:
        return self in (AccumulationSignal.SELL, AccumulationSignal.STRONG_SELL)


class LiquidationRisk(str, Enum):
    """How close the nearest liquidation cluster sits to the current price."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class DominantSide(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"
    BALANCED = "BALANCED"


class FundingBias(str, Enum):
    LONG_HEAVY = "LONG_HEAVY"
    SHORT_HEAVY = "SHORT_HEAVY"
    NEUTRAL = "NEUTRAL"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


@dataclass(frozen=True)
class TreasuryContext:
    """Institutional (corporate treasury) holdings of an asset."""

    has_institutional_holdings: bool
    accumulation_signal: AccumulationSignal = AccumulationSignal.NEUTRAL
    net_change_30d: float = 0.0  # percent
    total_holdings_usd: float = 0.0
    entity_count: int = 0
    percent_of_supply: float = 0.0


@dataclass(frozen=True)
class LiquidationContext:
    """Liquidation clustering around the current price."""

    has_liquidation_data: bool
    nearby_liquidation_risk: LiquidationRisk = LiquidationRisk.LOW
    dominant_side: DominantSide = DominantSide.BALANCED
    liquidation_ratio: float = 1.0  # long / short liquidations
    total_liquidation_usd_24h: float = 0.0


@dataclass(frozen=True)
class DerivativesContext:
    """Perpetual futures positioning."""

    funding_rate: float  # per funding interval, as a fraction
    open_interest_usd: float = 0.0
    oi_change_24h: float = 0.0  # percent
    funding_bias: FundingBias = FundingBias.NEUTRAL


@dataclass(frozen=True)
class RiskContext:
    """Base risk adjusted by external factors.

    ``final_risk`` is ``clamp(max(risk_floor, base_risk * multipliers), 0, 100)``
    rounded half up. ``explanation`` joins the reason of every rule that fired
    with " + ".
    """

    base_risk: float
    treasury_multiplier: float
    liquidation_multiplier: float
    risk_floor: float
    final_risk: int
    risk_level: RiskLevel
    explanation: str


@dataclass(frozen=True)
class AssetContext:
    """Optional external context for one asset in a batch analysis."""

    treasury: TreasuryContext | None = None
    liquidation: LiquidationContext | None = None
    derivatives: DerivativesContext | None = None
