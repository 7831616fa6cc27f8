"""Composite scores, classification and the per-asset analysis record.

Scores are plain ints in their documented range. Records are frozen and built
once per analysis; nothing here is mutated after the engine returns it.
"""

from dataclasses import dataclass
from enum import Enum

from quantsignal.indicators.models import (
    ADLineResult,
    ADXResult,
    AnnualizedVolatilityResult,
    ATRResult,
    AwesomeOscillatorResult,
    BetaResult,
    BollingerBands,
    BollingerSqueeze,
    BollingerWidthResult,
    CalmarRatioResult,
    CCIResult,
    ChaikinMFResult,
    CVaRResult,
    DistanceFromMAResult,
    DonchianChannelsResult,
    DPOResult,
    GarmanKlassResult,
    IndicatorAgreement,
    KeltnerChannelsResult,
    KeltnerWidthResult,
    LinearRegressionResult,
    MACDResult,
    MaxDrawdownResult,
    MeanReversionScoreResult,
    MFIResult,
    NoiseScore,
    OBVResult,
    ParabolicSARResult,
    PercentBResult,
    ROCResult,
    RSIDivergence,
    RSIResult,
    RVIResult,
    SharpeRatioResult,
    SortinoRatioResult,
    StochasticResult,
    SupertrendResult,
    TradeBias,
    UltimateOscillatorResult,
    VaRResult,
    VolumeROCResult,
    VWAPResult,
    WilliamsRResult,
    ZScoreResult,
)
from quantsignal.models import Signal
from quantsignal.risk.models import RiskContext


class MomentumSignal(str, Enum):
    STRONG_BULLISH = "STRONG_BULLISH"
    BULLISH = "BULLISH"
    NEUTRAL = "NEUTRAL"
    BEARISH = "BEARISH"
    STRONG_BEARISH = "STRONG_BEARISH"


class ReversionSignal(str, Enum):
    OVERSOLD = "OVERSOLD"
    NEUTRAL = "NEUTRAL"
    OVERBOUGHT = "OVERBOUGHT"


class VolatilityRegime(str, Enum):
    """Regime bucket of the volatility regime score: >75 EXTREME, >50 HIGH, >25 NORMAL."""

    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


@dataclass(frozen=True)
class MarketMetrics:
    """Snapshot-derived ratios used by the volatility composite and the report."""

    volatility: float  # (high - low) / price, 0.5 without a 24h range
    daily_range: float  # percent
    ath_distance: float  # percent below the all-time high, 0 without one
    volume_to_market_cap_ratio: float


@dataclass(frozen=True)
class MomentumComposite:
    """Directional momentum, -100..100, with the weighted term breakdown."""

    score: int
    signal: MomentumSignal
    rsi_component: float
    divergence_component: float
    macd_component: float
    adx_component: float


@dataclass(frozen=True)
class MeanReversionComposite:
    """Mean-reversion pressure.

    ``score`` is the signed direction score (-100..100, negative = price
    stretched below its average). ``strength`` is the unsigned 0..100 blend of
    %B, Bollinger width, distance from MA and Keltner width.
    """

    score: int
    signal: ReversionSignal
    percent_b_component: float
    distance_component: float
    strength: int
    direction: TradeBias


@dataclass(frozen=True)
class VolatilityComposite:
    """Risk score (0..100, the base risk) and the volatility regime."""

    score: int
    bollinger_component: float
    rsi_component: float
    volatility_component: float
    regime_score: int
    regime: VolatilityRegime


@dataclass(frozen=True)
class CompositeScores:
    momentum: MomentumComposite
    mean_reversion: MeanReversionComposite
    volatility: VolatilityComposite
    overall_quality: int  # 0-100


@dataclass(frozen=True)
class SignalClassification:
    """Blended score, the confirmation boosts that moved it, and the outcome."""

    base_score: float  # momentum/mean-reversion blend before boosts
    squeeze_boost: float
    divergence_boost: float
    combined_score: float  # clamped to [-100, 100]
    signal: Signal
    confidence: int  # 0-100


@dataclass(frozen=True)
class FormulaResults:
    """Every formula output of one analysis, joined by name.

    Snapshot formulas are always present. Series-only formulas stay None
    unless the analysis was given a SeriesInput long enough to feed them.
    """

    rsi: RSIResult
    divergence: RSIDivergence
    macd: MACDResult
    bollinger_bands: BollingerBands
    squeeze: BollingerSqueeze
    percent_b: PercentBResult
    bollinger_width: BollingerWidthResult
    distance_from_ma: DistanceFromMAResult
    keltner_width: KeltnerWidthResult
    mean_reversion: MeanReversionScoreResult
    adx: ADXResult
    volume_roc: VolumeROCResult
    atr: ATRResult | None = None
    parabolic_sar: ParabolicSARResult | None = None
    supertrend: SupertrendResult | None = None
    keltner_channels: KeltnerChannelsResult | None = None
    garman_klass: GarmanKlassResult | None = None
    vwap: VWAPResult | None = None
    obv: OBVResult | None = None
    regression: LinearRegressionResult | None = None
    z_score: ZScoreResult | None = None
    var: VaRResult | None = None
    cvar: CVaRResult | None = None
    max_drawdown: MaxDrawdownResult | None = None
    calmar: CalmarRatioResult | None = None
    sharpe: SharpeRatioResult | None = None
    sortino: SortinoRatioResult | None = None
    beta: BetaResult | None = None
    stochastic: StochasticResult | None = None
    williams_r: WilliamsRResult | None = None
    roc: ROCResult | None = None
    cci: CCIResult | None = None
    awesome_oscillator: AwesomeOscillatorResult | None = None
    dpo: DPOResult | None = None
    rvi: RVIResult | None = None
    ultimate_oscillator: UltimateOscillatorResult | None = None
    donchian_channels: DonchianChannelsResult | None = None
    parkinson: AnnualizedVolatilityResult | None = None
    historical_volatility: AnnualizedVolatilityResult | None = None
    ad_line: ADLineResult | None = None
    chaikin_money_flow: ChaikinMFResult | None = None
    mfi: MFIResult | None = None
    agreement: IndicatorAgreement | None = None
    noise: NoiseScore | None = None


@dataclass(frozen=True)
class QuantitativeAnalysis:
    """Final per-asset output: formulas, composites, signal and risk."""

    symbol: str
    timestamp: float
    price: float
    formulas: FormulaResults
    composite: CompositeScores
    classification: SignalClassification
    risk_context: RiskContext
    metrics: MarketMetrics
    insights: tuple[str, ...] = ()
    name: str | None = None

    @property
    def signal(self) -> Signal:
        return self.classification.signal

    @property
    def confidence(self) -> int:
        return self.classification.confidence

    @property
    def risk_score(self) -> int:
        """Contextualized risk, 0-100."""
        return self.risk_context.final_risk

    @property
    def volume_roc(self) -> VolumeROCResult:
        return self.formulas.volume_roc

    @property
    def noise(self) -> NoiseScore | None:
        return self.formulas.noise

    @property
    def volume_to_market_cap_ratio(self) -> float:
        return self.metrics.volume_to_market_cap_ratio

    @property
    def daily_range(self) -> float:
        return self.metrics.daily_range

    @property
    def ath_distance(self) -> float:
        return self.metrics.ath_distance


@dataclass(frozen=True)
class BatchOutcome:
    """Per-asset result of an isolated batch: an analysis or the error."""

    symbol: str
    analysis: QuantitativeAnalysis | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
