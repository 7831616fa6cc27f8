"""Result records and classifications for the indicator library.

Every formula returns a fresh frozen record holding its numeric output and an
explicit classification. Thresholds for each classification are documented
on the formula that produces it.
"""

from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Classifications
# ---------------------------------------------------------------------------


class Direction(str, Enum):
    """Directional bias shared by trend, breakout and MACD classifications."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class TradeBias(str, Enum):
    """Buy/sell lean of a single indicator."""

    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


class TrendStrength(str, Enum):
    VERY_WEAK = "VERY_WEAK"
    WEAK = "WEAK"
    MODERATE = "MODERATE"
    STRONG = "STRONG"
    VERY_STRONG = "VERY_STRONG"


class StrengthLevel(str, Enum):
    VERY_STRONG = "VERY_STRONG"
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"
    VERY_WEAK = "VERY_WEAK"


class RSISignal(str, Enum):
    OVERSOLD = "OVERSOLD"
    NEUTRAL = "NEUTRAL"
    OVERBOUGHT = "OVERBOUGHT"


class DivergenceType(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NONE = "NONE"


class PriceAction(str, Enum):
    HIGHER_HIGH = "HIGHER_HIGH"
    LOWER_LOW = "LOWER_LOW"
    NEUTRAL = "NEUTRAL"


class SqueezeLevel(str, Enum):
    """Bollinger width bucket: <0.05 TIGHT, <0.10 MODERATE, <0.20 NORMAL, else WIDE."""

    TIGHT = "TIGHT"
    MODERATE = "MODERATE"
    NORMAL = "NORMAL"
    WIDE = "WIDE"


class WidthTrend(str, Enum):
    NARROWING = "NARROWING"
    STABLE = "STABLE"
    WIDENING = "WIDENING"


class VolatilityLevel(str, Enum):
    VERY_LOW = "VERY_LOW"
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class GarmanKlassLevel(str, Enum):
    """Annualized volatility bucket at 10/20/40/60 percent (Garman-Klass, Parkinson, historical)."""

    VERY_LOW = "VERY_LOW"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class ChannelPosition(str, Enum):
    ABOVE = "ABOVE"
    WITHIN = "WITHIN"
    BELOW = "BELOW"


class PercentBSignal(str, Enum):
    EXTREME_OVERBOUGHT = "EXTREME_OVERBOUGHT"
    OVERBOUGHT = "OVERBOUGHT"
    NEUTRAL = "NEUTRAL"
    OVERSOLD = "OVERSOLD"
    EXTREME_OVERSOLD = "EXTREME_OVERSOLD"


class BandPosition(str, Enum):
    ABOVE_BANDS = "ABOVE_BANDS"
    UPPER_HALF = "UPPER_HALF"
    MIDDLE = "MIDDLE"
    LOWER_HALF = "LOWER_HALF"
    BELOW_BANDS = "BELOW_BANDS"


class DistanceSignal(str, Enum):
    EXTREME_ABOVE = "EXTREME_ABOVE"
    ABOVE = "ABOVE"
    NEUTRAL = "NEUTRAL"
    BELOW = "BELOW"
    EXTREME_BELOW = "EXTREME_BELOW"


class Relationship(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NONE = "NONE"


class ZScoreInterpretation(str, Enum):
    VERY_UNUSUAL = "VERY_UNUSUAL"
    UNUSUAL = "UNUSUAL"
    NORMAL = "NORMAL"


class NoiseLevel(str, Enum):
    """Signal noise bucket: <30 LOW, <55 MODERATE, <75 HIGH, else EXTREME."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


class VaRRiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class TailRisk(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


class BetaInterpretation(str, Enum):
    """Beta bucket: <0 INVERSE, <0.8 DEFENSIVE, <1.2 NEUTRAL, else AGGRESSIVE."""

    INVERSE = "INVERSE"
    DEFENSIVE = "DEFENSIVE"
    NEUTRAL = "NEUTRAL"
    AGGRESSIVE = "AGGRESSIVE"


class DrawdownSeverity(str, Enum):
    NONE = "NONE"
    MILD = "MILD"
    MODERATE = "MODERATE"
    SIGNIFICANT = "SIGNIFICANT"
    SEVERE = "SEVERE"


class PerformanceRating(str, Enum):
    EXCELLENT = "EXCELLENT"
    VERY_GOOD = "VERY_GOOD"
    GOOD = "GOOD"
    ACCEPTABLE = "ACCEPTABLE"
    POOR = "POOR"


class VWAPPosition(str, Enum):
    ABOVE = "ABOVE"
    BELOW = "BELOW"
    AT = "AT"


class VolumeSignal(str, Enum):
    SURGE = "SURGE"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


class VolumeActivity(str, Enum):
    UNUSUAL = "UNUSUAL"
    ELEVATED = "ELEVATED"
    NORMAL = "NORMAL"
    QUIET = "QUIET"


class FlowTrend(str, Enum):
    ACCUMULATION = "ACCUMULATION"
    DISTRIBUTION = "DISTRIBUTION"
    NEUTRAL = "NEUTRAL"


class OscillatorSignal(str, Enum):
    """Bounded-oscillator reading: Stochastic, Williams %R, DPO, Ultimate, MFI."""

    OVERBOUGHT = "OVERBOUGHT"
    OVERSOLD = "OVERSOLD"
    NEUTRAL = "NEUTRAL"


class Crossover(str, Enum):
    """Fast line crossing its signal line on the last bar."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NONE = "NONE"


class GradedTrend(str, Enum):
    STRONG_BULLISH = "STRONG_BULLISH"
    BULLISH = "BULLISH"
    NEUTRAL = "NEUTRAL"
    BEARISH = "BEARISH"
    STRONG_BEARISH = "STRONG_BEARISH"


class MomentumSign(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class CCISignal(str, Enum):
    EXTREME_OVERBOUGHT = "EXTREME_OVERBOUGHT"
    OVERBOUGHT = "OVERBOUGHT"
    NEUTRAL = "NEUTRAL"
    OVERSOLD = "OVERSOLD"
    EXTREME_OVERSOLD = "EXTREME_OVERSOLD"


class MomentumChange(str, Enum):
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    STABLE = "STABLE"


class HistogramColor(str, Enum):
    GREEN = "GREEN"
    RED = "RED"


class CyclePhase(str, Enum):
    PEAK = "PEAK"
    TROUGH = "TROUGH"
    NEUTRAL = "NEUTRAL"


class BreakoutSignal(str, Enum):
    BULLISH_BREAKOUT = "BULLISH_BREAKOUT"
    BEARISH_BREAKOUT = "BEARISH_BREAKOUT"
    NEUTRAL = "NEUTRAL"


class MoneyFlowSignal(str, Enum):
    STRONG_BUYING = "STRONG_BUYING"
    BUYING = "BUYING"
    NEUTRAL = "NEUTRAL"
    SELLING = "SELLING"
    STRONG_SELLING = "STRONG_SELLING"



# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SMAResult:
    value: float
    period: int


@dataclass(frozen=True)
class EMAResult:
    value: float
    period: int
    alpha: float


@dataclass(frozen=True)
class ADXResult:
    adx: float  # 0-100
    plus_di: float
    minus_di: float
    trend_strength: TrendStrength
    trend_direction: Direction


@dataclass(frozen=True)
class ParabolicSARResult:
    sar: float
    trend: Direction  # BULLISH or BEARISH only
    is_reversal: bool  # SAR flipped on the last bar
    af: float  # acceleration factor
    ep: float  # extreme point


@dataclass(frozen=True)
class SupertrendResult:
    value: float
    trend: Direction  # BULLISH or BEARISH only
    is_reversal: bool
    upper_band: float
    lower_band: float


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RSIResult:
    rsi: float  # 0-100
    signal: RSISignal
    momentum: float  # -1 to 1


@dataclass(frozen=True)
class RSIDivergence:
    has_divergence: bool
    divergence_type: DivergenceType
    strength: int  # 0-100
    rsi: float
    price_action: PriceAction


@dataclass(frozen=True)
class MACDResult:
    macd: float
    signal: float
    histogram: float
    trend: Direction


@dataclass(frozen=True)
class StochasticResult:
    k: float  # 0-100
    d: float  # SMA of %K
    signal: OscillatorSignal
    crossover: Crossover


@dataclass(frozen=True)
class WilliamsRResult:
    value: float  # -100 to 0
    signal: OscillatorSignal
    momentum: Direction


@dataclass(frozen=True)
class ROCResult:
    value: float  # percent
    signal: GradedTrend
    momentum: MomentumSign


# ---------------------------------------------------------------------------
# Oscillators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CCIResult:
    value: float
    signal: CCISignal
    trend: GradedTrend


@dataclass(frozen=True)
class AwesomeOscillatorResult:
    value: float
    signal: Direction
    momentum: MomentumChange
    histogram: HistogramColor


@dataclass(frozen=True)
class DPOResult:
    value: float
    signal: OscillatorSignal
    cycle: CyclePhase


@dataclass(frozen=True)
class RVIResult:
    rvi: float
    signal_line: float  # 4-bar SMA of RVI
    crossover: Crossover
    momentum: MomentumSign


@dataclass(frozen=True)
class UltimateOscillatorResult:
    value: float  # 0-100
    signal: OscillatorSignal
    trend: Direction



# ---------------------------------------------------------------------------
# Volatility
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BollingerBands:
    upper_band: float
    middle_band: float
    lower_band: float
    bandwidth: float  # (upper - lower) / middle
    percent_b: float  # position within the bands


@dataclass(frozen=True)
class BollingerSqueeze:
    is_squeezing: bool
    bandwidth: float
    squeeze_intensity: int  # 0-100
    breakout_direction: Direction
    confidence: int  # 0-100


@dataclass(frozen=True)
class ATRResult:
    value: float
    normalized_atr: float  # percent of last close
    volatility_level: VolatilityLevel


@dataclass(frozen=True)
class KeltnerChannelsResult:
    upper: float
    middle: float
    lower: float
    width: float  # percent of middle
    position: float  # 0-1 inside the channel
    signal: ChannelPosition


@dataclass(frozen=True)
class GarmanKlassResult:
    value: float  # annualized volatility, percent
    daily_vol: float
    level: GarmanKlassLevel
    efficiency: float  # relative to close-to-close


@dataclass(frozen=True)
class DonchianChannelsResult:
    upper: float  # highest high
    middle: float
    lower: float  # lowest low
    width: float  # percent of middle
    position: float  # 0-1 inside the channel
    signal: BreakoutSignal


@dataclass(frozen=True)
class AnnualizedVolatilityResult:
    """Parkinson or close-to-close historical volatility."""

    value: float  # annualized, percent
    daily_vol: float
    level: GarmanKlassLevel



# ---------------------------------------------------------------------------
# Mean reversion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PercentBResult:
    value: float  # may fall outside [0, 1]
    signal: PercentBSignal
    position: BandPosition
    mean_reversion_setup: bool

    @property
    def is_breach(self) -> bool:
        """True when price sits outside the bands."""
        return self.value > 1 or self.value < 0


@dataclass(frozen=True)
class BollingerWidthResult:
    width: float
    width_percent: float
    squeeze: SqueezeLevel
    trend: WidthTrend


@dataclass(frozen=True)
class DistanceFromMAResult:
    distance: float  # percent
    signal: DistanceSignal
    mean_reversion_setup: bool
    strength: int  # 0-100


@dataclass(frozen=True)
class KeltnerWidthResult:
    width: float
    width_percent: float
    volatility: VolatilityLevel


@dataclass(frozen=True)
class ReversionComponents:
    percent_b: int
    bollinger_width: int
    distance_from_ma: int
    keltner_width: int


@dataclass(frozen=True)
class MeanReversionScoreResult:
    score: int  # 0-100
    direction: TradeBias
    strength: StrengthLevel
    components: ReversionComponents


# ---------------------------------------------------------------------------
# Statistical
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StandardDeviationResult:
    population: float
    sample: float
    variance: float
    mean: float


@dataclass(frozen=True)
class CorrelationResult:
    coefficient: float  # -1 to 1
    strength: StrengthLevel
    direction: Relationship
    r_squared: float


@dataclass(frozen=True)
class CovarianceResult:
    value: float
    relationship: Relationship
    normalized: float


@dataclass(frozen=True)
class LinearRegressionResult:
    slope: float
    intercept: float
    r_squared: float
    correlation: float
    exact_slope: float = field(default=0.0, repr=False, compare=False)
    exact_intercept: float = field(default=0.0, repr=False, compare=False)

    def predict(self, x: float) -> float:
        """Evaluate the fitted line at ``x`` using unrounded coefficients."""
        return self.exact_slope * x + self.exact_intercept


@dataclass(frozen=True)
class ZScoreResult:
    value: float
    interpretation: ZScoreInterpretation
    percentile: float  # approximate, 0-100


@dataclass(frozen=True)
class NoiseScore:
    value: int  # 0-100, higher = less trustworthy signal
    level: NoiseLevel


@dataclass(frozen=True)
class IndicatorAgreement:
    agreement: float  # 0-1 share of weight on the dominant side
    direction: TradeBias


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VaRResult:
    var95: float  # percent
    var99: float  # percent
    risk_level: VaRRiskLevel


@dataclass(frozen=True)
class CVaRResult:
    cvar95: float  # percent
    cvar99: float  # percent
    var95: float
    var99: float
    tail_risk: TailRisk


@dataclass(frozen=True)
class BetaResult:
    value: float
    interpretation: BetaInterpretation
    correlation: float
    volatility_ratio: float


@dataclass(frozen=True)
class MaxDrawdownResult:
    value: float  # percent, <= 0
    peak_index: int
    trough_index: int
    duration: int
    severity: DrawdownSeverity


@dataclass(frozen=True)
class CalmarRatioResult:
    value: float
    rating: PerformanceRating
    annualized_return: float  # percent
    max_drawdown: float  # percent, positive magnitude


@dataclass(frozen=True)
class SharpeRatioResult:
    value: float
    rating: PerformanceRating
    excess_return: float
    volatility: float


@dataclass(frozen=True)
class SortinoRatioResult:
    value: float
    rating: PerformanceRating
    downside_deviation: float
    excess_return: float


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VWAPResult:
    value: float
    position: VWAPPosition
    deviation: float  # percent


@dataclass(frozen=True)
class VolumeROCResult:
    value: float  # percent
    signal: VolumeSignal
    activity: VolumeActivity


@dataclass(frozen=True)
class OBVResult:
    value: float  # cumulative on-balance volume
    trend: FlowTrend  # over the last 10 bars
    momentum: float  # percent change of the last bar


@dataclass(frozen=True)
class ADLineResult:
    value: float  # cumulative money flow volume
    trend: FlowTrend  # over the last 10 points
    momentum: float  # percent change of the last point


@dataclass(frozen=True)
class ChaikinMFResult:
    value: float  # -1 to 1
    signal: MoneyFlowSignal
    pressure: FlowTrend


@dataclass(frozen=True)
class MFIResult:
    value: float  # 0-100
    signal: OscillatorSignal
    money_flow_ratio: float

