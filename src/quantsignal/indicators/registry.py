"""Formula metadata registry for discovery and lookup.

Each entry describes one formula of the indicator library: its category,
what it computes, the inputs it needs, and the smallest input that yields a
non-neutral result.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from quantsignal.indicators import (
    mean_reversion,
    momentum,
    moving_averages,
    oscillators,
    risk,
    statistical,
    trend,
    volatility,
    volume,
)


class FormulaCategory(str, Enum):
    TREND = "trend"
    MOMENTUM = "momentum"
    OSCILLATORS = "oscillators"
    VOLATILITY = "volatility"
    MEAN_REVERSION = "mean-reversion"
    STATISTICAL = "statistical"
    RISK = "risk"
    VOLUME = "volume"


@dataclass(frozen=True)
class FormulaMetadata:
    name: str
    category: FormulaCategory
    description: str
    required_inputs: tuple[str, ...]
    minimum_data_points: int
    function: Callable[..., object]


_FORMULAS: tuple[FormulaMetadata, ...] = (
    # Trend
    FormulaMetadata(
        name="SMA",
        category=FormulaCategory.TREND,
        description="Simple Moving Average",
        required_inputs=("prices",),
        minimum_data_points=1,
        function=moving_averages.calculate_sma,
    ),
    FormulaMetadata(
        name="EMA",
        category=FormulaCategory.TREND,
        description="Exponential Moving Average, SMA-seeded",
        required_inputs=("prices",),
        minimum_data_points=1,
        function=moving_averages.calculate_ema,
    ),
    FormulaMetadata(
        name="ADX",
        category=FormulaCategory.TREND,
        description="Average Directional Index - trend strength and direction",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=15,
        function=trend.calculate_adx,
    ),
    FormulaMetadata(
        name="ParabolicSAR",
        category=FormulaCategory.TREND,
        description="Parabolic Stop-and-Reverse trailing stop",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=3,
        function=trend.calculate_parabolic_sar,
    ),
    FormulaMetadata(
        name="Supertrend",
        category=FormulaCategory.TREND,
        description="ATR-band trend follower",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=11,
        function=trend.calculate_supertrend,
    ),
    # Momentum
    FormulaMetadata(
        name="RSI",
        category=FormulaCategory.MOMENTUM,
        description="Relative Strength Index approximated from a snapshot",
        required_inputs=("price", "change_24h"),
        minimum_data_points=1,
        function=momentum.calculate_rsi,
    ),
    FormulaMetadata(
        name="RSISeries",
        category=FormulaCategory.MOMENTUM,
        description="Wilder Relative Strength Index",
        required_inputs=("closes",),
        minimum_data_points=15,
        function=momentum.calculate_rsi_series,
    ),
    FormulaMetadata(
        name="RSIDivergence",
        category=FormulaCategory.MOMENTUM,
        description="Price extreme vs RSI divergence, snapshot",
        required_inputs=("price", "rsi", "ath", "atl"),
        minimum_data_points=1,
        function=momentum.detect_rsi_divergence,
    ),
    FormulaMetadata(
        name="SeriesDivergence",
        category=FormulaCategory.MOMENTUM,
        description="Price vs RSI direction over a lookback",
        required_inputs=("closes",),
        minimum_data_points=29,
        function=momentum.detect_series_divergence,
    ),
    FormulaMetadata(
        name="MACD",
        category=FormulaCategory.MOMENTUM,
        description="Moving Average Convergence Divergence",
        required_inputs=("prices",),
        minimum_data_points=26,
        function=momentum.calculate_macd,
    ),
    FormulaMetadata(
        name="Stochastic",
        category=FormulaCategory.MOMENTUM,
        description="Stochastic oscillator - close within the high-low range",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=17,
        function=momentum.calculate_stochastic,
    ),
    FormulaMetadata(
        name="WilliamsR",
        category=FormulaCategory.MOMENTUM,
        description="Williams %R - inverted position within the high-low range",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=14,
        function=momentum.calculate_williams_r,
    ),
    FormulaMetadata(
        name="ROC",
        category=FormulaCategory.MOMENTUM,
        description="Rate of Change - percent price change over a period",
        required_inputs=("prices",),
        minimum_data_points=13,
        function=momentum.calculate_roc,
    ),
    # Oscillators
    FormulaMetadata(
        name="CCI",
        category=FormulaCategory.OSCILLATORS,
        description="Commodity Channel Index - deviation from the typical-price mean",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=20,
        function=oscillators.calculate_cci,
    ),
    FormulaMetadata(
        name="AwesomeOscillator",
        category=FormulaCategory.OSCILLATORS,
        description="Awesome Oscillator - fast minus slow SMA of bar midpoints",
        required_inputs=("highs", "lows"),
        minimum_data_points=34,
        function=oscillators.calculate_awesome_oscillator,
    ),
    FormulaMetadata(
        name="DPO",
        category=FormulaCategory.OSCILLATORS,
        description="Detrended Price Oscillator - removes trend to expose cycles",
        required_inputs=("closes",),
        minimum_data_points=31,
        function=oscillators.calculate_dpo,
    ),
    FormulaMetadata(
        name="RVI",
        category=FormulaCategory.OSCILLATORS,
        description="Relative Vigor Index - close-open vigor against the bar range",
        required_inputs=("opens", "highs", "lows", "closes"),
        minimum_data_points=13,
        function=oscillators.calculate_rvi,
    ),
    FormulaMetadata(
        name="UltimateOscillator",
        category=FormulaCategory.OSCILLATORS,
        description="Ultimate Oscillator - buying pressure over three windows",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=29,
        function=oscillators.calculate_ultimate_oscillator,
    ),
    # Volatility
    FormulaMetadata(
        name="BollingerBands",
        category=FormulaCategory.VOLATILITY,
        description="Bollinger Bands from the 24h range",
        required_inputs=("price", "high_24h", "low_24h"),
        minimum_data_points=1,
        function=volatility.calculate_bollinger_bands,
    ),
    FormulaMetadata(
        name="BollingerBandsSeries",
        category=FormulaCategory.VOLATILITY,
        description="Rolling Bollinger Bands",
        required_inputs=("closes",),
        minimum_data_points=20,
        function=volatility.calculate_bollinger_bands_series,
    ),
    FormulaMetadata(
        name="BollingerSqueeze",
        category=FormulaCategory.VOLATILITY,
        description="Band squeeze and breakout direction",
        required_inputs=("bands",),
        minimum_data_points=1,
        function=volatility.detect_bollinger_squeeze,
    ),
    FormulaMetadata(
        name="ATR",
        category=FormulaCategory.VOLATILITY,
        description="Average True Range",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=15,
        function=volatility.calculate_atr,
    ),
    FormulaMetadata(
        name="KeltnerChannels",
        category=FormulaCategory.VOLATILITY,
        description="EMA channels sized by ATR",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=21,
        function=volatility.calculate_keltner_channels,
    ),
    FormulaMetadata(
        name="GarmanKlassVolatility",
        category=FormulaCategory.VOLATILITY,
        description="OHLC-based volatility estimator",
        required_inputs=("opens", "highs", "lows", "closes"),
        minimum_data_points=30,
        function=volatility.calculate_garman_klass_volatility,
    ),
    FormulaMetadata(
        name="DonchianChannels",
        category=FormulaCategory.VOLATILITY,
        description="Donchian Channels - highest high and lowest low",
        required_inputs=("highs", "lows", "closes"),
        minimum_data_points=20,
        function=volatility.calculate_donchian_channels,
    ),
    FormulaMetadata(
        name="ParkinsonVolatility",
        category=FormulaCategory.VOLATILITY,
        description="Parkinson volatility - high-low range estimator",
        required_inputs=("highs", "lows"),
        minimum_data_points=30,
        function=volatility.calculate_parkinson_volatility,
    ),
    FormulaMetadata(
        name="HistoricalVolatility",
        category=FormulaCategory.VOLATILITY,
        description="Historical volatility - annualized std of log returns",
        required_inputs=("closes",),
        minimum_data_points=31,
        function=volatility.calculate_historical_volatility,
    ),
    # Mean reversion
    FormulaMetadata(
        name="PercentB",
        category=FormulaCategory.MEAN_REVERSION,
        description="Position within Bollinger Bands",
        required_inputs=("price", "bands"),
        minimum_data_points=1,
        function=mean_reversion.calculate_percent_b,
    ),
    FormulaMetadata(
        name="BollingerWidth",
        category=FormulaCategory.MEAN_REVERSION,
        description="Band width and squeeze level",
        required_inputs=("bands",),
        minimum_data_points=1,
        function=mean_reversion.calculate_bollinger_width,
    ),
    FormulaMetadata(
        name="DistanceFromMA",
        category=FormulaCategory.MEAN_REVERSION,
        description="Percent distance from a moving average",
        required_inputs=("price", "moving_average"),
        minimum_data_points=1,
        function=mean_reversion.calculate_distance_from_ma,
    ),
    FormulaMetadata(
        name="KeltnerWidth",
        category=FormulaCategory.MEAN_REVERSION,
        description="Keltner channel width classification",
        required_inputs=("width",),
        minimum_data_points=1,
        function=mean_reversion.calculate_keltner_width,
    ),
    FormulaMetadata(
        name="MeanReversionScore",
        category=FormulaCategory.MEAN_REVERSION,
        description="Blended mean-reversion strength",
        required_inputs=("percent_b", "bollinger_width", "distance", "keltner_width"),
        minimum_data_points=1,
        function=mean_reversion.calculate_mean_reversion_score,
    ),
    # Statistical
    FormulaMetadata(
        name="StandardDeviation",
        category=FormulaCategory.STATISTICAL,
        description="Population and sample dispersion",
        required_inputs=("values",),
        minimum_data_points=2,
        function=statistical.calculate_standard_deviation,
    ),
    FormulaMetadata(
        name="Correlation",
        category=FormulaCategory.STATISTICAL,
        description="Pearson correlation of two series",
        required_inputs=("x", "y"),
        minimum_data_points=2,
        function=statistical.calculate_correlation,
    ),
    FormulaMetadata(
        name="Covariance",
        category=FormulaCategory.STATISTICAL,
        description="Joint variability of two series",
        required_inputs=("x", "y"),
        minimum_data_points=2,
        function=statistical.calculate_covariance,
    ),
    FormulaMetadata(
        name="LinearRegression",
        category=FormulaCategory.STATISTICAL,
        description="Least squares line fit",
        required_inputs=("x", "y"),
        minimum_data_points=2,
        function=statistical.calculate_linear_regression,
    ),
    FormulaMetadata(
        name="ZScore",
        category=FormulaCategory.STATISTICAL,
        description="Standard score against a dataset",
        required_inputs=("value", "dataset"),
        minimum_data_points=2,
        function=statistical.calculate_z_score,
    ),
    FormulaMetadata(
        name="NoiseScore",
        category=FormulaCategory.STATISTICAL,
        description="Signal clarity vs market randomness",
        required_inputs=("adx", "normalized_atr"),
        minimum_data_points=1,
        function=statistical.calculate_noise_score,
    ),
    FormulaMetadata(
        name="IndicatorAgreement",
        category=FormulaCategory.STATISTICAL,
        description="Share of weight on the dominant side",
        required_inputs=("votes",),
        minimum_data_points=1,
        function=statistical.calculate_indicator_agreement,
    ),
    # Risk
    FormulaMetadata(
        name="VaR",
        category=FormulaCategory.RISK,
        description="Historical Value at Risk at 95% and 99%",
        required_inputs=("returns",),
        minimum_data_points=20,
        function=risk.calculate_var,
    ),
    FormulaMetadata(
        name="CVaR",
        category=FormulaCategory.RISK,
        description="Expected loss beyond the VaR threshold",
        required_inputs=("returns",),
        minimum_data_points=20,
        function=risk.calculate_cvar,
    ),
    FormulaMetadata(
        name="Beta",
        category=FormulaCategory.RISK,
        description="Systematic risk relative to a benchmark",
        required_inputs=("asset_returns", "market_returns"),
        minimum_data_points=2,
        function=risk.calculate_beta,
    ),
    FormulaMetadata(
        name="MaximumDrawdown",
        category=FormulaCategory.RISK,
        description="Largest peak-to-trough decline",
        required_inputs=("values",),
        minimum_data_points=2,
        function=risk.calculate_maximum_drawdown,
    ),
    FormulaMetadata(
        name="CalmarRatio",
        category=FormulaCategory.RISK,
        description="Annualized return over maximum drawdown",
        required_inputs=("returns",),
        minimum_data_points=2,
        function=risk.calculate_calmar_ratio,
    ),
    FormulaMetadata(
        name="SharpeRatio",
        category=FormulaCategory.RISK,
        description="Risk-adjusted return",
        required_inputs=("returns",),
        minimum_data_points=2,
        function=risk.calculate_sharpe_ratio,
    ),
    FormulaMetadata(
        name="SortinoRatio",
        category=FormulaCategory.RISK,
        description="Downside risk-adjusted return",
        required_inputs=("returns",),
        minimum_data_points=2,
        function=risk.calculate_sortino_ratio,
    ),
    # Volume
    FormulaMetadata(
        name="VWAP",
        category=FormulaCategory.VOLUME,
        description="Volume Weighted Average Price",
        required_inputs=("highs", "lows", "closes", "volumes"),
        minimum_data_points=1,
        function=volume.calculate_vwap,
    ),
    FormulaMetadata(
        name="VolumeROC",
        category=FormulaCategory.VOLUME,
        description="Volume rate of change",
        required_inputs=("volumes",),
        minimum_data_points=15,
        function=volume.calculate_volume_roc,
    ),
    FormulaMetadata(
        name="OBV",
        category=FormulaCategory.VOLUME,
        description="On-Balance Volume",
        required_inputs=("closes", "volumes"),
        minimum_data_points=2,
        function=volume.calculate_obv,
    ),
    FormulaMetadata(
        name="ADLine",
        category=FormulaCategory.VOLUME,
        description="Accumulation/Distribution line - cumulative money flow volume",
        required_inputs=("highs", "lows", "closes", "volumes"),
        minimum_data_points=1,
        function=volume.calculate_ad_line,
    ),
    FormulaMetadata(
        name="ChaikinMF",
        category=FormulaCategory.VOLUME,
        description="Chaikin Money Flow - money flow volume over total volume",
        required_inputs=("highs", "lows", "closes", "volumes"),
        minimum_data_points=21,
        function=volume.calculate_chaikin_money_flow,
    ),
    FormulaMetadata(
        name="MFI",
        category=FormulaCategory.VOLUME,
        description="Money Flow Index - volume-weighted RSI",
        required_inputs=("highs", "lows", "closes", "volumes"),
        minimum_data_points=15,
        function=volume.calculate_mfi,
    ),
)

FORMULA_REGISTRY: dict[str, FormulaMetadata] = {f.name: f for f in _FORMULAS}


def get_formula(name: str) -> FormulaMetadata | None:
    """Look up a formula by exact name, or None if unknown."""
    return FORMULA_REGISTRY.get(name)


def all_formulas() -> list[FormulaMetadata]:
    return list(_FORMULAS)


def formulas_by_category(category: FormulaCategory | str) -> list[FormulaMetadata]:
    """All formulas in ``category``, in registration order."""
    category = FormulaCategory(category)
    return [f for f in _FORMULAS if f.category is category]


def search_formulas(query: str) -> list[FormulaMetadata]:
    """Case-insensitive substring search over names and descriptions."""
    needle = query.lower()
    return [
        f for f in _FORMULAS if needle in f.name.lower() or needle in f.description.lower()
    ]
