"""Configuration system using pydantic-settings with environment variable loading.

Every weight and threshold of the composite scorer, the signal classifier and
the risk contextualizer lives here so the composition rules can be audited
and overridden without touching formula code.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class IndicatorSettings(BaseSettings):
    """Window lengths and constants for the indicator library."""

    model_config = SettingsConfigDict(env_prefix="INDICATOR_")

    rsi_period: int = 14
    divergence_lookback: int = 14
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    adx_period: int = 14
    atr_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    supertrend_period: int = 10
    supertrend_multiplier: float = 3.0
    keltner_period: int = 20
    keltner_multiplier: float = 2.0
    garman_klass_period: int = 30
    volume_roc_period: int = 14
    annualization_factor: int = 252  # trading days
    sar_af_start: float = 0.02
    sar_af_increment: float = 0.02
    sar_af_max: float = 0.2
    stochastic_k_period: int = 14
    stochastic_d_period: int = 3
    williams_period: int = 14
    roc_period: int = 12
    cci_period: int = 20
    awesome_fast: int = 5
    awesome_slow: int = 34
    dpo_period: int = 20
    rvi_period: int = 10
    ultimate_short: int = 7
    ultimate_medium: int = 14
    ultimate_long: int = 28
    donchian_period: int = 20
    range_volatility_period: int = 30  # Parkinson and close-to-close
    chaikin_period: int = 21
    mfi_period: int = 14


class ScoringSettings(BaseSettings):
    """Composite scorer weights. Each blend's weights sum to 1.0."""

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    # Momentum composite (-100..100)
    momentum_rsi: float = 0.40
    momentum_divergence: float = 0.20
    momentum_macd: float = 0.25
    momentum_adx: float = 0.15

    # Mean-reversion direction score (-100..100)
    reversion_percent_b: float = 0.60
    reversion_distance: float = 0.40

    # Mean-reversion strength score (0..100)
    strength_percent_b: float = 0.30
    strength_bollinger_width: float = 0.25
    strength_distance: float = 0.25
    strength_keltner_width: float = 0.20

    # Volatility/risk composite (0..100), base risk for the contextualizer
    risk_bollinger: float = 0.30
    risk_rsi: float = 0.40
    risk_volatility: float = 0.30

    # Volatility regime score (0..100)
    regime_bollinger_width: float = 0.40
    regime_daily_range: float = 0.40
    regime_ath_distance: float = 0.20

    # Overall quality (0..100)
    quality_momentum: float = 0.40
    quality_volatility: float = 0.30
    quality_mean_reversion: float = 0.30


class SignalSettings(BaseSettings):
    """Signal classifier blend, confirmation boosts and thresholds."""

    model_config = SettingsConfigDict(env_prefix="SIGNAL_")

    momentum_weight: float = 0.70
    mean_reversion_weight: float = 0.30
    squeeze_boost: float = 20.0
    divergence_boost: float = 15.0
    strong_threshold: float = 60.0  # strict > for STRONG_BUY, < -x for STRONG_SELL
    threshold: float = 20.0  # strict > for BUY, < -x for SELL
    confidence_strength_weight: float = 0.6
    confidence_quality_weight: float = 0.4


class RiskContextSettings(BaseSettings):
    """External-factor multipliers and floors for the risk contextualizer."""

    model_config = SettingsConfigDict(env_prefix="RISK_")

    accumulation_multiplier: float = 0.85
    distribution_multiplier: float = 1.1
    distribution_floor: float = 45.0
    liquidation_high_multiplier: float = 1.3
    liquidation_high_floor: float = 60.0
    liquidation_medium_multiplier: float = 1.15

    # Level boundaries: < low LOW, < medium MEDIUM, < high HIGH, else EXTREME
    level_low: float = 30.0
    level_medium: float = 50.0
    level_high: float = 75.0


class AnalysisSettings(BaseSettings):
    """Batch orchestration and post-processing defaults."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    batch_concurrency: int = 0  # 0 = unbounded
    isolate_failures: bool = False  # False = fail-fast batch
    min_confidence: int = 70


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"
    indicators: IndicatorSettings = IndicatorSettings()
    scoring: ScoringSettings = ScoringSettings()
    signal: SignalSettings = SignalSettings()
    risk: RiskContextSettings = RiskContextSettings()
    analysis: AnalysisSettings = AnalysisSettings()
