"""Indicator library: pure, total technical and statistical formulas.

Formulas are grouped by category (trend, momentum, oscillators, volatility,
mean reversion, statistical, risk, volume). Each returns a fresh frozen result
record and falls back to a neutral value on short or degenerate input instead
of raising.
"""

from quantsignal.indicators.mean_reversion import (
    calculate_bollinger_width,
    calculate_distance_from_ma,
    calculate_keltner_width,
    calculate_mean_reversion_score,
    calculate_percent_b,
)
from quantsignal.indicators.momentum import (
    calculate_macd,
    calculate_macd_from_price,
    calculate_roc,
    calculate_rsi,
    calculate_rsi_series,
    calculate_stochastic,
    calculate_williams_r,
    detect_rsi_divergence,
    detect_series_divergence,
)
from quantsignal.indicators.moving_averages import (
    calculate_ema,
    calculate_ema_series,
    calculate_sma,
    calculate_sma_series,
)
from quantsignal.indicators.oscillators import (
    calculate_awesome_oscillator,
    calculate_cci,
    calculate_dpo,
    calculate_rvi,
    calculate_ultimate_oscillator,
)
from quantsignal.indicators.risk import (
    calculate_beta,
    calculate_calmar_ratio,
    calculate_cvar,
    calculate_maximum_drawdown,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_var,
)
from quantsignal.indicators.statistical import (
    calculate_correlation,
    calculate_covariance,
    calculate_indicator_agreement,
    calculate_linear_regression,
    calculate_noise_score,
    calculate_standard_deviation,
    calculate_z_score,
)
from quantsignal.indicators.trend import (
    calculate_adx,
    calculate_parabolic_sar,
    calculate_supertrend,
)
from quantsignal.indicators.volatility import (
    calculate_atr,
    calculate_bollinger_bands,
    calculate_bollinger_bands_series,
    calculate_donchian_channels,
    calculate_garman_klass_volatility,
    calculate_historical_volatility,
    calculate_keltner_channels,
    calculate_parkinson_volatility,
    calculate_true_range,
    detect_bollinger_squeeze,
)
from quantsignal.indicators.volume import (
    calculate_ad_line,
    calculate_chaikin_money_flow,
    calculate_mfi,
    calculate_obv,
    calculate_volume_roc,
    calculate_vwap,
)

__all__ = [
    "calculate_ad_line",
    "calculate_adx",
    "calculate_atr",
    "calculate_awesome_oscillator",
    "calculate_beta",
    "calculate_bollinger_bands",
    "calculate_bollinger_bands_series",
    "calculate_bollinger_width",
    "calculate_calmar_ratio",
    "calculate_cci",
    "calculate_chaikin_money_flow",
    "calculate_correlation",
    "calculate_covariance",
    "calculate_cvar",
    "calculate_distance_from_ma",
    "calculate_donchian_channels",
    "calculate_dpo",
    "calculate_ema",
    "calculate_ema_series",
    "calculate_garman_klass_volatility",
    "calculate_historical_volatility",
    "calculate_indicator_agreement",
    "calculate_keltner_channels",
    "calculate_keltner_width",
    "calculate_linear_regression",
    "calculate_macd",
    "calculate_macd_from_price",
    "calculate_maximum_drawdown",
    "calculate_mean_reversion_score",
    "calculate_mfi",
    "calculate_noise_score",
    "calculate_obv",
    "calculate_parabolic_sar",
    "calculate_parkinson_volatility",
    "calculate_percent_b",
    "calculate_roc",
    "calculate_rsi",
    "calculate_rsi_series",
    "calculate_rvi",
    "calculate_sharpe_ratio",
    "calculate_sma",
    "calculate_sma_series",
    "calculate_sortino_ratio",
    "calculate_standard_deviation",
    "calculate_stochastic",
    "calculate_supertrend",
    "calculate_true_range",
    "calculate_ultimate_oscillator",
    "calculate_var",
    "calculate_volume_roc",
    "calculate_vwap",
    "calculate_williams_r",
    "calculate_z_score",
    "detect_bollinger_squeeze",
    "detect_rsi_divergence",
    "detect_series_divergence",
]
