"""Risk formulas: VaR, CVaR, Beta, drawdown and risk-adjusted return ratios.

``returns`` are simple per-period returns as fractions (0.01 = 1%). Results
reported in percent say so on their record.
"""

import math
from collections.abc import Sequence

from quantsignal.indicators.models import (
    BetaInterpretation,
    BetaResult,
    CalmarRatioResult,
    CVaRResult,
    DrawdownSeverity,
    MaxDrawdownResult,
    PerformanceRating,
    SharpeRatioResult,
    SortinoRatioResult,
    TailRisk,
    VaRResult,
    VaRRiskLevel,
)
from quantsignal.mathutils import (
    covariance,
    mean,
    quantile,
    round_half_up,
    safe_divide,
    standard_deviation,
    variance,
)

DEFAULT_RISK_FREE_RATE = 0.02


def _percent(value: float) -> float:
    """Fraction to percent, two decimals."""
    return round_half_up(value * 100, 2)


# ---------------------------------------------------------------------------
# Tail risk
# ---------------------------------------------------------------------------


def classify_var(var95: float) -> VaRRiskLevel:
    """Bucket |VaR95| (fraction) at 1%/2%/5%."""
    loss = abs(var95)
    if loss < 0.01:
        return VaRRiskLevel.LOW
    if loss < 0.02:
        return VaRRiskLevel.MODERATE
    if loss < 0.05:
        return VaRRiskLevel.HIGH
    return VaRRiskLevel.VERY_HIGH


def _var_thresholds(returns: Sequence[float]) -> tuple[float, float]:
    ordered = sorted(returns)
    return quantile(ordered, 0.05), quantile(ordered, 0.01)


def calculate_var(returns: Sequence[float]) -> VaRResult:
    """Historical Value at Risk at 95% and 99%.

    The 5th and 1st percentiles of ``returns`` are linearly interpolated and
    reported in percent. Empty input gives 0 (LOW).
    """
    var95, var99 = _var_thresholds(returns)
    return VaRResult(
        var95=_percent(var95),
        var99=_percent(var99),
        risk_level=classify_var(var95),
    )


def _tail_mean(ordered: Sequence[float], threshold: float) -> float:
    tail = [r for r in ordered if r <= threshold]
    return mean(tail) if tail else threshold


def calculate_cvar(returns: Sequence[float]) -> CVaRResult:
    """Conditional VaR: the mean of returns at or below each VaR threshold.

    Tail risk compares CVaR95 to VaR95: ratio < 1.2 LOW, < 1.5 MODERATE,
    < 2 HIGH, else EXTREME. A zero VaR95 compares against 1.
    """
    ordered = sorted(returns)
    var95, var99 = _var_thresholds(ordered)
    cvar95 = _tail_mean(ordered, var95)
    cvar99 = _tail_mean(ordered, var99)

    ratio = abs(cvar95 / (var95 or 1))
    if ratio < 1.2:
        tail_risk = TailRisk.LOW
    elif ratio < 1.5:
        tail_risk = TailRisk.MODERATE
    elif ratio < 2:
        tail_risk = TailRisk.HIGH
    else:
        tail_risk = TailRisk.EXTREME

    return CVaRResult(
        cvar95=_percent(cvar95),
        cvar99=_percent(cvar99),
        var95=_percent(var95),
        var99=_percent(var99),
        tail_risk=tail_risk,
    )


# ---------------------------------------------------------------------------
# Systematic risk
# ---------------------------------------------------------------------------


def classify_beta(beta: float) -> BetaInterpretation:
    if beta < 0:
        return BetaInterpretation.INVERSE
    if beta < 0.8:
        return BetaInterpretation.DEFENSIVE
    if beta < 1.2:
        return BetaInterpretation.NEUTRAL
    return BetaInterpretation.AGGRESSIVE


def calculate_beta(
    asset_returns: Sequence[float], market_returns: Sequence[float]
) -> BetaResult:
    """Beta = Cov(asset, market) / Var(market), population moments.

    Args:
        asset_returns: Per-period asset returns.
        market_returns: Benchmark returns over the same periods. Both series
            are cut to the shorter length.

    Returns:
        BetaResult with beta, its interpretation, the asset/market
        correlation and the volatility ratio. Zero market variance gives 0.
    """
    n = min(len(asset_returns), len(market_returns))
    asset = asset_returns[:n]
    market = market_returns[:n]

    cov = covariance(asset, market)
    market_var = variance(market)
    asset_std = math.sqrt(variance(asset))
    market_std = math.sqrt(market_var)

    beta = safe_divide(cov, market_var)
    return BetaResult(
        value=round_half_up(beta, 4),
        interpretation=classify_beta(beta),
        correlation=round_half_up(safe_divide(cov, asset_std * market_std), 4),
        volatility_ratio=round_half_up(safe_divide(asset_std, market_std), 4),
    )


# ---------------------------------------------------------------------------
# Drawdown and performance ratios
# ---------------------------------------------------------------------------


def classify_drawdown(drawdown: float) -> DrawdownSeverity:
    """Bucket |drawdown| (fraction) at 5%/10%/20%/50%."""
    depth = abs(drawdown)
    if depth < 0.05:
        return DrawdownSeverity.NONE
    if depth < 0.1:
        return DrawdownSeverity.MILD
    if depth < 0.2:
        return DrawdownSeverity.MODERATE
    if depth < 0.5:
        return DrawdownSeverity.SIGNIFICANT
    return DrawdownSeverity.SEVERE


def calculate_maximum_drawdown(values: Sequence[float]) -> MaxDrawdownResult:
    """Largest peak-to-trough decline of a value series (prices or equity).

    Returns:
        MaxDrawdownResult with the drawdown in percent (<= 0), the peak and
        trough indices, the bars between them and a severity bucket.
        Fewer than two values gives no drawdown.
    """
    max_drawdown = 0.0
    peak_index = trough_index = 0

    if values:
        peak = values[0]
        running_peak_index = 0
        for i in range(1, len(values)):
            if values[i] > peak:
                peak = values[i]
                running_peak_index = i
            drawdown = safe_divide(values[i] - peak, peak)
            if drawdown < max_drawdown:
                max_drawdown = drawdown
                peak_index = running_peak_index
                trough_index = i

    return MaxDrawdownResult(
        value=_percent(max_drawdown),
        peak_index=peak_index,
        trough_index=trough_index,
        duration=trough_index - peak_index,
        severity=classify_drawdown(max_drawdown),
    )


def _equity_curve(returns: Sequence[float]) -> list[float]:
    curve = [1.0]
    for r in returns:
        curve.append(curve[-1] * (1 + r))
    return curve


def calculate_calmar_ratio(
    returns: Sequence[float], annualization_factor: int = 252
) -> CalmarRatioResult:
    """Annualized return (percent) over the maximum drawdown of the equity curve.

    Rating: >3 EXCELLENT, >1 GOOD, >0.5 ACCEPTABLE, else POOR. No drawdown
    gives a ratio of 0.
    """
    annualized = mean(returns) * annualization_factor * 100
    depth = abs(calculate_maximum_drawdown(_equity_curve(returns)).value)

    calmar = safe_divide(annualized, depth)
    if calmar > 3:
        rating = PerformanceRating.EXCELLENT
    elif calmar > 1:
        rating = PerformanceRating.GOOD
    elif calmar > 0.5:
        rating = PerformanceRating.ACCEPTABLE
    else:
        rating = PerformanceRating.POOR

    return CalmarRatioResult(
        value=round_half_up(calmar, 4),
        rating=rating,
        annualized_return=round_half_up(annualized, 2),
        max_drawdown=round_half_up(depth, 2),
    )


def calculate_sharpe_ratio(
    returns: Sequence[float],
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    annualization_factor: int = 252,
) -> SharpeRatioResult:
    """Annualized excess return over annualized volatility.

    Rating: >3 EXCELLENT, >2 VERY_GOOD, >1 GOOD, >0 ACCEPTABLE, else POOR.
    Zero volatility gives a ratio of 0.
    """
    annualized_return = mean(returns) * annualization_factor
    volatility = standard_deviation(returns) * math.sqrt(annualization_factor)
    excess = annualized_return - risk_free_rate
    sharpe = safe_divide(excess, volatility)

    if sharpe > 3:
        rating = PerformanceRating.EXCELLENT
    elif sharpe > 2:
        rating = PerformanceRating.VERY_GOOD
    elif sharpe > 1:
        rating = PerformanceRating.GOOD
    elif sharpe > 0:
        rating = PerformanceRating.ACCEPTABLE
    else:
        rating = PerformanceRating.POOR

    return SharpeRatioResult(
        value=round_half_up(sharpe, 4),
        rating=rating,
        excess_return=round_half_up(excess, 4),
        volatility=round_half_up(volatility, 4),
    )


def calculate_sortino_ratio(
    returns: Sequence[float],
    target_return: float = 0.0,
    annualization_factor: int = 252,
) -> SortinoRatioResult:
    """Annualized excess return over annualized downside deviation.

    Only returns below ``target_return`` count toward the deviation.
    Rating: >2 EXCELLENT, >1 GOOD, >0 ACCEPTABLE, else POOR.
    """
    downside = mean([min(0.0, r - target_return) ** 2 for r in returns])
    downside_deviation = math.sqrt(downside) * math.sqrt(annualization_factor)
    excess = (mean(returns) - target_return) * annualization_factor
    sortino = safe_divide(excess, downside_deviation)

    if sortino > 2:
        rating = PerformanceRating.EXCELLENT
    elif sortino > 1:
        rating = PerformanceRating.GOOD
    elif sortino > 0:
        rating = PerformanceRating.ACCEPTABLE
    else:
        rating = PerformanceRating.POOR

    return SortinoRatioResult(
        value=round_half_up(sortino, 4),
        rating=rating,
        downside_deviation=round_half_up(downside_deviation, 4),
        excess_return=round_half_up(excess, 4),
    )
