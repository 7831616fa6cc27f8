"""Statistical formulas: dispersion, correlation, regression, z-score and noise.

Paired-series formulas use the first ``min(len(x), len(y))`` values of each
series. Zero-variance input gives 0 rather than NaN.
"""

import math
from collections.abc import Iterable, Sequence

from quantsignal.indicators.models import (
    CorrelationResult,
    CovarianceResult,
    IndicatorAgreement,
    LinearRegressionResult,
    NoiseLevel,
    NoiseScore,
    Relationship,
    StandardDeviationResult,
    StrengthLevel,
    TradeBias,
    ZScoreInterpretation,
    ZScoreResult,
)
from quantsignal.mathutils import (
    clamp,
    correlation,
    covariance,
    mean,
    round_half_up,
    round_score,
    safe_divide,
    standard_deviation,
    variance,
)


def calculate_standard_deviation(values: Sequence[float]) -> StandardDeviationResult:
    """Population and sample standard deviation, population variance and mean.

    With a single value the sample figure falls back to the population one.
    """
    population = standard_deviation(values)
    sample = standard_deviation(values, sample=True) if len(values) > 1 else population
    return StandardDeviationResult(
        population=round_half_up(population, 4),
        sample=round_half_up(sample, 4),
        variance=round_half_up(variance(values), 4),
        mean=round_half_up(mean(values), 4),
    )


def _paired(x: Sequence[float], y: Sequence[float]) -> tuple[Sequence[float], Sequence[float]]:
    n = min(len(x), len(y))
    return x[:n], y[:n]


def classify_correlation_strength(coefficient: float) -> StrengthLevel:
    r = abs(coefficient)
    if r > 0.9:
        return StrengthLevel.VERY_STRONG
    if r > 0.7:
        return StrengthLevel.STRONG
    if r > 0.5:
        return StrengthLevel.MODERATE
    if r > 0.3:
        return StrengthLevel.WEAK
    return StrengthLevel.VERY_WEAK


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> CorrelationResult:
    """Pearson correlation with strength (0.9/0.7/0.5/0.3) and direction (+/-0.1)."""
    x, y = _paired(x, y)
    r = correlation(x, y)

    if r > 0.1:
        direction = Relationship.POSITIVE
    elif r < -0.1:
        direction = Relationship.NEGATIVE
    else:
        direction = Relationship.NONE

    return CorrelationResult(
        coefficient=round_half_up(r, 4),
        strength=classify_correlation_strength(r),
        direction=direction,
        r_squared=round_half_up(r * r, 4),
    )


def calculate_covariance(x: Sequence[float], y: Sequence[float]) -> CovarianceResult:
    """Population covariance, classified at +/-0.01, plus the normalized value."""
    x, y = _paired(x, y)
    value = covariance(x, y)

    if value > 0.01:
        relationship = Relationship.POSITIVE
    elif value < -0.01:
        relationship = Relationship.NEGATIVE
    else:
        relationship = Relationship.NONE

    return CovarianceResult(
        value=round_half_up(value, 4),
        relationship=relationship,
        normalized=round_half_up(correlation(x, y), 4),
    )


def calculate_linear_regression(
    x: Sequence[float], y: Sequence[float]
) -> LinearRegressionResult:
    """Ordinary least squares fit of ``y`` on ``x``.

    Args:
        x: Independent values.
        y: Dependent values.

    Returns:
        LinearRegressionResult with slope, intercept, r-squared and the
        signed correlation ``sqrt(|r^2|) * sign(slope)``, all rounded to four
        places. ``predict`` evaluates the unrounded fit. Constant ``x`` gives
        a flat line through the mean of ``y``.
    """
    x, y = _paired(x, y)
    mean_x = mean(x)
    mean_y = mean(y)

    numerator = math.fsum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y))
    denominator = math.fsum((xi - mean_x) ** 2 for xi in x)
    ss_total = math.fsum((yi - mean_y) ** 2 for yi in y)

    slope = safe_divide(numerator, denominator)
    intercept = mean_y - slope * mean_x

    ss_residual = math.fsum((yi - (slope * xi + intercept)) ** 2 for xi, yi in zip(x, y))
    r_squared = 1 - ss_residual / ss_total if ss_total != 0 else 0.0
    r = math.sqrt(abs(r_squared)) * (1 if slope >= 0 else -1)

    return LinearRegressionResult(
        slope=round_half_up(slope, 4),
        intercept=round_half_up(intercept, 4),
        r_squared=round_half_up(r_squared, 4),
        correlation=round_half_up(r, 4),
        exact_slope=slope,
        exact_intercept=intercept,
    )


def calculate_z_score(value: float, dataset: Sequence[float]) -> ZScoreResult:
    """Standard score of ``value`` against ``dataset`` (population std).

    Interpretation: |z| > 3 VERY_UNUSUAL, |z| > 2 UNUSUAL, else NORMAL.
    The percentile approximation is ``50 + 50 * tanh(z / 2)``.
    """
    z = safe_divide(value - mean(dataset), standard_deviation(dataset))

    if abs(z) > 3:
        interpretation = ZScoreInterpretation.VERY_UNUSUAL
    elif abs(z) > 2:
        interpretation = ZScoreInterpretation.UNUSUAL
    else:
        interpretation = ZScoreInterpretation.NORMAL

    return ZScoreResult(
        value=round_half_up(z, 4),
        interpretation=interpretation,
        percentile=round_half_up(50 + 50 * math.tanh(z / 2), 2),
    )


def classify_noise(value: float) -> NoiseLevel:
    if value < 30:
        return NoiseLevel.LOW
    if value < 55:
        return NoiseLevel.MODERATE
    if value < 75:
        return NoiseLevel.HIGH
    return NoiseLevel.EXTREME


def calculate_noise_score(
    adx: float,
    normalized_atr: float,
    indicator_agreement: float | None = None,
) -> NoiseScore:
    """How untrustworthy the current signal is, 0-100.

    Components:
        ADX: a weak trend is noisy, ``clamp((35 - adx) * 2.85, 0, 100)``.
        ATR: ideal between 1% and 4% of price; very quiet markets score 40,
            above 4% noise rises 20 per point, above 6% it is
            ``min(100, 40 + (atr - 6) * 10)``.
        Agreement: ``max(0, (0.6 - agreement) * 166)``.

    Args:
        adx: ADX value, 0-100.
        normalized_atr: ATR as a percent of price.
        indicator_agreement: Share (0-1) of indicators on the dominant side,
            or None when unknown. Unknown agreement reweights ADX/ATR to
            0.55/0.45; known agreement uses 0.4/0.3/0.3.

    Returns:
        NoiseScore bucketed LOW (<30), MODERATE (<55), HIGH (<75), EXTREME.
    """
    adx_noise = clamp((35 - adx) * 2.85, 0, 100)

    if normalized_atr < 1:
        atr_noise = 40.0
    elif normalized_atr > 6:
        atr_noise = min(100, 40 + (normalized_atr - 6) * 10)
    elif normalized_atr > 4:
        atr_noise = (normalized_atr - 4) * 20
    else:
        atr_noise = 0.0

    if indicator_agreement is None:
        agreement_noise = 35.0
        weights = (0.55, 0.45, 0.0)
    else:
        agreement_noise = max(0.0, (0.6 - indicator_agreement) * 166)
        weights = (0.4, 0.3, 0.3)

    raw = adx_noise * weights[0] + atr_noise * weights[1] + agreement_noise * weights[2]
    value = int(clamp(round_score(raw), 0, 100))

    return NoiseScore(value=value, level=classify_noise(value))


def calculate_indicator_agreement(
    votes: Iterable[tuple[TradeBias, float]],
) -> IndicatorAgreement:
    """Share of total vote weight held by the dominant side.

    Args:
        votes: (bias, weight) pairs, one per indicator. NEUTRAL votes add to
            the total but to neither side.

    Returns:
        IndicatorAgreement with agreement in [0, 1] and the dominant side
        (NEUTRAL on a tie or with no votes).
    """
    buy = sell = total = 0.0
    for bias, weight in votes:
        total += weight
        if bias is TradeBias.BUY:
            buy += weight
        elif bias is TradeBias.SELL:
            sell += weight

    if buy > sell:
        direction = TradeBias.BUY
    elif sell > buy:
        direction = TradeBias.SELL
    else:
        direction = TradeBias.NEUTRAL

    return IndicatorAgreement(
        agreement=round_half_up(safe_divide(max(buy, sell), total), 4),
        direction=direction,
    )
