"""Tests for the statistical formulas.

Tests verify:
- standard deviation on known and constant data
- correlation/covariance buckets and zero-variance safety
- linear regression fit and predict
- z-score interpretation and percentile
- noise score components and indicator agreement
"""

import math

import pytest

from quantsignal.indicators.models import (
    NoiseLevel,
    Relationship,
    StrengthLevel,
    TradeBias,
    ZScoreInterpretation,
)
from quantsignal.indicators.statistical import (
    calculate_correlation,
    calculate_covariance,
    calculate_indicator_agreement,
    calculate_linear_regression,
    calculate_noise_score,
    calculate_standard_deviation,
    calculate_z_score,
    classify_noise,
)

_SAMPLE = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]


class TestStandardDeviation:
    """Tests for calculate_standard_deviation."""

    def test_known_values(self) -> None:
        result = calculate_standard_deviation(_SAMPLE)
        assert result.population == 2.0
        assert result.sample == pytest.approx(math.sqrt(32 / 7), abs=1e-4)
        assert result.variance == 4.0
        assert result.mean == 5.0

    def test_constant_series_is_exactly_zero(self) -> None:
        result = calculate_standard_deviation([3.3] * 12)
        assert result.population == 0.0
        assert result.sample == 0.0

    def test_single_value(self) -> None:
        result = calculate_standard_deviation([4.0])
        assert result.sample == result.population == 0.0


class TestCorrelation:
    """Tests for calculate_correlation and calculate_covariance."""

    def test_perfect_positive(self) -> None:
        result = calculate_correlation([1.0, 2.0, 3.0], [2.0, 4.0, 6.0])
        assert result.coefficient == 1.0
        assert result.r_squared == 1.0
        assert result.strength == StrengthLevel.VERY_STRONG
        assert result.direction == Relationship.POSITIVE

    def test_perfect_negative(self) -> None:
        result = calculate_correlation([1.0, 2.0, 3.0], [3.0, 2.0, 1.0])
        assert result.coefficient == -1.0
        assert result.direction == Relationship.NEGATIVE

    def test_zero_variance_is_zero(self) -> None:
        result = calculate_correlation([1.0, 2.0, 3.0], [4.0, 4.0, 4.0])
        assert result.coefficient == 0.0
        assert result.direction == Relationship.NONE
        assert result.strength == StrengthLevel.VERY_WEAK

    def test_unequal_lengths_use_common_prefix(self) -> None:
        result = calculate_correlation([1.0, 2.0, 3.0, 100.0], [2.0, 4.0, 6.0])
        assert result.coefficient == 1.0

    def test_covariance(self) -> None:
        result = calculate_covariance([1.0, 2.0, 3.0], [2.0, 4.0, 6.0])
        assert result.value == pytest.approx(1.3333)
        assert result.relationship == Relationship.POSITIVE
        assert result.normalized == 1.0

    def test_covariance_zero_variance(self) -> None:
        result = calculate_covariance([1.0, 2.0, 3.0], [5.0, 5.0, 5.0])
        assert result.value == 0.0
        assert result.relationship == Relationship.NONE

    def test_empty_input(self) -> None:
        assert calculate_correlation([], []).coefficient == 0.0
        assert calculate_covariance([], []).value == 0.0


class TestLinearRegression:
    """Tests for calculate_linear_regression."""

    def test_exact_line(self) -> None:
        result = calculate_linear_regression([0.0, 1.0, 2.0, 3.0], [1.0, 3.0, 5.0, 7.0])
        assert result.slope == 2.0
        assert result.intercept == 1.0
        assert result.r_squared == 1.0
        assert result.correlation == 1.0
        assert result.predict(10.0) == pytest.approx(21.0)

    def test_negative_slope_sign(self) -> None:
        result = calculate_linear_regression([0.0, 1.0, 2.0], [4.0, 2.0, 0.0])
        assert result.slope == -2.0
        assert result.correlation == -1.0

    def test_constant_x(self) -> None:
        result = calculate_linear_regression([1.0, 1.0, 1.0], [1.0, 2.0, 3.0])
        assert result.slope == 0.0
        assert result.intercept == 2.0


class TestZScore:
    """Tests for calculate_z_score."""

    def test_unusual(self) -> None:
        result = calculate_z_score(10.0, _SAMPLE)
        assert result.value == 2.5
        assert result.interpretation == ZScoreInterpretation.UNUSUAL
        assert result.percentile == pytest.approx(50 + 50 * math.tanh(1.25), abs=0.01)

    def test_very_unusual(self) -> None:
        assert calculate_z_score(13.0, _SAMPLE).interpretation == ZScoreInterpretation.VERY_UNUSUAL

    def test_at_mean(self) -> None:
        result = calculate_z_score(5.0, _SAMPLE)
        assert result.value == 0.0
        assert result.percentile == 50.0
        assert result.interpretation == ZScoreInterpretation.NORMAL

    def test_constant_dataset(self) -> None:
        assert calculate_z_score(9.0, [4.0, 4.0]).value == 0.0


class TestNoiseScore:
    """Tests for calculate_noise_score."""

    def test_clean_trend_is_low_noise(self) -> None:
        result = calculate_noise_score(adx=50, normalized_atr=2.0, indicator_agreement=1.0)
        assert result.value == 0
        assert result.level == NoiseLevel.LOW

    def test_unknown_agreement_reweights(self) -> None:
        """ADX noise 99.75 and ATR noise 40 at 0.55/0.45."""
        result = calculate_noise_score(adx=0, normalized_atr=0.5)
        assert result.value == 73
        assert result.level == NoiseLevel.HIGH

    def test_elevated_atr(self) -> None:
        result = calculate_noise_score(adx=35, normalized_atr=5.0, indicator_agreement=0.6)
        assert result.value == 6

    def test_extreme(self) -> None:
        result = calculate_noise_score(adx=0, normalized_atr=12.0, indicator_agreement=0.0)
        assert result.level == NoiseLevel.EXTREME
        assert 0 <= result.value <= 100

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (29, NoiseLevel.LOW),
            (30, NoiseLevel.MODERATE),
            (55, NoiseLevel.HIGH),
            (75, NoiseLevel.EXTREME),
        ],
    )
    def test_levels(self, value: int, expected: NoiseLevel) -> None:
        assert classify_noise(value) == expected


class TestIndicatorAgreement:
    """Tests for calculate_indicator_agreement."""

    def test_neutral_votes_dilute(self) -> None:
        result = calculate_indicator_agreement(
            [
                (TradeBias.BUY, 1.0),
                (TradeBias.BUY, 1.0),
                (TradeBias.SELL, 1.0),
                (TradeBias.NEUTRAL, 1.0),
            ]
        )
        assert result.agreement == 0.5
        assert result.direction == TradeBias.BUY

    def test_tie_is_neutral(self) -> None:
        result = calculate_indicator_agreement([(TradeBias.BUY, 2.0), (TradeBias.SELL, 2.0)])
        assert result.direction == TradeBias.NEUTRAL
        assert result.agreement == 0.5

    def test_no_votes(self) -> None:
        result = calculate_indicator_agreement([])
        assert result.agreement == 0.0
        assert result.direction == TradeBias.NEUTRAL
