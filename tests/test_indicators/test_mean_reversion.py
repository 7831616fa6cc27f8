"""Tests for the mean-reversion formulas and their 0-100 blend.

Tests verify:
- %B signal, position buckets and breach flag
- Bollinger width squeeze and trend buckets
- distance from MA signal and strength
- Keltner width buckets and the snapshot approximation
- mean-reversion score components, weights and direction
"""

import pytest

from quantsignal.indicators.mean_reversion import (
    calculate_bollinger_width,
    calculate_distance_from_ma,
    calculate_keltner_width,
    calculate_mean_reversion_score,
    calculate_percent_b,
    snapshot_keltner_width,
    typical_price,
)
from quantsignal.indicators.models import (
    BandPosition,
    BollingerBands,
    DistanceSignal,
    PercentBSignal,
    SqueezeLevel,
    StrengthLevel,
    TradeBias,
    VolatilityLevel,
    WidthTrend,
)
from quantsignal.mathutils import safe_divide


def _bands(upper: float = 110.0, middle: float = 100.0, lower: float = 90.0) -> BollingerBands:
    return BollingerBands(
        upper_band=upper,
        middle_band=middle,
        lower_band=lower,
        bandwidth=safe_divide(upper - lower, middle),
        percent_b=0.5,
    )


class TestPercentB:
    """Tests for calculate_percent_b."""

    @pytest.mark.parametrize(
        ("price", "signal", "position"),
        [
            (115.0, PercentBSignal.EXTREME_OVERBOUGHT, BandPosition.ABOVE_BANDS),
            (108.0, PercentBSignal.OVERBOUGHT, BandPosition.UPPER_HALF),
            (100.0, PercentBSignal.NEUTRAL, BandPosition.MIDDLE),
            (92.0, PercentBSignal.OVERSOLD, BandPosition.LOWER_HALF),
            (85.0, PercentBSignal.EXTREME_OVERSOLD, BandPosition.BELOW_BANDS),
        ],
    )
    def test_buckets(self, price: float, signal: PercentBSignal, position: BandPosition) -> None:
        result = calculate_percent_b(price, _bands())
        assert result.signal == signal
        assert result.position == position

    def test_breach_outside_bands(self) -> None:
        above = calculate_percent_b(115.0, _bands())
        assert above.value == pytest.approx(1.25)
        assert above.is_breach
        assert above.mean_reversion_setup
        assert not calculate_percent_b(100.0, _bands()).is_breach

    def test_zero_width_bands(self) -> None:
        result = calculate_percent_b(100.0, _bands(100.0, 100.0, 100.0))
        assert result.value == 0.5


class TestBollingerWidth:
    """Tests for calculate_bollinger_width."""

    @pytest.mark.parametrize(
        ("upper", "lower", "squeeze", "trend"),
        [
            (102.0, 98.0, SqueezeLevel.TIGHT, WidthTrend.NARROWING),
            (104.5, 95.5, SqueezeLevel.MODERATE, WidthTrend.STABLE),
            (109.5, 90.5, SqueezeLevel.NORMAL, WidthTrend.WIDENING),
        ],
    )
    def test_buckets(
        self, upper: float, lower: float, squeeze: SqueezeLevel, trend: WidthTrend
    ) -> None:
        result = calculate_bollinger_width(_bands(upper, 100.0, lower))
        assert result.squeeze == squeeze
        assert result.trend == trend

    def test_normal_width(self) -> None:
        result = calculate_bollinger_width(_bands(107.5, 100.0, 92.5))
        assert result.width == pytest.approx(0.15)
        assert result.width_percent == pytest.approx(15.0)
        assert result.squeeze == SqueezeLevel.NORMAL
        assert result.trend == WidthTrend.STABLE

    def test_tight_width(self) -> None:
        result = calculate_bollinger_width(_bands(102.0, 100.0, 98.0))
        assert result.squeeze == SqueezeLevel.TIGHT
        assert result.trend == WidthTrend.NARROWING

    def test_wide_width(self) -> None:
        result = calculate_bollinger_width(_bands())
        assert result.squeeze == SqueezeLevel.WIDE
        assert result.trend == WidthTrend.WIDENING

    def test_zero_middle(self) -> None:
        assert calculate_bollinger_width(_bands(1.0, 0.0, -1.0)).width == 0.0


class TestDistanceFromMA:
    """Tests for calculate_distance_from_ma."""

    @pytest.mark.parametrize(
        ("price", "signal"),
        [
            (111.0, DistanceSignal.EXTREME_ABOVE),
            (106.0, DistanceSignal.ABOVE),
            (100.0, DistanceSignal.NEUTRAL),
            (94.0, DistanceSignal.BELOW),
            (89.0, DistanceSignal.EXTREME_BELOW),
        ],
    )
    def test_signal(self, price: float, signal: DistanceSignal) -> None:
        assert calculate_distance_from_ma(price, 100.0).signal == signal

    def test_strength_capped(self) -> None:
        assert calculate_distance_from_ma(106.0, 100.0).strength == 30
        assert calculate_distance_from_ma(150.0, 100.0).strength == 100

    def test_zero_average(self) -> None:
        result = calculate_distance_from_ma(10.0, 0.0)
        assert result.distance == 0.0
        assert result.signal == DistanceSignal.NEUTRAL

    def test_typical_price(self) -> None:
        assert typical_price(100.0, 104.0, 96.0) == pytest.approx(100.0)
        assert typical_price(100.0, None, 96.0) == 100.0


class TestKeltnerWidth:
    """Tests for calculate_keltner_width and its snapshot approximation."""

    @pytest.mark.parametrize(
        ("width", "expected"),
        [
            (0.03, VolatilityLevel.VERY_LOW),
            (0.05, VolatilityLevel.LOW),
            (0.10, VolatilityLevel.NORMAL),
            (0.20, VolatilityLevel.HIGH),
            (0.30, VolatilityLevel.VERY_HIGH),
        ],
    )
    def test_buckets(self, width: float, expected: VolatilityLevel) -> None:
        assert calculate_keltner_width(width).volatility == expected

    def test_snapshot_uses_half_range_as_atr(self) -> None:
        """ATR = (104 - 97) / 2 = 3.5, width = 2 * 2 * 3.5 / 100."""
        assert snapshot_keltner_width(100.0, 104.0, 97.0) == pytest.approx(0.14)

    def test_snapshot_without_range(self) -> None:
        assert snapshot_keltner_width(100.0, None, None) == pytest.approx(0.08)


class TestMeanReversionScore:
    """Tests for calculate_mean_reversion_score."""

    def test_oversold_breach(self) -> None:
        """Components 100/40/75/100 at 30/25/25/20 give 78.75."""
        result = calculate_mean_reversion_score(
            calculate_percent_b(85.0, _bands()),
            calculate_bollinger_width(_bands()),
            calculate_distance_from_ma(85.0, 100.0),
            calculate_keltner_width(0.03),
        )
        assert result.score == 79
        assert result.direction == TradeBias.BUY
        assert result.strength == StrengthLevel.STRONG
        assert result.components.percent_b == 100
        assert result.components.bollinger_width == 40
        assert result.components.distance_from_ma == 75
        assert result.components.keltner_width == 100

    def test_overbought_direction(self) -> None:
        result = calculate_mean_reversion_score(
            calculate_percent_b(109.0, _bands()),
            calculate_bollinger_width(_bands()),
            calculate_distance_from_ma(101.0, 100.0),
            calculate_keltner_width(0.10),
        )
        assert result.direction == TradeBias.SELL

    def test_centered_is_neutral_and_weak(self) -> None:
        result = calculate_mean_reversion_score(
            calculate_percent_b(100.0, _bands()),
            calculate_bollinger_width(_bands()),
            calculate_distance_from_ma(100.0, 100.0),
            calculate_keltner_width(0.10),
        )
        assert result.direction == TradeBias.NEUTRAL
        assert result.score == 18
        assert result.strength == StrengthLevel.VERY_WEAK

    def test_custom_weights(self) -> None:
        result = calculate_mean_reversion_score(
            calculate_percent_b(85.0, _bands()),
            calculate_bollinger_width(_bands()),
            calculate_distance_from_ma(85.0, 100.0),
            calculate_keltner_width(0.03),
            percent_b_weight=1.0,
            bollinger_width_weight=0.0,
            distance_weight=0.0,
            keltner_width_weight=0.0,
        )
        assert result.score == 100
