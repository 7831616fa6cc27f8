"""Tests for the volume formulas.

Tests verify:
- VWAP position, volume ROC activity and OBV flow
- A/D line, Chaikin Money Flow and Money Flow Index
"""

import pytest

from quantsignal.indicators.models import (
    FlowTrend,
    MoneyFlowSignal,
    OscillatorSignal,
    VolumeActivity,
    VolumeSignal,
    VWAPPosition,
)
from quantsignal.indicators.volume import (
    calculate_ad_line,
    calculate_chaikin_money_flow,
    calculate_mfi,
    calculate_obv,
    calculate_volume_roc,
    calculate_vwap,
    classify_volume_roc,
    money_flow_multiplier,
)


class TestVWAP:
    """Tests for calculate_vwap."""

    def test_weighted_typical_price(self) -> None:
        """Typical prices 10 and 11 weighted 1:3 give 10.75."""
        result = calculate_vwap([11.0, 12.0], [9.0, 10.0], [10.0, 11.0], [1.0, 3.0])
        assert result.value == pytest.approx(10.75)
        assert result.position == VWAPPosition.ABOVE
        assert result.deviation == pytest.approx(2.33)

    def test_below(self) -> None:
        result = calculate_vwap([11.0, 12.0], [9.0, 10.0], [12.0, 9.0], [3.0, 1.0])
        assert result.position == VWAPPosition.BELOW
        assert result.deviation < 0

    def test_at_within_tolerance(self) -> None:
        result = calculate_vwap([10.0], [10.0], [10.0], [5.0])
        assert result.position == VWAPPosition.AT
        assert result.deviation == 0.0

    def test_zero_volume(self) -> None:
        result = calculate_vwap([11.0], [9.0], [10.0], [0.0])
        assert result.value == 0.0
        assert result.deviation == 0.0

    def test_empty(self) -> None:
        result = calculate_vwap([], [], [], [])
        assert result.value == 0.0
        assert result.position == VWAPPosition.AT


class TestVolumeROC:
    """Tests for calculate_volume_roc and classify_volume_roc."""

    def test_surge_against_period_ago(self) -> None:
        result = calculate_volume_roc([100.0] * 14 + [250.0])
        assert result.value == pytest.approx(150.0)
        assert result.signal == VolumeSignal.SURGE
        assert result.activity == VolumeActivity.UNUSUAL

    def test_short_series_uses_first_bar(self) -> None:
        result = calculate_volume_roc([100.0, 160.0])
        assert result.value == pytest.approx(60.0)
        assert result.signal == VolumeSignal.HIGH
        assert result.activity == VolumeActivity.ELEVATED

    def test_zero_reference(self) -> None:
        result = calculate_volume_roc([0.0, 500.0])
        assert result.value == 0.0
        assert result.signal == VolumeSignal.LOW
        assert result.activity == VolumeActivity.QUIET

    def test_empty(self) -> None:
        assert calculate_volume_roc([]).value == 0.0

    @pytest.mark.parametrize(
        ("value", "signal", "activity"),
        [
            (-30.0, VolumeSignal.NORMAL, VolumeActivity.NORMAL),
            (15.0, VolumeSignal.LOW, VolumeActivity.NORMAL),
            (5.0, VolumeSignal.LOW, VolumeActivity.QUIET),
            (-120.0, VolumeSignal.SURGE, VolumeActivity.UNUSUAL),
        ],
    )
    def test_classification_uses_magnitude(
        self, value: float, signal: VolumeSignal, activity: VolumeActivity
    ) -> None:
        result = classify_volume_roc(value)
        assert result.value == value
        assert result.signal == signal
        assert result.activity == activity


class TestOBV:
    """Tests for calculate_obv."""

    def test_accumulation(self) -> None:
        """OBV path 0, 200, 150, 450."""
        result = calculate_obv([10.0, 11.0, 10.5, 12.0], [100.0, 200.0, 50.0, 300.0])
        assert result.value == 450.0
        assert result.trend == FlowTrend.ACCUMULATION
        assert result.momentum == pytest.approx(200.0)

    def test_distribution(self) -> None:
        result = calculate_obv([12.0, 11.0, 10.0], [100.0, 100.0, 100.0])
        assert result.value == -200.0
        assert result.trend == FlowTrend.DISTRIBUTION

    def test_flat_closes(self) -> None:
        result = calculate_obv([10.0] * 5, [100.0] * 5)
        assert result.value == 0.0
        assert result.trend == FlowTrend.NEUTRAL
        assert result.momentum == 0.0

    def test_empty(self) -> None:
        assert calculate_obv([], []).trend == FlowTrend.NEUTRAL


# Close at the high on 100, then at the low on 200.
_HIGHS = [10.0, 10.0]
_LOWS = [0.0, 0.0]
_CLOSES = [10.0, 0.0]
_VOLUMES = [100.0, 200.0]


class TestMoneyFlowMultiplier:
    """Tests for money_flow_multiplier."""

    @pytest.mark.parametrize(
        ("close", "expected"),
        [(10.0, 1.0), (0.0, -1.0), (5.0, 0.0), (7.5, 0.5)],
    )
    def test_position_in_range(self, close: float, expected: float) -> None:
        assert money_flow_multiplier(10.0, 0.0, close) == pytest.approx(expected)

    def test_flat_bar(self) -> None:
        assert money_flow_multiplier(5.0, 5.0, 5.0) == 0.0


class TestADLine:
    """Tests for calculate_ad_line."""

    def test_distribution(self) -> None:
        """Line path 0, 100, -100."""
        result = calculate_ad_line(_HIGHS, _LOWS, _CLOSES, _VOLUMES)
        assert result.value == -100.0
        assert result.trend == FlowTrend.DISTRIBUTION
        assert result.momentum == pytest.approx(-200.0)

    def test_first_bar_momentum_from_zero(self) -> None:
        result = calculate_ad_line([10.0], [0.0], [10.0], [100.0])
        assert result.value == 100.0
        assert result.trend == FlowTrend.ACCUMULATION
        assert result.momentum == pytest.approx(10000.0)

    def test_empty(self) -> None:
        result = calculate_ad_line([], [], [], [])
        assert result.value == 0.0
        assert result.trend == FlowTrend.NEUTRAL
        assert result.momentum == 0.0


class TestChaikinMoneyFlow:
    """Tests for calculate_chaikin_money_flow."""

    def test_selling_pressure(self) -> None:
        result = calculate_chaikin_money_flow(_HIGHS, _LOWS, _CLOSES, _VOLUMES)
        assert result.value == pytest.approx(-0.333)
        assert result.signal == MoneyFlowSignal.STRONG_SELLING
        assert result.pressure == FlowTrend.DISTRIBUTION

    def test_mild_buying(self) -> None:
        result = calculate_chaikin_money_flow([10.0], [0.0], [5.2], [100.0])
        assert result.value == pytest.approx(0.04)
        assert result.signal == MoneyFlowSignal.BUYING
        assert result.pressure == FlowTrend.NEUTRAL

    def test_zero_volume(self) -> None:
        result = calculate_chaikin_money_flow(_HIGHS, _LOWS, _CLOSES, [0.0, 0.0])
        assert result.value == 0.0
        assert result.signal == MoneyFlowSignal.NEUTRAL


class TestMFI:
    """Tests for calculate_mfi."""

    def test_mixed_flow(self) -> None:
        """Positive flow 11, negative flow 21."""
        prices = [10.0, 11.0, 10.5]
        result = calculate_mfi(prices, prices, prices, [1.0, 1.0, 2.0])
        assert result.value == pytest.approx(34.38)
        assert result.money_flow_ratio == pytest.approx(0.52)
        assert result.signal == OscillatorSignal.NEUTRAL

    def test_only_rising_flow(self) -> None:
        prices = [10.0, 11.0, 12.0]
        result = calculate_mfi(prices, prices, prices, [1.0, 1.0, 1.0])
        assert result.value == pytest.approx(99.01)
        assert result.money_flow_ratio == 100.0
        assert result.signal == OscillatorSignal.OVERBOUGHT

    def test_no_flow_reads_fifty(self) -> None:
        result = calculate_mfi([10.0] * 5, [10.0] * 5, [10.0] * 5, [1.0] * 5)
        assert result.value == 50.0
        assert result.money_flow_ratio == 1.0
        assert result.signal == OscillatorSignal.NEUTRAL
