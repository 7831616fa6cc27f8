"""Tests for RSI, divergence and MACD.

Tests verify:
- snapshot RSI approximation, ATH/ATL blend, clamp and 65/35 signal
- Wilder RSI on rising, flat and short series
- snapshot and series divergence detection and strength
- MACD trend on accelerating and decelerating series
- stochastic %K/%D crossover, Williams %R and rate of change
"""

import pytest

from quantsignal.indicators.models import (
    Crossover,
    Direction,
    DivergenceType,
    GradedTrend,
    MomentumSign,
    OscillatorSignal,
    PriceAction,
    RSIResult,
    RSISignal,
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
    rsi_values,
    stochastic_k_values,
)


def _rsi(value: float) -> RSIResult:
    return RSIResult(rsi=value, signal=RSISignal.NEUTRAL, momentum=(value - 50) / 50)


class TestSnapshotRSI:
    """Tests for calculate_rsi."""

    def test_change_maps_linearly(self) -> None:
        """rsi = 50 + 3 * change_24h without ATH/ATL."""
        assert calculate_rsi(100.0, 5.0).rsi == 65.0
        assert calculate_rsi(100.0, -5.0).rsi == 35.0

    def test_thresholds_are_strict(self) -> None:
        assert calculate_rsi(100.0, 5.0).signal == RSISignal.NEUTRAL
        assert calculate_rsi(100.0, 6.0).signal == RSISignal.OVERBOUGHT
        assert calculate_rsi(100.0, -10.0).signal == RSISignal.OVERSOLD

    def test_clamped_to_10_90(self) -> None:
        assert calculate_rsi(100.0, 20.0).rsi == 90.0
        assert calculate_rsi(100.0, -20.0).rsi == 10.0

    def test_ath_atl_blend(self) -> None:
        """Midway between ATL and ATH pulls a 65 reading toward 50."""
        result = calculate_rsi(60.0, 5.0, ath=110.0, atl=10.0)
        assert result.rsi == pytest.approx(62.0)

    def test_momentum_range(self) -> None:
        assert calculate_rsi(100.0, 50.0).momentum == pytest.approx(0.8)


class TestSeriesRSI:
    """Tests for Wilder RSI."""

    def test_only_gains_reads_100(self) -> None:
        result = calculate_rsi_series([float(i) for i in range(1, 21)], period=14)
        assert result.rsi == 100.0
        assert result.signal == RSISignal.OVERBOUGHT

    def test_flat_reads_50(self) -> None:
        assert calculate_rsi_series([5.0] * 20).rsi == 50.0

    def test_too_short_is_neutral(self) -> None:
        result = calculate_rsi_series([1.0, 2.0, 3.0], period=14)
        assert result.rsi == 50.0
        assert result.signal == RSISignal.NEUTRAL

    def test_wilder_smoothing(self) -> None:
        values = rsi_values([1.0, 2.0, 3.0, 2.5, 3.2, 3.1], period=2)
        assert values == pytest.approx([100.0, 66.6667, 82.7586, 72.7273], abs=1e-3)

    def test_bounded(self, make_series) -> None:
        series = make_series(n=100, drift=-0.3, wave=6.0)
        for value in rsi_values(series.closes):
            assert 0 <= value <= 100


class TestSnapshotDivergence:
    """Tests for detect_rsi_divergence."""

    def test_near_ath_with_weak_rsi_is_bearish(self) -> None:
        result = detect_rsi_divergence(95.0, _rsi(60.0), ath=100.0, atl=10.0)
        assert result.has_divergence
        assert result.divergence_type == DivergenceType.BEARISH
        assert result.strength == 20
        assert result.price_action == PriceAction.HIGHER_HIGH

    def test_near_ath_with_strong_rsi_is_none(self) -> None:
        result = detect_rsi_divergence(95.0, _rsi(75.0), ath=100.0, atl=10.0)
        assert not result.has_divergence
        assert result.price_action == PriceAction.HIGHER_HIGH

    def test_near_atl_with_firm_rsi_is_bullish(self) -> None:
        result = detect_rsi_divergence(12.0, _rsi(40.0), ath=100.0, atl=10.0)
        assert result.divergence_type == DivergenceType.BULLISH
        assert result.strength == 20
        assert result.price_action == PriceAction.LOWER_LOW

    def test_strength_capped(self) -> None:
        result = detect_rsi_divergence(99.0, _rsi(10.0), ath=100.0, atl=10.0)
        assert result.strength == 100

    def test_missing_extremes(self) -> None:
        result = detect_rsi_divergence(95.0, _rsi(60.0))
        assert not result.has_divergence
        assert result.divergence_type == DivergenceType.NONE
        assert result.strength == 0


class TestSeriesDivergence:
    """Tests for detect_series_divergence."""

    def test_price_up_rsi_down_is_bearish(self) -> None:
        """Over 3 readings RSI drops from 100 to 72.7 while price edges up."""
        result = detect_series_divergence([1.0, 2.0, 3.0, 2.5, 3.2, 3.1], period=2, lookback=3)
        assert result.divergence_type == DivergenceType.BEARISH
        assert result.strength == 55
        assert result.rsi == pytest.approx(72.7)

    def test_price_down_rsi_up_is_bullish(self) -> None:
        result = detect_series_divergence(
            [10.0, 9.0, 8.0, 8.5, 7.8, 7.9], period=2, lookback=3
        )
        assert result.divergence_type == DivergenceType.BULLISH
        assert result.strength == 55
        assert result.price_action == PriceAction.LOWER_LOW

    def test_insufficient_history(self) -> None:
        result = detect_series_divergence([1.0, 2.0, 3.0], period=14, lookback=14)
        assert not result.has_divergence
        assert result.rsi == 50.0


class TestMACD:
    """Tests for calculate_macd."""

    def test_accelerating_rise_is_bullish(self) -> None:
        closes = [100 + 0.1 * i * i for i in range(60)]
        result = calculate_macd(closes)
        assert result.macd > 0
        assert result.histogram > 0
        assert result.trend == Direction.BULLISH

    def test_accelerating_fall_is_bearish(self) -> None:
        closes = [1000 - 0.1 * i * i for i in range(60)]
        result = calculate_macd(closes)
        assert result.macd < 0
        assert result.trend == Direction.BEARISH

    def test_empty_is_neutral(self) -> None:
        result = calculate_macd([])
        assert (result.macd, result.signal, result.histogram) == (0.0, 0.0, 0.0)
        assert result.trend == Direction.NEUTRAL

    def test_snapshot_path_is_neutral(self) -> None:
        """Three points cannot separate fast and slow averages."""
        result = calculate_macd_from_price(100.0, 104.0, 97.0)
        assert result.trend == Direction.NEUTRAL
        assert result.macd == 0.0


class TestStochastic:
    """Tests for calculate_stochastic."""

    def test_k_crosses_above_d(self) -> None:
        """%K path 40, 30, 80 against a 2-bar %D of 35 then 55."""
        highs = [10.0] * 4
        lows = [0.0] * 4
        closes = [5.0, 4.0, 3.0, 8.0]
        assert stochastic_k_values(highs, lows, closes, 2) == pytest.approx([40.0, 30.0, 80.0])
        result = calculate_stochastic(highs, lows, closes, k_period=2, d_period=2)
        assert result.k == 80.0
        assert result.d == 55.0
        assert result.crossover == Crossover.BULLISH
        assert result.signal == OscillatorSignal.NEUTRAL

    def test_close_at_high_is_overbought(self) -> None:
        result = calculate_stochastic([10.0, 11.0, 12.0], [9.0, 9.5, 10.0], [9.5, 11.0, 12.0])
        assert result.k == 100.0
        assert result.signal == OscillatorSignal.OVERBOUGHT

    def test_flat_range_reads_fifty(self) -> None:
        result = calculate_stochastic([5.0] * 20, [5.0] * 20, [5.0] * 20)
        assert result.k == 50.0
        assert result.d == 50.0
        assert result.crossover == Crossover.NONE

    def test_empty(self) -> None:
        result = calculate_stochastic([], [], [])
        assert (result.k, result.d) == (50.0, 50.0)
        assert result.signal == OscillatorSignal.NEUTRAL


class TestWilliamsR:
    """Tests for calculate_williams_r."""

    def test_close_near_high(self) -> None:
        result = calculate_williams_r([10.0, 12.0, 14.0], [8.0, 9.0, 10.0], [9.0, 11.0, 13.0], 3)
        assert result.value == pytest.approx(-16.67)
        assert result.signal == OscillatorSignal.OVERBOUGHT
        assert result.momentum == Direction.BULLISH

    def test_close_near_low(self) -> None:
        result = calculate_williams_r([10.0, 12.0, 14.0], [8.0, 9.0, 10.0], [13.0, 11.0, 9.0], 3)
        assert result.value == pytest.approx(-83.33)
        assert result.signal == OscillatorSignal.OVERSOLD
        assert result.momentum == Direction.BEARISH

    @pytest.mark.parametrize("bars", [[5.0] * 5, []])
    def test_degenerate_reads_minus_fifty(self, bars: list[float]) -> None:
        result = calculate_williams_r(bars, bars, bars)
        assert result.value == -50.0
        assert result.momentum == Direction.NEUTRAL


class TestROC:
    """Tests for calculate_roc."""

    def test_strong_rise(self) -> None:
        result = calculate_roc([100.0] * 12 + [112.0], period=12)
        assert result.value == pytest.approx(12.0)
        assert result.signal == GradedTrend.STRONG_BULLISH
        assert result.momentum == MomentumSign.POSITIVE

    def test_mild_fall(self) -> None:
        result = calculate_roc([100.0, 95.0], period=1)
        assert result.value == pytest.approx(-5.0)
        assert result.signal == GradedTrend.BEARISH
        assert result.momentum == MomentumSign.NEGATIVE

    @pytest.mark.parametrize(("prices", "period"), [([100.0] * 12, 12), ([0.0, 5.0], 1)])
    def test_short_or_zero_reference_is_flat(self, prices: list[float], period: int) -> None:
        result = calculate_roc(prices, period)
        assert result.value == 0.0
        assert result.signal == GradedTrend.NEUTRAL
