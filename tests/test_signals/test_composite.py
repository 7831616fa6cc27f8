"""Tests for composite scoring.

Tests verify:
- market metrics from full and bare snapshots
- momentum composite terms, bounds and strict buckets
- mean-reversion direction score and signal
- volatility risk score and regime
- overall quality blend
"""

import pytest

from quantsignal.config import ScoringSettings
from quantsignal.indicators.mean_reversion import calculate_distance_from_ma, calculate_percent_b
from quantsignal.indicators.models import (
    ADXResult,
    BollingerBands,
    Direction,
    DivergenceType,
    MACDResult,
    MeanReversionScoreResult,
    PriceAction,
    ReversionComponents,
    RSIDivergence,
    RSIResult,
    RSISignal,
    StrengthLevel,
    TradeBias,
    TrendStrength,
)
from quantsignal.models import PricePoint
from quantsignal.signals.composite import (
    classify_momentum,
    classify_regime,
    compute_market_metrics,
    compute_mean_reversion_composite,
    compute_momentum_composite,
    compute_overall_quality,
    compute_volatility_composite,
)
from quantsignal.signals.models import (
    MarketMetrics,
    MomentumSignal,
    ReversionSignal,
    VolatilityRegime,
)

SETTINGS = ScoringSettings()

_BANDS = BollingerBands(
    upper_band=110.0, middle_band=100.0, lower_band=90.0, bandwidth=0.2, percent_b=0.5
)
_STRENGTH = MeanReversionScoreResult(
    score=70,
    direction=TradeBias.BUY,
    strength=StrengthLevel.STRONG,
    components=ReversionComponents(
        percent_b=100, bollinger_width=40, distance_from_ma=75, keltner_width=60
    ),
)


def _rsi(value: float) -> RSIResult:
    return RSIResult(rsi=value, signal=RSISignal.NEUTRAL, momentum=(value - 50) / 50)


def _divergence(kind: DivergenceType = DivergenceType.NONE, strength: int = 0) -> RSIDivergence:
    return RSIDivergence(
        has_divergence=kind is not DivergenceType.NONE,
        divergence_type=kind,
        strength=strength,
        rsi=50.0,
        price_action=PriceAction.NEUTRAL,
    )


def _macd(trend: Direction) -> MACDResult:
    return MACDResult(macd=0.0, signal=0.0, histogram=0.0, trend=trend)


def _adx(value: float, direction: Direction) -> ADXResult:
    return ADXResult(
        adx=value,
        plus_di=0.0,
        minus_di=0.0,
        trend_strength=TrendStrength.MODERATE,
        trend_direction=direction,
    )


def _metrics(
    volatility: float = 0.0, daily_range: float = 0.0, ath_distance: float = 100.0
) -> MarketMetrics:
    return MarketMetrics(
        volatility=volatility,
        daily_range=daily_range,
        ath_distance=ath_distance,
        volume_to_market_cap_ratio=0.0,
    )


class TestMarketMetrics:
    """Tests for compute_market_metrics."""

    def test_full_snapshot(self, btc_price: PricePoint) -> None:
        metrics = compute_market_metrics(btc_price)
        assert metrics.volatility == pytest.approx(0.05)
        assert metrics.daily_range == pytest.approx(5.0)
        assert metrics.ath_distance == pytest.approx(27.54)
        assert metrics.volume_to_market_cap_ratio == pytest.approx(0.03)

    def test_bare_snapshot_defaults(self, bare_price: PricePoint) -> None:
        metrics = compute_market_metrics(bare_price)
        assert metrics.volatility == 0.5
        assert metrics.daily_range == 0.0
        assert metrics.ath_distance == 0.0
        assert metrics.volume_to_market_cap_ratio == 0.0


class TestMomentumComposite:
    """Tests for compute_momentum_composite."""

    def test_neutral_inputs(self) -> None:
        result = compute_momentum_composite(
            _rsi(50), _divergence(), _macd(Direction.NEUTRAL), _adx(0, Direction.NEUTRAL), SETTINGS
        )
        assert result.score == 0
        assert result.signal == MomentumSignal.NEUTRAL

    def test_terms_and_strict_threshold(self) -> None:
        """RSI 16 + divergence 10 + MACD 25 + ADX 9 = 60, which is not above 60."""
        result = compute_momentum_composite(
            _rsi(70),
            _divergence(DivergenceType.BULLISH, 50),
            _macd(Direction.BULLISH),
            _adx(30, Direction.BULLISH),
            SETTINGS,
        )
        assert result.rsi_component == pytest.approx(16.0)
        assert result.divergence_component == pytest.approx(10.0)
        assert result.macd_component == pytest.approx(25.0)
        assert result.adx_component == pytest.approx(9.0)
        assert result.score == 60
        assert result.signal == MomentumSignal.BULLISH

    def test_mirror_is_negated(self) -> None:
        result = compute_momentum_composite(
            _rsi(30),
            _divergence(DivergenceType.BEARISH, 50),
            _macd(Direction.BEARISH),
            _adx(30, Direction.BEARISH),
            SETTINGS,
        )
        assert result.score == -60
        assert result.signal == MomentumSignal.BEARISH

    def test_saturates_at_100(self) -> None:
        result = compute_momentum_composite(
            _rsi(100),
            _divergence(DivergenceType.BULLISH, 100),
            _macd(Direction.BULLISH),
            _adx(90, Direction.BULLISH),
            SETTINGS,
        )
        assert result.score == 100
        assert result.signal == MomentumSignal.STRONG_BULLISH

    def test_neutral_adx_direction_contributes_nothing(self) -> None:
        result = compute_momentum_composite(
            _rsi(50), _divergence(), _macd(Direction.NEUTRAL), _adx(45, Direction.NEUTRAL), SETTINGS
        )
        assert result.adx_component == 0.0

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (61, MomentumSignal.STRONG_BULLISH),
            (21, MomentumSignal.BULLISH),
            (20, MomentumSignal.NEUTRAL),
            (-20, MomentumSignal.NEUTRAL),
            (-21, MomentumSignal.BEARISH),
            (-61, MomentumSignal.STRONG_BEARISH),
        ],
    )
    def test_buckets(self, score: int, expected: MomentumSignal) -> None:
        assert classify_momentum(score) == expected


class TestMeanReversionComposite:
    """Tests for compute_mean_reversion_composite."""

    def test_stretched_below(self) -> None:
        """%B 0 gives -60 and a -10% distance gives -40."""
        result = compute_mean_reversion_composite(
            calculate_percent_b(90.0, _BANDS),
            calculate_distance_from_ma(90.0, 100.0),
            _STRENGTH,
            SETTINGS,
        )
        assert result.score == -100
        assert result.signal == ReversionSignal.OVERSOLD
        assert result.strength == 70
        assert result.direction == TradeBias.BUY

    def test_stretched_above(self) -> None:
        """%B 0.8 gives 36 and a +3% distance gives 12."""
        result = compute_mean_reversion_composite(
            calculate_percent_b(106.0, _BANDS),
            calculate_distance_from_ma(103.0, 100.0),
            _STRENGTH,
            SETTINGS,
        )
        assert result.score == 48
        assert result.signal == ReversionSignal.OVERBOUGHT

    def test_centered(self) -> None:
        result = compute_mean_reversion_composite(
            calculate_percent_b(100.0, _BANDS),
            calculate_distance_from_ma(100.0, 100.0),
            _STRENGTH,
            SETTINGS,
        )
        assert result.score == 0
        assert result.signal == ReversionSignal.NEUTRAL


class TestVolatilityComposite:
    """Tests for compute_volatility_composite."""

    def test_calm(self) -> None:
        result = compute_volatility_composite(_BANDS, _rsi(50), _metrics(), 0.0, SETTINGS)
        assert result.score == 0
        assert result.regime_score == 0
        assert result.regime == VolatilityRegime.LOW

    def test_weighted_risk(self) -> None:
        """Bollinger 15 + RSI 8 + volatility 3."""
        bands = BollingerBands(110.0, 100.0, 90.0, 0.2, percent_b=0.75)
        result = compute_volatility_composite(
            bands, _rsi(60), _metrics(volatility=0.1), 0.0, SETTINGS
        )
        assert result.bollinger_component == pytest.approx(15.0)
        assert result.rsi_component == pytest.approx(8.0)
        assert result.volatility_component == pytest.approx(3.0)
        assert result.score == 26

    def test_terms_are_capped(self) -> None:
        bands = BollingerBands(110.0, 100.0, 90.0, 0.2, percent_b=1.8)
        result = compute_volatility_composite(
            bands, _rsi(100), _metrics(volatility=3.0), 50.0, SETTINGS
        )
        assert result.score == 100

    @pytest.mark.parametrize(
        ("bandwidth", "daily_range", "ath_distance", "score", "regime"),
        [
            (5.0, 5.0, 50.0, 50, VolatilityRegime.NORMAL),
            (5.0, 5.0, 0.0, 60, VolatilityRegime.HIGH),
            (20.0, 20.0, 0.0, 100, VolatilityRegime.EXTREME),
            (1.0, 1.0, 90.0, 10, VolatilityRegime.LOW),
        ],
    )
    def test_regime(
        self,
        bandwidth: float,
        daily_range: float,
        ath_distance: float,
        score: int,
        regime: VolatilityRegime,
    ) -> None:
        result = compute_volatility_composite(
            _BANDS,
            _rsi(50),
            _metrics(daily_range=daily_range, ath_distance=ath_distance),
            bandwidth,
            SETTINGS,
        )
        assert result.regime_score == score
        assert result.regime == regime

    def test_regime_boundaries_are_strict(self) -> None:
        assert classify_regime(75) == VolatilityRegime.HIGH
        assert classify_regime(25) == VolatilityRegime.LOW


class TestOverallQuality:
    """Tests for compute_overall_quality."""

    def test_blend(self) -> None:
        """|60| * 0.4 + NORMAL 80 * 0.3 + |48| * 0.3 = 62.4."""
        momentum = compute_momentum_composite(
            _rsi(70),
            _divergence(DivergenceType.BULLISH, 50),
            _macd(Direction.BULLISH),
            _adx(30, Direction.BULLISH),
            SETTINGS,
        )
        reversion = compute_mean_reversion_composite(
            calculate_percent_b(106.0, _BANDS),
            calculate_distance_from_ma(103.0, 100.0),
            _STRENGTH,
            SETTINGS,
        )
        volatility = compute_volatility_composite(
            _BANDS, _rsi(50), _metrics(daily_range=5.0, ath_distance=50.0), 5.0, SETTINGS
        )
        assert volatility.regime == VolatilityRegime.NORMAL
        assert compute_overall_quality(momentum, reversion, volatility, SETTINGS) == 62

    def test_bounded(self) -> None:
        momentum = compute_momentum_composite(
            _rsi(100),
            _divergence(DivergenceType.BULLISH, 100),
            _macd(Direction.BULLISH),
            _adx(90, Direction.BULLISH),
            SETTINGS,
        )
        reversion = compute_mean_reversion_composite(
            calculate_percent_b(90.0, _BANDS),
            calculate_distance_from_ma(90.0, 100.0),
            _STRENGTH,
            SETTINGS,
        )
        volatility = compute_volatility_composite(_BANDS, _rsi(50), _metrics(), 0.0, SETTINGS)
        assert 0 <= compute_overall_quality(momentum, reversion, volatility, SETTINGS) <= 100
