"""Tests for confidence filtering and quality ranking."""

from types import SimpleNamespace

import pytest

from quantsignal.signals.ranking import (
    filter_high_confidence,
    quality_score,
    rank_by_quality,
)


def _analysis(symbol: str, confidence: int, risk_score: int) -> SimpleNamespace:
    return SimpleNamespace(symbol=symbol, confidence=confidence, risk_score=risk_score)


class TestQualityScore:
    def test_risk_halved(self) -> None:
        assert quality_score(_analysis("A", 80, 40)) == 60.0


class TestRankByQuality:
    """Tests for rank_by_quality."""

    def test_best_first(self) -> None:
        analyses = [_analysis("A", 50, 20), _analysis("B", 90, 60), _analysis("C", 70, 0)]
        assert [a.symbol for a in rank_by_quality(analyses)] == ["C", "B", "A"]

    def test_ties_keep_input_order(self) -> None:
        """Both score 50."""
        analyses = [_analysis("X", 60, 20), _analysis("Y", 70, 40), _analysis("Z", 10, 0)]
        assert [a.symbol for a in rank_by_quality(analyses)] == ["X", "Y", "Z"]

    def test_empty(self) -> None:
        assert rank_by_quality([]) == []


class TestFilterHighConfidence:
    """Tests for filter_high_confidence."""

    def test_default_threshold_inclusive(self) -> None:
        analyses = [_analysis("A", 69, 0), _analysis("B", 70, 0), _analysis("C", 95, 0)]
        kept = filter_high_confidence(analyses)
        assert [a.symbol for a in kept] == ["B", "C"]

    def test_default_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_MIN_CONFIDENCE", "90")
        analyses = [_analysis("A", 85, 0), _analysis("B", 95, 0)]
        assert [a.symbol for a in filter_high_confidence(analyses)] == ["B"]

    def test_custom_threshold(self) -> None:
        analyses = [_analysis("A", 40, 0), _analysis("B", 20, 0)]
        assert [a.symbol for a in filter_high_confidence(analyses, 30)] == ["A"]
