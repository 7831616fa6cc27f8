"""Post-processing of batch results: confidence filter and quality ranking."""

from collections.abc import Iterable

from quantsignal.config import AnalysisSettings
from quantsignal.signals.models import QuantitativeAnalysis


def quality_score(analysis: QuantitativeAnalysis) -> float:
    """Risk-adjusted conviction: ``confidence - risk_score / 2``."""
    return analysis.confidence - analysis.risk_score / 2


def filter_high_confidence(
    analyses: Iterable[QuantitativeAnalysis],
    min_confidence: int | None = None,
) -> list[QuantitativeAnalysis]:
    """Keep analyses with confidence at or above ``min_confidence``, in order.

    When ``min_confidence`` is None, ``AnalysisSettings.min_confidence``
    (70 unless overridden) applies.
    """
    if min_confidence is None:
        min_confidence = AnalysisSettings().min_confidence
    return [a for a in analyses if a.confidence >= min_confidence]


def rank_by_quality(analyses: Iterable[QuantitativeAnalysis]) -> list[QuantitativeAnalysis]:
    """Sort by quality score, best first. Ties keep their input order."""
    return sorted(analyses, key=quality_score, reverse=True)
