"""Signal generation: composite scoring, classification and analysis.

Provides the composite scorer that folds formula results into bounded
momentum, mean-reversion and volatility scores, the classifier that maps them
to a trading signal, the AnalysisEngine that fans out every formula for an
asset and assembles the report, and ranking helpers for batch results.
"""

from quantsignal.signals.classifier import classify_signal, score_to_signal
from quantsignal.signals.composite import (
    compute_composite_scores,
    compute_market_metrics,
    compute_mean_reversion_composite,
    compute_momentum_composite,
    compute_overall_quality,
    compute_volatility_composite,
)
from quantsignal.signals.engine import AnalysisEngine
from quantsignal.signals.models import (
    BatchOutcome,
    CompositeScores,
    FormulaResults,
    MarketMetrics,
    MeanReversionComposite,
    MomentumComposite,
    MomentumSignal,
    QuantitativeAnalysis,
    ReversionSignal,
    SignalClassification,
    VolatilityComposite,
    VolatilityRegime,
)
from quantsignal.signals.ranking import filter_high_confidence, quality_score, rank_by_quality

__all__ = [
    "AnalysisEngine",
    "BatchOutcome",
    "CompositeScores",
    "FormulaResults",
    "MarketMetrics",
    "MeanReversionComposite",
    "MomentumComposite",
    "MomentumSignal",
    "QuantitativeAnalysis",
    "ReversionSignal",
    "SignalClassification",
    "VolatilityComposite",
    "VolatilityRegime",
    "classify_signal",
    "compute_composite_scores",
    "compute_market_metrics",
    "compute_mean_reversion_composite",
    "compute_momentum_composite",
    "compute_overall_quality",
    "compute_volatility_composite",
    "filter_high_confidence",
    "quality_score",
    "rank_by_quality",
    "score_to_signal",
]
