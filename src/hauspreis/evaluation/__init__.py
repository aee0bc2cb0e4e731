"""
Evaluation layer: scoring, comparison, exploration and reporting.
"""

from hauspreis.evaluation.comparison import (
    ComparisonResult,
    ComparisonRow,
    build_comparison,
    run_comparison,
)
from hauspreis.evaluation.metrics import (
    RegressionMetrics,
    ScoreResult,
    compute_metrics,
    rmse,
    rmsle,
    score_model,
)

__all__ = [
    "ComparisonResult",
    "ComparisonRow",
    "RegressionMetrics",
    "ScoreResult",
    "build_comparison",
    "compute_metrics",
    "rmse",
    "rmsle",
    "run_comparison",
    "score_model",
]
