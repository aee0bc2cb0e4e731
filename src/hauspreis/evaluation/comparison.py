"""
Method comparison.

Collects each method's best cross-validated RMSE, its fold standard
deviation and the in-sample RMSLE into one table, and runs the full
load -> train -> score -> compare workflow.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from hauspreis.config.settings import ProjectConfig
from hauspreis.data.loader import HousingData
from hauspreis.evaluation.metrics import ScoreResult, score_model
from hauspreis.modeling.training import ModelTrainer, TrainedModel
from hauspreis.schemas.results import ComparisonSchema
from hauspreis.utils.logging import get_logger

log = get_logger(__name__)

COMPARISON_COLUMNS = ["cv_rmse", "cv_rmse_sd", "rmsle"]


@dataclass(frozen=True)
class ComparisonRow:
    """One method's entry in the comparison table."""

    method: str
    cv_rmse: float
    cv_rmse_sd: float
    rmsle: float

    @classmethod
    def from_model(cls, model: TrainedModel, score: ScoreResult) -> "ComparisonRow":
        """Take the selected results row and the in-sample score."""
        return cls(
            method=model.label,
            cv_rmse=model.best_rmse,
            cv_rmse_sd=model.best_rmse_sd,
            rmsle=score.rmsle,
        )


def build_comparison(rows: Sequence[ComparisonRow]) -> pd.DataFrame:
    """
    Assemble comparison rows into a table keyed by method name.

    Args:
        rows: One row per method, in reporting order.

    Returns:
        DataFrame indexed by ``method`` with cv_rmse, cv_rmse_sd and rmsle.

    Raises:
        ValueError: If no rows are given or a method appears twice.
    """
    if not rows:
        msg = "Comparison needs at least one method"
        raise ValueError(msg)

    names = [r.method for r in rows]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        msg = f"Duplicate methods in comparison: {', '.join(duplicates)}"
        raise ValueError(msg)

    table = pd.DataFrame(
        [[r.cv_rmse, r.cv_rmse_sd, r.rmsle] for r in rows],
        columns=COMPARISON_COLUMNS,
        index=pd.Index(names, name="method"),
    )
    return ComparisonSchema.validate(table)


@dataclass(frozen=True)
class ComparisonResult:
    """
    Outcome of a full comparison run.

    Attributes:
        models: Trained models by method identifier, in run order.
        scores: In-sample scores by method identifier.
        table: Comparison table (see build_comparison).
    """

    models: dict[str, TrainedModel]
    scores: dict[str, ScoreResult]
    table: pd.DataFrame

    @property
    def best_method(self) -> str:
        """Label of the method with the lowest cross-validated RMSE."""
        return str(self.table["cv_rmse"].idxmin())


def run_comparison(
    data: HousingData,
    config: ProjectConfig,
    methods: Sequence[str] | None = None,
) -> ComparisonResult:
    """
    Train, score and compare methods on one dataset.

    Methods run one after another with the shared cross-validation
    configuration. The table is built only after every method finished.

    Args:
        data: Loaded housing data.
        config: Project configuration.
        methods: Method identifiers (default: enabled in config).

    Returns:
        ComparisonResult with models, scores and comparison table.
    """
    trainer = ModelTrainer(config.cv, config.methods)
    models = trainer.train_all(data, methods)

    scores = {name: score_model(model, data) for name, model in models.items()}
    table = build_comparison(
        [ComparisonRow.from_model(models[name], scores[name]) for name in models]
    )

    log.info(
        "Comparison complete",
        n_methods=len(table),
        best=str(table["cv_rmse"].idxmin()),
        best_cv_rmse=f"{table['cv_rmse'].min():.4f}",
    )
    return ComparisonResult(models=models, scores=scores, table=table)
