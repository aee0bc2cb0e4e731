"""
Cross-validated model training.

Every method is evaluated on the same fold assignment: for each grid
entry and each fold the pipeline is fit on the other folds and scored
on the held-out one. The entry with the lowest mean RMSE is refit on
all rows.
"""

import time
import warnings
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.exceptions import ConvergenceWarning
from sklearn.model_selection import GridSearchCV, KFold, cross_val_predict
from sklearn.pipeline import Pipeline

from hauspreis.config.settings import CrossValidationConfig, MethodsConfig
from hauspreis.data.loader import HousingData
from hauspreis.errors import (
    ConfigurationError,
    FittingError,
    HauspreisError,
    MissingColumnError,
)
from hauspreis.modeling.formula import Formula
from hauspreis.modeling.methods import (
    MethodKind,
    MethodSpec,
    get_method,
    resolve_grid,
)
from hauspreis.modeling.preprocessing import build_pipeline, build_preprocessor
from hauspreis.schemas.results import CVResultsSchema
from hauspreis.utils.logging import get_logger, log_context

log = get_logger(__name__)

SCORING: dict[str, str] = {
    "rmse": "neg_root_mean_squared_error",
    "r2": "r2",
    "mae": "neg_mean_absolute_error",
}
# results column, scorer name, sign undoing sklearn's "greater is better"
_RESULT_METRICS: tuple[tuple[str, str, float], ...] = (
    ("rmse", "rmse", -1.0),
    ("rsquared", "r2", 1.0),
    ("mae", "mae", -1.0),
)

Fold = tuple[np.ndarray, np.ndarray]


def make_folds(cv: CrossValidationConfig, n_rows: int) -> list[Fold]:
    """
    Partition row positions into k shuffled folds.

    The result depends only on ``cv.folds``, ``cv.seed`` and ``n_rows``,
    so every method trained with the same configuration sees identical
    folds.

    Args:
        cv: Cross-validation configuration.
        n_rows: Number of rows in the dataset.

    Returns:
        List of (train positions, test positions) pairs.

    Raises:
        ConfigurationError: If there are fewer rows than folds.
    """
    if n_rows < cv.folds:
        msg = f"Cannot split {n_rows} rows into {cv.folds} folds"
        raise ConfigurationError(msg)
    kfold = KFold(n_splits=cv.folds, shuffle=True, random_state=cv.seed)
    return list(kfold.split(np.zeros((n_rows, 1))))


def _fold_ids(folds: list[Fold], n_rows: int) -> np.ndarray:
    assignment = np.empty(n_rows, dtype=int)
    for fold, (_, test_idx) in enumerate(folds):
        assignment[test_idx] = fold
    return assignment


def fold_assignment(cv: CrossValidationConfig, n_rows: int) -> np.ndarray:
    """Fold id (0..k-1) of every row position."""
    return _fold_ids(make_folds(cv, n_rows), n_rows)


def select_best_index(cv_results: dict[str, Any]) -> int:
    """
    Index of the grid entry with the lowest mean RMSE.

    Ties go to the entry that comes first in the grid.
    """
    mean_rmse = -np.asarray(cv_results["mean_test_rmse"], dtype=float)
    return int(np.flatnonzero(mean_rmse == np.nanmin(mean_rmse))[0])


@contextmanager
def _fitting_errors(label: str) -> Iterator[None]:
    """Turn estimator failures (and solver non-convergence) into FittingError."""
    with warnings.catch_warnings():
        warnings.simplefilter("error", category=ConvergenceWarning)
        try:
            yield
        except HauspreisError:
            raise
        except (ValueError, np.linalg.LinAlgError, ConvergenceWarning) as e:
            msg = f"{label} failed to fit: {e}"
            raise FittingError(msg) from e


@dataclass(frozen=True)
class TrainedModel:
    """
    Container for a cross-validated, refit model.

    Attributes:
        method: Method identifier.
        label: Human-readable method name.
        pipeline: Pipeline refit on all rows with the best parameters.
        formula: Formula the model was trained with.
        features: Explanatory input columns.
        best_params: Selected hyperparameters (empty for OLS variants).
        best_index: Row of ``results`` holding the selected entry.
        results: One row per grid entry with fold-aggregated metrics.
        fold_predictions: Held-out predictions of the selected entry
            (only when the configuration asks for them).
        training_time_s: Wall time of cross-validation plus refit.
    """

    method: MethodKind
    label: str
    pipeline: Pipeline
    formula: Formula
    features: list[str]
    best_params: dict[str, Any]
    best_index: int
    results: pd.DataFrame
    fold_predictions: pd.DataFrame | None = None
    training_time_s: float = 0.0

    @property
    def best_row(self) -> pd.Series:
        """Results row of the selected grid entry."""
        return self.results.iloc[self.best_index]

    @property
    def best_rmse(self) -> float:
        """Mean cross-validated RMSE of the selected entry."""
        return float(self.best_row["rmse"])

    @property
    def best_rmse_sd(self) -> float:
        """Fold standard deviation of the selected entry's RMSE."""
        return float(self.best_row["rmse_sd"])

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        """Predict the target for every row of a table."""
        missing = [c for c in self.features if c not in frame.columns]
        if missing:
            raise MissingColumnError(missing, list(frame.columns))
        return np.asarray(self.pipeline.predict(frame[self.features]), dtype=float)

    def coefficients(self) -> pd.Series | None:
        """
        Fitted coefficients by design column.

        Returns None for models without coefficients (trees). Stepwise
        models report only their selected columns.
        """
        model = self.pipeline.named_steps["model"]
        if hasattr(model, "selected_features_"):
            return pd.Series(model.coef_, index=model.selected_features_, name="coef")
        if not hasattr(model, "coef_"):
            return None
        names = list(self.pipeline[:-1].get_feature_names_out())
        return pd.Series(np.ravel(model.coef_), index=names, name="coef")


class ModelTrainer:
    """
    Cross-validation trainer for the compared methods.

    The trainer holds the shared cross-validation configuration and the
    method settings; it keeps no state between calls.
    """

    def __init__(
        self,
        cv: CrossValidationConfig,
        methods: MethodsConfig | None = None,
    ) -> None:
        """
        Initialize trainer.

        Args:
            cv: Shared cross-validation configuration.
            methods: Method settings (manual features, grid overrides).
        """
        self.cv = cv
        self.methods = methods if methods is not None else MethodsConfig()

    def default_formula(self, spec: MethodSpec, data: HousingData) -> Formula:
        """Formula a method uses when none is given."""
        if spec.kind is MethodKind.MANUAL_OLS:
            return Formula.of(data.target, self.methods.manual_features)
        return Formula.all_of(data.target)

    def train(
        self,
        data: HousingData,
        method: str | MethodKind,
        formula: Formula | None = None,
        grid: Any | None = None,
    ) -> TrainedModel:
        """
        Cross-validate one method over its grid and refit the best entry.

        Args:
            data: Loaded housing data.
            method: Method identifier.
            formula: Target and explanatory columns (default per method).
            grid: Hyperparameter grid (default from config, then method).

        Returns:
            TrainedModel with the refit pipeline and full results table.

        Raises:
            MissingColumnError: If the formula names an absent column.
            ConfigurationError: If the grid or fold setup is invalid.
            FittingError: If an estimator fails on any fold or the refit.
        """
        spec = get_method(method)
        if formula is None:
            formula = self.default_formula(spec, data)
        if grid is None:
            grid = self.methods.grids.get(spec.kind.value)

        features = formula.resolve(data.frame)
        if not features:
            msg = f"Formula '{formula}' selects no explanatory columns"
            raise ConfigurationError(msg)
        entries = resolve_grid(spec, grid)

        X = data.frame[features]
        y = data.frame[formula.target]
        folds = make_folds(self.cv, len(X))

        numeric = [c for c in features if not data.is_categorical(c)]
        categorical = [c for c in features if data.is_categorical(c)]
        pipeline = build_pipeline(
            build_preprocessor(numeric, categorical),
            spec.factory(),
            standardize=spec.standardize,
        )
        param_grid = [
            {name: [value] for name, value in spec.estimator_params(e, "model__").items()}
            for e in entries
        ]

        with log_context(method=spec.kind.value):
            log.info(
                "Training model",
                formula=str(formula),
                n_samples=len(X),
                n_features=len(features),
                n_grid=len(entries),
                folds=self.cv.folds,
            )
            training_start = time.perf_counter()

            search = GridSearchCV(
                pipeline,
                param_grid=param_grid,
                scoring=SCORING,
                cv=folds,
                refit=select_best_index,
                error_score="raise",
                n_jobs=self.cv.n_jobs,
            )
            with _fitting_errors(spec.label):
                search.fit(X, y)

            best_index = int(search.best_index_)
            results = _results_table(search.cv_results_, entries, len(folds))

            fold_predictions = None
            if self.cv.save_predictions:
                fold_predictions = self._fold_predictions(
                    pipeline, param_grid[best_index], X, y, folds
                )
                for name, value in entries[best_index].items():
                    fold_predictions[name] = value

            training_time_s = time.perf_counter() - training_start

            log.info(
                "Training complete",
                best_params=entries[best_index],
                rmse=f"{results['rmse'].iloc[best_index]:.4f}",
                rmse_sd=f"{results['rmse_sd'].iloc[best_index]:.4f}",
                seconds=round(training_time_s, 2),
            )

        return TrainedModel(
            method=spec.kind,
            label=spec.label,
            pipeline=search.best_estimator_,
            formula=formula,
            features=features,
            best_params=dict(entries[best_index]),
            best_index=best_index,
            results=results,
            fold_predictions=fold_predictions,
            training_time_s=training_time_s,
        )

    def train_all(
        self,
        data: HousingData,
        methods: Sequence[str] | None = None,
    ) -> dict[str, TrainedModel]:
        """
        Train several methods one after another.

        Args:
            data: Loaded housing data.
            methods: Method identifiers (default: enabled in config).

        Returns:
            Dictionary of method identifier -> TrainedModel, in run order.
        """
        if methods is None:
            methods = self.methods.enabled

        log.info("Starting training", n_samples=data.n_rows, methods=list(methods))
        trained: dict[str, TrainedModel] = {}
        for name in methods:
            model = self.train(data, name)
            trained[model.method.value] = model
        log.info("All methods trained", n_models=len(trained))
        return trained

    def _fold_predictions(
        self,
        pipeline: Pipeline,
        params: dict[str, list[Any]],
        X: pd.DataFrame,
        y: pd.Series,
        folds: list[Fold],
    ) -> pd.DataFrame:
        """Held-out predictions of one parameter setting on the shared folds."""
        candidate = clone(pipeline).set_params(**{k: v[0] for k, v in params.items()})
        with _fitting_errors("Fold prediction"):
            preds = cross_val_predict(candidate, X, y, cv=folds, n_jobs=self.cv.n_jobs)

        return pd.DataFrame({
            "row": np.arange(len(X)),
            "fold": _fold_ids(folds, len(X)),
            "pred": preds,
            "obs": y.to_numpy(dtype=float),
        })


def _results_table(
    cv_results: dict[str, Any],
    entries: list[dict[str, Any]],
    n_folds: int,
) -> pd.DataFrame:
    """Aggregate per-fold scores into one row per grid entry."""
    table = pd.DataFrame(entries, index=range(len(entries)))

    per_fold: dict[str, np.ndarray] = {}
    for column, scorer, sign in _RESULT_METRICS:
        per_fold[column] = sign * np.column_stack(
            [np.asarray(cv_results[f"split{i}_test_{scorer}"]) for i in range(n_folds)]
        )

    for column in per_fold:
        table[column] = per_fold[column].mean(axis=1)
    for column in per_fold:
        table[f"{column}_sd"] = per_fold[column].std(axis=1, ddof=1)

    return CVResultsSchema.validate(table)
