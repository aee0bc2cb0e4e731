"""
Evaluation metrics for regression models.

The target is a log-transformed price, so RMSE on the target already is
the root mean squared logarithmic error (RMSLE) of the price.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from hauspreis.utils.logging import get_logger

if TYPE_CHECKING:
    from hauspreis.data.loader import HousingData
    from hauspreis.modeling.training import TrainedModel

log = get_logger(__name__)


def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Root mean squared error."""
    return float(np.sqrt(mean_squared_error(np.ravel(y_true), np.ravel(y_pred))))


def rmsle(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    RMSLE on a log-scale target.

    Predictions enter by absolute value, which guards against negative
    log-scale predictions when true values are close to zero.

    Formula: sqrt(mean((|y_pred| - y_true)²))
    """
    return rmse(y_true, np.abs(np.asarray(y_pred, dtype=float)))


@dataclass(frozen=True)
class RegressionMetrics:
    """
    Standard regression metrics.

    Attributes:
        r2: R² (coefficient of determination)
        rmse: Root Mean Squared Error
        mae: Mean Absolute Error
        n_samples: Number of samples
    """

    r2: float
    rmse: float
    mae: float
    n_samples: int

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "r2": self.r2,
            "rmse": self.rmse,
            "mae": self.mae,
            "n_samples": self.n_samples,
        }

    def __str__(self) -> str:
        """String representation."""
        return f"R²={self.r2:.4f}, RMSE={self.rmse:.4f}, MAE={self.mae:.4f}"


def compute_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> RegressionMetrics:
    """
    Compute regression metrics.

    Args:
        y_true: True values.
        y_pred: Predicted values.

    Returns:
        RegressionMetrics object.

    Raises:
        ValueError: If the arrays are empty or differ in length.
    """
    y_true = np.asarray(y_true, dtype=float).ravel()
    y_pred = np.asarray(y_pred, dtype=float).ravel()

    if len(y_true) == 0:
        msg = "Cannot compute metrics on empty arrays"
        raise ValueError(msg)
    if len(y_true) != len(y_pred):
        msg = f"Length mismatch: {len(y_true)} true vs {len(y_pred)} predicted"
        raise ValueError(msg)

    return RegressionMetrics(
        r2=float(r2_score(y_true, y_pred)) if len(y_true) > 1 else float("nan"),
        rmse=rmse(y_true, y_pred),
        mae=float(mean_absolute_error(y_true, y_pred)),
        n_samples=len(y_true),
    )


def compute_residual_stats(residuals: np.ndarray) -> dict[str, float]:
    """
    Compute residual statistics.

    Args:
        residuals: Prediction minus actual.

    Returns:
        Dictionary with residual statistics.
    """
    return {
        "residual_mean": float(np.mean(residuals)),
        "residual_std": float(np.std(residuals)),
        "residual_median": float(np.median(residuals)),
        "residual_min": float(np.min(residuals)),
        "residual_max": float(np.max(residuals)),
    }


@dataclass(frozen=True)
class ScoreResult:
    """
    In-sample evaluation of a fitted model.

    Attributes:
        predictions: Prediction for every row.
        residuals: Prediction minus actual, per row.
        rmsle: Root mean squared logarithmic error over all rows.
        metrics: R², RMSE and MAE on the same rows.
    """

    predictions: np.ndarray
    residuals: np.ndarray
    rmsle: float
    metrics: RegressionMetrics

    @property
    def residual_stats(self) -> dict[str, float]:
        """Summary statistics of the residuals."""
        return compute_residual_stats(self.residuals)


def score_model(model: "TrainedModel", data: "HousingData") -> ScoreResult:
    """
    Score a fitted model on the full dataset.

    Args:
        model: Trained model.
        data: Dataset to predict (normally the training table).

    Returns:
        ScoreResult with predictions, residuals and RMSLE.
    """
    y_true = data.frame[model.formula.target].to_numpy(dtype=float)
    predictions = model.predict(data.frame)
    residuals = predictions - y_true

    result = ScoreResult(
        predictions=predictions,
        residuals=residuals,
        rmsle=rmsle(y_true, predictions),
        metrics=compute_metrics(y_true, predictions),
    )
    log.debug("Scored model", method=model.method.value, rmsle=round(result.rmsle, 5))
    return result
