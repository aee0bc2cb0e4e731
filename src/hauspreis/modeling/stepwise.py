"""
Stepwise subset selection for ordinary least squares.

Candidate subsets are fit with statsmodels OLS (with intercept) and
compared by information criterion. The search is greedy: forward
selection adds one column at a time, backward elimination removes one
column at a time.
"""

from typing import Any, Literal

import numpy as np
import statsmodels.api as sm
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y

from hauspreis.utils.logging import get_logger

log = get_logger(__name__)

Direction = Literal["forward", "backward"]
Criterion = Literal["bic", "aic"]


def _design(X: np.ndarray, columns: list[int]) -> np.ndarray:
    """Intercept column followed by the selected columns."""
    ones = np.ones((X.shape[0], 1))
    if not columns:
        return ones
    return np.hstack([ones, X[:, columns]])


class StepwiseOLS(RegressorMixin, BaseEstimator):
    """
    Greedy forward/backward OLS subset selection.

    forward: start from the intercept-only model and add the column with
    the lowest criterion until no addition improves it or the subset
    holds ``max_features`` columns.

    backward: start from all columns and remove the column whose removal
    gives the lowest criterion. Removal continues while it improves the
    criterion, and is forced while more than ``max_features`` columns
    remain.

    Ties go to the column that comes first in the input.

    Attributes:
        support_: Boolean mask of selected input columns.
        selected_features_: Names of selected columns.
        coef_: Coefficients of the selected columns.
        intercept_: Fitted intercept.
        criterion_: Criterion value of the final subset.
        n_steps_: Number of add/remove steps taken.
    """

    def __init__(
        self,
        direction: Direction = "forward",
        max_features: int = 10,
        criterion: Criterion = "bic",
    ) -> None:
        self.direction = direction
        self.max_features = max_features
        self.criterion = criterion

    def _score(self, X: np.ndarray, y: np.ndarray, columns: list[int]) -> float:
        result = sm.OLS(y, _design(X, columns)).fit()
        return float(result.bic if self.criterion == "bic" else result.aic)

    def _forward(self, X: np.ndarray, y: np.ndarray) -> tuple[list[int], float, int]:
        selected: list[int] = []
        current = self._score(X, y, selected)
        steps = 0

        while len(selected) < self.max_features:
            best_col, best_score = None, current
            for col in range(X.shape[1]):
                if col in selected:
                    continue
                score = self._score(X, y, [*selected, col])
                if score < best_score:
                    best_col, best_score = col, score
            if best_col is None:
                break
            selected.append(best_col)
            current = best_score
            steps += 1

        return selected, current, steps

    def _backward(self, X: np.ndarray, y: np.ndarray) -> tuple[list[int], float, int]:
        selected = list(range(X.shape[1]))
        current = self._score(X, y, selected)
        steps = 0

        while selected:
            forced = len(selected) > self.max_features
            best_col, best_score = None, np.inf if forced else current
            for col in selected:
                score = self._score(X, y, [c for c in selected if c != col])
                if score < best_score:
                    best_col, best_score = col, score
            if best_col is None:
                break
            selected.remove(best_col)
            current = best_score
            steps += 1

        return selected, current, steps

    def fit(self, X: Any, y: Any) -> "StepwiseOLS":
        """
        Run the subset search and fit OLS on the chosen columns.

        Args:
            X: Design matrix (array or DataFrame, already encoded).
            y: Target values.

        Returns:
            self (for method chaining)

        Raises:
            ValueError: If parameters are invalid.
        """
        if self.direction not in ("forward", "backward"):
            msg = f"direction must be 'forward' or 'backward', got: {self.direction!r}"
            raise ValueError(msg)
        if self.criterion not in ("bic", "aic"):
            msg = f"criterion must be 'bic' or 'aic', got: {self.criterion!r}"
            raise ValueError(msg)
        if int(self.max_features) < 1:
            msg = f"max_features must be >= 1, got: {self.max_features}"
            raise ValueError(msg)

        names = list(X.columns) if hasattr(X, "columns") else None
        X_arr, y_arr = check_X_y(X, y, dtype=np.float64, y_numeric=True)
        if names is None:
            names = [f"x{i}" for i in range(X_arr.shape[1])]

        if self.direction == "forward":
            selected, score, steps = self._forward(X_arr, y_arr)
        else:
            selected, score, steps = self._backward(X_arr, y_arr)

        selected = sorted(selected)
        params = sm.OLS(y_arr, _design(X_arr, selected)).fit().params

        self.n_features_in_ = X_arr.shape[1]
        self.support_ = np.zeros(X_arr.shape[1], dtype=bool)
        self.support_[selected] = True
        self.selected_features_ = [names[i] for i in selected]
        self.intercept_ = float(params[0])
        self.coef_ = np.asarray(params[1:], dtype=float)
        self.criterion_ = score
        self.n_steps_ = steps

        log.debug(
            "Stepwise selection finished",
            direction=self.direction,
            n_selected=len(selected),
            criterion=self.criterion,
            value=round(score, 3),
        )
        return self

    def predict(self, X: Any) -> np.ndarray:
        """Predict with the selected columns."""
        check_is_fitted(self, "support_")
        X_arr = check_array(X, dtype=np.float64)
        if X_arr.shape[1] != self.n_features_in_:
            msg = (
                f"X has {X_arr.shape[1]} features, "
                f"but StepwiseOLS was fitted with {self.n_features_in_}"
            )
            raise ValueError(msg)
        return self.intercept_ + X_arr[:, self.support_] @ self.coef_
