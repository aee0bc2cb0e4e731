"""
Ridge regression on the mean-loss scale.

scikit-learn's ``Ridge`` penalizes the summed squared error, its
``ElasticNet`` the mean squared error. To keep one λ meaning the same
thing for ridge, LASSO and elastic net, ridge minimizes

    1/(2n) · RSS + λ/2 · |β|²

which is ``Ridge(alpha=n·λ)``. Coordinate descent with a zero L1 weight
never reports convergence, so the closed-form solver is used.
"""

from typing import Any

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.linear_model import Ridge
from sklearn.utils.validation import check_is_fitted


class MeanLossRidge(RegressorMixin, BaseEstimator):
    """
    Ridge regression with the penalty scaled per observation.

    Attributes:
        ridge_model_: Fitted sklearn Ridge.
        alpha_: Summed-loss penalty used for the fit (n · lambda_).
        coef_: Coefficients.
        intercept_: Intercept.
    """

    def __init__(self, lambda_: float = 1.0) -> None:
        self.lambda_ = lambda_

    def fit(self, X: Any, y: Any) -> "MeanLossRidge":
        """Fit ridge with alpha scaled by the number of rows."""
        if self.lambda_ < 0:
            msg = f"lambda_ must be non-negative, got: {self.lambda_}"
            raise ValueError(msg)

        y_arr = np.asarray(y, dtype=float)
        self.alpha_ = float(self.lambda_ * len(y_arr))
        self.ridge_model_ = Ridge(alpha=self.alpha_).fit(X, y_arr)

        self.coef_ = self.ridge_model_.coef_
        self.intercept_ = float(self.ridge_model_.intercept_)
        self.n_features_in_ = self.ridge_model_.n_features_in_
        if hasattr(self.ridge_model_, "feature_names_in_"):
            self.feature_names_in_ = self.ridge_model_.feature_names_in_
        return self

    def predict(self, X: Any) -> np.ndarray:
        """Predict with the fitted coefficients."""
        check_is_fitted(self, "ridge_model_")
        return self.ridge_model_.predict(X)
