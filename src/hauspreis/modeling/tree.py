"""
Regression tree pruned by a relative complexity parameter.

scikit-learn's ``ccp_alpha`` is measured in absolute impurity units.
Here the pruning strength ``cp`` is relative to the root node error:
a split survives only if it lowers the total squared error by at least
``cp`` times the error of the single-leaf tree.
"""

from typing import Any

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.tree import DecisionTreeRegressor
from sklearn.utils.validation import check_is_fitted


class ComplexityPrunedTree(RegressorMixin, BaseEstimator):
    """
    Decision tree with relative cost-complexity pruning.

    Default growth limits: min_samples_split=20, min_samples_leaf=7,
    max_depth=30.

    Attributes:
        tree_model_: Fitted DecisionTreeRegressor.
        ccp_alpha_: Absolute pruning threshold used for the fit.
    """

    def __init__(
        self,
        cp: float = 0.01,
        min_samples_split: int = 20,
        min_samples_leaf: int = 7,
        max_depth: int = 30,
        random_state: int | None = None,
    ) -> None:
        self.cp = cp
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.max_depth = max_depth
        self.random_state = random_state

    def fit(self, X: Any, y: Any) -> "ComplexityPrunedTree":
        """Fit and prune the tree."""
        if self.cp < 0:
            msg = f"cp must be non-negative, got: {self.cp}"
            raise ValueError(msg)

        y_arr = np.asarray(y, dtype=float)
        # Root node impurity (population variance) equals the single-leaf MSE
        self.ccp_alpha_ = float(self.cp * np.var(y_arr))

        self.tree_model_ = DecisionTreeRegressor(
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            max_depth=self.max_depth,
            ccp_alpha=self.ccp_alpha_,
            random_state=self.random_state,
        ).fit(X, y_arr)
        self.n_features_in_ = self.tree_model_.n_features_in_
        if hasattr(self.tree_model_, "feature_names_in_"):
            self.feature_names_in_ = self.tree_model_.feature_names_in_
        return self

    def predict(self, X: Any) -> np.ndarray:
        """Predict leaf means."""
        check_is_fitted(self, "tree_model_")
        return self.tree_model_.predict(X)

    @property
    def n_leaves_(self) -> int:
        """Number of leaves after pruning."""
        check_is_fitted(self, "tree_model_")
        return int(self.tree_model_.get_n_leaves())

    @property
    def feature_importances_(self) -> np.ndarray:
        """Impurity-based importances of the pruned tree."""
        check_is_fitted(self, "tree_model_")
        return self.tree_model_.feature_importances_
