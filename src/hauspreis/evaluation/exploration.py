"""
Exploratory tables for the housing data.

Column summaries, the most strongly correlated numeric pairs and
variance inflation factors, used to spot redundant predictors before
choosing features by hand.
"""

import itertools

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.outliers_influence import variance_inflation_factor

from hauspreis.data.loader import HousingData
from hauspreis.utils.logging import get_logger

log = get_logger(__name__)


def describe_features(data: HousingData) -> pd.DataFrame:
    """
    One row per column with dtype, missing/unique counts and moments.

    Mean and standard deviation are left empty for categorical columns.
    """
    frame = data.frame
    summary = pd.DataFrame(
        {
            "dtype": frame.dtypes.astype(str),
            "kind": [
                "target"
                if c == data.target
                else "categorical"
                if data.is_categorical(c)
                else "numeric"
                for c in frame.columns
            ],
            "missing": frame.isna().sum(),
            "unique": frame.nunique(dropna=True),
        }
    )
    numeric = frame.select_dtypes(include="number")
    summary["mean"] = numeric.mean()
    summary["std"] = numeric.std()
    summary.index.name = "column"
    return summary


def top_correlations(
    data: HousingData,
    n: int = 10,
    *,
    include_target: bool = False,
) -> pd.DataFrame:
    """
    Most strongly correlated pairs of numeric columns.

    Args:
        data: Loaded housing data.
        n: Number of pairs to return.
        include_target: Whether pairs with the target are considered.

    Returns:
        DataFrame with columns ``a``, ``b``, ``corr`` sorted by |corr|.
    """
    columns = list(data.numeric_features)
    if include_target:
        columns.append(data.target)

    corr = data.frame[columns].corr()
    pairs = pd.DataFrame(
        [
            (a, b, corr.loc[a, b])
            for a, b in itertools.combinations(columns, 2)
            if pd.notna(corr.loc[a, b])
        ],
        columns=["a", "b", "corr"],
    )
    pairs = pairs.assign(abs_corr=pairs["corr"].abs())
    pairs = pairs.sort_values("abs_corr", ascending=False, kind="stable")
    return pairs.drop(columns="abs_corr").head(n).reset_index(drop=True)


def variance_inflation(data: HousingData) -> pd.DataFrame:
    """
    Variance inflation factor of every numeric explanatory column.

    A constant is added before computing the factors. Rows with missing
    values are dropped. Perfectly collinear columns get an infinite VIF.

    Returns:
        DataFrame with columns ``feature`` and ``vif``, highest first.
    """
    numeric = data.frame[data.numeric_features].dropna().astype(float)
    if numeric.shape[1] == 0:
        return pd.DataFrame({"feature": pd.Series(dtype=str), "vif": pd.Series(dtype=float)})

    design = sm.add_constant(numeric, has_constant="add")
    with np.errstate(divide="ignore"):
        vifs = [
            float(variance_inflation_factor(design.to_numpy(), i))
            for i in range(1, design.shape[1])
        ]

    result = pd.DataFrame({"feature": list(numeric.columns), "vif": vifs})
    result = result.sort_values("vif", ascending=False, kind="stable")

    log.debug("Computed VIF", n_features=len(result), max_vif=result["vif"].max())
    return result.reset_index(drop=True)
