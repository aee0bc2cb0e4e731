"""
Preprocessing pipeline construction.

Builds the sklearn ColumnTransformer that turns the housing table into a
numeric design matrix. It is part of every model pipeline, so encoders
are fit on training folds only.
"""

from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from hauspreis.utils.logging import get_logger

log = get_logger(__name__)


def build_preprocessor(
    numeric_features: list[str],
    categorical_features: list[str],
) -> ColumnTransformer:
    """
    Build the column transformer for a model.

    Numeric columns pass through unchanged. Categorical columns are
    dummy-coded with the first level as reference. A level that only
    appears in a held-out fold raises instead of being ignored.

    Args:
        numeric_features: Numeric explanatory columns.
        categorical_features: Categorical explanatory columns.

    Returns:
        Unfitted ColumnTransformer producing a pandas DataFrame.
    """
    transformers = []
    if numeric_features:
        transformers.append(("numeric", "passthrough", numeric_features))
    if categorical_features:
        transformers.append((
            "categorical",
            OneHotEncoder(drop="first", handle_unknown="error", sparse_output=False),
            categorical_features,
        ))

    log.debug(
        "Built preprocessor",
        n_numeric=len(numeric_features),
        n_categorical=len(categorical_features),
    )

    return ColumnTransformer(
        transformers=transformers,
        remainder="drop",
        verbose_feature_names_out=False,
    )


def build_pipeline(
    preprocessor: ColumnTransformer,
    model: object,
    *,
    standardize: bool = False,
) -> Pipeline:
    """
    Chain preprocessing, optional standardization and the model.

    Penalized methods standardize every design column (dummies included)
    so that one penalty applies on a common scale.
    """
    steps: list[tuple[str, object]] = [("preprocessor", preprocessor)]
    if standardize:
        steps.append(("scaler", StandardScaler()))
    steps.append(("model", model))
    return Pipeline(steps=steps).set_output(transform="pandas")
