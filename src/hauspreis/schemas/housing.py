"""
Pandera schema for the preprocessed housing table.

The target column name is configurable, so the schema is built per run
instead of being declared as a DataFrameModel.
"""

import numpy as np
import pandas as pd
import pandera.pandas as pa


def _is_finite(series: pd.Series) -> pd.Series:
    return pd.Series(np.isfinite(series.to_numpy(dtype=float)), index=series.index)


def build_housing_schema(target: str) -> pa.DataFrameSchema:
    """
    Build the validation schema for a housing table.

    Args:
        target: Name of the (log-transformed) target column.

    Returns:
        Schema requiring a non-empty table with a finite float target.
    """
    return pa.DataFrameSchema(
        columns={
            target: pa.Column(
                float,
                checks=pa.Check(_is_finite, error="target must be finite"),
                nullable=False,
                coerce=True,
                description="Log-transformed sale price",
            ),
        },
        checks=pa.Check(lambda df: len(df) > 0, error="table has no rows"),
        name="HousingSchema",
        strict=False,
    )
