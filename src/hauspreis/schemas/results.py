"""
Pandera schemas for cross-validation results and model comparison.
"""

import pandera.pandas as pa
from pandera.typing import Index, Series


class CVResultsSchema(pa.DataFrameModel):
    """
    Schema for a per-method results table.

    One row per evaluated hyperparameter combination. Hyperparameter
    columns are not declared because they differ between methods.
    """

    rmse: Series[float] = pa.Field(ge=0, description="Mean RMSE across folds")
    rsquared: Series[float] = pa.Field(
        nullable=True, description="Mean R² across folds"
    )
    mae: Series[float] = pa.Field(ge=0, description="Mean MAE across folds")
    rmse_sd: Series[float] = pa.Field(ge=0, description="Fold RMSE std (ddof=1)")
    rsquared_sd: Series[float] = pa.Field(nullable=True, description="Fold R² std")
    mae_sd: Series[float] = pa.Field(ge=0, description="Fold MAE std (ddof=1)")

    class Config:
        """Schema configuration."""

        name = "CVResultsSchema"
        strict = False  # hyperparameter columns
        coerce = True


class ComparisonSchema(pa.DataFrameModel):
    """
    Schema for the method comparison table.

    Indexed by method name.
    """

    method: Index[str] = pa.Field(unique=True, check_name=True)
    cv_rmse: Series[float] = pa.Field(ge=0, description="Best cross-validated RMSE")
    cv_rmse_sd: Series[float] = pa.Field(
        ge=0, description="Fold standard deviation of the best RMSE"
    )
    rmsle: Series[float] = pa.Field(ge=0, description="In-sample RMSLE")

    class Config:
        """Schema configuration."""

        name = "ComparisonSchema"
        strict = True
        coerce = True
