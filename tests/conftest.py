"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest

from hauspreis.config.settings import CrossValidationConfig, MethodsConfig
from hauspreis.data.loader import HousingData, prepare_housing_data


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for synthetic data."""
    return np.random.default_rng(20240501)


@pytest.fixture
def sample_housing_frame(rng: np.random.Generator) -> pd.DataFrame:
    """
    Create a small synthetic housing table.

    Log price depends linearly on two numeric columns and a three-level
    neighborhood; one further numeric column is pure noise.
    """
    n = 90
    neighborhood = np.array(["NAmes", "OldTown", "Somerst"] * (n // 3))
    effect = pd.Series(neighborhood).map({"NAmes": 0.0, "OldTown": -0.15, "Somerst": 0.2})
    living_area = rng.uniform(800, 2500, n)
    quality = rng.integers(3, 10, n).astype(float)

    sale_price = (
        10.5
        + 0.0004 * living_area
        + 0.08 * quality
        + effect.to_numpy()
        + rng.normal(0, 0.05, n)
    )

    return pd.DataFrame(
        {
            "Id": np.arange(1, n + 1),
            "GrLivArea": living_area,
            "OverallQual": quality,
            "MoSold": rng.integers(1, 13, n),
            "Neighborhood": neighborhood,
            "Street": ["Pave"] * n,
            "SalePrice": sale_price,
        }
    )


@pytest.fixture
def housing_data(sample_housing_frame: pd.DataFrame) -> HousingData:
    """Prepared housing data without the identifier and constant column."""
    return prepare_housing_data(
        sample_housing_frame,
        "SalePrice",
        id_column="Id",
        drop_columns=["Street"],
    )


@pytest.fixture
def cv_config() -> CrossValidationConfig:
    """Five-fold cross-validation with a fixed seed."""
    return CrossValidationConfig(folds=5, seed=1337)


@pytest.fixture
def methods_config() -> MethodsConfig:
    """Method settings whose manual features exist in the sample table."""
    return MethodsConfig(manual_features=["GrLivArea", "Neighborhood"])


@pytest.fixture
def housing_csv(tmp_path: Path, sample_housing_frame: pd.DataFrame) -> Path:
    """Write the sample table to a CSV file."""
    path = tmp_path / "housing.csv"
    sample_housing_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def base_config(housing_csv: Path, tmp_path: Path) -> dict[str, Any]:
    """Create a minimal configuration dictionary for testing."""
    return {
        "project": "test-ames",
        "data": {
            "path": str(housing_csv),
            "id_column": "Id",
            "target": "SalePrice",
            "drop_columns": ["Street"],
        },
        "cv": {"folds": 5, "seed": 1337},
        "methods": {
            "enabled": ["ols", "manual_ols", "tree"],
            "manual_features": ["GrLivArea", "Neighborhood"],
        },
        "output": {"root": str(tmp_path / "output")},
    }
