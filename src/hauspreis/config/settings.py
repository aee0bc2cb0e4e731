"""
Typed configuration models using Pydantic.

All run parameters live here with explicit typing and validation.
Processing code receives these objects and never reads files or
environment variables itself.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Hand-picked predictors for the reduced OLS model (Ames column names)
DEFAULT_MANUAL_FEATURES: list[str] = [
    "OverallQual",
    "GrLivArea",
    "GarageCars",
    "TotalBsmtSF",
    "YearBuilt",
    "YearRemodAdd",
    "FullBath",
    "Fireplaces",
    "LotArea",
    "OverallCond",
    "Neighborhood",
]

DEFAULT_METHODS: list[str] = [
    "ols",
    "manual_ols",
    "forward",
    "backward",
    "ridge",
    "lasso",
    "elastic_net",
    "tree",
]


class DataConfig(BaseModel):
    """Input table configuration."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="Path to the preprocessed housing CSV")
    separator: str = Field(default=",", description="Field delimiter")
    id_column: str | None = Field(
        default="Id", description="Unique row identifier, dropped on load"
    )
    target: str = Field(
        default="SalePrice", description="Log-transformed dependent variable"
    )
    drop_columns: list[str] = Field(
        default_factory=list,
        description="Redundant columns removed after loading",
    )

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Ensure the separator is a single character."""
        if len(v) != 1:
            msg = f"separator must be a single character, got: {v!r}"
            raise ValueError(msg)
        return v


class CrossValidationConfig(BaseModel):
    """
    Shared cross-validation setup.

    One instance is created per run and handed read-only to every
    trainer call, so all methods see the same fold assignment.
    """

    model_config = ConfigDict(frozen=True)

    folds: int = Field(default=10, ge=2, description="Number of folds (k)")
    seed: int = Field(default=1337, description="Seed controlling fold assignment")
    save_predictions: bool = Field(
        default=False,
        description="Keep held-out predictions of the selected parameters",
    )
    n_jobs: int | None = Field(
        default=None, description="Parallel fold evaluations (None = sequential)"
    )


def _check_method_names(names: list[str], label: str) -> None:
    # Imported here: the modeling package imports this module
    from hauspreis.modeling.methods import list_methods

    available = list_methods()
    unknown = [n for n in names if n not in available]
    if unknown:
        msg = f"{label}: {', '.join(unknown)}. Available: {', '.join(available)}"
        raise ValueError(msg)


class MethodsConfig(BaseModel):
    """Which methods run and which hyperparameters they try."""

    model_config = ConfigDict(frozen=True)

    enabled: list[str] = Field(
        default_factory=lambda: list(DEFAULT_METHODS),
        description="Method identifiers, trained in this order",
    )
    manual_features: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MANUAL_FEATURES),
        description="Explanatory columns of the manually reduced OLS model",
    )
    grids: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Grid overrides per method: either a list of parameter dicts or "
            "a dict of parameter -> list of values"
        ),
    )

    @field_validator("enabled")
    @classmethod
    def validate_enabled(cls, v: list[str]) -> list[str]:
        """Reject empty, duplicated or unknown method lists."""
        if not v:
            msg = "At least one method must be enabled"
            raise ValueError(msg)
        duplicates = sorted({m for m in v if v.count(m) > 1})
        if duplicates:
            msg = f"Methods listed more than once: {', '.join(duplicates)}"
            raise ValueError(msg)
        _check_method_names(v, "Unknown method(s)")
        return v

    @field_validator("grids")
    @classmethod
    def validate_grids(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Grid overrides must be keyed by method identifiers."""
        _check_method_names(list(v), "Grid override(s) for unknown method(s)")
        return v

    @field_validator("manual_features")
    @classmethod
    def validate_manual_features(cls, v: list[str]) -> list[str]:
        """The reduced model needs at least one column."""
        if not v:
            msg = "manual_features must not be empty"
            raise ValueError(msg)
        return v


class OutputConfig(BaseModel):
    """Output paths configuration.

    Structure: ./output/{project}/results, ./output/{project}/plots
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )


class ProjectConfig(BaseModel):
    """Complete configuration of one comparison run."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'ames-2010')")

    data: DataConfig
    cv: CrossValidationConfig = Field(default_factory=CrossValidationConfig)
    methods: MethodsConfig = Field(default_factory=MethodsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def results_dir(self) -> Path:
        """Path to results tables output directory."""
        return self.output.output_root / self.project / "results"

    @property
    def plots_dir(self) -> Path:
        """Path to plots output directory."""
        return self.output.output_root / self.project / "plots"
