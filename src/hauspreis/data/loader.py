"""
Housing data loading and preparation.

Loads the preprocessed CSV, removes the identifier and redundant
columns, validates the target and classifies explanatory columns into
numeric and categorical groups.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd
import pandera.errors

from hauspreis.config.settings import DataConfig
from hauspreis.errors import DataError, MissingColumnError
from hauspreis.schemas.housing import build_housing_schema
from hauspreis.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class HousingData:
    """
    Container for the loaded housing table.

    Attributes:
        frame: Full table (explanatory columns plus target).
        target: Name of the dependent variable.
        numeric_features: Explanatory columns with numeric dtype.
        categorical_features: Explanatory columns treated as categorical.
    """

    frame: pd.DataFrame
    target: str
    numeric_features: list[str] = field(default_factory=list)
    categorical_features: list[str] = field(default_factory=list)

    @property
    def features(self) -> list[str]:
        """All explanatory columns in table order."""
        return [c for c in self.frame.columns if c != self.target]

    @property
    def X(self) -> pd.DataFrame:  # noqa: N802
        """Explanatory columns."""
        return self.frame[self.features]

    @property
    def y(self) -> pd.Series:
        """Target column."""
        return self.frame[self.target]

    @property
    def n_rows(self) -> int:
        """Number of observations."""
        return len(self.frame)

    def is_categorical(self, column: str) -> bool:
        """Whether a column is one-hot encoded before fitting."""
        return column in self.categorical_features


def _classify_columns(df: pd.DataFrame, target: str) -> tuple[list[str], list[str]]:
    numeric: list[str] = []
    categorical: list[str] = []
    for col in df.columns:
        if col == target:
            continue
        # bool is a numeric dtype to pandas but a two-level factor here
        if pd.api.types.is_numeric_dtype(df[col]) and not pd.api.types.is_bool_dtype(df[col]):
            numeric.append(col)
        else:
            categorical.append(col)
    return numeric, categorical


def prepare_housing_data(
    df: pd.DataFrame,
    target: str,
    *,
    id_column: str | None = None,
    drop_columns: Sequence[str] = (),
) -> HousingData:
    """
    Turn a raw table into validated HousingData.

    Args:
        df: Raw table as read from storage.
        target: Name of the log-transformed target column.
        id_column: Identifier column to discard (ignored when absent).
        drop_columns: Redundant columns to discard; all must exist.

    Returns:
        HousingData holding a copy of the cleaned table.

    Raises:
        MissingColumnError: If the target or a drop column is absent.
        DataError: If the table fails schema validation.
    """
    if target not in df.columns:
        raise MissingColumnError([target], list(df.columns))

    missing = [c for c in drop_columns if c not in df.columns]
    if missing:
        raise MissingColumnError(missing, list(df.columns))

    to_drop = list(drop_columns)
    if id_column is not None and id_column in df.columns:
        to_drop.insert(0, id_column)
    elif id_column is not None:
        log.warning("Identifier column not present, nothing to drop", id_column=id_column)

    frame = df.drop(columns=to_drop)

    try:
        frame = build_housing_schema(target).validate(frame)
    except pandera.errors.SchemaError as e:
        msg = f"Housing table failed validation: {e}"
        raise DataError(msg) from e

    numeric, categorical = _classify_columns(frame, target)

    n_missing = int(frame[numeric].isna().sum().sum()) if numeric else 0
    if n_missing:
        log.warning("Numeric columns contain missing values", n_missing=n_missing)

    log.info(
        "Prepared housing data",
        rows=len(frame),
        dropped=to_drop,
        n_numeric=len(numeric),
        n_categorical=len(categorical),
    )

    return HousingData(
        frame=frame.reset_index(drop=True),
        target=target,
        numeric_features=numeric,
        categorical_features=categorical,
    )


def load_housing_data(config: DataConfig) -> HousingData:
    """
    Load the housing table described by a DataConfig.

    Args:
        config: Data configuration (path, separator, id/target/drop columns).

    Returns:
        Validated HousingData.

    Raises:
        FileNotFoundError: If the data file does not exist.
        DataError: If the file cannot be parsed or fails validation.
    """
    if not config.path.exists():
        msg = f"Housing data file not found: {config.path}"
        raise FileNotFoundError(msg)

    log.info("Loading housing data", path=str(config.path))
    try:
        df = pd.read_csv(config.path, sep=config.separator)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        msg = f"Could not parse {config.path}: {e}"
        raise DataError(msg) from e
    log.info("Loaded raw data", rows=len(df), columns=len(df.columns))

    return prepare_housing_data(
        df,
        config.target,
        id_column=config.id_column,
        drop_columns=config.drop_columns,
    )
