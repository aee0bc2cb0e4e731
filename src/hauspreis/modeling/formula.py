"""
Explicit model formulas.

A formula names the dependent variable and either an explicit list of
explanatory columns or "all remaining columns". The familiar
``y ~ .`` and ``y ~ a + b`` notation can be parsed into one.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from hauspreis.errors import ConfigurationError, MissingColumnError

_FORMULA_PATTERN = re.compile(r"^\s*([^~\s]+)\s*~\s*(.+?)\s*$")


@dataclass(frozen=True)
class Formula:
    """
    Target plus explanatory column selection.

    Attributes:
        target: Dependent variable column.
        features: Explanatory columns, or None for every non-target column.
    """

    target: str
    features: tuple[str, ...] | None = None

    @classmethod
    def all_of(cls, target: str) -> "Formula":
        """Formula using every remaining column (``target ~ .``)."""
        return cls(target=target)

    @classmethod
    def of(cls, target: str, features: Sequence[str]) -> "Formula":
        """Formula with an explicit feature list."""
        if not features:
            msg = "Explicit formula needs at least one feature"
            raise ConfigurationError(msg)
        return cls(target=target, features=tuple(features))

    @classmethod
    def parse(cls, text: str) -> "Formula":
        """
        Parse ``"y ~ ."`` or ``"y ~ a + b"``.

        Raises:
            ConfigurationError: If the text is not a formula.
        """
        match = _FORMULA_PATTERN.match(text)
        if match is None:
            msg = f"Not a formula: {text!r}"
            raise ConfigurationError(msg)
        target, rhs = match.groups()
        if rhs == ".":
            return cls.all_of(target)
        terms = [t.strip() for t in rhs.split("+")]
        if any(not t for t in terms):
            msg = f"Empty term in formula: {text!r}"
            raise ConfigurationError(msg)
        return cls.of(target, terms)

    @property
    def uses_all(self) -> bool:
        """Whether the formula selects every remaining column."""
        return self.features is None

    def resolve(self, frame: pd.DataFrame) -> list[str]:
        """
        Resolve the explanatory columns against a table.

        Args:
            frame: Table the formula is applied to.

        Returns:
            Explanatory column names in formula order (or table order).

        Raises:
            MissingColumnError: If the target or any feature is absent.
        """
        columns = list(frame.columns)
        if self.target not in columns:
            raise MissingColumnError([self.target], columns)
        if self.features is None:
            return [c for c in columns if c != self.target]

        missing = [f for f in self.features if f not in columns]
        if missing:
            raise MissingColumnError(missing, columns)
        return [f for f in self.features if f != self.target]

    def __str__(self) -> str:
        rhs = "." if self.features is None else " + ".join(self.features)
        return f"{self.target} ~ {rhs}"
