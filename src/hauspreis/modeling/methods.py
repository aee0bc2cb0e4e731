"""
Method registry.

Each of the eight compared methods is described by a MethodSpec: how to
build its estimator, how grid entries map to estimator parameters and
which grid it tries by default. The statistical work is done by
scikit-learn and statsmodels estimators.
"""

import itertools
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sklearn.base import BaseEstimator
from sklearn.linear_model import ElasticNet, LinearRegression

from hauspreis.errors import ConfigurationError, UnknownMethodError
from hauspreis.modeling.ridge import MeanLossRidge
from hauspreis.modeling.stepwise import StepwiseOLS
from hauspreis.modeling.tree import ComplexityPrunedTree
from hauspreis.utils.logging import get_logger

log = get_logger(__name__)

# Coordinate descent budget for the penalized family
ENET_MAX_ITER = 50_000

Grid = list[dict[str, Any]]


class MethodKind(str, Enum):
    """Identifier of a compared method."""

    OLS = "ols"
    MANUAL_OLS = "manual_ols"
    FORWARD = "forward"
    BACKWARD = "backward"
    RIDGE = "ridge"
    LASSO = "lasso"
    ELASTIC_NET = "elastic_net"
    TREE = "tree"


@dataclass(frozen=True)
class MethodSpec:
    """
    Description of one method.

    Attributes:
        kind: Method identifier.
        label: Human-readable name used in tables.
        params: Hyperparameter names, mapped to estimator parameter names.
        default_grid: Grid tried when the configuration has no override.
        factory: Builds the unfitted estimator with default parameters.
        standardize: Whether inputs are standardized before fitting.
    """

    kind: MethodKind
    label: str
    params: Mapping[str, str]
    default_grid: tuple[Mapping[str, Any], ...]
    factory: Callable[[], BaseEstimator]
    standardize: bool = False

    @property
    def is_tunable(self) -> bool:
        """Whether the method has hyperparameters."""
        return bool(self.params)

    def estimator_params(self, entry: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
        """Translate a grid entry to estimator parameter names."""
        return {f"{prefix}{self.params[k]}": v for k, v in entry.items()}


def expand_grid(**axes: Sequence[Any]) -> Grid:
    """
    Cartesian product of hyperparameter axes.

    The first axis varies slowest, so ``expand_grid(a=[1, 2], b=[3, 4])``
    yields (1, 3), (1, 4), (2, 3), (2, 4).
    """
    if not axes:
        return [{}]
    names = list(axes)
    for name in names:
        if len(axes[name]) == 0:
            msg = f"Hyperparameter axis '{name}' has no values"
            raise ConfigurationError(msg)
    return [dict(zip(names, combo)) for combo in itertools.product(*axes.values())]


def _penalized(l1_ratio: float) -> Callable[[], BaseEstimator]:
    def factory() -> BaseEstimator:
        return ElasticNet(alpha=1.0, l1_ratio=l1_ratio, max_iter=ENET_MAX_ITER)

    return factory


_LAMBDAS = (1.0, 0.3, 0.1, 0.03, 0.01, 0.003, 0.001)

METHOD_REGISTRY: dict[MethodKind, MethodSpec] = {
    MethodKind.OLS: MethodSpec(
        kind=MethodKind.OLS,
        label="OLS",
        params={},
        default_grid=({},),
        factory=LinearRegression,
    ),
    MethodKind.MANUAL_OLS: MethodSpec(
        kind=MethodKind.MANUAL_OLS,
        label="Manual OLS",
        params={},
        default_grid=({},),
        factory=LinearRegression,
    ),
    MethodKind.FORWARD: MethodSpec(
        kind=MethodKind.FORWARD,
        label="Forward Stepwise",
        params={"max_features": "max_features"},
        default_grid=tuple({"max_features": n} for n in (5, 10, 15, 20, 25, 30)),
        factory=lambda: StepwiseOLS(direction="forward"),
    ),
    MethodKind.BACKWARD: MethodSpec(
        kind=MethodKind.BACKWARD,
        label="Backward Stepwise",
        params={"max_features": "max_features"},
        default_grid=tuple({"max_features": n} for n in (5, 10, 15, 20, 25, 30)),
        factory=lambda: StepwiseOLS(direction="backward"),
    ),
    MethodKind.RIDGE: MethodSpec(
        kind=MethodKind.RIDGE,
        label="Ridge",
        params={"lambda_": "lambda_"},
        default_grid=tuple({"lambda_": lam} for lam in _LAMBDAS),
        factory=MeanLossRidge,
        standardize=True,
    ),
    MethodKind.LASSO: MethodSpec(
        kind=MethodKind.LASSO,
        label="LASSO",
        params={"lambda_": "alpha"},
        default_grid=tuple({"lambda_": lam} for lam in _LAMBDAS[2:]),
        factory=_penalized(1.0),
        standardize=True,
    ),
    MethodKind.ELASTIC_NET: MethodSpec(
        kind=MethodKind.ELASTIC_NET,
        label="Elastic Net",
        params={"mixing": "l1_ratio", "lambda_": "alpha"},
        default_grid=tuple(
            expand_grid(mixing=[0.1, 0.5, 0.9], lambda_=[0.1, 0.01, 0.001])
        ),
        factory=_penalized(0.5),
        standardize=True,
    ),
    MethodKind.TREE: MethodSpec(
        kind=MethodKind.TREE,
        label="Decision Tree",
        params={"cp": "cp"},
        default_grid=tuple({"cp": cp} for cp in (0.001, 0.005, 0.01, 0.02, 0.05, 0.1)),
        factory=ComplexityPrunedTree,
    ),
}


def get_method(name: str | MethodKind) -> MethodSpec:
    """
    Get a method spec by identifier.

    Args:
        name: Method identifier (e.g. "lasso") or MethodKind.

    Returns:
        MethodSpec.

    Raises:
        UnknownMethodError: If method not found.
    """
    try:
        kind = MethodKind(name)
    except ValueError:
        available = ", ".join(k.value for k in MethodKind)
        msg = f"Unknown method '{name}'. Available: {available}"
        raise UnknownMethodError(msg) from None
    return METHOD_REGISTRY[kind]


def list_methods() -> list[str]:
    """List all method identifiers in comparison order."""
    return [k.value for k in MethodKind]


def resolve_grid(spec: MethodSpec, grid: Any | None = None) -> Grid:
    """
    Normalize a hyperparameter grid for a method.

    Args:
        spec: Method the grid belongs to.
        grid: None (use default), a list of parameter dicts, or a dict of
            parameter -> list of values (expanded with expand_grid). A
            single value counts as a one-value axis.

    Returns:
        Ordered list of complete parameter dicts.

    Raises:
        ConfigurationError: If the grid is empty or malformed, names
            unknown parameters or leaves a parameter unset.
    """
    if grid is None:
        entries = [dict(e) for e in spec.default_grid]
    elif isinstance(grid, Mapping):
        entries = expand_grid(
            **{k: list(v) if isinstance(v, list | tuple) else [v] for k, v in grid.items()}
        )
    elif isinstance(grid, list | tuple) and all(isinstance(e, Mapping) for e in grid):
        entries = [dict(e) for e in grid]
    else:
        msg = (
            f"Hyperparameter grid for {spec.label} must be a list of parameter "
            f"dicts or a dict of parameter values, got: {grid!r}"
        )
        raise ConfigurationError(msg)

    if not entries:
        msg = f"Hyperparameter grid for {spec.label} is empty"
        raise ConfigurationError(msg)

    expected = set(spec.params)
    for entry in entries:
        if set(entry) != expected:
            msg = (
                f"Grid entry {entry} for {spec.label} must set exactly: "
                f"{', '.join(sorted(expected)) or '(nothing)'}"
            )
            raise ConfigurationError(msg)

    log.debug("Resolved grid", method=spec.kind.value, n_entries=len(entries))
    return entries
