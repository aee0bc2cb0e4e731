"""
Modeling layer for cross-validated training.

Provides the method registry, explicit formulas and the trainer that
evaluates every method on a shared fold assignment.
"""

from hauspreis.modeling.formula import Formula
from hauspreis.modeling.methods import (
    METHOD_REGISTRY,
    MethodKind,
    MethodSpec,
    expand_grid,
    get_method,
    list_methods,
    resolve_grid,
)
from hauspreis.modeling.ridge import MeanLossRidge
from hauspreis.modeling.stepwise import StepwiseOLS
from hauspreis.modeling.training import (
    ModelTrainer,
    TrainedModel,
    fold_assignment,
    make_folds,
    select_best_index,
)
from hauspreis.modeling.tree import ComplexityPrunedTree

__all__ = [
    "METHOD_REGISTRY",
    "ComplexityPrunedTree",
    "Formula",
    "MeanLossRidge",
    "MethodKind",
    "MethodSpec",
    "ModelTrainer",
    "StepwiseOLS",
    "TrainedModel",
    "expand_grid",
    "fold_assignment",
    "get_method",
    "list_methods",
    "make_folds",
    "resolve_grid",
    "select_best_index",
]
