"""
Configuration management with typed Pydantic models.

Provides the data, cross-validation and method settings of a run
and YAML-based configuration loading.
"""

from hauspreis.config.loader import config_from_dict, load_config
from hauspreis.config.settings import (
    DEFAULT_MANUAL_FEATURES,
    DEFAULT_METHODS,
    CrossValidationConfig,
    DataConfig,
    MethodsConfig,
    OutputConfig,
    ProjectConfig,
)

__all__ = [
    "DEFAULT_MANUAL_FEATURES",
    "DEFAULT_METHODS",
    "CrossValidationConfig",
    "DataConfig",
    "MethodsConfig",
    "OutputConfig",
    "ProjectConfig",
    "config_from_dict",
    "load_config",
]
