"""
Schema definitions using Pandera for data validation.

Tables crossing module boundaries (input data, results, comparison)
are validated against these contracts.
"""

from hauspreis.schemas.housing import build_housing_schema
from hauspreis.schemas.results import ComparisonSchema, CVResultsSchema

__all__ = [
    "CVResultsSchema",
    "ComparisonSchema",
    "build_housing_schema",
]
