"""
Data loading layer.

Reads the preprocessed housing table and exposes it as an immutable
HousingData container.
"""

from hauspreis.data.loader import HousingData, load_housing_data, prepare_housing_data

__all__ = ["HousingData", "load_housing_data", "prepare_housing_data"]
