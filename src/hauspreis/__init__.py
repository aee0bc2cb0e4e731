"""
Hauspreis: Model comparison for house price prediction.

This package loads a preprocessed housing table, cross-validates eight
regression variants on it and compares their errors.
"""

from importlib.metadata import version

__version__ = version("hauspreis")

__all__ = ["__version__"]
