"""
SDK for Campaign Calc.

Provides convenience helpers over the calculation engine.
"""

from .service import CalculationService, DisplayValue, PacingValue, StorageValue

__all__ = ["CalculationService", "DisplayValue", "PacingValue", "StorageValue"]
