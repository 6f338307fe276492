"""
Campaign Calc: financial calculation engine for media-campaign planning.

Exact decimal arithmetic, versioned calculation formulas and rounding
applied per destination context as a separate step.
"""

from .core.decimal_value import DecimalValue
from .core.engine import CalculationEngine, CalculationResult, RoundedValue, create_engine
from .core.pacing import PacingStatus
from .core.rounding import RoundingMode, RoundingPolicyTable, RoundingRule
from .core.versions import Calculation, CalculationVersion, CalculationVersionRegistry

__version__ = "1.0.0"

__all__ = [
    "DecimalValue",
    "CalculationEngine",
    "CalculationResult",
    "RoundedValue",
    "create_engine",
    "PacingStatus",
    "RoundingMode",
    "RoundingPolicyTable",
    "RoundingRule",
    "Calculation",
    "CalculationVersion",
    "CalculationVersionRegistry",
]
