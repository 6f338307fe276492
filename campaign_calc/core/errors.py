"""
Typed failures raised by the calculation engine.

Every error surfaces to the immediate caller; nothing here is defaulted
or swallowed. Each error also derives from the closest builtin so callers
that only know about ValueError/LookupError/ArithmeticError still catch it.
"""


class CalculationEngineError(Exception):
    """Base class for all calculation engine failures."""


class InvalidDecimalLiteral(CalculationEngineError, ValueError):
    """Raised when a numeric input is not a canonical decimal literal."""

    def __init__(self, literal: object):
        super().__init__(f"Invalid decimal literal: {literal!r}")
        self.literal = literal


class DivisionByZero(CalculationEngineError, ArithmeticError):
    """Raised when a calculation divides by a zero denominator."""


class PrecisionOverflow(CalculationEngineError, ArithmeticError):
    """Raised when a value's magnitude or scale exceeds configured limits."""


class UnknownRoundingContext(CalculationEngineError, LookupError):
    """Raised when no rounding rule matches a context."""

    def __init__(self, context: str):
        super().__init__(f"Unknown rounding context: {context}")
        self.context = context


class UnknownCalculation(CalculationEngineError, LookupError):
    """Raised when a calculation name is absent from the resolved version."""

    def __init__(self, name: str, version_id: str):
        super().__init__(f"Calculation '{name}' not found in version {version_id}")
        self.name = name
        self.version_id = version_id


class UnknownVersion(CalculationEngineError, LookupError):
    """Raised when a calculation version id is not registered."""

    def __init__(self, version_id):
        if version_id is None:
            message = "No current calculation version is set"
        else:
            message = f"Calculation version '{version_id}' not found"
        super().__init__(message)
        self.version_id = version_id


class DuplicateVersion(CalculationEngineError, ValueError):
    """Raised when registering a version id that already exists."""

    def __init__(self, version_id: str):
        super().__init__(f"Calculation version '{version_id}' is already registered")
        self.version_id = version_id
