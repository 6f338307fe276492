"""
Arbitrary-precision decimal values for monetary and ratio arithmetic.

Wraps decimal.Decimal behind a narrow, immutable type. Values only enter
from canonical decimal-literal strings, integers or scaled-integer pairs,
and never pass through a binary float.
"""

import re
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_EVEN, ROUND_HALF_UP
from functools import total_ordering
from typing import Tuple, Union

from .errors import DivisionByZero, InvalidDecimalLiteral, PrecisionOverflow

# Working precision in significant digits for every arithmetic operation
WORKING_PRECISION = 64
# Values must stay below 10 ** MAX_INTEGER_DIGITS in magnitude
MAX_INTEGER_DIGITS = 28
# Fractional digits kept on results; input literals may not exceed it
MAX_SCALE = 32
# Fixed-point storage representation (microdollars)
STORAGE_SCALE = 6

_LITERAL_PATTERN = re.compile(r"[+-]?[0-9]+(\.[0-9]+)?")
DECIMAL_CONTEXT = Context(
    prec=WORKING_PRECISION,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation],
)
_MAX_SCALE_QUANTUM = Decimal(1).scaleb(-MAX_SCALE)

Operand = Union["DecimalValue", int]


def _bounded(value: Decimal, exact: bool) -> Decimal:
    """Enforce magnitude and scale limits on a raw Decimal.

    Args:
        value: Decimal to check
        exact: When True, excess fractional digits are an error (inputs);
            otherwise they are rounded away (arithmetic results)

    Returns:
        Decimal within limits

    Raises:
        PrecisionOverflow: If the value is too large or too finely scaled
    """
    if not value.is_finite():
        raise PrecisionOverflow(f"Non-finite decimal value: {value}")
    if not value.is_zero() and value.adjusted() >= MAX_INTEGER_DIGITS:
        raise PrecisionOverflow(
            f"Value exceeds {MAX_INTEGER_DIGITS} integer digits: {value:f}"
        )
    exponent = value.as_tuple().exponent
    if exponent < -MAX_SCALE:
        if exact:
            raise PrecisionOverflow(
                f"Scale {-exponent} exceeds maximum of {MAX_SCALE} fractional digits"
            )
        value = value.quantize(_MAX_SCALE_QUANTUM, context=DECIMAL_CONTEXT)
    return value


@total_ordering
class DecimalValue:
    """Immutable arbitrary-precision decimal.

    Every operation returns a new value. Results carry up to MAX_SCALE
    fractional digits, well above the 6-digit storage floor.

    USAGE:
        revenue = DecimalValue("120")
        cost = DecimalValue("100")
        margin = (revenue - cost) / revenue   # DecimalValue('0.1666...')
        margin.to_storage()                   # '0.166667'
    """

    __slots__ = ("_value",)

    def __init__(self, literal: Union[str, int]):
        if isinstance(literal, (bool, float)):
            raise TypeError(
                f"DecimalValue cannot be built from {type(literal).__name__}; "
                "pass a decimal-literal string"
            )
        if isinstance(literal, int):
            value = Decimal(literal)
        elif isinstance(literal, str):
            if not _LITERAL_PATTERN.fullmatch(literal):
                raise InvalidDecimalLiteral(literal)
            value = Decimal(literal)
        else:
            raise TypeError(f"Unsupported DecimalValue input: {type(literal).__name__}")
        object.__setattr__(self, "_value", _bounded(value, exact=True))

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_scaled(cls, unscaled: int, scale: int) -> "DecimalValue":
        """Build a value from an unscaled integer and a decimal scale.

        ``from_scaled(12345, 2)`` is ``DecimalValue("123.45")``.
        """
        if isinstance(unscaled, bool) or not isinstance(unscaled, int):
            raise TypeError("unscaled must be an int")
        if isinstance(scale, bool) or not isinstance(scale, int) or scale < 0:
            raise ValueError("scale must be a non-negative int")
        return cls._wrap(Decimal(f"{unscaled}E-{scale}"), exact=True)

    @classmethod
    def from_storage(cls, text: str) -> "DecimalValue":
        """Read a fixed-point storage string back into a value."""
        return cls(text)

    @classmethod
    def _wrap(cls, value: Decimal, exact: bool = False) -> "DecimalValue":
        instance = cls.__new__(cls)
        object.__setattr__(instance, "_value", _bounded(value, exact=exact))
        return instance

    # ------------------------------------------------------------------
    # Immutability
    # ------------------------------------------------------------------

    def __setattr__(self, name, value):
        raise AttributeError("DecimalValue is immutable")

    def __delattr__(self, name):
        raise AttributeError("DecimalValue is immutable")

    def __reduce__(self):
        return (DecimalValue, (self.to_api_string(),))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def decimal(self) -> Decimal:
        """Underlying decimal.Decimal (exact, never a float)."""
        return self._value

    def is_zero(self) -> bool:
        return self._value.is_zero()

    def is_negative(self) -> bool:
        return self._value < 0

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(other) -> Decimal:
        if isinstance(other, DecimalValue):
            return other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return Decimal(other)
        return NotImplemented

    def __add__(self, other: Operand) -> "DecimalValue":
        rhs = self._coerce(other)
        if rhs is NotImplemented:
            return NotImplemented
        return self._wrap(DECIMAL_CONTEXT.add(self._value, rhs))

    __radd__ = __add__

    def __sub__(self, other: Operand) -> "DecimalValue":
        rhs = self._coerce(other)
        if rhs is NotImplemented:
            return NotImplemented
        return self._wrap(DECIMAL_CONTEXT.subtract(self._value, rhs))

    def __rsub__(self, other: Operand) -> "DecimalValue":
        lhs = self._coerce(other)
        if lhs is NotImplemented:
            return NotImplemented
        return self._wrap(DECIMAL_CONTEXT.subtract(lhs, self._value))

    def __mul__(self, other: Operand) -> "DecimalValue":
        rhs = self._coerce(other)
        if rhs is NotImplemented:
            return NotImplemented
        return self._wrap(DECIMAL_CONTEXT.multiply(self._value, rhs))

    __rmul__ = __mul__

    def __truediv__(self, other: Operand) -> "DecimalValue":
        rhs = self._coerce(other)
        if rhs is NotImplemented:
            return NotImplemented
        return self._divide(self._value, rhs)

    def __rtruediv__(self, other: Operand) -> "DecimalValue":
        lhs = self._coerce(other)
        if lhs is NotImplemented:
            return NotImplemented
        return self._divide(lhs, self._value)

    @classmethod
    def _divide(cls, numerator: Decimal, denominator: Decimal) -> "DecimalValue":
        if denominator.is_zero():
            raise DivisionByZero(f"Division of {numerator:f} by zero")
        return cls._wrap(DECIMAL_CONTEXT.divide(numerator, denominator))

    def __neg__(self) -> "DecimalValue":
        return self._wrap(DECIMAL_CONTEXT.minus(self._value))

    def __abs__(self) -> "DecimalValue":
        return self._wrap(DECIMAL_CONTEXT.abs(self._value))

    def shift(self, places: int) -> "DecimalValue":
        """Multiply by 10 ** places exactly (e.g. ratio -> percent with 2)."""
        return self._wrap(self._value.scaleb(places, context=DECIMAL_CONTEXT))

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        rhs = self._coerce(other)
        if rhs is NotImplemented:
            return NotImplemented
        return self._value == rhs

    def __lt__(self, other) -> bool:
        rhs = self._coerce(other)
        if rhs is NotImplemented:
            return NotImplemented
        return self._value < rhs

    def __hash__(self) -> int:
        return hash(self._value)

    # ------------------------------------------------------------------
    # Boundary representations
    # ------------------------------------------------------------------

    def to_scaled(self, scale: int = STORAGE_SCALE) -> Tuple[int, int]:
        """Fixed-point (unscaled, scale) pair, rounded HALF_UP at ``scale``."""
        quantized = self._quantize(scale)
        return int(quantized.scaleb(scale, context=DECIMAL_CONTEXT)), scale

    def to_storage(self) -> str:
        """Fixed-point storage text with STORAGE_SCALE fractional digits."""
        return format(self._quantize(STORAGE_SCALE), "f")

    def to_api_string(self) -> str:
        """Full-precision plain decimal text; never scientific notation."""
        return format(self._value, "f")

    def _quantize(self, scale: int) -> Decimal:
        try:
            quantized = self._value.quantize(
                Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP, context=DECIMAL_CONTEXT
            )
        except InvalidOperation:
            raise PrecisionOverflow(f"Cannot represent {self.to_api_string()} at scale {scale}")
        if quantized.is_zero():
            quantized = quantized.copy_abs()
        return quantized

    def __str__(self) -> str:
        return self.to_api_string()

    def __repr__(self) -> str:
        return f"DecimalValue('{self.to_api_string()}')"
