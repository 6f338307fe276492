"""
Unit tests for the DecimalValue type.

Tests construction boundaries, exact arithmetic, limits and storage/API
representations.
"""

import pytest

from campaign_calc.core.decimal_value import MAX_SCALE, DecimalValue
from campaign_calc.core.errors import (
    DivisionByZero,
    InvalidDecimalLiteral,
    PrecisionOverflow,
)


class TestConstruction:
    """Test the input boundary."""

    def test_from_canonical_strings(self):
        """Verify canonical literals are accepted."""
        assert DecimalValue("120") == DecimalValue("120.00")
        assert DecimalValue("-2.5") == DecimalValue("-2.50")
        assert DecimalValue("+0.000001") == DecimalValue("0.000001")

    def test_from_int(self):
        """Verify integers are accepted exactly."""
        assert DecimalValue(50000) == DecimalValue("50000")

    @pytest.mark.parametrize("literal", ["", "abc", "1e5", "1.", ".5", " 1", "1 ", "NaN", "Infinity", "1,000", "--1"])
    def test_malformed_literals_rejected(self, literal):
        """Verify malformed literals raise InvalidDecimalLiteral."""
        with pytest.raises(InvalidDecimalLiteral):
            DecimalValue(literal)

    def test_invalid_literal_is_value_error(self):
        """Verify callers catching ValueError still see literal errors."""
        with pytest.raises(ValueError, match="Invalid decimal literal"):
            DecimalValue("12.3.4")

    def test_float_rejected(self):
        """Verify floats are never parsed."""
        with pytest.raises(TypeError):
            DecimalValue(0.1)

    def test_bool_rejected(self):
        """Verify bools are not treated as integers."""
        with pytest.raises(TypeError):
            DecimalValue(True)

    def test_from_scaled(self):
        """Verify (unscaled, scale) construction."""
        assert DecimalValue.from_scaled(12345, 2) == DecimalValue("123.45")
        assert DecimalValue.from_scaled(-5, 0) == DecimalValue("-5")
        assert DecimalValue.from_scaled(166667, 6) == DecimalValue("0.166667")

    def test_from_scaled_rejects_negative_scale(self):
        """Verify scale must be non-negative."""
        with pytest.raises(ValueError):
            DecimalValue.from_scaled(1, -1)

    def test_from_storage(self):
        """Verify storage text reads back exactly."""
        assert DecimalValue.from_storage("12.500000") == DecimalValue("12.5")


class TestArithmetic:
    """Test exact arithmetic."""

    def test_basic_operations(self):
        """Verify add, subtract, multiply and divide."""
        a = DecimalValue("0.1")
        b = DecimalValue("0.2")
        assert a + b == DecimalValue("0.3")
        assert b - a == DecimalValue("0.1")
        assert a * b == DecimalValue("0.02")
        assert b / a == DecimalValue("2")

    def test_int_operands(self):
        """Verify ints mix with DecimalValue on either side."""
        assert DecimalValue("2.5") * 2 == DecimalValue("5")
        assert 2 * DecimalValue("2.5") == DecimalValue("5")
        assert 1 - DecimalValue("0.25") == DecimalValue("0.75")
        assert 1 / DecimalValue("4") == DecimalValue("0.25")

    def test_sum_builtin(self):
        """Verify sum() works starting from int zero."""
        total = sum([DecimalValue("0.1")] * 10)
        assert total == DecimalValue("1")

    def test_float_operand_rejected(self):
        """Verify floats cannot enter arithmetic."""
        with pytest.raises(TypeError):
            DecimalValue("1.5") + 1.5
        with pytest.raises(TypeError):
            1.5 * DecimalValue("1.5")

    def test_no_float_conversion(self):
        """Verify a DecimalValue cannot be turned into a float."""
        with pytest.raises(TypeError):
            float(DecimalValue("1.5"))

    def test_division_keeps_precision(self):
        """Verify non-terminating division keeps MAX_SCALE digits."""
        third = DecimalValue(1) / DecimalValue(3)
        assert third.to_api_string() == "0." + "3" * MAX_SCALE
        two_thirds = DecimalValue(2) / DecimalValue(3)
        assert two_thirds.to_api_string() == "0." + "6" * (MAX_SCALE - 1) + "7"

    def test_division_by_zero(self):
        """Verify division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            DecimalValue("100") / DecimalValue("0")
        with pytest.raises(DivisionByZero):
            DecimalValue("0") / DecimalValue("0.000")

    def test_negation_and_abs(self):
        """Verify unary operations."""
        assert -DecimalValue("2.5") == DecimalValue("-2.5")
        assert abs(DecimalValue("-2.5")) == DecimalValue("2.5")

    def test_shift(self):
        """Verify power-of-ten shifts are exact."""
        assert DecimalValue("0.1666").shift(2) == DecimalValue("16.66")
        assert DecimalValue("2500").shift(-3) == DecimalValue("2.5")


class TestLimits:
    """Test magnitude and scale limits."""

    def test_max_integer_digits_accepted(self):
        """Verify 28 integer digits fit."""
        assert DecimalValue("9" * 28) > DecimalValue("0")

    def test_magnitude_overflow_on_input(self):
        """Verify 29 integer digits overflow."""
        with pytest.raises(PrecisionOverflow):
            DecimalValue("1" + "0" * 28)

    def test_magnitude_overflow_on_multiply(self):
        """Verify results beyond the limit overflow instead of truncating."""
        with pytest.raises(PrecisionOverflow):
            DecimalValue("1" + "0" * 20) * DecimalValue("1" + "0" * 10)

    def test_scale_overflow_on_input(self):
        """Verify literals finer than MAX_SCALE are rejected."""
        with pytest.raises(PrecisionOverflow):
            DecimalValue("0." + "0" * MAX_SCALE + "1")

    def test_overflow_is_arithmetic_error(self):
        """Verify PrecisionOverflow is an ArithmeticError."""
        with pytest.raises(ArithmeticError):
            DecimalValue.from_scaled(1, MAX_SCALE + 1)


class TestComparison:
    """Test ordering and hashing."""

    def test_ordering(self):
        """Verify comparisons across signs and scales."""
        assert DecimalValue("-1") < DecimalValue("0.5")
        assert DecimalValue("1.10") > DecimalValue("1.1") - DecimalValue("0.01")
        assert DecimalValue("2") >= 2
        assert max(DecimalValue("3"), DecimalValue("10")) == DecimalValue("10")

    def test_equal_values_hash_equal(self):
        """Verify numerically equal values collapse in sets."""
        assert len({DecimalValue("1.0"), DecimalValue("1"), DecimalValue(1)}) == 1

    def test_not_equal_to_other_types(self):
        """Verify comparison with strings is simply unequal."""
        assert DecimalValue("1") != "1"


class TestImmutability:
    """Test values cannot be changed."""

    def test_setattr_rejected(self):
        """Verify attributes cannot be set."""
        value = DecimalValue("1")
        with pytest.raises(AttributeError):
            value._value = None

    def test_operations_return_new_values(self):
        """Verify operands are unchanged by arithmetic."""
        a = DecimalValue("1.5")
        b = a + DecimalValue("1")
        assert a == DecimalValue("1.5")
        assert b is not a


class TestRepresentations:
    """Test storage and API boundaries."""

    def test_to_storage_pads_to_six_places(self):
        """Verify storage text has six fractional digits."""
        assert DecimalValue("0.02").to_storage() == "0.020000"
        assert DecimalValue("600").to_storage() == "600.000000"

    def test_to_storage_rounds_half_up(self):
        """Verify storage rounding is HALF_UP at six places."""
        assert DecimalValue("0.1234565").to_storage() == "0.123457"
        assert DecimalValue("-0.1234565").to_storage() == "-0.123457"

    def test_to_storage_drops_negative_zero(self):
        """Verify tiny negatives do not store as -0."""
        assert DecimalValue("-0.0000001").to_storage() == "0.000000"

    def test_to_scaled(self):
        """Verify fixed-point integer pair."""
        assert DecimalValue("123.4567895").to_scaled() == (123456790, 6)
        assert DecimalValue("-1.5").to_scaled(2) == (-150, 2)

    def test_to_scaled_beyond_working_precision(self):
        """Verify an unrepresentable scale is a typed overflow."""
        with pytest.raises(PrecisionOverflow):
            DecimalValue("1" + "0" * 27).to_scaled(40)

    def test_api_string_never_scientific(self):
        """Verify very large and very small values render plainly."""
        assert DecimalValue("12345678901234567890").to_api_string() == "12345678901234567890"
        assert DecimalValue("0.00000001").to_api_string() == "0.00000001"
        assert str(DecimalValue("100")) == "100"

    def test_repr(self):
        """Verify repr shows the literal."""
        assert repr(DecimalValue("1.50")) == "DecimalValue('1.50')"
