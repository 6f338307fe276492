"""
Tests for the calculation service helpers.
"""

from datetime import date

import pytest

from campaign_calc import PacingStatus
from campaign_calc.core.decimal_value import DecimalValue
from campaign_calc.core.engine import create_engine
from campaign_calc.core.errors import DivisionByZero, UnknownCalculation
from campaign_calc.sdk import CalculationService


@pytest.fixture
def service():
    """Service over a fresh engine."""
    return CalculationService(create_engine())


class TestFormatUnitCost:
    """Test unit cost display."""

    def test_youtube_views_sub_cent(self, service):
        """Verify YouTube views show three decimal places."""
        display = service.format_unit_cost(DecimalValue("100"), DecimalValue("4321"), "youtube", "views")
        assert display.value == "0.023"
        assert display.display_text == "$0.023 CPV"
        assert display.precision == 3
        assert display.calculation_version == "1.0.0"

    def test_platform_is_case_insensitive(self, service):
        """Verify platform and unit names are lowercased for lookup."""
        display = service.format_unit_cost(DecimalValue("100"), DecimalValue("4321"), "Facebook", "Video")
        assert display.value == "0.0231"

    def test_generic_platform(self, service):
        """Verify platforms without overrides use display precision."""
        display = service.format_unit_cost(DecimalValue("100"), DecimalValue("50"), "twitter", "clicks")
        assert display.value == "2.00"
        assert display.display_text == "$2.00 CPC"

    def test_without_platform(self, service):
        """Verify the bare price is shown without a unit type."""
        display = service.format_unit_cost(DecimalValue("10"), DecimalValue("4"))
        assert display.display_text == "$2.50"

    def test_zero_units(self, service):
        """Verify zero units is a division error."""
        with pytest.raises(DivisionByZero):
            service.format_unit_cost(DecimalValue("100"), DecimalValue("0"), "youtube", "views")


class TestCalculateForStorage:
    """Test storage-ready values."""

    def test_fixed_point_pair(self, service):
        """Verify string and scaled-integer storage forms agree."""
        stored = service.calculate_for_storage("marginPercentage", DecimalValue("1000"), DecimalValue("750"))
        assert stored.string_value == "0.250000"
        assert stored.unscaled == 250000
        assert stored.scale == 6
        assert stored.calculation_version == "1.0.0"
        assert DecimalValue.from_scaled(stored.unscaled, stored.scale) == DecimalValue.from_storage(stored.string_value)

    def test_rounds_half_up_at_six_places(self, service):
        """Verify storage rounding of a repeating ratio."""
        stored = service.calculate_for_storage("marginPercentage", DecimalValue("120"), DecimalValue("100"))
        assert stored.string_value == "0.166667"
        assert stored.unscaled == 166667

    def test_negative_values(self, service):
        """Verify losses store with their sign."""
        stored = service.calculate_for_storage("marginAmount", DecimalValue("100"), DecimalValue("150.5"))
        assert stored.string_value == "-50.500000"
        assert stored.unscaled == -50500000

    def test_unknown_calculation(self, service):
        """Verify unknown names propagate the engine error."""
        with pytest.raises(UnknownCalculation):
            service.calculate_for_storage("grossUp", DecimalValue("1"))

    def test_boolean_result(self, service):
        """Verify comparisons cannot be stored as decimals."""
        with pytest.raises(TypeError):
            service.calculate_for_storage("compareAmounts", DecimalValue("1"), DecimalValue("1"))


class TestPacingStatus:
    """Test flight pacing."""

    def test_behind_schedule(self, service):
        """Verify target, index and status half way through a flight."""
        report = service.pacing_status(
            DecimalValue("3000"), DecimalValue("1350"),
            date(2025, 1, 1), date(2025, 1, 31), date(2025, 1, 16),
        )
        assert report.on_pace_target == "1500.00"
        assert report.pacing_index == "90.00"
        assert report.status == PacingStatus.BEHIND
        assert (report.elapsed_days, report.total_days) == (15, 30)
        assert report.calculation_version == "1.0.0"

    def test_ahead_of_schedule(self, service):
        """Verify over-delivery is flagged as ahead."""
        report = service.pacing_status(
            DecimalValue("3000"), DecimalValue("2000"),
            date(2025, 1, 1), date(2025, 1, 31), date(2025, 1, 16),
        )
        assert report.pacing_index == "133.33"
        assert report.status == PacingStatus.AHEAD

    def test_after_flight_uses_full_plan(self, service):
        """Verify the whole plan is expected once the flight has ended."""
        report = service.pacing_status(
            DecimalValue("3000"), DecimalValue("3000"),
            date(2025, 1, 1), date(2025, 1, 31), date(2025, 6, 1),
        )
        assert report.on_pace_target == "3000.00"
        assert report.status == PacingStatus.ON_PACE

    def test_before_flight_starts(self, service):
        """Verify nothing can be paced before the flight starts."""
        with pytest.raises(DivisionByZero):
            service.pacing_status(
                DecimalValue("3000"), DecimalValue("0"),
                date(2025, 1, 1), date(2025, 1, 31), date(2024, 12, 1),
            )

    def test_inverted_flight(self, service):
        """Verify flights ending before they start are rejected."""
        with pytest.raises(ValueError, match="before start"):
            service.pacing_status(
                DecimalValue("3000"), DecimalValue("0"),
                date(2025, 1, 31), date(2025, 1, 1), date(2025, 1, 15),
            )
