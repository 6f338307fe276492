"""
Tests for flight schedule helpers and pacing status.
"""

from datetime import date

import pytest

from campaign_calc.core.decimal_value import DecimalValue
from campaign_calc.core.engine import create_engine
from campaign_calc.core.errors import DivisionByZero
from campaign_calc.core.pacing import PacingStatus, classify_pacing, schedule_days

START = date(2025, 1, 1)
END = date(2025, 1, 31)


class TestScheduleDays:
    """Test elapsed/total day counts."""

    def test_mid_flight(self):
        """Verify elapsed days part way through a flight."""
        assert schedule_days(START, END, date(2025, 1, 11)) == (DecimalValue(10), DecimalValue(30))

    def test_before_start_clamps_to_zero(self):
        """Verify nothing is expected before the flight starts."""
        elapsed, total = schedule_days(START, END, date(2024, 12, 15))
        assert elapsed.is_zero()
        assert total == DecimalValue(30)

    def test_after_end_clamps_to_total(self):
        """Verify everything is expected once the flight has ended."""
        elapsed, total = schedule_days(START, END, date(2025, 3, 1))
        assert elapsed == total

    def test_end_before_start(self):
        """Verify inverted flights are rejected."""
        with pytest.raises(ValueError, match="before start"):
            schedule_days(END, START, START)

    def test_single_day_flight_has_no_target(self):
        """Verify a zero-length flight cannot produce an on-pace target."""
        elapsed, total = schedule_days(START, START, START)
        engine = create_engine()
        with pytest.raises(DivisionByZero):
            engine.calculate("onPaceTarget", DecimalValue("1000"), elapsed, total)

    def test_feeds_pacing_index(self):
        """Verify schedule days chain into the pacing calculations."""
        engine = create_engine()
        elapsed, total = schedule_days(START, END, date(2025, 1, 16))
        target = engine.calculate("onPaceTarget", DecimalValue("3000"), elapsed, total).value
        index = engine.calculate("pacingIndex", DecimalValue("1350"), target).value
        assert target == DecimalValue("1500")
        assert index == DecimalValue("0.9")
        assert classify_pacing(index) == PacingStatus.BEHIND


class TestClassifyPacing:
    """Test pacing status thresholds."""

    @pytest.mark.parametrize("index, status", [
        ("0", PacingStatus.AT_RISK),
        ("0.79", PacingStatus.AT_RISK),
        ("0.80", PacingStatus.BEHIND),
        ("0.9499", PacingStatus.BEHIND),
        ("0.95", PacingStatus.ON_PACE),
        ("1", PacingStatus.ON_PACE),
        ("1.20", PacingStatus.ON_PACE),
        ("1.2001", PacingStatus.AHEAD),
    ])
    def test_thresholds(self, index, status):
        """Verify each band boundary."""
        assert classify_pacing(DecimalValue(index)) == status

    def test_non_decimal_rejected(self):
        """Verify floats are not classified."""
        with pytest.raises(TypeError):
            classify_pacing(0.9)
