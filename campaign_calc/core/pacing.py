"""
Pacing schedule helpers.

Turns flight dates into the elapsed/total day counts that feed
onPaceTarget, and classifies a pacing index into a status.
"""

from datetime import date
from enum import Enum
from typing import Tuple

from .decimal_value import DecimalValue


class PacingStatus(Enum):
    """Delivery status derived from a pacing index (1 = on schedule)."""
    AT_RISK = "at_risk"
    BEHIND = "behind"
    ON_PACE = "on_pace"
    AHEAD = "ahead"


AT_RISK_BELOW = DecimalValue("0.80")
BEHIND_BELOW = DecimalValue("0.95")
AHEAD_ABOVE = DecimalValue("1.20")


def schedule_days(start: date, end: date, as_of: date) -> Tuple[DecimalValue, DecimalValue]:
    """Elapsed and total days of a flight as of a given date.

    Elapsed days are clamped to the flight: zero before it starts and the
    full duration once it has ended.

    Returns:
        (elapsed_days, total_days)

    Raises:
        ValueError: If the flight ends before it starts
    """
    if end < start:
        raise ValueError(f"Flight end {end.isoformat()} is before start {start.isoformat()}")

    total = (end - start).days
    if as_of <= start:
        elapsed = 0
    elif as_of >= end:
        elapsed = total
    else:
        elapsed = (as_of - start).days

    return DecimalValue(elapsed), DecimalValue(total)


def classify_pacing(index: DecimalValue) -> PacingStatus:
    """Classify a pacing index.

    Below 0.80 is at risk, below 0.95 is behind, above 1.20 is ahead;
    anything in between is on pace.
    """
    if not isinstance(index, DecimalValue):
        raise TypeError(f"index must be a DecimalValue, got {type(index).__name__}")
    if index < AT_RISK_BELOW:
        return PacingStatus.AT_RISK
    if index < BEHIND_BELOW:
        return PacingStatus.BEHIND
    if index > AHEAD_ABOVE:
        return PacingStatus.AHEAD
    return PacingStatus.ON_PACE
