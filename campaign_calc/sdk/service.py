"""
Convenience service over the calculation engine.

Bundles the calculate-then-round sequence collaborators repeat most:
unit costs for display and values for persistence, plus flight pacing.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.decimal_value import DecimalValue
from ..core.engine import CalculationEngine
from ..core.pacing import PacingStatus, classify_pacing, schedule_days
from ..core.pricing import GENERIC_COST, UNIT_PRICING_TABLE


@dataclass(frozen=True)
class DisplayValue:
    """Rounded value ready for a UI label."""
    value: str
    display_text: str
    calculation_version: str
    precision: int


@dataclass(frozen=True)
class StorageValue:
    """Fixed-point value ready for persistence."""
    string_value: str
    unscaled: int
    scale: int
    calculation_version: str
    calculated_at: datetime


@dataclass(frozen=True)
class PacingValue:
    """Pacing of a flight as of one date."""
    on_pace_target: str
    pacing_index: str  # percent of on-pace delivery
    status: PacingStatus
    elapsed_days: int
    total_days: int
    calculation_version: str


class CalculationService:
    """Engine helpers for route handlers and reporting jobs.

    Holds no state beyond the engine it wraps.
    """

    def __init__(self, engine: CalculationEngine):
        self.engine = engine

    def format_unit_cost(
        self,
        spend: DecimalValue,
        units: DecimalValue,
        platform: Optional[str] = None,
        unit_type: Optional[str] = None,
    ) -> DisplayValue:
        """Compute spend / units and round it for display.

        Platform/unit overrides (e.g. sub-cent YouTube CPV) apply when both
        platform and unit_type are given.

        Raises:
            DivisionByZero: If units is zero
        """
        compound = None
        if platform and unit_type:
            compound = f"{platform.lower()}:{unit_type.lower()}"

        result = self.engine.calculate("actualUnitCost", spend, units, context=compound)
        rounded = self.engine.with_precision(result, "display")

        display_text = f"${rounded.formatted_value}"
        if unit_type:
            pricing = UNIT_PRICING_TABLE.get_pricing(unit_type)
            if pricing is not GENERIC_COST:
                display_text = f"{display_text} {pricing.display_unit}"

        return DisplayValue(
            value=rounded.formatted_value,
            display_text=display_text,
            calculation_version=result.calculation_version,
            precision=rounded.precision,
        )

    def calculate_for_storage(self, name: str, *args, version: Optional[str] = None, **kwargs) -> StorageValue:
        """Run a calculation and round it with the storage policy.

        Raises:
            UnknownCalculation: If the calculation does not exist
            TypeError: If the calculation does not produce a decimal
        """
        result = self.engine.calculate(name, *args, version=version, **kwargs)
        rounded = self.engine.with_precision(result, "storage")
        stored = DecimalValue.from_storage(rounded.formatted_value)
        unscaled, scale = stored.to_scaled(rounded.precision)

        return StorageValue(
            string_value=rounded.formatted_value,
            unscaled=unscaled,
            scale=scale,
            calculation_version=result.calculation_version,
            calculated_at=result.calculated_at,
        )

    def pacing_status(
        self,
        planned_total: DecimalValue,
        actual: DecimalValue,
        start: date,
        end: date,
        as_of: date,
        version: Optional[str] = None,
    ) -> PacingValue:
        """Compare delivery so far against an even flight schedule.

        Runs onPaceTarget then pacingIndex with the same version and
        classifies the index.

        Raises:
            ValueError: If the flight ends before it starts
            DivisionByZero: If nothing is expected yet (flight not started
                or zero-length)
        """
        elapsed_days, total_days = schedule_days(start, end, as_of)
        target = self.engine.calculate(
            "onPaceTarget", planned_total, elapsed_days, total_days, version=version
        )
        index = self.engine.calculate(
            "pacingIndex", actual, target.value, version=target.calculation_version
        )

        return PacingValue(
            on_pace_target=self.engine.with_precision(target, "display.dollars").formatted_value,
            pacing_index=self.engine.with_precision(index, "percentage").formatted_value,
            status=classify_pacing(index.value),
            elapsed_days=int(elapsed_days.decimal),
            total_days=int(total_days.decimal),
            calculation_version=index.calculation_version,
        )
