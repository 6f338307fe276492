"""
Versioned business formulas for campaign financials.

Every formula is a pure function of DecimalValue inputs. None of them
round, and none of them clamp negative values: zero-margin and
negative-margin line items are legitimate.
"""

from datetime import date
from typing import Iterable, Optional

from .decimal_value import DecimalValue
from .errors import DivisionByZero
from .versions import Calculation, CalculationVersion, CalculationVersionRegistry

# Absolute tolerance for comparing monetary sums (one cent)
DEFAULT_TOLERANCE = DecimalValue("0.01")


def _require_decimal(name: str, value) -> DecimalValue:
    if not isinstance(value, DecimalValue):
        raise TypeError(f"{name} must be a DecimalValue, got {type(value).__name__}")
    return value


def _ratio(label: str, numerator: DecimalValue, denominator: DecimalValue) -> DecimalValue:
    if denominator.is_zero():
        raise DivisionByZero(f"{label}: denominator is zero")
    return numerator / denominator


def margin_percentage(revenue: DecimalValue, cost: DecimalValue) -> DecimalValue:
    """Margin as a ratio of revenue: (revenue - cost) / revenue.

    Raises:
        DivisionByZero: If revenue is zero
    """
    _require_decimal("revenue", revenue)
    _require_decimal("cost", cost)
    return _ratio("marginPercentage", revenue - cost, revenue)


def margin_amount(revenue: DecimalValue, cost: DecimalValue) -> DecimalValue:
    _require_decimal("revenue", revenue)
    _require_decimal("cost", cost)
    return revenue - cost


def profit_amount(revenue: DecimalValue, cost: DecimalValue) -> DecimalValue:
    _require_decimal("revenue", revenue)
    _require_decimal("cost", cost)
    return revenue - cost


def markup_amount(cost: DecimalValue, markup_rate: DecimalValue) -> DecimalValue:
    """Markup on cost where markup_rate is a percentage (15 means 15%)."""
    _require_decimal("cost", cost)
    _require_decimal("markup_rate", markup_rate)
    return cost * markup_rate / 100


def actual_unit_cost(spend: DecimalValue, units: DecimalValue) -> DecimalValue:
    """Cost per delivered unit.

    Raises:
        DivisionByZero: If units is zero
    """
    _require_decimal("spend", spend)
    _require_decimal("units", units)
    return _ratio("actualUnitCost", spend, units)


def effective_cpm(spend: DecimalValue, impressions: DecimalValue) -> DecimalValue:
    """Cost per thousand impressions."""
    _require_decimal("spend", spend)
    _require_decimal("impressions", impressions)
    return _ratio("effectiveCpm", spend * 1000, impressions)


def pacing_index(actual: DecimalValue, on_pace_target: DecimalValue) -> DecimalValue:
    """Actual delivery against the on-schedule amount; 1 means exactly on pace.

    Raises:
        DivisionByZero: If the on-pace target is zero (degenerate schedule)
    """
    _require_decimal("actual", actual)
    _require_decimal("on_pace_target", on_pace_target)
    return _ratio("pacingIndex", actual, on_pace_target)


def delivery_pacing(delivered_units: DecimalValue, expected_units: DecimalValue) -> DecimalValue:
    """Delivered units against units expected by now."""
    _require_decimal("delivered_units", delivered_units)
    _require_decimal("expected_units", expected_units)
    return _ratio("deliveryPacing", delivered_units, expected_units)


def spend_pacing(actual_spend: DecimalValue, expected_spend: DecimalValue) -> DecimalValue:
    """Actual spend against spend expected by now."""
    _require_decimal("actual_spend", actual_spend)
    _require_decimal("expected_spend", expected_spend)
    return _ratio("spendPacing", actual_spend, expected_spend)


def on_pace_target(
    planned_total: DecimalValue,
    elapsed_days: DecimalValue,
    total_days: DecimalValue,
) -> DecimalValue:
    """Amount that should have been delivered after elapsed_days of an even schedule.

    Raises:
        DivisionByZero: If the schedule has zero duration
    """
    _require_decimal("planned_total", planned_total)
    _require_decimal("elapsed_days", elapsed_days)
    _require_decimal("total_days", total_days)
    return _ratio("onPaceTarget", planned_total * elapsed_days, total_days)


def compare_amounts(
    expected: DecimalValue,
    actual: DecimalValue,
    tolerance: DecimalValue = DEFAULT_TOLERANCE,
) -> bool:
    """Check two monetary amounts agree within an absolute tolerance.

    Sums of many line items drift by fractions of a cent, so monetary
    totals are never compared for exact equality.
    """
    _require_decimal("expected", expected)
    _require_decimal("actual", actual)
    _require_decimal("tolerance", tolerance)
    if tolerance.is_negative():
        raise ValueError("tolerance cannot be negative")
    return abs(expected - actual) <= tolerance


def aggregate_plan_cost(items: Iterable[DecimalValue]) -> DecimalValue:
    """Exact sum of plan budgets; no intermediate rounding."""
    total = DecimalValue(0)
    for index, item in enumerate(items):
        total = total + _require_decimal(f"items[{index}]", item)
    return total


def aggregate_plan_units(items: Iterable[Optional[DecimalValue]]) -> DecimalValue:
    """Exact sum of planned units; plans without planned units are skipped."""
    total = DecimalValue(0)
    for index, item in enumerate(items):
        if item is None:
            continue
        total = total + _require_decimal(f"items[{index}]", item)
    return total


V1_0_0 = CalculationVersion(
    version_id="1.0.0",
    effective_date=date(2025, 1, 1),
    description="Pure decimal calculations with rounding applied separately per context",
    calculations={
        "marginPercentage": Calculation(margin_percentage, "(revenue - cost) / revenue"),
        "marginAmount": Calculation(margin_amount, "revenue - cost"),
        "profitAmount": Calculation(profit_amount, "revenue - cost"),
        "markupAmount": Calculation(markup_amount, "cost * (markupRate / 100)"),
        "actualUnitCost": Calculation(actual_unit_cost, "spend / units"),
        "effectiveCpm": Calculation(effective_cpm, "(spend / impressions) * 1000"),
        "pacingIndex": Calculation(pacing_index, "actual / onPaceTarget"),
        "deliveryPacing": Calculation(delivery_pacing, "deliveredUnits / expectedUnits"),
        "spendPacing": Calculation(spend_pacing, "actualSpend / expectedSpend"),
        "onPaceTarget": Calculation(on_pace_target, "plannedTotal * elapsedDays / totalDays"),
        "compareAmounts": Calculation(compare_amounts, "|expected - actual| <= tolerance"),
        "aggregatePlanCost": Calculation(aggregate_plan_cost, "sum(plan.budget)", takes_sequence=True),
        "aggregatePlanUnits": Calculation(aggregate_plan_units, "sum(plan.plannedUnits)", takes_sequence=True),
    },
)

BUILTIN_VERSIONS = (V1_0_0,)


def build_default_registry() -> CalculationVersionRegistry:
    """Create a registry holding every built-in version, newest current."""
    registry = CalculationVersionRegistry()
    for version in BUILTIN_VERSIONS:
        registry.register(version, make_current=True)
    return registry
