"""
Unit price display.

Renders a full-precision unit price the way media buyers read it:
impressions as CPM, clicks as CPC, views as CPV and so on.
"""

from dataclasses import dataclass
from typing import Dict

from .decimal_value import DecimalValue
from .rounding import RoundingPolicyTable, apply


@dataclass(frozen=True)
class UnitPricing:
    """How a unit type is displayed."""
    display_unit: str  # e.g. "CPM"
    multiplier: int  # price per `multiplier` units
    product_type: str


@dataclass(frozen=True)
class PricingDisplay:
    """Display strings for one unit price."""
    unit_price: str  # storage precision
    display_price: str
    display_format: str
    display_unit: str


@dataclass(frozen=True)
class UnitPricingTable:
    """Fixed mapping from unit type to display convention."""
    units: Dict[str, UnitPricing]

    def get_pricing(self, unit_type: str) -> UnitPricing:
        """Get the display convention for a unit type.

        Unknown unit types fall back to a generic cost display.
        """
        return self.units.get(unit_type.lower(), GENERIC_COST)


GENERIC_COST = UnitPricing(display_unit="Cost", multiplier=1, product_type="unknown")

_CPM = UnitPricing(display_unit="CPM", multiplier=1000, product_type="cpm")
_CPC = UnitPricing(display_unit="CPC", multiplier=1, product_type="cpc")
_CPV = UnitPricing(display_unit="CPV", multiplier=1, product_type="cpv")
_CPA = UnitPricing(display_unit="CPA", multiplier=1, product_type="cpa")
_CPE = UnitPricing(display_unit="CPE", multiplier=1, product_type="cpe")

UNIT_PRICING_TABLE = UnitPricingTable({
    "impressions": _CPM,
    "impression": _CPM,
    "clicks": _CPC,
    "click": _CPC,
    "views": _CPV,
    "view": _CPV,
    "video_views": _CPV,
    "conversions": _CPA,
    "conversion": _CPA,
    "engagements": _CPE,
    "engagement": _CPE,
})


def infer_product_type(unit_type) -> str:
    """Product type (cpm, cpc, cpv, ...) for a unit type; "unknown" if none."""
    if not unit_type:
        return GENERIC_COST.product_type
    return UNIT_PRICING_TABLE.get_pricing(unit_type).product_type


def format_unit_price(
    price: DecimalValue,
    unit_type: str,
    policies: RoundingPolicyTable,
) -> PricingDisplay:
    """Format a per-unit price for display.

    Impression prices are shown per thousand (CPM) and rounded with the
    "cpm" policy; all other unit prices use "display.dollars". The
    unrounded price is kept at storage precision.

    Args:
        price: Full-precision price of a single unit
        unit_type: Unit type, e.g. "impressions", "clicks"
        policies: Rounding policy table

    Returns:
        PricingDisplay strings
    """
    pricing = UNIT_PRICING_TABLE.get_pricing(unit_type)
    unit_price = apply(price, policies.resolve("storage"))

    if pricing.display_unit == "CPM":
        display_price = apply(price * pricing.multiplier, policies.resolve("cpm"))
    else:
        display_price = apply(price * pricing.multiplier, policies.resolve("display.dollars"))

    if pricing is GENERIC_COST:
        display_format = f"${display_price}"
    else:
        display_format = f"${display_price} {pricing.display_unit}"

    return PricingDisplay(
        unit_price=unit_price,
        display_price=display_price,
        display_format=display_format,
        display_unit=pricing.display_unit,
    )
