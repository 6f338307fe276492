"""
Calculation engine facade.

Single entry point for collaborators: resolve a calculation version, run a
pure calculation, and wrap the full-precision value with audit metadata.
Rounding for a destination is a second, independent step that never
re-executes the calculation.

Usage:
    engine = create_engine()
    result = engine.calculate("marginPercentage", DecimalValue("120"), DecimalValue("100"))
    engine.with_precision(result, "storage").formatted_value     # '0.166667'
    engine.with_precision(result, "percentage").formatted_value  # '16.67'
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Optional, Union

from campaign_calc.config.loader import load_rounding_config

from .decimal_value import DecimalValue
from .errors import UnknownCalculation
from .formulas import build_default_registry
from .rounding import DEFAULT_POLICY_TABLE, RoundingPolicyTable, apply
from .versions import CalculationVersion, CalculationVersionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    """Full-precision output of one calculation call. Never mutated."""
    value: Union[DecimalValue, bool]
    calculation_name: str
    calculation_version: str
    calculated_at: datetime
    formula: str
    context: Optional[str] = None  # "<platform>:<unitType>" of the value, if any

    def with_context(self, context: Optional[str]) -> "CalculationResult":
        """Copy of this result tagged with a platform/unit context."""
        return replace(self, context=context)


@dataclass(frozen=True)
class RoundedValue:
    """A CalculationResult rounded for one destination."""
    formatted_value: str
    precision: int
    source_result: CalculationResult
    context: str
    applied_rule: str  # policy key that supplied the rule


class CalculationEngine:
    """Stateless facade bound to a version registry and a rounding policy table.

    Construct one per process (or per test) and pass it to collaborators.
    """

    def __init__(
        self,
        registry: CalculationVersionRegistry,
        policies: RoundingPolicyTable = DEFAULT_POLICY_TABLE,
    ):
        self.registry = registry
        self.policies = policies

    def calculate(
        self,
        name: str,
        *args,
        version: Optional[str] = None,
        context: Optional[str] = None,
        **kwargs,
    ) -> CalculationResult:
        """Run a named calculation at full precision.

        Args:
            name: Calculation name, e.g. "marginPercentage"
            *args: DecimalValue inputs (one sequence for aggregate calculations)
            version: Version id to use; the current version when omitted
            context: Optional "<platform>:<unitType>" tag for later rounding
            **kwargs: Keyword inputs such as ``tolerance`` for compareAmounts

        Returns:
            CalculationResult with value, version id, timestamp and formula

        Raises:
            UnknownVersion: If the version is not registered
            UnknownCalculation: If the version has no such calculation
            DivisionByZero: If the calculation divides by zero
        """
        calculation_version = self.registry.get(version)
        calculation = calculation_version.get_calculation(name)
        if calculation is None:
            raise UnknownCalculation(name, calculation_version.version_id)

        deprecated = calculation_version.deprecated
        if deprecated is not None and deprecated <= date.today():
            logger.warning(
                "Calculation %s uses version %s, deprecated since %s",
                name,
                calculation_version.version_id,
                deprecated.isoformat(),
            )

        value = calculation.fn(*args, **kwargs)
        logger.debug(
            "Calculated %s with version %s: %s", name, calculation_version.version_id, value
        )

        return CalculationResult(
            value=value,
            calculation_name=name,
            calculation_version=calculation_version.version_id,
            calculated_at=datetime.now(timezone.utc),
            formula=calculation.formula,
            context=context,
        )

    def with_precision(
        self,
        result: CalculationResult,
        context: str,
        override: Optional[str] = None,
    ) -> RoundedValue:
        """Round an already-computed result for a destination context.

        The source result is left untouched, so one result can be rounded
        for storage and again for display without double rounding.

        Args:
            result: Full-precision calculation result
            context: Rounding context ("storage", "display.dollars", ...)
            override: Optional policy context whose rule replaces the resolved one

        Returns:
            RoundedValue with fixed-point text

        Raises:
            UnknownRoundingContext: If no rule matches
            TypeError: If the result is not a decimal value
        """
        if not isinstance(result.value, DecimalValue):
            raise TypeError(
                f"{result.calculation_name} result is {type(result.value).__name__}, "
                "only decimal results can be rounded"
            )

        if override is not None:
            rule = self.policies.resolve(override)
            applied_rule = f"override:{override}"
            # the destination must still be a known context
            self.policies.resolve(context)
        else:
            applied_rule, rule = self.policies.resolve_with_key(context, result.context)

        value = result.value
        if self.policies.is_percent(context):
            value = value.shift(2)

        return RoundedValue(
            formatted_value=apply(value, rule),
            precision=rule.places,
            source_result=result,
            context=context,
            applied_rule=applied_rule,
        )

    # Registry passthroughs for collaborators holding only the engine

    def register_version(self, version: CalculationVersion, make_current: bool = False) -> None:
        self.registry.register(version, make_current=make_current)

    def get_version(self, version_id: Optional[str] = None) -> CalculationVersion:
        return self.registry.get(version_id)

    def set_current_version(self, version_id: str) -> None:
        self.registry.set_current(version_id)


def create_engine(
    config_path: Optional[str] = None,
    registry: Optional[CalculationVersionRegistry] = None,
) -> CalculationEngine:
    """Build an isolated engine.

    Args:
        config_path: Optional rounding-policy YAML file; built-in policies otherwise
        registry: Optional registry; a fresh one with built-in versions otherwise

    Returns:
        CalculationEngine ready for use
    """
    if config_path is not None:
        policies = load_rounding_config(config_path)
    else:
        policies = DEFAULT_POLICY_TABLE

    return CalculationEngine(
        registry=registry if registry is not None else build_default_registry(),
        policies=policies,
    )
