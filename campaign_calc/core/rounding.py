"""
Rounding policies for financial contexts.

Calculation results are kept at full precision; rounding is applied
afterwards, once per destination (storage, display, a platform/unit
combination). A context that resolves to no rule is a configuration
error, never a silent default.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional

from .decimal_value import DecimalValue, DECIMAL_CONTEXT, MAX_SCALE
from .errors import PrecisionOverflow, UnknownRoundingContext


class RoundingMode(Enum):
    """Supported rounding modes.

    HALF_UP rounds a trailing 5 away from zero (2.5 -> 3, -2.5 -> -3);
    HALF_EVEN rounds it to the even neighbour; DOWN truncates toward zero;
    UP rounds away from zero.
    """
    HALF_UP = "half_up"
    HALF_EVEN = "half_even"
    DOWN = "down"
    UP = "up"

    @property
    def decimal_rounding(self) -> str:
        return _DECIMAL_ROUNDING[self]


_DECIMAL_ROUNDING = {
    RoundingMode.HALF_UP: ROUND_HALF_UP,
    RoundingMode.HALF_EVEN: ROUND_HALF_EVEN,
    RoundingMode.DOWN: ROUND_DOWN,
    RoundingMode.UP: ROUND_UP,
}


@dataclass(frozen=True)
class RoundingRule:
    """Number of decimal places and the mode used to reach them."""
    places: int
    mode: RoundingMode = RoundingMode.HALF_UP

    def __post_init__(self):
        """Validate places is a non-negative integer."""
        if isinstance(self.places, bool) or not isinstance(self.places, int):
            raise ValueError("places must be an integer")
        if self.places < 0:
            raise ValueError("places cannot be negative")
        if self.places > MAX_SCALE:
            raise ValueError(f"places cannot exceed {MAX_SCALE}")
        if not isinstance(self.mode, RoundingMode):
            raise ValueError(f"mode must be a RoundingMode, got {self.mode!r}")


@dataclass(frozen=True)
class RoundingPolicyTable:
    """Static mapping from rounding context to rule.

    ``rules`` holds generic contexts ("storage", "display.dollars").
    ``overrides`` holds compound "<platform>:<unitType>" keys that take
    precedence over the generic rule, except for ``fixed_contexts``.
    ``percent_contexts`` name contexts whose ratios are shown as percentages.
    """
    rules: Mapping[str, RoundingRule]
    overrides: Mapping[str, RoundingRule] = field(default_factory=dict)
    percent_contexts: FrozenSet[str] = frozenset()
    fixed_contexts: FrozenSet[str] = frozenset()

    def __post_init__(self):
        """Freeze the rule mappings."""
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))
        object.__setattr__(self, "percent_contexts", frozenset(self.percent_contexts))
        object.__setattr__(self, "fixed_contexts", frozenset(self.fixed_contexts))

    def resolve(self, context: str, compound: Optional[str] = None) -> RoundingRule:
        """Resolve the rounding rule for a context.

        Resolution order:
        1. Exact compound match (``compound``, or ``context`` itself when it
           is a compound key), unless the context is fixed
        2. Generic context match
        3. UnknownRoundingContext

        Args:
            context: Rounding context, e.g. "display" or "youtube:views"
            compound: Optional "<platform>:<unitType>" key of the value

        Returns:
            The matching RoundingRule

        Raises:
            UnknownRoundingContext: If nothing matches
        """
        return self.resolve_with_key(context, compound)[1]

    def resolve_with_key(self, context: str, compound: Optional[str] = None):
        """Like resolve(), also returning the key that matched."""
        if context not in self.fixed_contexts:
            for key in (compound, context):
                if key is not None and key in self.overrides:
                    return key, self.overrides[key]
        if context in self.rules:
            return context, self.rules[context]
        raise UnknownRoundingContext(context)

    def is_percent(self, context: str) -> bool:
        return context in self.percent_contexts

    def contexts(self) -> Dict[str, RoundingRule]:
        """All generic and compound keys with their rules."""
        merged = dict(self.rules)
        merged.update(self.overrides)
        return merged


def apply(value: DecimalValue, rule: RoundingRule) -> str:
    """Round a value to ``rule.places`` using ``rule.mode``.

    Rounding is done on the decimal digits themselves, so halves are
    exact (no binary float is involved).

    Returns:
        Fixed-point text with exactly ``rule.places`` fractional digits

    Raises:
        PrecisionOverflow: If the rounded value does not fit the working precision
    """
    quantum = Decimal(1).scaleb(-rule.places)
    try:
        rounded = value.decimal.quantize(
            quantum, rounding=rule.mode.decimal_rounding, context=DECIMAL_CONTEXT
        )
    except InvalidOperation:
        raise PrecisionOverflow(f"Cannot round {value} to {rule.places} places")
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return format(rounded, "f")


def default_policy_table(mode: RoundingMode = RoundingMode.HALF_UP) -> RoundingPolicyTable:
    """Build the built-in policy table with every rule in ``mode``."""
    rules = {
        "storage": RoundingRule(6, mode),
        "display": RoundingRule(2, mode),
        "display.dollars": RoundingRule(2, mode),
        "display.subcent": RoundingRule(3, mode),
        "unit.cost": RoundingRule(4, mode),
        "percentage": RoundingRule(2, mode),
        "cpm": RoundingRule(2, mode),
        "api": RoundingRule(2, mode),
    }
    overrides = {
        "youtube:views": RoundingRule(3, mode),
        "facebook:video": RoundingRule(4, mode),
    }
    return RoundingPolicyTable(
        rules=rules,
        overrides=overrides,
        percent_contexts=frozenset({"percentage"}),
        fixed_contexts=frozenset({"storage", "percentage"}),
    )


DEFAULT_POLICY_TABLE = default_policy_table()
