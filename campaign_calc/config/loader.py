"""
Configuration management and loading.

Loads rounding policies from YAML on top of the built-in policy table.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable

import yaml

from campaign_calc.core.decimal_value import MAX_SCALE
from campaign_calc.core.rounding import (
    RoundingMode,
    RoundingPolicyTable,
    RoundingRule,
    default_policy_table,
)

logger = logging.getLogger(__name__)

_ALLOWED_TOP_KEYS = {'default_mode', 'contexts', 'overrides', 'percent_contexts', 'fixed_contexts'}
_ALLOWED_RULE_KEYS = {'places', 'mode'}


def load_rounding_config(path: str) -> RoundingPolicyTable:
    """Load and validate rounding policies from a YAML file.

    Strict validation ensures no silent misconfiguration: rounding a
    financial value with the wrong precision is worse than failing to start.
    Entries in the file add to, or replace, the built-in contexts; the
    built-in minimum contexts are always present.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated RoundingPolicyTable

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Rounding config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    table = parse_rounding_config(raw_config)
    logger.info(
        "Loaded rounding config from %s (%d contexts, %d overrides)",
        path,
        len(table.rules),
        len(table.overrides),
    )
    return table


def parse_rounding_config(raw_config: Dict[str, Any]) -> RoundingPolicyTable:
    """Build a policy table from an already-parsed configuration mapping.

    Raises:
        ValueError: If configuration is invalid
    """
    unknown_keys = set(raw_config.keys()) - _ALLOWED_TOP_KEYS
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    default_mode = RoundingMode.HALF_UP
    if 'default_mode' in raw_config:
        default_mode = _parse_mode(raw_config['default_mode'], "default_mode")

    base = default_policy_table(default_mode)
    rules = dict(base.rules)
    overrides = dict(base.overrides)

    contexts_data = raw_config.get('contexts') or {}
    if not isinstance(contexts_data, dict):
        raise ValueError("'contexts' must be a dictionary")
    for context, rule_data in contexts_data.items():
        if ':' in str(context):
            raise ValueError(f"Context '{context}' looks compound; put it under 'overrides'")
        rules[str(context)] = _parse_rule(rule_data, f"contexts.{context}", default_mode)

    overrides_data = raw_config.get('overrides') or {}
    if not isinstance(overrides_data, dict):
        raise ValueError("'overrides' must be a dictionary")
    for key, rule_data in overrides_data.items():
        platform, _, unit_type = str(key).partition(':')
        if not platform or not unit_type:
            raise ValueError(f"Override key '{key}' must look like '<platform>:<unitType>'")
        overrides[str(key)] = _parse_rule(rule_data, f"overrides.{key}", default_mode)

    percent_contexts = set(base.percent_contexts)
    percent_contexts.update(_parse_context_list(raw_config, 'percent_contexts', rules))
    fixed_contexts = set(base.fixed_contexts)
    fixed_contexts.update(_parse_context_list(raw_config, 'fixed_contexts', rules))

    return RoundingPolicyTable(
        rules=rules,
        overrides=overrides,
        percent_contexts=frozenset(percent_contexts),
        fixed_contexts=frozenset(fixed_contexts),
    )


def _parse_rule(data: Any, path: str, default_mode: RoundingMode) -> RoundingRule:
    """Parse and validate one rounding rule.

    Args:
        data: Rule data from YAML
        path: Path for error messages
        default_mode: Mode used when the rule names none

    Returns:
        Validated RoundingRule

    Raises:
        ValueError: If the rule is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"Rule '{path}' must be a dictionary")

    unknown_keys = set(data.keys()) - _ALLOWED_RULE_KEYS
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    if 'places' not in data:
        raise ValueError(f"Missing required 'places' in {path}")

    places = data['places']
    if isinstance(places, bool) or not isinstance(places, int) or places < 0:
        raise ValueError(f"'places' in {path} must be a non-negative integer")
    if places > MAX_SCALE:
        raise ValueError(f"'places' in {path} cannot exceed {MAX_SCALE}")

    mode = default_mode
    if 'mode' in data:
        mode = _parse_mode(data['mode'], f"{path}.mode")

    return RoundingRule(places=places, mode=mode)


def _parse_mode(value: Any, path: str) -> RoundingMode:
    if not isinstance(value, str):
        raise ValueError(f"'{path}' must be a string")
    try:
        return RoundingMode(value.lower())
    except ValueError:
        valid_modes = [mode.value for mode in RoundingMode]
        raise ValueError(f"'{path}' must be one of: {valid_modes}")


def _parse_context_list(raw_config: Dict[str, Any], key: str, known: Iterable[str]) -> set:
    values = raw_config.get(key) or []
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ValueError(f"'{key}' must be a list of context names")
    unknown = set(values) - set(known)
    if unknown:
        raise ValueError(f"'{key}' names undefined contexts: {unknown}")
    return set(values)
