# mlm_system/config/mlm_config.py
"""
MLM configuration value object.

Stored as key/value rows in system_config and read once per computation;
services receive the snapshot instead of reading shared state mid-walk.
"""
from dataclasses import dataclass, replace, fields
from enum import Enum
from typing import Dict

import config
from mlm_system.errors import ConfigurationError


class StructureMode(Enum):
    BINARY = "binary"
    UNILEVEL = "unilevel"


class PvCalculation(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


MIN_CUTOFF_DAY, MAX_CUTOFF_DAY = 1, 31
MIN_DEPTH, MAX_DEPTH = 1, 10

# system_config key -> поле MlmConfiguration
CONFIG_KEYS = {
    "mlm_structure": "structureMode",
    "pv_calculation": "pvCalculation",
    "performance_bonus_enabled": "performanceBonusEnabled",
    "monthly_cutoff_day": "monthlyCutoffDay",
    "binary_max_depth": "binaryMaxDepth",
    "unilevel_max_depth": "unilevelMaxDepth",
}

CONFIG_DESCRIPTIONS = {
    "mlm_structure": "MLM structure type: binary or unilevel",
    "pv_calculation": "PV calculation method: percentage or fixed",
    "performance_bonus_enabled": "Whether performance bonus is enabled",
    "monthly_cutoff_day": "Day of month for commission cutoff",
    "binary_max_depth": "Maximum depth for binary structure",
    "unilevel_max_depth": "Maximum depth for unilevel structure",
}


@dataclass(frozen=True)
class MlmConfiguration:
    structureMode: StructureMode = StructureMode.BINARY
    pvCalculation: PvCalculation = PvCalculation.PERCENTAGE
    performanceBonusEnabled: bool = False
    monthlyCutoffDay: int = 25
    binaryMaxDepth: int = 6
    unilevelMaxDepth: int = 6

    @property
    def maxDepth(self) -> int:
        """Depth limit for the active structure mode."""
        if self.structureMode == StructureMode.BINARY:
            return self.binaryMaxDepth
        return self.unilevelMaxDepth

    @classmethod
    def defaults(cls) -> "MlmConfiguration":
        return cls.fromMapping({
            "mlm_structure": config.DEFAULT_MLM_STRUCTURE,
            "pv_calculation": config.DEFAULT_PV_CALCULATION,
            "performance_bonus_enabled": config.DEFAULT_PERFORMANCE_BONUS_ENABLED,
            "monthly_cutoff_day": str(config.DEFAULT_MONTHLY_CUTOFF_DAY),
            "binary_max_depth": str(config.DEFAULT_BINARY_MAX_DEPTH),
            "unilevel_max_depth": str(config.DEFAULT_UNILEVEL_MAX_DEPTH),
        }, base=cls())

    @classmethod
    def fromMapping(cls, values: Dict[str, str], base: "MlmConfiguration" = None) -> "MlmConfiguration":
        """Build from system_config rows; missing keys fall back to `base`."""
        base = base or cls.defaults()
        updates = {}
        for key, raw in values.items():
            if key not in CONFIG_KEYS or raw is None:
                continue
            updates[CONFIG_KEYS[key]] = _parseValue(CONFIG_KEYS[key], raw)
        return base.updated(**updates)

    def toMapping(self) -> Dict[str, str]:
        values = {}
        for key, fieldName in CONFIG_KEYS.items():
            value = getattr(self, fieldName)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, bool):
                value = "true" if value else "false"
            values[key] = str(value)
        return values

    def updated(self, **changes) -> "MlmConfiguration":
        """Return a validated copy with `changes` applied."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {sorted(unknown)}")

        parsed = {name: _parseValue(name, value) for name, value in changes.items()}
        newConfig = replace(self, **parsed)
        newConfig.validate()
        return newConfig

    def validate(self):
        if not MIN_CUTOFF_DAY <= self.monthlyCutoffDay <= MAX_CUTOFF_DAY:
            raise ConfigurationError(
                f"monthlyCutoffDay must be between {MIN_CUTOFF_DAY} and {MAX_CUTOFF_DAY}, "
                f"got {self.monthlyCutoffDay}"
            )
        for name in ("binaryMaxDepth", "unilevelMaxDepth"):
            depth = getattr(self, name)
            if not MIN_DEPTH <= depth <= MAX_DEPTH:
                raise ConfigurationError(
                    f"{name} must be between {MIN_DEPTH} and {MAX_DEPTH}, got {depth}"
                )


def _parseValue(fieldName: str, raw):
    try:
        if fieldName == "structureMode":
            return raw if isinstance(raw, StructureMode) else StructureMode(str(raw).lower())
        if fieldName == "pvCalculation":
            return raw if isinstance(raw, PvCalculation) else PvCalculation(str(raw).lower())
        if fieldName == "performanceBonusEnabled":
            if isinstance(raw, bool):
                return raw
            return str(raw).strip().lower() in ("true", "1", "yes")
        return int(raw)
    except (ValueError, TypeError):
        raise ConfigurationError(f"Invalid value {raw!r} for {fieldName}")
