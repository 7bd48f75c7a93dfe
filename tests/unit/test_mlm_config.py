"""Unit tests for MlmConfiguration parsing and validation."""

import pytest

from mlm_system.config.mlm_config import MlmConfiguration, StructureMode, PvCalculation
from mlm_system.errors import ConfigurationError


def test_defaults():
    configuration = MlmConfiguration.defaults()

    assert configuration.structureMode == StructureMode.BINARY
    assert configuration.pvCalculation == PvCalculation.PERCENTAGE
    assert configuration.performanceBonusEnabled is False
    assert configuration.monthlyCutoffDay == 25
    assert configuration.maxDepth == 6


def test_max_depth_follows_structure_mode():
    configuration = MlmConfiguration(binaryMaxDepth=3, unilevelMaxDepth=8)

    assert configuration.maxDepth == 3
    assert configuration.updated(structureMode="unilevel").maxDepth == 8


def test_from_mapping_parses_stored_strings():
    configuration = MlmConfiguration.fromMapping({
        "mlm_structure": "unilevel",
        "pv_calculation": "fixed",
        "performance_bonus_enabled": "true",
        "monthly_cutoff_day": "20",
        "unilevel_max_depth": "4",
        "unrelated_key": "ignored",
    })

    assert configuration.structureMode == StructureMode.UNILEVEL
    assert configuration.pvCalculation == PvCalculation.FIXED
    assert configuration.performanceBonusEnabled is True
    assert configuration.monthlyCutoffDay == 20
    assert configuration.maxDepth == 4


def test_to_mapping_round_trips():
    configuration = MlmConfiguration(structureMode=StructureMode.UNILEVEL, performanceBonusEnabled=True)

    assert MlmConfiguration.fromMapping(configuration.toMapping()) == configuration


def test_updated_returns_new_snapshot():
    original = MlmConfiguration()
    changed = original.updated(monthlyCutoffDay=10)

    assert changed.monthlyCutoffDay == 10
    assert original.monthlyCutoffDay == 25


@pytest.mark.parametrize("changes", [
    {"monthlyCutoffDay": 0},
    {"monthlyCutoffDay": 32},
    {"binaryMaxDepth": 0},
    {"unilevelMaxDepth": 11},
    {"structureMode": "matrix"},
    {"monthlyCutoffDay": "abc"},
])
def test_invalid_values_rejected(changes):
    with pytest.raises(ConfigurationError):
        MlmConfiguration().updated(**changes)


def test_unknown_field_rejected():
    with pytest.raises(ConfigurationError, match="Unknown configuration fields"):
        MlmConfiguration().updated(maxLevels=3)
