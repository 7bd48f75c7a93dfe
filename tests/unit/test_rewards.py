"""
Unit tests for reward amount calculation.

Tests cover:
- Percentage rounding half-up to cents
- Fixed rewards independent of the basis
- Building rewards from config table fields
"""

from decimal import Decimal

import pytest

from mlm_system.config.rewards import Percentage, Fixed, computeAmount, rewardFromFields, roundMoney


class TestComputeAmount:
    """Test computeAmount for both reward variants."""

    def test_percentage_exact(self):
        assert computeAmount(Decimal("1000.00"), Percentage(Decimal("12.5"))) == Decimal("125.00")

    def test_percentage_rounds_half_up(self):
        # 999.995 * 10 / 100 = 99.9995 -> 100.00
        assert computeAmount(Decimal("999.995"), Percentage(Decimal("10"))) == Decimal("100.00")

    def test_percentage_half_cent_goes_up(self):
        # 0.125 -> 0.13, банковское округление дало бы 0.12
        assert computeAmount(Decimal("2.50"), Percentage(Decimal("5"))) == Decimal("0.13")

    def test_percentage_of_zero(self):
        assert computeAmount(Decimal("0"), Percentage(Decimal("10"))) == Decimal("0.00")

    def test_percentage_accepts_strings(self):
        assert computeAmount("2000", Percentage(Decimal("5"))) == Decimal("100.00")

    def test_fixed_ignores_basis(self):
        reward = Fixed(Decimal("50"))
        assert computeAmount(Decimal("2000"), reward) == Decimal("50")
        assert computeAmount(Decimal("1"), reward) == Decimal("50")

    def test_unsupported_reward(self):
        with pytest.raises(TypeError):
            computeAmount(Decimal("100"), object())


class TestRewardFromFields:
    """Test reward construction from table columns."""

    def test_percentage(self):
        reward = rewardFromFields("percentage", Decimal("7.5"), Decimal("0"))
        assert reward == Percentage(Decimal("7.5"))
        assert reward.kind == "percentage"

    def test_fixed(self):
        reward = rewardFromFields("fixed", Decimal("0"), Decimal("25.00"))
        assert reward == Fixed(Decimal("25.00"))
        assert reward.kind == "fixed"

    def test_missing_values_are_zero(self):
        assert rewardFromFields("fixed", None, None) == Fixed(Decimal("0"))

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            rewardFromFields("bonus_points", 1, 1)


def test_round_money():
    assert roundMoney(Decimal("10.005")) == Decimal("10.01")
    assert roundMoney(3) == Decimal("3.00")
