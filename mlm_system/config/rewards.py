# mlm_system/config/rewards.py
"""
Reward rules: a percentage of the basis or a fixed amount.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")


def toDecimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def roundMoney(value: Decimal) -> Decimal:
    return toDecimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Percentage:
    value: Decimal

    kind = "percentage"


@dataclass(frozen=True)
class Fixed:
    value: Decimal

    kind = "fixed"


Reward = Union[Percentage, Fixed]


def rewardFromFields(rewardType: str, percentage, fixedAmount) -> Reward:
    """Build a reward from the (type, percentage, fixedAmount) columns used by config tables."""
    if rewardType == Fixed.kind:
        return Fixed(toDecimal(fixedAmount or 0))
    if rewardType == Percentage.kind:
        return Percentage(toDecimal(percentage or 0))
    raise ValueError(f"Unknown reward type: {rewardType}")


def computeAmount(basePrice, reward: Reward) -> Decimal:
    """
    Amount owed for `reward` on `basePrice`.

    Percentage rewards are rounded half-up to cents; fixed rewards are
    returned as configured, whatever the base.
    """
    if isinstance(reward, Percentage):
        return roundMoney(toDecimal(basePrice) * reward.value / Decimal("100"))
    if isinstance(reward, Fixed):
        return reward.value
    raise TypeError(f"Unsupported reward: {reward!r}")
