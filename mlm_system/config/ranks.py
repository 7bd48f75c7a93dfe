# mlm_system/config/ranks.py
"""
MLM ranks configuration and constants.
"""
from enum import Enum
from typing import Optional


class Rank(Enum):
    STARTER = "starter"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"


# Порядок рангов для проверки minRank
RANK_LEVELS = {
    Rank.STARTER: 1,
    Rank.BRONZE: 2,
    Rank.SILVER: 3,
    Rank.GOLD: 4,
    Rank.PLATINUM: 5,
    Rank.DIAMOND: 6,
}


def rankLevel(rank: Optional[str]) -> int:
    """Ordinal of a stored rank value; unknown or empty ranks count as Starter."""
    try:
        return RANK_LEVELS[Rank((rank or "").lower())]
    except ValueError:
        return RANK_LEVELS[Rank.STARTER]


def isRankBelow(rank: Optional[str], minimum: Optional[str]) -> bool:
    """True when `rank` is strictly below `minimum`. No minimum never blocks."""
    if not minimum:
        return False
    return rankLevel(rank) < rankLevel(minimum)
