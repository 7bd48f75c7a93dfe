# mlm_system/services/commission_config_resolver.py
"""
Per-product, per-level reward rules.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Union
from sqlalchemy.orm import Session
import logging

from models import Product, CommissionConfig
from mlm_system.config.ranks import Rank
from mlm_system.config.rewards import Reward, Percentage, Fixed, rewardFromFields, computeAmount
from mlm_system.errors import ConfigurationGap, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommissionRule:
    productId: int
    level: int
    reward: Reward
    minRank: Optional[str] = None


class _NotConfigured:
    """Marker returned when a product has no rule for a level."""

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_CONFIGURED"


NOT_CONFIGURED = _NotConfigured()


class CommissionConfigResolver:
    """Resolves commission rules; each product's levels are loaded once per resolver."""

    def __init__(self, session: Session):
        self.session = session
        self._cache: Dict[int, Dict[int, CommissionRule]] = {}

    def _loadRules(self, productId: int) -> Dict[int, CommissionRule]:
        if productId not in self._cache:
            rows = self.session.query(CommissionConfig).filter_by(
                productID=productId
            ).order_by(CommissionConfig.level).all()

            self._cache[productId] = {
                row.level: CommissionRule(
                    productId=productId,
                    level=row.level,
                    reward=rewardFromFields(row.rewardType, row.percentage, row.fixedAmount),
                    minRank=row.minRank
                )
                for row in rows
            }
        return self._cache[productId]

    def resolve(self, productId: int, level: int) -> Union[CommissionRule, _NotConfigured]:
        return self._loadRules(productId).get(level, NOT_CONFIGURED)

    @staticmethod
    def computeAmount(basePrice, reward: Reward) -> Decimal:
        return computeAmount(basePrice, reward)

    def configuredLevels(self, productId: int) -> List[int]:
        return sorted(self._loadRules(productId))

    def findGap(self, productId: int) -> Optional[ConfigurationGap]:
        """
        Missing levels below the highest configured one, if any.
        An empty result means the chain is intentionally as short as configured.
        """
        return _gapIn(productId, self.configuredLevels(productId))

    async def saveProductConfig(self, productId: int, entries: List[Dict]) -> List[CommissionConfig]:
        """
        Replace a product's commission levels.

        `entries` are dicts with level, rewardType, percentage / fixedAmount
        and optional minRank. Duplicate or non-contiguous levels are rejected,
        so stored levels are always 1..N.
        """
        product = self.session.query(Product).filter_by(productID=productId).first()
        if not product:
            raise ConfigurationError(f"Product {productId} not found")

        levels = [int(entry["level"]) for entry in entries]
        if len(set(levels)) != len(levels):
            raise ConfigurationError(f"Duplicate commission levels for product {productId}: {levels}")
        if any(level < 1 for level in levels):
            raise ConfigurationError(f"Commission levels must start at 1, got {sorted(levels)}")

        gap = _gapIn(productId, sorted(levels))
        if gap:
            raise gap

        newRows = []
        for entry in sorted(entries, key=lambda e: int(e["level"])):
            rewardType = entry.get("rewardType", Percentage.kind)
            try:
                reward = rewardFromFields(rewardType, entry.get("percentage"), entry.get("fixedAmount"))
            except ValueError as e:
                raise ConfigurationError(str(e))

            minRank = entry.get("minRank")
            if minRank:
                try:
                    minRank = Rank(minRank.lower()).value
                except ValueError:
                    raise ConfigurationError(f"Unknown rank {minRank}")

            newRows.append(CommissionConfig(
                productID=productId,
                level=int(entry["level"]),
                rewardType=rewardType,
                percentage=reward.value if isinstance(reward, Percentage) else Decimal("0"),
                fixedAmount=reward.value if isinstance(reward, Fixed) else Decimal("0"),
                minRank=minRank or None
            ))

        # Старые уровни удаляются до вставки, иначе конфликт uq (productID, level)
        self.session.query(CommissionConfig).filter_by(productID=productId).delete()
        self.session.expire(product, ['commissionConfigs'])
        self.session.add_all(newRows)
        self.session.commit()
        self._cache.pop(productId, None)

        logger.info(f"Saved {len(newRows)} commission levels for product {productId}")
        return newRows


def _gapIn(productId: int, levels: List[int]) -> Optional[ConfigurationGap]:
    if not levels:
        return None
    missing = [level for level in range(1, max(levels) + 1) if level not in levels]
    if missing:
        return ConfigurationGap(productId, missing, levels)
    return None
