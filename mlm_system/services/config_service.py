# mlm_system/services/config_service.py
"""
MLM configuration and performance bonus tier administration.
"""
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from models import SystemConfig, PerformanceBonusTier
from mlm_system.config.mlm_config import MlmConfiguration, CONFIG_DESCRIPTIONS
from mlm_system.config.rewards import toDecimal, rewardFromFields
from mlm_system.errors import ConfigurationError
from mlm_system.events.event_bus import eventBus, MLMEvents

logger = logging.getLogger(__name__)


class ConfigService:
    """Reads and updates the process-wide MLM configuration."""

    def __init__(self, session: Session):
        self.session = session

    async def getMlmConfiguration(self) -> MlmConfiguration:
        """Current configuration snapshot; missing keys use the defaults from config.py."""
        rows = self.session.query(SystemConfig).all()
        return MlmConfiguration.fromMapping({row.key: row.value for row in rows})

    async def updateMlmConfiguration(self, **changes) -> MlmConfiguration:
        """
        Apply a partial update, e.g. updateMlmConfiguration(monthlyCutoffDay=20).
        Values are validated before anything is written.
        """
        current = await self.getMlmConfiguration()
        newConfig = current.updated(**changes)

        existing = {row.key: row for row in self.session.query(SystemConfig).all()}
        for key, value in newConfig.toMapping().items():
            row = existing.get(key)
            if row is None:
                self.session.add(SystemConfig(
                    key=key,
                    value=value,
                    description=CONFIG_DESCRIPTIONS.get(key)
                ))
            elif row.value != value:
                row.value = value

        self.session.commit()
        logger.info(f"MLM configuration updated: {changes}")

        await eventBus.emit(MLMEvents.CONFIG_UPDATED, {
            "changes": {k: str(v) for k, v in changes.items()},
            "configuration": newConfig.toMapping()
        })
        return newConfig

    async def getPerformanceBonusTiers(self, activeOnly: bool = True) -> List[PerformanceBonusTier]:
        query = self.session.query(PerformanceBonusTier)
        if activeOnly:
            query = query.filter(PerformanceBonusTier.active == True)
        return query.order_by(PerformanceBonusTier.minSales).all()

    async def createPerformanceBonusTier(
            self,
            name: str,
            minSales,
            maxSales=None,
            bonusType: str = "percentage",
            percentage=0,
            fixedAmount=0,
            active: bool = True
    ) -> PerformanceBonusTier:
        """Create a tier; active tiers must not overlap."""
        minSales = toDecimal(minSales)
        maxSales = toDecimal(maxSales) if maxSales is not None else None

        if minSales < 0:
            raise ConfigurationError("minSales must not be negative")
        if maxSales is not None and maxSales < minSales:
            raise ConfigurationError(f"maxSales {maxSales} is below minSales {minSales}")
        try:
            rewardFromFields(bonusType, percentage, fixedAmount)
        except ValueError as e:
            raise ConfigurationError(str(e))

        if active:
            overlapping = self._findOverlappingTier(minSales, maxSales)
            if overlapping:
                raise ConfigurationError(
                    f"Tier {name} [{minSales}, {maxSales}] overlaps tier {overlapping.name}"
                )

        tier = PerformanceBonusTier(
            name=name,
            minSales=minSales,
            maxSales=maxSales,
            bonusType=bonusType,
            percentage=toDecimal(percentage),
            fixedAmount=toDecimal(fixedAmount),
            active=active
        )
        self.session.add(tier)
        self.session.commit()

        logger.info(f"Performance bonus tier {name} created: [{minSales}, {maxSales}]")
        return tier

    def _findOverlappingTier(self, minSales: Decimal, maxSales: Optional[Decimal]) -> Optional[PerformanceBonusTier]:
        infinity = Decimal("Infinity")
        newMax = maxSales if maxSales is not None else infinity

        for tier in self.session.query(PerformanceBonusTier).filter(
                PerformanceBonusTier.active == True
        ).all():
            tierMax = toDecimal(tier.maxSales) if tier.maxSales is not None else infinity
            if minSales <= tierMax and toDecimal(tier.minSales) <= newMax:
                return tier
        return None
