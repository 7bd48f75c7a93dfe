# mlm_system/services/performance_bonus_service.py
"""
Performance bonus service - monthly tier bonus on personal sales,
evaluated on the cutoff date.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session
import logging

from models import Rebate, RebateStatus, CommissionType, PerformanceBonusTier
from models.rebate import PERFORMANCE_BONUS_LEVEL
from models.mlm import MonthlyCutoff
from mlm_system.config.mlm_config import MlmConfiguration
from mlm_system.config.rewards import toDecimal, rewardFromFields, computeAmount
from mlm_system.events.event_bus import eventBus, MLMEvents
from mlm_system.services.config_service import ConfigService
from mlm_system.services.volume_service import VolumeService
from mlm_system.utils.time_machine import timeMachine, cutoffPeriod

logger = logging.getLogger(__name__)


def selectTier(tiers: Sequence[PerformanceBonusTier], sales: Decimal) -> Optional[PerformanceBonusTier]:
    """Active tier with the highest minSales whose [minSales, maxSales] contains `sales`."""
    sales = toDecimal(sales)
    selected = None

    for tier in tiers:
        if not tier.active:
            continue
        minSales = toDecimal(tier.minSales)
        maxSales = toDecimal(tier.maxSales) if tier.maxSales is not None else None

        if sales < minSales:
            continue
        if maxSales is not None and sales > maxSales:
            continue
        if selected is None or minSales > toDecimal(selected.minSales):
            selected = tier

    return selected


def bonusKey(memberId: int, cutoffDate: date) -> str:
    return f"performance_bonus:{memberId}:{cutoffDate.strftime('%Y-%m')}"


class PerformanceBonusEvaluator:
    """Evaluates monthly performance bonuses and records the cutoff run."""

    def __init__(self, session: Session, configuration: Optional[MlmConfiguration] = None):
        self.session = session
        self.configuration = configuration
        self.volumeService = VolumeService(session)

    async def evaluatePerformanceBonuses(self, cutoffDate: Optional[date] = None) -> List[Rebate]:
        """
        Create pending performance bonus rebates for the period closed by `cutoffDate`.
        Running it again for the same month only adds bonuses that are still missing.
        """
        cutoffDate = cutoffDate or timeMachine.today
        configService = ConfigService(self.session)
        configuration = self.configuration or await configService.getMlmConfiguration()

        if not configuration.performanceBonusEnabled:
            logger.info("Performance bonus is disabled, nothing to evaluate")
            return []

        cutoff = self._startCutoff(cutoffDate, configuration.monthlyCutoffDay)

        try:
            created = await self._evaluate(cutoffDate, configuration, configService)
        except Exception as e:
            self.session.rollback()
            self._finishCutoff(cutoff.cutoffID, "failed", f"{type(e).__name__}: {e}")
            logger.exception(f"Performance bonus evaluation for {cutoffDate} failed")
            raise

        total = sum((toDecimal(r.amount) for r in created), Decimal("0"))
        self._finishCutoff(cutoff.cutoffID, "completed", f"{len(created)} bonuses, total {total}")

        logger.info(f"Performance bonuses for {cutoffDate:%Y-%m}: {len(created)} created, total {total}")

        if created:
            await eventBus.emit(MLMEvents.PERFORMANCE_BONUS_EMITTED, {
                "month": cutoffDate.strftime('%Y-%m'),
                "rebateIds": [r.rebateID for r in created],
                "totalAmount": str(total)
            })
        return created

    async def _evaluate(self, cutoffDate: date, configuration: MlmConfiguration,
                        configService: ConfigService) -> List[Rebate]:
        start, end = cutoffPeriod(cutoffDate, configuration.monthlyCutoffDay)
        tiers = await configService.getPerformanceBonusTiers(activeOnly=True)
        if not tiers:
            logger.info("No active performance bonus tiers")
            return []

        salesRows = await self.volumeService.salesByMember(start, end)
        created = []

        for row in salesRows:
            memberId, sales = row["memberId"], row["sales"]

            tier = selectTier(tiers, sales)
            if not tier:
                continue

            dedupeKey = bonusKey(memberId, cutoffDate)
            if self.session.query(Rebate.rebateID).filter_by(dedupeKey=dedupeKey).first():
                logger.debug(f"Performance bonus {dedupeKey} already exists")
                continue

            reward = rewardFromFields(tier.bonusType, tier.percentage, tier.fixedAmount)
            amount = computeAmount(sales, reward)
            if amount <= 0:
                continue

            rebate = Rebate(
                generatorID=memberId,
                receiverID=memberId,
                purchaseID=None,
                commissionType=CommissionType.PERFORMANCE_BONUS,
                level=PERFORMANCE_BONUS_LEVEL,
                rewardType=reward.kind,
                percentage=reward.value if reward.kind == "percentage" else None,
                amount=amount,
                status=RebateStatus.PENDING.value,
                dedupeKey=dedupeKey
            )
            self.session.add(rebate)
            created.append(rebate)

            logger.info(f"Member {memberId}: sales {sales} in tier {tier.name}, bonus {amount}")

        self.session.commit()
        return created

    def _startCutoff(self, cutoffDate: date, cutoffDay: int) -> MonthlyCutoff:
        cutoff = self.session.query(MonthlyCutoff).filter_by(
            year=cutoffDate.year,
            month=cutoffDate.month
        ).first()

        if not cutoff:
            cutoff = MonthlyCutoff(year=cutoffDate.year, month=cutoffDate.month, cutoffDay=cutoffDay)
            self.session.add(cutoff)

        cutoff.status = "processing"
        self.session.commit()
        return cutoff

    def _finishCutoff(self, cutoffId: int, status: str, notes: str):
        cutoff = self.session.query(MonthlyCutoff).filter_by(cutoffID=cutoffId).first()
        cutoff.status = status
        cutoff.processedAt = timeMachine.now
        cutoff.notes = notes
        self.session.commit()
