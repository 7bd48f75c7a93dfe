# mlm_system/services/rebate_engine.py
"""
Rebate engine - walks the sponsor tree for a completed purchase and
creates one pending rebate per qualifying upline level.
"""
from decimal import Decimal
from typing import List, Optional, Set
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from models import Purchase, Rebate, RebateStatus, CommissionType
from mlm_system.config.mlm_config import MlmConfiguration
from mlm_system.config.ranks import isRankBelow
from mlm_system.config.rewards import toDecimal
from mlm_system.errors import CycleDetected, DuplicateRebate, PurchaseNotFound
from mlm_system.events.event_bus import eventBus, MLMEvents
from mlm_system.services.commission_config_resolver import CommissionConfigResolver, NOT_CONFIGURED
from mlm_system.services.config_service import ConfigService
from mlm_system.services.sponsor_tree import SponsorTree

logger = logging.getLogger(__name__)

# Повторный проход после конфликта уникальности с параллельным вызовом
MAX_ATTEMPTS = 2

PURCHASE_COMPLETED = "completed"


class RebateEngine:
    """Computes per-level rebates for purchases."""

    def __init__(self, session: Session, configuration: Optional[MlmConfiguration] = None):
        self.session = session
        self.configuration = configuration
        self.sponsorTree = SponsorTree(session)
        self.resolver = CommissionConfigResolver(session)

    async def computeRebates(self, purchaseId: int) -> List[Rebate]:
        """
        Create pending rebates for a purchase.

        Safe to call repeatedly: rebates that already exist for a
        (purchase, receiver, level) are left alone, and only newly created
        rows are returned. All rows of one call are committed together.
        """
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                created = await self._computeOnce(purchaseId)
                self.session.commit()
                break
            except IntegrityError as e:
                # Параллельный вызов успел вставить те же ребейты
                self.session.rollback()
                if attempt == MAX_ATTEMPTS:
                    logger.error(f"Purchase {purchaseId}: rebate insert conflict persisted: {e}")
                    raise
                logger.warning(f"Purchase {purchaseId}: concurrent rebate insert, retrying walk")
            except CycleDetected as e:
                self.session.rollback()
                logger.error(f"Purchase {purchaseId}: rebate computation aborted: {e}")
                await eventBus.emit(MLMEvents.CYCLE_DETECTED, {
                    "purchaseId": purchaseId,
                    "memberId": e.memberId,
                    "path": e.path
                })
                raise
            except Exception:
                self.session.rollback()
                raise

        if created:
            await eventBus.emit(MLMEvents.REBATES_CREATED, {
                "purchaseId": purchaseId,
                "rebateIds": [rebate.rebateID for rebate in created],
                "totalAmount": str(sum((toDecimal(r.amount) for r in created), Decimal("0")))
            })

        return created

    async def _computeOnce(self, purchaseId: int) -> List[Rebate]:
        purchase = self.session.query(Purchase).filter_by(purchaseID=purchaseId).first()
        if not purchase:
            raise PurchaseNotFound(purchaseId)
        if purchase.status != PURCHASE_COMPLETED:
            logger.info(f"Purchase {purchaseId} is {purchase.status}, no rebates")
            return []

        # Конфигурация читается один раз на весь проход
        configuration = self.configuration or await ConfigService(self.session).getMlmConfiguration()
        maxDepth = configuration.maxDepth

        chain = await self.sponsorTree.uplineChain(purchase.memberID, maxDepth)
        if not chain:
            logger.info(f"Purchase {purchaseId}: buyer {purchase.memberID} has no upline, no rebates")
            return []

        basis = toDecimal(purchase.totalAmount)
        existingKeys = self._existingKeys(purchaseId)
        created: List[Rebate] = []

        for level, receiver in enumerate(chain, start=1):
            rule = self.resolver.resolve(purchase.productID, level)
            if rule is NOT_CONFIGURED:
                await self._reportGap(purchase, level)
                break

            amount = self.resolver.computeAmount(basis, rule.reward)

            if isRankBelow(receiver.rank, rule.minRank):
                logger.info(
                    f"Purchase {purchaseId}: level {level} receiver {receiver.memberID} "
                    f"rank {receiver.rank} below {rule.minRank}, skipped"
                )
                continue

            try:
                rebate = self._buildRebate(purchase, receiver.memberID, level, rule, amount, existingKeys)
            except DuplicateRebate as e:
                logger.info(f"Purchase {purchaseId}: {e}, nothing to do")
                continue

            self.session.add(rebate)
            existingKeys.add(rebate.dedupeKey)
            created.append(rebate)

        self.session.flush()

        logger.info(
            f"Purchase {purchaseId}: created {len(created)} rebates "
            f"over {len(chain)} upline levels (max depth {maxDepth}, {configuration.structureMode.value})"
        )
        return created

    def _existingKeys(self, purchaseId: int) -> Set[str]:
        rows = self.session.query(Rebate.dedupeKey).filter(
            Rebate.purchaseID == purchaseId,
            Rebate.commissionType == CommissionType.REBATE
        ).all()
        return {row.dedupeKey for row in rows}

    @staticmethod
    def _buildRebate(purchase: Purchase, receiverId: int, level: int, rule, amount: Decimal,
                     existingKeys: Set[str]) -> Rebate:
        dedupeKey = Rebate.purchaseKey(purchase.purchaseID, receiverId, level)
        if dedupeKey in existingKeys:
            raise DuplicateRebate(dedupeKey)

        return Rebate(
            generatorID=purchase.memberID,
            receiverID=receiverId,
            purchaseID=purchase.purchaseID,
            commissionType=CommissionType.REBATE,
            level=level,
            rewardType=rule.reward.kind,
            percentage=rule.reward.value if rule.reward.kind == "percentage" else None,
            amount=amount,
            status=RebateStatus.PENDING.value,
            dedupeKey=dedupeKey
        )

    async def _reportGap(self, purchase: Purchase, level: int):
        """Stopping at an unconfigured level is normal; stopping at a hole in the levels is a config error."""
        gap = self.resolver.findGap(purchase.productID)
        if gap and level in gap.missingLevels:
            logger.warning(f"Purchase {purchase.purchaseID}: walk stopped at level {level}: {gap}")
            await eventBus.emit(MLMEvents.CONFIGURATION_GAP, {
                "purchaseId": purchase.purchaseID,
                "productId": purchase.productID,
                "missingLevels": gap.missingLevels,
                "configuredLevels": gap.configuredLevels
            })
        else:
            logger.debug(f"Purchase {purchase.purchaseID}: no commission configured at level {level}")
