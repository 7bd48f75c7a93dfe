# mlm_system/services/rebate_processor.py
"""
Rebate processor - moves pending rebates to processed or failed and
credits the wallet ledger at most once per rebate.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from models import Rebate, RebateStatus, RebateEvent, InvalidTransition, transition
from mlm_system.config.rewards import toDecimal
from mlm_system.errors import CreditNotRecorded, LedgerCreditFailure, MLMError, RebateNotFound
from mlm_system.events.event_bus import eventBus, MLMEvents
from mlm_system.services.wallet_ledger import WalletLedger, DatabaseWalletLedger, CreditResult
from mlm_system.utils.time_machine import timeMachine

logger = logging.getLogger(__name__)

PROCESSED = "processed"
FAILED = "failed"
SKIPPED = "skipped"

# Повторы commit после уже выполненного внешнего начисления
COMMIT_ATTEMPTS = 3


@dataclass
class ProcessingResult:
    processedCount: int = 0
    failedCount: int = 0
    skippedCount: int = 0
    totalCredited: Decimal = Decimal("0")
    processedRebates: List[Dict] = field(default_factory=list)
    failedRebates: List[Dict] = field(default_factory=list)

    def asDict(self) -> Dict:
        return {
            "processed": self.processedCount,
            "failed": self.failedCount,
            "skipped": self.skippedCount,
            "totalCredited": self.totalCredited,
            "processedRebates": self.processedRebates,
            "failedRebates": self.failedRebates,
        }


class RebateProcessor:
    """
    Processes pending rebates one row at a time.

    Each row is claimed with a conditional update (pending -> processed),
    so concurrent processors never credit the same rebate twice. A failed
    credit rolls the claim back and marks the row failed. A credit the
    ledger accepted is never turned into a failure.
    """

    def __init__(self, session: Session, ledger: Optional[WalletLedger] = None):
        self.session = session
        self.ledger = ledger or DatabaseWalletLedger(session)

    async def processPending(self, batchSize: Optional[int] = None) -> ProcessingResult:
        """Process up to `batchSize` pending rebates (all of them when None)."""
        if batchSize is not None and batchSize < 0:
            raise MLMError(f"Batch size must not be negative, got {batchSize}")

        result = ProcessingResult()
        rebateIds = self._selectPendingIds(batchSize)

        if not rebateIds:
            logger.info("No pending rebates to process")
            return result

        for rebateId in rebateIds:
            outcome, details = await self._processRebate(rebateId)

            if outcome == PROCESSED:
                result.processedCount += 1
                result.totalCredited += details["amount"]
                result.processedRebates.append(details)
            elif outcome == FAILED:
                result.failedCount += 1
                result.failedRebates.append(details)
            else:
                result.skippedCount += 1

        logger.info(
            f"Rebate batch done: processed={result.processedCount}, "
            f"failed={result.failedCount}, skipped={result.skippedCount}, "
            f"credited={result.totalCredited}"
        )
        return result

    def _selectPendingIds(self, batchSize: Optional[int]) -> List[int]:
        query = self.session.query(Rebate.rebateID).filter(
            Rebate.status == RebateStatus.PENDING.value
        ).order_by(Rebate.rebateID)

        if batchSize is not None:
            query = query.limit(batchSize)

        rebateIds = [row.rebateID for row in query.all()]
        # Закрываем читающую транзакцию, каждая запись обрабатывается отдельно
        self.session.commit()
        return rebateIds

    def _claim(self, rebateId: int, event: RebateEvent, **values) -> bool:
        """Conditionally move a pending rebate on `event`; False if another worker got there first."""
        newStatus = transition(RebateStatus.PENDING, event)
        updated = self.session.query(Rebate).filter(
            Rebate.rebateID == rebateId,
            Rebate.status == RebateStatus.PENDING.value
        ).update(dict(status=newStatus.value, **values), synchronize_session=False)
        return updated == 1

    async def _processRebate(self, rebateId: int):
        rebate = self.session.query(Rebate).filter_by(rebateID=rebateId).first()
        if not rebate:
            return SKIPPED, {"id": rebateId}

        amount = toDecimal(rebate.amount)
        details = {
            "id": rebate.rebateID,
            "receiverId": rebate.receiverID,
            "level": rebate.level,
            "amount": amount,
        }

        if not self._claim(rebateId, RebateEvent.CREDIT_SUCCEEDED, processedAt=timeMachine.now):
            self.session.rollback()
            logger.info(f"Rebate {rebateId} is no longer pending, skipped")
            return SKIPPED, details

        try:
            credit = await self.ledger.credit(
                rebate.receiverID, amount, rebate.rebateID, creditType=rebate.commissionType
            )
        except LedgerCreditFailure as e:
            credit = CreditResult.failure(e.reason)
        except Exception as e:
            logger.exception(f"Error crediting rebate {rebateId}")
            credit = CreditResult.failure(f"{type(e).__name__}: {e}")

        if not credit.success:
            self.session.rollback()
            return await self._markFailed(rebate, details, credit.reason)

        if not self._recordCredit(rebateId, credit):
            self.session.expire(rebate)
            return SKIPPED, details

        self.session.expire(rebate)
        logger.info(f"Rebate {rebateId}: credited {amount} to member {details['receiverId']}")
        await eventBus.emit(MLMEvents.REBATE_PROCESSED, dict(details, amount=str(amount)))
        return PROCESSED, details

    def _recordCredit(self, rebateId: int, credit: CreditResult) -> bool:
        """
        Commit the claim of a credited rebate.

        A credit that went through is never reported as a failure. With a
        ledger sharing this session the credit rolls back with the claim and
        the rebate stays pending. With an external ledger the claim is
        applied again and the commit retried.
        """
        for attempt in range(1, COMMIT_ATTEMPTS + 1):
            try:
                if attempt > 1 and not self._claim(rebateId, RebateEvent.CREDIT_SUCCEEDED,
                                                   processedAt=timeMachine.now):
                    self.session.rollback()
                    logger.error(f"Rebate {rebateId} was credited but another processor claimed it meanwhile")
                    return False
                if credit.transactionId is not None:
                    self.session.query(Rebate).filter_by(rebateID=rebateId).update(
                        {"walletTransactionID": credit.transactionId}, synchronize_session=False
                    )
                self.session.commit()
                return True
            except SQLAlchemyError as e:
                self.session.rollback()
                if self.ledger.sharesSession:
                    logger.warning(f"Rebate {rebateId}: commit failed, credit rolled back, left pending: {e}")
                    return False
                logger.error(f"Rebate {rebateId}: credited but not recorded "
                             f"(attempt {attempt}/{COMMIT_ATTEMPTS}): {e}")

        logger.critical(f"Rebate {rebateId}: credit {credit.transactionId} applied but never recorded")
        raise CreditNotRecorded(rebateId, credit.transactionId)

    async def _markFailed(self, rebate: Rebate, details: Dict, reason: Optional[str]):
        reason = reason or "Unknown error"
        marked = self._claim(rebate.rebateID, RebateEvent.CREDIT_FAILED, failureReason=reason)
        self.session.commit()
        self.session.expire(rebate)

        if not marked:
            logger.info(f"Rebate {rebate.rebateID} was taken by another processor, skipped")
            return SKIPPED, details

        logger.error(f"Rebate {rebate.rebateID} failed: {reason}")
        await eventBus.emit(MLMEvents.REBATE_FAILED, dict(details, amount=str(details["amount"]), error=reason))
        return FAILED, dict(details, error=reason)

    async def requeueFailed(self, rebateId: int) -> Rebate:
        """
        Queue a failed rebate again as a fresh pending row.
        The failed row stays untouched; requeueing it twice returns the same new row.
        """
        original = self.session.query(Rebate).filter_by(rebateID=rebateId).first()
        if not original:
            raise RebateNotFound(rebateId)
        if original.status != RebateStatus.FAILED.value:
            raise InvalidTransition(RebateStatus(original.status), "requeue")

        dedupeKey = f"requeue:{rebateId}"
        existing = self.session.query(Rebate).filter_by(dedupeKey=dedupeKey).first()
        if existing:
            return existing

        requeued = Rebate(
            generatorID=original.generatorID,
            receiverID=original.receiverID,
            purchaseID=original.purchaseID,
            commissionType=original.commissionType,
            level=original.level,
            rewardType=original.rewardType,
            percentage=original.percentage,
            amount=original.amount,
            status=RebateStatus.PENDING.value,
            requeuedFromID=original.rebateID,
            dedupeKey=dedupeKey
        )
        self.session.add(requeued)
        self.session.commit()

        logger.info(f"Rebate {rebateId} requeued as {requeued.rebateID}")
        await eventBus.emit(MLMEvents.REBATE_REQUEUED, {
            "rebateId": requeued.rebateID,
            "requeuedFromId": rebateId
        })
        return requeued
