# mlm_system/services/referral_service.py
"""
Referral rewards paid to a sponsor for a new recruit.
"""
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session
import logging

import config
from models import Member, Rebate, RebateStatus, CommissionType, ReferralReward
from mlm_system.config.rewards import toDecimal, rewardFromFields, computeAmount
from mlm_system.errors import MLMError
from mlm_system.events.event_bus import eventBus, MLMEvents

logger = logging.getLogger(__name__)

REFERRAL_LEVEL = 1


class ReferralRewardService:
    def __init__(self, session: Session):
        self.session = session

    def _activeReward(self) -> Optional[ReferralReward]:
        return self.session.query(ReferralReward).filter(
            ReferralReward.active == True
        ).order_by(ReferralReward.amount.desc(), ReferralReward.rewardID).first()

    async def processReferralReward(self, referrerId: int, recruitId: int) -> Optional[Rebate]:
        """
        Create the pending referral rebate for `recruitId`.
        Returns None when no reward is configured; one rebate per recruit at most.
        """
        recruit = self.session.query(Member).filter_by(memberID=recruitId).first()
        if not recruit:
            raise MLMError(f"Recruit {recruitId} not found")
        if recruit.uplineID != referrerId:
            raise MLMError(f"Member {referrerId} is not the sponsor of {recruitId}")

        dedupeKey = f"referral:{recruitId}"
        existing = self.session.query(Rebate).filter_by(dedupeKey=dedupeKey).first()
        if existing:
            logger.info(f"Referral reward for recruit {recruitId} already exists: {existing.rebateID}")
            return existing

        reward = self._activeReward()
        if not reward:
            logger.info("No active referral reward configured")
            return None

        # Процентная награда считается от фиксированной базы
        rule = rewardFromFields(reward.rewardType, reward.percentage, reward.amount)
        amount = computeAmount(toDecimal(config.REFERRAL_REWARD_BASE_VALUE), rule)
        if amount <= Decimal("0"):
            logger.info(f"Referral reward {reward.name} amounts to {amount}, skipped")
            return None

        rebate = Rebate(
            generatorID=recruitId,
            receiverID=referrerId,
            purchaseID=None,
            commissionType=CommissionType.REFERRAL,
            level=REFERRAL_LEVEL,
            rewardType=rule.kind,
            percentage=rule.value if rule.kind == "percentage" else None,
            amount=amount,
            status=RebateStatus.PENDING.value,
            dedupeKey=dedupeKey
        )
        self.session.add(rebate)
        self.session.commit()

        logger.info(f"Referral reward {amount} for member {referrerId} (recruit {recruitId})")

        await eventBus.emit(MLMEvents.REFERRAL_REWARD_CREATED, {
            "rebateId": rebate.rebateID,
            "referrerId": referrerId,
            "recruitId": recruitId,
            "amount": str(amount)
        })
        return rebate
