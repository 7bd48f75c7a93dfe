# models/rebate.py
"""
Rebate model - every per-level rebate, performance bonus and referral reward.
"""
from enum import Enum
from sqlalchemy import Column, Integer, String, DECIMAL, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin


class RebateStatus(Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


class RebateEvent(Enum):
    CREDIT_SUCCEEDED = "credit_succeeded"
    CREDIT_FAILED = "credit_failed"


class InvalidTransition(Exception):
    """Raised for a status change the rebate lifecycle does not allow."""

    def __init__(self, current, event):
        self.current = current
        self.event = event
        super().__init__(f"Cannot apply {event} to rebate in status {current}")


# processed / failed терминальные: назад в pending только через новый ребейт
STATUS_TRANSITIONS = {
    (RebateStatus.PENDING, RebateEvent.CREDIT_SUCCEEDED): RebateStatus.PROCESSED,
    (RebateStatus.PENDING, RebateEvent.CREDIT_FAILED): RebateStatus.FAILED,
}


def transition(current, event: RebateEvent) -> RebateStatus:
    """Return the status reached from `current` on `event`."""
    current = RebateStatus(current)
    try:
        return STATUS_TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransition(current, event)


class CommissionType:
    REBATE = "rebate"
    PERFORMANCE_BONUS = "performance_bonus"
    REFERRAL = "referral"


PERFORMANCE_BONUS_LEVEL = 0


class Rebate(Base, AuditMixin):
    __tablename__ = 'rebates'

    # Primary key
    rebateID = Column(Integer, primary_key=True, autoincrement=True)

    # Relations
    generatorID = Column(Integer, ForeignKey('members.memberID'), nullable=False, index=True)  # Чья покупка
    receiverID = Column(Integer, ForeignKey('members.memberID'), nullable=False, index=True)  # Кто получает
    purchaseID = Column(Integer, ForeignKey('purchases.purchaseID'), nullable=True, index=True)

    # Commission details
    commissionType = Column(String, nullable=False, default=CommissionType.REBATE)
    level = Column(Integer, nullable=False)  # 0 для performance bonus
    rewardType = Column(String, nullable=False, default="percentage")  # percentage, fixed
    percentage = Column(DECIMAL(5, 2), nullable=True)
    amount = Column(DECIMAL(12, 2), nullable=False)

    # Lifecycle
    status = Column(String, nullable=False, default=RebateStatus.PENDING.value, index=True)
    processedAt = Column(DateTime, nullable=True)
    failureReason = Column(Text, nullable=True)
    walletTransactionID = Column(Integer, ForeignKey('wallet_transactions.transactionID'), nullable=True)

    # Повторная постановка в очередь создает новую запись со ссылкой на failed
    requeuedFromID = Column(Integer, ForeignKey('rebates.rebateID'), nullable=True)

    # purchase:{p}:receiver:{r}:level:{l} и т.п. - гарантия одной выплаты
    dedupeKey = Column(String, nullable=False, unique=True)

    # Relationships
    generator = relationship('Member', foreign_keys=[generatorID], backref='rebates_generated')
    receiver = relationship('Member', foreign_keys=[receiverID], backref='rebates_received')
    purchase = relationship('Purchase', backref='rebates')
    requeuedFrom = relationship('Rebate', remote_side=[rebateID])

    @staticmethod
    def purchaseKey(purchaseId: int, receiverId: int, level: int) -> str:
        return f"purchase:{purchaseId}:receiver:{receiverId}:level:{level}"

    @property
    def statusEnum(self) -> RebateStatus:
        return RebateStatus(self.status)

    def __repr__(self):
        return (
            f"<Rebate(rebateID={self.rebateID}, receiver={self.receiverID}, "
            f"level={self.level}, amount={self.amount}, status={self.status})>"
        )
