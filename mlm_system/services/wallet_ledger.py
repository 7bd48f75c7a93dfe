# mlm_system/services/wallet_ledger.py
"""
Wallet ledger contract used by the rebate processor, and the default
implementation that books credits into wallet_transactions.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from models import Member, WalletTransaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditResult:
    success: bool
    reason: Optional[str] = None
    transactionId: Optional[int] = None

    @classmethod
    def ok(cls, transactionId: Optional[int] = None) -> "CreditResult":
        return cls(success=True, transactionId=transactionId)

    @classmethod
    def failure(cls, reason: str) -> "CreditResult":
        return cls(success=False, reason=reason)


class WalletLedger(ABC):
    """
    Credits rebate amounts to member wallets.

    The processor calls `credit` at most once per rebate, inside the unit of
    work that claimed the rebate. A refused credit is reported either as
    CreditResult.failure(reason) or by raising LedgerCreditFailure.
    """

    # True when credits are written through the processor session
    sharesSession = False

    @abstractmethod
    async def credit(self, memberId: int, amount: Decimal, referenceRebateId: int,
                     creditType: str = "rebate") -> CreditResult:
        ...


class DatabaseWalletLedger(WalletLedger):
    """Ledger writing to the same session as the processor, so credit and status commit together."""

    sharesSession = True

    def __init__(self, session: Session):
        self.session = session

    async def credit(self, memberId: int, amount: Decimal, referenceRebateId: int,
                     creditType: str = "rebate") -> CreditResult:
        member = self.session.query(Member).filter_by(memberID=memberId).first()
        if not member:
            return CreditResult.failure(f"Receiver account {memberId} not found")
        if not member.isActive:
            return CreditResult.failure(f"Receiver account {memberId} is {member.status}")

        transaction = WalletTransaction(
            memberID=memberId,
            amount=amount,
            type=creditType,
            status="completed",
            description=f"{creditType} credit for rebate {referenceRebateId}",
            rebateID=referenceRebateId
        )
        self.session.add(transaction)

        # Инкремент на стороне БД: параллельные выплаты одному участнику не теряются
        self.session.query(Member).filter_by(memberID=memberId).update(
            {Member.walletBalance: func.coalesce(Member.walletBalance, 0) + amount},
            synchronize_session=False
        )
        self.session.expire(member, ["walletBalance"])
        self.session.flush()

        logger.info(f"Credited {amount} to member {memberId} for rebate {referenceRebateId}")
        return CreditResult.ok(transaction.transactionID)
