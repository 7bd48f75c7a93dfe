# models/wallet_transaction.py
"""
WalletTransaction model - ledger rows written when a rebate is credited.
"""
from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin


class WalletTransaction(Base, AuditMixin):
    __tablename__ = 'wallet_transactions'

    # Primary key
    transactionID = Column(Integer, primary_key=True, autoincrement=True)

    # Relations
    memberID = Column(Integer, ForeignKey('members.memberID'), nullable=False, index=True)

    # Transaction details
    amount = Column(DECIMAL(12, 2), nullable=False)
    type = Column(String, nullable=False, default="rebate")  # rebate, performance_bonus, referral
    status = Column(String, default='completed')
    description = Column(String, nullable=True)

    # Одна проводка на ребейт
    rebateID = Column(Integer, nullable=True, unique=True)

    # Relationships
    member = relationship('Member', backref='wallet_transactions')

    def __repr__(self):
        return f"<WalletTransaction(id={self.transactionID}, member={self.memberID}, amount={self.amount})>"
