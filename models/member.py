# models/member.py
"""
Member model - a node of the sponsor tree.
"""
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin


class Member(Base, AuditMixin):
    __tablename__ = 'members'

    # Primary identification
    memberID = Column(Integer, primary_key=True, autoincrement=True)
    uplineID = Column(Integer, ForeignKey('members.memberID'), nullable=True, index=True)  # Спонсор, null только у корня

    # Binary placement: left / right под спонсором
    position = Column(String, nullable=True)

    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    status = Column(String, default="active")  # active, blocked

    # MLM
    rank = Column(String, default="starter", index=True)  # starter, bronze, silver, gold, platinum, diamond
    walletBalance = Column(DECIMAL(12, 2), default=Decimal("0"))

    upline = relationship('Member', remote_side=[memberID], backref='recruits')

    __table_args__ = (
        # Для binary: не больше одного участника в каждом слоте
        UniqueConstraint('uplineID', 'position', name='uq_member_upline_position'),
    )

    @property
    def isActive(self) -> bool:
        return self.status == "active"

    def __repr__(self):
        return f"<Member(memberID={self.memberID}, upline={self.uplineID}, rank={self.rank})>"
