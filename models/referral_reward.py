# models/referral_reward.py
from sqlalchemy import Column, Integer, String, DECIMAL, Boolean, Text
from models.base import Base, AuditMixin


class ReferralReward(Base, AuditMixin):
    __tablename__ = 'referral_rewards'

    rewardID = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    rewardType = Column(String, nullable=False, default="fixed")  # fixed, percentage
    amount = Column(DECIMAL(12, 2), default=0)
    percentage = Column(DECIMAL(5, 2), default=0)
    active = Column(Boolean, default=True)

    def __repr__(self):
        return f"<ReferralReward(name={self.name}, type={self.rewardType}, amount={self.amount})>"
