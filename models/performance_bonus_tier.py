# models/performance_bonus_tier.py
from sqlalchemy import Column, Integer, String, DECIMAL, Boolean
from models.base import Base, AuditMixin


class PerformanceBonusTier(Base, AuditMixin):
    __tablename__ = 'performance_bonus_tiers'

    tierID = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)

    # Границы личных продаж; maxSales = null - без верхней границы
    minSales = Column(DECIMAL(12, 2), nullable=False)
    maxSales = Column(DECIMAL(12, 2), nullable=True)

    bonusType = Column(String, nullable=False, default="percentage")  # percentage, fixed
    percentage = Column(DECIMAL(5, 2), default=0)
    fixedAmount = Column(DECIMAL(12, 2), default=0)
    active = Column(Boolean, default=True)

    def __repr__(self):
        return f"<PerformanceBonusTier(name={self.name}, min={self.minSales}, max={self.maxSales})>"
