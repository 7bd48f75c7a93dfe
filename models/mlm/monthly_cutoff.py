# models/mlm/monthly_cutoff.py
"""
MonthlyCutoff model - one performance bonus run per month.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, UniqueConstraint
from models.base import Base, AuditMixin


class MonthlyCutoff(Base, AuditMixin):
    __tablename__ = 'monthly_cutoffs'

    cutoffID = Column(Integer, primary_key=True, autoincrement=True)

    # Period
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    cutoffDay = Column(Integer, nullable=False)

    # Status
    status = Column(String, default='pending')  # pending, processing, completed, failed
    processedAt = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('year', 'month', name='uq_monthly_cutoff_year_month'),
    )

    def __repr__(self):
        return f"<MonthlyCutoff({self.year}-{self.month:02d}, status={self.status})>"
