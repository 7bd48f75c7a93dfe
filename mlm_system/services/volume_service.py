# mlm_system/services/volume_service.py
"""
Volume tracking service for MLM system.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

import config
from models import Purchase
from mlm_system.config.mlm_config import MlmConfiguration, PvCalculation
from mlm_system.config.rewards import toDecimal, roundMoney

logger = logging.getLogger(__name__)

COMPLETED = "completed"


class VolumeService:
    """Service for PV calculation and personal sales totals."""

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def calculatePv(totalAmount, productPv, configuration: MlmConfiguration) -> Decimal:
        """
        PV of a purchase under the configured calculation mode.
        `productPv` is the product PV already multiplied by quantity.
        """
        if configuration.pvCalculation == PvCalculation.FIXED:
            return toDecimal(productPv or 0)

        share = toDecimal(config.PV_PERCENTAGE_OF_PRICE) / Decimal("100")
        return roundMoney(toDecimal(totalAmount) * share)

    async def personalSales(self, memberId: int, start: datetime, end: datetime) -> Decimal:
        """Sum of completed purchase amounts of a member in [start, end)."""
        total = self.session.query(func.sum(Purchase.totalAmount)).filter(
            Purchase.memberID == memberId,
            Purchase.status == COMPLETED,
            Purchase.createdAt >= start,
            Purchase.createdAt < end
        ).scalar()
        return roundMoney(total or 0)

    async def personalPV(self, memberId: int, start: datetime, end: datetime) -> Decimal:
        total = self.session.query(func.sum(Purchase.totalPV)).filter(
            Purchase.memberID == memberId,
            Purchase.status == COMPLETED,
            Purchase.createdAt >= start,
            Purchase.createdAt < end
        ).scalar()
        return roundMoney(total or 0)

    async def salesByMember(self, start: datetime, end: datetime) -> List[Dict]:
        """Personal sales of every member with purchases in [start, end), by member id."""
        rows = self.session.query(
            Purchase.memberID,
            func.sum(Purchase.totalAmount).label("sales")
        ).filter(
            Purchase.status == COMPLETED,
            Purchase.createdAt >= start,
            Purchase.createdAt < end
        ).group_by(Purchase.memberID).order_by(Purchase.memberID).all()

        return [{"memberId": row.memberID, "sales": roundMoney(row.sales or 0)} for row in rows]
