# mlm_system/services/purchase_service.py
"""
Purchase recording - stores the aggregated basis for rebates and
announces the completed purchase.
"""
from typing import Optional
from sqlalchemy.orm import Session
import logging

from models import Member, Product, Purchase
from mlm_system.config.mlm_config import MlmConfiguration
from mlm_system.config.rewards import toDecimal, roundMoney
from mlm_system.errors import MLMError
from mlm_system.events.event_bus import eventBus, MLMEvents
from mlm_system.services.config_service import ConfigService
from mlm_system.services.volume_service import VolumeService

logger = logging.getLogger(__name__)


class PurchaseService:
    def __init__(self, session: Session, configuration: Optional[MlmConfiguration] = None):
        self.session = session
        self.configuration = configuration

    async def recordPurchase(self, memberId: int, productId: int, quantity: int = 1) -> Purchase:
        """
        Record a completed purchase and emit purchase.completed.

        The whole purchase is one rebate basis: price * quantity.
        """
        if quantity < 1:
            raise MLMError(f"Quantity must be positive, got {quantity}")

        member = self.session.query(Member).filter_by(memberID=memberId).first()
        if not member:
            raise MLMError(f"Member {memberId} not found")

        product = self.session.query(Product).filter_by(productID=productId).first()
        if not product or not product.isActive:
            raise MLMError(f"Product {productId} not available")

        configuration = self.configuration or await ConfigService(self.session).getMlmConfiguration()

        totalAmount = roundMoney(toDecimal(product.price) * quantity)
        totalPV = VolumeService.calculatePv(totalAmount, toDecimal(product.pv or 0) * quantity, configuration)

        purchase = Purchase(
            memberID=memberId,
            productID=productId,
            quantity=quantity,
            totalAmount=totalAmount,
            totalPV=totalPV,
            status="completed"
        )
        self.session.add(purchase)
        self.session.commit()

        logger.info(
            f"Purchase {purchase.purchaseID} recorded: member {memberId}, "
            f"product {productId} x{quantity}, amount {totalAmount}, PV {totalPV}"
        )

        await eventBus.emit(MLMEvents.PURCHASE_COMPLETED, {
            "purchaseId": purchase.purchaseID,
            "memberId": memberId,
            "productId": productId,
            "totalAmount": str(totalAmount)
        })
        return purchase
