# mlm_system/events/setup.py
"""
Wires MLM services to the event bus.
"""
import logging

from mlm_system.events.event_bus import eventBus, MLMEvents
from mlm_system.services.rebate_engine import RebateEngine

logger = logging.getLogger(__name__)

_handlers = {}


def setupMlmEventHandlers(sessionFactory):
    """
    Subscribe the rebate engine to purchase.completed.
    Calling it again replaces the previous subscription.
    """
    async def onPurchaseCompleted(data):
        purchaseId = data["purchaseId"]
        session = sessionFactory()
        try:
            rebates = await RebateEngine(session).computeRebates(purchaseId)
            logger.info(f"Purchase {purchaseId}: {len(rebates)} rebates queued")
        finally:
            session.close()

    previous = _handlers.pop(MLMEvents.PURCHASE_COMPLETED, None)
    if previous:
        eventBus.unsubscribe(MLMEvents.PURCHASE_COMPLETED, previous)

    eventBus.subscribe(MLMEvents.PURCHASE_COMPLETED, onPurchaseCompleted)
    _handlers[MLMEvents.PURCHASE_COMPLETED] = onPurchaseCompleted

    logger.info("MLM event handlers registered")
