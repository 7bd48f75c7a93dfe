# mlm_system/events/event_bus.py
"""
Event bus for decoupled communication between components.
"""
from typing import Dict, List, Callable, Any
import logging
import inspect

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple in-process event bus.
    Handler errors are logged and never reach the emitter.
    """

    _instance = None
    _handlers: Dict[str, List[Callable]] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._handlers = {}
        return cls._instance

    def subscribe(self, eventName: str, handler: Callable):
        """Subscribe handler to event."""
        handlers = self._handlers.setdefault(eventName, [])
        if handler in handlers:
            return

        handlers.append(handler)
        logger.debug(f"Handler {handler.__name__} subscribed to {eventName}")

    def unsubscribe(self, eventName: str, handler: Callable):
        """Unsubscribe handler from event."""
        if handler in self._handlers.get(eventName, []):
            self._handlers[eventName].remove(handler)
            logger.debug(f"Handler {handler.__name__} unsubscribed from {eventName}")

    async def emit(self, eventName: str, data: Dict[str, Any]):
        """Emit event to all subscribers."""
        if eventName not in self._handlers:
            return

        logger.debug(f"Emitting event {eventName} with data: {data}")

        for handler in list(self._handlers[eventName]):
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(data)
                else:
                    handler(data)
            except Exception as e:
                logger.error(f"Error in handler {handler.__name__} for event {eventName}: {e}")

    def clear(self):
        """Clear all event handlers."""
        self._handlers.clear()


# Global event bus instance
eventBus = EventBus()


# Predefined events
class MLMEvents:
    """Standard MLM system events."""

    PURCHASE_COMPLETED = "purchase.completed"
    REBATES_CREATED = "rebates.created"

    REBATE_PROCESSED = "rebate.processed"
    REBATE_FAILED = "rebate.failed"
    REBATE_REQUEUED = "rebate.requeued"

    PERFORMANCE_BONUS_EMITTED = "performance_bonus.emitted"
    REFERRAL_REWARD_CREATED = "referral_reward.created"

    CONFIG_UPDATED = "config.updated"
    CONFIGURATION_GAP = "configuration.gap"
    CYCLE_DETECTED = "cycle.detected"
