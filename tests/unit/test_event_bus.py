"""Unit tests for the in-process event bus."""

import pytest

from mlm_system.events.event_bus import eventBus, EventBus, MLMEvents


def test_singleton():
    assert EventBus() is eventBus


@pytest.mark.asyncio
async def test_async_and_sync_handlers():
    received = []

    async def asyncHandler(data):
        received.append(("async", data["purchaseId"]))

    def syncHandler(data):
        received.append(("sync", data["purchaseId"]))

    eventBus.subscribe(MLMEvents.PURCHASE_COMPLETED, asyncHandler)
    eventBus.subscribe(MLMEvents.PURCHASE_COMPLETED, syncHandler)
    eventBus.subscribe(MLMEvents.PURCHASE_COMPLETED, asyncHandler)

    await eventBus.emit(MLMEvents.PURCHASE_COMPLETED, {"purchaseId": 1})

    assert received == [("async", 1), ("sync", 1)]


@pytest.mark.asyncio
async def test_handler_error_does_not_reach_emitter():
    received = []

    def broken(data):
        raise RuntimeError("boom")

    def healthy(data):
        received.append(data)

    eventBus.subscribe(MLMEvents.REBATE_FAILED, broken)
    eventBus.subscribe(MLMEvents.REBATE_FAILED, healthy)

    await eventBus.emit(MLMEvents.REBATE_FAILED, {"id": 5})

    assert received == [{"id": 5}]


@pytest.mark.asyncio
async def test_unsubscribe():
    received = []

    def handler(data):
        received.append(data)

    eventBus.subscribe(MLMEvents.CONFIG_UPDATED, handler)
    eventBus.unsubscribe(MLMEvents.CONFIG_UPDATED, handler)
    eventBus.unsubscribe(MLMEvents.CONFIG_UPDATED, handler)

    await eventBus.emit(MLMEvents.CONFIG_UPDATED, {})

    assert received == []
