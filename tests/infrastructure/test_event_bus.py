"""Tests for EventBus infrastructure."""

import logging

import pytest

from kubepromote.domain.events.event_base import DomainEvent
from kubepromote.domain.events.promotion_events import (
    PromotionInitiatedEvent,
    RolloutConfirmedEvent,
)
from kubepromote.infrastructure.event_bus import EventBus, audit_logger


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_to_subscriber(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(PromotionInitiatedEvent, handler)

        event = PromotionInitiatedEvent(aggregate_id="qa/web", namespace="qa", label="web")
        await bus.publish([event])

        assert len(received) == 1
        assert received[0].aggregate_id == "qa/web"

    @pytest.mark.asyncio
    async def test_no_subscriber(self):
        bus = EventBus()
        await bus.publish([PromotionInitiatedEvent(aggregate_id="qa/web")])

    @pytest.mark.asyncio
    async def test_type_filtering(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(PromotionInitiatedEvent, handler)
        await bus.publish([DomainEvent(aggregate_id="qa/web"), RolloutConfirmedEvent()])

        assert received == []

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self, caplog):
        bus = EventBus()
        received = []

        async def broken(event):
            raise RuntimeError("handler down")

        async def handler(event):
            received.append(event)

        bus.subscribe(PromotionInitiatedEvent, broken)
        bus.subscribe(PromotionInitiatedEvent, handler)

        with caplog.at_level(logging.ERROR):
            await bus.publish([PromotionInitiatedEvent(aggregate_id="qa/web")])

        assert len(received) == 1
        assert "Event handler failed for PromotionInitiatedEvent" in caplog.text


class TestAuditLogger:
    @pytest.mark.asyncio
    async def test_logs_event(self, caplog):
        handler = audit_logger(logging.getLogger("kubepromote.audit.test"))
        event = PromotionInitiatedEvent(
            aggregate_id="qa/web", namespace="qa", label="web",
            from_version="1.0", to_version="1.1",
        )
        with caplog.at_level(logging.INFO, logger="kubepromote.audit.test"):
            await handler(event)

        assert "PromotionInitiatedEvent" in caplog.text
        assert "'to_version': '1.1'" in caplog.text
