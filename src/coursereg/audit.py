"""Audit trail for completed state transitions.

Notifications are fire-and-forget: a failing sink is logged and skipped,
never propagated to the operation that recorded the event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

logger = logging.getLogger(__name__)


class AuditEventType(StrEnum):
    """Types of events recorded by the audit trail."""

    INSCRIPTION_CREATED = "inscription_created"
    INSCRIPTION_UPDATED = "inscription_updated"
    INSCRIPTION_ENROLLED = "inscription_enrolled"
    INSCRIPTION_DELETED = "inscription_deleted"
    INVOICE_CREATED = "invoice_created"
    INVOICE_VERIFIED = "invoice_verified"
    INVOICE_DELETED = "invoice_deleted"
    COURSE_DELETED = "course_deleted"


@dataclass(frozen=True)
class AuditEvent:
    """A recorded state transition."""

    event_type: AuditEventType
    entity_id: int
    description: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


AuditSink = Callable[[AuditEvent], None]


def log_sink(event: AuditEvent) -> None:
    """Default sink: one INFO line per event."""
    logger.info("%s id=%s: %s", event.event_type.value, event.entity_id, event.description)


@dataclass
class AuditTrail:
    """Fan-out of audit events to registered sinks."""

    _sinks: dict[str, AuditSink] = field(default_factory=dict)

    @classmethod
    def with_log_sink(cls) -> AuditTrail:
        """Create a trail that writes every event to the audit logger."""
        trail = cls()
        trail.subscribe(log_sink)
        return trail

    def subscribe(self, sink: AuditSink) -> str:
        """Register a sink.

        Args:
            sink: Callable receiving each AuditEvent.

        Returns:
            Subscription ID for unsubscribe().
        """
        subscription_id = str(uuid4())
        self._sinks[subscription_id] = sink
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> None:
        self._sinks.pop(subscription_id, None)

    @property
    def sink_count(self) -> int:
        return len(self._sinks)

    def record(self, event_type: AuditEventType, entity_id: int, description: str) -> None:
        """Deliver an event to every sink, swallowing sink failures."""
        event = AuditEvent(event_type=event_type, entity_id=entity_id, description=description)
        for sink in list(self._sinks.values()):
            try:
                sink(event)
            except Exception:
                logger.exception("Audit sink failed for %s id=%s", event_type.value, entity_id)
