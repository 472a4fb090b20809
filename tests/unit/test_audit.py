"""Unit tests for the audit trail."""

import logging

import pytest

from coursereg.audit import AuditEvent, AuditEventType, AuditTrail


@pytest.mark.unit
class TestAuditTrail:
    """Tests for AuditTrail fan-out."""

    def test_record_delivers_to_every_sink(self) -> None:
        first: list[AuditEvent] = []
        second: list[AuditEvent] = []
        trail = AuditTrail()
        trail.subscribe(first.append)
        trail.subscribe(second.append)

        trail.record(AuditEventType.INVOICE_VERIFIED, 3, "Payment verified")

        assert len(first) == 1
        assert len(second) == 1
        assert first[0].event_type == AuditEventType.INVOICE_VERIFIED
        assert first[0].entity_id == 3
        assert first[0].occurred_at is not None

    def test_unsubscribe(self) -> None:
        received: list[AuditEvent] = []
        trail = AuditTrail()
        subscription = trail.subscribe(received.append)

        trail.unsubscribe(subscription)
        trail.record(AuditEventType.INSCRIPTION_CREATED, 1, "created")

        assert received == []
        assert trail.sink_count == 0

    def test_unsubscribe_unknown_id_is_ignored(self) -> None:
        trail = AuditTrail()
        trail.unsubscribe("missing")

        assert trail.sink_count == 0

    def test_failing_sink_does_not_propagate(self, caplog: pytest.LogCaptureFixture) -> None:
        """A broken sink is logged and the remaining sinks still run."""
        received: list[AuditEvent] = []

        def broken(_event: AuditEvent) -> None:
            raise RuntimeError("sink down")

        trail = AuditTrail()
        trail.subscribe(broken)
        trail.subscribe(received.append)

        with caplog.at_level(logging.ERROR, logger="coursereg.audit"):
            trail.record(AuditEventType.INSCRIPTION_DELETED, 9, "deleted")

        assert len(received) == 1
        assert "Audit sink failed" in caplog.text

    def test_with_log_sink_writes_info_line(self, caplog: pytest.LogCaptureFixture) -> None:
        trail = AuditTrail.with_log_sink()

        with caplog.at_level(logging.INFO, logger="coursereg.audit"):
            trail.record(AuditEventType.INSCRIPTION_ENROLLED, 5, "Inscription enrolled")

        assert trail.sink_count == 1
        assert "inscription_enrolled id=5" in caplog.text
