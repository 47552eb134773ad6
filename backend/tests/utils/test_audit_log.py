import json
from decimal import Decimal
from typing import Any, List

import pytest
from bookit.models import BookingStatus
from bookit.utils import audit_log
from bookit.utils.request_id import set_request_id


def test_emit_audit_log_outputs_json(monkeypatch) -> None:
    messages: List[str] = []

    class DummyLogger:
        def info(self, message: str) -> None:
            messages.append(message)

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    set_request_id("req-123")
    audit_log.emit_audit_log(
        action="booking.created",
        booking_id=1,
        booking_reference="BKABCD1234",
        experience_id=2,
        slot_id=3,
        num_guests=2,
        final_amount=Decimal("270.00"),
        promo_code="SAVE10",
        status=BookingStatus.CONFIRMED,
    )
    set_request_id(None)

    assert len(messages) == 1
    payload = json.loads(messages[0])
    assert payload["action"] == "booking.created"
    assert payload["request_id"] == "req-123"
    assert payload["booking_reference"] == "BKABCD1234"
    assert payload["final_amount"] == "270.00"
    assert payload["status"] == "confirmed"
    assert "timestamp" in payload


def test_rejection_drops_empty_fields(monkeypatch) -> None:
    messages: List[str] = []

    class DummyLogger:
        def info(self, message: str) -> None:
            messages.append(message)

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    audit_log.emit_audit_log(
        action="booking.rejected",
        booking_id=None,
        booking_reference=None,
        experience_id=2,
        slot_id=3,
        num_guests=11,
        message="capacity_exceeded",
    )
    payload = json.loads(messages[0])
    assert payload["message"] == "capacity_exceeded"
    assert "booking_id" not in payload
    assert "final_amount" not in payload


def test_emit_audit_log_raises_on_logger_failure(monkeypatch) -> None:
    class DummyLogger:
        def info(self, _: Any) -> None:
            raise ValueError("fail")

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    with pytest.raises(RuntimeError):
        audit_log.emit_audit_log(
            action="booking.created",
            booking_id=1,
            booking_reference="BKABCD1234",
            experience_id=2,
            slot_id=3,
            num_guests=2,
        )
