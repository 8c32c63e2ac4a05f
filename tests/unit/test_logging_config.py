"""Unit tests for FanPulse logging: PII redaction and the configured chain."""

import json

import structlog

from fanpulse.common.logging_config import (
    get_correlation_id,
    new_correlation_id,
    redact_pii,
    set_correlation_id,
    setup_logging,
)


class TestRedactPii:
    def test_known_keys_are_redacted(self) -> None:
        event = redact_pii(None, "info", {"event": "x", "email": "maria.r@email.com", "fan_name": "Maria"})

        assert event["email"] == "[REDACTED]"
        assert event["fan_name"] == "[REDACTED]"
        assert event["event"] == "x"

    def test_embedded_email_and_phone_are_masked(self) -> None:
        event = redact_pii(None, "info", {"details": "call +1 303-555-0199 or mail jlee@email.com"})

        assert "jlee@email.com" not in event["details"]
        assert "303-555-0199" not in event["details"]
        assert event["details"].startswith("call ")

    def test_non_string_values_untouched(self) -> None:
        event = redact_pii(None, "info", {"estimated_reach": 12, "email": None})
        assert event == {"estimated_reach": 12, "email": None}


def test_correlation_id_scopes() -> None:
    set_correlation_id("req-1")
    assert get_correlation_id() == "req-1"

    fresh = new_correlation_id()
    assert fresh != "req-1"
    assert get_correlation_id() == fresh


class TestDatesAreNotPhoneNumbers:
    def test_iso_dates_kept(self) -> None:
        event = redact_pii(
            None,
            "info",
            {"timestamp": "2026-10-19T05:06:51.865309Z", "event_date": "2026-10-19", "first_event": "0001-01-01"},
        )

        assert event["timestamp"] == "2026-10-19T05:06:51.865309Z"
        assert event["event_date"] == "2026-10-19"
        assert event["first_event"] == "0001-01-01"

    def test_phone_next_to_date_still_masked(self) -> None:
        event = redact_pii(None, "info", {"details": "Box office 303-555-0199, ticket for 2026-01-20"})
        assert event["details"] == "Box office [REDACTED], ticket for 2026-01-20"


class TestConfiguredChain:
    def test_emitted_line_keeps_timestamp_and_masks_contact(self, capsys) -> None:
        setup_logging("fanpulse-test", "INFO")
        set_correlation_id("req-42")

        structlog.get_logger("fanpulse.test").info(
            "engagement_event_logged",
            event_date="2026-01-15",
            details="Box office 303-555-0199, ticket for 2026-01-20",
            email="maria.r@email.com",
        )

        lines = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
        record = next(line for line in lines if line["event"] == "engagement_event_logged")
        assert "[REDACTED]" not in record["timestamp"]
        assert record["timestamp"][:2] == "20"
        assert record["event_date"] == "2026-01-15"
        assert record["details"] == "Box office [REDACTED], ticket for 2026-01-20"
        assert record["email"] == "[REDACTED]"
        assert record["correlation_id"] == "req-42"
        assert record["service"] == "fanpulse-test"
