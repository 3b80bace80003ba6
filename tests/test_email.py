"""Unit tests for the SendGrid email helper and the digest renderers."""

from __future__ import annotations

import json
import types
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from claim_notifier.domain.entities import (
    ActivityItem,
    AttentionItem,
    Claim,
    ClaimCounts,
    NotificationKind,
    ResolutionStats,
    SlaPayload,
    SummaryPayload,
    TimeWindow,
)
from claim_notifier.infrastructure import email as email_module

LIMA = ZoneInfo("America/Lima")


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"


class RecordingClient:
    """Stand-in for ``SendGridAPIClient`` that records sent messages."""

    messages: list = []
    status_code = 202

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        RecordingClient.messages.append(message)
        return types.SimpleNamespace(status_code=self.status_code, body=None)


@pytest.fixture(autouse=True)
def _reset_client():
    RecordingClient.messages = []
    RecordingClient.status_code = 202


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """When SendGrid settings are missing the helper should exit early."""

    class MissingSettings:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: MissingSettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    assert email_module.send_email("user@example.com", "Subject", "<p>Body</p>") is False
    assert RecordingClient.messages == []


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    assert email_module.send_email("user@example.com", "Subject", "<p>Body</p>") is True
    assert len(RecordingClient.messages) == 1


def test_send_email_rejected_status(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    RecordingClient.status_code = 500
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("user@example.com", "Subject", "<p>Body</p>")

    assert result is False
    assert "status 500" in caplog.text


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "field": None,
                    }
                ]
            }
        ).encode()

    class FailingClient(RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("user@example.com", "Subject", "<p>Body</p>")

    assert result is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_send_email_network_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class OfflineClient(RecordingClient):
        def send(self, message):
            raise ConnectionError("connection reset")

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", OfflineClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("user@example.com", "Subject", "<p>Body</p>")

    assert result is False
    assert "Error sending email to user@example.com" in caplog.text


def _window() -> TimeWindow:
    return TimeWindow(
        start=datetime(2024, 5, 5, 8, 0, tzinfo=LIMA),
        end=datetime(2024, 5, 6, 8, 0, tzinfo=LIMA),
    )


def test_render_summary_email_lists_counts_and_sections() -> None:
    payload = SummaryPayload(
        kind=NotificationKind.WEEKLY,
        tenant_id=1,
        user_id=2,
        company_name="Acme & Co",
        window=_window(),
        counts=ClaimCounts(created=3, pending=1, processing=2, resolved=4, updated=5, overdue=1),
        attention=(AttentionItem(code="REC-1", reason="SLA vencido"),),
        recent_activity=(ActivityItem(code="REC-2", action="Resuelto", time="06/05 07:45"),),
        resolution=ResolutionStats(
            resolved_claims=1, total_claims=4, average_resolution=timedelta(hours=36)
        ),
        dashboard_url="https://app.example.com/dashboard?tenant=1",
    )

    body = email_module.render_summary_email(payload, "Ana <admin>")

    assert email_module.build_summary_subject(payload) == "Resumen semanal de reclamos - Acme & Co"
    assert "Acme &amp; Co" in body
    assert "Ana &lt;admin&gt;" in body
    assert "Nuevos: 3" in body and "Resueltos: 4" in body
    assert "REC-1</strong>: SLA vencido" in body
    assert "06/05 07:45 - REC-2: Resuelto" in body
    assert "tasa de resolución 25%" in body
    assert "1.5 días" in body
    assert 'href="https://app.example.com/dashboard?tenant=1"' in body


def test_render_all_clear_summary() -> None:
    payload = SummaryPayload(
        kind=NotificationKind.DAILY,
        tenant_id=1,
        user_id=2,
        company_name="Acme",
        window=_window(),
        counts=ClaimCounts(),
        all_clear=True,
    )

    body = email_module.render_summary_email(payload, "Ana")

    assert "Sin novedades" in body
    assert "Nuevos:" not in body


def test_render_sla_email() -> None:
    claim = Claim(
        id=1,
        code="REC-9",
        tenant_id=1,
        customer_name=None,
        assigned_user_id=None,
        status="new",
        resolved=False,
        sla_due_at=None,
        resolved_at=None,
        creation_date=None,
        update_date=None,
    )
    payload = SlaPayload(
        tenant_id=1,
        company_name="Acme",
        claim=claim,
        breach_at=datetime(2024, 4, 30, 9, 0, tzinfo=LIMA),
        overdue_by=timedelta(days=2, hours=12),
    )

    assert email_module.build_sla_subject(payload) == "SLA en riesgo: REC-9"
    body = email_module.render_sla_email(payload)
    assert "30/04/2024 09:00" in body
    assert "2.5 días" in body


def test_format_days_handles_missing_values() -> None:
    assert email_module.format_days(None) == "N/A"
    assert email_module.format_days(timedelta(days=3)) == "3.0 días"
