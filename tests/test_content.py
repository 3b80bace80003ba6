"""Tests for digest and SLA payload generation."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from claim_notifier.application.use_cases.notifications import all_clear_summary, generate
from claim_notifier.domain.entities import (
    Membership,
    NotificationKind,
    SlaPayload,
    SummaryPayload,
    TimeWindow,
)
from claim_notifier.domain.exceptions import NoDataError
from claim_notifier.infrastructure.repositories import ClaimRepository, TenantRepository

LIMA = ZoneInfo("America/Lima")
WINDOW = TimeWindow(
    start=datetime(2024, 5, 5, 8, 0, tzinfo=LIMA),
    end=datetime(2024, 5, 6, 8, 0, tzinfo=LIMA),
)


@pytest.fixture()
def tenant_data(seed):
    tenant_id = seed.tenant("acme")
    admin_id = seed.user("admin@acme.test", first_name="Alicia")
    staff_id = seed.user("staff@acme.test", first_name="Bruno")
    idle_id = seed.user("idle@acme.test", first_name="Carla")
    seed.member(tenant_id, admin_id, role="admin")
    seed.member(tenant_id, staff_id, role="staff")
    seed.member(tenant_id, idle_id, role="staff")

    seed.claim(
        tenant_id,
        "REC-001",
        datetime(2024, 5, 6, 7, 0, tzinfo=LIMA),
        updated_at=datetime(2024, 5, 6, 7, 30, tzinfo=LIMA),
        status="assigned",
        assigned_user_id=staff_id,
    )
    seed.claim(tenant_id, "REC-002", datetime(2024, 5, 1, 12, 0, tzinfo=LIMA))
    seed.claim(
        tenant_id,
        "REC-003",
        datetime(2024, 5, 5, 10, 0, tzinfo=LIMA),
        updated_at=datetime(2024, 5, 6, 6, 0, tzinfo=LIMA),
        status="resolved",
        resolved=True,
        resolved_at=datetime(2024, 5, 6, 6, 0, tzinfo=LIMA),
        assigned_user_id=admin_id,
    )
    seed.claim(tenant_id, "REC-004", datetime(2024, 4, 15, 9, 0, tzinfo=LIMA))
    return {"tenant": tenant_id, "admin": admin_id, "staff": staff_id, "idle": idle_id}


def _membership(data, key: str, role: str) -> Membership:
    return Membership(id=None, user_id=data[key], tenant_id=data["tenant"], role=role)


def test_admin_digest_covers_the_whole_tenant(session, settings, tenant_data) -> None:
    tenant = TenantRepository(session).get(tenant_data["tenant"])

    payload = generate(
        ClaimRepository(session),
        tenant,
        _membership(tenant_data, "admin", "admin"),
        NotificationKind.DAILY,
        WINDOW,
        settings=settings,
    )

    assert isinstance(payload, SummaryPayload)
    counts = payload.counts
    assert (counts.created, counts.resolved, counts.updated) == (2, 1, 2)
    assert (counts.pending, counts.processing) == (2, 1)
    assert counts.by_status == {"assigned": 1, "new": 2, "resolved": 1}
    assert (counts.overdue, counts.at_risk, counts.on_track) == (1, 0, 2)
    assert [(item.code, item.reason) for item in payload.attention] == [
        ("REC-004", "SLA vencido")
    ]
    assert [(item.code, item.action, item.time) for item in payload.recent_activity] == [
        ("REC-001", "Asignado", "07:30"),
        ("REC-003", "Resuelto", "06:00"),
    ]
    assert payload.resolution.total_claims == 4
    assert payload.resolution.resolved_claims == 1
    assert payload.resolution.resolution_rate == 25
    assert payload.resolution.average_resolution == timedelta(hours=20)
    assert payload.company_name == "Acme S.A.C."
    assert payload.dashboard_url == f"https://app.example.com/dashboard?tenant={tenant.id}"


def test_staff_digest_only_sees_assigned_claims(session, settings, tenant_data) -> None:
    tenant = TenantRepository(session).get(tenant_data["tenant"])

    payload = generate(
        ClaimRepository(session),
        tenant,
        _membership(tenant_data, "staff", "staff"),
        NotificationKind.DAILY,
        WINDOW,
        settings=settings,
    )

    counts = payload.counts
    assert (counts.created, counts.resolved, counts.updated) == (1, 0, 1)
    assert (counts.pending, counts.processing, counts.overdue) == (0, 1, 0)
    assert [item.code for item in payload.recent_activity] == ["REC-001"]
    assert payload.attention == ()


def test_no_visible_activity_raises_no_data(session, settings, tenant_data) -> None:
    tenant = TenantRepository(session).get(tenant_data["tenant"])

    with pytest.raises(NoDataError):
        generate(
            ClaimRepository(session),
            tenant,
            _membership(tenant_data, "idle", "staff"),
            NotificationKind.DAILY,
            WINDOW,
            settings=settings,
        )


def test_claims_close_to_deadline_are_reported_at_risk(session, settings, seed) -> None:
    tenant_id = seed.tenant("beta")
    admin_id = seed.user("admin@beta.test")
    seed.member(tenant_id, admin_id, role="owner")
    seed.claim(
        tenant_id,
        "BET-001",
        datetime(2024, 5, 6, 7, 0, tzinfo=LIMA),
        sla_due_at=datetime(2024, 5, 7, 12, 0, tzinfo=LIMA),
    )
    tenant = TenantRepository(session).get(tenant_id)

    payload = generate(
        ClaimRepository(session),
        tenant,
        Membership(id=None, user_id=admin_id, tenant_id=tenant_id, role="owner"),
        NotificationKind.WEEKLY,
        WINDOW,
        settings=settings,
    )

    assert payload.counts.at_risk == 1
    assert payload.attention[0].reason == "Vence el 07/05 12:00"


def test_membership_of_another_tenant_is_rejected(session, settings, tenant_data) -> None:
    tenant = TenantRepository(session).get(tenant_data["tenant"])

    with pytest.raises(ValueError):
        generate(
            ClaimRepository(session),
            tenant,
            Membership(id=None, user_id=tenant_data["admin"], tenant_id=999, role="admin"),
            NotificationKind.DAILY,
            WINDOW,
            settings=settings,
        )


def test_sla_payload_reports_overdue_duration(session, settings, tenant_data) -> None:
    repository = ClaimRepository(session)
    tenant = TenantRepository(session).get(tenant_data["tenant"])
    reference = datetime(2024, 5, 6, 8, 15, tzinfo=LIMA)
    [(claim, breach_at)] = repository.list_overdue_unresolved_claims(tenant.id, reference)

    payload = generate(
        repository,
        tenant,
        None,
        NotificationKind.SLA,
        None,
        reference_time=reference,
        claim=claim,
        breach_at=breach_at,
        recipient_ids=[tenant_data["admin"], tenant_data["admin"]],
        settings=settings,
    )

    assert isinstance(payload, SlaPayload)
    assert payload.claim.code == "REC-004"
    assert payload.breach_at == datetime(2024, 4, 30, 9, 0, tzinfo=LIMA)
    assert payload.overdue_by == timedelta(days=5, hours=23, minutes=15)
    assert payload.recipient_ids == (tenant_data["admin"],)


def test_all_clear_summary_has_empty_counts(session, settings, tenant_data) -> None:
    tenant = TenantRepository(session).get(tenant_data["tenant"])

    payload = all_clear_summary(
        tenant, tenant_data["idle"], NotificationKind.DAILY, WINDOW, settings=settings
    )

    assert payload.all_clear is True
    assert payload.counts.is_empty
