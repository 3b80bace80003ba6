"""Tests for the dispatch coordinator."""

from __future__ import annotations

from datetime import datetime, time
from zoneinfo import ZoneInfo

import pytest

from claim_notifier.application.use_cases.notifications import (
    DispatchCoordinator,
    compute_slot,
)
from claim_notifier.domain.entities import NotificationKind, NotificationUnit
from claim_notifier.infrastructure.models import ClaimModel, TenantModel
from claim_notifier.infrastructure.repositories import PreferenceRepository

LIMA = ZoneInfo("America/Lima")
REFERENCE = datetime(2024, 5, 6, 8, 0, tzinfo=LIMA)


@pytest.fixture()
def member(seed):
    tenant_id = seed.tenant("acme")
    user_id = seed.user("ana@acme.test")
    seed.member(tenant_id, user_id, role="admin")
    seed.preference(tenant_id, user_id, frequency="daily", at=time(8, 0))
    seed.claim(tenant_id, "REC-001", datetime(2024, 5, 6, 7, 0, tzinfo=LIMA))
    return tenant_id, user_id


def _daily_unit(session, tenant_id: int, user_id: int, *, force: bool = False) -> NotificationUnit:
    [subscription] = PreferenceRepository(session).list_due_candidates(
        NotificationKind.DAILY, REFERENCE, tenant_id=tenant_id, user_id=user_id
    )
    slot = compute_slot(subscription, NotificationKind.DAILY, REFERENCE)
    return NotificationUnit(
        tenant_id=tenant_id,
        kind=NotificationKind.DAILY,
        reference_time=REFERENCE,
        user_id=user_id,
        window=slot.window,
        period_key=slot.period_key,
        force=force,
    )


def test_delivered_digest_writes_marker(session, coordinator, outbox, member) -> None:
    tenant_id, user_id = member
    unit = _daily_unit(session, tenant_id, user_id)

    outcome = coordinator.dispatch(unit)

    assert outcome.sent
    assert outbox.recipients == ["ana@acme.test"]
    subject = outbox.sent[0][1]
    assert subject == "Resumen diario de reclamos - Acme S.A.C."
    repository = PreferenceRepository(session)
    assert repository.has_sent_marker(tenant_id, user_id, NotificationKind.DAILY, "2024-05-06")
    assert repository.get(tenant_id, user_id).last_daily_sent_at == REFERENCE


def test_marked_unit_is_skipped_unless_forced(session, coordinator, outbox, member) -> None:
    tenant_id, user_id = member
    unit = _daily_unit(session, tenant_id, user_id)
    coordinator.dispatch(unit)

    repeated = coordinator.dispatch(unit)
    forced = coordinator.dispatch(_daily_unit(session, tenant_id, user_id, force=True))

    assert repeated.succeeded and repeated.skipped
    assert repeated.reason == "already_sent"
    assert forced.sent
    assert len(outbox.sent) == 2


def test_channel_failure_keeps_marker_untouched(session, coordinator, outbox, member) -> None:
    tenant_id, user_id = member
    unit = _daily_unit(session, tenant_id, user_id)
    outbox.failing.add("ana@acme.test")

    outcome = coordinator.dispatch(unit)

    assert not outcome.succeeded
    assert "ana@acme.test" in outcome.error
    assert not PreferenceRepository(session).has_sent_marker(
        tenant_id, user_id, NotificationKind.DAILY, "2024-05-06"
    )

    outbox.failing.clear()
    assert coordinator.dispatch(unit).sent


def test_unexpected_errors_become_failed_outcomes(
    session, session_factory, settings, member
) -> None:
    tenant_id, user_id = member

    def broken_factory(names, session):
        raise RuntimeError("smtp pool exhausted")

    coordinator = DispatchCoordinator(
        session_factory, settings=settings, channel_factory=broken_factory
    )

    outcome = coordinator.dispatch(_daily_unit(session, tenant_id, user_id))

    assert not outcome.succeeded
    assert outcome.error == "smtp pool exhausted"


def test_tenant_deactivated_after_enumeration_is_excluded(
    session, seed, coordinator, outbox, member
) -> None:
    tenant_id, user_id = member
    unit = _daily_unit(session, tenant_id, user_id)
    seed.update(TenantModel, tenant_id, active=False)

    outcome = coordinator.dispatch(unit)

    assert outcome.excluded
    assert not outcome.succeeded
    assert outbox.sent == []


def test_no_data_skips_without_marker(session, seed, coordinator, outbox) -> None:
    tenant_id = seed.tenant("quiet")
    user_id = seed.user("quiet@acme.test")
    seed.member(tenant_id, user_id, role="admin")
    seed.preference(tenant_id, user_id)

    outcome = coordinator.dispatch(_daily_unit(session, tenant_id, user_id))

    assert outcome.skipped
    assert outcome.reason == "no_data"
    assert outbox.sent == []
    assert not PreferenceRepository(session).has_sent_marker(
        tenant_id, user_id, NotificationKind.DAILY, "2024-05-06"
    )


def test_all_clear_digest_when_tenant_opted_in(session, seed, coordinator, outbox) -> None:
    tenant_id = seed.tenant("quiet", send_empty_digest=True)
    user_id = seed.user("quiet@acme.test")
    seed.member(tenant_id, user_id, role="staff")
    seed.preference(tenant_id, user_id)

    outcome = coordinator.dispatch(_daily_unit(session, tenant_id, user_id))

    assert outcome.sent
    assert "Sin novedades" in outbox.sent[0][2]


def test_alternate_notification_email_is_used(session, seed, coordinator, outbox) -> None:
    tenant_id = seed.tenant("acme")
    user_id = seed.user("ana@acme.test")
    seed.member(tenant_id, user_id, role="admin")
    seed.preference(tenant_id, user_id, notification_email="alerts@acme.test")
    seed.claim(tenant_id, "REC-001", datetime(2024, 5, 6, 7, 0, tzinfo=LIMA))

    coordinator.dispatch(_daily_unit(session, tenant_id, user_id))

    assert outbox.recipients == ["alerts@acme.test"]


def _sla_unit(tenant_id: int, claim_id: int, breach_at: datetime) -> NotificationUnit:
    return NotificationUnit(
        tenant_id=tenant_id,
        kind=NotificationKind.SLA,
        reference_time=REFERENCE,
        claim_id=claim_id,
        breach_at=breach_at,
    )


def test_sla_alert_goes_to_assigned_user_once(seed, coordinator) -> None:
    tenant_id = seed.tenant("acme")
    admin_id = seed.user("admin@acme.test")
    staff_id = seed.user("staff@acme.test")
    seed.member(tenant_id, admin_id, role="admin")
    seed.member(tenant_id, staff_id, role="staff")
    breach_at = datetime(2024, 5, 5, 9, 0, tzinfo=LIMA)
    claim_id = seed.claim(
        tenant_id,
        "REC-009",
        datetime(2024, 4, 20, 9, 0, tzinfo=LIMA),
        status="assigned",
        assigned_user_id=staff_id,
        sla_due_at=breach_at,
    )

    first = coordinator.dispatch(_sla_unit(tenant_id, claim_id, breach_at))
    second = coordinator.dispatch(_sla_unit(tenant_id, claim_id, breach_at))

    assert first.sent
    assert second.skipped and second.reason == "already_notified"
    [row] = seed.notifications()
    assert row.user_id == staff_id
    assert (row.title, row.description, row.type) == (
        "SLA en riesgo",
        "SLA en riesgo: REC-009",
        "warning",
    )


def test_unassigned_sla_alert_fans_out_to_admins(seed, coordinator) -> None:
    tenant_id = seed.tenant("acme")
    owner_id = seed.user("owner@acme.test")
    admin_id = seed.user("admin@acme.test")
    staff_id = seed.user("staff@acme.test")
    seed.member(tenant_id, owner_id, role="owner")
    seed.member(tenant_id, admin_id, role="admin")
    seed.member(tenant_id, staff_id, role="staff")
    breach_at = datetime(2024, 5, 5, 9, 0, tzinfo=LIMA)
    claim_id = seed.claim(
        tenant_id, "REC-010", datetime(2024, 4, 20, 9, 0, tzinfo=LIMA), sla_due_at=breach_at
    )

    assert coordinator.dispatch(_sla_unit(tenant_id, claim_id, breach_at)).sent

    assert sorted(row.user_id for row in seed.notifications()) == sorted([owner_id, admin_id])


def test_claim_resolved_after_enumeration_is_skipped(seed, coordinator) -> None:
    tenant_id = seed.tenant("acme")
    admin_id = seed.user("admin@acme.test")
    seed.member(tenant_id, admin_id, role="admin")
    breach_at = datetime(2024, 5, 5, 9, 0, tzinfo=LIMA)
    claim_id = seed.claim(
        tenant_id, "REC-011", datetime(2024, 4, 20, 9, 0, tzinfo=LIMA), sla_due_at=breach_at
    )
    seed.update(ClaimModel, claim_id, resolved=True, status="resolved")

    outcome = coordinator.dispatch(_sla_unit(tenant_id, claim_id, breach_at))

    assert outcome.skipped and outcome.reason == "resolved"
    assert seed.notifications() == []
