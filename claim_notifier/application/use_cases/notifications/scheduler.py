"""Periodic cadences that enumerate units and fold their outcomes."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Protocol

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from claim_notifier.config import Settings, get_settings
from claim_notifier.domain.entities import (
    DispatchOutcome,
    DispatchSummary,
    NotificationKind,
    NotificationUnit,
)
from claim_notifier.infrastructure.database import SessionFactory
from claim_notifier.infrastructure.repositories import ClaimRepository, PreferenceRepository
from claim_notifier.utils import ensure_app_timezone, get_app_timezone, now_in_app_timezone

from .dispatch import DispatchCoordinator
from .due import compute_slot, due_predicate

logger = logging.getLogger(__name__)

MISFIRE_GRACE_SECONDS = 300


class Dispatcher(Protocol):
    def dispatch(self, unit: NotificationUnit) -> DispatchOutcome: ...


class NotificationScheduler:
    """Own the daily, weekly and SLA cadences and run their ticks.

    ``tick`` can be called directly whether or not the cadences are running.
    Ticks of the same kind never overlap; different kinds may.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        settings: Settings | None = None,
        coordinator: Dispatcher | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._coordinator = coordinator or DispatchCoordinator(
            session_factory, settings=self._settings, clock=clock
        )
        self._clock = clock
        self._locks = {kind: threading.Lock() for kind in NotificationKind}
        self._scheduler: BackgroundScheduler | None = None

    @property
    def session_factory(self) -> SessionFactory:
        return self._session_factory

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def now(self) -> datetime:
        return self._clock()

    def tick(
        self,
        kind: NotificationKind,
        reference_time: datetime | None = None,
        *,
        tenant_id: int | None = None,
        user_id: int | None = None,
        bypass_due: bool = False,
        force: bool = False,
    ) -> DispatchSummary:
        """Enumerate and dispatch every unit of ``kind`` at ``reference_time``.

        ``bypass_due`` skips the preferred-time check (used by scoped manual
        triggers) and ``force`` ignores existing sent markers. Never raises.
        """

        kind = NotificationKind(kind)
        reference = ensure_app_timezone(reference_time) if reference_time else self._clock()

        with self._locks[kind]:
            errors: list[str] = []
            try:
                units = self._enumerate(
                    kind,
                    reference,
                    tenant_id=tenant_id,
                    user_id=user_id,
                    bypass_due=bypass_due,
                    force=force,
                )
            except Exception as exc:
                logger.exception("Could not enumerate %s notifications", kind.value)
                errors.append(f"Enumeration failed: {exc}")
                units = []
            outcomes = self._run(kind, units)

        summary = DispatchSummary.fold(kind, reference, outcomes, errors=errors)
        logger.info(
            "%s tick at %s: processed=%s sent=%s failed=%s skipped=%s excluded=%s",
            kind.value,
            reference.isoformat(),
            summary.processed,
            summary.sent,
            summary.failed,
            summary.skipped,
            summary.excluded,
        )
        return summary

    def start(self) -> None:
        """Register the three cadences; calling it twice is a no-op."""

        if self.running:
            logger.info("Notification scheduler already running")
            return

        settings = self._settings
        tz = get_app_timezone()
        scheduler = BackgroundScheduler(timezone=tz)
        cadences = (
            (NotificationKind.DAILY, CronTrigger(minute=settings.daily_check_minute, timezone=tz)),
            (
                NotificationKind.WEEKLY,
                CronTrigger(
                    day_of_week=settings.weekly_check_day_of_week,
                    hour=settings.weekly_check_hour,
                    minute=settings.weekly_check_minute,
                    timezone=tz,
                ),
            ),
            (NotificationKind.SLA, CronTrigger(minute=settings.sla_check_minute, timezone=tz)),
        )
        for kind, trigger in cadences:
            scheduler.add_job(
                self.tick,
                trigger=trigger,
                args=[kind],
                id=kind.value,
                name=f"{kind.value} notification check",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=MISFIRE_GRACE_SECONDS,
                replace_existing=True,
            )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Notification scheduler started with jobs %s", [k.value for k, _ in cadences])

    def stop(self) -> None:
        """Cancel future firings without waiting for in-flight ticks."""

        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Notification scheduler stopped")

    def status(self) -> dict[str, Any]:
        jobs = []
        if self.running:
            for job in self._scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run_time": next_run.isoformat() if next_run else None,
                    }
                )
        return {"running": self.running, "jobs": jobs}

    def _enumerate(
        self,
        kind: NotificationKind,
        reference: datetime,
        *,
        tenant_id: int | None,
        user_id: int | None,
        bypass_due: bool,
        force: bool,
    ) -> list[NotificationUnit]:
        session = self._session_factory()
        try:
            if kind is NotificationKind.SLA:
                claims = ClaimRepository(session, sla_days=self._settings.sla_days)
                return [
                    NotificationUnit(
                        tenant_id=claim.tenant_id,
                        kind=kind,
                        reference_time=reference,
                        claim_id=claim.id,
                        breach_at=breach_at,
                    )
                    for claim, breach_at in claims.list_overdue_unresolved_claims(
                        tenant_id, reference
                    )
                    if not claims.has_sla_marker(claim.id, breach_at)
                ]

            preferences = PreferenceRepository(session)
            candidates = preferences.list_due_candidates(
                kind,
                reference,
                tenant_id=tenant_id,
                user_id=user_id,
                is_due=None if bypass_due else due_predicate(kind),
            )
            units = []
            for subscription in candidates:
                slot = compute_slot(subscription, kind, reference)
                unit = NotificationUnit(
                    tenant_id=subscription.tenant.id,
                    kind=kind,
                    reference_time=reference,
                    user_id=subscription.user.id,
                    window=slot.window,
                    period_key=slot.period_key,
                    force=force,
                )
                # Scoped triggers keep marked units so the dispatcher reports them as skipped.
                if not (bypass_due or force) and preferences.has_sent_marker(
                    unit.tenant_id, unit.user_id, kind, slot.period_key
                ):
                    continue
                units.append(unit)
            return units
        finally:
            session.close()

    def _run(
        self, kind: NotificationKind, units: list[NotificationUnit]
    ) -> list[DispatchOutcome]:
        if not units:
            return []
        workers = min(self._settings.dispatch_concurrency, len(units))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"dispatch-{kind.value}"
        ) as pool:
            return list(pool.map(self._dispatch_one, units))

    def _dispatch_one(self, unit: NotificationUnit) -> DispatchOutcome:
        try:
            return self._coordinator.dispatch(unit)
        except Exception as exc:
            logger.exception("Dispatcher raised for %s", unit.describe())
            return DispatchOutcome.failure(unit, str(exc) or exc.__class__.__name__)


__all__ = ["Dispatcher", "MISFIRE_GRACE_SECONDS", "NotificationScheduler"]
