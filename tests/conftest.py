"""Shared fixtures: a file-backed SQLite database per test and data seeders."""

from __future__ import annotations

import os
import sys
import tempfile
from datetime import datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'claim_notifier_tests.db'}"
)
os.environ["APP_TIMEZONE"] = "America/Lima"
os.environ["SCHEDULER_ENABLED"] = "false"

from claim_notifier.application.use_cases.notifications import (  # noqa: E402
    DispatchCoordinator,
    NotificationScheduler,
)
from claim_notifier.config import CHANNEL_EMAIL, CHANNEL_IN_APP, Settings  # noqa: E402
from claim_notifier.infrastructure.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    initialize_database,
)
from claim_notifier.infrastructure.models import (  # noqa: E402
    ClaimModel,
    NotificationModel,
    NotificationPreferenceModel,
    TenantModel,
    UserModel,
    UserTenantModel,
)
from claim_notifier.infrastructure.notifications import EmailChannel, InAppChannel  # noqa: E402
from claim_notifier.utils import ensure_app_naive_datetime  # noqa: E402

LIMA = ZoneInfo("America/Lima")


class Outbox:
    """Records emails handed to the email channel; addresses in ``failing`` are refused."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.failing: set[str] = set()

    def send(self, recipient: str, subject: str, body: str) -> bool:
        if recipient in self.failing:
            return False
        self.sent.append((recipient, subject, body))
        return True

    @property
    def recipients(self) -> list[str]:
        return [recipient for recipient, _, _ in self.sent]

    def channel_factory(self, names, session):
        channels = []
        for name in names:
            if name == CHANNEL_EMAIL:
                channels.append(EmailChannel(sender=self.send))
            elif name == CHANNEL_IN_APP:
                channels.append(InAppChannel(session))
        return channels


class Seeder:
    """Insert rows through short-lived sessions and return their ids."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    def _save(self, model) -> int:
        session = self._session_factory()
        try:
            session.add(model)
            session.commit()
            return model.id
        finally:
            session.close()

    def tenant(self, slug: str = "acme", **fields) -> int:
        values = {
            "slug": slug,
            "legal_name": f"{slug.title()} S.A.C.",
            "brand_name": slug.title(),
            "active": True,
            "send_empty_digest": False,
        }
        values.update(fields)
        return self._save(TenantModel(**values))

    def user(self, email: str, first_name: str = "Ana", **fields) -> int:
        values = {"email": email, "first_name": first_name, "last_name": "Test", "is_active": True}
        values.update(fields)
        return self._save(UserModel(**values))

    def member(self, tenant_id: int, user_id: int, role: str = "staff") -> int:
        return self._save(UserTenantModel(tenant_id=tenant_id, user_id=user_id, role=role))

    def preference(
        self,
        tenant_id: int,
        user_id: int,
        frequency: str = "daily",
        at: time = time(8, 0),
        **fields,
    ) -> int:
        values = {
            "tenant_id": tenant_id,
            "user_id": user_id,
            "frequency": frequency,
            "preferred_notification_time": at,
            "email_notifications_enabled": True,
        }
        values.update(fields)
        return self._save(NotificationPreferenceModel(**values))

    def claim(self, tenant_id: int, code: str, created_at: datetime, **fields) -> int:
        values = {
            "tenant_id": tenant_id,
            "code": code,
            "customer_name": "Juan Pérez",
            "status": "new",
            "resolved": False,
            "creation_date": ensure_app_naive_datetime(created_at),
            "update_date": ensure_app_naive_datetime(fields.pop("updated_at", created_at)),
        }
        for name in ("sla_due_at", "resolved_at"):
            if name in fields:
                fields[name] = ensure_app_naive_datetime(fields[name])
        values.update(fields)
        return self._save(ClaimModel(**values))

    def update(self, model_class, row_id: int, **fields) -> None:
        session = self._session_factory()
        try:
            model = session.get(model_class, row_id)
            for name, value in fields.items():
                setattr(model, name, value)
            session.commit()
        finally:
            session.close()

    def notifications(self, user_id: int | None = None) -> list[NotificationModel]:
        session = self._session_factory()
        try:
            query = session.query(NotificationModel).order_by(NotificationModel.id)
            if user_id is not None:
                query = query.filter(NotificationModel.user_id == user_id)
            rows = query.all()
            session.expunge_all()
            return rows
        finally:
            session.close()


@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'notifier.db'}")
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        app_timezone="America/Lima",
        frontend_url="https://app.example.com",
        admin_api_key="admin-secret",
        scheduler_enabled=False,
        dispatch_concurrency=1,
        digest_channels=[CHANNEL_EMAIL],
        sla_channels=[CHANNEL_IN_APP],
    )


@pytest.fixture()
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture()
def outbox() -> Outbox:
    return Outbox()


@pytest.fixture()
def clock():
    return lambda: datetime(2024, 5, 6, 8, 0, tzinfo=LIMA)


@pytest.fixture()
def coordinator(session_factory, settings, outbox, clock) -> DispatchCoordinator:
    return DispatchCoordinator(
        session_factory,
        settings=settings,
        channel_factory=outbox.channel_factory,
        clock=clock,
    )


@pytest.fixture()
def scheduler(session_factory, settings, coordinator, clock):
    scheduler = NotificationScheduler(
        session_factory, settings=settings, coordinator=coordinator, clock=clock
    )
    yield scheduler
    scheduler.stop()
