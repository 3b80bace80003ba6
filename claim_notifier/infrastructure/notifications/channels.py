"""Delivery channels used by the dispatch coordinator."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from claim_notifier.config import CHANNEL_EMAIL, CHANNEL_IN_APP
from claim_notifier.domain.entities import NOTIFICATION_TYPE_INFO, Notification
from claim_notifier.domain.exceptions import DeliveryError
from claim_notifier.infrastructure.email import send_email
from claim_notifier.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)

EmailSender = Callable[[str, str, str], bool]


@dataclass(frozen=True)
class Recipient:
    user_id: int
    email: str | None = None
    name: str = ""


@dataclass(frozen=True)
class Delivery:
    """Rendered notification ready to be handed to every channel.

    ``subject``/``html_body`` feed the email channel while
    ``title``/``description``/``type`` feed the in-app channel.
    """

    tenant_id: int
    recipients: tuple[Recipient, ...]
    subject: str
    html_body: str
    title: str
    description: str
    type: str = NOTIFICATION_TYPE_INFO


class DeliveryChannel(Protocol):
    name: str

    def deliver(self, delivery: Delivery) -> None:
        """Hand ``delivery`` over or raise :class:`DeliveryError`."""


class EmailChannel:
    """Send rendered notifications through SendGrid."""

    name = CHANNEL_EMAIL

    def __init__(self, sender: EmailSender | None = None) -> None:
        self._sender = sender or send_email

    def send(self, recipient: str, subject: str, body: str) -> bool:
        return self._sender(recipient, subject, body)

    def deliver(self, delivery: Delivery) -> None:
        failed: list[str] = []
        for recipient in delivery.recipients:
            if not recipient.email:
                failed.append(f"user {recipient.user_id} has no email address")
                continue
            if not self.send(recipient.email, delivery.subject, delivery.html_body):
                failed.append(f"email to {recipient.email} was not accepted")
        if failed:
            raise DeliveryError(self.name, "; ".join(failed))


class InAppChannel:
    """Persist notifications shown inside the dashboard.

    With ``commit=False`` rows are written inside a savepoint of ``session``:
    a storage error rolls back only that savepoint, and successful rows become
    visible when the owner of the session commits.
    """

    name = CHANNEL_IN_APP

    def __init__(self, session: Session, *, commit: bool = True) -> None:
        self.session = session
        self._commit = commit
        self._repository = NotificationRepository(session)

    def persist(
        self,
        tenant_id: int,
        user_id: int,
        title: str,
        description: str,
        type: str = NOTIFICATION_TYPE_INFO,
    ) -> bool:
        return self.persist_many(tenant_id, [user_id], title, description, type)

    def persist_many(
        self,
        tenant_id: int,
        user_ids: Sequence[int],
        title: str,
        description: str,
        type: str = NOTIFICATION_TYPE_INFO,
    ) -> bool:
        """Write one row per user id at once."""

        notifications = [
            Notification(
                id=None,
                tenant_id=tenant_id,
                user_id=user_id,
                title=title,
                description=description,
                type=type,
            )
            for user_id in user_ids
        ]
        try:
            if self._commit:
                self._repository.bulk_create(notifications)
            else:
                with self.session.begin_nested():
                    self._repository.bulk_create(notifications, commit=False)
        except SQLAlchemyError:
            if self._commit:
                self.session.rollback()
            logger.exception(
                "Could not persist in-app notification '%s' for tenant %s", title, tenant_id
            )
            return False
        return True

    def deliver(self, delivery: Delivery) -> None:
        user_ids = [recipient.user_id for recipient in delivery.recipients]
        if not self.persist_many(
            delivery.tenant_id, user_ids, delivery.title, delivery.description, delivery.type
        ):
            raise DeliveryError(self.name, "notification rows were not stored")


ChannelFactory = Callable[[Sequence[str], Session], list[DeliveryChannel]]


def build_channels(names: Sequence[str], session: Session) -> list[DeliveryChannel]:
    """Instantiate the channels configured for a notification kind."""

    channels: list[DeliveryChannel] = []
    for name in names:
        if name == CHANNEL_EMAIL:
            channels.append(EmailChannel())
        elif name == CHANNEL_IN_APP:
            channels.append(InAppChannel(session))
        else:
            raise ValueError(f"Unknown notification channel '{name}'")
    return channels


__all__ = [
    "ChannelFactory",
    "Delivery",
    "DeliveryChannel",
    "EmailChannel",
    "EmailSender",
    "InAppChannel",
    "Recipient",
    "build_channels",
]
