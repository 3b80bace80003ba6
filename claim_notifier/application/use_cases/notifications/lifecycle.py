"""In-app notifications emitted when a claim changes state.

These helpers are best effort: any failure is logged and swallowed so the
claim operation that triggered them is never affected. Rows are written in a
savepoint of the caller's session, which the caller still commits or rolls
back together with its own changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from claim_notifier.domain.entities import (
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    Claim,
)
from claim_notifier.infrastructure.notifications import InAppChannel
from claim_notifier.infrastructure.repositories import MembershipRepository

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_NAME = "Cliente"


def notify_new_claim(
    session: Session,
    *,
    tenant_id: int,
    claim: Claim,
    customer_name: str | None = None,
    preferred_user_ids: Iterable[int | None] = (),
) -> int:
    """Notify owners, admins and ``preferred_user_ids`` about a new claim.

    Returns the number of notification rows written.
    """

    try:
        recipients = list(
            dict.fromkeys(
                [
                    *MembershipRepository(session).list_admin_user_ids(tenant_id),
                    *(user_id for user_id in preferred_user_ids if user_id),
                ]
            )
        )
        if not recipients:
            return 0
        name = (customer_name or claim.customer_name or "").strip() or DEFAULT_CUSTOMER_NAME
        stored = InAppChannel(session, commit=False).persist_many(
            tenant_id,
            recipients,
            "Nuevo reclamo",
            f"{claim.code} registrado por {name}.",
            NOTIFICATION_TYPE_INFO,
        )
        return len(recipients) if stored else 0
    except Exception:
        logger.exception("Could not notify new claim %s of tenant %s", claim.code, tenant_id)
        return 0


def notify_claim_assigned(
    session: Session, *, tenant_id: int, user_id: int | None, claim: Claim
) -> int:
    """Tell ``user_id`` that ``claim`` landed in their inbox."""

    return _notify_single(
        session,
        tenant_id=tenant_id,
        user_id=user_id,
        title="Reclamo asignado",
        description=f"{claim.code} asignado a tu bandeja.",
        type=NOTIFICATION_TYPE_INFO,
    )


def notify_claim_resolved(
    session: Session, *, tenant_id: int, user_id: int | None, claim: Claim
) -> int:
    return _notify_single(
        session,
        tenant_id=tenant_id,
        user_id=user_id,
        title="Reclamo resuelto",
        description=f"{claim.code} fue marcado como resuelto.",
        type=NOTIFICATION_TYPE_SUCCESS,
    )


def _notify_single(
    session: Session,
    *,
    tenant_id: int,
    user_id: int | None,
    title: str,
    description: str,
    type: str,
) -> int:
    if not user_id:
        return 0
    try:
        stored = InAppChannel(session, commit=False).persist(
            tenant_id, user_id, title, description, type
        )
    except Exception:
        logger.exception("Could not store '%s' notification for user %s", title, user_id)
        return 0
    return 1 if stored else 0


__all__ = [
    "DEFAULT_CUSTOMER_NAME",
    "notify_claim_assigned",
    "notify_claim_resolved",
    "notify_new_claim",
]
