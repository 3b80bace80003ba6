"""Run a digest or SLA tick from the command line."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from datetime import datetime

from claim_notifier.application.use_cases.notifications import (
    ManualTriggerGateway,
    NotificationScheduler,
)
from claim_notifier.domain.entities import NotificationKind
from claim_notifier.domain.exceptions import NotFoundError
from claim_notifier.infrastructure.database import SessionLocal, initialize_database


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for a manual tick.

    ``--at`` replays a scheduled tick, so it cannot be scoped to a user or forced.
    """

    parser = argparse.ArgumentParser(
        description="Ejecuta manualmente los resúmenes o la revisión de SLA.",
    )
    parser.add_argument(
        "kind",
        choices=[kind.value for kind in NotificationKind],
        help="Tipo de notificación a procesar",
    )
    parser.add_argument("--tenant-id", type=int, default=None, help="Limitar a un tenant")
    parser.add_argument(
        "--user-id",
        type=int,
        default=None,
        help="Limitar a un usuario del tenant (solo resumen diario)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Reenviar aunque el periodo ya esté marcado como enviado.",
    )
    parser.add_argument(
        "--at",
        type=datetime.fromisoformat,
        default=None,
        help="Hora de referencia ISO 8601 para repetir un tick programado.",
    )
    args = parser.parse_args(argv)
    if args.at is not None and (args.user_id is not None or args.force):
        parser.error("--at no admite --user-id ni --force")
    return args


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    kind = NotificationKind(args.kind)

    initialize_database()
    scheduler = NotificationScheduler(SessionLocal)
    gateway = ManualTriggerGateway(scheduler)

    try:
        if args.at is not None:
            summary = scheduler.tick(kind, args.at, tenant_id=args.tenant_id)
        elif kind is NotificationKind.DAILY:
            summary = gateway.trigger_daily(
                tenant_id=args.tenant_id, user_id=args.user_id, force=args.force
            )
        elif kind is NotificationKind.WEEKLY:
            summary = gateway.trigger_weekly(tenant_id=args.tenant_id, force=args.force)
        else:
            summary = gateway.trigger_sla(tenant_id=args.tenant_id)
    except (NotFoundError, ValueError) as exc:
        raise SystemExit(f"No se pudo ejecutar el job: {exc}") from exc

    print(json.dumps(summary.as_dict(), indent=2, ensure_ascii=False))
    if summary.failed or summary.errors:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
