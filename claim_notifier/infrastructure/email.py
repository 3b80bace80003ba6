"""Helpers for sending digest and SLA emails via SendGrid."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from html import escape
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from claim_notifier.config import get_settings
from claim_notifier.domain.entities import NotificationKind, SlaPayload, SummaryPayload

logger = logging.getLogger(__name__)

_KIND_LABELS = {
    NotificationKind.DAILY: "diario",
    NotificationKind.WEEKLY: "semanal",
}


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        messages = [
            f"{item['message']} (field: {item['field']})" if item.get("field") else str(item["message"])
            for item in parsed.get("errors") or []
            if isinstance(item, dict) and item.get("message")
        ]
        if messages:
            return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_failure(recipient: str, status_code: Any, body: Any) -> None:
    details = _extract_sendgrid_error_details(body)
    if details:
        logger.error(
            "SendGrid rejected email to %s with status %s: %s",
            recipient,
            status_code,
            details,
        )
    else:
        logger.error("SendGrid rejected email to %s with status %s", recipient, status_code)


def send_email(recipient: str, subject: str, html_content: str) -> bool:
    """Send an email using the configured SendGrid credentials.

    Returns ``False`` when email is not configured or the API refused the
    message; network errors are logged and reported the same way.
    """

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:
        status_code = getattr(exc, "status_code", None)
        if status_code is None:
            logger.exception("Error sending email to %s via SendGrid", recipient)
        else:
            _log_sendgrid_failure(recipient, status_code, getattr(exc, "body", None))
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_sendgrid_failure(recipient, status_code, getattr(response, "body", None))
        return False

    logger.debug("Email '%s' accepted by SendGrid for %s", subject, recipient)
    return True


def format_days(value: timedelta | None) -> str:
    """Render a duration as the ``"X días"`` label used in digests."""

    if value is None:
        return "N/A"
    days = value.total_seconds() / 86400
    return f"{days:.1f} días"


def build_summary_subject(payload: SummaryPayload) -> str:
    label = _KIND_LABELS.get(payload.kind, payload.kind.value)
    return f"Resumen {label} de reclamos - {payload.company_name}"


def render_summary_email(payload: SummaryPayload, recipient_name: str) -> str:
    """Return the HTML body of a daily or weekly digest."""

    label = _KIND_LABELS.get(payload.kind, payload.kind.value)
    parts = [
        f"<h2>{escape(payload.company_name)}</h2>",
        f"<p>Hola {escape(recipient_name)},</p>",
    ]

    if payload.all_clear:
        parts.append(
            f"<p>Sin novedades: no hubo actividad en tus reclamos para el resumen {label}.</p>"
        )
    else:
        counts = payload.counts
        parts.append(f"<p>Este es tu resumen {label} de reclamos.</p>")
        parts.append(
            "<ul>"
            f"<li>Nuevos: {counts.created}</li>"
            f"<li>Pendientes: {counts.pending}</li>"
            f"<li>En proceso: {counts.processing}</li>"
            f"<li>Resueltos: {counts.resolved}</li>"
            f"<li>SLA vencido: {counts.overdue} | En riesgo: {counts.at_risk}"
            f" | En plazo: {counts.on_track}</li>"
            "</ul>"
        )
        if payload.attention:
            rows = "".join(
                f"<li><strong>{escape(item.code)}</strong>: {escape(item.reason)}</li>"
                for item in payload.attention
            )
            parts.append(f"<h3>Requieren atención</h3><ul>{rows}</ul>")
        if payload.recent_activity:
            rows = "".join(
                f"<li>{escape(item.time)} - {escape(item.code)}: {escape(item.action)}</li>"
                for item in payload.recent_activity
            )
            parts.append(f"<h3>Actividad reciente</h3><ul>{rows}</ul>")
        if payload.resolution is not None:
            parts.append(
                "<p>Últimos 30 días: "
                f"tasa de resolución {payload.resolution.resolution_rate}%, "
                f"tiempo promedio {format_days(payload.resolution.average_resolution)}.</p>"
            )

    if payload.dashboard_url:
        parts.append(
            f'<p><a href="{escape(payload.dashboard_url, quote=True)}">Ir al panel</a></p>'
        )
    return "".join(parts)


def build_sla_subject(payload: SlaPayload) -> str:
    return f"SLA en riesgo: {payload.claim.code}"


def render_sla_email(payload: SlaPayload) -> str:
    """Return the HTML body of an SLA breach alert."""

    return "".join(
        (
            f"<h2>{escape(payload.company_name)}</h2>",
            f"<p>El reclamo <strong>{escape(payload.claim.code)}</strong> superó su plazo de atención.</p>",
            f"<p>Vencimiento: {payload.breach_at:%d/%m/%Y %H:%M}</p>",
            f"<p>Retraso: {format_days(payload.overdue_by)}</p>",
        )
    )


__all__ = [
    "build_sla_subject",
    "build_summary_subject",
    "format_days",
    "render_sla_email",
    "render_summary_email",
    "send_email",
]
