from __future__ import annotations

import html
import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventdrop.config import settings
from eventdrop.db.models.user import User
from eventdrop.db.models.user_role import ROLE_ADMIN, UserRole

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
SEND_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class AdminAlert:
    event_id: UUID
    title: str | None
    reason: str | None


class AdminNotifier:
    """Emails every administrator about a submission awaiting review.

    ``notify`` is fire-and-forget: it opens its own session, never raises,
    and returns how many administrators were addressed (0 when there was
    nothing to do or delivery failed).
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        api_key: str | None = None,
        sender: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self._sender = sender or settings.EMAIL_FROM
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def notify(self, alert: AdminAlert) -> int:
        try:
            return self._notify(alert)
        except Exception as exc:  # noqa: BLE001
            logger.error("Admin notification failed event_id=%s: %s", alert.event_id, exc)
            return 0

    def _notify(self, alert: AdminAlert) -> int:
        if not self.is_configured:
            logger.error("RESEND_API_KEY is not configured; skipping admin notification event_id=%s", alert.event_id)
            return 0

        try:
            recipients = self.admin_emails()
        except SQLAlchemyError as exc:
            logger.error("Could not resolve admin recipients: %s", exc)
            return 0

        if not recipients:
            logger.info("No admin emails found; nothing to notify event_id=%s", alert.event_id)
            return 0

        logger.info("Sending moderation notification to %s admin(s) event_id=%s", len(recipients), alert.event_id)
        try:
            self._send(recipients, alert)
        except httpx.HTTPError as exc:
            logger.error("Email delivery failed event_id=%s: %s", alert.event_id, exc)
            return 0

        return len(recipients)

    def admin_emails(self) -> list[str]:
        session = self._session_factory()
        try:
            stmt = (
                select(User.email)
                .join(UserRole, UserRole.user_id == User.id)
                .where(UserRole.role == ROLE_ADMIN, User.email.is_not(None))
                .order_by(User.email)
            )
            return [email for email in session.scalars(stmt).all() if email]
        finally:
            session.close()

    def _send(self, recipients: list[str], alert: AdminAlert) -> None:
        title = alert.title or "Untitled Event"
        payload = {
            "from": self._sender,
            "to": recipients,
            "subject": f"Event Pending Review: {title}",
            "html": render_alert_html(alert),
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        if self._http_client is not None:
            response = self._http_client.post(RESEND_API_URL, json=payload, headers=headers)
            response.raise_for_status()
            return

        with httpx.Client(timeout=SEND_TIMEOUT_S) as client:
            response = client.post(RESEND_API_URL, json=payload, headers=headers)
            response.raise_for_status()


def render_alert_html(alert: AdminAlert) -> str:
    title = html.escape(alert.title or "Untitled Event")
    reason = (
        f'<p style="margin: 0;"><strong>AI Reason:</strong> {html.escape(alert.reason)}</p>'
        if alert.reason
        else ""
    )
    return (
        '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h2 style="color: #d97706;">Event Flagged for Review</h2>'
        "<p>A new event submission has been flagged by the AI screening system and requires "
        "your review before it can be published.</p>"
        '<div style="background: #fef3c7; border: 1px solid #f59e0b; border-radius: 8px; padding: 16px;">'
        f'<p style="margin: 0 0 8px 0;"><strong>Event:</strong> {title}</p>'
        f'<p style="margin: 0 0 8px 0;"><strong>Event ID:</strong> {alert.event_id}</p>'
        f"{reason}"
        "</div>"
        "<p>Please log in to the admin dashboard to review and approve or reject this event.</p>"
        "</div>"
    )
