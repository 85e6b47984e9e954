"""
Transactional email through the Resend HTTP API. If resend_api_key is empty, sending is disabled.
Templates are keyed by notification type; types without a template are in-app only.
"""
import logging
from html import escape

import requests

from nikkah.config import get_settings

logger = logging.getLogger(__name__)

_TEMPLATES: dict[str, tuple[str, str, str]] = {
    # type: (subject, heading, body with {sender})
    "match_request": (
        "💌 New Match Request on NikkahFirst",
        "New Match Request",
        "<strong>{sender}</strong> has sent you a match request. Log in to accept or decline it.",
    ),
    "photo_request": (
        "📸 New Photo Reveal Request on NikkahFirst",
        "Photo Reveal Request",
        "<strong>{sender}</strong> has requested to view your photos. Log in to approve or decline.",
    ),
    "match_accepted": (
        "🎉 Your Match Request was Accepted",
        "Match Accepted",
        "<strong>{sender}</strong> has accepted your match request. You can now view their details.",
    ),
    "photo_accepted": (
        "📸 Your Photo Reveal Request was Accepted",
        "Photo Request Accepted",
        "<strong>{sender}</strong> has accepted your photo reveal request.",
    ),
    "match_removed": (
        "A match has been removed on NikkahFirst",
        "Match Removed",
        "<strong>{sender}</strong> has removed your match.",
    ),
    "request_reminder": (
        "🔔 Reminder: You have pending match requests on NikkahFirst",
        "Reminder: Pending Match Request",
        "<strong>{sender}</strong> sent you a match request that is still pending. Please review it.",
    ),
}


def render_email(notification_type: str, sender_name: str, recipient_name: str) -> tuple[str, str] | None:
    """Return (subject, html) or None if this type has no email."""
    template = _TEMPLATES.get(notification_type)
    if not template:
        return None
    subject, heading, body = template
    settings = get_settings()
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f"<h1>{heading}</h1>"
        f"<p>Assalamu alaikum {escape(recipient_name)},</p>"
        f"<p>{body.format(sender=escape(sender_name))}</p>"
        f'<p><a href="{settings.frontend_url}/dashboard">Open NikkahFirst</a></p>'
        "<p>Best regards,<br>The NikkahFirst Team</p>"
        "</div>"
    )
    return subject, html


class EmailSender:
    def __init__(self, api_key: str | None = None, session: requests.Session | None = None):
        settings = get_settings()
        self._api_key = settings.resend_api_key if api_key is None else api_key
        self._url = settings.resend_api_url
        self._from = settings.email_from
        self._timeout = settings.email_timeout_seconds
        self._session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def send(self, to: str, subject: str, html: str) -> bool:
        """POST to Resend. Raises requests.RequestException on transport or HTTP errors."""
        if not self.enabled:
            logger.debug("Email disabled; skipping '%s' to %s", subject, to)
            return False
        res = self._session.post(
            self._url,
            json={"from": self._from, "to": [to], "subject": subject, "html": html},
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
        )
        res.raise_for_status()
        return True
