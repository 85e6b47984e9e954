"""
Notification sink: in-app notification row + optional email.
Best-effort: called after the triggering state change is committed, and never raises,
so a failed notification cannot undo an accepted request or a consumed credit.
"""
import logging
from functools import lru_cache
from typing import Any

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nikkah.models.notification import Notification
from nikkah.models.user import User
from nikkah.services.email_sender import EmailSender, render_email

logger = logging.getLogger(__name__)


class NotificationSink:
    def __init__(self, email_sender: EmailSender | None = None):
        self._email = email_sender or EmailSender()

    def notify(self, db: Session, user_id: str, event_type: str, payload: dict[str, Any] | None = None) -> None:
        payload = payload or {}
        self._store_in_app(db, user_id, event_type, payload)
        self._send_email(db, user_id, event_type, payload)

    def _store_in_app(self, db: Session, user_id: str, event_type: str, payload: dict[str, Any]) -> None:
        try:
            db.add(
                Notification(
                    user_id=user_id,
                    actor_id=payload.get("actor_id"),
                    type=event_type,
                    request_id=payload.get("request_id"),
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("In-app notification '%s' for user %s failed: %s", event_type, user_id, e)

    def _send_email(self, db: Session, user_id: str, event_type: str, payload: dict[str, Any]) -> None:
        if not self._email.enabled:
            return
        try:
            recipient = db.query(User).filter(User.id == user_id).first()
            if not recipient or not recipient.email_notifications:
                return
            sender_name = payload.get("actor_name") or "Someone"
            rendered = render_email(event_type, sender_name, recipient.full_name or "there")
            if not rendered:
                return
            subject, html = rendered
            self._email.send(recipient.email, subject, html)
            logger.info("Sent '%s' email to user %s", event_type, user_id)
        except (requests.RequestException, SQLAlchemyError) as e:
            logger.warning("Email notification '%s' for user %s failed: %s", event_type, user_id, e)


@lru_cache
def get_notification_sink() -> NotificationSink:
    return NotificationSink()


# ---------- In-app notification reads (bell) ----------


def list_notifications(db: Session, user_id: str, limit: int = 50) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def unread_count(db: Session, user_id: str) -> int:
    return db.query(Notification).filter(Notification.user_id == user_id, Notification.read == False).count()  # noqa: E712


def mark_read(db: Session, user_id: str, notification_id: str) -> bool:
    updated = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
