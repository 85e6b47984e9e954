"""
Reminders for pending match requests: first after 24h, second after 48h, final after 7 days.
Latest due reminder only (a 10-day-old request gets just the final one).
Each flag is claimed with a conditional UPDATE before notifying, so a reminder goes out at most once
even if two job runs overlap.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from nikkah.models.connection_request import ConnectionRequest, RequestStatus, RequestType
from nikkah.models.user import User
from nikkah.services.notifications import NotificationSink, get_notification_sink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderTimeframe:
    name: str
    hours: int
    flag: str


REMINDER_TIMEFRAMES = (
    ReminderTimeframe("first", 24, "reminder_first_sent"),
    ReminderTimeframe("second", 48, "reminder_second_sent"),
    ReminderTimeframe("final", 168, "reminder_final_sent"),
)


def _claim_reminder(db: Session, request_id: str, timeframe: ReminderTimeframe) -> bool:
    """Set this reminder's flag and every earlier one, so an old request gets only its latest reminder."""
    column = getattr(ConnectionRequest, timeframe.flag)
    flags = {}
    for tf in REMINDER_TIMEFRAMES:
        flags[getattr(ConnectionRequest, tf.flag)] = True
        if tf is timeframe:
            break
    updated = (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.id == request_id,
            ConnectionRequest.status == RequestStatus.PENDING.value,
            column == False,  # noqa: E712
        )
        .update(flags, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def send_request_reminders(
    db: Session,
    now: datetime | None = None,
    sink: NotificationSink | None = None,
) -> dict[str, int]:
    """Send due reminders; returns number sent per timeframe."""
    now = now or datetime.utcnow()
    sink = sink or get_notification_sink()
    sent: dict[str, int] = {}
    for timeframe in reversed(REMINDER_TIMEFRAMES):
        cutoff = now - timedelta(hours=timeframe.hours)
        rows = (
            db.query(ConnectionRequest.id, ConnectionRequest.requester_id, ConnectionRequest.requested_id)
            .filter(
                ConnectionRequest.request_type == RequestType.MATCH.value,
                ConnectionRequest.status == RequestStatus.PENDING.value,
                ConnectionRequest.created_at <= cutoff,
                getattr(ConnectionRequest, timeframe.flag) == False,  # noqa: E712
            )
            .all()
        )
        count = 0
        for request_id, requester_id, requested_id in rows:
            if not _claim_reminder(db, request_id, timeframe):
                continue
            requester = db.query(User).filter(User.id == requester_id).first()
            sink.notify(
                db,
                requested_id,
                "request_reminder",
                {
                    "actor_id": requester_id,
                    "actor_name": requester.full_name if requester else None,
                    "request_id": request_id,
                    "reminder": timeframe.name,
                },
            )
            count += 1
        sent[timeframe.name] = count
        logger.info("Sent %s '%s' reminders for pending match requests", count, timeframe.name)
    return sent
