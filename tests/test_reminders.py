from datetime import datetime, timedelta

from nikkah.models.connection_request import ConnectionRequest
from nikkah.models.notification import Notification
from nikkah.services.reminders import send_request_reminders

NOW = datetime(2026, 5, 10, 12, 0, 0)


def _pending(db, requester, requested, age_hours, request_type="match", status="pending"):
    req = ConnectionRequest(
        request_type=request_type,
        requester_id=requester.id,
        requested_id=requested.id,
        status=status,
        created_at=NOW - timedelta(hours=age_hours),
    )
    db.add(req)
    db.commit()
    return req


def test_reminders_follow_request_age(db, sink, make_user, female):
    fresh, day_old, three_days, old = make_user(), make_user(), make_user(), make_user()
    _pending(db, fresh, female, 5)
    _pending(db, day_old, female, 30)
    _pending(db, three_days, female, 72)
    _pending(db, old, female, 200)

    sent = send_request_reminders(db, NOW, sink)
    assert sent == {"final": 1, "second": 1, "first": 1}

    reminders = db.query(Notification).filter(Notification.type == "request_reminder").all()
    assert {n.actor_id for n in reminders} == {day_old.id, three_days.id, old.id}
    assert all(n.user_id == female.id for n in reminders)


def test_each_reminder_is_sent_once(db, sink, make_user, female, email_sender):
    requester = make_user()
    req = _pending(db, requester, female, 30)

    assert send_request_reminders(db, NOW, sink)["first"] == 1
    assert send_request_reminders(db, NOW, sink) == {"final": 0, "second": 0, "first": 0}
    assert len(email_sender.sent) == 1

    # A day later the second reminder becomes due
    assert send_request_reminders(db, NOW + timedelta(hours=24), sink)["second"] == 1
    db.refresh(req)
    assert req.reminder_first_sent and req.reminder_second_sent and not req.reminder_final_sent


def test_answered_and_photo_requests_get_no_reminder(db, sink, make_user, female):
    _pending(db, make_user(), female, 50, status="accepted")
    _pending(db, make_user(), female, 50, request_type="photo_reveal")
    assert sum(send_request_reminders(db, NOW, sink).values()) == 0
