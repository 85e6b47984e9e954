import requests

from nikkah.models.notification import Notification
from nikkah.services.email_sender import EmailSender, render_email
from nikkah.services.notifications import NotificationSink, list_notifications, mark_all_read, mark_read, unread_count

from conftest import FakeEmailSender


def test_render_email_escapes_names():
    subject, html = render_email("match_request", "<b>Ali</b>", "Aisha")
    assert "Match Request" in subject
    assert "&lt;b&gt;Ali&lt;/b&gt;" in html
    assert render_email("match_rejected", "Ali", "Aisha") is None


def test_disabled_sender_skips_http():
    class _NoCalls:
        def post(self, *args, **kwargs):
            raise AssertionError("should not be called")

    sender = EmailSender(api_key="", session=_NoCalls())
    assert not sender.enabled
    assert sender.send("a@example.com", "s", "<p>x</p>") is False


def test_sender_posts_to_resend():
    calls = []

    class _Response:
        def raise_for_status(self):
            return None

    class _Session:
        def post(self, url, json=None, headers=None, timeout=None):
            calls.append((url, json, headers))
            return _Response()

    sender = EmailSender(api_key="re_test", session=_Session())
    assert sender.send("a@example.com", "Hello", "<p>x</p>")
    url, body, headers = calls[0]
    assert url == "https://api.resend.com/emails"
    assert body["to"] == ["a@example.com"]
    assert headers["Authorization"] == "Bearer re_test"


def test_sink_swallows_email_errors(db, female, caplog):
    sink = NotificationSink(email_sender=FakeEmailSender(error=requests.Timeout("slow")))
    sink.notify(db, female.id, "match_request", {"actor_name": "Ali"})
    assert db.query(Notification).count() == 1
    assert "failed" in caplog.text


def test_bell_reads(db, sink, female):
    for event in ("match_request", "photo_request", "match_removed"):
        sink.notify(db, female.id, event)
    assert unread_count(db, female.id) == 3
    assert len(list_notifications(db, female.id, limit=2)) == 2

    first = list_notifications(db, female.id)[0]
    assert mark_read(db, female.id, first.id)
    assert not mark_read(db, "someone-else", first.id)
    assert unread_count(db, female.id) == 2
    assert mark_all_read(db, female.id) == 2
    assert unread_count(db, female.id) == 0
