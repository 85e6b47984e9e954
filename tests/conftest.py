import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["RESEND_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from nikkah.auth import create_access_token
from nikkah.config import get_settings
from nikkah.database import Base, get_db
from nikkah.main import app
from nikkah.models.user import Gender, User, SUBSCRIPTION_ACTIVE
from nikkah.services.entitlement import EntitlementPolicy
from nikkah.services.notifications import NotificationSink, get_notification_sink
from nikkah.services.request_workflow import RequestWorkflow, get_request_workflow


class FakeEmailSender:
    """Stands in for the Resend client; records what would have been sent."""

    def __init__(self, enabled: bool = True, error: Exception | None = None):
        self.enabled = enabled
        self.error = error
        self.sent: list[tuple[str, str]] = []

    def send(self, to: str, subject: str, html: str) -> bool:
        if self.error:
            raise self.error
        self.sent.append((to, subject))
        return True


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def sink(email_sender):
    return NotificationSink(email_sender=email_sender)


@pytest.fixture
def policy():
    return EntitlementPolicy()


@pytest.fixture
def workflow(policy, sink):
    return RequestWorkflow(policy=policy, sink=sink)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(
        gender: str = Gender.MALE.value,
        requests_remaining: int = 0,
        subscription_status: str = "inactive",
        subscription_plan: str | None = None,
        full_name: str | None = None,
        **fields,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"member{n}@example.com",
            full_name=full_name or f"Member {n}",
            gender=gender,
            requests_remaining=requests_remaining,
            subscription_status=subscription_status,
            subscription_plan=subscription_plan,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def freemium_male(make_user):
    return make_user(gender=Gender.MALE.value, requests_remaining=1)


@pytest.fixture
def subscribed_male(make_user):
    return make_user(
        gender=Gender.MALE.value,
        requests_remaining=10,
        subscription_status=SUBSCRIPTION_ACTIVE,
        subscription_plan="Monthly Plan",
    )


@pytest.fixture
def female(make_user):
    return make_user(gender=Gender.FEMALE.value, requests_remaining=3)


@pytest.fixture
def photo_dir(tmp_path, monkeypatch):
    folder = tmp_path / "photos"
    monkeypatch.setattr(get_settings(), "photo_upload_dir", str(folder))
    return folder


@pytest.fixture
def client(session_factory, workflow, sink, photo_dir):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_request_workflow] = lambda: workflow
    app.dependency_overrides[get_notification_sink] = lambda: sink
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}

    return _headers
