from datetime import datetime, timedelta

from nikkah.models.connection_request import ConnectionRequest
from nikkah.models.user import User


def _admin(make_user):
    return make_user(gender="male", role="ADMIN")


def test_register_female_gets_initial_requests(client, db, auth_headers):
    res = client.post(
        "/api/auth/register",
        json={"email": "Aisha@Example.com", "password": "secret123", "full_name": "Aisha", "gender": "female"},
    )
    assert res.status_code == 201
    token = res.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["email"] == "aisha@example.com"
    assert me["requests_remaining"] == 3
    assert me["renewal_date"] is not None


def test_register_male_starts_without_requests(client):
    token = client.post(
        "/api/auth/register", json={"email": "ali@example.com", "password": "secret123", "gender": "male"}
    ).json()["access_token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["requests_remaining"] == 0
    assert me["subscription_status"] == "inactive"


def test_register_validation(client):
    body = {"email": "x@example.com", "password": "123", "gender": "female"}
    assert client.post("/api/auth/register", json=body).status_code == 400
    body["password"] = "secret123"
    assert client.post("/api/auth/register", json=body).status_code == 201
    assert client.post("/api/auth/register", json=body).status_code == 409


def test_login_and_change_password(client):
    token = client.post(
        "/api/auth/register", json={"email": "b@example.com", "password": "secret123", "gender": "female"}
    ).json()["access_token"]
    assert client.post("/api/auth/login", json={"email": "b@example.com", "password": "wrong"}).status_code == 401

    res = client.put(
        "/api/auth/me/password", json={"new_password": "newsecret"}, headers={"Authorization": f"Bearer {token}"}
    )
    assert res.status_code == 200
    res = client.post("/api/auth/login", json={"email": "B@example.com", "password": "newsecret"})
    assert res.status_code == 200
    assert res.json()["token_type"] == "bearer"


def test_photo_token_is_not_a_login_token(client, female):
    from nikkah.services.photo_storage import create_photo_token

    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {create_photo_token(female.id)}"})
    assert res.status_code == 401


def test_admin_routes_need_admin(client, female, auth_headers):
    assert client.get("/api/users", headers=auth_headers(female)).status_code == 403
    res = client.post("/api/admin/jobs/allocate-monthly-requests", headers=auth_headers(female))
    assert res.status_code == 403


def test_subscription_activation_grants_requests(client, db, make_user, auth_headers):
    admin = _admin(make_user)
    member = make_user(gender="male")
    res = client.put(
        f"/api/users/{member.id}/subscription",
        json={"subscription_status": "active", "subscription_plan": "Annual Plan"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 200
    assert res.json()["requests_remaining"] == 15

    res = client.patch(f"/api/users/{member.id}", json={"full_name": "Yusuf"}, headers=auth_headers(admin))
    assert res.json()["full_name"] == "Yusuf"
    assert client.get("/api/users/missing", headers=auth_headers(admin)).status_code == 404


def test_monthly_allocation_job(client, db, make_user, auth_headers):
    admin = _admin(make_user)
    member = make_user(
        gender="female",
        requests_remaining=0,
        has_received_initial_allocation=True,
        renewal_date=datetime.utcnow() - timedelta(days=1),
    )
    body = client.post("/api/admin/jobs/allocate-monthly-requests", headers=auth_headers(admin)).json()
    assert body["summary"]["successful"] == 1
    assert db.query(User.requests_remaining).filter(User.id == member.id).scalar() == 3

    again = client.post("/api/admin/jobs/allocate-monthly-requests", headers=auth_headers(admin)).json()
    assert again["summary"]["total"] == 0
    assert db.query(User.requests_remaining).filter(User.id == member.id).scalar() == 3


def test_reminder_job(client, db, make_user, female, auth_headers):
    admin = _admin(make_user)
    requester = make_user()
    db.add(
        ConnectionRequest(
            request_type="match",
            requester_id=requester.id,
            requested_id=female.id,
            created_at=datetime.utcnow() - timedelta(hours=30),
        )
    )
    db.commit()
    body = client.post("/api/admin/jobs/send-request-reminders", headers=auth_headers(admin)).json()
    assert body["sent"]["first"] == 1
    assert body["total"] == 1


def test_notification_bell_over_http(client, female, subscribed_male, auth_headers):
    client.post("/api/requests/match", json={"requested_id": female.id}, headers=auth_headers(subscribed_male))
    assert client.get("/api/notifications/unread-count", headers=auth_headers(female)).json() == {"unread": 1}
    notes = client.get("/api/notifications", headers=auth_headers(female)).json()
    assert notes[0]["type"] == "match_request"
    assert notes[0]["actor_id"] == subscribed_male.id

    assert client.post(f"/api/notifications/{notes[0]['id']}/read", headers=auth_headers(female)).status_code == 200
    assert client.post("/api/notifications/missing/read", headers=auth_headers(female)).status_code == 404
    assert client.post("/api/notifications/read-all", headers=auth_headers(female)).json()["updated"] == 0
