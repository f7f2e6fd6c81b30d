import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo
from fastapi.testclient import TestClient
from jose import jwt

from app.core.clock import FixedClock
from app.core.config import Settings, get_settings, settings
from app.main import create_app, install_services
from app.schemas.context import UserContext
from app.services.auth_service import AuthService

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def app(repo, sink):
    app = create_app()
    install_services(app, repo=repo, notifier=sink, clock=FixedClock(NOW))
    app.dependency_overrides[AuthService.get_current_user] = lambda: UserContext(user_id="u1")
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # senza "with": il lifespan (Mongo/RabbitMQ) non parte
    return TestClient(app)


def _create(client, name="Essay", due_at="2024-01-10T18:00:00Z", class_name="History"):
    return client.post(
        "/api/v1/assignments",
        json={"name": name, "class_name": class_name, "due_at": due_at},
    )


def test_healthcheck(client):
    response = client.get("/api/v1/assignments/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_and_list(client):
    response = _create(client)
    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Assignment created"
    assert body["description"] == "Your new assignment has been added."
    created = body["assignment"]
    assert created["name"] == "Essay"
    assert created["owner"] == "u1"
    assert response.headers["Location"] == f"/api/v1/assignments/{created['id']}"

    listed = client.get("/api/v1/assignments").json()
    assert len(listed) == 1
    assert listed[0]["urgency"] == "due_today"
    assert listed[0]["label"] == "Due today"
    assert listed[0]["style"] == "warning"
    assert listed[0]["due_display"] == "Wednesday, January 10, 2024 • 6:00 PM"


def test_create_blank_name_is_rejected(client, repo):
    response = _create(client, name="   ")
    assert response.status_code == 422
    assert repo.calls == []


def test_create_without_due_date(client):
    response = client.post("/api/v1/assignments", json={"name": "Essay", "class_name": "History"})
    assert response.status_code == 422


def test_naive_due_date_across_dst_change(repo, sink):
    # "adesso" è estate (CEST, +2), la scadenza cade in inverno (CET, +1)
    rome = ZoneInfo("Europe/Rome")
    app = create_app()
    install_services(app, repo=repo, notifier=sink, clock=FixedClock(datetime(2026, 7, 1, 12, 0, tzinfo=rome)))
    app.dependency_overrides[AuthService.get_current_user] = lambda: UserContext(user_id="u1")
    client = TestClient(app)

    body = _create(client, due_at="2026-12-01T23:59:00").json()
    [stored] = repo.items.values()
    assert stored.due_at == datetime(2026, 12, 1, 22, 59, tzinfo=timezone.utc)
    assert body["assignment"]["id"] == stored.id

    listed = client.get("/api/v1/assignments").json()
    assert listed[0]["due_display"] == "Tuesday, December 1, 2026 • 11:59 PM"


def test_board_split(client):
    first = _create(client, name="Lab", due_at="2024-01-09T23:00:00Z").json()["assignment"]
    _create(client, name="Essay", due_at="2024-01-15T10:00:00Z")
    client.patch(f"/api/v1/assignments/{first['id']}", json={"completed": True})

    board = client.get("/api/v1/assignments/board").json()
    assert board["pending_count"] == 1
    assert board["completed_count"] == 1
    assert board["pending"][0]["name"] == "Essay"
    assert board["pending"][0]["label"] == "in 5 days"
    assert board["pending"][0]["due_display"] == "Monday, January 15, 2024 • 10:00 AM"
    assert board["completed"][0]["label"] == "Completed"


def test_toggle_and_delete_messages(client):
    created = _create(client).json()["assignment"]

    response = client.patch(f"/api/v1/assignments/{created['id']}", json={"completed": True})
    assert response.status_code == 200
    body = response.json()
    assert body["assignment"]["completed"] is True
    assert body["title"] == "Assignment completed! 🎉"
    assert body["description"] == "Great job on finishing your assignment!"

    response = client.patch(f"/api/v1/assignments/{created['id']}", json={"completed": False})
    assert response.json()["title"] == "Assignment reopened"
    assert response.json()["description"] == "Assignment marked as incomplete."

    response = client.delete(f"/api/v1/assignments/{created['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == "Assignment deleted"
    assert response.json()["assignment"] is None
    assert client.get("/api/v1/assignments").json() == []


def test_unknown_assignment(client):
    response = client.patch("/api/v1/assignments/nope", json={"completed": True})
    assert response.status_code == 404
    assert response.json()["detail"] == "Failed to update assignment. Please try again."

    response = client.delete("/api/v1/assignments/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Failed to delete assignment. Please try again."


def test_store_unavailable_messages(client, repo):
    repo.unavailable = True
    response = client.get("/api/v1/assignments")
    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to load assignments. Please try again."

    response = _create(client)
    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to create assignment. Please try again."

    response = client.patch("/api/v1/assignments/x", json={"completed": True})
    assert response.json()["detail"] == "Failed to update assignment. Please try again."

    response = client.delete("/api/v1/assignments/x")
    assert response.json()["detail"] == "Failed to delete assignment. Please try again."


def test_permission_and_reminder_flow(client, sink):
    assert client.get("/api/v1/notifications/permission").json() == {
        "permission": "denied",
        "supported": True,
        "requested": False,
    }
    _create(client, name="Lab", due_at="2024-01-10T20:00:00Z")
    # permesso non ancora concesso: niente reminder
    assert sink.sent == []

    response = client.post("/api/v1/notifications/permission")
    assert response.json()["permission"] == "granted"
    assert response.json()["requested"] is True
    assert len(sink.sent) == 1

    _create(client, name="Quiz", due_at="2024-01-11T10:00:00Z")
    assert sink.sent[-1][1] == "You have 2 assignments due soon: Lab, Quiz"

    result = client.post("/api/v1/notifications/check").json()
    assert result["notified"] is True
    assert result["event"]["count"] == 2


def test_denied_permission_is_reported_as_requested(client, sink):
    sink.enabled = False

    before = client.get("/api/v1/notifications/permission").json()
    assert before["permission"] == "denied"
    assert before["requested"] is False

    client.post("/api/v1/notifications/permission")
    after = client.get("/api/v1/notifications/permission").json()
    assert after["permission"] == "denied"
    assert after["requested"] is True


def test_requires_token(app):
    app.dependency_overrides.clear()
    client = TestClient(app)
    assert client.get("/api/v1/assignments").status_code == 401


def test_bearer_token_accepted(app):
    app.dependency_overrides.clear()
    app.dependency_overrides[get_settings] = lambda: Settings(jwt_secret="test-secret")
    client = TestClient(app)

    token = jwt.encode({"sub": "u1", "email": "u1@example.com"}, "test-secret", algorithm="HS256")
    response = client.get("/api/v1/assignments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200

    bad = jwt.encode({"sub": "u1"}, "other-secret", algorithm="HS256")
    response = client.get("/api/v1/assignments", headers={"Authorization": f"Bearer {bad}"})
    assert response.status_code == 401


def test_token_without_subject_rejected():
    token = jwt.encode({"email": "x@example.com"}, "s", algorithm="HS256")
    with pytest.raises(PermissionError):
        AuthService.decode_token(token, Settings(jwt_secret="s"))


def test_decode_token():
    token = jwt.encode(
        {"sub": "u9", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}, "s", algorithm="HS256"
    )
    user = AuthService.decode_token(token, Settings(jwt_secret="s"))
    assert user.user_id == "u9"


def test_app_title_from_settings():
    assert create_app().title == settings.project_name
