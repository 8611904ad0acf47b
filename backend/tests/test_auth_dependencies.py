import pytest
from fastapi.testclient import TestClient

from habit_tracker.auth import dependencies
from habit_tracker.main import app


class StubAuth:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.tokens = []

    def verify_id_token(self, token, check_revoked=False):
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def anonymous_client(db):
    app.dependency_overrides.clear()
    return TestClient(app)


def use_auth(monkeypatch, stub):
    monkeypatch.setattr(dependencies, "get_firebase_auth", lambda: stub)
    return stub


def test_missing_token_is_rejected(anonymous_client):
    response = anonymous_client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json() == {"detail": "Authentication token is required"}


def test_valid_token_is_normalized(anonymous_client, monkeypatch):
    stub = use_auth(monkeypatch, StubAuth(result={
        "uid": "user-9",
        "email": "grace@habits.io",
        "name": "Grace",
        "firebase": {"sign_in_provider": "password"},
    }))

    response = anonymous_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 200
    assert response.json() == {
        "uid": "user-9",
        "email": "grace@habits.io",
        "email_verified": False,
        "name": "Grace",
    }
    assert stub.tokens == ["good-token"]


def test_malformed_token_is_rejected(anonymous_client, monkeypatch):
    use_auth(monkeypatch, StubAuth(error=ValueError("not a JWT")))

    response = anonymous_client.get("/api/v1/habits", headers={"Authorization": "Bearer junk"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid authentication token format"


def test_health_needs_no_token(anonymous_client):
    response = anonymous_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
