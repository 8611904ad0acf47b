def test_get_user_creates_profile_from_token(client, db):
    response = client.get("/api/v1/user")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["uid"] == "user-1"
    assert user["name"] == "Ada"
    assert user["email"] == "ada@habits.io"
    assert user["earnedBadges"] == []
    assert "user-1" in db.docs("users")


def test_profile_name_falls_back_to_email(client, current_user):
    current_user["name"] = None

    user = client.get("/api/v1/user").json()["user"]

    assert user["name"] == "ada"


def test_update_user(client, db):
    response = client.put("/api/v1/user/update", json={"name": "Ada L.", "age": 36})

    assert response.status_code == 200
    assert response.json()["message"] == "Changes done successfully"
    user = response.json()["user"]
    assert user["name"] == "Ada L."
    assert user["age"] == 36
    assert user["email"] == "ada@habits.io"
    assert db.docs("users")["user-1"]["age"] == 36


def test_update_user_validates_input(client):
    assert client.put("/api/v1/user/update", json={"age": -1}).status_code == 422
    assert client.put("/api/v1/user/update", json={"email": "not-an-email"}).status_code == 422


def test_delete_user_removes_all_owned_data(client, db, create_habit):
    habit = create_habit("Read")
    client.post("/api/v1/track", json={"habitId": habit["id"]})
    client.post("/api/v1/todo", json={"title": "Buy shoes"})
    db.collection("habits").document("other").set({"uid": "someone-else", "name": "Theirs"})

    response = client.delete("/api/v1/user/delete")

    assert response.status_code == 200
    assert db.docs("users") == {}
    assert db.docs("habit_logs") == {}
    assert db.docs("todos") == {}
    assert list(db.docs("habits")) == ["other"]


def test_delete_unknown_user_is_not_found(client):
    assert client.delete("/api/v1/user/delete").status_code == 404


def test_auth_me_returns_token_identity(client):
    body = client.get("/api/v1/auth/me").json()
    assert body["uid"] == "user-1"
    assert body["email_verified"] is True


def test_delete_user_with_only_todos_removes_them(client, db):
    client.post("/api/v1/todo", json={"title": "Buy shoes"})
    assert db.docs("users") == {}

    response = client.delete("/api/v1/user/delete")

    assert response.status_code == 200
    assert db.docs("todos") == {}


def test_profile_keeps_token_claims_that_strict_validation_would_reject(client, current_user, db):
    current_user["email"] = "dev@emulator.test"
    current_user["name"] = "x" * 300

    response = client.get("/api/v1/user")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "dev@emulator.test"
    assert len(user["name"]) == 255
    assert len(db.docs("users")["user-1"]["name"]) == 255
