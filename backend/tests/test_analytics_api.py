from datetime import datetime, timedelta, timezone


def day(n):
    return (datetime.now(timezone.utc).date() - timedelta(days=n)).isoformat()


def test_analytics_groups_completed_days_by_habit(client, create_habit):
    read = create_habit("Read")
    run = create_habit("Run")
    for n in (2, 0):
        client.post("/api/v1/track", json={"habitId": read["id"], "date": day(n)})
    client.post("/api/v1/track", json={"habitId": run["id"], "completed": False})

    stats = client.get("/api/v1/analytics").json()["stats"]

    assert stats == [{"habitId": read["id"], "daysCompleted": 2, "dates": [day(2), day(0)]}]


def test_habit_progress(client, create_habit):
    habit = create_habit("Read")
    client.post("/api/v1/track", json={"habitId": habit["id"], "date": day(0)})
    client.post("/api/v1/track", json={"habitId": habit["id"], "date": day(3), "completed": False})

    body = client.get(f"/api/v1/analytics/{habit['id']}").json()

    assert body["totalLogs"] == 2
    assert body["firstLog"] == day(3)
    assert body["lastLog"] == day(0)
    assert [log["completed"] for log in body["logs"]] == [False, True]


def test_habit_progress_of_unknown_habit_is_not_found(client):
    assert client.get("/api/v1/analytics/missing").status_code == 404
