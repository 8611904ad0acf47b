from datetime import datetime, timedelta, timezone


def today():
    return datetime.now(timezone.utc).date()


def day(n):
    return (today() - timedelta(days=n)).isoformat()


def mark(client, habit_id, days_ago=0, completed=True):
    return client.post("/api/v1/track", json={
        "habitId": habit_id,
        "date": day(days_ago),
        "completed": completed,
    })


def test_mark_creates_a_log_for_today_by_default(client, db, create_habit):
    habit = create_habit("Read")

    response = client.post("/api/v1/track", json={"habitId": habit["id"]})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Habit Marked"
    assert body["log"]["date"] == today().isoformat()
    assert body["log"]["completed"] is True
    assert body["currentStreak"] == 1
    assert body["badge"] == "Bronze"
    assert body["newBadges"] == ["Bronze"]
    assert f"user-1_{habit['id']}_{today().isoformat()}" in db.docs("habit_logs")


def test_marking_the_same_day_again_updates_the_log(client, db, create_habit):
    habit = create_habit("Read")
    mark(client, habit["id"])

    response = mark(client, habit["id"], completed=False)

    assert response.status_code == 200
    assert response.json()["message"] == "Habit updated"
    assert response.json()["currentStreak"] == 0
    assert response.json()["badge"] is None
    assert len(db.docs("habit_logs")) == 1
    assert db.docs("habits")[habit["id"]]["badge"] is None


def test_mark_rejects_future_dates_and_unknown_habits(client, create_habit):
    habit = create_habit("Read")
    tomorrow = (today() + timedelta(days=1)).isoformat()

    assert client.post("/api/v1/track", json={"habitId": habit["id"], "date": tomorrow}).status_code == 400
    assert client.post("/api/v1/track", json={"habitId": "missing"}).status_code == 404
    assert client.post("/api/v1/track", json={"habitId": habit["id"], "date": "yesterday"}).status_code == 422


def test_badges_are_recorded_once_per_tier(client, db, create_habit):
    habit = create_habit("Read")
    for n in range(6, 0, -1):
        mark(client, habit["id"], days_ago=n)

    response = mark(client, habit["id"], days_ago=0)

    assert response.json()["currentStreak"] == 7
    assert response.json()["badge"] == "Silver"
    assert response.json()["newBadges"] == ["Silver"]
    earned = db.docs("users")["user-1"]["earnedBadges"]
    assert [(b["habitId"], b["badge"]) for b in earned] == [(habit["id"], "Bronze"), (habit["id"], "Silver")]
    assert db.docs("habits")[habit["id"]]["badge"] == "Silver"


def test_backfilled_history_can_earn_several_tiers_at_once(client, db, create_habit):
    habit = create_habit("Read")
    # Nothing newer than two days ago, so no streak is alive yet
    for n in range(7, 1, -1):
        assert mark(client, habit["id"], days_ago=n).json()["currentStreak"] == 0

    response = mark(client, habit["id"], days_ago=1)

    assert response.json()["currentStreak"] == 7
    assert response.json()["newBadges"] == ["Bronze", "Silver"]
    earned = db.docs("users")["user-1"]["earnedBadges"]
    assert [b["badge"] for b in earned] == ["Bronze", "Silver"]


def test_earned_badges_survive_a_broken_streak(client, db, create_habit):
    habit = create_habit("Read")
    mark(client, habit["id"])
    mark(client, habit["id"], completed=False)

    earned = db.docs("users")["user-1"]["earnedBadges"]
    assert [b["badge"] for b in earned] == ["Bronze"]


def test_history_is_sorted_by_date(client, create_habit):
    habit = create_habit("Read")
    mark(client, habit["id"], days_ago=0)
    mark(client, habit["id"], days_ago=2)
    mark(client, habit["id"], days_ago=1, completed=False)

    response = client.get(f"/api/v1/track/{habit['id']}")

    assert response.status_code == 200
    assert [log["date"] for log in response.json()["logs"]] == [day(2), day(1), day(0)]


def test_summary(client, create_habit):
    habit = create_habit("Read")
    for n in (5, 4, 3, 1, 0):
        mark(client, habit["id"], days_ago=n)
    mark(client, habit["id"], days_ago=2, completed=False)

    response = client.get(f"/api/v1/track/summary/{habit['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["totalLogs"] == 6
    assert body["firstLog"] == day(5)
    assert body["lastLog"] == day(0)
    assert body["currentStreak"] == 2
    assert body["longestStreak"] == 3
    assert body["completionRate"] == round(5 / 6, 4)
    assert body["badge"] == "Bronze"
    assert body["nextBadge"] == {"badge": "Silver", "daysRemaining": 5}


def test_summary_of_an_empty_habit(client, create_habit):
    habit = create_habit("Read")

    body = client.get(f"/api/v1/track/summary/{habit['id']}").json()

    assert body["totalLogs"] == 0
    assert body["firstLog"] is None
    assert body["currentStreak"] == 0
    assert body["completionRate"] == 0.0
    assert body["badge"] is None


def test_summary_of_unknown_habit_is_not_found(client):
    assert client.get("/api/v1/track/summary/missing").status_code == 404
    assert client.get("/api/v1/track/missing").status_code == 404
    assert client.get("/api/v1/track/heatmap/missing").status_code == 404


def test_today_lists_only_todays_completions(client, create_habit):
    read = create_habit("Read")
    run = create_habit("Run")
    swim = create_habit("Swim")
    mark(client, read["id"])
    mark(client, run["id"], completed=False)
    mark(client, swim["id"], days_ago=1)

    body = client.get("/api/v1/track/today").json()

    assert body["count"] == 1
    assert body["logs"][0]["habitId"] == read["id"]


def test_stats_per_habit(client, create_habit):
    read = create_habit("Read")
    create_habit("Run")
    mark(client, read["id"], days_ago=1)
    mark(client, read["id"], days_ago=0)

    stats = client.get("/api/v1/track/stats").json()["stats"]

    assert [s["habitName"] for s in stats] == ["Read", "Run"]
    assert stats[0]["currentStreak"] == 2
    assert stats[0]["totalCompletions"] == 2
    assert stats[0]["weeklyProgress"][-1] == {"date": day(0), "completed": True}
    assert stats[1]["currentStreak"] == 0
    assert stats[1]["completionRate"] == 0.0


def test_all_returns_the_users_aggregate(client, create_habit):
    read = create_habit("Read")
    run = create_habit("Run")
    mark(client, read["id"], days_ago=1)
    mark(client, read["id"], days_ago=0)
    mark(client, run["id"], days_ago=0, completed=False)

    body = client.get("/api/v1/track/all").json()

    assert body["userId"] == "user-1"
    assert body["totalHabits"] == 2
    assert body["totalCompletions"] == 2
    assert body["mostConsistentHabit"]["habitId"] == read["id"]
    assert body["longestStreakHabit"]["maxStreak"] == 2
    assert body["longestStreakHabit"]["badge"] == "Bronze"
    assert [b["badge"] for b in body["earnedBadges"]] == ["Bronze"]


def test_heatmaps(client, create_habit):
    read = create_habit("Read")
    run = create_habit("Run")
    mark(client, read["id"], days_ago=1)
    mark(client, read["id"], days_ago=0)
    mark(client, run["id"], days_ago=0)

    single = client.get(f"/api/v1/track/heatmap/{read['id']}").json()
    combined = client.get("/api/v1/track/heatmap/combined").json()

    assert single == [{"date": day(1), "count": 1}, {"date": day(0), "count": 1}]
    assert combined == [{"date": day(1), "count": 1}, {"date": day(0), "count": 2}]
