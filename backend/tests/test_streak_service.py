from datetime import date, datetime, timedelta, timezone

import pytest

from habit_tracker.services.streak_service import (
    ALL_BADGES,
    badge_for_streak,
    badges_up_to,
    calculate_completion_rate,
    calculate_current_streak,
    calculate_longest_streak,
    next_badge,
    normalize_logs,
)

TODAY = date(2026, 3, 15)


def days_ago(n, completed=True):
    return {"date": (TODAY - timedelta(days=n)).isoformat(), "completed": completed}


def test_empty_logs_have_no_streak_and_no_badge():
    assert calculate_current_streak([]) == 0
    assert calculate_longest_streak([]) == 0
    assert badge_for_streak(0) is None


def test_current_streak_counts_consecutive_days_from_the_newest_record():
    logs = [days_ago(3), days_ago(2), days_ago(1), days_ago(0)]
    assert calculate_current_streak(logs) == 4


def test_current_streak_stops_at_a_gap():
    logs = [days_ago(5), days_ago(4), days_ago(2), days_ago(1), days_ago(0)]
    assert calculate_current_streak(logs) == 3


def test_current_streak_stops_at_an_incomplete_day():
    logs = [days_ago(3), days_ago(2, completed=False), days_ago(1), days_ago(0)]
    assert calculate_current_streak(logs) == 2


def test_incomplete_most_recent_record_means_no_streak():
    logs = [days_ago(2), days_ago(1), days_ago(0, completed=False)]
    assert calculate_current_streak(logs) == 0


def test_input_order_does_not_matter():
    logs = [days_ago(0), days_ago(2), days_ago(1)]
    assert calculate_current_streak(logs) == 3


def test_without_today_the_streak_ends_at_the_newest_record():
    logs = [days_ago(12), days_ago(11), days_ago(10)]
    assert calculate_current_streak(logs) == 3


def test_streak_survives_until_today_is_logged():
    logs = [days_ago(3), days_ago(2), days_ago(1)]
    assert calculate_current_streak(logs, today=TODAY) == 3


def test_streak_is_broken_when_yesterday_was_missed():
    logs = [days_ago(4), days_ago(3), days_ago(2)]
    assert calculate_current_streak(logs, today=TODAY) == 0


def test_future_records_are_ignored_when_today_is_given():
    logs = [days_ago(1), days_ago(0), {"date": (TODAY + timedelta(days=1)).isoformat(), "completed": True}]
    assert calculate_current_streak(logs, today=TODAY) == 2


def test_duplicate_days_are_counted_once():
    logs = [days_ago(1), days_ago(1), days_ago(0)]
    assert calculate_current_streak(logs) == 2
    assert calculate_longest_streak(logs) == 2


def test_dates_can_be_datetimes_or_dates():
    logs = [
        {"date": datetime(2026, 3, 13, 22, 0, tzinfo=timezone.utc), "completed": True},
        {"date": date(2026, 3, 14), "completed": True},
        {"date": "2026-03-15T08:00:00.000Z", "completed": True},
    ]
    assert calculate_current_streak(logs, today=TODAY) == 3


def test_unparseable_dates_are_dropped():
    assert normalize_logs([{"date": "not a date", "completed": True}, {"completed": True}]) == []


def test_longest_streak_finds_the_best_run_in_history():
    logs = [
        days_ago(20), days_ago(19), days_ago(18), days_ago(17), days_ago(16),
        days_ago(10), days_ago(9),
        days_ago(1), days_ago(0),
    ]
    assert calculate_longest_streak(logs) == 5


def test_longest_streak_resets_on_incomplete_days():
    logs = [days_ago(4), days_ago(3), days_ago(2, completed=False), days_ago(1), days_ago(0)]
    assert calculate_longest_streak(logs) == 2


def test_non_consecutive_completions_do_not_accumulate():
    logs = [days_ago(8), days_ago(6), days_ago(4), days_ago(2), days_ago(0)]
    assert calculate_current_streak(logs) == 1
    assert calculate_longest_streak(logs) == 1


def test_completion_rate():
    logs = [days_ago(3), days_ago(2, completed=False), days_ago(1), days_ago(0, completed=False)]
    assert calculate_completion_rate(logs) == 0.5
    assert calculate_completion_rate([]) == 0.0


@pytest.mark.parametrize("streak, badge", [
    (0, None),
    (1, "Bronze"),
    (6, "Bronze"),
    (7, "Silver"),
    (29, "Silver"),
    (30, "Gold"),
    (90, "Diamond"),
    (179, "Diamond"),
    (180, "Ace"),
    (365, "Overachiever"),
    (1000, "Overachiever"),
])
def test_badge_thresholds(streak, badge):
    assert badge_for_streak(streak) == badge


def test_badges_up_to_lists_every_reached_tier():
    assert badges_up_to(30) == ["Bronze", "Silver", "Gold"]
    assert badges_up_to(365) == ALL_BADGES


def test_next_badge():
    assert next_badge(0) == {"badge": "Bronze", "daysRemaining": 1}
    assert next_badge(10) == {"badge": "Gold", "daysRemaining": 20}
    assert next_badge(365) is None
