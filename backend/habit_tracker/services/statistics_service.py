"""Aggregate statistics over habits and logs: per-habit stats, per-user stats
and the leaderboard.

Functions take plain Firestore document dicts (with ``id`` set) and return
the pydantic response models, so routers only fetch and hand over data.
"""

import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from habit_tracker.models.leaderboard import (
    HabitCompletionRate,
    LongestStreakHabit,
    MostConsistentHabit,
    UserStats,
)
from habit_tracker.models.stats import DailyProgress, HabitStats, MonthlyProgress
from habit_tracker.models.track import HeatmapValue
from habit_tracker.models.user import EarnedBadge
from habit_tracker.services.firestore_utils import sort_by_created_at, to_utc_datetime
from habit_tracker.services.streak_service import (
    badge_for_streak,
    calculate_completion_rate,
    calculate_current_streak,
    calculate_longest_streak,
    parse_log_date,
)

WEEKLY_PROGRESS_DAYS = 7
MONTHLY_PROGRESS_MONTHS = 6


def group_logs_by_habit(logs: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for log in logs:
        habit_id = log.get("habitId")
        if habit_id:
            grouped[habit_id].append(log)
    return grouped


def _previous_months(today: date, count: int) -> List[Tuple[int, int]]:
    """(year, month) pairs for the last ``count`` months, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    months.reverse()
    return months


def build_weekly_progress(logs: List[Dict[str, Any]], today: date) -> List[DailyProgress]:
    completed_days = set()
    for log in logs:
        day = parse_log_date(log.get("date"))
        if day is not None and log.get("completed"):
            completed_days.add(day)

    progress = []
    for offset in range(WEEKLY_PROGRESS_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        progress.append(DailyProgress(date=day.isoformat(), completed=day in completed_days))
    return progress


def build_monthly_progress(logs: List[Dict[str, Any]], today: date) -> List[MonthlyProgress]:
    # (year, month) -> [completed, total]
    totals: Dict[Tuple[int, int], List[int]] = defaultdict(lambda: [0, 0])
    for log in logs:
        day = parse_log_date(log.get("date"))
        if day is None:
            continue
        bucket = totals[(day.year, day.month)]
        bucket[1] += 1
        if log.get("completed"):
            bucket[0] += 1

    progress = []
    for year, month in _previous_months(today, MONTHLY_PROGRESS_MONTHS):
        completed, total = totals.get((year, month), (0, 0))
        rate = completed / total if total else 0.0
        progress.append(MonthlyProgress(date=f"{year:04d}-{month:02d}", completionRate=round(rate, 4)))
    return progress


def build_habit_stats(habit: Dict[str, Any], logs: List[Dict[str, Any]], today: date) -> HabitStats:
    """Streaks, completion rate and progress series for one habit."""
    current_streak = calculate_current_streak(logs, today=today)
    return HabitStats(
        habitId=habit["id"],
        habitName=habit.get("name", ""),
        currentStreak=current_streak,
        longestStreak=calculate_longest_streak(logs),
        completionRate=round(calculate_completion_rate(logs), 4),
        totalCompletions=sum(1 for log in logs if log.get("completed")),
        totalLogs=len(logs),
        badge=badge_for_streak(current_streak),
        weeklyProgress=build_weekly_progress(logs, today),
        monthlyProgress=build_monthly_progress(logs, today),
    )


def _earned_badges(user: Dict[str, Any]) -> List[EarnedBadge]:
    badges = []
    for entry in user.get("earnedBadges") or []:
        if not isinstance(entry, dict) or not entry.get("habitId") or not entry.get("badge"):
            continue
        badges.append(EarnedBadge(
            habitId=entry["habitId"],
            badge=entry["badge"],
            dateEarned=to_utc_datetime(entry.get("dateEarned")),
        ))
    return badges


def build_user_stats(
    user: Dict[str, Any],
    habits: List[Dict[str, Any]],
    logs: List[Dict[str, Any]],
) -> UserStats:
    """Aggregate a user's habits and logs into leaderboard statistics.

    Most consistent habit: highest completion rate among habits that have at
    least one log. Longest streak habit: highest historical streak, only if it
    is above zero. Ties in both keep the habit created first.

    Args:
        user: The user document (``id`` is the uid)
        habits: The user's habit documents
        logs: All of the user's habit logs

    Returns:
        UserStats for the user
    """
    habits = sort_by_created_at(habits)
    logs_by_habit = group_logs_by_habit(logs)
    habit_ids = {habit["id"] for habit in habits}

    completion_rates: List[HabitCompletionRate] = []
    most_consistent: Optional[MostConsistentHabit] = None
    longest: Optional[LongestStreakHabit] = None

    for habit in habits:
        habit_logs = logs_by_habit.get(habit["id"], [])
        rate = round(calculate_completion_rate(habit_logs), 4)
        completion_rates.append(HabitCompletionRate(
            habitId=habit["id"],
            habitName=habit.get("name", ""),
            completionRate=rate,
        ))

        if habit_logs and (most_consistent is None or rate > most_consistent.completionRate):
            most_consistent = MostConsistentHabit(
                habitId=habit["id"],
                habitName=habit.get("name", ""),
                badge=habit.get("badge"),
                completionRate=rate,
            )

        max_streak = calculate_longest_streak(habit_logs)
        if max_streak > 0 and (longest is None or max_streak > longest.maxStreak):
            longest = LongestStreakHabit(
                habitId=habit["id"],
                habitName=habit.get("name", ""),
                badge=habit.get("badge"),
                maxStreak=max_streak,
            )

    # Logs of deleted habits are not counted
    total_completions = sum(
        1 for log in logs
        if log.get("completed") and log.get("habitId") in habit_ids
    )

    return UserStats(
        userId=user["id"],
        userName=user.get("name") or "",
        totalHabits=len(habits),
        totalCompletions=total_completions,
        habitCompletionRates=completion_rates,
        earnedBadges=_earned_badges(user),
        mostConsistentHabit=most_consistent,
        longestStreakHabit=longest,
    )


def build_all_user_stats(
    users: List[Dict[str, Any]],
    habits: List[Dict[str, Any]],
    logs: List[Dict[str, Any]],
) -> List[UserStats]:
    """Group every habit and log by owner and build stats for each user."""
    habits_by_user: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for habit in habits:
        habits_by_user[habit.get("uid")].append(habit)
    logs_by_user: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for log in logs:
        logs_by_user[log.get("uid")].append(log)

    return [
        build_user_stats(user, habits_by_user.get(user["id"], []), logs_by_user.get(user["id"], []))
        for user in users
    ]


def rank_users(user_stats: List[UserStats]) -> List[UserStats]:
    """Order users by total completions DESC, then name and id ASC."""
    return sorted(
        user_stats,
        key=lambda stats: (-stats.totalCompletions, stats.userName.lower(), stats.userId),
    )


def paginate(items: List[Any], page: int, page_size: int) -> Dict[str, Any]:
    """Slice a 1-based page out of ``items``."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    start = (page - 1) * page_size
    return {
        "items": items[start:start + page_size],
        "total": total,
        "page": page,
        "totalPages": total_pages,
    }


def find_user_rank(ranked: List[UserStats], uid: str) -> Optional[int]:
    for position, stats in enumerate(ranked, start=1):
        if stats.userId == uid:
            return position
    return None


def build_heatmap(logs: Iterable[Dict[str, Any]]) -> List[HeatmapValue]:
    """Count completed entries per day, oldest day first."""
    counts: Dict[date, int] = defaultdict(int)
    for log in logs:
        if not log.get("completed"):
            continue
        day = parse_log_date(log.get("date"))
        if day is not None:
            counts[day] += 1
    return [HeatmapValue(date=day.isoformat(), count=counts[day]) for day in sorted(counts)]
