"""Streak, completion-rate and badge calculations over habit logs.

Everything here is pure: callers fetch the log documents from Firestore and
pass them in as dicts (or pydantic models) with at least a ``date`` and a
``completed`` field.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

# (minimum streak in days, badge name), ascending
BADGE_TIERS: List[Tuple[int, str]] = [
    (1, "Bronze"),
    (7, "Silver"),
    (30, "Gold"),
    (90, "Diamond"),
    (180, "Ace"),
    (365, "Overachiever"),
]

ALL_BADGES = [name for _, name in BADGE_TIERS]


def parse_log_date(value: Any) -> Optional[date]:
    """Convert a stored log date (ISO string, date or datetime) to a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _field(log: Any, name: str, default: Any = None) -> Any:
    if isinstance(log, dict):
        return log.get(name, default)
    return getattr(log, name, default)


def normalize_logs(logs: Iterable[Any]) -> List[Tuple[date, bool]]:
    """Reduce log records to ``(day, completed)`` pairs sorted by day.

    Records without a parseable date are dropped. The sort is stable, so
    records sharing a day keep their original relative order.
    """
    normalized = []
    for log in logs:
        day = parse_log_date(_field(log, "date"))
        if day is None:
            continue
        normalized.append((day, bool(_field(log, "completed", False))))
    normalized.sort(key=lambda item: item[0])
    return normalized


def calculate_current_streak(logs: Iterable[Any], today: Optional[date] = None) -> int:
    """Count consecutive completed days ending at the most recent record.

    Walks from the newest record backward. Each counted day must be exactly
    one calendar day before the previously counted one; the walk stops at the
    first gap or at the first incomplete record.

    Args:
        logs: Log records for a single (user, habit) pair, in any order
        today: If given, records after this day are ignored and the streak
            is only alive when the newest record is dated today or yesterday

    Returns:
        The current streak length in days (0 for no logs)
    """
    records = normalize_logs(logs)
    if today is not None:
        records = [record for record in records if record[0] <= today]
    if not records:
        return 0

    if today is not None and records[-1][0] < today - timedelta(days=1):
        return 0

    streak = 0
    last_counted: Optional[date] = None
    for day, completed in reversed(records):
        if last_counted is not None and day == last_counted:
            # Same day logged twice
            continue
        if not completed:
            break
        if last_counted is not None and day != last_counted - timedelta(days=1):
            break
        streak += 1
        last_counted = day

    return streak


def calculate_longest_streak(logs: Iterable[Any]) -> int:
    """Find the longest run of consecutive completed days in the history."""
    records = normalize_logs(logs)

    best = 0
    current = 0
    previous: Optional[date] = None
    for day, completed in records:
        if previous is not None and day == previous and current > 0:
            continue
        if not completed:
            current = 0
            previous = None
            continue
        if previous is not None and day == previous + timedelta(days=1):
            current += 1
        else:
            current = 1
        previous = day
        best = max(best, current)

    return best


def calculate_completion_rate(logs: Iterable[Any]) -> float:
    """Completed entries divided by all entries (0.0 when there are none)."""
    total = 0
    completed = 0
    for log in logs:
        total += 1
        if _field(log, "completed", False):
            completed += 1
    if total == 0:
        return 0.0
    return completed / total


def badge_for_streak(streak: int) -> Optional[str]:
    """Return the highest badge tier the streak qualifies for, if any."""
    badge = None
    for threshold, name in BADGE_TIERS:
        if streak >= threshold:
            badge = name
        else:
            break
    return badge


def badges_up_to(streak: int) -> List[str]:
    """All tiers reached by a streak, lowest first."""
    return [name for threshold, name in BADGE_TIERS if streak >= threshold]


def next_badge(streak: int) -> Optional[Dict[str, Any]]:
    """The next tier above the current streak and the days still needed."""
    for threshold, name in BADGE_TIERS:
        if streak < threshold:
            return {"badge": name, "daysRemaining": threshold - streak}
    return None
