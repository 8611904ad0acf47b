"""Keeps the badge cached on each habit and the user's earned badges in sync
with the habit's current streak."""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from habit_tracker.services.firestore_utils import HABITS_COLLECTION, USERS_COLLECTION
from habit_tracker.services.streak_service import (
    badge_for_streak,
    badges_up_to,
    calculate_current_streak,
)

logger = logging.getLogger(__name__)


def find_new_badges(
    earned_badges: List[Dict[str, Any]],
    habit_id: str,
    streak: int,
) -> List[str]:
    """Tiers reached by ``streak`` that the habit has not been credited with yet."""
    already_earned = {
        entry.get("badge")
        for entry in earned_badges or []
        if isinstance(entry, dict) and entry.get("habitId") == habit_id
    }
    return [badge for badge in badges_up_to(streak) if badge not in already_earned]


def sync_habit_badges(
    db,
    uid: str,
    habit_id: str,
    logs: List[Dict[str, Any]],
    today: date,
) -> Tuple[int, Optional[str], List[str]]:
    """Recompute the habit's streak and persist badge changes.

    Updates ``badge`` on the habit document, and appends an
    ``{habitId, badge, dateEarned}`` entry to the user's ``earnedBadges`` for
    every newly reached tier. Earned badges are never removed.

    Args:
        db: Firestore database instance
        uid: Owner of the habit
        habit_id: The habit that was just tracked
        logs: All logs of the habit, including the latest change
        today: The current day (UTC)

    Returns:
        Tuple of (current streak, current badge, newly earned badges)
    """
    streak = calculate_current_streak(logs, today=today)
    badge = badge_for_streak(streak)

    db.collection(HABITS_COLLECTION).document(habit_id).update({
        "badge": badge,
        "updatedAt": datetime.now(timezone.utc),
    })

    user_ref = db.collection(USERS_COLLECTION).document(uid)
    user_doc = user_ref.get()
    earned_badges = []
    if user_doc.exists:
        earned_badges = list((user_doc.to_dict() or {}).get("earnedBadges") or [])

    new_badges = find_new_badges(earned_badges, habit_id, streak)
    if new_badges:
        now = datetime.now(timezone.utc)
        for new_badge in new_badges:
            earned_badges.append({
                "habitId": habit_id,
                "badge": new_badge,
                "dateEarned": now,
            })
        user_ref.set({"earnedBadges": earned_badges}, merge=True)
        logger.info(f"[BADGES] User {uid} earned {new_badges} on habit {habit_id} (streak={streak})")

    return streak, badge, new_badges
