"""Small helpers shared by the routers for reading Firestore documents."""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

USERS_COLLECTION = "users"
HABITS_COLLECTION = "habits"
HABIT_LOGS_COLLECTION = "habit_logs"
TODOS_COLLECTION = "todos"

MAX_NAME_LENGTH = 255

logger = logging.getLogger(__name__)


def get_firestore_db():
    """Get Firestore database instance."""
    try:
        return firestore.client()
    except Exception as e:
        raise RuntimeError(f"Firestore not available: {e}")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def to_utc_datetime(value: Any) -> Optional[datetime]:
    """Convert a Firestore Timestamp or naive/aware datetime to an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    return None


def snapshot_to_dict(doc) -> Dict[str, Any]:
    """Return the document data with its id under ``id``."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def log_document_id(uid: str, habit_id: str, day: date) -> str:
    """Deterministic id so each (user, habit, day) has at most one log."""
    return f"{uid}_{habit_id}_{day.isoformat()}"


def stream_user_documents(db, collection: str, uid: str) -> List[Dict[str, Any]]:
    """All documents in ``collection`` owned by ``uid``."""
    query = db.collection(collection).where("uid", "==", uid).stream()
    return [snapshot_to_dict(doc) for doc in query]


def get_owned_habit(db, uid: str, habit_id: str) -> Optional[Dict[str, Any]]:
    """Fetch a habit, returning None when it is missing or owned by someone else."""
    doc = db.collection(HABITS_COLLECTION).document(habit_id).get()
    if not doc.exists:
        return None
    habit = snapshot_to_dict(doc)
    if habit.get("uid") != uid:
        return None
    return habit


def get_habit_logs(db, uid: str, habit_id: str) -> List[Dict[str, Any]]:
    """Logs for one habit, sorted by date ascending.

    Sorting happens here rather than with ``order_by`` so the query does not
    need a composite index.
    """
    query = db.collection(HABIT_LOGS_COLLECTION) \
        .where("uid", "==", uid) \
        .where("habitId", "==", habit_id) \
        .stream()
    logs = [snapshot_to_dict(doc) for doc in query]
    logs.sort(key=lambda log: log.get("date") or "")
    return logs


def sort_by_created_at(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(documents, key=lambda d: to_utc_datetime(d.get("createdAt")) or epoch)


def get_or_create_user_profile(db, current_user: Dict[str, Any]) -> Dict[str, Any]:
    """Load the caller's profile, creating it from the token claims on first access.

    Only users with a profile appear on the leaderboard, so every write path
    goes through here.
    """
    uid = current_user["uid"]
    user_ref = db.collection(USERS_COLLECTION).document(uid)
    user_doc = user_ref.get()
    if user_doc.exists:
        return snapshot_to_dict(user_doc)

    now = datetime.now(timezone.utc)
    profile = {
        "name": (current_user.get("name") or (current_user.get("email") or "").split("@")[0])[:MAX_NAME_LENGTH],
        "email": current_user.get("email"),
        "age": None,
        "earnedBadges": [],
        "createdAt": now,
        "updatedAt": now,
    }
    user_ref.set(profile)
    logger.info(f"[USERS] Created profile for user {uid}")
    profile["id"] = uid
    return profile
