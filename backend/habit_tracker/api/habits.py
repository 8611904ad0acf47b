import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime, timezone
import uuid

from habit_tracker.auth.dependencies import get_current_user
from habit_tracker.models.habit import (
    CreateHabitRequest,
    Habit,
    HabitResponse,
    HabitsListResponse,
    MessageResponse,
    UpdateHabitRequest,
)
from habit_tracker.services.firestore_utils import (
    HABITS_COLLECTION,
    HABIT_LOGS_COLLECTION,
    get_firestore_db,
    get_or_create_user_profile,
    get_owned_habit,
    sort_by_created_at,
    stream_user_documents,
    to_utc_datetime,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/habits",
    tags=["habits"],
)


def habit_from_document(habit_data: Dict[str, Any]) -> Habit:
    habit_data = dict(habit_data)
    habit_data["createdAt"] = to_utc_datetime(habit_data.get("createdAt")) or datetime.now(timezone.utc)
    habit_data["updatedAt"] = to_utc_datetime(habit_data.get("updatedAt"))
    return Habit(**habit_data)


def habit_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Habit not found"
    )


@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a habit",
    description="Creates a new habit owned by the current user.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def create_habit(
    request: CreateHabitRequest,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitResponse:
    """Create a new habit.

    Also creates the user's profile on first use so the user shows up on the
    leaderboard.

    Args:
        request: Habit name, category, frequency and optional goal
        current_user: The authenticated user object (injected via dependency)

    Returns:
        HabitResponse: The created habit
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        get_or_create_user_profile(db, current_user)

        habit_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        habit_data = {
            "uid": uid,
            "name": request.name.strip(),
            "description": request.description,
            "category": request.category,
            "frequency": request.frequency.model_dump(exclude_none=True),
            "goal": request.goal.model_dump() if request.goal else None,
            "badge": None,
            "createdAt": now,
            "updatedAt": now,
        }
        db.collection(HABITS_COLLECTION).document(habit_id).set(habit_data)

        logger.info(f"[HABITS] Created habit {habit_id} for user {uid}")
        return HabitResponse(
            message="Habit created successfully",
            habit=habit_from_document({"id": habit_id, **habit_data}),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[HABITS] Error creating habit: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create habit"
        )


@router.get(
    "",
    response_model=HabitsListResponse,
    summary="List habits",
    description="Returns all habits of the current user, oldest first.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_habits(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitsListResponse:
    try:
        db = get_firestore_db()
        habits = sort_by_created_at(stream_user_documents(db, HABITS_COLLECTION, current_user["uid"]))
        return HabitsListResponse(
            message="Your Habits are",
            habits=[habit_from_document(habit) for habit in habits],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[HABITS] Error listing habits: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve habits"
        )


@router.get(
    "/{habit_id}",
    response_model=HabitResponse,
    summary="Get a habit",
    description="Returns one habit of the current user.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def get_habit_by_id(
    habit_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitResponse:
    """Get a single habit.

    Habits owned by other users are reported as not found.

    Args:
        habit_id: The habit identifier
        current_user: The authenticated user object (injected via dependency)

    Returns:
        HabitResponse: The habit

    Raises:
        HTTPException: 404 if the habit does not exist for this user
    """
    try:
        db = get_firestore_db()
        habit = get_owned_habit(db, current_user["uid"], habit_id)
        if habit is None:
            raise habit_not_found()
        return HabitResponse(
            message="Habit fetched successfully",
            habit=habit_from_document(habit),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[HABITS] Error fetching habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve habit"
        )


@router.put(
    "/{habit_id}",
    response_model=HabitResponse,
    summary="Update a habit",
    description="Updates the given fields of a habit. Omitted fields are left unchanged.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def update_habit(
    habit_id: str,
    request: UpdateHabitRequest,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        habit = get_owned_habit(db, uid, habit_id)
        if habit is None:
            raise habit_not_found()

        # An explicit null clears description or goal; name, category and
        # frequency are required on a habit, so null leaves them unchanged
        given = request.model_dump(exclude_unset=True)
        updates: Dict[str, Any] = {}
        if given.get("name") is not None:
            updates["name"] = request.name.strip()
        if "description" in given:
            updates["description"] = request.description
        if given.get("category") is not None:
            updates["category"] = request.category
        if given.get("frequency") is not None:
            updates["frequency"] = request.frequency.model_dump(exclude_none=True)
        if "goal" in given:
            updates["goal"] = request.goal.model_dump() if request.goal else None
        updates["updatedAt"] = datetime.now(timezone.utc)

        db.collection(HABITS_COLLECTION).document(habit_id).update(updates)
        habit.update(updates)

        logger.info(f"[HABITS] Updated habit {habit_id} for user {uid}: {sorted(updates)}")
        return HabitResponse(
            message="Habit updated successfully",
            habit=habit_from_document(habit),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[HABITS] Error updating habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update habit"
        )


@router.delete(
    "/{habit_id}",
    response_model=MessageResponse,
    summary="Delete a habit",
    description="Deletes a habit and all of its logs.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def delete_habit(
    habit_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> MessageResponse:
    """Delete a habit together with its logs.

    Badges the habit earned stay on the user's profile.

    Args:
        habit_id: The habit identifier
        current_user: The authenticated user object (injected via dependency)

    Returns:
        MessageResponse: Confirmation message

    Raises:
        HTTPException: 404 if the habit does not exist for this user
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        if get_owned_habit(db, uid, habit_id) is None:
            raise habit_not_found()

        logs_query = db.collection(HABIT_LOGS_COLLECTION) \
            .where("uid", "==", uid) \
            .where("habitId", "==", habit_id) \
            .stream()
        deleted_logs = 0
        for log_doc in logs_query:
            log_doc.reference.delete()
            deleted_logs += 1

        db.collection(HABITS_COLLECTION).document(habit_id).delete()

        logger.info(f"[HABITS] Deleted habit {habit_id} and {deleted_logs} logs for user {uid}")
        return MessageResponse(message="Habit Deleted Successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[HABITS] Error deleting habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete habit"
        )
