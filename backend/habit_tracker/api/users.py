import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime, timezone

from habit_tracker.auth.dependencies import get_current_user
from habit_tracker.models.habit import MessageResponse
from habit_tracker.models.user import UserProfile, UserProfileResponse, UpdateUserRequest
from habit_tracker.services.firestore_utils import (
    HABITS_COLLECTION,
    HABIT_LOGS_COLLECTION,
    TODOS_COLLECTION,
    USERS_COLLECTION,
    get_firestore_db,
    get_or_create_user_profile,
    to_utc_datetime,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/user",
    tags=["user"],
)


def profile_from_document(user_data: Dict[str, Any]) -> UserProfile:
    earned_badges = []
    for entry in user_data.get("earnedBadges") or []:
        if isinstance(entry, dict) and entry.get("habitId") and entry.get("badge"):
            earned_badges.append({
                "habitId": entry["habitId"],
                "badge": entry["badge"],
                "dateEarned": to_utc_datetime(entry.get("dateEarned")),
            })
    return UserProfile(
        uid=user_data["id"],
        name=user_data.get("name") or "",
        email=user_data.get("email") or None,
        age=user_data.get("age"),
        earnedBadges=earned_badges,
        createdAt=to_utc_datetime(user_data.get("createdAt")),
        updatedAt=to_utc_datetime(user_data.get("updatedAt")),
    )


@router.get(
    "",
    response_model=UserProfileResponse,
    summary="Get current user profile",
    description="Returns the current user's profile, creating it from the identity token on first access.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_user(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> UserProfileResponse:
    """Get the current authenticated user's profile.

    Args:
        current_user: The authenticated user object (injected via dependency)

    Returns:
        UserProfileResponse: The stored profile including earned badges
    """
    try:
        db = get_firestore_db()
        user_data = get_or_create_user_profile(db, current_user)
        return UserProfileResponse(
            message="User details are",
            user=profile_from_document(user_data),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[USERS] Error fetching user profile: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve user profile"
        )


@router.put(
    "/update",
    response_model=UserProfileResponse,
    summary="Update current user profile",
    description="Updates name, age and/or email of the current user's profile.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def update_user(
    request: UpdateUserRequest,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> UserProfileResponse:
    """Update the current user's profile. Omitted fields are left unchanged.

    Args:
        request: Fields to change
        current_user: The authenticated user object (injected via dependency)

    Returns:
        UserProfileResponse: The updated profile
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        user_data = get_or_create_user_profile(db, current_user)

        updates = request.model_dump(exclude_none=True)
        updates["updatedAt"] = datetime.now(timezone.utc)
        db.collection(USERS_COLLECTION).document(uid).update(updates)
        user_data.update(updates)

        logger.info(f"[USERS] Updated profile for user {uid}: {sorted(updates)}")
        return UserProfileResponse(
            message="Changes done successfully",
            user=profile_from_document(user_data),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[USERS] Error updating user profile: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update user profile"
        )


@router.delete(
    "/delete",
    response_model=MessageResponse,
    summary="Delete current user",
    description="Deletes the current user's profile together with their habits, habit logs and todos.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "User has no profile and no data",
        },
    },
)
def delete_user(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> MessageResponse:
    """Delete the current user's data.

    The Firebase Authentication account itself is left to the client.

    Args:
        current_user: The authenticated user object (injected via dependency)

    Returns:
        MessageResponse: Confirmation message

    Raises:
        HTTPException: 404 if the user has neither a profile nor any owned data
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()

        user_ref = db.collection(USERS_COLLECTION).document(uid)
        has_profile = user_ref.get().exists

        # Todos can exist without a profile, so owned data is removed either way
        deleted = 0
        for collection in (HABIT_LOGS_COLLECTION, HABITS_COLLECTION, TODOS_COLLECTION):
            for doc in db.collection(collection).where("uid", "==", uid).stream():
                doc.reference.delete()
                deleted += 1

        if not has_profile and deleted == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User does not exist"
            )
        user_ref.delete()

        logger.info(f"[USERS] Deleted user {uid} and {deleted} owned documents")
        return MessageResponse(message="User Deleted Successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[USERS] Error deleting user: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete user"
        )
