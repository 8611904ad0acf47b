import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status

from habit_tracker.auth.dependencies import get_current_user
from habit_tracker.models.stats import (
    AnalyticsStatsResponse,
    HabitCompletionSummary,
    HabitProgressResponse,
)
from habit_tracker.services.firestore_utils import (
    HABIT_LOGS_COLLECTION,
    get_firestore_db,
    get_habit_logs,
    get_owned_habit,
    stream_user_documents,
    to_utc_datetime,
)
from habit_tracker.services.statistics_service import group_logs_by_habit

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
)


@router.get(
    "",
    response_model=AnalyticsStatsResponse,
    summary="Get completion analytics",
    description="Returns, for each habit with completions, how many days were completed and which.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_user_stats(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> AnalyticsStatsResponse:
    """Group the user's completed logs by habit.

    Args:
        current_user: The authenticated user object (injected via dependency)

    Returns:
        AnalyticsStatsResponse: One entry per habit, sorted by habit id
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        completed_logs = [
            log for log in stream_user_documents(db, HABIT_LOGS_COLLECTION, uid)
            if log.get("completed")
        ]

        stats = []
        for habit_id, logs in sorted(group_logs_by_habit(completed_logs).items()):
            dates = sorted({str(log.get("date"))[:10] for log in logs if log.get("date")})
            stats.append(HabitCompletionSummary(
                habitId=habit_id,
                daysCompleted=len(dates),
                dates=dates,
            ))

        logger.info(f"[ANALYTICS] Stats for user {uid}: {len(stats)} habits with completions")
        return AnalyticsStatsResponse(stats=stats)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[ANALYTICS] Error generating stats: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate analytics"
        )


@router.get(
    "/{habit_id}",
    response_model=HabitProgressResponse,
    summary="Get habit progress",
    description="Returns the number of logs, first and last log dates and all logs of a habit.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def get_habit_progress(
    habit_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitProgressResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        if get_owned_habit(db, uid, habit_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Habit not found"
            )

        logs = get_habit_logs(db, uid, habit_id)
        serialized = [
            {
                "id": log["id"],
                "habitId": log.get("habitId"),
                "date": log.get("date"),
                "completed": bool(log.get("completed", False)),
                "createdAt": to_utc_datetime(log.get("createdAt")),
            }
            for log in logs
        ]

        return HabitProgressResponse(
            totalLogs=len(logs),
            firstLog=logs[0].get("date") if logs else None,
            lastLog=logs[-1].get("date") if logs else None,
            logs=serialized,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[ANALYTICS] Error fetching progress for habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve habit progress"
        )
