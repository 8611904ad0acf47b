import logging
from typing import Dict, Any, List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from datetime import datetime, timezone

from habit_tracker import config
from habit_tracker.auth.dependencies import get_current_user
from habit_tracker.models.leaderboard import LeaderboardResponse, UserRankResponse, UserStats
from habit_tracker.models.stats import HabitStatsListResponse
from habit_tracker.models.track import (
    HabitHistoryResponse,
    HabitLog,
    HeatmapValue,
    MarkHabitRequest,
    MarkHabitResponse,
    NextBadge,
    TodayLogsResponse,
    TrackerSummaryResponse,
)
from habit_tracker.services.badge_service import sync_habit_badges
from habit_tracker.services.firestore_utils import (
    HABITS_COLLECTION,
    HABIT_LOGS_COLLECTION,
    USERS_COLLECTION,
    get_firestore_db,
    get_habit_logs,
    get_or_create_user_profile,
    get_owned_habit,
    log_document_id,
    snapshot_to_dict,
    sort_by_created_at,
    stream_user_documents,
    to_utc_datetime,
    utc_today,
)
from habit_tracker.services.statistics_service import (
    build_all_user_stats,
    build_habit_stats,
    build_heatmap,
    build_user_stats,
    find_user_rank,
    group_logs_by_habit,
    paginate,
    rank_users,
)
from habit_tracker.services.streak_service import (
    badge_for_streak,
    calculate_completion_rate,
    calculate_current_streak,
    calculate_longest_streak,
    next_badge,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/track",
    tags=["track"],
)


def log_from_document(log_data: Dict[str, Any]) -> HabitLog:
    return HabitLog(
        id=log_data["id"],
        uid=log_data["uid"],
        habitId=log_data["habitId"],
        date=str(log_data.get("date", ""))[:10],
        completed=bool(log_data.get("completed", False)),
        createdAt=to_utc_datetime(log_data.get("createdAt")),
        updatedAt=to_utc_datetime(log_data.get("updatedAt")),
    )


def require_owned_habit(db, uid: str, habit_id: str) -> Dict[str, Any]:
    habit = get_owned_habit(db, uid, habit_id)
    if habit is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Habit not found"
        )
    return habit


def load_ranked_users(db) -> List[UserStats]:
    """Build stats for every user with a profile and rank them."""
    users = [snapshot_to_dict(doc) for doc in db.collection(USERS_COLLECTION).stream()]
    habits = [snapshot_to_dict(doc) for doc in db.collection(HABITS_COLLECTION).stream()]
    logs = [snapshot_to_dict(doc) for doc in db.collection(HABIT_LOGS_COLLECTION).stream()]
    return rank_users(build_all_user_stats(users, habits, logs))


@router.post(
    "",
    response_model=MarkHabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Mark a habit for a day",
    description="Creates or updates the log of a habit for one day (defaults to today) and refreshes badges.",
    responses={
        200: {
            "description": "Existing log for that day updated",
        },
        201: {
            "description": "New log created",
        },
        400: {
            "description": "Date is in the future",
        },
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def mark_habit_done(
    request: MarkHabitRequest,
    response: Response,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> MarkHabitResponse:
    """Mark a habit as completed (or not completed) on a day.

    There is one log per (user, habit, day): the log document id is derived
    from all three, so marking the same day again overwrites ``completed``
    instead of creating a duplicate. After the write the habit's current
    streak is recomputed, its cached badge refreshed and any newly reached
    tiers appended to the user's earned badges.

    Args:
        request: Habit id, optional day (defaults to today UTC) and completed flag
        current_user: The authenticated user object (injected via dependency)

    Returns:
        MarkHabitResponse with status 201 when created, 200 when updated

    Raises:
        HTTPException: 400 for a future date, 404 if the habit does not exist
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        today = utc_today()
        log_day = request.date or today

        if log_day > today:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot track a habit for a future date"
            )

        require_owned_habit(db, uid, request.habitId)
        get_or_create_user_profile(db, current_user)

        log_id = log_document_id(uid, request.habitId, log_day)
        log_ref = db.collection(HABIT_LOGS_COLLECTION).document(log_id)
        existing = log_ref.get()
        now = datetime.now(timezone.utc)

        if existing.exists:
            log_ref.update({"completed": request.completed, "updatedAt": now})
            log_data = snapshot_to_dict(existing)
            log_data.update({"completed": request.completed, "updatedAt": now})
            message = "Habit updated"
            response.status_code = status.HTTP_200_OK
        else:
            log_data = {
                "uid": uid,
                "habitId": request.habitId,
                "date": log_day.isoformat(),
                "completed": request.completed,
                "createdAt": now,
                "updatedAt": now,
            }
            log_ref.set(log_data)
            log_data["id"] = log_id
            message = "Habit Marked"

        logs = get_habit_logs(db, uid, request.habitId)
        streak, badge, new_badges = sync_habit_badges(db, uid, request.habitId, logs, today)

        logger.info(
            f"[TRACK] {message} for habit {request.habitId} on {log_day} "
            f"(user={uid}, completed={request.completed}, streak={streak})"
        )

        return MarkHabitResponse(
            message=message,
            log=log_from_document(log_data),
            currentStreak=streak,
            badge=badge,
            newBadges=new_badges,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error marking habit: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Something went wrong"
        )


@router.get(
    "/today",
    response_model=TodayLogsResponse,
    summary="Get today's completions",
    description="Returns the current user's completed logs dated today (UTC).",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_log_today(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TodayLogsResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        today = utc_today().isoformat()

        logs_query = db.collection(HABIT_LOGS_COLLECTION) \
            .where("uid", "==", uid) \
            .where("date", "==", today) \
            .stream()
        logs = [snapshot_to_dict(doc) for doc in logs_query]
        logs = [log for log in logs if log.get("completed")]
        logs.sort(key=lambda log: log.get("habitId", ""))

        logger.debug(f"[TRACK] Found {len(logs)} completions today for user {uid}")
        return TodayLogsResponse(
            count=len(logs),
            logs=[log_from_document(log) for log in logs],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error fetching today's logs: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch today's logs"
        )


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Get the leaderboard",
    description="Ranks all users by total completions (descending), paginated.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_leaderboard(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> LeaderboardResponse:
    """Get one page of the leaderboard.

    Every user with a profile is ranked by total completed logs, ties broken
    by name and then user id. Each entry carries the user's earned badges,
    most consistent habit and longest streak habit.

    Args:
        page: 1-based page number; pages past the end are empty
        current_user: The authenticated user object (injected via dependency)

    Returns:
        LeaderboardResponse: users, total, page and totalPages
    """
    try:
        db = get_firestore_db()
        ranked = load_ranked_users(db)
        result = paginate(ranked, page, config.LEADERBOARD_PAGE_SIZE)

        logger.info(f"[TRACK] Leaderboard page {page}/{result['totalPages']} ({result['total']} users)")
        return LeaderboardResponse(
            users=result["items"],
            total=result["total"],
            page=result["page"],
            totalPages=result["totalPages"],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error building leaderboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch leaderboard"
        )


@router.get(
    "/user-rank",
    response_model=UserRankResponse,
    summary="Get the current user's rank",
    description="Returns the current user's position on the leaderboard.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_user_rank(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> UserRankResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        ranked = load_ranked_users(db)
        rank = find_user_rank(ranked, uid)
        total_completions = ranked[rank - 1].totalCompletions if rank else 0

        return UserRankResponse(
            rank=rank,
            totalUsers=len(ranked),
            totalCompletions=total_completions,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error fetching user rank: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch user rank"
        )


@router.get(
    "/all",
    response_model=UserStats,
    summary="Get the current user's aggregate statistics",
    description="Total habits, total completions, per-habit completion rates, most consistent and longest streak habit.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_all_user_statistics(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> UserStats:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        user = get_or_create_user_profile(db, current_user)
        habits = stream_user_documents(db, HABITS_COLLECTION, uid)
        logs = stream_user_documents(db, HABIT_LOGS_COLLECTION, uid)
        return build_user_stats(user, habits, logs)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error building user statistics: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch statistics"
        )


@router.get(
    "/stats",
    response_model=HabitStatsListResponse,
    summary="Get statistics for every habit",
    description="Current and longest streak, completion rate, badge and progress series per habit.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_statistics(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitStatsListResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        today = utc_today()
        habits = sort_by_created_at(stream_user_documents(db, HABITS_COLLECTION, uid))
        logs_by_habit = group_logs_by_habit(stream_user_documents(db, HABIT_LOGS_COLLECTION, uid))

        return HabitStatsListResponse(
            stats=[
                build_habit_stats(habit, logs_by_habit.get(habit["id"], []), today)
                for habit in habits
            ]
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error building habit statistics: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch statistics"
        )


@router.get(
    "/heatmap/combined",
    response_model=List[HeatmapValue],
    summary="Get the combined heatmap",
    description="Number of habits completed per day across all of the user's habits.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_combined_heatmap_data(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> List[HeatmapValue]:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        habit_ids = {habit["id"] for habit in stream_user_documents(db, HABITS_COLLECTION, uid)}
        logs = [
            log for log in stream_user_documents(db, HABIT_LOGS_COLLECTION, uid)
            if log.get("habitId") in habit_ids
        ]
        return build_heatmap(logs)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error building combined heatmap: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch heatmap data"
        )


@router.get(
    "/summary/{habit_id}",
    response_model=TrackerSummaryResponse,
    summary="Get a habit's tracking summary",
    description="Streaks, completion rate, badge progress and full history of one habit.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def get_tracker_summary(
    habit_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> TrackerSummaryResponse:
    """Get the tracking summary for one habit.

    Args:
        habit_id: The habit identifier
        current_user: The authenticated user object (injected via dependency)

    Returns:
        TrackerSummaryResponse: Counts, first/last log dates, current and
            longest streak, completion rate, badge, next badge and the logs

    Raises:
        HTTPException: 404 if the habit does not exist for this user
    """
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        require_owned_habit(db, uid, habit_id)

        logs = get_habit_logs(db, uid, habit_id)
        current_streak = calculate_current_streak(logs, today=utc_today())
        upcoming = next_badge(current_streak)

        return TrackerSummaryResponse(
            totalLogs=len(logs),
            firstLog=logs[0]["date"] if logs else None,
            lastLog=logs[-1]["date"] if logs else None,
            currentStreak=current_streak,
            longestStreak=calculate_longest_streak(logs),
            completionRate=round(calculate_completion_rate(logs), 4),
            badge=badge_for_streak(current_streak),
            nextBadge=NextBadge(**upcoming) if upcoming else None,
            logs=[log_from_document(log) for log in logs],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error building summary for habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to show summary"
        )


@router.get(
    "/heatmap/{habit_id}",
    response_model=List[HeatmapValue],
    summary="Get a habit's heatmap",
    description="Completed entries per day for one habit.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def get_heatmap_data(
    habit_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> List[HeatmapValue]:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        require_owned_habit(db, uid, habit_id)
        return build_heatmap(get_habit_logs(db, uid, habit_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error building heatmap for habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch heatmap data"
        )


@router.get(
    "/{habit_id}",
    response_model=HabitHistoryResponse,
    summary="Get a habit's history",
    description="Returns all logs of one habit, oldest first.",
    responses={
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
        404: {
            "description": "Habit not found",
        },
    },
)
def get_habit_history(
    habit_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> HabitHistoryResponse:
    try:
        uid = current_user["uid"]
        db = get_firestore_db()
        require_owned_habit(db, uid, habit_id)
        logs = get_habit_logs(db, uid, habit_id)
        return HabitHistoryResponse(logs=[log_from_document(log) for log in logs])
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[TRACK] Error fetching history for habit {habit_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to fetch logs"
        )
