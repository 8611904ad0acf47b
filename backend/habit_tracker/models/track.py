from typing import List, Optional
from pydantic import BaseModel, Field
import datetime as dt


class HabitLog(BaseModel):
    """Model representing one day of tracking for a habit.

    There is at most one log per (user, habit, day); the Firestore document
    id is ``{uid}_{habitId}_{date}``.
    """
    id: str = Field(..., description="Log identifier")
    uid: str = Field(..., description="User ID who owns this log")
    habitId: str = Field(..., description="Habit this log belongs to")
    date: str = Field(..., description="Calendar day in YYYY-MM-DD format")
    completed: bool = Field(..., description="Whether the habit was completed that day")
    createdAt: Optional[dt.datetime] = Field(None, description="When the log was created")
    updatedAt: Optional[dt.datetime] = Field(None, description="When the log was last updated")


class MarkHabitRequest(BaseModel):
    """Request model for marking a habit done (or not done) on a day."""
    habitId: str = Field(..., min_length=1, description="Habit to track")
    date: Optional[dt.date] = Field(None, description="Day to mark (defaults to today, UTC)")
    completed: bool = Field(True, description="Whether the habit was completed")


class MarkHabitResponse(BaseModel):
    """Response model for marking a habit."""
    message: str = Field(..., description="Response message")
    log: HabitLog = Field(..., description="The created or updated log")
    currentStreak: int = Field(..., description="Current streak after this mark")
    badge: Optional[str] = Field(None, description="Badge tier of the current streak")
    newBadges: List[str] = Field(default_factory=list, description="Tiers earned by this mark")


class HabitHistoryResponse(BaseModel):
    """Response model for a habit's log history."""
    logs: List[HabitLog] = Field(..., description="Logs sorted by date ASC")


class NextBadge(BaseModel):
    """The next badge tier and how far away it is."""
    badge: str = Field(..., description="Next badge tier")
    daysRemaining: int = Field(..., description="Streak days still needed")


class TrackerSummaryResponse(BaseModel):
    """Response model for the tracking summary of one habit."""
    totalLogs: int = Field(..., description="Number of log entries")
    firstLog: Optional[str] = Field(None, description="Date of the first log")
    lastLog: Optional[str] = Field(None, description="Date of the last log")
    currentStreak: int = Field(..., description="Consecutive completed days ending today or yesterday")
    longestStreak: int = Field(..., description="Longest run of consecutive completed days")
    completionRate: float = Field(..., description="Completed entries / all entries (0-1)")
    badge: Optional[str] = Field(None, description="Badge tier of the current streak")
    nextBadge: Optional[NextBadge] = Field(None, description="Next tier to reach (null after the last one)")
    logs: List[HabitLog] = Field(..., description="Logs sorted by date ASC")


class TodayLogsResponse(BaseModel):
    """Response model for today's completed logs."""
    count: int = Field(..., description="Number of habits completed today")
    logs: List[HabitLog] = Field(..., description="Completed logs dated today")


class HeatmapValue(BaseModel):
    """A single heatmap cell."""
    date: str = Field(..., description="Calendar day in YYYY-MM-DD format")
    count: int = Field(..., description="Completed entries on that day")
