from typing import List, Optional
from pydantic import BaseModel, Field


class DailyProgress(BaseModel):
    """Whether a habit was completed on one of the last seven days."""
    date: str = Field(..., description="Calendar day in YYYY-MM-DD format")
    completed: bool = Field(..., description="Whether a completed log exists for that day")


class MonthlyProgress(BaseModel):
    """Completion rate of a habit within one calendar month."""
    date: str = Field(..., description="Month in YYYY-MM format")
    completionRate: float = Field(..., description="Completed entries / logged entries in the month (0-1)")


class HabitStats(BaseModel):
    """Statistics for a single habit."""
    habitId: str = Field(..., description="Habit identifier")
    habitName: str = Field(..., description="Habit name")
    currentStreak: int = Field(..., description="Consecutive completed days ending today or yesterday")
    longestStreak: int = Field(..., description="Longest run of consecutive completed days")
    completionRate: float = Field(..., description="Completed entries / all entries (0-1)")
    totalCompletions: int = Field(..., description="Number of completed entries")
    totalLogs: int = Field(..., description="Number of log entries")
    badge: Optional[str] = Field(None, description="Badge tier of the current streak")
    weeklyProgress: List[DailyProgress] = Field(..., description="The last 7 days, oldest first")
    monthlyProgress: List[MonthlyProgress] = Field(..., description="The last 6 months, oldest first")


class HabitStatsListResponse(BaseModel):
    """Response model for statistics of all the user's habits."""
    stats: List[HabitStats] = Field(..., description="One entry per habit, sorted by createdAt ASC")


class HabitCompletionSummary(BaseModel):
    """Completion counts for one habit, as used in analytics."""
    habitId: str = Field(..., description="Habit identifier")
    daysCompleted: int = Field(..., description="Number of completed entries")
    dates: List[str] = Field(..., description="Completed days, sorted ASC")


class AnalyticsStatsResponse(BaseModel):
    """Response model for per-habit completion analytics."""
    stats: List[HabitCompletionSummary] = Field(..., description="One entry per habit with at least one completion")


class HabitProgressResponse(BaseModel):
    """Response model for a habit's progress overview."""
    totalLogs: int = Field(..., description="Number of log entries")
    firstLog: Optional[str] = Field(None, description="Date of the first log")
    lastLog: Optional[str] = Field(None, description="Date of the last log")
    logs: List[dict] = Field(..., description="Logs sorted by date ASC")
