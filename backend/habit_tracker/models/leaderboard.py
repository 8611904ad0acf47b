from pydantic import BaseModel, Field
from typing import List, Optional

from habit_tracker.models.user import EarnedBadge


class HabitCompletionRate(BaseModel):
    """Completion rate of one habit."""
    habitId: str = Field(..., description="Habit identifier")
    habitName: str = Field(..., description="Habit name")
    completionRate: float = Field(..., description="Completed entries / all entries (0-1)")


class MostConsistentHabit(BaseModel):
    """The habit with the highest completion rate."""
    habitId: str = Field(..., description="Habit identifier")
    habitName: str = Field(..., description="Habit name")
    badge: Optional[str] = Field(None, description="Badge tier of the habit's current streak")
    completionRate: float = Field(..., description="Completed entries / all entries (0-1)")


class LongestStreakHabit(BaseModel):
    """The habit with the longest streak in its history."""
    habitId: str = Field(..., description="Habit identifier")
    habitName: str = Field(..., description="Habit name")
    badge: Optional[str] = Field(None, description="Badge tier of the habit's current streak")
    maxStreak: int = Field(..., description="Longest run of consecutive completed days")


class UserStats(BaseModel):
    """Aggregate statistics for one user."""
    userId: str = Field(..., description="User identifier")
    userName: str = Field(..., description="User display name")
    totalHabits: int = Field(..., description="Number of habits the user owns")
    totalCompletions: int = Field(..., description="Completed log entries across all habits")
    habitCompletionRates: List[HabitCompletionRate] = Field(..., description="Completion rate of every habit")
    earnedBadges: List[EarnedBadge] = Field(..., description="Badges earned across all habits")
    mostConsistentHabit: Optional[MostConsistentHabit] = Field(None, description="Null when no habit has logs")
    longestStreakHabit: Optional[LongestStreakHabit] = Field(None, description="Null when no habit has a streak")


class LeaderboardResponse(BaseModel):
    """Response model for one page of the leaderboard."""
    users: List[UserStats] = Field(..., description="Users on this page, ranked by totalCompletions DESC")
    total: int = Field(..., description="Total number of ranked users")
    page: int = Field(..., description="Current page (1-based)")
    totalPages: int = Field(..., description="Number of pages")


class UserRankResponse(BaseModel):
    """Response model for the current user's rank."""
    rank: Optional[int] = Field(None, description="1-based rank (null if the user has no profile)")
    totalUsers: int = Field(..., description="Number of ranked users")
    totalCompletions: int = Field(..., description="The user's completed log entries")
