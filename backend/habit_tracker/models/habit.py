from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator
from datetime import datetime

HabitCategory = Literal[
    "health",
    "fitness",
    "productivity",
    "learning",
    "finance",
    "mindfulness",
    "social",
    "creativity",
    "other",
]


class Frequency(BaseModel):
    """How often a habit is meant to be done.

    ``days`` holds weekdays (0 = Sunday ... 6 = Saturday) for weekly habits,
    ``dates`` holds days of the month (1-31) for monthly habits.
    """
    type: Literal["daily", "weekly", "monthly"] = Field(..., description="Frequency rule")
    days: Optional[List[int]] = Field(None, description="Weekdays for weekly habits (0-6)")
    dates: Optional[List[int]] = Field(None, description="Days of month for monthly habits (1-31)")

    @model_validator(mode="after")
    def check_subsets(self):
        if self.type == "weekly":
            if not self.days:
                raise ValueError("weekly habits need at least one day")
            if self.dates is not None:
                raise ValueError("dates only apply to monthly habits")
        elif self.type == "monthly":
            if not self.dates:
                raise ValueError("monthly habits need at least one date")
            if self.days is not None:
                raise ValueError("days only apply to weekly habits")
        elif self.days is not None or self.dates is not None:
            raise ValueError("daily habits take neither days nor dates")

        if self.days is not None:
            if any(day < 0 or day > 6 for day in self.days):
                raise ValueError("days must be between 0 and 6")
            self.days = sorted(set(self.days))
        if self.dates is not None:
            if any(d < 1 or d > 31 for d in self.dates):
                raise ValueError("dates must be between 1 and 31")
            self.dates = sorted(set(self.dates))
        return self


class Goal(BaseModel):
    """Optional numeric target for a habit (e.g. 8 glasses)."""
    target: float = Field(..., gt=0, description="Target amount")
    unit: str = Field(..., min_length=1, max_length=50, description="Unit of the target")


class Habit(BaseModel):
    """Model representing a habit owned by a user.

    The ``badge`` field caches the tier of the current streak and is
    refreshed every time the habit is tracked.
    """
    id: str = Field(..., description="Unique habit identifier")
    uid: str = Field(..., description="User ID who owns this habit")
    name: str = Field(..., description="Habit name")
    description: Optional[str] = Field(None, description="Free-form description")
    category: HabitCategory = Field("other", description="Habit category")
    frequency: Frequency = Field(..., description="Frequency rule")
    goal: Optional[Goal] = Field(None, description="Optional numeric goal")
    badge: Optional[str] = Field(None, description="Badge tier of the current streak")
    createdAt: datetime = Field(..., description="When the habit was created")
    updatedAt: Optional[datetime] = Field(None, description="When the habit was last updated")


class CreateHabitRequest(BaseModel):
    """Request model for creating a habit."""
    name: str = Field(..., min_length=1, max_length=100, description="Habit name")
    description: Optional[str] = Field(None, max_length=500, description="Free-form description")
    category: HabitCategory = Field("other", description="Habit category")
    frequency: Frequency = Field(
        default_factory=lambda: Frequency(type="daily"),
        description="Frequency rule",
    )
    goal: Optional[Goal] = Field(None, description="Optional numeric goal")


class UpdateHabitRequest(BaseModel):
    """Request model for updating a habit. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Habit name")
    description: Optional[str] = Field(None, max_length=500, description="Free-form description")
    category: Optional[HabitCategory] = Field(None, description="Habit category")
    frequency: Optional[Frequency] = Field(None, description="Frequency rule")
    goal: Optional[Goal] = Field(None, description="Optional numeric goal")


class HabitResponse(BaseModel):
    """Response model for a single habit."""
    message: str = Field(..., description="Response message")
    habit: Habit = Field(..., description="The habit")


class HabitsListResponse(BaseModel):
    """Response model for listing the user's habits."""
    message: str = Field(..., description="Response message")
    habits: List[Habit] = Field(..., description="Habits sorted by createdAt ASC")


class MessageResponse(BaseModel):
    """Generic response carrying only a message."""
    message: str = Field(..., description="Response message")
