from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from datetime import datetime


class EarnedBadge(BaseModel):
    """A badge tier a habit reached at some point.

    Stored on the user document under ``earnedBadges`` and never removed,
    even if the streak that earned it is later broken.
    """
    habitId: str = Field(..., description="Habit that earned the badge")
    badge: str = Field(..., description="Badge tier name")
    dateEarned: Optional[datetime] = Field(None, description="When the tier was first reached")


class UserProfile(BaseModel):
    """Model representing a user profile in the system.

    Identity comes from Firebase Authentication tokens; the profile is stored
    in the Firestore ``users`` collection keyed by uid.

    Attributes:
        uid: Unique identifier for the user (required)
        name: User's display name
        email: User's email address (optional)
        age: User's age (optional)
        earnedBadges: Badges unlocked across all habits
    """

    uid: str = Field(
        ...,
        description="Unique identifier for the user",
        min_length=1,
    )
    name: str = Field(
        "",
        description="User's display name",
    )
    # Copied from token claims, which may use domains EmailStr rejects
    email: Optional[str] = Field(
        None,
        description="User's email address",
    )
    age: Optional[int] = Field(
        None,
        description="User's age",
        ge=0,
        le=150,
    )
    earnedBadges: List[EarnedBadge] = Field(
        default_factory=list,
        description="Badges earned across all habits",
    )
    createdAt: Optional[datetime] = Field(None, description="When the profile was created")
    updatedAt: Optional[datetime] = Field(None, description="When the profile was last updated")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "uid": "user123abc",
                "name": "John Doe",
                "email": "user@example.com",
                "age": 29,
                "earnedBadges": [
                    {"habitId": "4f1c...", "badge": "Silver", "dateEarned": "2026-01-16T03:00:00Z"}
                ],
            }
        }
    )


class UserProfileResponse(BaseModel):
    """Response model for the current user's profile."""
    message: str = Field(..., description="Response message")
    user: UserProfile = Field(..., description="The user's profile")


class UpdateUserRequest(BaseModel):
    """Request model for updating the profile. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, description="Display name", min_length=1, max_length=255)
    age: Optional[int] = Field(None, description="Age", ge=0, le=150)
    email: Optional[EmailStr] = Field(None, description="Email address")
