from typing import Dict, Any
from fastapi import APIRouter, Depends

from habit_tracker.auth.dependencies import get_current_user

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
)


@router.get(
    "/me",
    summary="Get current authenticated user",
    description="Returns information about the currently authenticated user based on their identity token.",
    responses={
        200: {
            "description": "Successfully retrieved user information",
            "content": {
                "application/json": {
                    "example": {
                        "uid": "user123",
                        "email": "user@example.com",
                        "email_verified": True,
                        "name": "John Doe",
                    }
                }
            },
        },
        401: {
            "description": "Unauthorized - Invalid or missing authentication token",
        },
    },
)
def get_current_user_info(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Get information about the currently authenticated user.

    Sign-up and sign-in happen against Firebase Authentication on the client;
    this endpoint lets the client confirm the token it holds is accepted.

    Args:
        current_user: The authenticated user object (injected via dependency)

    Returns:
        Dict[str, Any]: uid, email, email_verified and name from the token
    """
    return current_user
