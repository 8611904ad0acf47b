import logging
from typing import Dict, Any, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin.auth import (
    InvalidIdTokenError,
    ExpiredIdTokenError,
    RevokedIdTokenError,
    UserDisabledError,
    CertificateFetchError,
)

from habit_tracker.auth.firebase import get_firebase_auth

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    """Extract and validate identity token from request, returning normalized user object.

    This function:
    1. Extracts the identity token from the Authorization header
    2. Validates the token using Firebase Authentication service
    3. Returns a normalized user object with essential user information
    4. Rejects the request with 401 if validation fails

    Args:
        credentials: HTTPBearer credentials containing the token in Authorization header

    Returns:
        Dict[str, Any]: Normalized user object containing:
            - uid: User's unique identifier
            - email: User's email address (if available)
            - email_verified: Whether email is verified (if available)
            - name: User's display name (if available)

    Raises:
        HTTPException:
            - 401 if token is missing, invalid, expired, or revoked
            - 503 if there's an error fetching certificates for validation
    """
    token = credentials.credentials if credentials else None

    if not token:
        raise _unauthorized("Authentication token is required")

    auth_service = get_firebase_auth()

    try:
        # check_revoked=False still validates signature and expiration
        decoded_token = auth_service.verify_id_token(token, check_revoked=False)
    except (InvalidIdTokenError, ExpiredIdTokenError) as e:
        logger.warning(f"[AUTH] Token validation failed: {type(e).__name__}: {e}")
        raise _unauthorized("Invalid or expired authentication token") from e
    except RevokedIdTokenError as e:
        raise _unauthorized("Authentication token has been revoked") from e
    except UserDisabledError as e:
        raise _unauthorized("User account has been disabled") from e
    except CertificateFetchError as e:
        logger.error(f"[AUTH] Could not fetch token certificates: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service temporarily unavailable",
        ) from e
    except ValueError as e:
        logger.warning(f"[AUTH] Token format error: {e}")
        raise _unauthorized("Invalid authentication token format") from e

    logger.debug(f"[AUTH] Token verified for uid: {decoded_token.get('uid')}")

    return {
        "uid": decoded_token["uid"],
        "email": decoded_token.get("email"),
        "email_verified": decoded_token.get("email_verified", False),
        "name": decoded_token.get("name"),
    }
