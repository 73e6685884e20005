# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes report who the caller is and what their role allows.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserProfile, UserResponse
from app.auth.roles import get_permissions, get_role_display_name
from app.auth.session import require_auth

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    profile: UserProfile = Depends(require_auth),
) -> UserResponse:
    """
    Get the current user's profile and effective permissions.

    Raises:
        401: If not authenticated or no profile exists
        403: If the account is disabled
    """
    return UserResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        avatar_url=profile.avatar_url,
        role=profile.role,
        role_display_name=get_role_display_name(profile.role),
        is_active=profile.is_active,
        permissions=get_permissions(profile.role),
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Only checks the token; the profile may still be missing or disabled.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
