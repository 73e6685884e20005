# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Supabase JWT verification, profile-based role guards, and the bearer
# secrets used by non-user callers (Jarvis, cron, Twilio).
#
# Usage:
#   from app.auth import StaffProfile, AdminProfile
#
#   @router.get("/customers")
#   async def list_customers(profile: StaffProfile): ...
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import AuthUser, UserProfile, UserResponse
from app.auth.roles import Role, has_permission
from app.auth.session import (
    ActiveProfile,
    AdminProfile,
    OptionalProfile,
    StaffProfile,
    can_modify_resource,
    get_current_profile,
    get_current_profile_optional,
    require_admin,
    require_admin_or_editor,
    require_auth,
    require_permission,
    require_role,
)

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "get_current_profile",
    "get_current_profile_optional",
    "require_auth",
    "require_role",
    "require_permission",
    "require_admin",
    "require_admin_or_editor",
    "can_modify_resource",
    "has_permission",
    "ActiveProfile",
    "AdminProfile",
    "OptionalProfile",
    "StaffProfile",
    "AuthUser",
    "Role",
    "UserProfile",
    "UserResponse",
]
