# =============================================================================
# app/auth/session.py - Profile-Based Route Guards
# =============================================================================
# Resolves the access token subject to a row of public.profiles and gates
# routes on account state and role.
#
# Guard chain:
#   get_current_user      -> valid JWT (401 otherwise)
#   get_current_profile   -> profile row exists (401 otherwise)
#   require_auth          -> profile.is_active (403 ACCOUNT_DISABLED)
#   require_role(...)     -> profile.role allowed (403 PERMISSION_DENIED)
#
# Every role guard goes through require_auth, so a deactivated admin or
# editor is rejected the same way as any other account.
#
# Usage:
#   from app.auth import AdminProfile, StaffProfile
#
#   @router.delete("/{slug}")
#   async def delete_post(slug: str, profile: AdminProfile): ...
# =============================================================================

import logging
from typing import Annotated, Callable, Optional
from uuid import UUID

from fastapi import Depends

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import AuthUser, UserProfile
from app.auth.roles import Role, has_permission, is_admin
from app.exceptions import (
    AccountDisabledError,
    AuthenticationRequiredError,
    PermissionDeniedError,
)
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def load_profile(user_id: UUID | str) -> UserProfile | None:
    """Fetch and validate the profile row for an auth user id."""
    row = SupabaseClient.fetch_profile(user_id)
    if not row:
        logger.warning(f"No profile found for user: {user_id}")
        return None
    return UserProfile.model_validate(row)


async def get_current_profile(
    user: AuthUser = Depends(get_current_user),
) -> UserProfile:
    """
    Profile of the signed-in user, regardless of account state.

    Raises:
        AuthenticationRequiredError: If the token has no matching profile
    """
    profile = load_profile(user.id)
    if profile is None:
        raise AuthenticationRequiredError("No profile found for this account")
    return profile


async def get_current_profile_optional(
    user: Optional[AuthUser] = Depends(get_current_user_optional),
) -> Optional[UserProfile]:
    """Profile of the caller, or None for anonymous/invalid tokens."""
    if user is None:
        return None
    return load_profile(user.id)


async def require_auth(
    profile: UserProfile = Depends(get_current_profile),
) -> UserProfile:
    """
    Require a signed-in, active account.

    Raises:
        AccountDisabledError: If profile.is_active is false
    """
    if not profile.is_active:
        logger.info(f"Rejected disabled account: {profile.id}")
        raise AccountDisabledError(profile.user_id)
    return profile


def require_role(*roles: Role | str) -> Callable:
    """
    Build a dependency that admits only the given roles.

    Example:
        @router.get("/", dependencies=[Depends(require_role(Role.ADMIN))])
    """
    allowed = [Role(role) for role in roles]

    async def dependency(profile: UserProfile = Depends(require_auth)) -> UserProfile:
        if profile.role not in allowed:
            logger.info(f"Role {profile.role.value} denied; requires {[r.value for r in allowed]}")
            raise PermissionDeniedError(
                message=f"Requires role: {' or '.join(r.value for r in allowed)}",
                required=[r.value for r in allowed],
            )
        return profile

    return dependency


def require_permission(permission: str) -> Callable:
    """Build a dependency that admits roles granting `permission`."""

    async def dependency(profile: UserProfile = Depends(require_auth)) -> UserProfile:
        if not has_permission(profile.role, permission):
            raise PermissionDeniedError(
                message=f"Missing permission: {permission}",
                required=[permission],
            )
        return profile

    return dependency


require_admin = require_role(Role.ADMIN)
require_admin_or_editor = require_role(Role.ADMIN, Role.EDITOR)

# Annotated shorthands for route signatures
ActiveProfile = Annotated[UserProfile, Depends(require_auth)]
AdminProfile = Annotated[UserProfile, Depends(require_admin)]
StaffProfile = Annotated[UserProfile, Depends(require_admin_or_editor)]
OptionalProfile = Annotated[Optional[UserProfile], Depends(get_current_profile_optional)]


def can_modify_resource(
    profile: UserProfile | None,
    owner_id: UUID | str | None,
    permission: str,
) -> bool:
    """
    Decide whether `profile` may act on a record owned by `owner_id`.

    Admins may modify anything. Owners need the "<permission>_own"
    variant (e.g. "blog:update" -> "blog:update_own").

    Example:
        can_modify_resource(editor, post["author_id"], "blog:update")
    """
    if profile is None or not profile.is_active:
        return False

    if is_admin(profile.role):
        return True

    if owner_id is not None and str(owner_id) == profile.user_id:
        return has_permission(profile.role, f"{permission}_own")

    return False
