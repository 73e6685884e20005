# =============================================================================
# core/services/user_service.py - Admin User Management
# =============================================================================
# Accounts are created in Supabase Auth (service-role admin API) and then
# mirrored into public.profiles, which carries role and is_active.
# =============================================================================

import logging
from typing import Any

from app.auth.models import UserProfile
from app.auth.roles import Role
from app.exceptions import (
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
    UpstreamServiceError,
    ValidationFailedError,
)
from core.models.user import MIN_PASSWORD_LENGTH, UserCreate, UserUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "profiles"
VALID_ROLES = [role.value for role in Role]


def _validate_role(role: str) -> None:
    if role not in VALID_ROLES:
        raise ValidationFailedError(
            "Invalid role specified",
            suggestion=f"Use one of: {', '.join(VALID_ROLES)}",
        )


class UserService:
    """Service for admin-managed accounts."""

    @staticmethod
    def list_users() -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = client.table(TABLE).select("*").order("created_at", desc=True).execute()
        return response.data or []

    @staticmethod
    def create_user(data: UserCreate) -> dict[str, Any]:
        """
        Create an auth user with a confirmed email plus its profile.

        If the profile insert fails the auth user is deleted again, so no
        account exists without a profile.

        Raises:
            MissingFieldsError: email/password/full_name missing
            ValidationFailedError: Unknown role or short password
            UpstreamServiceError: Supabase Auth rejected the user
            DatabaseError: Profile insert failed
        """
        MissingFieldsError.check(data.model_dump(), ["email", "password", "full_name"])
        _validate_role(data.role)
        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailedError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        client = SupabaseClient.get_client()
        try:
            auth_response = client.auth.admin.create_user({
                "email": data.email,
                "password": data.password,
                "email_confirm": True,
                "user_metadata": {"full_name": data.full_name},
            })
        except Exception as e:
            logger.error(f"Auth user creation failed for {data.email}: {e}")
            raise UpstreamServiceError("Supabase Auth", str(e), status_code=500)

        user = getattr(auth_response, "user", None)
        if user is None:
            raise UpstreamServiceError("Supabase Auth", "No user data returned", status_code=500)

        profile = {
            "id": user.id,
            "email": data.email,
            "full_name": data.full_name,
            "role": data.role,
            "is_active": True,
        }
        try:
            client.table(TABLE).insert(profile).execute()
        except Exception as e:
            logger.error(f"Profile insert failed for {data.email}, removing auth user: {e}")
            client.auth.admin.delete_user(user.id)
            raise DatabaseError("create user profile", str(e))

        logger.info(f"Created {data.role} account {data.email}")
        return {key: profile[key] for key in ("id", "email", "full_name", "role")}

    @staticmethod
    def update_user(user_id: str, data: UserUpdate, admin: UserProfile) -> dict[str, Any]:
        """
        Change role, active flag or name.

        Raises:
            ValidationFailedError: Unknown role, empty body, or an admin
                deactivating their own account
            NotFoundError: No such profile
        """
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationFailedError("No valid fields to update", suggestion="Send role, is_active or full_name")
        if "role" in changes:
            _validate_role(changes["role"])
        if changes.get("is_active") is False and user_id == admin.user_id:
            raise ValidationFailedError("You cannot deactivate your own account")

        changes["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("id", user_id).execute()
        except Exception as e:
            logger.error(f"Failed to update user {user_id}: {e}")
            raise DatabaseError("update user", str(e))

        if not response.data:
            raise NotFoundError("User", user_id)

        logger.info(f"Admin {admin.user_id} updated user {user_id}: {sorted(changes)}")
        return response.data[0]
