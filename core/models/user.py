# =============================================================================
# core/models/user.py - Admin User Management Schemas
# =============================================================================

from typing import Optional

from pydantic import BaseModel

MIN_PASSWORD_LENGTH = 8


class UserCreate(BaseModel):
    """
    Body for POST /admin/users.

    Role is validated in the service so an unknown role yields a 400 with
    the allowed values rather than a schema error.
    """
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    role: str = "viewer"


class UserUpdate(BaseModel):
    """Body for PATCH /admin/users/{id}."""
    role: Optional[str] = None
    is_active: Optional[bool] = None
    full_name: Optional[str] = None
