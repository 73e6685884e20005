# =============================================================================
# app/auth/roles.py - Roles and Permissions
# =============================================================================
# Defines the account tiers and the permission matrix used by the route
# guards in app/auth/session.py.
#
# Permissions use a "resource:action" format. An "_own" suffix restricts
# the action to records the caller owns (see can_modify_resource).
#
# Usage:
#   from app.auth.roles import Role, has_permission
#   has_permission(Role.EDITOR, "blog:update_own")  # True
# =============================================================================

from enum import Enum


class Role(str, Enum):
    """
    Account tiers stored in profiles.role.

    - admin: full access to every resource
    - editor: manages own blog posts, reads customer data
    - viewer: reads blog content and manages own profile
    """
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


# Wildcard granting every permission
ALL_PERMISSIONS = "*"

ROLE_PERMISSIONS: dict[Role, list[str]] = {
    Role.ADMIN: [ALL_PERMISSIONS],
    Role.EDITOR: [
        # Blog
        "blog:read",
        "blog:create",
        "blog:update_own",
        "blog:delete_own",
        # Profile
        "profile:read_own",
        "profile:update_own",
        # Consultation requests
        "consultation:read_own",
    ],
    Role.VIEWER: [
        "blog:read",
        "profile:read_own",
        "profile:update_own",
    ],
}

ROLE_DISPLAY_NAMES: dict[Role, str] = {
    Role.ADMIN: "Administrator",
    Role.EDITOR: "Editor",
    Role.VIEWER: "Viewer",
}

ROLE_DESCRIPTIONS: dict[Role, str] = {
    Role.ADMIN: "Full access to all features including user management",
    Role.EDITOR: "Can create and edit blog posts and view customer data",
    Role.VIEWER: "Read-only access to blog content",
}


def _coerce_role(role: Role | str | None) -> Role | None:
    """Accept enum members or raw profile values; unknown roles become None."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def get_permissions(role: Role | str | None) -> list[str]:
    """Return the permission list for a role (empty for unknown roles)."""
    resolved = _coerce_role(role)
    if resolved is None:
        return []
    return list(ROLE_PERMISSIONS[resolved])


def has_permission(role: Role | str | None, permission: str) -> bool:
    """
    Check if a role grants a permission.

    Matches, in order: the global wildcard, the exact permission, then a
    "resource:*" wildcard for the permission's resource.

    Example:
        has_permission("admin", "blog:delete")        # True
        has_permission("editor", "blog:update_own")   # True
        has_permission("viewer", "blog:delete")       # False
    """
    permissions = get_permissions(role)

    if ALL_PERMISSIONS in permissions:
        return True

    if permission in permissions:
        return True

    resource = permission.split(":", 1)[0]
    return f"{resource}:*" in permissions


def has_any_permission(role: Role | str | None, permissions: list[str]) -> bool:
    """True if the role grants at least one of the permissions."""
    return any(has_permission(role, permission) for permission in permissions)


def has_all_permissions(role: Role | str | None, permissions: list[str]) -> bool:
    """True if the role grants every one of the permissions."""
    return all(has_permission(role, permission) for permission in permissions)


def is_admin(role: Role | str | None) -> bool:
    return _coerce_role(role) is Role.ADMIN


def is_editor_or_higher(role: Role | str | None) -> bool:
    return _coerce_role(role) in (Role.ADMIN, Role.EDITOR)


def get_role_display_name(role: Role | str) -> str:
    resolved = _coerce_role(role)
    return ROLE_DISPLAY_NAMES[resolved] if resolved else str(role)


def get_role_description(role: Role | str) -> str:
    resolved = _coerce_role(role)
    return ROLE_DESCRIPTIONS[resolved] if resolved else ""
