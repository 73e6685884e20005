# =============================================================================
# tests/test_roles.py - Role and Permission Tests
# =============================================================================
# Unit tests for the permission matrix and ownership checks.
#
# Run with: pytest tests/test_roles.py -v
# =============================================================================

from app.auth.roles import (
    Role,
    get_permissions,
    get_role_display_name,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_admin,
    is_editor_or_higher,
)
from app.auth.session import can_modify_resource
from tests.conftest import make_profile


class TestHasPermission:
    """Tests for has_permission()."""

    def test_admin_wildcard_grants_everything(self):
        assert has_permission(Role.ADMIN, "blog:delete")
        assert has_permission("admin", "users:manage")

    def test_editor_exact_permissions(self):
        assert has_permission(Role.EDITOR, "blog:create")
        assert has_permission(Role.EDITOR, "blog:update_own")
        assert not has_permission(Role.EDITOR, "blog:delete")
        assert not has_permission(Role.EDITOR, "users:manage")

    def test_viewer_is_read_only(self):
        assert has_permission(Role.VIEWER, "blog:read")
        assert not has_permission(Role.VIEWER, "blog:create")

    def test_unknown_role_has_no_permissions(self):
        assert get_permissions("superuser") == []
        assert not has_permission("superuser", "blog:read")
        assert not has_permission(None, "blog:read")

    def test_any_and_all(self):
        assert has_any_permission(Role.VIEWER, ["blog:create", "blog:read"])
        assert not has_all_permissions(Role.VIEWER, ["blog:create", "blog:read"])
        assert has_all_permissions(Role.EDITOR, ["blog:create", "blog:read"])


class TestRoleHelpers:
    """Tests for role shortcuts and display names."""

    def test_is_admin(self):
        assert is_admin("admin")
        assert not is_admin(Role.EDITOR)

    def test_is_editor_or_higher(self):
        assert is_editor_or_higher(Role.ADMIN)
        assert is_editor_or_higher("editor")
        assert not is_editor_or_higher(Role.VIEWER)

    def test_display_name(self):
        assert get_role_display_name(Role.ADMIN) == "Administrator"
        assert get_role_display_name("mystery") == "mystery"


class TestCanModifyResource:
    """Tests for ownership-based modification checks."""

    def test_admin_can_modify_anything(self):
        admin = make_profile(Role.ADMIN)
        assert can_modify_resource(admin, "someone-else", "blog:update")

    def test_editor_can_modify_own_post(self):
        editor = make_profile(Role.EDITOR)
        assert can_modify_resource(editor, editor.user_id, "blog:update")

    def test_editor_cannot_modify_others_post(self):
        editor = make_profile(Role.EDITOR)
        assert not can_modify_resource(editor, "someone-else", "blog:update")

    def test_viewer_cannot_modify_own_post(self):
        viewer = make_profile(Role.VIEWER)
        assert not can_modify_resource(viewer, viewer.user_id, "blog:update")

    def test_inactive_admin_cannot_modify(self):
        admin = make_profile(Role.ADMIN, is_active=False)
        assert not can_modify_resource(admin, admin.user_id, "blog:update")

    def test_anonymous_cannot_modify(self):
        assert not can_modify_resource(None, "owner", "blog:update")
