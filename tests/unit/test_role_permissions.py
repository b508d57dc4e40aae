import pytest
from projecthub.utils.role_permissions import (
    ROLE_HIERARCHY,
    can_change_role,
    can_delete_project,
    can_edit_project,
    can_invite_members,
    can_manage_members,
    can_remove_member,
    can_view_activity_log,
    get_allowed_roles,
    get_assignable_roles,
    get_role_color,
    get_role_display_name,
    has_role_level,
    validate_role,
)

ROLES = ["owner", "admin", "editor", "viewer"]


class TestRoleHierarchy:
    """Unit tests for the role hierarchy predicates."""

    def test_hierarchy_order(self):
        assert ROLE_HIERARCHY == ["viewer", "editor", "admin", "owner"]

    def test_has_role_level_unknown_role_fails_closed(self):
        assert has_role_level("superuser", "viewer") is False
        assert has_role_level(None, "viewer") is False

    @pytest.mark.parametrize("role,expected", [("owner", True), ("admin", True), ("editor", True), ("viewer", False)])
    def test_can_edit_project(self, role, expected):
        assert can_edit_project(role) is expected

    @pytest.mark.parametrize("role,expected", [("owner", True), ("admin", True), ("editor", False), ("viewer", False)])
    def test_can_manage_and_invite(self, role, expected):
        assert can_manage_members(role) is expected
        assert can_invite_members(role) is expected

    def test_only_owner_can_delete(self):
        assert can_delete_project("owner") is True
        for role in ["admin", "editor", "viewer", None, "root"]:
            assert can_delete_project(role) is False

    def test_activity_log_visible_to_every_valid_role(self):
        for role in ROLES:
            assert can_view_activity_log(role) is True
        assert can_view_activity_log("guest") is False
        assert can_view_activity_log(None) is False

    def test_unknown_role_has_no_permissions(self):
        assert can_edit_project("guest") is False
        assert can_manage_members("guest") is False
        assert get_assignable_roles("guest") == []


class TestRoleChanges:
    def test_owner_can_change_anyone(self):
        for target in ROLES:
            assert can_change_role("owner", target) is True

    def test_admin_limited_to_lower_roles(self):
        assert can_change_role("admin", "owner") is False
        assert can_change_role("admin", "admin") is False
        assert can_change_role("admin", "editor") is True
        assert can_change_role("admin", "viewer") is True

    def test_editor_and_viewer_cannot_change_roles(self):
        for actor in ["editor", "viewer"]:
            for target in ROLES:
                assert can_change_role(actor, target) is False

    def test_assignable_roles(self):
        assert get_assignable_roles("owner") == ["owner", "admin", "editor", "viewer"]
        assert get_assignable_roles("admin") == ["editor", "viewer"]
        assert get_assignable_roles("editor") == []
        assert get_assignable_roles("viewer") == []

    @pytest.mark.parametrize("actor", ["owner", "admin"])
    def test_changeable_targets_match_assignable_roles(self, actor):
        changeable = {t for t in ROLES if can_change_role(actor, t)}
        assert changeable == set(get_assignable_roles(actor))


class TestRemoveMember:
    @pytest.mark.parametrize("role", ROLES)
    def test_nobody_can_remove_themselves(self, role):
        assert can_remove_member(role, role, "u1", "u1") is False

    def test_owner_can_remove_anyone_else(self):
        for target in ROLES:
            assert can_remove_member("owner", target, "u1", "u2") is True

    def test_admin_cannot_remove_owner_or_admin(self):
        assert can_remove_member("admin", "owner", "u1", "u2") is False
        assert can_remove_member("admin", "admin", "u1", "u2") is False
        assert can_remove_member("admin", "editor", "u1", "u2") is True
        assert can_remove_member("admin", "viewer", "u1", "u2") is True

    def test_editor_cannot_remove(self):
        assert can_remove_member("editor", "viewer", "u1", "u2") is False


class TestRoleHelpers:
    def test_validate_role(self):
        for role in ROLES:
            validate_role(role)
        with pytest.raises(ValueError, match="Invalid role 'invalid'"):
            validate_role("invalid")

    def test_get_allowed_roles_returns_copy(self):
        roles = get_allowed_roles()
        roles.add("hacker")
        assert "hacker" not in get_allowed_roles()

    def test_display_names_and_colors(self):
        assert get_role_display_name("owner") == "Owner"
        assert get_role_display_name("viewer") == "Viewer"
        assert get_role_display_name("custom") == "custom"
        assert get_role_color("owner") == "teal"
        assert get_role_color("admin") == "yellow"
        assert get_role_color("editor") == "blue"
        assert get_role_color("viewer") == "gray"
        assert get_role_color("custom") == "gray"
