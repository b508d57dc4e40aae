import asyncio
from types import SimpleNamespace
from unittest.mock import Mock

from projecthub.services.project_service import ProjectService
from projecthub.utils.project_permissions import (
    ProjectPermissions,
    SessionMembershipLookup,
    resolve_project_permissions,
)


def _lookup(role=None, group=None):
    return Mock(get_user_role=Mock(return_value=role), get_user_group=Mock(return_value=group))


def _resolve(lookup, project_id="p1", user_id="u1"):
    return asyncio.run(resolve_project_permissions(lookup, project_id, user_id))


def test_pending_value_allows_nothing():
    perms = ProjectPermissions.pending()
    assert perms.loading is True
    assert perms.can_edit is False
    assert perms.can_invite is False
    assert perms.assignable_roles == []
    assert perms.can_change_role("viewer") is False
    assert perms.can_view_document("both") is False


def test_admin_in_consulting():
    lookup = _lookup("admin", "consulting")
    perms = _resolve(lookup)
    lookup.get_user_role.assert_called_once_with("p1", "u1")
    lookup.get_user_group.assert_called_once_with("p1", "u1")
    assert perms.loading is False
    assert perms.error is None
    assert perms.can_edit and perms.can_manage_members and perms.can_invite
    assert perms.can_delete is False
    assert perms.assignable_roles == ["editor", "viewer"]
    assert perms.default_document_visibility == "consulting_only"
    assert perms.can_change_role("editor") is True
    assert perms.can_change_role("admin") is False
    assert perms.can_assign_role("viewer", "editor") is True
    assert perms.can_assign_role("viewer", "owner") is False
    assert perms.can_remove_member("viewer", "u2") is True
    assert perms.can_remove_member("viewer", "u1") is False
    assert perms.can_view_document("client_only") is False
    assert perms.can_set_document_visibility() is True
    assert perms.can_move_user_between_groups() is True


def test_client_viewer():
    perms = _resolve(_lookup("viewer", "client"))
    assert perms.can_edit is False
    assert perms.can_view_activity is True
    assert perms.default_document_visibility == "both"
    assert perms.can_view_document("client_only") is True
    assert perms.can_view_document("consulting_only") is False
    assert perms.can_set_document_visibility() is False


def test_non_member_fails_closed():
    perms = _resolve(_lookup(None, None))
    assert perms.error is None
    assert perms.is_member is False
    assert perms.can_view_activity is False
    assert perms.can_view_document("both") is False
    assert perms.default_document_visibility == "both"
    assert perms.can_revoke_link(SimpleNamespace(created_by="u1")) is False


def test_lookup_failure_sets_error_and_fails_closed():
    lookup = _lookup()
    lookup.get_user_role.side_effect = RuntimeError("store unavailable")
    perms = _resolve(lookup)
    assert perms.error == "store unavailable"
    assert perms.loading is False
    assert perms.role is None
    assert perms.can_edit is False
    assert perms.can_invite is False


def test_missing_user_or_project_skips_lookup():
    lookup = _lookup("owner", "consulting")
    perms = _resolve(lookup, project_id=None)
    assert perms.loading is False
    assert perms.error is None
    assert perms.can_edit is False
    lookup.get_user_role.assert_not_called()
    assert _resolve(lookup, user_id=None).can_edit is False


def test_async_lookups_are_awaited():
    class AsyncLookup:
        async def get_user_role(self, project_id, user_id):
            return "owner"

        async def get_user_group(self, project_id, user_id):
            return "consulting"

    perms = _resolve(AsyncLookup())
    assert perms.can_delete is True
    assert perms.assignable_roles == ["owner", "admin", "editor", "viewer"]


def test_revoke_link_rules():
    link = SimpleNamespace(created_by="u1")
    assert _resolve(_lookup("editor", "client")).can_revoke_link(link) is True
    assert _resolve(_lookup("editor", "client"), user_id="u2").can_revoke_link(link) is False
    assert _resolve(_lookup("admin", "client"), user_id="u2").can_revoke_link(link) is True


def test_to_dict_shape():
    data = _resolve(_lookup("owner", "consulting")).to_dict()
    assert data["role"] == "owner"
    assert data["can_delete"] is True
    assert data["can_set_document_visibility"] is True
    assert data["assignable_roles"] == ["owner", "admin", "editor", "viewer"]


def test_session_lookup_reads_memberships(db_session, session_factory):
    project = ProjectService(db_session).create_project("Alpha", "owner-1")
    perms = _resolve(SessionMembershipLookup(session_factory), project.id, "owner-1")
    assert perms.role == "owner"
    assert perms.group == "consulting"
    assert _resolve(SessionMembershipLookup(session_factory), project.id, "stranger").is_member is False
