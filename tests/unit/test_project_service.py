import pytest

from projecthub.db import models
from projecthub.db.repositories import memberships as membership_repo
from projecthub.services.errors import InvalidValueError, NotFoundError, PermissionDenied
from projecthub.services.invitation_service import InvitationService
from projecthub.services.invite_link_service import InviteLinkService
from projecthub.services.project_service import ProjectService


@pytest.fixture
def service(db_session, clock):
    return ProjectService(db_session, clock=clock)


@pytest.fixture
def project(service, db_session):
    project = service.create_project("Merger", "owner")
    for user_id, role, group in [
        ("admin", "admin", "consulting"),
        ("editor", "editor", "client"),
        ("viewer", "viewer", "client"),
    ]:
        membership_repo.create_membership(
            db_session, project_id=project.id, user_id=user_id, role=role, group=group, invited_by="owner",
        )
    return project


def _actions(db_session, project_id):
    db_session.expire_all()
    return [a.action for a in db_session.query(models.ActivityLog).filter_by(project_id=project_id)]


def test_create_project_makes_creator_owner(service, db_session):
    project = service.create_project("  Alpha  ", "u1")
    assert project.name == "Alpha"
    assert service.get_user_role(project.id, "u1") == "owner"
    assert service.get_user_group(project.id, "u1") == "consulting"
    assert [m.user_id for m in service.get_members(project.id)] == ["u1"]
    assert [p.id for p in service.get_user_projects("u1")] == [project.id]
    assert "project_created" in _actions(db_session, project.id)
    with pytest.raises(InvalidValueError):
        service.create_project("   ", "u1")


def test_lookups_for_non_member_and_legacy_group(service, project, db_session):
    assert service.get_user_role(project.id, "stranger") is None
    assert service.get_user_group(project.id, "stranger") is None
    membership_repo.create_membership(
        db_session, project_id=project.id, user_id="legacy", role="viewer", group=None, invited_by=None,
    )
    assert service.get_user_group(project.id, "legacy") == "consulting"


def test_owner_changes_role(service, project, db_session, clock):
    clock.advance(hours=1)
    updated = service.change_member_role(project.id, "owner", "viewer", "admin")
    assert updated.role == "admin"
    assert models.ensure_aware(updated.last_active_at) == clock()
    entry = db_session.query(models.ActivityLog).filter_by(action="member_role_changed").one()
    assert entry.get_metadata() == {"old_role": "viewer", "new_role": "admin"}


def test_self_role_change_forbidden(service, project):
    with pytest.raises(PermissionDenied, match="your own role"):
        service.change_member_role(project.id, "owner", "owner", "admin")


def test_admin_role_change_limits(service, project):
    with pytest.raises(PermissionDenied):
        service.change_member_role(project.id, "admin", "owner", "viewer")
    with pytest.raises(PermissionDenied, match="cannot assign the admin role"):
        service.change_member_role(project.id, "admin", "viewer", "admin")
    assert service.change_member_role(project.id, "admin", "viewer", "editor").role == "editor"


def test_editor_cannot_change_roles(service, project):
    with pytest.raises(PermissionDenied):
        service.change_member_role(project.id, "editor", "viewer", "editor")


def test_role_change_errors(service, project):
    with pytest.raises(InvalidValueError):
        service.change_member_role(project.id, "owner", "viewer", "root")
    with pytest.raises(NotFoundError, match="Member not found"):
        service.change_member_role(project.id, "owner", "ghost", "viewer")
    with pytest.raises(PermissionDenied, match="not a member"):
        service.change_member_role(project.id, "stranger", "viewer", "viewer")


def test_change_group(service, project, db_session):
    updated = service.change_member_group(project.id, "admin", "editor", "consulting")
    assert updated.group == "consulting"
    entry = db_session.query(models.ActivityLog).filter_by(action="member_group_changed").one()
    assert entry.group_context == "consulting"
    with pytest.raises(PermissionDenied):
        service.change_member_group(project.id, "editor", "viewer", "consulting")
    with pytest.raises(InvalidValueError):
        service.change_member_group(project.id, "owner", "viewer", "vendors")


def test_remove_member(service, project, db_session):
    with pytest.raises(PermissionDenied, match="remove yourself"):
        service.remove_member(project.id, "admin", "admin")
    with pytest.raises(PermissionDenied):
        service.remove_member(project.id, "admin", "owner")
    service.remove_member(project.id, "admin", "viewer")
    assert service.get_user_role(project.id, "viewer") is None
    assert "member_removed" in _actions(db_session, project.id)


def test_delete_project_owner_only(service, project, db_session):
    project_id = project.id
    InvitationService(db_session).create_invitation(project_id, "x@example.com", "viewer", "owner")
    InviteLinkService(db_session).generate_invite_link(project_id, "viewer", "client", "owner")
    with pytest.raises(PermissionDenied, match="Only the project owner"):
        service.delete_project(project_id, "admin")

    service.delete_project(project_id, "owner")
    db_session.expire_all()
    assert service.get_project(project_id) is None
    assert service.get_members(project_id) == []
    assert db_session.query(models.Invitation).count() == 0
    assert db_session.query(models.InviteLink).count() == 0
    # Activity trail outlives the project
    assert "project_deleted" in _actions(db_session, project_id)
    with pytest.raises(NotFoundError):
        service.delete_project(project_id, "owner")


def test_migrate_members_to_groups(service, project, db_session):
    for user_id in ("legacy-1", "legacy-2"):
        membership_repo.create_membership(
            db_session, project_id=project.id, user_id=user_id, role="viewer", group=None, invited_by=None,
        )
    result = service.migrate_members_to_groups()
    assert result == {"total": 6, "updated": 2, "already_has_group": 4, "errors": 0, "success": True}
    db_session.expire_all()
    assert membership_repo.get_membership(db_session, project.id, "legacy-1").group == "consulting"
    assert service.migrate_members_to_groups()["updated"] == 0


def test_update_project_renames(service, project, db_session, clock):
    project_id = project.id
    clock.advance(minutes=5)
    renamed = service.update_project(project_id, "editor", "  Merger (phase 2) ")
    assert renamed.name == "Merger (phase 2)"
    assert models.ensure_aware(renamed.updated_at) == clock()
    entry = db_session.query(models.ActivityLog).filter_by(action="project_updated").one()
    assert entry.get_metadata() == {"old_name": "Merger", "new_name": "Merger (phase 2)"}
    assert entry.group_context == "client"


def test_update_project_rejections(service, project):
    with pytest.raises(PermissionDenied):
        service.update_project(project.id, "viewer", "Renamed")
    with pytest.raises(PermissionDenied, match="not a member"):
        service.update_project(project.id, "stranger", "Renamed")
    with pytest.raises(InvalidValueError):
        service.update_project(project.id, "owner", "   ")
    with pytest.raises(NotFoundError):
        service.update_project("missing", "owner", "Renamed")
    assert service.get_project(project.id).name == "Merger"


def test_role_and_group_changes_notify_member(service, project, db_session):
    service.change_member_role(project.id, "owner", "viewer", "editor")
    service.change_member_group(project.id, "admin", "viewer", "consulting")

    notes = {n.event_type: n for n in db_session.query(models.Notification).filter_by(user_id="viewer")}
    assert set(notes) == {"role_change", "group_change"}
    assert notes["role_change"].message == "Your role has been changed from Viewer to Editor"
    assert notes["group_change"].message == (
        "You have been moved from Client Group to Consulting Group. Your document visibility has been updated."
    )
    assert notes["role_change"].action_url == f"/projects/{project.id}"
    assert notes["group_change"].get_metadata()["changed_by"] == "admin"


def test_notification_failure_does_not_fail_role_change(service, project, db_session, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(service.notifications, "create_notification", broken)
    updated = service.change_member_role(project.id, "owner", "viewer", "editor")
    assert updated.role == "editor"
    assert db_session.query(models.Notification).count() == 0
    assert service.get_user_role(project.id, "viewer") == "editor"
