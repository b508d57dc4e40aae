import pytest

from projecthub.db import models
from projecthub.db.repositories import memberships as membership_repo
from projecthub.services.document_service import DocumentService
from projecthub.services.errors import InvalidValueError, NotFoundError, PermissionDenied
from projecthub.services.project_service import ProjectService


@pytest.fixture
def project(db_session):
    project = ProjectService(db_session).create_project("Docs", "owner")
    for user_id, role, group in [
        ("c-admin", "admin", "consulting"),
        ("c-editor", "editor", "consulting"),
        ("k-editor", "editor", "client"),
        ("k-viewer", "viewer", "client"),
    ]:
        membership_repo.create_membership(
            db_session, project_id=project.id, user_id=user_id, role=role, group=group, invited_by="owner",
        )
    return project


@pytest.fixture
def service(db_session):
    return DocumentService(db_session)


def test_default_visibility_follows_uploader_group(service, project):
    assert service.add_document(project.id, "c-editor", "Engagement letter").visibility == "consulting_only"
    assert service.add_document(project.id, "k-editor", "Trial balance").visibility == "both"


def test_viewer_cannot_upload(service, project):
    with pytest.raises(PermissionDenied):
        service.add_document(project.id, "k-viewer", "Notes")
    with pytest.raises(PermissionDenied):
        service.add_document(project.id, "stranger", "Notes")


def test_explicit_visibility_needs_manage_role(service, project):
    with pytest.raises(PermissionDenied):
        service.add_document(project.id, "k-editor", "Ledger", visibility="client_only")
    doc = service.add_document(project.id, "c-admin", "Memo", category="legal", visibility="both")
    assert doc.visibility == "both"
    assert doc.category == "legal"
    with pytest.raises(InvalidValueError):
        service.add_document(project.id, "c-admin", "Memo", visibility="all")


def test_listing_is_filtered_by_group(service, project):
    service.add_document(project.id, "c-editor", "Internal")  # consulting_only
    service.add_document(project.id, "k-editor", "Shared")  # both
    service.add_document(project.id, "c-admin", "Client pack", visibility="client_only")

    def names(user_id):
        return sorted(d.name for d in service.list_documents(project.id, user_id))

    assert names("owner") == ["Client pack", "Internal", "Shared"]
    assert names("c-editor") == ["Internal", "Shared"]
    assert names("k-viewer") == ["Client pack", "Shared"]
    assert names("stranger") == []


def test_set_visibility(service, project, db_session):
    doc = service.add_document(project.id, "c-editor", "Internal")
    updated = service.set_document_visibility(doc.id, "c-admin", "both")
    assert updated.visibility == "both"
    entry = db_session.query(models.ActivityLog).filter_by(action="document_visibility_changed").one()
    assert entry.get_metadata() == {"old_visibility": "consulting_only", "new_visibility": "both"}
    assert entry.group_context == "consulting"

    with pytest.raises(PermissionDenied):
        service.set_document_visibility(doc.id, "c-editor", "consulting_only")
    with pytest.raises(NotFoundError):
        service.set_document_visibility("missing", "c-admin", "both")
    with pytest.raises(InvalidValueError):
        service.set_document_visibility(doc.id, "c-admin", "nobody")
