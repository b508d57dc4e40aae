import uuid

from conftest import auth_headers


def _email(prefix):
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def _link(client, project_id, headers, role="viewer", group="client"):
    return client.post(f"/projects/{project_id}/invite-links", json={"role": role, "group": group}, headers=headers)


def _setup(client):
    owner_h = auth_headers(_email("owner"))
    admin_h = auth_headers(_email("admin"))
    editor_h = auth_headers(_email("editor"))
    project_id = client.post("/projects/", json={"name": "Tax review"}, headers=owner_h).json()["id"]
    for role, group, headers in (("admin", "consulting", admin_h), ("editor", "client", editor_h)):
        token = _link(client, project_id, owner_h, role, group).json()["token"]
        assert client.post(f"/invite-links/{token}/accept", headers=headers).status_code == 200
    return project_id, owner_h, admin_h, editor_h


def test_link_round_trip(client, monkeypatch):
    monkeypatch.setenv("APP_BASE_URL", "https://hub.example.com")
    owner_h = auth_headers(_email("owner"))
    project_id = client.post("/projects/", json={"name": "Tax review"}, headers=owner_h).json()["id"]

    r = _link(client, project_id, owner_h, "editor", "client")
    assert r.status_code == 201, r.text
    link = r.json()
    assert link["token"].startswith("link_")
    assert link["url"] == f"https://hub.example.com/invite/{link['token']}"
    assert link["status"] == "active"

    joiner_h = auth_headers(_email("joiner"))
    assert client.get(f"/invite-links/{link['token']}", headers=joiner_h).json()["is_expired"] is False
    r = client.post(f"/invite-links/{link['token']}/accept", headers=joiner_h)
    assert r.status_code == 200
    assert r.json() == {"project_id": project_id, "role": "editor", "group": "client"}

    perms = client.get(f"/projects/{project_id}/permissions", headers=joiner_h).json()
    assert perms["role"] == "editor"
    assert perms["group"] == "client"

    r = client.post(f"/invite-links/{link['token']}/accept", headers=auth_headers(_email("late")))
    assert r.status_code == 400
    assert r.json()["detail"] == "This invite link has already been used"
    r = client.post(f"/invite-links/{link['token']}/accept", headers=joiner_h)
    assert r.status_code == 400
    assert client.post("/invite-links/link_nope/accept", headers=joiner_h).status_code == 404


def test_existing_member_gets_conflict(client):
    project_id, owner_h, _, editor_h = _setup(client)
    token = _link(client, project_id, owner_h).json()["token"]
    r = client.post(f"/invite-links/{token}/accept", headers=editor_h)
    assert r.status_code == 409


def test_role_ceiling_on_creation(client):
    project_id, owner_h, admin_h, editor_h = _setup(client)
    for role in ("owner", "admin"):
        r = _link(client, project_id, admin_h, role, "consulting")
        assert r.status_code == 403
        assert r.json()["detail"] == f"You cannot create an invite link for the {role} role"
    assert _link(client, project_id, admin_h, "editor").status_code == 201
    assert _link(client, project_id, owner_h, "owner", "consulting").status_code == 201
    # Editors hold no invite permission at all
    assert _link(client, project_id, editor_h).status_code == 403


def test_listing_and_revoking(client):
    project_id, owner_h, admin_h, editor_h = _setup(client)
    owner_link = _link(client, project_id, owner_h).json()

    all_links = client.get(f"/projects/{project_id}/invite-links", headers=admin_h).json()
    assert owner_link["id"] in [link["id"] for link in all_links]
    assert client.get(f"/projects/{project_id}/invite-links", headers=editor_h).json() == []

    r = client.delete(f"/projects/{project_id}/invite-links/{owner_link['id']}", headers=editor_h)
    assert r.status_code == 403
    r = client.delete(f"/projects/{project_id}/invite-links/{owner_link['id']}", headers=admin_h)
    assert r.status_code == 200
    assert r.json()["status"] == "revoked"

    r = client.delete(f"/projects/{project_id}/invite-links/{owner_link['id']}", headers=owner_h)
    assert r.status_code == 400
    assert client.delete(f"/projects/{project_id}/invite-links/missing", headers=owner_h).status_code == 404

    r = client.post(f"/invite-links/{owner_link['token']}/accept", headers=auth_headers(_email("late")))
    assert r.status_code == 400
    assert r.json()["detail"] == "This invite link has been revoked"
