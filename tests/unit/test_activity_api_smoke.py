import uuid

from conftest import auth_headers


def _email(prefix):
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def _busy_project(client):
    owner_h = auth_headers(_email("owner"))
    viewer_h = auth_headers(_email("viewer"))
    project_id = client.post("/projects/", json={"name": "Activity"}, headers=owner_h).json()["id"]
    token = client.post(
        f"/projects/{project_id}/invite-links", json={"role": "viewer", "group": "client"}, headers=owner_h,
    ).json()["token"]
    client.post(f"/invite-links/{token}/accept", headers=viewer_h)
    for name in ("a", "b", "c"):
        client.post(f"/projects/{project_id}/documents", json={"name": name}, headers=owner_h)
    return project_id, owner_h, viewer_h


def test_activity_paging(client):
    project_id, owner_h, viewer_h = _busy_project(client)
    # project_created, invite_link_created, invite_link_accepted, 3x document_uploaded
    seen = []
    cursor = None
    while True:
        params = {"limit": 4}
        if cursor:
            params["cursor"] = cursor
        r = client.get(f"/projects/{project_id}/activity", params=params, headers=viewer_h)
        assert r.status_code == 200, r.text
        page = r.json()
        seen.extend(a["action"] for a in page["activities"])
        if not page["has_more"]:
            break
        cursor = page["cursor"]
    assert len(seen) == 6
    assert seen[-1] == "project_created"
    assert seen.count("document_uploaded") == 3


def test_activity_group_narrowing(client):
    project_id, owner_h, _ = _busy_project(client)
    r = client.get(f"/projects/{project_id}/activity", params={"group": "client"}, headers=owner_h)
    actions = {a["action"] for a in r.json()["activities"]}
    assert actions == {"invite_link_created", "invite_link_accepted"}


def test_activity_access_and_errors(client):
    project_id, owner_h, _ = _busy_project(client)
    stranger_h = auth_headers(_email("stranger"))
    assert client.get(f"/projects/{project_id}/activity", headers=stranger_h).status_code == 403
    assert client.get("/projects/missing/activity", headers=owner_h).status_code == 404
    r = client.get(f"/projects/{project_id}/activity", params={"cursor": "garbage"}, headers=owner_h)
    assert r.status_code == 422
    r = client.get(f"/projects/{project_id}/activity", params={"limit": 0}, headers=owner_h)
    assert r.status_code == 422


def test_activity_filter_endpoint(client):
    project_id, owner_h, viewer_h = _busy_project(client)
    url = f"/projects/{project_id}/activity/filter"

    uploads = client.get(url, params={"action": "document_uploaded"}, headers=owner_h).json()
    assert [a["metadata"]["name"] for a in uploads] == ["c", "b", "a"]

    members = client.get(f"/projects/{project_id}/members", headers=owner_h).json()
    viewer_id = next(m["user_id"] for m in members if m["role"] == "viewer")
    by_viewer = client.get(url, params={"user_id": viewer_id}, headers=owner_h).json()
    assert [a["action"] for a in by_viewer] == ["invite_link_accepted"]

    everything = client.get(
        url, params={"start": "2000-01-01T00:00:00Z", "end": "2100-01-01T00:00:00Z"}, headers=owner_h,
    ).json()
    assert len(everything) == 6

    assert client.get(url, headers=owner_h).status_code == 422
    assert client.get(url, params={"action": "x", "user_id": viewer_id}, headers=owner_h).status_code == 422
    assert client.get(url, params={"start": "2000-01-01T00:00:00Z"}, headers=owner_h).status_code == 422
    r = client.get(url, params={"start": "2100-01-01T00:00:00Z", "end": "2000-01-01T00:00:00Z"}, headers=owner_h)
    assert r.status_code == 422
