from __future__ import annotations

import json
import runpy
from pathlib import Path

from projecthub.db.repositories import memberships as membership_repo
from projecthub.services.project_service import ProjectService

MODULE_GLOBALS = runpy.run_path(str(Path(__file__).resolve().parents[2] / "scripts" / "migrate_member_groups.py"))
MAIN = MODULE_GLOBALS["main"]


def _seed(session_factory):
    with session_factory() as db:
        project = ProjectService(db).create_project("Legacy", "owner")
        membership_repo.create_membership(
            db, project_id=project.id, user_id="old-member", role="viewer", group=None, invited_by=None,
        )
        return project.id


def test_backfills_and_prints_summary(session_factory, capsys):
    project_id = _seed(session_factory)
    MAIN.__globals__["SessionLocal"] = session_factory

    assert MAIN([]) == 0
    out = capsys.readouterr().out
    assert "Updated:             1" in out
    with session_factory() as db:
        assert membership_repo.get_membership(db, project_id, "old-member").group == "consulting"


def test_json_output_on_second_run(session_factory, capsys):
    _seed(session_factory)
    MAIN.__globals__["SessionLocal"] = session_factory
    MAIN([])
    capsys.readouterr()

    assert MAIN(["--json"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result == {"total": 2, "updated": 0, "already_has_group": 2, "errors": 0, "success": True}
