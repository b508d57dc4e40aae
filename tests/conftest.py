import os
import threading
from datetime import datetime, timedelta, UTC

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("PYTEST_RUNNING", "1")

import projecthub.db.database as db_module
from projecthub.api.main import app
from projecthub.db import models
from projecthub.utils.invite_settings import reset_invite_settings_cache


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("DEV_MODE", "INVITE_TTL_DAYS", "INVITE_LINK_TTL_DAYS", "APP_BASE_URL", "APP_HOST"):
        monkeypatch.delenv(var, raising=False)
    reset_invite_settings_cache()
    yield
    reset_invite_settings_cache()


# Per-test SQLite file database. A file (not :memory:) so the permission
# lookups can open their own connections from worker threads.
@pytest.fixture
def _engine(tmp_path):
    engine = db_module.build_engine(f"sqlite+pysqlite:///{tmp_path / 'test.db'}")
    models.Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(_engine):
    return db_module.build_session_factory(_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# Backwards compatibility: some tests use the shorter 'db' name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[db_module.get_db] = _override_get_db
    app.dependency_overrides[db_module.get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(email: str, name: str | None = None) -> dict:
    headers = {"x-auth-request-email": email}
    if name:
        headers["x-auth-request-user"] = name
    return headers


def run_concurrently(count: int, fn) -> list:
    """
    Call ``fn(i)`` from ``count`` threads released together by a barrier.

    Returns one outcome per thread: the return value, or the exception raised.
    """
    barrier = threading.Barrier(count)
    outcomes: list = [None] * count

    def worker(i: int) -> None:
        barrier.wait()
        try:
            outcomes[i] = fn(i)
        except Exception as e:
            outcomes[i] = e

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return outcomes


class FrozenClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FrozenClock()
