"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with an
in-memory SQLite fallback for test runs, and exposes the FastAPI session
dependency. Services never reach for this module directly: they receive a
``Session`` from their caller.
"""
import os
import sys
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test is running, so module
    import during collection is detected through ``sys.modules`` instead.
    ``PYTEST_RUNNING=1`` forces the test behaviour explicitly.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _get_database_url() -> str:
    # Test override first, then explicit DATABASE_URL, then POSTGRES_* parts
    if os.getenv("PROJECTHUB_TEST_DB"):
        return os.getenv("PROJECTHUB_TEST_DB")
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    parts = {
        "POSTGRES_USER": os.getenv("POSTGRES_USER"),
        "POSTGRES_PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "POSTGRES_HOST": os.getenv("POSTGRES_HOST"),
        "POSTGRES_PORT": os.getenv("POSTGRES_PORT"),
        "POSTGRES_DB": os.getenv("POSTGRES_DB"),
    }
    missing = [name for name, value in parts.items() if not value]
    if missing:
        if _is_pytest_runtime():
            return SQLITE_MEMORY_URL
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return (
        f"postgresql://{parts['POSTGRES_USER']}:{parts['POSTGRES_PASSWORD']}"
        f"@{parts['POSTGRES_HOST']}:{parts['POSTGRES_PORT']}/{parts['POSTGRES_DB']}"
    )


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # StaticPool so the schema persists across connections
        kwargs["poolclass"] = StaticPool
    return kwargs


def build_engine(url: str):
    """Create an engine for ``url`` with the SQLite adjustments applied."""
    return create_engine(url, **_engine_kwargs(url))


def build_session_factory(bind):
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


DATABASE_URL = _get_database_url()
engine = build_engine(DATABASE_URL)
SessionLocal = build_session_factory(engine)

# An in-memory database has no migrations applied; create the schema eagerly
if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    from projecthub.db import models  # local import to avoid circular import at module load
    models.Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Dependency for code that opens its own short-lived sessions (e.g. per-thread lookups)."""
    return SessionLocal
