"""
Shared SQLAlchemy base and helpers.
"""
import uuid
from sqlalchemy.orm import declarative_base
from datetime import datetime, UTC

# Import SQLite compilation shims for PostgreSQL-only types when running tests
# under SQLite.
from .. import sqlite_compiler_shims  # noqa: F401


def now_utc():
    """Return an aware UTC datetime for default/updated timestamps."""
    return datetime.now(UTC)


def new_id() -> str:
    """Primary key factory for string identifiers."""
    return uuid.uuid4().hex


def ensure_aware(value):
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


Base = declarative_base()
