"""
Identity resolution from the auth proxy headers and user upsert.
"""
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from projecthub.db import models

DEV_USER_EMAIL = "dev@localhost"
DEV_USER_NAME = "Development User"


def normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower() or None


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def get_or_create_user(db: Session, email: str, display_name: Optional[str] = None) -> models.User:
    user = db.query(models.User).filter(models.User.email == email).first()
    if user:
        return user
    user = models.User(email=email, display_name=display_name or email.split("@")[0])
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Created by a concurrent first request for the same email
        db.rollback()
        return db.query(models.User).filter(models.User.email == email).one()
    db.refresh(user)
    return user
