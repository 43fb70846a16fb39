import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.config import Settings
from shopledger.core.exceptions import ValidationError
from shopledger.core.security import hash_password, new_salt, verify_password
from shopledger.database.session import unit_of_work
from shopledger.models.user import User

logger = logging.getLogger(__name__)


def get_user(db: Session, username: str) -> Optional[User]:
    return db.execute(select(User).where(User.username == username)).scalars().first()


def ensure_admin_user(db: Session, settings: Settings) -> tuple[User, bool]:
    """Create the configured admin account if missing; returns (user, created)."""
    username = settings.ADMIN_USERNAME.strip()
    existing = get_user(db, username)
    if existing is not None:
        return existing, False

    if not settings.ADMIN_PASSWORD:
        raise ValidationError("ADMIN_PASSWORD is not configured")

    salt = new_salt()
    with unit_of_work(db):
        user = User(
            username=username,
            password_salt=salt,
            password_hash=hash_password(settings.ADMIN_PASSWORD, salt, settings.PBKDF2_ROUNDS),
            role="admin",
        )
        db.add(user)
    logger.info("Created admin user %s", username)
    return user, True


def authenticate(db: Session, username: str, password: str, settings: Settings) -> Optional[User]:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("username and password are required")

    user = get_user(db, username)
    if user is None:
        return None
    if not verify_password(password, user.password_salt, user.password_hash, settings.PBKDF2_ROUNDS):
        return None
    return user


__all__ = ["authenticate", "ensure_admin_user", "get_user"]
