"""User directory: accounts, credentials and lookups for assignment."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventlog.errors import DuplicateEmail, DuplicateUsername, NotFound, UpdateFailed
from eventlog.models.user import User
from eventlog.services.auth_service import hash_password, verify_password
from eventlog.time_utils import utcnow

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.user_id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def user_exists(db: Session, user_id: str) -> bool:
    return db.query(User.user_id).filter(User.user_id == user_id).first() is not None


def missing_user_ids(db: Session, user_ids: list[str]) -> list[str]:
    """Return the ids in ``user_ids`` that name no user, in input order."""
    if not user_ids:
        return []
    found = {row.user_id for row in db.query(User.user_id).filter(User.user_id.in_(user_ids))}
    return [uid for uid in user_ids if uid not in found]


def _check_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None):
    if email is not None:
        query = db.query(User.user_id).filter(User.email == email)
        if exclude_id:
            query = query.filter(User.user_id != exclude_id)
        if query.first():
            raise DuplicateEmail("Email address is already in use")
    if username is not None:
        query = db.query(User.user_id).filter(User.username == username)
        if exclude_id:
            query = query.filter(User.user_id != exclude_id)
        if query.first():
            raise DuplicateUsername("Username is already in use")


def create_user(db: Session, username: str, email: str, display_name: str, password: str) -> User:
    """Create an account. The password is hashed before it reaches the session."""
    _check_unique(db, username, email)
    user = User(
        username=username,
        email=email,
        display_name=display_name,
        password_hash=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        db.rollback()
        _check_unique(db, username, email)
        raise
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.username)
    return user


def verify_credentials(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when email and password match, otherwise None.

    An unknown email and a wrong password look the same to the caller.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        return None
    return user


def update_user(db: Session, user_id: str, **fields) -> User:
    """Apply profile/credential changes. ``password`` is re-hashed."""
    user = get_user(db, user_id)
    if not user:
        raise NotFound("user", user_id)

    _check_unique(db, fields.get("username"), fields.get("email"), exclude_id=user_id)

    password = fields.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field in ("username", "email", "display_name"):
        value = fields.get(field)
        if value is not None:
            setattr(user, field, value)
    user.updated_at = utcnow()

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Update of user %s rejected by the store: %s", user_id, exc)
        raise UpdateFailed("Failed to update user") from exc
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user


def delete_user(db: Session, user_id: str) -> None:
    """Delete a user, their events, and their assignment links."""
    user = get_user(db, user_id)
    if not user:
        raise NotFound("user", user_id)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.display_name.asc()).all()


def list_for_assignment(db: Session, exclude_id: Optional[str] = None) -> list[User]:
    """Users that can be assigned to an event, by display name."""
    query = db.query(User)
    if exclude_id:
        query = query.filter(User.user_id != exclude_id)
    return query.order_by(User.display_name.asc()).all()
