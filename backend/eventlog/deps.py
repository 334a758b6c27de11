"""Request dependencies: database session and the authenticated caller."""
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from eventlog.database import get_db
from eventlog.errors import AuthenticationFailed
from eventlog.models.user import User
from eventlog.services import user_service
from eventlog.services.auth_service import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _user_from_token(db: Session, token: str) -> Optional[User]:
    claims = decode_access_token(token)
    if claims is None:
        return None
    return user_service.get_user(db, claims.sub)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise AuthenticationFailed("Access token is required", code="MISSING_TOKEN")
    user = _user_from_token(db, token)
    if user is None:
        # bad signature, expired, or the account is gone
        raise AuthenticationFailed("Invalid or expired token", code="INVALID_TOKEN")
    return user


def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if not token:
        return None
    return _user_from_token(db, token)
