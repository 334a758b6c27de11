"""Registration, login and current-user routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventlog.config import settings
from eventlog.database import get_db
from eventlog.deps import get_current_user
from eventlog.errors import AuthenticationFailed
from eventlog.models.user import User
from eventlog.schemas.auth import AuthResponse, LoginRequest
from eventlog.schemas.user import UserCreate, UserOut
from eventlog.services import user_service
from eventlog.services.auth_service import create_access_token

logger = logging.getLogger(__name__)
router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserOut.model_validate(user),
        token=create_access_token(user),
        expires_in=settings.JWT_EXPIRES_MINUTES * 60,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    """Create an account and return a token for it."""
    user = user_service.create_user(
        db,
        username=payload.username,
        email=payload.email,
        display_name=payload.display_name,
        password=payload.password,
    )
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.verify_credentials(db, payload.email, payload.password)
    if user is None:
        raise AuthenticationFailed("Invalid email or password")
    logger.info("User %s logged in", user.user_id)
    return _auth_response(user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
