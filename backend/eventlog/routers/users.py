"""User API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventlog.database import get_db
from eventlog.deps import get_current_user, get_current_user_optional
from eventlog.errors import InsufficientPermissions, NotFound
from eventlog.models.user import User
from eventlog.schemas.user import UserCreate, UserUpdate, UserOut
from eventlog.services import user_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _ensure_self(current_user: User, user_id: str) -> None:
    if current_user.user_id != user_id:
        raise InsufficientPermissions("You can only access your own resources")


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return user_service.create_user(
        db,
        username=payload.username,
        email=payload.email,
        display_name=payload.display_name,
        password=payload.password,
    )


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users by display name."""
    return user_service.list_users(db)


@router.get("/assignable", response_model=list[UserOut])
def list_assignable_users(
    exclude_self: bool = Query(True),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """Users that can be assigned to an event (the caller is left out by default)."""
    exclude_id = current_user.user_id if current_user and exclude_self else None
    return user_service.list_for_assignment(db, exclude_id=exclude_id)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = user_service.get_user(db, user_id)
    if not user:
        raise NotFound("user", user_id)
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update your own profile or password (partial update)."""
    _ensure_self(current_user, user_id)
    return user_service.update_user(db, user_id, **payload.model_dump(exclude_unset=True))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _ensure_self(current_user, user_id)
    user_service.delete_user(db, user_id)
