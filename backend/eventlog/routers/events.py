"""Event API routes: delegates to event_service for invariant enforcement."""
import logging
from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from eventlog.config import settings
from eventlog.database import get_db
from eventlog.deps import get_current_user
from eventlog.errors import NotFound, ValidationFailed
from eventlog.models.event import Event
from eventlog.models.user import User
from eventlog.schemas.event import (
    AttachmentCreate,
    AttachmentOut,
    EditHistoryOut,
    EventCreate,
    EventOut,
    EventPage,
    EventStats,
    EventUpdate,
)
from eventlog.services import event_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _load_event(db: Session, event_id: str) -> Event:
    event = event_service.get_event(db, event_id)
    if not event:
        raise NotFound("event", event_id)
    return event


@router.get("/", response_model=EventPage)
def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    creator_id: Optional[str] = Query(None, alias="creatorId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Paginated events, most recent first."""
    if creator_id:
        return event_service.list_by_creator(db, creator_id, page, limit)
    if start_date or end_date:
        if not (start_date and end_date):
            raise ValidationFailed("startDate and endDate must be given together")
        return event_service.list_by_date_range(db, start_date, end_date, page, limit)
    return event_service.list_events(db, page, limit)


@router.get("/stats", response_model=EventStats)
def event_stats(db: Session = Depends(get_db)):
    return event_service.get_stats(db)


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an event owned by the caller."""
    return event_service.create_event(db, payload, creator_id=current_user.user_id)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return _load_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update an event (creator only)."""
    event = _load_event(db, event_id)
    event_service.ensure_owner(event, current_user.user_id)
    return event_service.update_event(db, event_id, payload, editor_id=current_user.user_id)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete an event and everything it owns (creator only)."""
    event = _load_event(db, event_id)
    event_service.ensure_owner(event, current_user.user_id)
    if not event_service.delete_event(db, event_id):
        raise NotFound("event", event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/history", response_model=list[EditHistoryOut])
def get_history(event_id: str, db: Session = Depends(get_db)):
    """Field-level edit log, oldest first."""
    return event_service.get_edit_history(db, event_id)


@router.get("/{event_id}/attachments", response_model=list[AttachmentOut])
def list_attachments(event_id: str, db: Session = Depends(get_db)):
    return event_service.list_attachments(db, event_id)


@router.post("/{event_id}/attachments", response_model=AttachmentOut, status_code=status.HTTP_201_CREATED)
def add_attachment(
    event_id: str,
    payload: AttachmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Register an already-stored file against an event (creator only)."""
    event_service.ensure_owner(_load_event(db, event_id), current_user.user_id)
    return event_service.add_attachment(db, event_id, payload)


@router.delete("/{event_id}/attachments/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attachment(
    event_id: str,
    attachment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event_service.ensure_owner(_load_event(db, event_id), current_user.user_id)
    event_service.delete_attachment(db, event_id, attachment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
