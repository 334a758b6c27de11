"""Core event service: owns the event invariants.

Responsibilities:
- Reference checks: every assigned user and tag must exist, or nothing is written
- Association sync: a supplied user/tag list replaces the stored set wholesale
- Edit history: one row per update that changes title, content, type or timestamp
- Immutable ownership: creator_id and created_at are never rewritten
- Paginated listings ordered by logical timestamp
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from eventlog.config import settings
from eventlog.errors import (
    DeleteFailed,
    InsufficientPermissions,
    InvalidReference,
    NotFound,
    UpdateFailed,
    ValidationFailed,
)
from eventlog.models.attachment import Attachment
from eventlog.models.event import Event, EventType
from eventlog.models.event_edit_history import EventEditHistory
from eventlog.models.tag import Tag
from eventlog.models.user import User
from eventlog.schemas.event import AttachmentCreate, EventCreate, EventUpdate
from eventlog.services import tag_service, user_service
from eventlog.time_utils import isoformat_utc, to_utc, utcnow

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ("title", "content", "type", "timestamp")
RECENT_WINDOW = timedelta(days=7)


def with_relations(query: Query) -> Query:
    """Eager-load everything an event response carries."""
    return query.options(
        selectinload(Event.creator),
        selectinload(Event.assigned_users),
        selectinload(Event.tags),
        selectinload(Event.attachments),
    )


def paginate(query: Query, page: int, limit: int, order_by: list) -> dict[str, Any]:
    """Run ``query`` for one page and wrap it in the listing envelope."""
    total = query.order_by(None).count()
    items = (
        with_relations(query)
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "data": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    }


def _timeline_order() -> list:
    return [Event.timestamp.desc(), Event.event_id.desc()]


def ensure_owner(event: Event, user_id: str) -> None:
    """Only the creator may modify or delete an event."""
    if event.creator_id != user_id:
        raise InsufficientPermissions("You can only modify events you created")


def _resolve_users(db: Session, user_ids: list[str]) -> list[User]:
    user_ids = list(dict.fromkeys(user_ids))
    missing = user_service.missing_user_ids(db, user_ids)
    if missing:
        raise InvalidReference("user", missing)
    if not user_ids:
        return []
    return db.query(User).filter(User.user_id.in_(user_ids)).all()


def _resolve_tags(db: Session, tag_ids: list[str]) -> list[Tag]:
    tag_ids = list(dict.fromkeys(tag_ids))
    missing = tag_service.missing_tag_ids(db, tag_ids)
    if missing:
        raise InvalidReference("tag", missing)
    return tag_service.get_tags_by_ids(db, tag_ids)


def _tracked_value(field: str, value: Any) -> Any:
    """JSON-safe form of a tracked field for the history log."""
    if field == "type":
        return EventType(value).value
    if field == "timestamp":
        return isoformat_utc(value)
    return value


def _diff(event: Event, updates: dict[str, Any]) -> dict[str, dict[str, Any]]:
    changes = {}
    current = {
        "title": event.title,
        "content": event.content,
        "type": event.event_type,
        "timestamp": to_utc(event.timestamp),
    }
    for field in TRACKED_FIELDS:
        if field not in updates:
            continue
        new = to_utc(updates[field]) if field == "timestamp" else updates[field]
        if new != current[field]:
            changes[field] = {
                "from": _tracked_value(field, current[field]),
                "to": _tracked_value(field, new),
            }
    return changes


def get_event(db: Session, event_id: str) -> Optional[Event]:
    return with_relations(db.query(Event)).filter(Event.event_id == event_id).first()


def event_exists(db: Session, event_id: str) -> bool:
    return db.query(Event.event_id).filter(Event.event_id == event_id).first() is not None


def create_event(db: Session, payload: EventCreate, creator_id: str) -> Event:
    """Create an event with its assignments and tags in one transaction."""
    if not user_service.user_exists(db, creator_id):
        raise InvalidReference("user", [creator_id])
    assigned_users = _resolve_users(db, payload.assigned_user_ids)
    tags = _resolve_tags(db, payload.tag_ids)

    now = utcnow()
    event = Event(
        title=payload.title,
        content=payload.content,
        event_type=payload.type,
        timestamp=to_utc(payload.timestamp) or now,
        event_metadata=payload.metadata,
        creator_id=creator_id,
        created_at=now,
        updated_at=now,
    )
    event.assigned_users = assigned_users
    event.tags = tags
    db.add(event)
    db.commit()
    logger.info("Created event '%s' (%s) by user %s", event.title, event.event_id, creator_id)
    return get_event(db, event.event_id)


def update_event(db: Session, event_id: str, payload: EventUpdate, editor_id: str) -> Event:
    """Apply a partial update and record tracked-field changes.

    Authorization is the caller's job (see ``ensure_owner``).
    """
    event = get_event(db, event_id)
    if not event:
        raise NotFound("event", event_id)

    updates = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field == "metadata"
    }

    # Validate every reference before touching the instance.
    assigned_users = _resolve_users(db, updates["assigned_user_ids"]) if "assigned_user_ids" in updates else None
    tags = _resolve_tags(db, updates["tag_ids"]) if "tag_ids" in updates else None

    changes = _diff(event, updates)

    if "title" in updates:
        event.title = updates["title"]
    if "content" in updates:
        event.content = updates["content"]
    if "type" in updates:
        event.event_type = EventType(updates["type"])
    if "timestamp" in updates:
        event.timestamp = to_utc(updates["timestamp"])
    if "metadata" in updates:
        event.event_metadata = updates["metadata"]
    if assigned_users is not None:
        event.assigned_users = assigned_users
    if tags is not None:
        event.tags = tags
    event.updated_at = utcnow()

    if changes:
        db.add(EventEditHistory(event_id=event.event_id, changes=changes, edited_by=editor_id))

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Update of event %s rejected by the store: %s", event_id, exc)
        raise UpdateFailed("Failed to update event") from exc

    logger.info("Updated event %s (changed: %s)", event_id, ", ".join(changes) or "none")
    return get_event(db, event_id)


def delete_event(db: Session, event_id: str) -> bool:
    """Delete an event with its links, attachments and history.

    Returns False when there is no such event. A delete the store rejects
    raises DeleteFailed, so callers can tell the two apart.
    """
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        return False
    db.delete(event)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Delete of event %s rejected by the store: %s", event_id, exc)
        raise DeleteFailed("Failed to delete event") from exc
    logger.info("Deleted event %s", event_id)
    return True


def list_events(db: Session, page: int = 1, limit: int = 20) -> dict[str, Any]:
    return paginate(db.query(Event), page, limit, _timeline_order())


def list_by_creator(db: Session, creator_id: str, page: int = 1, limit: int = 20) -> dict[str, Any]:
    query = db.query(Event).filter(Event.creator_id == creator_id)
    return paginate(query, page, limit, _timeline_order())


def list_by_date_range(
    db: Session, start: datetime, end: datetime, page: int = 1, limit: int = 20,
) -> dict[str, Any]:
    """Events whose logical timestamp falls in [start, end]."""
    query = db.query(Event).filter(Event.timestamp >= to_utc(start), Event.timestamp <= to_utc(end))
    return paginate(query, page, limit, _timeline_order())


def get_stats(db: Session, now: Optional[datetime] = None) -> dict[str, Any]:
    now = to_utc(now) or utcnow()
    total = db.query(func.count(Event.event_id)).scalar()
    by_type = (
        db.query(Event.event_type, func.count(Event.event_id))
        .group_by(Event.event_type)
        .order_by(Event.event_type)
        .all()
    )
    recent = (
        db.query(func.count(Event.event_id))
        .filter(Event.created_at >= now - RECENT_WINDOW)
        .scalar()
    )
    return {
        "total_events": total,
        "events_by_type": [{"type": event_type, "count": count} for event_type, count in by_type],
        "recent_events": recent,
    }


def get_edit_history(db: Session, event_id: str) -> list[EventEditHistory]:
    if not event_exists(db, event_id):
        raise NotFound("event", event_id)
    return (
        db.query(EventEditHistory)
        .filter(EventEditHistory.event_id == event_id)
        .order_by(EventEditHistory.edited_at.asc())
        .all()
    )


def add_attachment(db: Session, event_id: str, payload: AttachmentCreate) -> Attachment:
    """Register a stored file against an event. File bytes are never read here."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFound("event", event_id)
    if payload.size > settings.MAX_ATTACHMENT_SIZE:
        raise ValidationFailed(
            f"File size must be at most {settings.MAX_ATTACHMENT_SIZE} bytes",
            details={"size": payload.size},
        )
    attachment = Attachment(event_id=event_id, **payload.model_dump())
    db.add(attachment)
    event.updated_at = utcnow()
    db.commit()
    db.refresh(attachment)
    logger.info("Attached '%s' to event %s", attachment.original_name, event_id)
    return attachment


def list_attachments(db: Session, event_id: str) -> list[Attachment]:
    if not event_exists(db, event_id):
        raise NotFound("event", event_id)
    return (
        db.query(Attachment)
        .filter(Attachment.event_id == event_id)
        .order_by(Attachment.uploaded_at.asc())
        .all()
    )


def delete_attachment(db: Session, event_id: str, attachment_id: str) -> None:
    attachment = (
        db.query(Attachment)
        .filter(Attachment.attachment_id == attachment_id, Attachment.event_id == event_id)
        .first()
    )
    if not attachment:
        raise NotFound("attachment", attachment_id)
    db.delete(attachment)
    attachment.event.updated_at = utcnow()
    db.commit()
    logger.info("Removed attachment %s from event %s", attachment_id, event_id)
