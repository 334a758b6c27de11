"""Tag registry: unique names, palette colors, usage counts."""
import logging
import random
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventlog.errors import DuplicateName, NotFound, UpdateFailed
from eventlog.models.event import event_tags
from eventlog.models.tag import Tag, TAG_COLORS

logger = logging.getLogger(__name__)

_rng = random.Random()


def pick_color(rng: Optional[random.Random] = None) -> str:
    """Uniform pick from the palette. Colors are not unique across tags."""
    return (rng or _rng).choice(TAG_COLORS)


def get_tag(db: Session, tag_id: str) -> Optional[Tag]:
    return db.query(Tag).filter(Tag.tag_id == tag_id).first()


def get_tag_by_name(db: Session, name: str) -> Optional[Tag]:
    return db.query(Tag).filter(Tag.name == name).first()


def get_tags_by_ids(db: Session, tag_ids: list[str]) -> list[Tag]:
    if not tag_ids:
        return []
    return db.query(Tag).filter(Tag.tag_id.in_(tag_ids)).all()


def get_tags_by_names(db: Session, names: list[str]) -> list[Tag]:
    if not names:
        return []
    return db.query(Tag).filter(Tag.name.in_(names)).all()


def tag_exists(db: Session, tag_id: str) -> bool:
    return db.query(Tag.tag_id).filter(Tag.tag_id == tag_id).first() is not None


def missing_tag_ids(db: Session, tag_ids: list[str]) -> list[str]:
    """Return the ids in ``tag_ids`` that name no tag, in input order."""
    found = {tag.tag_id for tag in get_tags_by_ids(db, tag_ids)}
    return [tid for tid in tag_ids if tid not in found]


def list_tags(db: Session) -> list[Tag]:
    return db.query(Tag).order_by(Tag.name.asc()).all()


def create_tag(db: Session, name: str, color: Optional[str] = None, rng: Optional[random.Random] = None) -> Tag:
    if get_tag_by_name(db, name):
        raise DuplicateName("Tag with this name already exists")
    tag = Tag(name=name, color=color or pick_color(rng))
    db.add(tag)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateName("Tag with this name already exists") from exc
    db.refresh(tag)
    logger.info("Created tag '%s' (%s)", tag.name, tag.tag_id)
    return tag


def create_multiple(db: Session, names: list[str], rng: Optional[random.Random] = None) -> list[Tag]:
    """Return a tag per distinct name, creating the missing ones.

    Calling this again with the same names yields the same tags.
    """
    wanted = list(dict.fromkeys(names))
    by_name = {tag.name: tag for tag in get_tags_by_names(db, wanted)}

    created = []
    for name in wanted:
        if name not in by_name:
            tag = Tag(name=name, color=pick_color(rng))
            db.add(tag)
            by_name[name] = tag
            created.append(tag)

    if created:
        db.commit()
        for tag in created:
            db.refresh(tag)
        logger.info("Batch-created %d tag(s): %s", len(created), ", ".join(t.name for t in created))
    return [by_name[name] for name in wanted]


def update_tag(db: Session, tag_id: str, name: Optional[str] = None, color: Optional[str] = None) -> Tag:
    tag = get_tag(db, tag_id)
    if not tag:
        raise NotFound("tag", tag_id)

    if name is not None and name != tag.name:
        if get_tag_by_name(db, name):
            raise DuplicateName("Tag with this name already exists")
        tag.name = name
    if color is not None:
        tag.color = color

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Update of tag %s rejected by the store: %s", tag_id, exc)
        raise UpdateFailed("Failed to update tag") from exc
    db.refresh(tag)
    logger.info("Updated tag %s", tag_id)
    return tag


def delete_tag(db: Session, tag_id: str) -> None:
    """Delete a tag. Its event links go with it; the events stay."""
    tag = get_tag(db, tag_id)
    if not tag:
        raise NotFound("tag", tag_id)
    db.delete(tag)
    db.commit()
    logger.info("Deleted tag %s", tag_id)


def _tags_with_counts_query(db: Session):
    event_count = func.count(event_tags.c.event_id).label("event_count")
    return (
        db.query(Tag, event_count)
        .outerjoin(event_tags, event_tags.c.tag_id == Tag.tag_id)
        .group_by(Tag.tag_id)
    ), event_count


def list_tags_with_counts(db: Session) -> list[tuple[Tag, int]]:
    query, _ = _tags_with_counts_query(db)
    return [(tag, count) for tag, count in query.order_by(Tag.name.asc()).all()]


def popular_tags(db: Session, limit: int = 10) -> list[tuple[Tag, int]]:
    """Most-used tags first; equal counts fall back to name order."""
    query, event_count = _tags_with_counts_query(db)
    rows = query.order_by(event_count.desc(), Tag.name.asc()).limit(limit).all()
    return [(tag, count) for tag, count in rows]
