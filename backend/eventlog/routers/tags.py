"""Tag API routes."""
import logging
from typing import Union
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventlog.database import get_db
from eventlog.errors import NotFound
from eventlog.schemas.tag import TagBatchCreate, TagCreate, TagOut, TagUpdate, TagWithCount
from eventlog.services import tag_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _with_count(rows) -> list[TagWithCount]:
    return [
        TagWithCount(**TagOut.model_validate(tag).model_dump(), event_count=count)
        for tag, count in rows
    ]


@router.get("/", response_model=Union[list[TagWithCount], list[TagOut]])
def list_tags(
    with_count: bool = Query(False),
    popular: bool = Query(False),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """List tags by name; ``popular`` ranks by usage, ``with_count`` adds usage counts."""
    if popular:
        return _with_count(tag_service.popular_tags(db, limit=limit))
    if with_count:
        return _with_count(tag_service.list_tags_with_counts(db))
    return tag_service.list_tags(db)


@router.post("/", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(payload: TagCreate, db: Session = Depends(get_db)):
    return tag_service.create_tag(db, name=payload.name, color=payload.color)


@router.post("/batch", response_model=list[TagOut])
def create_tags(payload: TagBatchCreate, db: Session = Depends(get_db)):
    """Return a tag for every name, creating only the missing ones."""
    return tag_service.create_multiple(db, payload.names)


@router.get("/{tag_id}", response_model=TagOut)
def get_tag(tag_id: str, db: Session = Depends(get_db)):
    tag = tag_service.get_tag(db, tag_id)
    if not tag:
        raise NotFound("tag", tag_id)
    return tag


@router.put("/{tag_id}", response_model=TagOut)
def update_tag(tag_id: str, payload: TagUpdate, db: Session = Depends(get_db)):
    return tag_service.update_tag(db, tag_id, name=payload.name, color=payload.color)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: str, db: Session = Depends(get_db)):
    tag_service.delete_tag(db, tag_id)
