"""Search and timeline routes."""
import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from eventlog.database import get_db
from eventlog.errors import ValidationFailed
from eventlog.schemas.search import SearchPage, SearchParams
from eventlog.services import search_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/events", response_model=SearchPage)
def search_events_body(params: SearchParams, db: Session = Depends(get_db)):
    """Search with a JSON body."""
    return search_service.search_events(db, params)


@router.get("/events", response_model=SearchPage)
def search_events(
    query: Optional[str] = Query(None),
    tags: Optional[list[str]] = Query(None),
    users: Optional[list[str]] = Query(None),
    types: Optional[list[str]] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    page: int = Query(1),
    limit: int = Query(20),
    sort_by: str = Query("timestamp", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db),
):
    """Search with query-string filters; list filters repeat (``?types=email&types=text``)."""
    try:
        params = SearchParams(
            query=query, tags=tags, users=users, types=types,
            start_date=start_date, end_date=end_date,
            page=page, limit=limit, sort_by=sort_by, sort_order=sort_order,
        )
    except ValidationError as exc:
        raise ValidationFailed(
            "Invalid search parameters",
            details=exc.errors(include_url=False, include_context=False),
        ) from exc
    return search_service.search_events(db, params)


@router.get("/timeline", response_model=SearchPage)
def timeline(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db),
):
    """All events in chronological order."""
    return search_service.timeline(db, page=page, limit=limit, sort_order=sort_order)
