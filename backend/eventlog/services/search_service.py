"""Search and timeline queries over events. Never writes."""
import logging
import re
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from eventlog.models.event import Event, event_assignments, event_tags
from eventlog.models.tag import Tag
from eventlog.schemas.search import MatchSpan, SearchHit, SearchParams
from eventlog.services.event_service import paginate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "timestamp": Event.timestamp,
    "created_at": Event.created_at,
    "updated_at": Event.updated_at,
}


def split_terms(query: str | None) -> list[str]:
    if not query:
        return []
    return list(dict.fromkeys(query.split()))


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def find_matches(event: Event, terms: list[str]) -> list[MatchSpan]:
    """Case-insensitive occurrences of each term in title and content."""
    spans = []
    for field in ("title", "content"):
        text = getattr(event, field) or ""
        for term in terms:
            for match in re.finditer(re.escape(term), text, re.IGNORECASE):
                spans.append(MatchSpan(field=field, term=term, start=match.start(), end=match.end()))
    spans.sort(key=lambda span: (span.field != "title", span.start))
    return spans


def build_query(db: Session, params: SearchParams):
    """Compose the filters; every supplied criterion must hold."""
    query = db.query(Event)

    sqlite = db.get_bind().dialect.name == "sqlite"
    for term in split_terms(params.query):
        if sqlite:
            # casefold() is registered per connection in database.configure_sqlite
            pattern = _like(term.casefold())
            query = query.filter(or_(
                func.casefold(Event.title).like(pattern, escape="\\"),
                func.casefold(Event.content).like(pattern, escape="\\"),
            ))
        else:
            pattern = _like(term)
            query = query.filter(or_(
                Event.title.ilike(pattern, escape="\\"),
                Event.content.ilike(pattern, escape="\\"),
            ))

    if params.tags:
        tagged = (
            select(event_tags.c.event_id)
            .join(Tag, Tag.tag_id == event_tags.c.tag_id)
            .where(or_(Tag.name.in_(params.tags), Tag.tag_id.in_(params.tags)))
        )
        query = query.filter(Event.event_id.in_(tagged))

    if params.users:
        assigned = select(event_assignments.c.event_id).where(event_assignments.c.user_id.in_(params.users))
        query = query.filter(or_(Event.creator_id.in_(params.users), Event.event_id.in_(assigned)))

    if params.types:
        query = query.filter(Event.event_type.in_(params.types))

    if params.start_date:
        query = query.filter(Event.timestamp >= params.start_date)
    if params.end_date:
        query = query.filter(Event.timestamp <= params.end_date)

    return query


def search_events(db: Session, params: SearchParams) -> dict[str, Any]:
    column = SORT_COLUMNS[params.sort_by]
    if params.sort_order == "asc":
        order_by = [column.asc(), Event.event_id.asc()]
    else:
        order_by = [column.desc(), Event.event_id.desc()]

    result = paginate(build_query(db, params), params.page, params.limit, order_by)

    terms = split_terms(params.query)
    hits = []
    for event in result["data"]:
        hit = SearchHit.model_validate(event)
        hit.matches = find_matches(event, terms)
        hits.append(hit)
    result["data"] = hits

    logger.info(
        "Search query=%r tags=%s users=%s types=%s -> %d result(s)",
        params.query, params.tags, params.users, params.types, result["pagination"]["total"],
    )
    return result


def timeline(db: Session, page: int = 1, limit: int = 20, sort_order: str = "desc") -> dict[str, Any]:
    """Unfiltered chronological view."""
    return search_events(db, SearchParams(page=page, limit=limit, sort_order=sort_order))
