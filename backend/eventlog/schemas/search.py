"""Pydantic schemas for event search and the timeline."""
from __future__ import annotations
import re
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from eventlog.models.event import EventType
from eventlog.schemas.event import EventOut, Pagination
from eventlog.time_utils import end_of_day, start_of_day, to_utc

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SearchParams(BaseModel):
    query: Optional[str] = None
    tags: Optional[list[str]] = None  # tag names or ids
    users: Optional[list[str]] = None  # creator or assignee ids
    types: Optional[list[EventType]] = None
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort_by: Literal["timestamp", "created_at", "updated_at"] = Field(default="timestamp", alias="sortBy")
    sort_order: Literal["asc", "desc"] = Field(default="desc", alias="sortOrder")

    model_config = {"populate_by_name": True}

    @field_validator("sort_by", mode="before")
    @classmethod
    def _accept_camel_sort_key(cls, value):
        return {"createdAt": "created_at", "updatedAt": "updated_at"}.get(value, value)

    @field_validator("start_date", mode="before")
    @classmethod
    def _date_only_start(cls, value):
        if isinstance(value, str) and _DATE_ONLY.match(value):
            return start_of_day(datetime.strptime(value, "%Y-%m-%d").date())
        return value

    @field_validator("end_date", mode="before")
    @classmethod
    def _date_only_end_covers_whole_day(cls, value):
        # "2024-01-31" as an upper bound means the end of that day
        if isinstance(value, str) and _DATE_ONLY.match(value):
            return end_of_day(datetime.strptime(value, "%Y-%m-%d").date())
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_utc(cls, value):
        return to_utc(value)


class MatchSpan(BaseModel):
    field: Literal["title", "content"]
    term: str
    start: int
    end: int


class SearchHit(EventOut):
    matches: list[MatchSpan] = []


class SearchPage(BaseModel):
    data: list[SearchHit]
    pagination: Pagination
