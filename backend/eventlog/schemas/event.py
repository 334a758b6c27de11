"""Pydantic schemas for Events, their attachments and edit history."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, Field

from eventlog.models.event import EventType
from eventlog.schemas.tag import TagOut
from eventlog.schemas.user import UserOut


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    type: EventType
    timestamp: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None
    assigned_user_ids: list[str] = Field(default_factory=list, alias="assignedUserIds")
    tag_ids: list[str] = Field(default_factory=list, alias="tagIds")

    model_config = {"populate_by_name": True}


class EventUpdate(BaseModel):
    """All fields optional. An omitted relationship list means "leave as is",
    an empty one means "clear"."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    type: Optional[EventType] = None
    timestamp: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None
    assigned_user_ids: Optional[list[str]] = Field(default=None, alias="assignedUserIds")
    tag_ids: Optional[list[str]] = Field(default=None, alias="tagIds")

    model_config = {"populate_by_name": True}


class AttachmentCreate(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    original_name: str = Field(min_length=1, max_length=255, alias="originalName")
    mime_type: str = Field(min_length=1, max_length=127, alias="mimeType")
    size: int = Field(gt=0)
    path: str = Field(min_length=1, max_length=1024)

    model_config = {"populate_by_name": True}


class AttachmentOut(BaseModel):
    attachment_id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    path: str
    event_id: str
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class EditHistoryOut(BaseModel):
    history_id: str
    event_id: str
    changes: dict[str, Any]
    edited_by: Optional[str] = None
    edited_at: datetime

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    title: str
    content: str
    type: EventType = Field(validation_alias=AliasChoices("event_type", "type"))
    timestamp: datetime
    metadata: Optional[dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("event_metadata", "metadata"),
    )
    creator_id: str
    created_at: datetime
    updated_at: datetime
    creator: Optional[UserOut] = None
    assigned_users: list[UserOut] = []
    tags: list[TagOut] = []
    attachments: list[AttachmentOut] = []

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class EventPage(BaseModel):
    data: list[EventOut]
    pagination: Pagination


class TypeCount(BaseModel):
    type: EventType
    count: int


class EventStats(BaseModel):
    total_events: int
    events_by_type: list[TypeCount]
    recent_events: int
