"""Pydantic schemas for Tags."""
from datetime import datetime
from typing import Annotated, Optional
from pydantic import BaseModel, Field

TAG_NAME_PATTERN = r"^[a-zA-Z0-9\s\-_]+$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

TagName = Annotated[str, Field(min_length=1, max_length=50, pattern=TAG_NAME_PATTERN)]


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50, pattern=TAG_NAME_PATTERN)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50, pattern=TAG_NAME_PATTERN)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class TagBatchCreate(BaseModel):
    names: list[TagName] = Field(min_length=1)


class TagOut(BaseModel):
    tag_id: str
    name: str
    color: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TagWithCount(TagOut):
    event_count: int
