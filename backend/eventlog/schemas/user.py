"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr
    display_name: str = Field(min_length=1, max_length=100, alias="displayName")
    password: str = Field(min_length=8)

    model_config = {"populate_by_name": True}


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = None
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100, alias="displayName")
    password: Optional[str] = Field(default=None, min_length=8)

    model_config = {"populate_by_name": True}


class UserOut(BaseModel):
    """Public profile, never carries the credential hash."""

    user_id: str
    username: str
    email: str
    display_name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
