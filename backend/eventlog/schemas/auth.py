"""Pydantic schemas for registration, login and token claims."""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from eventlog.schemas.user import UserOut


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    user: UserOut
    token: str
    expires_in: int  # seconds


class TokenPayload(BaseModel):
    sub: str  # user id
    username: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    exp: int
