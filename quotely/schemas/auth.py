"""
Quotely API — Auth & Profile Schemas
=====================================

UserOut is the caller's own account (includes email); ProfileOut is the
public view served to anyone (no email). Neither ever carries password_hash.
"""

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Shape check only; deliverability is not verified
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("must be a valid email address")
    return value


class SignupRequest(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=120)
    username: Optional[str] = Field(default=None, min_length=1, max_length=60)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)


class LoginRequest(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(min_length=1, max_length=128)


class ProfileUpdateRequest(BaseModel):
    """Only these fields are writable; anything else in the body is ignored."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    username: Optional[str] = Field(default=None, min_length=1, max_length=60)
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=2000)


class ProfileOut(BaseModel):
    id: uuid.UUID
    name: str
    username: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime


class UserOut(ProfileOut):
    email: str


class AuthResponse(BaseModel):
    success: bool = True
    user: UserOut
    token: str = Field(description="Bearer token for the Authorization header")


class UserResponse(BaseModel):
    success: bool = True
    user: UserOut


class ProfileResponse(BaseModel):
    success: bool = True
    profile: ProfileOut


class OwnProfileResponse(BaseModel):
    success: bool = True
    profile: UserOut
