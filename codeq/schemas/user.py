"""
CodeQ Backend - User & Auth Schemas
===================================

What:  Request bodies for registration, login and profile edits, and the
       user representations returned by the API.

Three levels of user detail:
    UserSummary   embedded in every question/answer/comment (author chip)
    UserPublic    what anyone may see about a user
    UserResponse  UserPublic + email, only ever returned to the user themself
"""

import re
import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_username(value: str) -> str:
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username may only contain letters, digits, '_', '.' and '-'")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(min_length=6, max_length=72)
    bio: str = Field(default="", max_length=2000)
    title: str = Field(default="", max_length=100)
    location: str = Field(default="", max_length=100)

    model_config = {"str_strip_whitespace": True}

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""
    username: Optional[str] = Field(default=None, min_length=3, max_length=30)
    bio: Optional[str] = Field(default=None, max_length=2000)
    title: Optional[str] = Field(default=None, max_length=100)
    location: Optional[str] = Field(default=None, max_length=100)

    model_config = {"str_strip_whitespace": True}

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return _check_username(v) if v is not None else v


class RoleUpdateRequest(BaseModel):
    role: Literal["user", "expert", "admin"]


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(BaseModel):
    id: uuid.UUID
    username: str
    reputation: int
    role: str

    model_config = {"from_attributes": True}


class UserPublic(UserSummary):
    bio: str
    title: str
    location: str
    created_at: datetime


class UserResponse(UserPublic):
    email: str


class UserProfileResponse(UserPublic):
    questions_count: int = Field(description="Questions asked by this user")
    answers_count: int = Field(description="Answers posted by this user")
    followers_count: int
    following_count: int


class UserListResponse(BaseModel):
    users: List[UserPublic]
    total: int
    current_page: int
    total_pages: int


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class FollowResponse(BaseModel):
    message: str
    following: bool = Field(description="Whether the caller now follows the user")
    followers_count: int
