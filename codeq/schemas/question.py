"""
CodeQ Backend - Question, Answer & Comment Schemas
==================================================

What:  API contract for the content side of the platform.
How:   Services build the response models explicitly (tags, counts and
       nested comments don't live on the ORM objects).

Shapes:
    QuestionListItem       one row of GET /api/questions
    QuestionDetailResponse GET /api/questions/{id}: question + answers
                           (each with comments) + question comments
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from codeq.models.question import MAX_TAG_LENGTH, MAX_TAGS
from codeq.schemas.user import UserSummary


def normalize_tags(tags: List[str]) -> List[str]:
    """
    Trim, lower-case and de-duplicate tags, keeping first-seen order.

    >>> normalize_tags([" Python", "fastapi", "python", ""])
    ['python', 'fastapi']
    """
    seen: List[str] = []
    for raw in tags:
        tag = raw.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    if len(seen) > MAX_TAGS:
        raise ValueError(f"A question can have at most {MAX_TAGS} tags")
    for tag in seen:
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tag '{tag[:20]}...' exceeds {MAX_TAG_LENGTH} characters")
    return seen


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class QuestionCreateRequest(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    body: str = Field(min_length=10)
    tags: List[str] = Field(default_factory=list)

    model_config = {"str_strip_whitespace": True}

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class QuestionUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    body: Optional[str] = Field(default=None, min_length=10)
    tags: Optional[List[str]] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(v) if v is not None else v


class PinRequest(BaseModel):
    is_pinned: bool


class LockRequest(BaseModel):
    is_locked: bool


class AnswerCreateRequest(BaseModel):
    body: str = Field(min_length=1)

    model_config = {"str_strip_whitespace": True}


class AnswerUpdateRequest(AnswerCreateRequest):
    pass


class CommentCreateRequest(BaseModel):
    body: str = Field(min_length=1, max_length=1000)
    # Checked by CommentService so the error reads "Invalid target type"
    target_type: str
    target_id: uuid.UUID

    model_config = {"str_strip_whitespace": True}


class CommentUpdateRequest(BaseModel):
    body: str = Field(min_length=1, max_length=1000)

    model_config = {"str_strip_whitespace": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CommentResponse(BaseModel):
    id: uuid.UUID
    body: str
    author: UserSummary
    target_type: str
    target_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AnswerResponse(BaseModel):
    id: uuid.UUID
    question_id: uuid.UUID
    body: str
    answerer: UserSummary
    votes: int
    is_accepted: bool
    is_verified: bool
    verified_by_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    comments: List[CommentResponse] = Field(default_factory=list)
    # Only filled on GET /api/users/{id}/answers
    question_title: Optional[str] = None


class AnswerListResponse(BaseModel):
    answers: List[AnswerResponse]
    total: int
    current_page: int
    total_pages: int


class QuestionListItem(BaseModel):
    id: uuid.UUID
    title: str
    body: str
    asker: UserSummary
    tags: List[str]
    votes: int
    views: int
    answer_count: int
    accepted_answer_id: Optional[uuid.UUID] = None
    is_pinned: bool
    is_locked: bool
    created_at: datetime
    updated_at: datetime


class QuestionListResponse(BaseModel):
    questions: List[QuestionListItem]
    total: int = Field(description="Questions matching the filters")
    current_page: int
    total_pages: int


class QuestionDetailResponse(QuestionListItem):
    answers: List[AnswerResponse]
    comments: List[CommentResponse]
