"""
CodeQ Backend - Question Routes
===============================

What:  /api/questions: listing and search, detail, create/update/delete,
       admin pin/lock, and the nested answer collection.
Who:   Called by the frontend home page, question page and ask form.

Listing query parameters:
    page    1-based page number
    limit   page size, 1..MAX_PAGE_SIZE
    search  case-insensitive substring of title or body
    tags    comma separated, matches questions carrying ANY of them
    sort    newest | oldest | votes | views | unanswered

The total match count is returned both in the body and in X-Total-Count.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.config import settings
from codeq.database import get_db_session
from codeq.dependencies import get_current_user, get_optional_user, require_roles
from codeq.models.user import ROLE_ADMIN, User
from codeq.schemas.common import ErrorResponse, MessageResponse
from codeq.schemas.question import (
    AnswerCreateRequest,
    AnswerResponse,
    LockRequest,
    PinRequest,
    QuestionCreateRequest,
    QuestionDetailResponse,
    QuestionListItem,
    QuestionListResponse,
    QuestionUpdateRequest,
)
from codeq.services.answer_service import answer_service
from codeq.services.question_service import question_service

router = APIRouter(prefix="/api/questions", tags=["Questions"])

NOT_FOUND = {404: {"description": "Question not found", "model": ErrorResponse}}
FORBIDDEN = {403: {"description": "Not allowed", "model": ErrorResponse}}


def parse_tags(tags: Optional[str]) -> List[str]:
    """'Python, fastapi,,' → ['python', 'fastapi']"""
    if not tags:
        return []
    return [t.strip().lower() for t in tags.split(",") if t.strip()]


@router.get(
    "",
    response_model=QuestionListResponse,
    responses={400: {"description": "Invalid sort", "model": ErrorResponse}},
    summary="List and search questions",
)
async def list_questions(
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(default=None, max_length=200),
    tags: Optional[str] = Query(default=None, description="Comma-separated tag list"),
    sort: str = Query(default="newest"),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    result = await question_service.list_questions(
        db,
        page=page,
        limit=limit,
        search=search,
        tags=parse_tags(tags),
        sort=sort,
    )
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.post(
    "",
    response_model=QuestionListItem,
    status_code=status.HTTP_201_CREATED,
    summary="Ask a question",
)
async def create_question(
    request: QuestionCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListItem:
    return await question_service.create_question(db, user, request)


@router.get(
    "/{question_id}",
    response_model=QuestionDetailResponse,
    responses=NOT_FOUND,
    summary="Question with answers and comments",
)
async def get_question(
    question_id: uuid.UUID,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionDetailResponse:
    """
    Signed-in callers are counted as viewers once per question; anonymous
    requests never move the view counter.
    """
    return await question_service.get_question(db, question_id, viewer=user)


@router.put(
    "/{question_id}",
    response_model=QuestionListItem,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Edit a question (asker or admin)",
)
async def update_question(
    question_id: uuid.UUID,
    request: QuestionUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListItem:
    return await question_service.update_question(db, user, question_id, request)


@router.delete(
    "/{question_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Delete a question and everything under it",
)
async def delete_question(
    question_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await question_service.delete_question(db, user, question_id)
    return MessageResponse(message="Question deleted")


@router.put(
    "/{question_id}/pin",
    response_model=QuestionListItem,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Pin or unpin a question (admin)",
)
async def pin_question(
    question_id: uuid.UUID,
    request: PinRequest,
    user: User = Depends(require_roles(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListItem:
    return await question_service.set_pinned(db, question_id, request.is_pinned)


@router.put(
    "/{question_id}/lock",
    response_model=QuestionListItem,
    responses={**NOT_FOUND, **FORBIDDEN},
    summary="Lock or unlock a question (admin)",
)
async def lock_question(
    question_id: uuid.UUID,
    request: LockRequest,
    user: User = Depends(require_roles(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListItem:
    return await question_service.set_locked(db, question_id, request.is_locked)


# ── Nested answers ────────────────────────────────────────────────────────


@router.get(
    "/{question_id}/answers",
    response_model=List[AnswerResponse],
    responses=NOT_FOUND,
    summary="Answers to a question",
)
async def list_answers(
    question_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[AnswerResponse]:
    return await answer_service.list_for_question(db, question_id)


@router.post(
    "/{question_id}/answers",
    response_model=AnswerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, 403: {"description": "Question is locked", "model": ErrorResponse}},
    summary="Answer a question",
)
async def create_answer(
    question_id: uuid.UUID,
    request: AnswerCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.create_answer(db, user, question_id, request)
