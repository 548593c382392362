"""
CodeQ Backend - Comment Routes
==============================

What:  /api/comments: short remarks attached to a question or an answer.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import get_db_session
from codeq.dependencies import get_current_user
from codeq.models.user import User
from codeq.schemas.common import ErrorResponse, MessageResponse
from codeq.schemas.question import (
    CommentCreateRequest,
    CommentResponse,
    CommentUpdateRequest,
)
from codeq.services.comment_service import comment_service

router = APIRouter(prefix="/api/comments", tags=["Comments"])

ERRORS = {
    400: {"description": "Invalid target type or body", "model": ErrorResponse},
    403: {"description": "Not allowed or thread locked", "model": ErrorResponse},
    404: {"description": "Comment or target not found", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
    summary="Comment on a question or answer",
)
async def create_comment(
    request: CommentCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(db, user, request)


@router.get(
    "",
    response_model=List[CommentResponse],
    responses=ERRORS,
    summary="Comments on one target, oldest first",
)
async def list_comments(
    target_type: str = Query(description="question or answer"),
    target_id: uuid.UUID = Query(),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await comment_service.list_comments(db, target_type, target_id)


@router.put("/{comment_id}", response_model=CommentResponse, responses=ERRORS)
async def update_comment(
    comment_id: uuid.UUID,
    request: CommentUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(db, user, comment_id, request)


@router.delete("/{comment_id}", response_model=MessageResponse, responses=ERRORS)
async def delete_comment(
    comment_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await comment_service.delete_comment(db, user, comment_id)
    return MessageResponse(message="Comment deleted")
