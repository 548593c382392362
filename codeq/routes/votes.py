"""
CodeQ Backend - Vote Routes
===========================

What:  POST /api/votes casts, switches or withdraws the caller's vote;
       GET /api/votes/{target_type}/{target_id} reports it.

Status codes for POST:
    201  a new vote was recorded
    200  an existing vote was removed (same value again) or switched
"""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import get_db_session
from codeq.dependencies import get_current_user
from codeq.models.user import User
from codeq.schemas.common import ErrorResponse
from codeq.schemas.vote import VoteRequest, VoteResponse, VoteStatusResponse
from codeq.services.vote_service import vote_service

router = APIRouter(prefix="/api/votes", tags=["Votes"])


@router.post(
    "",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"description": "Vote removed or switched", "model": VoteResponse},
        400: {"description": "Invalid target type or value", "model": ErrorResponse},
        403: {"description": "Voting on your own post", "model": ErrorResponse},
        404: {"description": "Target not found", "model": ErrorResponse},
    },
    summary="Vote on a question or answer",
)
async def cast_vote(
    request: VoteRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> VoteResponse:
    result, created = await vote_service.cast_vote(db, user, request)
    if not created:
        response.status_code = status.HTTP_200_OK
    return result


@router.get(
    "/{target_type}/{target_id}",
    response_model=VoteStatusResponse,
    responses={400: {"description": "Invalid target type", "model": ErrorResponse}},
    summary="The caller's vote on a target",
)
async def get_vote_status(
    target_type: str,
    target_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> VoteStatusResponse:
    return await vote_service.get_vote_status(db, user, target_type, target_id)
