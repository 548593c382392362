"""
CodeQ Backend - Answer Routes
=============================

What:  /api/answers/{id}: read, edit, delete, accept/un-accept and
       expert verification. Creating an answer lives under
       /api/questions/{id}/answers.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import get_db_session
from codeq.dependencies import get_current_user, require_roles
from codeq.models.user import ROLE_ADMIN, ROLE_EXPERT, User
from codeq.schemas.common import ErrorResponse, MessageResponse
from codeq.schemas.question import AnswerResponse, AnswerUpdateRequest
from codeq.services.answer_service import answer_service

router = APIRouter(prefix="/api/answers", tags=["Answers"])

ERRORS = {
    403: {"description": "Not allowed", "model": ErrorResponse},
    404: {"description": "Answer not found", "model": ErrorResponse},
}


@router.get("/{answer_id}", response_model=AnswerResponse, responses=ERRORS)
async def get_answer(
    answer_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.get_answer(db, answer_id)


@router.put(
    "/{answer_id}",
    response_model=AnswerResponse,
    responses=ERRORS,
    summary="Edit an answer (answerer or admin)",
)
async def update_answer(
    answer_id: uuid.UUID,
    request: AnswerUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.update_answer(db, user, answer_id, request)


@router.delete(
    "/{answer_id}",
    response_model=MessageResponse,
    responses=ERRORS,
    summary="Delete an answer (answerer or admin)",
)
async def delete_answer(
    answer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await answer_service.delete_answer(db, user, answer_id)
    return MessageResponse(message="Answer deleted")


@router.put(
    "/{answer_id}/accept",
    response_model=AnswerResponse,
    responses=ERRORS,
    summary="Mark as the accepted answer (question asker)",
)
async def accept_answer(
    answer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    """Replaces any previously accepted answer; reputation follows the accept."""
    return await answer_service.accept_answer(db, user, answer_id)


@router.delete(
    "/{answer_id}/accept",
    response_model=AnswerResponse,
    responses={**ERRORS, 400: {"description": "Answer is not accepted", "model": ErrorResponse}},
    summary="Withdraw the accept (question asker)",
)
async def unaccept_answer(
    answer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.unaccept_answer(db, user, answer_id)


@router.put(
    "/{answer_id}/verify",
    response_model=AnswerResponse,
    responses=ERRORS,
    summary="Mark as expert-verified (expert or admin)",
)
async def verify_answer(
    answer_id: uuid.UUID,
    user: User = Depends(require_roles(ROLE_EXPERT, ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.set_verified(db, user, answer_id, verified=True)


@router.delete(
    "/{answer_id}/verify",
    response_model=AnswerResponse,
    responses=ERRORS,
    summary="Remove expert verification (expert or admin)",
)
async def unverify_answer(
    answer_id: uuid.UUID,
    user: User = Depends(require_roles(ROLE_EXPERT, ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    return await answer_service.set_verified(db, user, answer_id, verified=False)
