"""
CodeQ Backend - User Routes
===========================

What:  /api/users: reputation leaderboard, public profiles, a user's
       questions and answers, follow/unfollow, and admin role changes.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.config import settings
from codeq.database import get_db_session
from codeq.dependencies import get_current_user, require_roles
from codeq.models.user import ROLE_ADMIN, User
from codeq.schemas.common import ErrorResponse
from codeq.schemas.question import AnswerListResponse, QuestionListResponse
from codeq.schemas.user import (
    FollowResponse,
    RoleUpdateRequest,
    UserListResponse,
    UserProfileResponse,
    UserPublic,
    UserResponse,
    UserUpdateRequest,
)
from codeq.services.answer_service import answer_service
from codeq.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])

NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}


@router.get("", response_model=UserListResponse, summary="Reputation leaderboard")
async def list_users(
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    role: Optional[str] = Query(default=None, description="user, expert or admin"),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    result = await user_service.list_users(db, page=page, limit=limit, role=role)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get("/{user_id}", response_model=UserProfileResponse, responses=NOT_FOUND)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileResponse:
    return await user_service.get_profile(db, user_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={**NOT_FOUND, 403: {"description": "Not your profile", "model": ErrorResponse}},
    summary="Edit your own profile",
)
async def update_user(
    user_id: uuid.UUID,
    request: UserUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_profile(db, user, user_id, request)


@router.get("/{user_id}/questions", response_model=QuestionListResponse, responses=NOT_FOUND)
async def list_user_questions(
    user_id: uuid.UUID,
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    result = await user_service.list_user_questions(db, user_id, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get("/{user_id}/answers", response_model=AnswerListResponse, responses=NOT_FOUND)
async def list_user_answers(
    user_id: uuid.UUID,
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerListResponse:
    result = await answer_service.list_user_answers(db, user_id, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(result.total)
    return result


# ── Following ─────────────────────────────────────────────────────────────


@router.post(
    "/{user_id}/follow",
    response_model=FollowResponse,
    responses={**NOT_FOUND, 400: {"description": "Following yourself", "model": ErrorResponse}},
)
async def follow_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResponse:
    return await user_service.follow(db, user, user_id)


@router.delete("/{user_id}/follow", response_model=FollowResponse, responses=NOT_FOUND)
async def unfollow_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResponse:
    return await user_service.unfollow(db, user, user_id)


@router.get("/{user_id}/followers", response_model=UserListResponse, responses=NOT_FOUND)
async def list_followers(
    user_id: uuid.UUID,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return await user_service.list_followers(db, user_id, page=page, limit=limit)


@router.get("/{user_id}/following", response_model=UserListResponse, responses=NOT_FOUND)
async def list_following(
    user_id: uuid.UUID,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return await user_service.list_following(db, user_id, page=page, limit=limit)


@router.put(
    "/{user_id}/role",
    response_model=UserPublic,
    responses={**NOT_FOUND, 403: {"description": "Admin only", "model": ErrorResponse}},
    summary="Change a user's role (admin)",
)
async def set_role(
    user_id: uuid.UUID,
    request: RoleUpdateRequest,
    admin: User = Depends(require_roles(ROLE_ADMIN)),
    db: AsyncSession = Depends(get_db_session),
) -> UserPublic:
    return await user_service.set_role(db, admin, user_id, request.role)
