"""
CodeQ Backend - Auth Routes
===========================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import get_db_session
from codeq.dependencies import get_current_user
from codeq.models.user import User
from codeq.schemas.common import ErrorResponse
from codeq.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from codeq.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid input or duplicate user", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    """Creates a `user`-role account and returns a bearer token for it."""
    return await auth_service.register(db, request)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Exchange email and password for a bearer token",
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.login(db, request)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="The signed-in user",
)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)
