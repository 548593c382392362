"""
CodeQ Backend - Auth Service
============================

What:  Registration, login, and token issuing.
Who:   Called by codeq.routes.auth.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.exceptions import AuthenticationError, ValidationError
from codeq.models.user import ROLE_USER, User
from codeq.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from codeq.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:

    async def register(self, db: AsyncSession, request: RegisterRequest) -> TokenResponse:
        """
        Create an account and sign the caller in.

        Raises:
            ValidationError: username or email already in use (→ 400)
        """
        if await self._find_by_username(db, request.username) is not None:
            raise ValidationError(message="Username already taken", field="username")
        if await self._find_by_email(db, request.email) is not None:
            raise ValidationError(message="Email already registered", field="email")

        user = User(
            username=request.username,
            email=request.email,
            password_hash=hash_password(request.password),
            bio=request.bio,
            title=request.title,
            location=request.location,
            role=ROLE_USER,
        )
        db.add(user)
        await db.flush()
        logger.info("Registered user %s (%s)", user.username, user.id)
        return self.token_for(user)

    async def login(self, db: AsyncSession, request: LoginRequest) -> TokenResponse:
        user = await self._find_by_email(db, request.email)
        # Same message for unknown email and wrong password
        if user is None or not verify_password(request.password, user.password_hash):
            raise AuthenticationError(message="Invalid email or password")
        logger.info("User %s logged in", user.username)
        return self.token_for(user)

    def token_for(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(user.id, user.role),
            user=UserResponse.model_validate(user),
        )

    async def _find_by_username(self, db: AsyncSession, username: str):
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()


auth_service = AuthService()
