"""
CodeQ Backend - Auth Dependencies
=================================

What:  FastAPI dependencies resolving the bearer token to a User row.

Usage:
    @router.post("/questions")
    async def create(user: User = Depends(get_current_user)): ...

    @router.put("/questions/{id}/pin")
    async def pin(user: User = Depends(require_roles(ROLE_ADMIN))): ...

    @router.get("/questions/{id}")
    async def detail(user: Optional[User] = Depends(get_optional_user)): ...
"""

import logging
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import get_db_session
from codeq.exceptions import AuthenticationError, PermissionDeniedError
from codeq.models.user import User
from codeq.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header becomes our AuthenticationError (401)
# rather than FastAPI's bare 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def _load_user(db: AsyncSession, token: str) -> User:
    user_id = decode_access_token(token)
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError(message="User for this token no longer exists")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Requires a valid bearer token; 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Not authenticated")
    return await _load_user(db, credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """
    Signed-in user or None for anonymous callers.

    A token that is present but invalid is still rejected with 401, so a
    client with a stale token finds out instead of silently browsing
    anonymously.
    """
    if credentials is None or not credentials.credentials:
        return None
    return await _load_user(db, credentials.credentials)


def require_roles(*roles: str) -> Callable:
    """Dependency factory: current user must hold one of `roles` (403 otherwise)."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.info(
                "Role check failed for %s: has '%s', needs one of %s",
                user.username, user.role, roles,
            )
            raise PermissionDeniedError(
                message=f"This action requires one of the roles: {', '.join(roles)}"
            )
        return user

    return dependency
