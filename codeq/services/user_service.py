"""
CodeQ Backend - User Service
============================

What:  Public profiles, leaderboard, self-service profile edits, the
       following graph, and admin role changes.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import utcnow
from codeq.exceptions import DatabaseError, PermissionDeniedError, ValidationError
from codeq.models.answer import Answer
from codeq.models.question import Question
from codeq.models.user import ROLES, Follow, User
from codeq.schemas.question import QuestionListResponse
from codeq.schemas.user import (
    FollowResponse,
    UserListResponse,
    UserProfileResponse,
    UserPublic,
    UserResponse,
    UserUpdateRequest,
)
from codeq.services.common import get_or_404, total_pages
from codeq.services.question_service import question_service

logger = logging.getLogger(__name__)


class UserService:

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> UserProfileResponse:
        user = await get_or_404(db, User, user_id, "user")
        return UserProfileResponse(
            **UserPublic.model_validate(user).model_dump(),
            questions_count=await self._count(db, Question, Question.asker_id == user.id),
            answers_count=await self._count(db, Answer, Answer.answerer_id == user.id),
            followers_count=await self._count(db, Follow, Follow.followee_id == user.id),
            following_count=await self._count(db, Follow, Follow.follower_id == user.id),
        )

    async def list_users(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        role: Optional[str] = None,
    ) -> UserListResponse:
        """Leaderboard: highest reputation first, ties broken by seniority."""
        filters = []
        if role is not None:
            if role not in ROLES:
                raise ValidationError(message=f"Unknown role '{role}'", field="role")
            filters.append(User.role == role)

        result = await db.execute(
            select(User)
            .where(*filters)
            .order_by(User.reputation.desc(), User.created_at.asc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        users = result.scalars().all()
        total = await self._count(db, User, *filters)
        return UserListResponse(
            users=[UserPublic.model_validate(u) for u in users],
            total=total,
            current_page=page,
            total_pages=total_pages(total, limit),
        )

    async def update_profile(
        self,
        db: AsyncSession,
        actor: User,
        user_id: uuid.UUID,
        request: UserUpdateRequest,
    ) -> UserResponse:
        if actor.id != user_id:
            raise PermissionDeniedError(message="Not authorized to update this profile")
        user = await get_or_404(db, User, user_id, "user")

        if request.username is not None and request.username != user.username:
            taken = await db.execute(select(User.id).where(User.username == request.username))
            if taken.scalar_one_or_none() is not None:
                raise ValidationError(message="Username already taken", field="username")
            user.username = request.username
        if request.bio is not None:
            user.bio = request.bio
        if request.title is not None:
            user.title = request.title
        if request.location is not None:
            user.location = request.location
        user.updated_at = utcnow()
        await db.flush()
        return UserResponse.model_validate(user)

    async def set_role(
        self, db: AsyncSession, admin: User, user_id: uuid.UUID, role: str
    ) -> UserPublic:
        user = await get_or_404(db, User, user_id, "user")
        if user.id == admin.id and role != user.role:
            raise ValidationError(message="Admins cannot change their own role", field="role")
        user.role = role
        user.updated_at = utcnow()
        await db.flush()
        logger.info("Role of %s set to '%s' by %s", user.username, role, admin.username)
        return UserPublic.model_validate(user)

    async def list_user_questions(
        self, db: AsyncSession, user_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> QuestionListResponse:
        await get_or_404(db, User, user_id, "user")
        return await question_service.list_questions(
            db, page=page, limit=limit, asker_id=user_id
        )

    # ── Following ─────────────────────────────────────────────────────────

    async def follow(
        self, db: AsyncSession, follower: User, user_id: uuid.UUID
    ) -> FollowResponse:
        target = await get_or_404(db, User, user_id, "user")
        if target.id == follower.id:
            raise ValidationError(message="You cannot follow yourself")

        existing = await db.get(Follow, (follower.id, target.id))
        if existing is None:
            db.add(Follow(follower_id=follower.id, followee_id=target.id))
            try:
                await db.flush()
            except IntegrityError as e:
                logger.error("Follow insert conflict %s -> %s: %s", follower.id, target.id, e)
                raise DatabaseError(
                    message="Could not follow this user. Please try again.",
                    context={"original_error": type(e).__name__},
                ) from e
            logger.info("%s now follows %s", follower.username, target.username)

        return FollowResponse(
            message=f"Following {target.username}",
            following=True,
            followers_count=await self._count(db, Follow, Follow.followee_id == target.id),
        )

    async def unfollow(
        self, db: AsyncSession, follower: User, user_id: uuid.UUID
    ) -> FollowResponse:
        target = await get_or_404(db, User, user_id, "user")
        existing = await db.get(Follow, (follower.id, target.id))
        if existing is not None:
            await db.delete(existing)
            await db.flush()
            logger.info("%s unfollowed %s", follower.username, target.username)

        return FollowResponse(
            message=f"Unfollowed {target.username}",
            following=False,
            followers_count=await self._count(db, Follow, Follow.followee_id == target.id),
        )

    async def list_followers(
        self, db: AsyncSession, user_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> UserListResponse:
        await get_or_404(db, User, user_id, "user")
        return await self._follow_page(
            db, Follow.follower_id, Follow.followee_id == user_id, page, limit
        )

    async def list_following(
        self, db: AsyncSession, user_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> UserListResponse:
        await get_or_404(db, User, user_id, "user")
        return await self._follow_page(
            db, Follow.followee_id, Follow.follower_id == user_id, page, limit
        )

    async def _follow_page(self, db, join_column, condition, page: int, limit: int):
        result = await db.execute(
            select(User)
            .join(Follow, join_column == User.id)
            .where(condition)
            .order_by(Follow.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        users = result.scalars().all()
        total = await self._count(db, Follow, condition)
        return UserListResponse(
            users=[UserPublic.model_validate(u) for u in users],
            total=total,
            current_page=page,
            total_pages=total_pages(total, limit),
        )

    async def _count(self, db: AsyncSession, model, *conditions) -> int:
        result = await db.execute(select(func.count()).select_from(model).where(*conditions))
        return result.scalar() or 0


user_service = UserService()
