"""
CodeQ Backend - Comment Service
===============================

What:  Comments on questions and answers.
How:   `target_type` selects which table `target_id` is looked up in. A
       comment belongs to a locked thread when its question (or its
       answer's question) is locked; only admins may comment there.
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import utcnow
from codeq.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from codeq.models.answer import Answer
from codeq.models.comment import TARGET_ANSWER, TARGET_QUESTION, TARGET_TYPES, Comment
from codeq.models.question import Question
from codeq.models.user import User
from codeq.schemas.question import (
    CommentCreateRequest,
    CommentResponse,
    CommentUpdateRequest,
)
from codeq.services.common import comment_response, ensure_owner_or_admin, get_or_404

logger = logging.getLogger(__name__)


class CommentService:

    async def create_comment(
        self, db: AsyncSession, author: User, request: CommentCreateRequest
    ) -> CommentResponse:
        if request.target_type not in TARGET_TYPES:
            raise ValidationError(message="Invalid target type", field="target_type")

        question = await self._thread_question(db, request.target_type, request.target_id)
        if question.is_locked and not author.is_admin:
            raise PermissionDeniedError(message="This question is locked")

        comment = Comment(
            body=request.body,
            author=author,
            target_type=request.target_type,
            target_id=request.target_id,
        )
        db.add(comment)
        await db.flush()
        logger.info(
            "Comment %s added to %s %s by %s",
            comment.id, request.target_type, request.target_id, author.username,
        )
        return comment_response(comment)

    async def list_comments(
        self, db: AsyncSession, target_type: str, target_id: uuid.UUID
    ) -> List[CommentResponse]:
        if target_type not in TARGET_TYPES:
            raise ValidationError(message="Invalid target type", field="target_type")
        result = await db.execute(
            select(Comment)
            .where(Comment.target_type == target_type, Comment.target_id == target_id)
            .order_by(Comment.created_at.asc())
        )
        return [comment_response(c) for c in result.scalars().all()]

    async def update_comment(
        self,
        db: AsyncSession,
        user: User,
        comment_id: uuid.UUID,
        request: CommentUpdateRequest,
    ) -> CommentResponse:
        comment = await get_or_404(db, Comment, comment_id, "comment")
        if comment.author_id != user.id:
            raise PermissionDeniedError(message="Not authorized to update this comment")
        comment.body = request.body
        comment.updated_at = utcnow()
        await db.flush()
        return comment_response(comment)

    async def delete_comment(self, db: AsyncSession, user: User, comment_id: uuid.UUID) -> None:
        comment = await get_or_404(db, Comment, comment_id, "comment")
        ensure_owner_or_admin(user, comment.author_id, "Not authorized to delete this comment")
        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by %s", comment_id, user.username)

    async def _thread_question(
        self, db: AsyncSession, target_type: str, target_id: uuid.UUID
    ) -> Question:
        """The question a comment target lives under (404 if the target is gone)."""
        if target_type == TARGET_QUESTION:
            return await get_or_404(db, Question, target_id, TARGET_QUESTION)

        answer = await db.get(Answer, target_id)
        if answer is None:
            raise NotFoundError(resource=TARGET_ANSWER, resource_id=str(target_id))
        return await get_or_404(db, Question, answer.question_id, TARGET_QUESTION)


comment_service = CommentService()
