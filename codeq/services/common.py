"""
CodeQ Backend - Shared Service Helpers
======================================

What:  Small building blocks the content services share: ownership checks,
       reputation increments, response builders, and the comment/vote
       cleanup every cascade delete needs.
"""

import logging
import math
import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.exceptions import NotFoundError, PermissionDeniedError
from codeq.models.answer import Answer
from codeq.models.comment import Comment
from codeq.models.user import User
from codeq.models.vote import Vote
from codeq.schemas.question import AnswerResponse, CommentResponse
from codeq.schemas.user import UserSummary

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


async def get_or_404(
    db: AsyncSession, model: Type[ModelT], object_id: uuid.UUID, resource: str
) -> ModelT:
    """Primary-key lookup that raises NotFoundError instead of returning None."""
    obj = await db.get(model, object_id)
    if obj is None:
        raise NotFoundError(resource=resource, resource_id=str(object_id))
    return obj


def ensure_owner_or_admin(user: User, owner_id: uuid.UUID, message: str) -> None:
    if user.id != owner_id and not user.is_admin:
        raise PermissionDeniedError(message=message)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


async def adjust_reputation(db: AsyncSession, user_id: uuid.UUID, delta: int) -> None:
    """
    reputation = reputation + delta, as one UPDATE statement.

    The ORM's default synchronize strategy also patches a User already
    loaded in this session, so the response sees the new value.
    """
    if delta == 0:
        return
    await db.execute(
        update(User).where(User.id == user_id).values(reputation=User.reputation + delta)
    )
    logger.debug("Reputation of %s changed by %+d", user_id, delta)


# ══════════════════════════════════════════════════════════════════════════
# Response builders
# ══════════════════════════════════════════════════════════════════════════


def comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        body=comment.body,
        author=UserSummary.model_validate(comment.author),
        target_type=comment.target_type,
        target_id=comment.target_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def answer_response(
    answer: Answer,
    comments: Optional[List[CommentResponse]] = None,
    question_title: Optional[str] = None,
) -> AnswerResponse:
    return AnswerResponse(
        id=answer.id,
        question_id=answer.question_id,
        body=answer.body,
        answerer=UserSummary.model_validate(answer.answerer),
        votes=answer.votes,
        is_accepted=answer.is_accepted,
        is_verified=answer.is_verified,
        verified_by_id=answer.verified_by_id,
        created_at=answer.created_at,
        updated_at=answer.updated_at,
        comments=comments or [],
        question_title=question_title,
    )


async def load_comments(
    db: AsyncSession, target_type: str, target_ids: Iterable[uuid.UUID]
) -> Dict[uuid.UUID, List[CommentResponse]]:
    """Comments for many targets in one query, grouped by target, oldest first."""
    ids = list(target_ids)
    grouped: Dict[uuid.UUID, List[CommentResponse]] = defaultdict(list)
    if not ids:
        return grouped
    result = await db.execute(
        select(Comment)
        .where(Comment.target_type == target_type, Comment.target_id.in_(ids))
        .order_by(Comment.created_at.asc())
    )
    for comment in result.scalars().all():
        grouped[comment.target_id].append(comment_response(comment))
    return grouped


# ══════════════════════════════════════════════════════════════════════════
# Cascade helpers
# ══════════════════════════════════════════════════════════════════════════


async def delete_target_children(
    db: AsyncSession, target_type: str, target_ids: Iterable[uuid.UUID]
) -> None:
    """Deletes the comments and votes attached to the given targets."""
    ids = list(target_ids)
    if not ids:
        return
    comments = await db.execute(
        delete(Comment).where(Comment.target_type == target_type, Comment.target_id.in_(ids))
    )
    votes = await db.execute(
        delete(Vote).where(Vote.target_type == target_type, Vote.target_id.in_(ids))
    )
    logger.info(
        "Cascade on %d %s(s): removed %d comments, %d votes",
        len(ids), target_type, comments.rowcount, votes.rowcount,
    )
