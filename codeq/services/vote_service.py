"""
CodeQ Backend - Vote Service
============================

What:  Up/down votes on questions and answers, and the vote counter +
       reputation bookkeeping that goes with them.
Who:   Called by codeq.routes.votes.

State table for POST /api/votes with `value` v:

    existing vote   action                 target.votes   owner reputation
    ─────────────   ────────────────────   ────────────   ────────────────
    none            create vote (v)        += v           += v
    same v          delete vote (toggle)   -= v           -= v
    opposite -v     switch vote to v       += 2v          += 2v

Repeating the same request therefore alternates record/remove, and two
identical requests leave every counter where it started.
"""

import logging
import uuid
from typing import Tuple, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from codeq.models.answer import Answer
from codeq.models.comment import TARGET_ANSWER, TARGET_QUESTION, TARGET_TYPES
from codeq.models.question import Question
from codeq.models.user import User
from codeq.models.vote import VOTE_VALUES, Vote
from codeq.schemas.vote import VoteRequest, VoteResponse, VoteStatusResponse
from codeq.services.common import adjust_reputation

logger = logging.getLogger(__name__)

Votable = Union[Question, Answer]


class VoteService:

    async def cast_vote(
        self, db: AsyncSession, voter: User, request: VoteRequest
    ) -> Tuple[VoteResponse, bool]:
        """
        Apply one vote request.

        Returns:
            (response, created) where created is True only when a new vote
            row was inserted (the route answers 201 then, 200 otherwise).

        Raises:
            ValidationError: bad target_type or value (→ 400)
            NotFoundError: target doesn't exist (→ 404)
            PermissionDeniedError: voting on your own post (→ 403)
            DatabaseError: the vote row collided with a concurrent insert (→ 500)
        """
        if request.target_type not in TARGET_TYPES:
            raise ValidationError(message="Invalid target type", field="target_type")
        if request.value not in VOTE_VALUES:
            raise ValidationError(message="Vote value must be 1 or -1", field="value")

        target, owner_id = await self._load_target(db, request.target_type, request.target_id)
        if owner_id == voter.id:
            raise PermissionDeniedError(message="You cannot vote on your own post")

        existing = await self._find_vote(db, voter.id, request.target_type, request.target_id)

        if existing is None:
            db.add(Vote(
                user_id=voter.id,
                target_type=request.target_type,
                target_id=request.target_id,
                value=request.value,
            ))
            delta, message, value, created = request.value, "Vote recorded", request.value, True
        elif existing.value == request.value:
            await db.delete(existing)
            delta, message, value, created = -request.value, "Vote removed", 0, False
        else:
            delta = request.value - existing.value
            existing.value = request.value
            message, value, created = "Vote updated", request.value, False

        target.votes += delta
        try:
            # the reputation UPDATE autoflushes the pending vote row
            await adjust_reputation(db, owner_id, delta)
            await db.flush()
        except IntegrityError as e:
            # A concurrent request inserted the same (user, target) vote first
            logger.error("Vote insert conflict for %s on %s: %s", voter.id, request.target_id, e)
            raise DatabaseError(
                message="Your vote could not be saved. Please try again.",
                context={"original_error": type(e).__name__},
            ) from e

        logger.info(
            "%s by %s on %s %s (delta %+d, now %d)",
            message, voter.username, request.target_type, request.target_id, delta, target.votes,
        )
        return VoteResponse(message=message, votes=target.votes, value=value), created

    async def get_vote_status(
        self,
        db: AsyncSession,
        voter: User,
        target_type: str,
        target_id: uuid.UUID,
    ) -> VoteStatusResponse:
        if target_type not in TARGET_TYPES:
            raise ValidationError(message="Invalid target type", field="target_type")
        vote = await self._find_vote(db, voter.id, target_type, target_id)
        if vote is None:
            return VoteStatusResponse(voted=False, value=0)
        return VoteStatusResponse(voted=True, value=vote.value)

    async def _find_vote(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        target_type: str,
        target_id: uuid.UUID,
    ):
        result = await db.execute(
            select(Vote).where(
                Vote.user_id == user_id,
                Vote.target_type == target_type,
                Vote.target_id == target_id,
            )
        )
        return result.scalar_one_or_none()

    async def _load_target(
        self, db: AsyncSession, target_type: str, target_id: uuid.UUID
    ) -> Tuple[Votable, uuid.UUID]:
        """Returns the target row and the id of the user whose reputation it feeds."""
        if target_type == TARGET_QUESTION:
            question = await db.get(Question, target_id)
            if question is not None:
                return question, question.asker_id
        elif target_type == TARGET_ANSWER:
            answer = await db.get(Answer, target_id)
            if answer is not None:
                return answer, answer.answerer_id
        raise NotFoundError(resource=target_type, resource_id=str(target_id))


vote_service = VoteService()
