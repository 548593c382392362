"""
CodeQ Backend - Answer Service
==============================

What:  Answer CRUD, accepted-answer bookkeeping, and expert verification.
Who:   Called by codeq.routes.answers, codeq.routes.questions (nested
       routes and cascade delete) and codeq.routes.users.

Accept flow (PUT /api/answers/{id}/accept), all in one request transaction:
    1. only the question's asker may accept
    2. accepting the already-accepted answer changes nothing
    3. the previously accepted answer (if any) is un-marked and its
       answerer loses ACCEPT_REPUTATION_BONUS
    4. this answer is marked, question.accepted_answer_id points at it,
       and its answerer gains ACCEPT_REPUTATION_BONUS
    Askers accepting their own answer get no bonus (and lose none later).
"""

import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.config import settings
from codeq.database import utcnow
from codeq.exceptions import PermissionDeniedError, ValidationError
from codeq.models.answer import Answer
from codeq.models.comment import TARGET_ANSWER
from codeq.models.question import Question
from codeq.models.user import User
from codeq.schemas.question import (
    AnswerCreateRequest,
    AnswerListResponse,
    AnswerResponse,
    AnswerUpdateRequest,
)
from codeq.services.common import (
    adjust_reputation,
    answer_response,
    delete_target_children,
    ensure_owner_or_admin,
    get_or_404,
    load_comments,
    total_pages,
)

logger = logging.getLogger(__name__)


class AnswerService:

    # ── Reads ─────────────────────────────────────────────────────────────

    async def answers_for_question(
        self, db: AsyncSession, question_id: uuid.UUID
    ) -> List[AnswerResponse]:
        """Accepted answer first, then by votes, then oldest first; each with its comments."""
        result = await db.execute(
            select(Answer)
            .where(Answer.question_id == question_id)
            .order_by(
                Answer.is_accepted.desc(),
                Answer.votes.desc(),
                Answer.created_at.asc(),
            )
        )
        answers = list(result.scalars().all())
        comments = await load_comments(db, TARGET_ANSWER, [a.id for a in answers])
        return [answer_response(a, comments.get(a.id, [])) for a in answers]

    async def list_for_question(
        self, db: AsyncSession, question_id: uuid.UUID
    ) -> List[AnswerResponse]:
        await get_or_404(db, Question, question_id, "question")
        return await self.answers_for_question(db, question_id)

    async def get_answer(self, db: AsyncSession, answer_id: uuid.UUID) -> AnswerResponse:
        answer = await get_or_404(db, Answer, answer_id, "answer")
        return await self._with_comments(db, answer)

    async def list_user_answers(
        self, db: AsyncSession, user_id: uuid.UUID, page: int = 1, limit: int = 10
    ) -> AnswerListResponse:
        await get_or_404(db, User, user_id, "user")
        result = await db.execute(
            select(Answer, Question.title)
            .join(Question, Question.id == Answer.question_id)
            .where(Answer.answerer_id == user_id)
            .order_by(Answer.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        rows = result.all()
        count_result = await db.execute(
            select(func.count()).select_from(Answer).where(Answer.answerer_id == user_id)
        )
        total = count_result.scalar() or 0
        return AnswerListResponse(
            answers=[answer_response(answer, question_title=title) for answer, title in rows],
            total=total,
            current_page=page,
            total_pages=total_pages(total, limit),
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_answer(
        self,
        db: AsyncSession,
        answerer: User,
        question_id: uuid.UUID,
        request: AnswerCreateRequest,
    ) -> AnswerResponse:
        question = await get_or_404(db, Question, question_id, "question")
        if question.is_locked:
            raise PermissionDeniedError(message="This question is locked and cannot be answered")

        answer = Answer(question_id=question.id, answerer=answerer, body=request.body)
        db.add(answer)
        await db.flush()
        logger.info("Answer %s posted on question %s by %s", answer.id, question.id, answerer.username)
        return answer_response(answer)

    async def update_answer(
        self,
        db: AsyncSession,
        user: User,
        answer_id: uuid.UUID,
        request: AnswerUpdateRequest,
    ) -> AnswerResponse:
        answer = await get_or_404(db, Answer, answer_id, "answer")
        ensure_owner_or_admin(user, answer.answerer_id, "Not authorized to update this answer")
        question = await get_or_404(db, Question, answer.question_id, "question")
        if question.is_locked and not user.is_admin:
            raise PermissionDeniedError(message="This question is locked")

        answer.body = request.body
        answer.updated_at = utcnow()
        await db.flush()
        return await self._with_comments(db, answer)

    async def delete_answer(self, db: AsyncSession, user: User, answer_id: uuid.UUID) -> None:
        """Deletes the answer, its comments and votes; clears the accepted pointer."""
        answer = await get_or_404(db, Answer, answer_id, "answer")
        ensure_owner_or_admin(user, answer.answerer_id, "Not authorized to delete this answer")

        question = await db.get(Question, answer.question_id)
        if question is not None and question.accepted_answer_id == answer.id:
            await self.revoke_accept_bonus(db, question, answer)
            question.accepted_answer_id = None

        await delete_target_children(db, TARGET_ANSWER, [answer.id])
        await db.delete(answer)
        await db.flush()
        logger.info("Answer %s deleted by %s", answer_id, user.username)

    # ── Accept ────────────────────────────────────────────────────────────

    async def accept_answer(
        self, db: AsyncSession, user: User, answer_id: uuid.UUID
    ) -> AnswerResponse:
        answer = await get_or_404(db, Answer, answer_id, "answer")
        question = await get_or_404(db, Question, answer.question_id, "question")
        if question.asker_id != user.id:
            raise PermissionDeniedError(message="Only the question asker can accept answers")

        if question.accepted_answer_id == answer.id:
            return await self._with_comments(db, answer)

        if question.accepted_answer_id is not None:
            previous = await db.get(Answer, question.accepted_answer_id)
            if previous is not None:
                previous.is_accepted = False
                await self.revoke_accept_bonus(db, question, previous)

        answer.is_accepted = True
        question.accepted_answer_id = answer.id
        await self._apply_accept_bonus(db, question, answer, settings.accept_reputation_bonus)
        await db.flush()

        logger.info("Answer %s accepted on question %s", answer.id, question.id)
        return await self._with_comments(db, answer)

    async def unaccept_answer(
        self, db: AsyncSession, user: User, answer_id: uuid.UUID
    ) -> AnswerResponse:
        answer = await get_or_404(db, Answer, answer_id, "answer")
        question = await get_or_404(db, Question, answer.question_id, "question")
        if question.asker_id != user.id:
            raise PermissionDeniedError(message="Only the question asker can un-accept answers")
        if question.accepted_answer_id != answer.id:
            raise ValidationError(message="This answer is not the accepted answer")

        await self.revoke_accept_bonus(db, question, answer)
        answer.is_accepted = False
        question.accepted_answer_id = None
        await db.flush()

        logger.info("Answer %s un-accepted on question %s", answer.id, question.id)
        return await self._with_comments(db, answer)

    async def revoke_accept_bonus(
        self, db: AsyncSession, question: Question, answer: Answer
    ) -> None:
        """Takes back the bonus granted when `answer` was accepted on `question`."""
        await self._apply_accept_bonus(db, question, answer, -settings.accept_reputation_bonus)

    async def _apply_accept_bonus(
        self, db: AsyncSession, question: Question, answer: Answer, delta: int
    ) -> None:
        if answer.answerer_id == question.asker_id:
            return
        await adjust_reputation(db, answer.answerer_id, delta)

    # ── Verify ────────────────────────────────────────────────────────────

    async def set_verified(
        self, db: AsyncSession, verifier: User, answer_id: uuid.UUID, verified: bool
    ) -> AnswerResponse:
        """Expert/admin endorsement. Role is checked by the route dependency."""
        answer = await get_or_404(db, Answer, answer_id, "answer")
        answer.is_verified = verified
        answer.verified_by_id = verifier.id if verified else None
        await db.flush()
        logger.info(
            "Answer %s %s by %s",
            answer.id, "verified" if verified else "unverified", verifier.username,
        )
        return await self._with_comments(db, answer)

    async def _with_comments(self, db: AsyncSession, answer: Answer) -> AnswerResponse:
        comments = await load_comments(db, TARGET_ANSWER, [answer.id])
        return answer_response(answer, comments.get(answer.id, []))


answer_service = AnswerService()
