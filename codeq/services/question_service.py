"""
CodeQ Backend - Question Service
================================

What:  Question listing/search, detail with idempotent view counting,
       create/update/delete (with cascade), and admin pin/lock.
Who:   Called by codeq.routes.questions and codeq.routes.users.

Delete cascade (no FK cascades; everything is explicit):
    question ─┬─ answers ─┬─ comments on each answer
              │           └─ votes on each answer
              ├─ comments on the question
              ├─ votes on the question
              ├─ question_tags
              └─ question_viewers
    If an accepted answer goes with it, its answerer loses the accept bonus.
"""

import logging
import uuid
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import delete, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from codeq.database import utcnow
from codeq.exceptions import PermissionDeniedError, ValidationError
from codeq.models.answer import Answer
from codeq.models.comment import TARGET_ANSWER, TARGET_QUESTION
from codeq.models.question import Question, QuestionTag, QuestionViewer
from codeq.models.user import User
from codeq.schemas.question import (
    QuestionCreateRequest,
    QuestionDetailResponse,
    QuestionListItem,
    QuestionListResponse,
    QuestionUpdateRequest,
)
from codeq.schemas.user import UserSummary
from codeq.services.answer_service import answer_service
from codeq.services.common import (
    delete_target_children,
    ensure_owner_or_admin,
    get_or_404,
    load_comments,
    total_pages,
)

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("newest", "oldest", "votes", "views", "unanswered")


class QuestionService:

    async def list_questions(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        tags: Optional[List[str]] = None,
        sort: str = "newest",
        asker_id: Optional[uuid.UUID] = None,
    ) -> QuestionListResponse:
        """
        Page through questions. Pinned questions always come first.

        Args:
            search: case-insensitive substring of title or body
            tags:   match questions carrying ANY of these tags
            sort:   newest | oldest | votes | views | unanswered
            asker_id: restrict to one user's questions (profile pages)
        """
        if sort not in SORT_OPTIONS:
            raise ValidationError(
                message=f"Invalid sort '{sort}'. Must be one of: {', '.join(SORT_OPTIONS)}",
                field="sort",
            )

        filters = []
        if search:
            needle = search.strip().lower()
            filters.append(
                or_(
                    func.lower(Question.title).contains(needle, autoescape=True),
                    func.lower(Question.body).contains(needle, autoescape=True),
                )
            )
        if tags:
            filters.append(
                Question.id.in_(
                    select(QuestionTag.question_id).where(QuestionTag.tag.in_(tags))
                )
            )
        if asker_id is not None:
            filters.append(Question.asker_id == asker_id)
        if sort == "unanswered":
            filters.append(~exists().where(Answer.question_id == Question.id))

        order_by = [Question.is_pinned.desc()]
        if sort == "oldest":
            order_by.append(Question.created_at.asc())
        elif sort == "votes":
            order_by += [Question.votes.desc(), Question.created_at.desc()]
        elif sort == "views":
            order_by += [Question.views.desc(), Question.created_at.desc()]
        else:
            order_by.append(Question.created_at.desc())

        result = await db.execute(
            select(Question)
            .where(*filters)
            .order_by(*order_by)
            .limit(limit)
            .offset((page - 1) * limit)
        )
        questions = list(result.scalars().all())

        count_result = await db.execute(
            select(func.count()).select_from(Question).where(*filters)
        )
        total = count_result.scalar() or 0

        ids = [q.id for q in questions]
        tag_map = await self._tags_for(db, ids)
        answer_counts = await self._answer_counts(db, ids)

        return QuestionListResponse(
            questions=[
                self._list_item(q, tag_map.get(q.id, []), answer_counts.get(q.id, 0))
                for q in questions
            ],
            total=total,
            current_page=page,
            total_pages=total_pages(total, limit),
        )

    async def get_question(
        self,
        db: AsyncSession,
        question_id: uuid.UUID,
        viewer: Optional[User] = None,
    ) -> QuestionDetailResponse:
        """
        Full question page.

        View counting: a signed-in viewer is recorded in question_viewers
        the first time and `views` goes up by one; later visits by the same
        user and anonymous visits leave `views` alone.
        """
        question = await get_or_404(db, Question, question_id, "question")

        if viewer is not None:
            seen = await db.get(QuestionViewer, (question.id, viewer.id))
            if seen is None:
                db.add(QuestionViewer(question_id=question.id, user_id=viewer.id))
                question.views += 1
                await db.flush()

        answers = await answer_service.answers_for_question(db, question.id)
        question_comments = await load_comments(db, TARGET_QUESTION, [question.id])
        tag_map = await self._tags_for(db, [question.id])

        item = self._list_item(question, tag_map.get(question.id, []), len(answers))
        return QuestionDetailResponse(
            **item.model_dump(),
            answers=answers,
            comments=question_comments.get(question.id, []),
        )

    async def create_question(
        self, db: AsyncSession, asker: User, request: QuestionCreateRequest
    ) -> QuestionListItem:
        question = Question(title=request.title, body=request.body, asker=asker)
        db.add(question)
        await db.flush()
        await self._replace_tags(db, question.id, request.tags)

        logger.info("Question %s created by %s", question.id, asker.username)
        return self._list_item(question, request.tags, 0)

    async def update_question(
        self,
        db: AsyncSession,
        user: User,
        question_id: uuid.UUID,
        request: QuestionUpdateRequest,
    ) -> QuestionListItem:
        question = await get_or_404(db, Question, question_id, "question")
        ensure_owner_or_admin(user, question.asker_id, "Not authorized to update this question")
        if question.is_locked and not user.is_admin:
            raise PermissionDeniedError(message="This question is locked")

        if request.title is not None:
            question.title = request.title
        if request.body is not None:
            question.body = request.body
        if request.tags is not None:
            await self._replace_tags(db, question.id, request.tags)
        question.updated_at = utcnow()
        await db.flush()
        return await self._summary(db, question)

    async def delete_question(
        self, db: AsyncSession, user: User, question_id: uuid.UUID
    ) -> None:
        question = await get_or_404(db, Question, question_id, "question")
        ensure_owner_or_admin(user, question.asker_id, "Not authorized to delete this question")

        result = await db.execute(select(Answer).where(Answer.question_id == question.id))
        answers = list(result.scalars().all())
        for answer in answers:
            if answer.is_accepted:
                await answer_service.revoke_accept_bonus(db, question, answer)

        answer_ids = [a.id for a in answers]
        await delete_target_children(db, TARGET_ANSWER, answer_ids)
        if answer_ids:
            await db.execute(delete(Answer).where(Answer.id.in_(answer_ids)))

        await delete_target_children(db, TARGET_QUESTION, [question.id])
        await db.execute(delete(QuestionTag).where(QuestionTag.question_id == question.id))
        await db.execute(delete(QuestionViewer).where(QuestionViewer.question_id == question.id))
        await db.delete(question)
        await db.flush()

        logger.info(
            "Question %s deleted by %s (%d answers removed)",
            question_id, user.username, len(answer_ids),
        )

    async def set_pinned(
        self, db: AsyncSession, question_id: uuid.UUID, is_pinned: bool
    ) -> QuestionListItem:
        question = await get_or_404(db, Question, question_id, "question")
        question.is_pinned = is_pinned
        await db.flush()
        logger.info("Question %s pinned=%s", question_id, is_pinned)
        return await self._summary(db, question)

    async def set_locked(
        self, db: AsyncSession, question_id: uuid.UUID, is_locked: bool
    ) -> QuestionListItem:
        question = await get_or_404(db, Question, question_id, "question")
        question.is_locked = is_locked
        await db.flush()
        logger.info("Question %s locked=%s", question_id, is_locked)
        return await self._summary(db, question)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _summary(self, db: AsyncSession, question: Question) -> QuestionListItem:
        tag_map = await self._tags_for(db, [question.id])
        answer_counts = await self._answer_counts(db, [question.id])
        return self._list_item(
            question, tag_map.get(question.id, []), answer_counts.get(question.id, 0)
        )

    async def _replace_tags(
        self, db: AsyncSession, question_id: uuid.UUID, tags: List[str]
    ) -> None:
        # DELETE runs immediately, so re-adding a kept tag can't collide on the PK
        await db.execute(delete(QuestionTag).where(QuestionTag.question_id == question_id))
        db.add_all(
            QuestionTag(question_id=question_id, tag=tag, position=i)
            for i, tag in enumerate(tags)
        )
        await db.flush()

    async def _tags_for(
        self, db: AsyncSession, question_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, List[str]]:
        tag_map: Dict[uuid.UUID, List[str]] = defaultdict(list)
        if not question_ids:
            return tag_map
        result = await db.execute(
            select(QuestionTag.question_id, QuestionTag.tag)
            .where(QuestionTag.question_id.in_(question_ids))
            .order_by(QuestionTag.position)
        )
        for question_id, tag in result.all():
            tag_map[question_id].append(tag)
        return tag_map

    async def _answer_counts(
        self, db: AsyncSession, question_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, int]:
        if not question_ids:
            return {}
        result = await db.execute(
            select(Answer.question_id, func.count(Answer.id))
            .where(Answer.question_id.in_(question_ids))
            .group_by(Answer.question_id)
        )
        return {question_id: count for question_id, count in result.all()}

    def _list_item(
        self, question: Question, tags: List[str], answer_count: int
    ) -> QuestionListItem:
        return QuestionListItem(
            id=question.id,
            title=question.title,
            body=question.body,
            asker=UserSummary.model_validate(question.asker),
            tags=list(tags),
            votes=question.votes,
            views=question.views,
            answer_count=answer_count,
            accepted_answer_id=question.accepted_answer_id,
            is_pinned=question.is_pinned,
            is_locked=question.is_locked,
            created_at=question.created_at,
            updated_at=question.updated_at,
        )


question_service = QuestionService()
