"""
CodeQ Backend - Answer Service Tests
====================================

What we test:
    ✅ Accepting grants the bonus and sets the question pointer
    ✅ Switching the accepted answer moves the bonus
    ✅ Re-accepting the same answer is a no-op
    ✅ Un-accepting and deleting the accepted answer revoke the bonus
    ✅ Self-accept earns nothing
    ✅ Locked questions refuse new answers
    ✅ Verification records who verified
"""

import pytest
from sqlalchemy import func, select

from codeq.config import settings
from codeq.exceptions import PermissionDeniedError, ValidationError
from codeq.models.comment import Comment
from codeq.models.question import Question
from codeq.schemas.question import AnswerCreateRequest
from codeq.services.answer_service import AnswerService
from tests.factories import add_answer, add_question, add_user

BONUS = settings.accept_reputation_bonus


class TestAcceptAnswer:

    def setup_method(self):
        self.service = AnswerService()

    @pytest.mark.asyncio
    async def test_accept_grants_bonus(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)

        result = await self.service.accept_answer(db_session, asker, answer.id)

        assert result.is_accepted is True
        assert question.accepted_answer_id == answer.id
        await db_session.refresh(answerer)
        assert answerer.reputation == BONUS

    @pytest.mark.asyncio
    async def test_accepting_another_answer_moves_the_bonus(self, db_session):
        asker = await add_user(db_session, "asker")
        first_author = await add_user(db_session, "first")
        second_author = await add_user(db_session, "second")
        question = await add_question(db_session, asker)
        first = await add_answer(db_session, question, first_author)
        second = await add_answer(db_session, question, second_author)

        await self.service.accept_answer(db_session, asker, first.id)
        await self.service.accept_answer(db_session, asker, second.id)

        await db_session.refresh(first_author)
        await db_session.refresh(second_author)
        assert first.is_accepted is False
        assert second.is_accepted is True
        assert question.accepted_answer_id == second.id
        assert first_author.reputation == 0
        assert second_author.reputation == BONUS

    @pytest.mark.asyncio
    async def test_reaccepting_is_a_noop(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)

        await self.service.accept_answer(db_session, asker, answer.id)
        await self.service.accept_answer(db_session, asker, answer.id)

        await db_session.refresh(answerer)
        assert answerer.reputation == BONUS

    @pytest.mark.asyncio
    async def test_only_asker_can_accept(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)

        with pytest.raises(PermissionDeniedError):
            await self.service.accept_answer(db_session, answerer, answer.id)

    @pytest.mark.asyncio
    async def test_self_accept_earns_nothing(self, db_session):
        asker = await add_user(db_session, "asker")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, asker)

        await self.service.accept_answer(db_session, asker, answer.id)
        await self.service.unaccept_answer(db_session, asker, answer.id)

        await db_session.refresh(asker)
        assert asker.reputation == 0

    @pytest.mark.asyncio
    async def test_unaccept_revokes_bonus(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)
        await self.service.accept_answer(db_session, asker, answer.id)

        result = await self.service.unaccept_answer(db_session, asker, answer.id)

        assert result.is_accepted is False
        assert question.accepted_answer_id is None
        await db_session.refresh(answerer)
        assert answerer.reputation == 0

    @pytest.mark.asyncio
    async def test_unaccept_requires_accepted_answer(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)

        with pytest.raises(ValidationError):
            await self.service.unaccept_answer(db_session, asker, answer.id)


class TestAnswerLifecycle:

    def setup_method(self):
        self.service = AnswerService()

    @pytest.mark.asyncio
    async def test_locked_question_refuses_answers(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        question.is_locked = True

        with pytest.raises(PermissionDeniedError):
            await self.service.create_answer(
                db_session, answerer, question.id, AnswerCreateRequest(body="Late answer")
            )

    @pytest.mark.asyncio
    async def test_deleting_accepted_answer_clears_pointer_and_bonus(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)
        db_session.add(
            Comment(body="Nice", author=asker, target_type="answer", target_id=answer.id)
        )
        await self.service.accept_answer(db_session, asker, answer.id)

        await self.service.delete_answer(db_session, answerer, answer.id)

        refreshed = await db_session.get(Question, question.id)
        assert refreshed.accepted_answer_id is None
        await db_session.refresh(answerer)
        assert answerer.reputation == 0
        assert await self.service.answers_for_question(db_session, question.id) == []
        leftover = await db_session.execute(select(func.count()).select_from(Comment))
        assert leftover.scalar() == 0

    @pytest.mark.asyncio
    async def test_others_cannot_delete(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, answerer)

        with pytest.raises(PermissionDeniedError):
            await self.service.delete_answer(db_session, asker, answer.id)

    @pytest.mark.asyncio
    async def test_verify_and_unverify(self, db_session):
        asker = await add_user(db_session, "asker")
        expert = await add_user(db_session, "expert", role="expert")
        question = await add_question(db_session, asker)
        answer = await add_answer(db_session, question, asker)

        verified = await self.service.set_verified(db_session, expert, answer.id, True)
        assert verified.is_verified is True
        assert verified.verified_by_id == expert.id

        cleared = await self.service.set_verified(db_session, expert, answer.id, False)
        assert cleared.is_verified is False
        assert cleared.verified_by_id is None

    @pytest.mark.asyncio
    async def test_answers_ordered_accepted_then_votes(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await add_question(db_session, asker)
        low = await add_answer(db_session, question, answerer, body="low")
        high = await add_answer(db_session, question, answerer, body="high")
        accepted = await add_answer(db_session, question, answerer, body="accepted")
        high.votes = 5
        low.votes = 1
        await self.service.accept_answer(db_session, asker, accepted.id)

        answers = await self.service.answers_for_question(db_session, question.id)

        assert [a.body for a in answers] == ["accepted", "high", "low"]
