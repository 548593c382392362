"""
CodeQ Backend - Question Service Tests
======================================

What we test:
    ✅ View counting is once per signed-in user, never for anonymous
    ✅ Listing: pinned first, search, tag filter, sort options, pagination
    ✅ Tag normalization on create/update
    ✅ Delete removes answers, comments, votes, tags and viewers and
       takes back the accept bonus
    ✅ Locked questions can only be edited by admins
"""

import uuid

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select

from codeq.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from codeq.models.answer import Answer
from codeq.models.comment import Comment
from codeq.models.question import Question, QuestionTag, QuestionViewer
from codeq.models.vote import Vote
from codeq.schemas.question import QuestionCreateRequest, QuestionUpdateRequest
from codeq.services.answer_service import answer_service
from codeq.services.question_service import QuestionService
from tests.factories import add_answer, add_question, add_user


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar()


class TestViews:

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_signed_in_view_counts_once(self, db_session):
        asker = await add_user(db_session, "asker")
        reader = await add_user(db_session, "reader")
        question = await add_question(db_session, asker)

        first = await self.service.get_question(db_session, question.id, viewer=reader)
        second = await self.service.get_question(db_session, question.id, viewer=reader)

        assert first.views == 1
        assert second.views == 1
        assert await _count(db_session, QuestionViewer) == 1

    @pytest.mark.asyncio
    async def test_anonymous_views_are_not_counted(self, db_session):
        asker = await add_user(db_session, "asker")
        question = await add_question(db_session, asker)

        detail = await self.service.get_question(db_session, question.id, viewer=None)

        assert detail.views == 0

    @pytest.mark.asyncio
    async def test_missing_question(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_question(db_session, uuid.uuid4())


class TestListQuestions:

    def setup_method(self):
        self.service = QuestionService()

    async def _ask(self, db, asker, title, tags=(), body="Body text long enough to pass."):
        request = QuestionCreateRequest(title=title, body=body, tags=list(tags))
        return await self.service.create_question(db, asker, request)

    @pytest.mark.asyncio
    async def test_pinned_first_then_newest(self, db_session):
        asker = await add_user(db_session, "asker")
        old = await self._ask(db_session, asker, "Oldest question")
        await self._ask(db_session, asker, "Middle question")
        new = await self._ask(db_session, asker, "Newest question")
        await self.service.set_pinned(db_session, old.id, True)

        result = await self.service.list_questions(db_session)

        assert [q.title for q in result.questions] == [
            "Oldest question", "Newest question", "Middle question",
        ]
        assert result.questions[1].id == new.id
        assert result.total == 3

    @pytest.mark.asyncio
    async def test_search_matches_title_and_body_case_insensitively(self, db_session):
        asker = await add_user(db_session, "asker")
        await self._ask(db_session, asker, "Asyncio event loops")
        await self._ask(db_session, asker, "Unrelated title", body="Something about ASYNCIO here.")
        await self._ask(db_session, asker, "Pandas merge")

        result = await self.service.list_questions(db_session, search="asyncio")

        assert result.total == 2

    @pytest.mark.asyncio
    async def test_tag_filter_matches_any(self, db_session):
        asker = await add_user(db_session, "asker")
        await self._ask(db_session, asker, "Python one", tags=["python"])
        await self._ask(db_session, asker, "Rust one", tags=["rust"])
        await self._ask(db_session, asker, "Go one", tags=["go"])

        result = await self.service.list_questions(db_session, tags=["python", "rust"])

        assert sorted(q.title for q in result.questions) == ["Python one", "Rust one"]

    @pytest.mark.asyncio
    async def test_unanswered_and_votes_sorts(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        answered = await add_question(db_session, asker, title="Answered")
        quiet = await add_question(db_session, asker, title="Quiet")
        await add_answer(db_session, answered, answerer)
        answered.votes = 3

        unanswered = await self.service.list_questions(db_session, sort="unanswered")
        by_votes = await self.service.list_questions(db_session, sort="votes")

        assert [q.id for q in unanswered.questions] == [quiet.id]
        assert by_votes.questions[0].id == answered.id
        assert by_votes.questions[0].answer_count == 1

    @pytest.mark.asyncio
    async def test_pagination(self, db_session):
        asker = await add_user(db_session, "asker")
        for i in range(5):
            await self._ask(db_session, asker, f"Question number {i}")

        page = await self.service.list_questions(db_session, page=2, limit=2)

        assert len(page.questions) == 2
        assert page.total == 5
        assert page.current_page == 2
        assert page.total_pages == 3

    @pytest.mark.asyncio
    async def test_unknown_sort_is_rejected(self, db_session):
        with pytest.raises(ValidationError):
            await self.service.list_questions(db_session, sort="random")


class TestTags:

    def test_tags_are_trimmed_lowercased_and_deduplicated(self):
        request = QuestionCreateRequest(
            title="Tag handling", body="Body long enough.", tags=[" Python", "python", "FastAPI", ""]
        )
        assert request.tags == ["python", "fastapi"]

    def test_too_many_tags(self):
        with pytest.raises(PydanticValidationError):
            QuestionCreateRequest(
                title="Tag handling", body="Body long enough.", tags=["a", "b", "c", "d", "e", "f"]
            )

    @pytest.mark.asyncio
    async def test_update_replaces_tags(self, db_session):
        service = QuestionService()
        asker = await add_user(db_session, "asker")
        created = await service.create_question(
            db_session, asker,
            QuestionCreateRequest(title="Retag me", body="Body long enough.", tags=["a", "b"]),
        )

        updated = await service.update_question(
            db_session, asker, created.id, QuestionUpdateRequest(tags=["b", "c"])
        )

        assert updated.tags == ["b", "c"]
        assert await _count(db_session, QuestionTag) == 2


class TestDeleteQuestion:

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db_session):
        asker = await add_user(db_session, "asker")
        answerer = await add_user(db_session, "answerer")
        question = await self.service.create_question(
            db_session, asker,
            QuestionCreateRequest(title="Doomed question", body="Body long enough.", tags=["x"]),
        )
        answer = await add_answer(db_session, await db_session.get(Question, question.id), answerer)
        db_session.add_all([
            Comment(body="on q", author=answerer, target_type="question", target_id=question.id),
            Comment(body="on a", author=asker, target_type="answer", target_id=answer.id),
            Vote(user_id=answerer.id, target_type="question", target_id=question.id, value=1),
            Vote(user_id=asker.id, target_type="answer", target_id=answer.id, value=1),
        ])
        await self.service.get_question(db_session, question.id, viewer=answerer)
        await answer_service.accept_answer(db_session, asker, answer.id)

        await self.service.delete_question(db_session, asker, question.id)

        for model in (Answer, Comment, Vote, QuestionTag, QuestionViewer):
            assert await _count(db_session, model) == 0, model.__name__
        await db_session.refresh(answerer)
        assert answerer.reputation == 0

    @pytest.mark.asyncio
    async def test_only_owner_or_admin_can_delete(self, db_session):
        asker = await add_user(db_session, "asker")
        stranger = await add_user(db_session, "stranger")
        admin = await add_user(db_session, "admin", role="admin")
        question = await add_question(db_session, asker)

        with pytest.raises(PermissionDeniedError):
            await self.service.delete_question(db_session, stranger, question.id)
        await self.service.delete_question(db_session, admin, question.id)


class TestLockedQuestions:

    @pytest.mark.asyncio
    async def test_locked_question_editable_by_admin_only(self, db_session):
        service = QuestionService()
        asker = await add_user(db_session, "asker")
        admin = await add_user(db_session, "admin", role="admin")
        question = await add_question(db_session, asker)
        await service.set_locked(db_session, question.id, True)

        with pytest.raises(PermissionDeniedError):
            await service.update_question(
                db_session, asker, question.id, QuestionUpdateRequest(title="New title here")
            )
        updated = await service.update_question(
            db_session, admin, question.id, QuestionUpdateRequest(title="New title here")
        )
        assert updated.title == "New title here"
        assert updated.is_locked is True

