"""
CodeQ Backend - Question SQLAlchemy Models
==========================================

What:  `questions` plus its two set-valued satellites, `question_tags`
       and `question_viewers`.
How:   The satellites have no ORM relationship on Question; QuestionService
       reads and rewrites them with explicit statements.

Counters:
    votes  sum of Vote.value rows targeting this question (VoteService)
    views  size of question_viewers (QuestionService.get_question)
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeq.database import Base, utcnow
from codeq.models.user import User

MAX_TAGS = 5
MAX_TAG_LENGTH = 30


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    asker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Pointer only: answers.question_id already references questions, a
    # second FK in the other direction would make the tables cyclic.
    accepted_answer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, nullable=True, default=None
    )

    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    asker: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_questions_created_at", "created_at"),
        Index("idx_questions_votes", "votes"),
    )

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, title='{self.title[:30]}', votes={self.votes})>"


class QuestionTag(Base):
    """One tag of a question; `position` keeps the order the asker typed them in."""

    __tablename__ = "question_tags"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id"), primary_key=True
    )
    tag: Mapped[str] = mapped_column(String(MAX_TAG_LENGTH), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class QuestionViewer(Base):
    """Signed-in user who has already been counted in Question.views."""

    __tablename__ = "question_viewers"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), primary_key=True
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
