"""
CodeQ Backend - Answer SQLAlchemy Model
=======================================

What:  `answers` table. One row per answer, owned by `answerer_id`.

Invariants kept by AnswerService:
    - at most one answer per question has is_accepted = True, and it is
      the one Question.accepted_answer_id points at
    - is_verified = True  <=>  verified_by_id is set
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeq.database import Base, utcnow
from codeq.models.user import User


class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id"), nullable=False, index=True
    )
    answerer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True, default=None
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    answerer: Mapped[User] = relationship(lazy="joined", foreign_keys=[answerer_id])

    def __repr__(self) -> str:
        return (
            f"<Answer(id={self.id}, question_id={self.question_id}, "
            f"votes={self.votes}, accepted={self.is_accepted})>"
        )
