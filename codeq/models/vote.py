"""
CodeQ Backend - Vote SQLAlchemy Model
=====================================

One row per (user, target). The unique constraint is the only guard
against a double vote when two requests race; VoteService itself does a
plain read-then-write.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from codeq.database import Base, utcnow

UPVOTE = 1
DOWNVOTE = -1
VOTE_VALUES = (UPVOTE, DOWNVOTE)


class Vote(Base):
    __tablename__ = "votes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_votes_user_target"),
        Index("idx_votes_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<Vote(user_id={self.user_id}, {self.target_type}={self.target_id}, value={self.value})>"
