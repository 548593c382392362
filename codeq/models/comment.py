"""
CodeQ Backend - Comment SQLAlchemy Model
========================================

`target_id` is polymorphic (a question id or an answer id depending on
`target_type`), so it carries no foreign key. Deleting a question or an
answer removes its comments explicitly.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeq.database import Base, utcnow
from codeq.models.user import User

TARGET_QUESTION = "question"
TARGET_ANSWER = "answer"
TARGET_TYPES = (TARGET_QUESTION, TARGET_ANSWER)


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_comments_target", "target_type", "target_id"),
    )
