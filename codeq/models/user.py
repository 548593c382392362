"""
CodeQ Backend - User SQLAlchemy Models
======================================

What:  `users` table plus the `user_follows` link table.
Who:   Written by AuthService / UserService; reputation is also moved by
       VoteService and AnswerService (accept bonus).

Roles:
    user    default for every registration
    expert  may verify answers
    admin   may verify answers, pin/lock questions, delete any content,
            change roles
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from codeq.database import Base, utcnow

ROLE_USER = "user"
ROLE_EXPERT = "expert"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_EXPERT, ROLE_ADMIN)


class User(Base):
    """A registered account. `password_hash` never leaves the service layer."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    # Stored lower-cased; login looks it up the same way
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    location: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Can go negative; sum of vote values on the user's posts plus accept bonuses
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class Follow(Base):
    """One edge of the following graph: follower_id follows followee_id."""

    __tablename__ = "user_follows"

    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), primary_key=True
    )
    followee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), primary_key=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
