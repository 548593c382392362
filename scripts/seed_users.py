"""
CodeQ Backend - Demo Account Seeder
===================================

What:  Creates (or resets) the demo accounts used by the frontend and in
       manual testing: one admin, two experts, six regular users.
How:   Upsert by email. Existing accounts get their password re-hashed and
       their role/profile restored; nothing else about them changes.

Usage:
    alembic upgrade head
    python -m scripts.seed_users

Passwords: admin123 (admin), expert123 (experts), student123 (users).
"""

import asyncio
import logging

from sqlalchemy import select

from codeq.database import async_session_factory, dispose_engine, utcnow
from codeq.models.user import ROLE_ADMIN, ROLE_EXPERT, ROLE_USER, User
from codeq.security import hash_password

logger = logging.getLogger("codeq.seed")

DEMO_USERS = [
    {
        "username": "admin",
        "email": "admin@codeq.dev",
        "password": "admin123",
        "role": ROLE_ADMIN,
        "bio": "Platform administrator and full-stack developer with 10+ years of experience.",
        "title": "Senior Full-Stack Developer",
        "location": "San Francisco, CA",
    },
    {
        "username": "sarah_dev",
        "email": "sarah@codeq.dev",
        "password": "expert123",
        "role": ROLE_EXPERT,
        "bio": "React and Next.js expert. Love helping developers build amazing web applications.",
        "title": "Frontend Architect",
        "location": "New York, NY",
    },
    {
        "username": "alex_coder",
        "email": "alex@codeq.dev",
        "password": "expert123",
        "role": ROLE_EXPERT,
        "bio": "Backend specialist focusing on APIs and databases. Always happy to help!",
        "title": "Backend Engineer",
        "location": "Austin, TX",
    },
    {
        "username": "john_doe",
        "email": "john@codeq.dev",
        "password": "student123",
        "role": ROLE_USER,
        "bio": "Learning web development. Excited to be part of this community!",
        "title": "Junior Developer",
        "location": "Chicago, IL",
    },
    {
        "username": "emma_dev",
        "email": "emma@codeq.dev",
        "password": "student123",
        "role": ROLE_USER,
        "bio": "Frontend developer passionate about React and modern JavaScript.",
        "title": "Frontend Developer",
        "location": "Seattle, WA",
    },
    {
        "username": "mike_codes",
        "email": "mike@codeq.dev",
        "password": "student123",
        "role": ROLE_USER,
        "bio": "Full-stack developer learning the ropes. Ask me anything about my journey!",
        "title": "Software Developer",
        "location": "Boston, MA",
    },
    {
        "username": "lisa_tech",
        "email": "lisa@codeq.dev",
        "password": "student123",
        "role": ROLE_USER,
        "bio": "UI/UX designer turned developer. Love creating beautiful and functional interfaces.",
        "title": "UI Developer",
        "location": "Portland, OR",
    },
    {
        "username": "david_web",
        "email": "david@codeq.dev",
        "password": "student123",
        "role": ROLE_USER,
        "bio": "Backend developer specializing in REST APIs and database design.",
        "title": "Backend Developer",
        "location": "Denver, CO",
    },
    {
        "username": "sophia_code",
        "email": "sophia@codeq.dev",
        "password": "student123",
        "role": ROLE_USER,
        "bio": "JavaScript enthusiast. Always exploring new frameworks and libraries.",
        "title": "JavaScript Developer",
        "location": "Miami, FL",
    },
]


async def seed_users() -> None:
    created = updated = 0
    async with async_session_factory() as session:
        for data in DEMO_USERS:
            fields = dict(data)
            password = fields.pop("password")
            result = await session.execute(select(User).where(User.email == fields["email"]))
            user = result.scalar_one_or_none()
            if user is None:
                session.add(User(password_hash=hash_password(password), **fields))
                created += 1
            else:
                for key, value in fields.items():
                    setattr(user, key, value)
                user.password_hash = hash_password(password)
                user.updated_at = utcnow()
                updated += 1
        await session.commit()
    logger.info("Demo users seeded: %d created, %d updated", created, updated)


async def main() -> None:
    try:
        await seed_users()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    asyncio.run(main())
