"""
CodeQ Backend - Application Package
===================================

What: Q&A platform API (questions, answers, comments, votes, user roles).
How:  Layered FastAPI backend:

    ┌─────────────────────────────────────┐
    │     Routes (API Layer + auth deps)  │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Business Logic)       │  ← ownership, votes, reputation
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Persistence)          │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Routes never touch the ORM directly; they call a service singleton and
return whatever schema it builds.
"""

__version__ = "1.0.0"
