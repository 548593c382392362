"""
CodeQ Backend - Vote Schemas
============================
"""

import uuid

from pydantic import BaseModel, Field, StrictInt


class VoteRequest(BaseModel):
    # target_type and the {1, -1} range are checked by VoteService
    target_type: str
    target_id: uuid.UUID
    # JSON booleans, floats and numeric strings are rejected, not coerced
    value: StrictInt


class VoteResponse(BaseModel):
    """
    Result of POST /api/votes.

    message is one of "Vote recorded", "Vote removed", "Vote updated";
    value is the caller's vote after the call (0 when removed).
    """
    message: str
    votes: int = Field(description="Target's vote total after this call")
    value: int


class VoteStatusResponse(BaseModel):
    voted: bool
    value: int = Field(description="1, -1, or 0 when not voted")
