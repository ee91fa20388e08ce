# src/threadline/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field, StrictInt


class VoteRequest(BaseModel):
    """Schema for casting, changing or retracting a vote."""

    # Range is checked by the aggregator so out-of-range values share its error.
    vote_type: StrictInt = Field(..., description="1 for upvote, -1 for downvote, 0 to retract")


class VoteResponse(BaseModel):
    """Counters of the target after the vote."""

    upvotes: int
    downvotes: int
    score: int
    user_vote: int


class MyVoteResponse(BaseModel):
    """The caller's current vote on a target."""

    user_vote: int = Field(..., description="1, -1, or 0 when the caller has not voted")
