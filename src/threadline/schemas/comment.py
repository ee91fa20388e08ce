# src/threadline/schemas/comment.py
"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for creating a comment or a reply."""

    body: str = Field(..., description="Markdown content; trimmed before validation")
    parent_id: str | None = Field(None, description="Comment being replied to")


class CommentUpdate(BaseModel):
    body: str


class CommentResponse(BaseModel):
    """Schema for a single comment."""

    id: str
    post_id: str
    author_id: str
    parent_id: str | None
    body: str
    depth: int
    upvotes: int
    downvotes: int
    score: int
    reply_count: int
    created_at: datetime
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class CommentNode(CommentResponse):
    """A comment with its nested replies."""

    replies: list[CommentNode] = Field(default_factory=list)

