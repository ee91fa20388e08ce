# src/threadline/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=300)
    body: str | None = Field(None, max_length=40_000, description="Markdown content")
    type: Literal["text", "link", "image"] = "text"
    url: str | None = Field(None, max_length=2048)
    community_name: str | None = Field(None, description="Defaults to the general community")

    @model_validator(mode="after")
    def _url_for_media_posts(self) -> "PostCreate":
        if self.type in ("link", "image") and not self.url:
            raise ValueError(f"{self.type} posts require a url")
        return self


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    title: str
    body: str | None
    type: str
    url: str | None
    community_id: str
    community_name: str
    community_display_name: str
    author_id: str
    upvotes: int
    downvotes: int
    score: int
    comment_count: int
    created_at: datetime
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
