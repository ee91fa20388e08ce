"""Data access helpers for working with posts."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from threadline.models.community import Community
from threadline.models.post import Post

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_live(self, post_id: str) -> Post | None:
        """Return a post by identifier unless it is soft-deleted."""
        stmt = select(Post).where(Post.id == post_id, Post.is_deleted.is_(False))
        return self.session.scalars(stmt).first()

    def get_with_community(self, post_id: str) -> tuple[Post, Community] | None:
        """Return a live post together with its community."""
        stmt = (
            select(Post, Community)
            .join(Community, Post.community_id == Community.id)
            .where(Post.id == post_id, Post.is_deleted.is_(False))
        )
        row = self.session.execute(stmt).first()
        if row is None:
            return None
        return row[0], row[1]

    def create(
        self,
        *,
        title: str,
        body: str | None,
        post_type: str,
        url: str | None,
        community_id: str,
        author_id: str,
        created_at: datetime,
    ) -> Post:
        """Insert a new post with zeroed counters and return the flushed instance."""
        post = Post(
            title=title,
            body=body,
            type=post_type,
            url=url,
            community_id=community_id,
            author_id=author_id,
            created_at=created_at,
            upvotes=0,
            downvotes=0,
            score=0,
            comment_count=0,
        )
        self.session.add(post)
        self.session.flush()
        return post
