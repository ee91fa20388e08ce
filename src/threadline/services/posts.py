"""Service-level helpers for creating, reading and deleting posts."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from threadline.core.errors import ForbiddenError, NotFoundError
from threadline.core.settings import settings
from threadline.db.time import utcnow
from threadline.db.transaction import unit_of_work
from threadline.models import Community, Post
from threadline.repositories.post_repo import PostRepository
from threadline.schemas.post import PostCreate, PostResponse
from threadline.services.counters import recount_community

logger = logging.getLogger(__name__)


def to_post_response(post: Post, community: Community) -> PostResponse:
    """Convert a Post ORM instance and its community to an API schema."""
    return PostResponse(
        id=post.id,
        title=post.title,
        body=post.body,
        type=post.type,
        url=post.url,
        community_id=community.id,
        community_name=community.name,
        community_display_name=community.display_name,
        author_id=post.author_id,
        upvotes=post.upvotes,
        downvotes=post.downvotes,
        score=post.score,
        comment_count=post.comment_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


class PostService:
    """Post lifecycle outside of voting and ranking."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.clock = clock
        self.repo = PostRepository(db)

    def get(self, post_id: str) -> PostResponse:
        found = self.repo.get_with_community(post_id)
        if found is None:
            raise NotFoundError("Post")
        return to_post_response(*found)

    def create(self, data: PostCreate, author_id: str) -> PostResponse:
        """Create a post in the named community, or the default one.

        Args:
            data: Validated request body.
            author_id: Identifier of the authenticated author.

        Raises:
            NotFoundError: If the community does not exist.
        """
        community_name = (data.community_name or settings.default_community).strip().lower()

        with unit_of_work(self.db):
            community = self.db.scalars(
                select(Community).where(Community.name == community_name)
            ).first()
            if community is None:
                raise NotFoundError("Community")

            post = self.repo.create(
                title=data.title.strip(),
                body=data.body,
                post_type=data.type,
                url=data.url if data.type != "text" else None,
                community_id=community.id,
                author_id=author_id,
                created_at=self.clock(),
            )
            recount_community(self.db, community)

        logger.info("Post %s created in %s by %s", post.id, community.name, author_id)
        return to_post_response(post, community)

    def delete(self, post_id: str, user_id: str) -> None:
        """Soft-delete a post; only its author may do so."""
        with unit_of_work(self.db):
            post = self.repo.get_live(post_id)
            if post is None:
                raise NotFoundError("Post")
            if post.author_id != user_id:
                raise ForbiddenError("You can only delete your own posts")
            post.is_deleted = True
            post.updated_at = self.clock()

            community = self.db.get(Community, post.community_id)
            if community is not None:
                recount_community(self.db, community)
        logger.info("Post %s deleted by %s", post_id, user_id)
