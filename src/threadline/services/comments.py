"""Comment threads: forest assembly and the comment write paths."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from threadline.core.errors import InvalidArgumentError, NotFoundError
from threadline.core.settings import settings
from threadline.db.time import as_utc, utcnow
from threadline.db.transaction import unit_of_work
from threadline.models import Comment
from threadline.repositories.post_repo import PostRepository
from threadline.schemas.comment import CommentNode
from threadline.services.counters import recount_post_comments, recount_replies

logger = logging.getLogger(__name__)


def build_comment_forest(rows: Iterable[Comment]) -> list[CommentNode]:
    """Link flat comment rows into a forest of nested replies.

    Every row gets a node first, then each node is attached to its parent's
    ``replies``. Order within a level follows the order of ``rows``. A reply
    whose parent is not among ``rows`` (filtered out by depth or deleted) is
    dropped together with its subtree.
    """
    rows = list(rows)
    nodes = {row.id: CommentNode.model_validate(row) for row in rows}

    roots: list[CommentNode] = []
    for row in rows:
        node = nodes[row.id]
        if row.parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(row.parent_id)
        if parent is None:
            logger.debug("Dropping comment %s: parent %s not in view", row.id, row.parent_id)
            continue
        parent.replies.append(node)
    return roots


def clean_body(body: str | None) -> str:
    """Trim a comment body and check it is present and not too long."""
    text = (body or "").strip()
    if not text:
        raise InvalidArgumentError("Comment body is required")
    if len(text) > settings.comment_max_length:
        raise InvalidArgumentError("Comment too long")
    return text


class CommentService:
    """Reads and writes comments on posts."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.clock = clock
        self.posts = PostRepository(db)

    def _get_live(self, comment_id: str) -> Comment | None:
        stmt = select(Comment).where(Comment.id == comment_id, Comment.is_deleted.is_(False))
        return self.db.scalars(stmt).first()

    def get(self, comment_id: str) -> Comment:
        comment = self._get_live(comment_id)
        if comment is None:
            raise NotFoundError("Comment")
        return comment

    def tree(self, post_id: str, max_depth: int | None = None) -> list[CommentNode]:
        """Return the live comments of a post, nested up to ``max_depth``."""
        if self.posts.get_live(post_id) is None:
            raise NotFoundError("Post")
        if max_depth is None:
            max_depth = settings.max_comment_depth

        stmt = (
            select(Comment)
            .where(
                Comment.post_id == post_id,
                Comment.is_deleted.is_(False),
                Comment.depth <= max_depth,
            )
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return build_comment_forest(self.db.scalars(stmt))

    def create(
        self,
        post_id: str,
        author_id: str,
        body: str | None,
        parent_id: str | None = None,
    ) -> Comment:
        """Add a comment to a post, or a reply to one of its comments.

        Raises:
            InvalidArgumentError: Empty or oversized body, or the reply would be
                nested deeper than the configured maximum.
            NotFoundError: The post is missing, or the parent is missing,
                deleted or on another post.
        """
        text = clean_body(body)

        with unit_of_work(self.db):
            post = self.posts.get_live(post_id)
            if post is None:
                raise NotFoundError("Post")

            parent = None
            depth = 0
            if parent_id:
                parent = self._get_live(parent_id)
                if parent is None or parent.post_id != post_id:
                    raise NotFoundError("Parent comment")
                depth = parent.depth + 1
                if depth > settings.max_comment_depth:
                    raise InvalidArgumentError("Maximum nesting depth reached")

            comment = Comment(
                post_id=post_id,
                author_id=author_id,
                parent_id=parent.id if parent else None,
                body=text,
                depth=depth,
                created_at=self.clock(),
                upvotes=0,
                downvotes=0,
                score=0,
                reply_count=0,
            )
            self.db.add(comment)
            recount_post_comments(self.db, post)
            if parent is not None:
                recount_replies(self.db, parent)

        logger.debug("Comment %s added to post %s at depth %d", comment.id, post_id, depth)
        return comment

    def _get_own(self, comment_id: str, author_id: str) -> Comment:
        comment = self._get_live(comment_id)
        # Someone else's comment looks the same as a missing one.
        if comment is None or comment.author_id != author_id:
            raise NotFoundError("Comment")
        return comment

    def edit(self, comment_id: str, author_id: str, body: str | None) -> Comment:
        """Replace the body of the caller's comment within the edit window."""
        text = clean_body(body)
        now = self.clock()

        with unit_of_work(self.db):
            comment = self._get_own(comment_id, author_id)
            window = timedelta(minutes=settings.comment_edit_window_minutes)
            if as_utc(now) - as_utc(comment.created_at) > window:
                raise InvalidArgumentError(
                    f"Edit time limit exceeded ({settings.comment_edit_window_minutes} minutes)"
                )
            comment.body = text
            comment.updated_at = now
        return comment

    def delete(self, comment_id: str, author_id: str) -> None:
        """Soft-delete the caller's comment and refresh the affected counters."""
        with unit_of_work(self.db):
            comment = self._get_own(comment_id, author_id)
            comment.is_deleted = True
            comment.deleted_by = author_id
            comment.updated_at = self.clock()

            post = self.posts.get_live(comment.post_id)
            if post is not None:
                recount_post_comments(self.db, post)
            if comment.parent_id:
                parent = self.db.get(Comment, comment.parent_id)
                if parent is not None:
                    recount_replies(self.db, parent)
        logger.debug("Comment %s deleted by %s", comment_id, author_id)
