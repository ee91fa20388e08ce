"""Recount helpers for the non-vote denormalized counters.

Comment, reply, member and post counts are recomputed from their source rows
after every mutation instead of being incremented in place.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from threadline.models import Comment, Community, CommunityMembership, Post

logger = logging.getLogger(__name__)


def _count(db: Session, stmt) -> int:
    return int(db.execute(stmt).scalar_one() or 0)


def recount_post_comments(db: Session, post: Post) -> int:
    """Refresh ``post.comment_count`` from its live comments."""
    db.flush()
    post.comment_count = _count(
        db,
        select(func.count(Comment.id)).where(
            Comment.post_id == post.id,
            Comment.is_deleted.is_(False),
        ),
    )
    logger.debug("Post %s comment_count=%d", post.id, post.comment_count)
    return post.comment_count


def recount_replies(db: Session, comment: Comment) -> int:
    """Refresh ``comment.reply_count`` from its live direct replies."""
    db.flush()
    comment.reply_count = _count(
        db,
        select(func.count(Comment.id)).where(
            Comment.parent_id == comment.id,
            Comment.is_deleted.is_(False),
        ),
    )
    return comment.reply_count


def recount_community(db: Session, community: Community) -> Community:
    """Refresh a community's member and post counts."""
    db.flush()
    community.member_count = _count(
        db,
        select(func.count(CommunityMembership.id)).where(
            CommunityMembership.community_id == community.id
        ),
    )
    community.post_count = _count(
        db,
        select(func.count(Post.id)).where(
            Post.community_id == community.id,
            Post.is_deleted.is_(False),
        ),
    )
    logger.debug(
        "Community %s member_count=%d post_count=%d",
        community.name, community.member_count, community.post_count,
    )
    return community
