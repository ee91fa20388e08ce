# src/threadline/models/vote.py
"""Models capturing voting interactions on posts and comments."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, synonym

from threadline.db.session import Base
from threadline.db.time import UTCDateTime, utcnow
from threadline.models.mixins import ID_LENGTH, StringIdMixin


class PostVote(StringIdMixin, Base):
    """Per-user vote on a post.

    A retracted vote is deleted rather than stored as zero, so every row is
    either an upvote or a downvote.
    """

    __tablename__ = "post_votes"
    __table_args__ = (
        CheckConstraint("vote_type IN (1, -1)", name="ck_post_votes_vote_type"),
        UniqueConstraint("post_id", "voter_id", name="uq_post_votes_voter"),
    )

    post_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    voter_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # 1 = upvote, -1 = downvote.
    vote_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    cast_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True), nullable=False, default=utcnow
    )

    # Lets the ledger address post and comment votes uniformly.
    target_id = synonym("post_id")


class CommentVote(StringIdMixin, Base):
    """Per-user vote on a comment."""

    __tablename__ = "comment_votes"
    __table_args__ = (
        CheckConstraint("vote_type IN (1, -1)", name="ck_comment_votes_vote_type"),
        UniqueConstraint("comment_id", "voter_id", name="uq_comment_votes_voter"),
    )

    comment_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    voter_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    vote_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    cast_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True), nullable=False, default=utcnow
    )

    target_id = synonym("comment_id")
