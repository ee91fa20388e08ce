"""SQLAlchemy model for threaded comments on posts."""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import UTCDateTime, utcnow
from threadline.models.mixins import ID_LENGTH, StringIdMixin, VotableMixin


class Comment(StringIdMixin, VotableMixin, Base):
    """A comment or reply on a post.

    ``depth`` is 0 for top-level comments and ``parent.depth + 1`` for
    replies; the service layer caps it at write time.
    """

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_post_created", "post_id", "created_at"),
        Index("ix_comments_post_parent", "post_id", "parent_id"),
        Index("ix_comments_author", "author_id"),
    )

    post_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime(timezone=True), nullable=True)

    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
