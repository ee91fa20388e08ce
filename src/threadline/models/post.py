"""SQLAlchemy models for posts and related attributes."""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import UTCDateTime, utcnow
from threadline.models.mixins import ID_LENGTH, StringIdMixin, VotableMixin

POST_TYPES = ("text", "link", "image")


class Post(StringIdMixin, VotableMixin, Base):
    """Primary content entity produced by users inside a community.

    Posts are soft-deleted: ``is_deleted`` hides them from every feed and
    lookup while their vote ledger is retained.
    """

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_community_created", "community_id", "created_at"),
        Index("ix_posts_author", "author_id"),
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    # One of POST_TYPES; link and image posts carry a url.
    type: Mapped[str] = mapped_column(String(8), nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)

    community_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime(timezone=True), nullable=True)

    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
