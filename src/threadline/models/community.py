"""SQLAlchemy models for community membership and metadata."""
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from threadline.db.session import Base
from threadline.db.time import UTCDateTime, utcnow
from threadline.models.mixins import ID_LENGTH, StringIdMixin

ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"


class Community(StringIdMixin, Base):
    """Community metadata used for grouping posts and members."""

    __tablename__ = "communities"

    # Lowercase handle used in URLs and feed scoping.
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True), nullable=False, default=utcnow
    )
    # Recounted from memberships and posts; see services.counters.
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class CommunityMembership(StringIdMixin, Base):
    """Join table mapping users into communities with a role."""

    __tablename__ = "community_memberships"
    __table_args__ = (
        UniqueConstraint("community_id", "user_id", name="uq_community_membership"),
        Index("ix_community_memberships_user", "user_id"),
    )

    community_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    joined_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True), nullable=False, default=utcnow
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_MEMBER)
