"""Column mixins shared by several models."""

import uuid

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

ID_LENGTH = 32


def new_id() -> str:
    """Return a collision-free identifier for a new row."""
    return uuid.uuid4().hex


class StringIdMixin:
    """Opaque string primary key generated on insert."""

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)


class VotableMixin:
    """Denormalized vote counters.

    These mirror the vote ledger and are written only by
    ``threadline.services.votes.recount_and_persist``.
    """

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
