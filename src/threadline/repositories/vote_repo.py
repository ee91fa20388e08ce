"""Data access for the vote ledger."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from threadline.models.vote import CommentVote, PostVote

__all__ = ["LedgerChange", "VoteLedger"]

VoteModel = type[PostVote] | type[CommentVote]


class LedgerChange(str, Enum):
    """What a ledger write did to the voter's record."""

    INSERTED = "inserted"
    UPDATED = "updated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


class VoteLedger:
    """One live vote per (target, voter); absence means "no vote"."""

    def __init__(self, session: Session, vote_model: VoteModel) -> None:
        """Initialize the ledger over the post or comment vote table."""
        self.session = session
        self.vote_model = vote_model

    def get(self, target_id: str, voter_id: str) -> PostVote | CommentVote | None:
        """Return the voter's current record for a target, if any."""
        stmt = select(self.vote_model).where(
            self.vote_model.target_id == target_id,
            self.vote_model.voter_id == voter_id,
        )
        return self.session.scalars(stmt).first()

    def record(
        self,
        target_id: str,
        voter_id: str,
        vote_type: int,
        cast_at: datetime,
    ) -> LedgerChange:
        """Write the voter's vote, deleting the record when ``vote_type`` is 0.

        Re-casting the same non-zero vote refreshes ``cast_at`` only.
        Pending changes are flushed so a following :meth:`tally` sees them.
        """
        existing = self.get(target_id, voter_id)

        if vote_type == 0:
            if existing is None:
                return LedgerChange.UNCHANGED
            self.session.delete(existing)
            self.session.flush()
            return LedgerChange.DELETED

        if existing is not None:
            existing.vote_type = vote_type
            existing.cast_at = cast_at
            self.session.flush()
            return LedgerChange.UPDATED

        vote = self.vote_model(voter_id=voter_id, vote_type=vote_type, cast_at=cast_at)
        vote.target_id = target_id
        self.session.add(vote)
        self.session.flush()
        return LedgerChange.INSERTED

    def tally(self, target_id: str) -> tuple[int, int]:
        """Return ``(upvotes, downvotes)`` aggregated over every record for a target."""
        stmt = select(
            func.count(case((self.vote_model.vote_type == 1, 1))),
            func.count(case((self.vote_model.vote_type == -1, 1))),
        ).where(self.vote_model.target_id == target_id)
        upvotes, downvotes = self.session.execute(stmt).one()
        return int(upvotes or 0), int(downvotes or 0)
