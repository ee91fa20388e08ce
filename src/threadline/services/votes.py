"""Vote aggregation: ledger mutation followed by counter recomputation.

``upvotes``, ``downvotes`` and ``score`` on posts and comments are a cache of
the vote ledger. :func:`recount_and_persist` is the only code that writes
them, and :class:`VoteAggregator` always calls it after mutating the ledger
inside the same transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from threadline.core.errors import InvalidArgumentError, NotFoundError
from threadline.db.time import utcnow
from threadline.db.transaction import unit_of_work
from threadline.models import Comment, CommentVote, Post, PostVote
from threadline.repositories.vote_repo import VoteLedger

logger = logging.getLogger(__name__)

VALID_VOTE_TYPES = (-1, 0, 1)


@dataclass(frozen=True)
class VotableKind:
    """Binds a votable model to its vote ledger table."""

    name: str
    model: type[Post] | type[Comment]
    vote_model: type[PostVote] | type[CommentVote]


POST_VOTES = VotableKind("Post", Post, PostVote)
COMMENT_VOTES = VotableKind("Comment", Comment, CommentVote)


@dataclass(frozen=True)
class VoteTally:
    """Counters for a target after a vote, plus the caller's vote."""

    upvotes: int
    downvotes: int
    score: int
    user_vote: int | None = None

    def as_dict(self) -> dict[str, int | None]:
        return asdict(self)


def validate_vote_type(vote_type: object) -> int:
    """Return ``vote_type`` if it is -1, 0 or 1.

    Raises:
        InvalidArgumentError: For any other value, including booleans.
    """
    if isinstance(vote_type, bool) or vote_type not in VALID_VOTE_TYPES:
        raise InvalidArgumentError("Invalid vote type")
    return int(vote_type)  # type: ignore[arg-type]


def recount_and_persist(db: Session, kind: VotableKind, target: Post | Comment) -> VoteTally:
    """Recompute a target's counters from its ledger and write them onto the row.

    Args:
        db: Session holding the (already flushed) ledger mutation.
        kind: Which ledger backs ``target``.
        target: Post or comment to refresh.

    Returns:
        The refreshed counters, without a caller vote.
    """
    upvotes, downvotes = VoteLedger(db, kind.vote_model).tally(target.id)
    target.upvotes = upvotes
    target.downvotes = downvotes
    target.score = upvotes - downvotes
    db.flush()
    logger.debug(
        "Recounted %s %s: up=%d down=%d score=%d",
        kind.name, target.id, upvotes, downvotes, target.score,
    )
    return VoteTally(upvotes=upvotes, downvotes=downvotes, score=target.score)


class VoteAggregator:
    """Applies votes to posts and comments."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.clock = clock

    def _lock_target(self, kind: VotableKind, target_id: str) -> Post | Comment:
        # Row lock serializes concurrent votes on one target; other targets are unaffected.
        stmt = (
            select(kind.model)
            .where(kind.model.id == target_id, kind.model.is_deleted.is_(False))
            .with_for_update()
        )
        target = self.db.scalars(stmt).first()
        if target is None:
            raise NotFoundError(kind.name)
        return target

    def apply_vote(
        self,
        kind: VotableKind,
        target_id: str,
        voter_id: str,
        vote_type: object,
    ) -> VoteTally:
        """Cast, change or retract a vote and return the refreshed counters.

        Args:
            kind: ``POST_VOTES`` or ``COMMENT_VOTES``.
            target_id: Identifier of the post or comment.
            voter_id: Identifier of the voting user.
            vote_type: 1 (up), -1 (down) or 0 (retract).

        Raises:
            InvalidArgumentError: If ``vote_type`` is not -1, 0 or 1.
            NotFoundError: If the target is missing or soft-deleted.
            InternalError: If storage fails; nothing is applied.
        """
        vote_type = validate_vote_type(vote_type)

        with unit_of_work(self.db):
            target = self._lock_target(kind, target_id)
            change = VoteLedger(self.db, kind.vote_model).record(
                target_id, voter_id, vote_type, self.clock()
            )
            tally = recount_and_persist(self.db, kind, target)

        logger.debug(
            "Vote %d by %s on %s %s: %s", vote_type, voter_id, kind.name, target_id, change.value
        )
        return VoteTally(
            upvotes=tally.upvotes,
            downvotes=tally.downvotes,
            score=tally.score,
            user_vote=vote_type,
        )

    def get_user_vote(self, kind: VotableKind, target_id: str, voter_id: str) -> int:
        """Return the voter's current vote on a target, 0 when there is none."""
        target = self.db.scalars(
            select(kind.model).where(kind.model.id == target_id, kind.model.is_deleted.is_(False))
        ).first()
        if target is None:
            raise NotFoundError(kind.name)
        record = VoteLedger(self.db, kind.vote_model).get(target_id, voter_id)
        return record.vote_type if record is not None else 0
