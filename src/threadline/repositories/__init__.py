"""Data access layer."""

from .post_repo import PostRepository
from .vote_repo import LedgerChange, VoteLedger

__all__ = ["LedgerChange", "PostRepository", "VoteLedger"]
