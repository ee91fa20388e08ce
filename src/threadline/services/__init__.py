"""Business logic services for the Threadline application."""

from .comments import CommentService
from .communities import CommunityService
from .posts import PostService
from .votes import VoteAggregator

__all__ = [
    "CommentService",
    "CommunityService",
    "PostService",
    "VoteAggregator",
]
