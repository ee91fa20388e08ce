"""SQLAlchemy models for the Threadline application."""

from .comment import Comment
from .community import Community, CommunityMembership
from .post import Post
from .user import User
from .vote import CommentVote, PostVote

__all__ = [
    "Comment",
    "Community", "CommunityMembership",
    "Post",
    "User",
    "CommentVote", "PostVote",
]
