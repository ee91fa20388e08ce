"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .comments import router as comments_router
from .communities import router as communities_router
from .feed import router as feed_router
from .posts import router as posts_router

__all__ = [
    "auth_router",
    "comments_router",
    "communities_router",
    "feed_router",
    "posts_router",
]
