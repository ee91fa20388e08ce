"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    comments_router,
    communities_router,
    feed_router,
    posts_router,
)

__all__ = [
    "auth_router",
    "comments_router",
    "communities_router",
    "feed_router",
    "posts_router",
]
