"""Aggregate views over recent posts: feed statistics and trending communities."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from threadline.core.errors import NotFoundError
from threadline.db.time import hours_between
from threadline.models import Community, Post
from threadline.schemas.feed import (
    FeedStatistics,
    FeedStatsResponse,
    TrendingCommunity,
    TrendingResponse,
)
from threadline.services.feed import TimeFrame, clamp_limit
from threadline.services.ranking import community_trending_score

logger = logging.getLogger(__name__)

STATS_TIME_FRAMES = frozenset({TimeFrame.HOUR, TimeFrame.SIX_HOURS, TimeFrame.DAY, TimeFrame.WEEK})
TRENDING_TIME_FRAMES = frozenset({TimeFrame.HOUR, TimeFrame.SIX_HOURS, TimeFrame.DAY})
TRENDING_DEFAULT_LIMIT = 10
TRENDING_MAX_LIMIT = 20
TRENDING_MIN_POSTS = 2


def _float_or_none(value: object) -> float | None:
    return None if value is None else float(value)


def feed_stats(
    db: Session,
    now: datetime,
    community: str | None = None,
    time_frame: str | None = None,
) -> FeedStatsResponse:
    """Summarize live posts created within the time frame.

    Raises:
        NotFoundError: If ``community`` is given but does not exist.
    """
    frame = TimeFrame.parse(time_frame, allowed=STATS_TIME_FRAMES)
    cutoff = frame.cutoff(now)
    community_name = community.lower() if community else None

    if community_name is not None:
        exists = db.scalars(select(Community.id).where(Community.name == community_name)).first()
        if exists is None:
            raise NotFoundError("Community")

    conditions = [Post.is_deleted.is_(False), Post.created_at >= cutoff]
    if community_name is not None:
        conditions.append(Community.name == community_name)

    stmt = (
        select(
            func.count(Post.id),
            func.avg(Post.score),
            func.max(Post.score),
            func.sum(Post.comment_count),
            func.avg(Post.comment_count),
            func.count(case((Post.score > 0, 1))),
            func.count(case((Post.comment_count > 0, 1))),
        )
        .select_from(Post)
        .join(Community, Post.community_id == Community.id)
        .where(*conditions)
    )
    (total, avg_score, max_score, total_comments, avg_comments,
     positive, with_comments) = db.execute(stmt).one()

    types_stmt = (
        select(Post.type)
        .join(Community, Post.community_id == Community.id)
        .where(*conditions)
        .distinct()
        .order_by(Post.type)
    )
    post_types = list(db.scalars(types_stmt))

    return FeedStatsResponse(
        time_frame=frame.value,
        community=community_name or "all",
        statistics=FeedStatistics(
            total_posts=int(total or 0),
            avg_score=_float_or_none(avg_score),
            max_score=None if max_score is None else int(max_score),
            total_comments=int(total_comments or 0),
            avg_comments=_float_or_none(avg_comments),
            posts_with_positive_score=int(positive or 0),
            posts_with_comments=int(with_comments or 0),
            post_types=post_types,
        ),
        generated_at=now,
    )


def trending_communities(
    db: Session,
    now: datetime,
    time_frame: str | None = None,
    limit: int | None = None,
) -> TrendingResponse:
    """Rank communities by the activity of their recent posts.

    Only communities with at least two live posts inside the time frame are
    ranked. The score decays with the age of the oldest of those posts.
    """
    frame = TimeFrame.parse(time_frame, allowed=TRENDING_TIME_FRAMES)
    limit = clamp_limit(limit, TRENDING_DEFAULT_LIMIT, TRENDING_MAX_LIMIT)
    cutoff = frame.cutoff(now)

    stmt = (
        select(
            Community.name,
            Community.display_name,
            func.count(Post.id),
            func.sum(Post.score),
            func.sum(Post.comment_count),
            func.avg(Post.score),
            func.min(Post.created_at),
        )
        .join(Community, Post.community_id == Community.id)
        .where(Post.is_deleted.is_(False), Post.created_at >= cutoff)
        .group_by(Community.id, Community.name, Community.display_name)
        .having(func.count(Post.id) >= TRENDING_MIN_POSTS)
    )

    ranked: list[TrendingCommunity] = []
    for name, display_name, count, total_score, total_comments, avg_score, oldest in db.execute(stmt):
        ranked.append(
            TrendingCommunity(
                community_name=name,
                community_display_name=display_name,
                recent_posts=int(count),
                total_score=int(total_score or 0),
                total_comments=int(total_comments or 0),
                avg_score=float(avg_score or 0),
                trending_score=community_trending_score(
                    int(count),
                    int(total_score or 0),
                    int(total_comments or 0),
                    hours_between(oldest, now),
                ),
            )
        )
    ranked.sort(key=lambda item: (item.trending_score, item.community_name), reverse=True)
    logger.debug("Trending communities for %s: %d candidates", frame.value, len(ranked))

    return TrendingResponse(
        time_frame=frame.value,
        trending_communities=ranked[:limit],
        generated_at=now,
    )
