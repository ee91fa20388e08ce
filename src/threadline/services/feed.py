"""Feed query planning: strategy selection, filtering, ordering and enrichment.

Each :class:`FeedStrategy` maps to a :class:`StrategyPlan` holding its extra
filter predicates and its ordering. Every strategy is ordered and paginated
in the database; the formula-driven ones order by the SQL renditions in
:mod:`threadline.services.ranking`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from threadline.core.settings import settings
from threadline.db.time import hours_between
from threadline.models import Community, Post
from threadline.schemas.feed import (
    AgeInfo,
    ComputedScores,
    EngagementMetrics,
    FeedMetadata,
    FeedPost,
    FeedResponse,
    FiltersApplied,
)
from threadline.services import ranking

logger = logging.getLogger(__name__)

RISING_WINDOW = timedelta(hours=6)
FRESH_HOURS = 2
RECENT_HOURS = 24
CONTROVERSIAL_MIN_VOTES = 5


class FeedStrategy(str, Enum):
    """Named ranking strategies."""

    HOT = "hot"
    NEW = "new"
    TOP = "top"
    TRENDING = "trending"
    CONTROVERSIAL = "controversial"
    RISING = "rising"

    @classmethod
    def parse(cls, value: str | None) -> FeedStrategy:
        """Return the matching strategy, falling back to ``hot``."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.HOT


class TimeFrame(str, Enum):
    """Relative lookback windows applied to ``created_at``."""

    HOUR = "1h"
    SIX_HOURS = "6h"
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    ALL = "all"

    @property
    def window(self) -> timedelta | None:
        return _WINDOWS[self]

    def cutoff(self, now: datetime) -> datetime | None:
        """Absolute lower bound for ``created_at``; None for ``all``."""
        window = self.window
        return None if window is None else now - window

    @classmethod
    def parse(
        cls,
        value: str | None,
        allowed: frozenset[TimeFrame] | None = None,
    ) -> TimeFrame:
        """Return the matching time frame, falling back to ``24h``.

        Args:
            value: Raw query parameter.
            allowed: Restricts accepted values; anything else also falls back.
        """
        try:
            frame = cls((value or "").strip().lower())
        except ValueError:
            return cls.DAY
        if allowed is not None and frame not in allowed:
            return cls.DAY
        return frame


_WINDOWS: dict[TimeFrame, timedelta | None] = {
    TimeFrame.HOUR: timedelta(hours=1),
    TimeFrame.SIX_HOURS: timedelta(hours=6),
    TimeFrame.DAY: timedelta(hours=24),
    TimeFrame.WEEK: timedelta(days=7),
    TimeFrame.MONTH: timedelta(days=30),
    TimeFrame.ALL: None,
}

OrderFactory = Callable[[datetime], tuple[ColumnElement, ...]]


@dataclass(frozen=True)
class StrategyPlan:
    """Filter and ordering carried by a strategy.

    ``order_by`` builds the database ordering for a reference time; the
    formula strategies need it for their age terms. ``created_at DESC`` then
    ``id`` always break ties.
    """

    order_by: OrderFactory
    predicates: tuple[ColumnElement[bool], ...] = ()
    uses_time_frame: bool = False
    fixed_window: timedelta | None = None


_PLANS: dict[FeedStrategy, StrategyPlan] = {
    FeedStrategy.HOT: StrategyPlan(
        # Untouched posts would otherwise tie on a zero score.
        predicates=(Post.upvotes + Post.downvotes >= 1,),
        order_by=lambda now: (
            ranking.hot_rank_expr(Post.upvotes, Post.downvotes, Post.created_at).desc(),
        ),
    ),
    FeedStrategy.NEW: StrategyPlan(
        order_by=lambda now: (),
    ),
    FeedStrategy.TOP: StrategyPlan(
        uses_time_frame=True,
        order_by=lambda now: (Post.score.desc(),),
    ),
    FeedStrategy.TRENDING: StrategyPlan(
        uses_time_frame=True,
        order_by=lambda now: (
            ranking.trending_expr(
                Post.score, Post.comment_count, Post.created_at, now
            ).desc(),
        ),
    ),
    FeedStrategy.CONTROVERSIAL: StrategyPlan(
        predicates=(
            Post.upvotes > CONTROVERSIAL_MIN_VOTES,
            Post.downvotes > CONTROVERSIAL_MIN_VOTES,
        ),
        order_by=lambda now: (
            ranking.controversy_expr(Post.upvotes, Post.downvotes).desc(),
        ),
    ),
    FeedStrategy.RISING: StrategyPlan(
        fixed_window=RISING_WINDOW,
        order_by=lambda now: (
            ranking.rising_expr(
                Post.score, Post.comment_count, Post.created_at, now
            ).desc(),
        ),
    ),
}

if set(_PLANS) != set(FeedStrategy):  # pragma: no cover - import-time guard
    raise RuntimeError(f"Feed strategies without a plan: {set(FeedStrategy) - set(_PLANS)}")


def plan_for(strategy: FeedStrategy) -> StrategyPlan:
    """Return the plan registered for ``strategy``."""
    return _PLANS[strategy]


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """Clamp a page size to ``[1, maximum]``; None means ``default``."""
    if limit is None:
        return default
    return max(1, min(limit, maximum))


def clamp_offset(offset: int | None) -> int:
    """Clamp an offset to be non-negative."""
    if offset is None:
        return 0
    return max(0, offset)


@dataclass(frozen=True)
class FeedRequest:
    """Normalized feed parameters."""

    strategy: FeedStrategy = FeedStrategy.HOT
    time_frame: TimeFrame = TimeFrame.DAY
    community: str | None = None
    limit: int = 25
    offset: int = 0

    @classmethod
    def from_params(
        cls,
        *,
        sort: str | None = None,
        time_frame: str | None = None,
        community: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> FeedRequest:
        """Build a request from raw query parameters, never failing on bad values."""
        return cls(
            strategy=FeedStrategy.parse(sort),
            time_frame=TimeFrame.parse(time_frame),
            community=community or None,
            limit=clamp_limit(limit, settings.feed_default_limit, settings.feed_max_limit),
            offset=clamp_offset(offset),
        )


def _cutoff(plan: StrategyPlan, time_frame: TimeFrame, now: datetime) -> datetime | None:
    if plan.fixed_window is not None:
        return now - plan.fixed_window
    if plan.uses_time_frame:
        return time_frame.cutoff(now)
    return None


def enrich_post(
    post: Post,
    community_name: str,
    community_display_name: str,
    now: datetime,
) -> FeedPost:
    """Attach age, engagement metrics and ranking scalars to a post."""
    age_hours = max(hours_between(post.created_at, now), 0.0)
    total_votes = post.upvotes + post.downvotes
    return FeedPost(
        id=post.id,
        title=post.title,
        body=post.body,
        type=post.type,
        url=post.url,
        score=post.score,
        upvotes=post.upvotes,
        downvotes=post.downvotes,
        comment_count=post.comment_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author_id=post.author_id,
        community_name=community_name,
        community_display_name=community_display_name,
        computed_scores=ComputedScores(
            hot=ranking.hot_score(post.upvotes, post.downvotes, age_hours),
            controversy=ranking.controversy_score(post.upvotes, post.downvotes),
            trending=ranking.trending_score(post.score, age_hours, post.comment_count),
        ),
        age_info=AgeInfo(
            hours=round(age_hours * 10) / 10,
            days=round(age_hours / 24 * 10) / 10,
            is_fresh=age_hours < FRESH_HOURS,
            is_recent=age_hours < RECENT_HOURS,
        ),
        engagement_metrics=EngagementMetrics(
            vote_ratio=ranking.vote_ratio(post.upvotes, post.downvotes),
            engagement_rate=post.comment_count / (age_hours / 24 + 1),
            total_votes=total_votes,
            comments_per_hour=post.comment_count / max(age_hours, 1),
        ),
    )


def plan_feed(db: Session, request: FeedRequest, now: datetime) -> FeedResponse:
    """Select, order, paginate and enrich one page of the feed.

    Args:
        db: Database session.
        request: Normalized feed parameters.
        now: Reference time for cutoffs and ages.

    Returns:
        The page of posts plus metadata describing how it was produced.
    """
    plan = plan_for(request.strategy)
    cutoff = _cutoff(plan, request.time_frame, now)

    stmt = (
        select(Post, Community.name, Community.display_name)
        .join(Community, Post.community_id == Community.id)
        .where(Post.is_deleted.is_(False), *plan.predicates)
    )
    if cutoff is not None:
        stmt = stmt.where(Post.created_at >= cutoff)
    if request.community:
        stmt = stmt.where(Community.name == request.community.lower())

    stmt = (
        stmt.order_by(*plan.order_by(now), Post.created_at.desc(), Post.id)
        .offset(request.offset)
        .limit(request.limit)
    )
    rows = db.execute(stmt).all()

    logger.debug(
        "Feed %s/%s community=%s offset=%d limit=%d returned %d",
        request.strategy.value,
        request.time_frame.value,
        request.community or "all",
        request.offset,
        request.limit,
        len(rows),
    )

    posts = [enrich_post(post, name, display_name, now) for post, name, display_name in rows]
    metadata = FeedMetadata(
        sort_type=request.strategy.value,
        time_frame=request.time_frame.value,
        community=request.community or "all",
        total_returned=len(posts),
        has_more=len(posts) == request.limit,
        next_offset=request.offset + request.limit,
        generated_at=now,
        filters_applied=FiltersApplied(
            community_filter=request.community is not None,
            time_filter=cutoff is not None,
        ),
    )
    return FeedResponse(posts=posts, metadata=metadata)
