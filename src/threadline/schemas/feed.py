"""Feed-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ComputedScores(BaseModel):
    """Ranking scalars recomputed from the row's current counters."""

    hot: float
    controversy: float
    trending: float


class AgeInfo(BaseModel):
    """Relative age of a feed item at generation time."""

    hours: float
    days: float
    is_fresh: bool = Field(..., description="Younger than two hours")
    is_recent: bool = Field(..., description="Younger than a day")


class EngagementMetrics(BaseModel):
    """Engagement figures derived from counters and age."""

    vote_ratio: float
    engagement_rate: float
    total_votes: int
    comments_per_hour: float


class FeedPost(BaseModel):
    """A post as it appears in a ranked feed."""

    id: str
    title: str
    body: str | None
    type: str
    url: str | None
    score: int
    upvotes: int
    downvotes: int
    comment_count: int
    created_at: datetime
    updated_at: datetime | None
    author_id: str
    community_name: str
    community_display_name: str
    computed_scores: ComputedScores
    age_info: AgeInfo
    engagement_metrics: EngagementMetrics


class FiltersApplied(BaseModel):
    """Filters that actually narrowed the page; ``time_filter`` is true only when a ``created_at`` cutoff was applied."""

    community_filter: bool
    time_filter: bool


class FeedMetadata(BaseModel):
    """Describes how a feed page was produced."""

    sort_type: str
    time_frame: str
    community: str
    total_returned: int
    has_more: bool
    next_offset: int
    generated_at: datetime
    filters_applied: FiltersApplied


class FeedResponse(BaseModel):
    """Schema returned by ``GET /posts``."""

    posts: list[FeedPost]
    metadata: FeedMetadata


class FeedStatistics(BaseModel):
    total_posts: int
    avg_score: float | None
    max_score: int | None
    total_comments: int
    avg_comments: float | None
    posts_with_positive_score: int
    posts_with_comments: int
    post_types: list[str]


class FeedStatsResponse(BaseModel):
    """Schema returned by ``GET /feed/stats``."""

    time_frame: str
    community: str
    statistics: FeedStatistics
    generated_at: datetime


class TrendingCommunity(BaseModel):
    community_name: str
    community_display_name: str
    recent_posts: int
    total_score: int
    total_comments: int
    avg_score: float
    trending_score: float


class TrendingResponse(BaseModel):
    """Schema returned by ``GET /feed/trending``."""

    time_frame: str
    trending_communities: list[TrendingCommunity]
    generated_at: datetime
