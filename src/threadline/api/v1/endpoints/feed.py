# src/threadline/api/v1/endpoints/feed.py
"""Aggregate feed endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from threadline.schemas.feed import FeedStatsResponse, TrendingResponse
from threadline.services.feed_stats import feed_stats, trending_communities

from ..dependencies import ClockDep, SessionDep

router = APIRouter(prefix="/feed", tags=["feed"])

TimeFrameQuery = Annotated[str | None, Query(alias="timeFrame")]


@router.get("/stats", response_model=FeedStatsResponse)
def get_feed_stats(
    db: SessionDep,
    clock: ClockDep,
    community: str | None = None,
    time_frame: TimeFrameQuery = None,
) -> FeedStatsResponse:
    """Summarize recent posts, globally or within one community."""
    return feed_stats(db, clock(), community=community, time_frame=time_frame)


@router.get("/trending", response_model=TrendingResponse)
def get_trending_communities(
    db: SessionDep,
    clock: ClockDep,
    time_frame: TimeFrameQuery = None,
    limit: int | None = None,
) -> TrendingResponse:
    """Rank communities by recent activity."""
    return trending_communities(db, clock(), time_frame=time_frame, limit=limit)
