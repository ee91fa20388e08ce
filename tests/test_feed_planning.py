# tests/test_feed_planning.py
"""Unit tests for feed parameter normalization and strategy plans."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from threadline.db.functions import epoch_seconds
from threadline.models import Post
from threadline.services.feed import (
    FeedRequest,
    FeedStrategy,
    TimeFrame,
    clamp_limit,
    clamp_offset,
    plan_for,
)
from threadline.services.feed_stats import STATS_TIME_FRAMES

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class TestStrategyParsing:
    @pytest.mark.parametrize("value", [None, "", "bogus", "best", "h0t"])
    def test_unknown_falls_back_to_hot(self, value):
        assert FeedStrategy.parse(value) is FeedStrategy.HOT

    @pytest.mark.parametrize("strategy", list(FeedStrategy))
    def test_known_values(self, strategy):
        assert FeedStrategy.parse(strategy.value) is strategy

    def test_case_insensitive(self):
        assert FeedStrategy.parse("Top") is FeedStrategy.TOP


class TestTimeFrameParsing:
    @pytest.mark.parametrize("value", [None, "", "2h", "year", "forever"])
    def test_unknown_falls_back_to_a_day(self, value):
        assert TimeFrame.parse(value) is TimeFrame.DAY

    def test_known_values(self):
        assert TimeFrame.parse("7d") is TimeFrame.WEEK
        assert TimeFrame.parse("all") is TimeFrame.ALL

    def test_restricted_set_falls_back(self):
        assert TimeFrame.parse("30d", allowed=STATS_TIME_FRAMES) is TimeFrame.DAY
        assert TimeFrame.parse("7d", allowed=STATS_TIME_FRAMES) is TimeFrame.WEEK

    def test_cutoff(self):
        now = datetime(2026, 1, 10, tzinfo=UTC)
        assert TimeFrame.SIX_HOURS.cutoff(now) == now - timedelta(hours=6)
        assert TimeFrame.MONTH.cutoff(now) == now - timedelta(days=30)
        assert TimeFrame.ALL.cutoff(now) is None


class TestClamping:
    def test_limit_defaults(self):
        assert clamp_limit(None, 25, 100) == 25

    @pytest.mark.parametrize("raw, expected", [(0, 1), (-7, 1), (1, 1), (50, 50), (100, 100), (101, 100)])
    def test_limit_bounds(self, raw, expected):
        assert clamp_limit(raw, 25, 100) == expected

    @pytest.mark.parametrize("raw, expected", [(None, 0), (-1, 0), (0, 0), (30, 30)])
    def test_offset(self, raw, expected):
        assert clamp_offset(raw) == expected


class TestFeedRequest:
    def test_defaults(self):
        request = FeedRequest.from_params()
        assert request == FeedRequest(FeedStrategy.HOT, TimeFrame.DAY, None, 25, 0)

    def test_bad_values_are_normalized(self):
        request = FeedRequest.from_params(
            sort="nope", time_frame="nope", community="", limit=10_000, offset=-3
        )
        assert request.strategy is FeedStrategy.HOT
        assert request.time_frame is TimeFrame.DAY
        assert request.community is None
        assert request.limit == 100
        assert request.offset == 0


class TestStrategyPlans:
    @pytest.mark.parametrize("strategy", list(FeedStrategy))
    def test_every_strategy_builds_an_ordering(self, strategy):
        ordering = plan_for(strategy).order_by(NOW)
        assert isinstance(ordering, tuple)

    @pytest.mark.parametrize(
        "strategy, functions",
        [
            (FeedStrategy.HOT, ("log10", "julianday")),
            (FeedStrategy.TRENDING, ("log10", "power", "julianday")),
            (FeedStrategy.CONTROVERSIAL, ("sqrt",)),
            (FeedStrategy.RISING, ("power", "julianday")),
        ],
    )
    def test_formula_orderings_compile_for_sqlite(self, strategy, functions):
        sql = " ".join(
            str(clause.compile(dialect=sqlite.dialect()))
            for clause in plan_for(strategy).order_by(NOW)
        )
        for name in functions:
            assert name in sql

    def test_epoch_seconds_compiles_per_dialect(self):
        expr = epoch_seconds(Post.created_at)
        assert "julianday" in str(expr.compile(dialect=sqlite.dialect()))
        assert "EXTRACT(EPOCH FROM" in str(expr.compile(dialect=postgresql.dialect()))

    def test_time_frame_usage(self):
        assert plan_for(FeedStrategy.TOP).uses_time_frame
        assert plan_for(FeedStrategy.TRENDING).uses_time_frame
        assert not plan_for(FeedStrategy.HOT).uses_time_frame
        assert plan_for(FeedStrategy.RISING).fixed_window == timedelta(hours=6)
