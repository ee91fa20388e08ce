"""Ranking formulas used to order posts, comments and communities.

All functions here are pure: they take plain numbers (or a timestamp for the
hot ordering key), perform no I/O and are deterministic. Every function
tolerates zero votes and zero age without dividing by zero.

The ``*_expr`` functions build the same formulas as SQLAlchemy expressions
for ordering feeds in the database.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

from sqlalchemy import Float, case, cast, func

from threadline.db.functions import epoch_seconds
from threadline.db.time import as_utc, hours_between

# Seconds of age worth one order of magnitude of net score in the hot formula.
HOT_DECAY_SECONDS = 45_000
HOT_PRECISION = 1_000_000

# Fixed origin for the hot ordering key (2005-12-08T07:46:43Z).
HOT_EPOCH = datetime.fromtimestamp(1_134_028_003, UTC)

TRENDING_COMMENT_WEIGHT = 2.0
TRENDING_AGE_OFFSET_HOURS = 2.0
TRENDING_DECAY_EXPONENT = 1.5

RISING_COMMENT_WEIGHT = 0.5
RISING_DECAY_EXPONENT = 0.8

COMMUNITY_POST_WEIGHT = 2.0
COMMUNITY_COMMENT_WEIGHT = 0.5
COMMUNITY_DECAY_EXPONENT = 0.5


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def hot_score(upvotes: int, downvotes: int, age_hours: float) -> float:
    """Reddit-style hot score: logarithmic net score plus a linear time term.

    Args:
        upvotes: Number of upvotes.
        downvotes: Number of downvotes.
        age_hours: Time term in hours. Larger values score higher.

    Returns:
        The score rounded to six decimal places.
    """
    score = upvotes - downvotes
    order = math.log10(max(abs(score), 1))
    seconds = age_hours * 3600
    raw = _sign(score) * order + seconds / HOT_DECAY_SECONDS
    return round(raw * HOT_PRECISION) / HOT_PRECISION


def hot_rank(upvotes: int, downvotes: int, created_at: datetime) -> float:
    """Ordering key for the hot feed.

    Evaluates :func:`hot_score` with the item's hours since ``HOT_EPOCH`` so
    newer items carry a larger time term than older ones with the same votes.
    """
    return hot_score(upvotes, downvotes, hours_between(HOT_EPOCH, created_at))


def controversy_score(upvotes: int, downvotes: int) -> float:
    """Score that peaks when votes are both numerous and evenly split."""
    total = upvotes + downvotes
    if total == 0:
        return 0.0
    magnitude = math.sqrt(total)
    balance = min(upvotes, downvotes) / max(upvotes, downvotes)
    return magnitude * balance


def trending_score(score: int, age_hours: float, comment_count: int) -> float:
    """Engagement velocity score: positive net score plus a comment boost, decayed by age."""
    age_hours = max(age_hours, 0.0)
    base = max(score, 0)
    comment_boost = math.log10(comment_count + 1) * TRENDING_COMMENT_WEIGHT
    decay = (age_hours + TRENDING_AGE_OFFSET_HOURS) ** -TRENDING_DECAY_EXPONENT
    return (base + comment_boost) * decay


def rising_score(score: int, age_hours: float, comment_count: int) -> float:
    """Score for young items gaining traction quickly."""
    age_hours = max(age_hours, 0.0)
    return (score + comment_count * RISING_COMMENT_WEIGHT) / (age_hours + 1) ** RISING_DECAY_EXPONENT


def vote_ratio(upvotes: int, downvotes: int) -> float:
    """Share of upvotes among all votes; 0.5 when nobody has voted."""
    total = upvotes + downvotes
    if total == 0:
        return 0.5
    return upvotes / total


def community_trending_score(
    post_count: int,
    total_score: int,
    total_comments: int,
    oldest_age_hours: float,
) -> float:
    """Score a community by its recent activity, decayed by the age of its oldest recent post."""
    oldest_age_hours = max(oldest_age_hours, 0.0)
    activity = (
        post_count * COMMUNITY_POST_WEIGHT
        + total_score
        + total_comments * COMMUNITY_COMMENT_WEIGHT
    )
    return activity / (oldest_age_hours + 1) ** COMMUNITY_DECAY_EXPONENT


# SQL renditions of the ordering formulas. They mirror the functions above over
# column expressions so the database can order and paginate a feed; only the
# six-decimal rounding of the hot score is left out.


def _as_float(expr):
    return cast(expr, Float)


def _age_hours_expr(created_at, now: datetime):
    age = (as_utc(now).timestamp() - epoch_seconds(created_at)) / 3600.0
    return case((age < 0, 0.0), else_=age)


def hot_rank_expr(upvotes, downvotes, created_at):
    """SQL expression equivalent to :func:`hot_rank`."""
    score = upvotes - downvotes
    magnitude = case((score > 1, score), (score < -1, -score), else_=1)
    order = func.log10(_as_float(magnitude), type_=Float)
    sign = case((score > 0, 1.0), (score < 0, -1.0), else_=0.0)
    seconds = epoch_seconds(created_at) - HOT_EPOCH.timestamp()
    return sign * order + seconds / HOT_DECAY_SECONDS


def controversy_expr(upvotes, downvotes):
    """SQL expression equivalent to :func:`controversy_score`."""
    low = case((upvotes < downvotes, upvotes), else_=downvotes)
    high = case((upvotes < downvotes, downvotes), else_=upvotes)
    magnitude = func.sqrt(_as_float(upvotes + downvotes), type_=Float)
    return case(
        (high == 0, 0.0),
        else_=magnitude * _as_float(low) / _as_float(high),
    )


def trending_expr(score, comment_count, created_at, now: datetime):
    """SQL expression equivalent to :func:`trending_score` at ``now``."""
    base = case((score > 0, score), else_=0)
    comment_boost = (
        func.log10(_as_float(comment_count + 1), type_=Float) * TRENDING_COMMENT_WEIGHT
    )
    decay = func.power(
        _age_hours_expr(created_at, now) + TRENDING_AGE_OFFSET_HOURS,
        -TRENDING_DECAY_EXPONENT,
        type_=Float,
    )
    return (_as_float(base) + comment_boost) * decay


def rising_expr(score, comment_count, created_at, now: datetime):
    """SQL expression equivalent to :func:`rising_score` at ``now``."""
    momentum = _as_float(score) + _as_float(comment_count) * RISING_COMMENT_WEIGHT
    damping = func.power(
        _age_hours_expr(created_at, now) + 1.0, RISING_DECAY_EXPONENT, type_=Float
    )
    return momentum / damping
