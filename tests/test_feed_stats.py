# tests/test_feed_stats.py
"""Tests for feed statistics and trending communities."""

import pytest
from fastapi import status

from threadline.services.ranking import community_trending_score


def test_feed_stats(client, make_post) -> None:
    make_post("Liked", hours_old=1, upvotes=4, comments=2)
    make_post("Disliked", hours_old=2, downvotes=2)
    make_post("Picture", hours_old=3, post_type="image")
    make_post("Too old", hours_old=30, upvotes=9)
    make_post("Deleted", hours_old=1, upvotes=9, deleted=True)

    response = client.get("/api/feed/stats")
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["time_frame"] == "24h"
    assert data["community"] == "all"
    assert data["statistics"] == {
        "total_posts": 3,
        "avg_score": pytest.approx(2 / 3),
        "max_score": 4,
        "total_comments": 2,
        "avg_comments": pytest.approx(2 / 3),
        "posts_with_positive_score": 1,
        "posts_with_comments": 1,
        "post_types": ["image", "text"],
    }


def test_feed_stats_time_frames(client, make_post) -> None:
    make_post("Recent", hours_old=0.5)
    make_post("Three days", hours_old=72)

    hour = client.get("/api/feed/stats", params={"timeFrame": "1h"}).json()
    assert hour["statistics"]["total_posts"] == 1

    week = client.get("/api/feed/stats", params={"timeFrame": "7d"}).json()
    assert week["statistics"]["total_posts"] == 2

    # Only 1h, 6h, 24h and 7d are offered here.
    month = client.get("/api/feed/stats", params={"timeFrame": "30d"}).json()
    assert month["time_frame"] == "24h"
    assert month["statistics"]["total_posts"] == 1


def test_feed_stats_empty(client) -> None:
    statistics = client.get("/api/feed/stats").json()["statistics"]
    assert statistics["total_posts"] == 0
    assert statistics["avg_score"] is None
    assert statistics["max_score"] is None
    assert statistics["post_types"] == []


def test_feed_stats_for_community(client, make_post, make_community) -> None:
    art = make_community("art")
    make_post("Sketch", in_community=art, upvotes=1)
    make_post("General chat")

    data = client.get("/api/feed/stats", params={"community": "art"}).json()
    assert data["community"] == "art"
    assert data["statistics"]["total_posts"] == 1


def test_feed_stats_unknown_community(client) -> None:
    response = client.get("/api/feed/stats", params={"community": "nowhere"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_trending_communities(client, make_post, make_community) -> None:
    art = make_community("art", "Art")
    music = make_community("music", "Music")
    lonely = make_community("lonely")

    make_post("A1", in_community=art, hours_old=1, upvotes=3)
    make_post("A2", in_community=art, hours_old=3, upvotes=1, comments=2)
    make_post("M1", in_community=music, hours_old=1, upvotes=1)
    make_post("M2", in_community=music, hours_old=20)
    make_post("L1", in_community=lonely, hours_old=1, upvotes=50)

    data = client.get("/api/feed/trending").json()
    assert data["time_frame"] == "24h"

    ranked = data["trending_communities"]
    assert [item["community_name"] for item in ranked] == ["art", "music"]
    assert ranked[0] == {
        "community_name": "art",
        "community_display_name": "Art",
        "recent_posts": 2,
        "total_score": 4,
        "total_comments": 2,
        "avg_score": 2.0,
        "trending_score": pytest.approx(community_trending_score(2, 4, 2, 3.0)),
    }


def test_trending_limit_and_time_frame(client, make_post, make_community) -> None:
    for name in ("one", "two", "three"):
        target = make_community(name)
        make_post(f"{name} a", in_community=target, hours_old=2)
        make_post(f"{name} b", in_community=target, hours_old=3)

    assert len(client.get("/api/feed/trending", params={"limit": 0}).json()["trending_communities"]) == 1
    assert len(client.get("/api/feed/trending", params={"limit": 50}).json()["trending_communities"]) == 3

    hour = client.get("/api/feed/trending", params={"timeFrame": "1h"}).json()
    assert hour["trending_communities"] == []

    fallback = client.get("/api/feed/trending", params={"timeFrame": "7d"}).json()
    assert fallback["time_frame"] == "24h"
