# tests/test_communities.py
"""Tests for community endpoints."""

import pytest
from fastapi import status

from threadline.services.communities import is_valid_community_name


class TestCommunityNameRules:
    @pytest.mark.parametrize("name", ["abc", "Python_3", "a" * 20, "_under_"])
    def test_valid(self, name):
        assert is_valid_community_name(name)

    @pytest.mark.parametrize(
        "name", ["", "ab", "a" * 21, "___", "u/abc", "U/abc", "has space", "dash-ed", "émoji"]
    )
    def test_invalid(self, name):
        assert not is_valid_community_name(name)


def _create(client, headers, name, display_name="Display"):
    return client.post(
        "/api/communities",
        json={"name": name, "display_name": display_name, "description": "About"},
        headers=headers,
    )


def test_create_community(client, auth_token) -> None:
    response = _create(client, auth_token, "Gardening", "Gardening Club")
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert data["name"] == "gardening"
    assert data["display_name"] == "Gardening Club"
    assert data["created_by"] == "user-alice"
    assert data["member_count"] == 1
    assert data["post_count"] == 0

    mine = client.get("/api/communities/my-communities", headers=auth_token).json()
    assert [(item["name"], item["role"]) for item in mine] == [("gardening", "admin")]


def test_duplicate_community_name(client, auth_token, other_auth_token) -> None:
    _create(client, auth_token, "books")
    response = _create(client, other_auth_token, "BOOKS")
    assert response.status_code == status.HTTP_409_CONFLICT


def test_invalid_community_name(client, auth_token) -> None:
    assert _create(client, auth_token, "no spaces allowed").status_code == 400
    assert _create(client, auth_token, "u/sneaky").status_code == 400


def test_list_communities_by_member_count(client, make_community, auth_headers) -> None:
    make_community("quiet")
    make_community("busy")
    for member in ("m1", "m2"):
        client.post(
            "/api/communities/busy/membership", json={"action": "join"}, headers=auth_headers(member)
        )

    names = [item["name"] for item in client.get("/api/communities").json()]
    assert names[0] == "busy"
    assert set(names) == {"busy", "quiet"}


def test_details_and_membership(client, community, other_auth_token) -> None:
    anonymous = client.get("/api/communities/details/general")
    assert anonymous.status_code == status.HTTP_200_OK
    assert anonymous.json()["is_member"] is False
    assert anonymous.json()["member_count"] == 1

    url = "/api/communities/general/membership"
    joined = client.post(url, json={"action": "join"}, headers=other_auth_token)
    assert joined.status_code == status.HTTP_200_OK
    assert joined.json() == {"community_name": "general", "action": "join", "member_count": 2}

    details = client.get("/api/communities/details/General", headers=other_auth_token).json()
    assert details["is_member"] is True

    again = client.post(url, json={"action": "join"}, headers=other_auth_token)
    assert again.status_code == status.HTTP_400_BAD_REQUEST
    assert again.json()["detail"] == "Already a member"

    left = client.post(url, json={"action": "leave"}, headers=other_auth_token)
    assert left.json()["member_count"] == 1

    not_member = client.post(url, json={"action": "leave"}, headers=other_auth_token)
    assert not_member.status_code == status.HTTP_400_BAD_REQUEST
    assert not_member.json()["detail"] == "Not a member"


def test_details_with_bad_token_is_anonymous(client, community) -> None:
    response = client.get(
        "/api/communities/details/general", headers={"Authorization": "Bearer garbage"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_member"] is False


def test_details_for_unknown_community(client) -> None:
    assert client.get("/api/communities/details/nope").status_code == status.HTTP_404_NOT_FOUND


def test_membership_invalid_action(client, community, auth_token) -> None:
    response = client.post(
        "/api/communities/general/membership", json={"action": "subscribe"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_membership_unknown_community(client, auth_token) -> None:
    response = client.post(
        "/api/communities/nope/membership", json={"action": "join"}, headers=auth_token
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_my_communities_requires_authentication(client) -> None:
    assert client.get("/api/communities/my-communities").status_code == 401


def test_check_community_name(client, community) -> None:
    url = "/api/communities/check-community-name"

    free = client.get(url, params={"community-name": "fresh_name"})
    assert free.status_code == status.HTTP_200_OK
    assert free.json() == {"name": "fresh_name", "is_valid": True}

    taken = client.get(url, params={"community-name": "General"})
    assert taken.json()["is_valid"] is False

    for bad in ("__", "u/general", "x"):
        assert client.get(url, params={"community-name": bad}).status_code == 400
    assert client.get(url).status_code == status.HTTP_400_BAD_REQUEST


def test_update_community(client, community, auth_token, other_auth_token) -> None:
    url = "/api/communities/general"

    forbidden = client.patch(url, json={"display_name": "Mine now"}, headers=other_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    response = client.patch(
        url, json={"display_name": "General Talk", "is_private": True}, headers=auth_token
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["display_name"] == "General Talk"
    assert response.json()["is_private"] is True
    assert response.json()["description"] is None

    missing = client.patch("/api/communities/nope", json={"is_private": True}, headers=auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND
