# src/threadline/api/v1/endpoints/communities.py
"""Community-related endpoints for the Threadline API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from threadline.models import Community
from threadline.schemas.community import (
    CommunityCreate,
    CommunityDetails,
    CommunityResponse,
    CommunityUpdate,
    MembershipRequest,
    MembershipResponse,
    MyCommunity,
    NameCheckResponse,
)
from threadline.services.communities import CommunityService

from ..dependencies import ClockDep, CurrentUserDep, OptionalUserDep, SessionDep

router = APIRouter(prefix="/communities", tags=["communities"])


@router.get("", response_model=list[CommunityResponse])
def list_communities(db: SessionDep) -> list[Community]:
    """List all communities, largest first."""
    return CommunityService(db).list_all()


@router.get("/details/{name}", response_model=CommunityDetails)
def get_community_details(
    name: str,
    db: SessionDep,
    current_user: OptionalUserDep,
) -> CommunityDetails:
    """Get a community by name; signed-in callers also learn whether they belong to it."""
    service = CommunityService(db)
    community = service.get_by_name(name)
    is_member = (
        current_user is not None
        and service.membership(community, current_user.id) is not None
    )
    details = CommunityResponse.model_validate(community).model_dump()
    return CommunityDetails(**details, is_member=is_member)


@router.get("/my-communities", response_model=list[MyCommunity])
def list_my_communities(current_user: CurrentUserDep, db: SessionDep) -> list[MyCommunity]:
    """List the communities the caller has joined."""
    joined = CommunityService(db).joined_by(current_user.id)
    return [
        MyCommunity(
            **CommunityResponse.model_validate(community).model_dump(),
            role=membership.role,
            joined_at=membership.joined_at,
        )
        for community, membership in joined
    ]


@router.get("/check-community-name", response_model=NameCheckResponse)
def check_community_name(
    db: SessionDep,
    name: Annotated[str, Query(alias="community-name")] = "",
) -> NameCheckResponse:
    """Report whether a well-formed community name is still free."""
    available = CommunityService(db).is_name_available(name)
    return NameCheckResponse(name=name, is_valid=available)


@router.post("", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
def create_community(
    community_data: CommunityCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> Community:
    """Create a new community with the caller as its admin."""
    return CommunityService(db, clock).create(community_data, current_user.id)


@router.post("/{name}/membership", response_model=MembershipResponse)
def update_membership(
    name: str,
    membership_data: MembershipRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    clock: ClockDep,
) -> MembershipResponse:
    """Join or leave a community."""
    community = CommunityService(db, clock).update_membership(
        name, current_user.id, membership_data.action
    )
    return MembershipResponse(
        community_name=community.name,
        action=membership_data.action,
        member_count=community.member_count,
    )


@router.patch("/{name}", response_model=CommunityResponse)
def update_community(
    name: str,
    update: CommunityUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Community:
    """Update a community's metadata; admins only."""
    return CommunityService(db).update(name, current_user.id, update)
