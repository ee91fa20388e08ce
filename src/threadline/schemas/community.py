# src/threadline/schemas/community.py
"""Community-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CommunityCreate(BaseModel):
    """Schema for creating a new community."""

    name: str
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)


class CommunityUpdate(BaseModel):
    """Fields a community admin may change; omitted fields are left alone."""

    display_name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    is_private: bool | None = None


class MembershipRequest(BaseModel):
    action: Literal["join", "leave"]


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: str
    name: str
    display_name: str
    description: str | None
    created_by: str
    created_at: datetime
    member_count: int
    post_count: int
    is_private: bool

    model_config = ConfigDict(from_attributes=True)


class CommunityDetails(CommunityResponse):
    is_member: bool = False


class MyCommunity(CommunityResponse):
    role: str
    joined_at: datetime


class MembershipResponse(BaseModel):
    community_name: str
    action: str
    member_count: int


class NameCheckResponse(BaseModel):
    """Availability of a well-formed community name."""

    name: str
    is_valid: bool
