"""Community management: creation, membership and admin updates."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from threadline.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from threadline.db.time import utcnow
from threadline.db.transaction import unit_of_work
from threadline.models import Community, CommunityMembership
from threadline.models.community import ROLE_ADMIN, ROLE_MEMBER
from threadline.schemas.community import CommunityCreate, CommunityUpdate
from threadline.services.counters import recount_community

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")


def is_valid_community_name(name: str | None) -> bool:
    """Return True for 3-20 word characters that are not all underscores.

    Names starting with the ``u/`` user prefix are rejected as well.
    """
    if not name:
        return False
    if name.lower().startswith("u/"):
        return False
    if not _NAME_PATTERN.match(name):
        return False
    return name.strip("_") != ""


class CommunityService:
    """Reads and writes communities and their memberships."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self.clock = clock

    def list_all(self) -> list[Community]:
        stmt = select(Community).order_by(Community.member_count.desc(), Community.created_at.asc())
        return list(self.db.scalars(stmt))

    def get_by_name(self, name: str) -> Community:
        community = self.db.scalars(
            select(Community).where(Community.name == name.strip().lower())
        ).first()
        if community is None:
            raise NotFoundError("Community")
        return community

    def membership(self, community: Community, user_id: str) -> CommunityMembership | None:
        stmt = select(CommunityMembership).where(
            CommunityMembership.community_id == community.id,
            CommunityMembership.user_id == user_id,
        )
        return self.db.scalars(stmt).first()

    def joined_by(self, user_id: str) -> list[tuple[Community, CommunityMembership]]:
        """Return the caller's communities with their membership rows, newest first."""
        stmt = (
            select(Community, CommunityMembership)
            .join(CommunityMembership, CommunityMembership.community_id == Community.id)
            .where(CommunityMembership.user_id == user_id)
            .order_by(CommunityMembership.joined_at.desc())
        )
        return [(row[0], row[1]) for row in self.db.execute(stmt)]

    def is_name_available(self, name: str) -> bool:
        """Check a candidate name; malformed names raise instead of returning False.

        Raises:
            InvalidArgumentError: If the name is not well formed.
        """
        if not is_valid_community_name(name):
            raise InvalidArgumentError("Invalid community name format")
        existing = self.db.scalars(
            select(Community.id).where(Community.name == name.lower())
        ).first()
        return existing is None

    def create(self, data: CommunityCreate, creator_id: str) -> Community:
        """Create a community and make its creator an admin member.

        Raises:
            InvalidArgumentError: If the name is malformed.
            ConflictError: If the name is taken.
        """
        if not is_valid_community_name(data.name):
            raise InvalidArgumentError("Invalid community name format")
        name = data.name.lower()

        with unit_of_work(self.db):
            taken = self.db.scalars(select(Community.id).where(Community.name == name)).first()
            if taken is not None:
                raise ConflictError("Community name already exists")

            now = self.clock()
            community = Community(
                name=name,
                display_name=data.display_name.strip(),
                description=data.description,
                created_by=creator_id,
                created_at=now,
                member_count=0,
                post_count=0,
                is_private=False,
            )
            self.db.add(community)
            self.db.flush()
            self.db.add(
                CommunityMembership(
                    community_id=community.id,
                    user_id=creator_id,
                    joined_at=now,
                    role=ROLE_ADMIN,
                )
            )
            recount_community(self.db, community)

        logger.info("Community %s created by %s", name, creator_id)
        return community

    def join(self, name: str, user_id: str) -> Community:
        with unit_of_work(self.db):
            community = self.get_by_name(name)
            if self.membership(community, user_id) is not None:
                raise InvalidArgumentError("Already a member")
            self.db.add(
                CommunityMembership(
                    community_id=community.id,
                    user_id=user_id,
                    joined_at=self.clock(),
                    role=ROLE_MEMBER,
                )
            )
            recount_community(self.db, community)
        return community

    def leave(self, name: str, user_id: str) -> Community:
        with unit_of_work(self.db):
            community = self.get_by_name(name)
            membership = self.membership(community, user_id)
            if membership is None:
                raise InvalidArgumentError("Not a member")
            self.db.delete(membership)
            recount_community(self.db, community)
        return community

    def update_membership(self, name: str, user_id: str, action: str) -> Community:
        """Dispatch a ``join`` or ``leave`` request."""
        if action == "join":
            return self.join(name, user_id)
        if action == "leave":
            return self.leave(name, user_id)
        raise InvalidArgumentError("Invalid action")

    def update(self, name: str, user_id: str, data: CommunityUpdate) -> Community:
        """Apply an admin's changes to a community.

        Raises:
            NotFoundError: If the community does not exist.
            ForbiddenError: If the caller is not an admin of it.
        """
        with unit_of_work(self.db):
            community = self.get_by_name(name)
            membership = self.membership(community, user_id)
            if membership is None or membership.role != ROLE_ADMIN:
                raise ForbiddenError("No permission to edit this community")

            changes = data.model_dump(exclude_unset=True)
            for field in ("display_name", "description", "is_private"):
                if field in changes and changes[field] is not None:
                    setattr(community, field, changes[field])
        logger.info("Community %s updated by %s", community.name, user_id)
        return community
