"""Mirroring of verified identities into the local ``users`` table."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from threadline.core.security import Identity
from threadline.db.time import utcnow
from threadline.db.transaction import unit_of_work
from threadline.models import User

logger = logging.getLogger(__name__)


def ensure_user(db: Session, identity: Identity) -> User:
    """Return the local user for ``identity``, creating it on first use.

    A changed email on the token is copied onto the existing row.
    """
    user = db.get(User, identity.id)
    if user is not None:
        if identity.email and user.email != identity.email:
            with unit_of_work(db):
                user.email = identity.email
        return user

    user = User(id=identity.id, email=identity.email, created_at=utcnow())
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request mirrored the same identity first.
        db.rollback()
        existing = db.get(User, identity.id)
        if existing is None:
            raise
        return existing

    logger.info("Mirrored new user %s", identity.id)
    return user
