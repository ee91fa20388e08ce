"""Shared API dependencies for authentication and common functionality."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from threadline.core.errors import UnauthorizedError
from threadline.core.security import verify_token
from threadline.db.session import get_db
from threadline.db.time import utcnow
from threadline.models import User
from threadline.services.identity import ensure_user

logger = logging.getLogger(__name__)

# Missing credentials are reported as 401 by get_current_user rather than by the scheme.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

Clock = Callable[[], datetime]


def get_clock() -> Clock:
    """Return the time source used for ages, cutoffs and timestamps."""
    return utcnow


ClockDep = Annotated[Clock, Depends(get_clock)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from the bearer token.

    The verified identity is mirrored into ``users`` on first use.

    Raises:
        UnauthorizedError: If the header is missing or the token is invalid.
    """
    if credentials is None:
        raise UnauthorizedError("Missing or invalid authorization header")
    try:
        identity = verify_token(credentials.credentials)
    except UnauthorizedError as exc:
        logger.info("Rejected bearer token: %s", exc.message)
        raise
    return ensure_user(db, identity)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Like :func:`get_current_user`, but anonymous callers get None."""
    if credentials is None:
        return None
    try:
        identity = verify_token(credentials.credentials)
    except UnauthorizedError:
        return None
    return ensure_user(db, identity)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
