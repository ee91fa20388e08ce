# src/threadline/api/v1/endpoints/auth.py
"""Authentication endpoints.

Tokens are issued by the identity provider; this API only verifies them and
keeps a local mirror of each caller.
"""

from fastapi import APIRouter

from threadline.models import User
from threadline.schemas.user import UserResponse

from ..dependencies import CurrentUserDep

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/init-user", response_model=UserResponse)
def init_user(current_user: CurrentUserDep) -> User:
    """Make sure the caller has a local user row and return it."""
    return current_user


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: CurrentUserDep) -> User:
    """Return the caller's local user row."""
    return current_user
