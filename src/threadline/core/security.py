"""Bearer token verification against the identity provider's shared secret."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from threadline.core.errors import UnauthorizedError
from threadline.core.settings import settings


@dataclass(frozen=True)
class Identity:
    """Verified caller identity."""

    id: str
    email: str | None


def verify_token(token: str) -> Identity:
    """Verify an HS256 token and return the identity it asserts.

    The subject claim is the user id. The email is read from the provider's
    ``user_metadata`` block when present, falling back to a top-level
    ``email`` claim.

    Raises:
        UnauthorizedError: If the signature, expiry or audience check fails, or
            the token carries no subject.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        raise UnauthorizedError("Invalid token") from err

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token")

    metadata = payload.get("user_metadata") or {}
    email = metadata.get("email") or payload.get("email")
    return Identity(id=str(subject), email=email)


def create_access_token(user_id: str, email: str | None = None, **claims: Any) -> str:
    """Mint a token the way the identity provider does; used by tooling and tests."""
    payload: dict[str, Any] = {"sub": user_id, "user_metadata": {"email": email}}
    if settings.jwt_audience is not None:
        payload["aud"] = settings.jwt_audience
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
