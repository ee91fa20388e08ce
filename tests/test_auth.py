# tests/test_auth.py
"""Tests for bearer token verification and identity mirroring."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from jose import jwt

from threadline.core.errors import UnauthorizedError
from threadline.core.security import create_access_token, verify_token
from threadline.core.settings import settings
from threadline.models import User


class TestVerifyToken:
    def test_identity_from_provider_claims(self):
        identity = verify_token(create_access_token("abc", "abc@example.com"))
        assert identity.id == "abc"
        assert identity.email == "abc@example.com"

    def test_top_level_email_claim(self):
        token = jwt.encode(
            {"sub": "abc", "email": "top@example.com"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert verify_token(token).email == "top@example.com"

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "abc"}, "not-the-secret", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            verify_token(token)

    def test_missing_subject(self):
        token = jwt.encode({"email": "x@example.com"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            verify_token(token)

    def test_expired(self):
        expired = int((datetime.now(UTC) - timedelta(hours=1)).timestamp())
        with pytest.raises(UnauthorizedError):
            verify_token(create_access_token("abc", exp=expired))


def test_init_user_mirrors_identity(client, db_session, auth_headers) -> None:
    headers = auth_headers("new-user", "new@example.com")

    response = client.post("/api/auth/init-user", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == "new-user"
    assert response.json()["email"] == "new@example.com"
    assert db_session.get(User, "new-user") is not None

    again = client.post("/api/auth/init-user", headers=headers)
    assert again.status_code == status.HTTP_200_OK
    assert again.json() == response.json()


def test_email_change_is_mirrored(client, test_user, auth_headers) -> None:
    response = client.get("/api/auth/me", headers=auth_headers(test_user.id, "alice@new.example"))
    assert response.json()["email"] == "alice@new.example"


def test_missing_authorization_header(client) -> None:
    response = client.post("/api/auth/init-user")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Missing or invalid authorization header"


def test_invalid_token(client) -> None:
    response = client.post("/api/auth/init-user", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid token"
    assert response.headers["www-authenticate"] == "Bearer"
