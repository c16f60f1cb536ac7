# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for JWT token issuing and validation.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from services.auth import AuthService, TokenValidationError, generate_key_pair


@pytest.fixture(scope="module")
def key_pair():
    return generate_key_pair()


@pytest.fixture
def auth_service(key_pair):
    private_key, public_key = key_pair
    return AuthService(private_key=private_key, public_key=public_key)


class TestAuthService:
    """Test RS256 access tokens."""

    def test_issue_and_validate(self, auth_service):
        """Test that issued tokens validate and carry the caller's claims."""
        token = auth_service.generate_access_token(
            "user-1", ["report:read"], name="Sister Secretary", congregation_id="c1"
        )

        payload = auth_service.validate_token(token["access_token"])

        assert token["token_type"] == "Bearer"
        assert payload["sub"] == "user-1"
        assert payload["name"] == "Sister Secretary"
        assert payload["congregation_id"] == "c1"
        assert payload["permissions"] == ["report:read"]

    def test_expired_token(self, auth_service, key_pair):
        """Test that expired tokens are rejected."""
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"sub": "user-1", "type": "access", "iat": past, "exp": past + timedelta(minutes=5)},
            key_pair[0],
            algorithm="RS256"
        )

        with pytest.raises(TokenValidationError, match="expired"):
            auth_service.validate_token(token)

    def test_wrong_token_type(self, auth_service, key_pair):
        """Test that non-access tokens are rejected."""
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "user-1", "type": "refresh", "iat": now, "exp": now + timedelta(minutes=5)},
            key_pair[0],
            algorithm="RS256"
        )

        with pytest.raises(TokenValidationError, match="token type"):
            auth_service.validate_token(token)

    def test_foreign_signature(self, auth_service):
        """Test that tokens signed with another key are rejected."""
        other = AuthService(*generate_key_pair())
        token = other.generate_access_token("user-1", ["report:read"])["access_token"]

        with pytest.raises(TokenValidationError, match="Invalid token"):
            auth_service.validate_token(token)

    def test_generated_development_keys_match(self, monkeypatch):
        """Test that a service without configured keys verifies its own tokens."""
        monkeypatch.delenv("JWT_PRIVATE_KEY", raising=False)
        monkeypatch.delenv("JWT_PUBLIC_KEY", raising=False)
        service = AuthService()

        token = service.generate_access_token("user-1", [])["access_token"]

        assert service.validate_token(token)["sub"] == "user-1"
