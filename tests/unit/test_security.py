"""
Unit tests for security utilities and principal resolution.

Tests JWT encoding/decoding and claim-to-principal mapping.
"""

from datetime import timedelta

import jwt
import pytest

from doc_registry.config import get_settings
from doc_registry.core.auth import principal_from_claims
from doc_registry.core.security import create_access_token, decode_token
from doc_registry.models.enums import UserRole


@pytest.mark.unit
class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_create_and_decode_access_token(self):
        """Test access token creation and decoding."""
        token = create_access_token({"sub": "alice", "name": "Alice"})

        assert isinstance(token, str)
        assert len(token) > 0

        payload = decode_token(token)
        assert payload is not None
        assert payload["sub"] == "alice"
        assert payload["type"] == "access"

    def test_expected_type_mismatch(self):
        """Test that a token of another type is rejected."""
        token = create_access_token({"sub": "alice"})
        assert decode_token(token, expected_type="refresh") is None
        assert decode_token(token, expected_type="access") is not None

    def test_expired_token(self):
        """Test that expired tokens decode to None."""
        token = create_access_token({"sub": "alice"}, expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_invalid_token(self):
        """Test that garbage does not decode."""
        assert decode_token("not-a-jwt") is None

    def test_wrong_secret(self):
        """Test that tokens signed with another key are rejected."""
        settings = get_settings()
        token = jwt.encode(
            {"sub": "alice", "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
            "another-secret-key-that-is-long-enough",
            algorithm=settings.algorithm,
        )
        assert decode_token(token) is None

    def test_wrong_audience(self):
        """Test that the audience claim is enforced."""
        settings = get_settings()
        token = jwt.encode(
            {"sub": "alice", "iss": settings.jwt_issuer, "aud": "someone-else"},
            settings.secret_key,
            algorithm=settings.algorithm,
        )
        assert decode_token(token) is None


@pytest.mark.unit
class TestPrincipalFromClaims:
    """Tests for principal_from_claims."""

    def test_member_by_default(self):
        principal = principal_from_claims({"sub": "alice"})
        assert principal is not None
        assert principal.username == "alice"
        assert principal.role == UserRole.MEMBER
        assert not principal.is_admin

    def test_admin_role_claim(self):
        principal = principal_from_claims({"sub": "alice", "role": "admin"})
        assert principal.is_admin

    def test_unknown_role_falls_back_to_member(self):
        principal = principal_from_claims({"sub": "alice", "role": "superhero"})
        assert principal.role == UserRole.MEMBER

    def test_configured_admin_username(self):
        # DOC_REGISTRY_ADMIN_USERNAMES=root in the test environment
        principal = principal_from_claims({"sub": "root"})
        assert principal.is_admin

    @pytest.mark.parametrize("claims", [{}, {"sub": ""}, {"sub": 42}])
    def test_missing_username(self, claims):
        assert principal_from_claims(claims) is None
