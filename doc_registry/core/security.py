"""
Security Utilities

JWT token handling and random token generation.

Room tokens act as capability tokens for the sync transport, so they are
drawn from the `secrets` CSPRNG, never from `random`.
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from doc_registry.config import get_settings

# Lowercase letters and digits that are hard to confuse with one another.
# Excludes 0/O, 1/l/i, 7 and a/g/o/s/u/z/b/q.
SAFE_ALPHABET = "cdefhjkmnprtvwxy2345689"


def generate_token(length: int = 16) -> str:
    """
    Generate a random token from the safe alphabet.

    Args:
        length: Number of characters to draw

    Returns:
        Token string of exactly `length` characters
    """
    return "".join(secrets.choice(SAFE_ALPHABET) for _ in range(length))


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token (`sub` is the username)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()

    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(
            UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update(
        {
            "exp": expire,
            "type": "access",
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
        }
    )

    return jwt.encode(
        to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string to decode
        expected_type: If provided, validates that token type matches (e.g., "access")

    Returns:
        Decoded token payload or None if invalid/expired/wrong type
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )

        if expected_type is not None and payload.get("type") != expected_type:
            return None

        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
