"""
Tests for session token issuing and verification.
"""

from __future__ import annotations

import base64
import json
from datetime import timedelta

import jwt
import pytest

from learnonauts.config import ErrorCode, TokenError

from .issuer import TokenService

SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=SECRET)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def test_issue_and_verify_roundtrip(tokens: TokenService) -> None:
    """A freshly issued token verifies to the same identity."""
    claims = tokens.verify(tokens.issue("user_1", "ada@example.com"))

    assert claims.user_id == "user_1"
    assert claims.email == "ada@example.com"


def test_token_valid_for_thirty_days(tokens: TokenService) -> None:
    """Default validity window is 30 days."""
    claims = tokens.verify(tokens.issue("user_1", "ada@example.com"))

    assert claims.expires_at - claims.issued_at == timedelta(days=30)


def test_expired_token_rejected() -> None:
    """A token past its expiry fails verification."""
    expired = TokenService(secret=SECRET, ttl=timedelta(seconds=-5))
    token = expired.issue("user_1", "ada@example.com")

    with pytest.raises(TokenError) as exc:
        TokenService(secret=SECRET).verify(token)
    assert exc.value.code == ErrorCode.SECURITY_FORBIDDEN


def test_token_signed_with_other_secret_rejected(tokens: TokenService) -> None:
    """A token from another signer fails the same way as an expired one."""
    foreign = TokenService(secret="another-secret-that-is-long-enough").issue(
        "user_1", "ada@example.com"
    )

    with pytest.raises(TokenError) as exc:
        tokens.verify(foreign)
    assert exc.value.code == ErrorCode.SECURITY_FORBIDDEN


def test_tampered_payload_rejected(tokens: TokenService) -> None:
    """Swapping the payload invalidates the signature."""
    header, _payload, signature = tokens.issue("user_1", "ada@example.com").split(".")
    forged_payload = _b64({"id": "admin", "email": "root@example.com", "iat": 1, "exp": 9999999999})

    with pytest.raises(TokenError):
        tokens.verify(f"{header}.{forged_payload}.{signature}")


def test_garbage_token_rejected(tokens: TokenService) -> None:
    with pytest.raises(TokenError):
        tokens.verify("not-a-jwt")


def test_token_without_identity_claims_rejected(tokens: TokenService) -> None:
    """Correctly signed tokens still need id and email."""
    token = jwt.encode({"iat": 1, "exp": 9999999999}, SECRET, algorithm="HS256")

    with pytest.raises(TokenError):
        tokens.verify(token)


def test_empty_secret_refused() -> None:
    with pytest.raises(ValueError):
        TokenService(secret="")
