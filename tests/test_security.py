"""Tests for password hashing and JWT tokens."""

from datetime import timedelta

import pytest
from jose import jwt

from talecraft.core.config import get_settings
from talecraft.core.security import (
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)


class TestPasswords:
    def test_hash_is_salted_and_verifiable(self) -> None:
        first = hash_password("correct horse")
        second = hash_password("correct horse")
        assert first != second
        assert verify_password("correct horse", first)
        assert verify_password("correct horse", second)

    def test_wrong_password_rejected(self) -> None:
        digest = hash_password("correct horse")
        assert not verify_password("battery staple", digest)

    def test_malformed_digest_rejected(self) -> None:
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestTokens:
    def test_access_token_round_trip(self) -> None:
        token = create_access_token(7, "seven@example.com")
        payload = verify_token(token, TokenType.ACCESS)
        assert payload.user_id == 7
        assert payload.email == "seven@example.com"
        assert payload.token_type is TokenType.ACCESS

    def test_refresh_token_round_trip(self) -> None:
        token = create_refresh_token(7, "seven@example.com")
        assert verify_token(token, TokenType.REFRESH).user_id == 7

    def test_access_token_default_expiry_is_short(self) -> None:
        token = create_access_token(7, "seven@example.com")
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] - claims["iat"] == get_settings().access_token_expire_minutes * 60

    def test_key_classes_are_not_interchangeable(self) -> None:
        """An access token is not a refresh token and vice versa."""
        access = create_access_token(7, "seven@example.com")
        refresh = create_refresh_token(7, "seven@example.com")
        with pytest.raises(TokenInvalidError):
            verify_token(access, TokenType.REFRESH)
        with pytest.raises(TokenInvalidError):
            verify_token(refresh, TokenType.ACCESS)

    def test_expired_token(self) -> None:
        token = create_access_token(7, "seven@example.com", expires_delta=timedelta(seconds=-1))
        with pytest.raises(TokenExpiredError):
            verify_token(token, TokenType.ACCESS)

    def test_tampered_token(self) -> None:
        token = create_access_token(7, "seven@example.com")
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with pytest.raises(TokenInvalidError):
            verify_token(forged, TokenType.ACCESS)

    def test_garbage_token(self) -> None:
        with pytest.raises(TokenInvalidError):
            verify_token("not.a.jwt", TokenType.ACCESS)

    def test_non_numeric_subject(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": "alice", "type": "access", "exp": 9999999999},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(TokenInvalidError):
            verify_token(token, TokenType.ACCESS)
