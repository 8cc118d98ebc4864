"""Security utilities: password hashing and JWT tokens."""
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from .config import get_settings


class TokenType(str, Enum):
    """Key class a token is signed with."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Exception):
    """Base error for token verification failures."""


class TokenExpiredError(TokenError):
    """Token signature is valid but the token has expired."""


class TokenInvalidError(TokenError):
    """Token is malformed, tampered with, or of the wrong type."""


@dataclass(frozen=True)
class TokenPayload:
    """Verified token claims."""

    user_id: int
    email: str
    token_type: TokenType
    expires_at: datetime


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash
        rounds: bcrypt cost factor, defaults to ``settings.bcrypt_rounds``

    Returns:
        Hashed password string
    """
    # Bcrypt requires bytes and has 72-byte limit
    password_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Previously hashed password

    Returns:
        True if password matches, False otherwise
    """
    try:
        password_bytes = plain_password.encode("utf-8")[:72]
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except (ValueError, TypeError):
        return False


def _secret_for(token_type: TokenType) -> str:
    settings = get_settings()
    if token_type is TokenType.REFRESH:
        return settings.jwt_refresh_secret
    return settings.jwt_secret


def _create_token(
    user_id: int,
    email: str,
    token_type: TokenType,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(UTC)
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "type": token_type.value,
        "exp": now + expires_delta,
        "iat": now,
    }
    encoded: str = jwt.encode(
        to_encode,
        _secret_for(token_type),
        algorithm=get_settings().jwt_algorithm,
    )
    return encoded


def create_access_token(
    user_id: int,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived JWT access token.

    Args:
        user_id: The subject of the token
        email: Email claim carried alongside the subject
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=get_settings().access_token_expire_minutes)
    return _create_token(user_id, email, TokenType.ACCESS, expires_delta)


def create_refresh_token(
    user_id: int,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a long-lived JWT refresh token.

    Refresh tokens are signed with their own secret so an access token can
    never be replayed as a refresh token, and vice versa.
    """
    if expires_delta is None:
        expires_delta = timedelta(days=get_settings().refresh_token_expire_days)
    return _create_token(user_id, email, TokenType.REFRESH, expires_delta)


def verify_token(token: str, token_type: TokenType) -> TokenPayload:
    """Decode and validate a JWT of the given key class.

    Args:
        token: The JWT token string
        token_type: Which key class the token must belong to

    Returns:
        Verified token payload

    Raises:
        TokenExpiredError: If the token has expired
        TokenInvalidError: If the token is malformed or of the wrong type
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[get_settings().jwt_algorithm],
        )
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token expired") from e
    except JWTError as e:
        raise TokenInvalidError("Invalid token") from e

    if payload.get("type") != token_type.value:
        raise TokenInvalidError("Invalid token type")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise TokenInvalidError("Invalid token payload") from e

    return TokenPayload(
        user_id=user_id,
        email=payload.get("email", ""),
        token_type=token_type,
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
