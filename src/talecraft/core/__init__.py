"""Core utilities and configuration for TaleCraft.

This module contains:
- Configuration and settings management
- Error taxonomy
- Security utilities (password hashing, JWT tokens)
"""
from .config import Settings, get_settings
from .errors import (
    AppError,
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
    UnexpectedError,
    status_for,
)
from .security import (
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenPayload,
    TokenType,
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "AppError",
    "ErrorKind",
    "UnauthenticatedError",
    "InvalidInputError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "UnexpectedError",
    "status_for",
    # Security - Password
    "hash_password",
    "verify_password",
    # Security - JWT
    "TokenType",
    "TokenPayload",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "create_access_token",
    "create_refresh_token",
    "verify_token",
]
