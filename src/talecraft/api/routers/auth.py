"""Authentication router for login and registration.

Endpoints for user authentication, registration, and token management.
Access tokens travel in the JSON body; refresh tokens travel only in an
HTTP-only cookie.
"""

from fastapi import APIRouter, Request, Response, status
from pydantic import EmailStr, Field

from talecraft.api.deps import CurrentUser, Principal, Users
from talecraft.api.schemas import CamelModel, Envelope, UserResponse
from talecraft.core.config import get_settings
from talecraft.core.errors import NotFoundError, UnauthenticatedError
from talecraft.core.security import (
    TokenError,
    TokenType,
    create_access_token,
    create_refresh_token,
    verify_token,
)
from talecraft.models.user import User

router = APIRouter()


# =============================================================================
# Schemas
# =============================================================================


class RegisterRequest(CamelModel):
    """User registration request."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(CamelModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthData(CamelModel):
    """Authenticated user plus a fresh access token."""

    user: UserResponse
    access_token: str


class AccessTokenData(CamelModel):
    access_token: str


class UserData(CamelModel):
    user: UserResponse


# =============================================================================
# Cookie Helpers
# =============================================================================


def set_refresh_cookie(response: Response, user: User) -> None:
    """Issue a refresh token into the HTTP-only cookie."""
    settings = get_settings()
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=create_refresh_token(user.id, user.email),
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _auth_data(user: User) -> AuthData:
    return AuthData(
        user=UserResponse.model_validate(user),
        access_token=create_access_token(user.id, user.email),
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/register",
    response_model=Envelope[AuthData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    response: Response,
    users: Users,
) -> Envelope[AuthData]:
    """Register a new user.

    Raises:
        ConflictError: If the username or email is already registered
    """
    user = await users.register(request.username, request.email, request.password)
    set_refresh_cookie(response, user)
    return Envelope(data=_auth_data(user), message="Registration successful")


@router.post("/login", response_model=Envelope[AuthData], response_model_exclude_none=True)
async def login(
    request: LoginRequest,
    response: Response,
    users: Users,
) -> Envelope[AuthData]:
    """Login with email and password.

    Raises:
        UnauthenticatedError: If credentials are invalid
    """
    user = await users.authenticate(request.email, request.password)
    set_refresh_cookie(response, user)
    return Envelope(data=_auth_data(user), message="Login successful")


@router.post(
    "/refresh",
    response_model=Envelope[AccessTokenData],
    response_model_exclude_none=True,
)
async def refresh_token(
    request: Request,
    users: Users,
) -> Envelope[AccessTokenData]:
    """Issue a new access token from the refresh cookie.

    Raises:
        UnauthenticatedError: If the cookie is missing, invalid or expired,
            or its user no longer exists
    """
    refresh_cookie = request.cookies.get(get_settings().refresh_cookie_name)
    if not refresh_cookie:
        raise UnauthenticatedError("Refresh token not found")

    try:
        payload = verify_token(refresh_cookie, TokenType.REFRESH)
        user = await users.get_user(payload.user_id)
    except (TokenError, NotFoundError):
        raise UnauthenticatedError("Invalid or expired refresh token")

    return Envelope(
        data=AccessTokenData(access_token=create_access_token(user.id, user.email)),
        message="Token refreshed successfully",
    )


@router.post("/logout", response_model=Envelope[None], response_model_exclude_none=True)
async def logout(
    principal_id: Principal,
    response: Response,
) -> Envelope[None]:
    """Logout current user by clearing the refresh cookie.

    Access tokens are stateless and simply expire.
    """
    clear_refresh_cookie(response)
    return Envelope(message="Logout successful")


@router.get("/me", response_model=Envelope[UserData], response_model_exclude_none=True)
async def get_current_user_info(user: CurrentUser) -> Envelope[UserData]:
    """Get current authenticated user info."""
    return Envelope(data=UserData(user=UserResponse.model_validate(user)))
