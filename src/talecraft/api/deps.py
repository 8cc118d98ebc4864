"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for authentication, database sessions,
services, and story authorization.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from talecraft.core.errors import NotFoundError, UnauthenticatedError
from talecraft.core.security import (
    TokenExpiredError,
    TokenInvalidError,
    TokenType,
    verify_token,
)
from talecraft.models.database import get_session
from talecraft.models.user import User
from talecraft.services import (
    CollaborationService,
    CommentService,
    SqlStoryAccessLookup,
    StoryAccess,
    StoryService,
    UserService,
    authorize_story_access,
)

# Security scheme
security = HTTPBearer(auto_error=False)

# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_session)]


async def get_principal_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> int | None:
    """Get the user id from a bearer access token, or None if absent.

    A token that is present but fails verification is an error, not an
    anonymous request.

    Raises:
        UnauthenticatedError: If the token is expired or invalid
    """
    if credentials is None:
        return None

    try:
        payload = verify_token(credentials.credentials, TokenType.ACCESS)
    except TokenExpiredError:
        raise UnauthenticatedError("Token expired. Please refresh your token.")
    except TokenInvalidError:
        raise UnauthenticatedError("Invalid token. Please login again.")

    return payload.user_id


async def require_principal_id(
    principal_id: Annotated[int | None, Depends(get_principal_id)],
) -> int:
    """Require an authenticated caller."""
    if principal_id is None:
        raise UnauthenticatedError(
            "Authentication required. Please provide a valid token."
        )
    return principal_id


def get_user_service(db: DBSession) -> UserService:
    return UserService(db)


def get_story_service(db: DBSession) -> StoryService:
    return StoryService(db)


def get_collaboration_service(db: DBSession) -> CollaborationService:
    return CollaborationService(db)


def get_comment_service(db: DBSession) -> CommentService:
    return CommentService(db)


async def get_current_user(
    principal_id: Annotated[int, Depends(require_principal_id)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> User:
    """Get the current authenticated user.

    Raises:
        UnauthenticatedError: If the token's user no longer exists
    """
    try:
        return await users.get_user(principal_id)
    except NotFoundError:
        raise UnauthenticatedError("User not found")


async def get_story_access(
    request: Request,
    principal_id: Annotated[int | None, Depends(get_principal_id)],
    db: DBSession,
) -> StoryAccess:
    """Authorize the request's method against the ``story_id`` path parameter.

    The path parameter is taken raw so that authentication is checked before
    the id is validated.
    """
    return await authorize_story_access(
        SqlStoryAccessLookup(db),
        principal_id,
        request.path_params.get("story_id", ""),
        request.method,
    )


# Type aliases for dependency injection
OptionalPrincipal = Annotated[int | None, Depends(get_principal_id)]
Principal = Annotated[int, Depends(require_principal_id)]
CurrentUser = Annotated[User, Depends(get_current_user)]
StoryAccessGrant = Annotated[StoryAccess, Depends(get_story_access)]
Users = Annotated[UserService, Depends(get_user_service)]
Stories = Annotated[StoryService, Depends(get_story_service)]
Collaborators = Annotated[CollaborationService, Depends(get_collaboration_service)]
Comments = Annotated[CommentService, Depends(get_comment_service)]
