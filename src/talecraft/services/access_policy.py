"""Story access policy.

Decides whether a principal may read, modify or delete a story. The decision
is re-evaluated on every request from a single lookup of the story row joined
with the caller's collaborator row; nothing is cached between calls.

Checks run in a fixed order so that nothing about a story is revealed before
the caller is authenticated:

1. no principal            -> UnauthenticatedError (401)
2. malformed story id      -> InvalidInputError (400)
3. no such story           -> NotFoundError (404)
4. verb not permitted      -> ForbiddenError (403)

Permission tiers per verb:

- GET                 read: author, any collaborator, or public story
- POST / PUT / PATCH  modify: author or editor
- DELETE              delete: author only

Comment deletion is deliberately not governed here; see
:meth:`talecraft.services.comment_service.CommentService.delete_comment`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talecraft.core.errors import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
    UnexpectedError,
)
from talecraft.models.collaboration import Collaborator, CollaboratorRole
from talecraft.models.story import Story

logger = logging.getLogger(__name__)


class PermissionTier(str, Enum):
    """What a request wants to do with a story."""

    READ = "read"
    MODIFY = "modify"
    DELETE = "delete"


_TIER_BY_METHOD: dict[str, PermissionTier] = {
    "GET": PermissionTier.READ,
    "POST": PermissionTier.MODIFY,
    "PUT": PermissionTier.MODIFY,
    "PATCH": PermissionTier.MODIFY,
    "DELETE": PermissionTier.DELETE,
}


def permission_tier(method: str) -> PermissionTier | None:
    """Map an HTTP verb to its permission tier, or None if unsupported."""
    return _TIER_BY_METHOD.get(method.upper())


@dataclass(frozen=True)
class StoryAccessRow:
    """A story joined with one principal's collaborator role (if any)."""

    story_id: int
    author_id: int
    is_public: bool
    role: CollaboratorRole | None


@dataclass(frozen=True)
class StoryAccess:
    """An allowed access decision, handed to the route handler."""

    story_id: int
    principal_id: int
    tier: PermissionTier
    is_author: bool
    role: CollaboratorRole | None
    is_public: bool

    @property
    def is_collaborator(self) -> bool:
        return self.role is not None


class StoryAccessLookup(Protocol):
    """Storage port for the one read the evaluator performs."""

    async def fetch_story_access(
        self, story_id: int, principal_id: int
    ) -> StoryAccessRow | None: ...


class SqlStoryAccessLookup:
    """Fetch story access rows with a single LEFT JOIN query."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_story_access(
        self, story_id: int, principal_id: int
    ) -> StoryAccessRow | None:
        query = (
            select(Story.id, Story.author_id, Story.is_public, Collaborator.role)
            .outerjoin(
                Collaborator,
                and_(
                    Collaborator.story_id == Story.id,
                    Collaborator.user_id == principal_id,
                ),
            )
            .where(Story.id == story_id)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.exception("Story access lookup failed for story %s", story_id)
            raise UnexpectedError("Authorization check failed.") from e

        row = result.first()
        if row is None:
            return None
        return StoryAccessRow(
            story_id=row.id,
            author_id=row.author_id,
            is_public=bool(row.is_public),
            role=row.role,
        )


# Largest value an Integer primary key column can hold
MAX_ID = 2**31 - 1


def parse_positive_id(raw: int | str, resource: str = "story") -> int:
    """Parse a path parameter into a positive integer id.

    Ids beyond the key column's range cannot name a stored row, so they are
    reported as missing without reaching the database.

    Raises:
        InvalidInputError: If the value is not a positive integer
        NotFoundError: If the value is larger than any storable id
    """
    message = f"Invalid {resource} ID."
    if isinstance(raw, bool):
        raise InvalidInputError(message)
    if isinstance(raw, int):
        value = raw
    else:
        text = raw.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidInputError(message)
        value = int(text)
    if value <= 0:
        raise InvalidInputError(message)
    if value > MAX_ID:
        raise NotFoundError(f"{resource.capitalize()} not found.")
    return value


def parse_story_id(raw: int | str) -> int:
    return parse_positive_id(raw, "story")


def evaluate(row: StoryAccessRow, principal_id: int, method: str) -> bool:
    """Decide whether ``principal_id`` may perform ``method`` on the story.

    Pure function over already-fetched state.
    """
    is_author = row.author_id == principal_id
    is_collaborator = row.role is not None

    tier = permission_tier(method)
    if tier is PermissionTier.READ:
        return is_author or is_collaborator or row.is_public
    if tier is PermissionTier.MODIFY:
        return is_author or row.role == CollaboratorRole.EDITOR
    if tier is PermissionTier.DELETE:
        return is_author
    return False


async def authorize_story_access(
    lookup: StoryAccessLookup,
    principal_id: int | None,
    story_id: int | str,
    method: str,
) -> StoryAccess:
    """Authorize ``method`` on a story for ``principal_id``.

    Args:
        lookup: Storage port used for the single story/collaborator read
        principal_id: Verified user id, or None for an anonymous caller
        story_id: Raw story id from the request path
        method: HTTP verb of the request

    Returns:
        The allowed access decision

    Raises:
        UnauthenticatedError: No principal
        InvalidInputError: Story id is not a positive integer
        NotFoundError: Story does not exist or its id is out of range
        ForbiddenError: Story exists but the verb is not permitted
        UnexpectedError: The lookup itself failed
    """
    if principal_id is None:
        raise UnauthenticatedError()

    parsed_id = parse_story_id(story_id)

    row = await lookup.fetch_story_access(parsed_id, principal_id)
    if row is None:
        raise NotFoundError("Story not found.")

    if not evaluate(row, principal_id, method):
        logger.debug(
            "Denied %s on story %s for user %s", method.upper(), parsed_id, principal_id
        )
        raise ForbiddenError()

    return StoryAccess(
        story_id=parsed_id,
        principal_id=principal_id,
        tier=permission_tier(method),
        is_author=row.author_id == principal_id,
        role=row.role,
        is_public=row.is_public,
    )
