"""Collaboration service for story sharing.

Provides business logic for adding, listing and removing story
collaborators. Permission checks happen before these methods are called.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from talecraft.core.errors import InvalidInputError, NotFoundError
from talecraft.models.collaboration import Collaborator, CollaboratorRole
from talecraft.models.story import Story
from talecraft.models.user import User

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CollaborationService:
    """Service for managing story collaborators."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_collaborators(self, story_id: int) -> list[Row[tuple[Collaborator, User]]]:
        """Get (collaborator, user) rows for a story, oldest first."""
        result = await self.db.execute(
            select(Collaborator, User)
            .join(User, Collaborator.user_id == User.id)
            .where(Collaborator.story_id == story_id)
            .order_by(Collaborator.added_at, Collaborator.user_id)
        )
        return list(result.all())

    async def add_collaborator(
        self,
        story_id: int,
        user_id: int,
        role: CollaboratorRole = CollaboratorRole.VIEWER,
    ) -> Collaborator:
        """Add a collaborator, or change their role if already present.

        Args:
            story_id: Story to share
            user_id: User to share it with
            role: Role to assign

        Returns:
            The single collaborator row for (story_id, user_id)

        Raises:
            NotFoundError: If the story or user does not exist
            InvalidInputError: If the user is the story's author
        """
        if await self.db.get(User, user_id) is None:
            raise NotFoundError("User not found.")

        story = await self.db.get(Story, story_id)
        if story is None:
            raise NotFoundError("Story not found.")
        if story.author_id == user_id:
            raise InvalidInputError("Cannot add the story author as a collaborator")

        dialect = self.db.bind.dialect.name if self.db.bind is not None else ""
        insert = _UPSERT_INSERTS.get(dialect)

        if insert is not None:
            stmt = insert(Collaborator).values(
                story_id=story_id, user_id=user_id, role=role
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Collaborator.story_id, Collaborator.user_id],
                set_={"role": stmt.excluded.role},
            )
            await self.db.execute(stmt)
        else:
            existing = await self.db.get(Collaborator, (story_id, user_id))
            if existing is None:
                self.db.add(Collaborator(story_id=story_id, user_id=user_id, role=role))
            else:
                existing.role = role
            await self.db.flush()

        collaborator = await self.db.get(
            Collaborator, (story_id, user_id), populate_existing=True
        )
        logger.info(
            "Story %s shared with user %s as %s", story_id, user_id, role.value
        )
        return collaborator

    async def remove_collaborator(self, story_id: int, user_id: int) -> bool:
        """Remove a collaborator. Returns whether a row was deleted."""
        result = await self.db.execute(
            delete(Collaborator).where(
                Collaborator.story_id == story_id,
                Collaborator.user_id == user_id,
            )
        )
        await self.db.flush()
        return result.rowcount > 0
