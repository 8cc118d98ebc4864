"""Story persistence.

Callers are expected to have authorized the request through
:func:`talecraft.services.access_policy.authorize_story_access` first; this
service does no permission checks of its own.
"""

from __future__ import annotations

from sqlalchemy import delete, or_, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from talecraft.core.errors import NotFoundError
from talecraft.models.collaboration import Collaborator
from talecraft.models.story import Story
from talecraft.models.user import User


class StoryService:
    """Service for creating, reading, updating and deleting stories."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_visible_stories(self, user_id: int) -> list[Row[tuple[Story, User]]]:
        """Stories the user authored, collaborates on, or that are public.

        Returns:
            (story, author) rows, most recently updated first
        """
        shared = select(Collaborator.story_id).where(Collaborator.user_id == user_id)
        query = (
            select(Story, User)
            .join(User, Story.author_id == User.id)
            .where(
                or_(
                    Story.author_id == user_id,
                    Story.is_public.is_(True),
                    Story.id.in_(shared),
                )
            )
            .order_by(Story.updated_at.desc(), Story.id.desc())
        )
        result = await self.db.execute(query)
        return list(result.all())

    async def get_story_with_author(self, story_id: int) -> Row[tuple[Story, User]]:
        """Get a story together with its author.

        Raises:
            NotFoundError: If the story does not exist
        """
        result = await self.db.execute(
            select(Story, User)
            .join(User, Story.author_id == User.id)
            .where(Story.id == story_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("Story not found.")
        return row

    async def create_story(
        self,
        author_id: int,
        title: str,
        content: str,
        is_public: bool = False,
    ) -> Story:
        story = Story(
            author_id=author_id,
            title=title,
            content=content,
            is_public=is_public,
        )
        self.db.add(story)
        await self.db.flush()
        await self.db.refresh(story)
        return story

    async def update_story(
        self,
        story_id: int,
        title: str | None = None,
        content: str | None = None,
        is_public: bool | None = None,
    ) -> Story:
        """Apply a partial update. ``author_id`` is never touched.

        Raises:
            NotFoundError: If the story does not exist
        """
        story = await self.db.get(Story, story_id)
        if story is None:
            raise NotFoundError("Story not found.")

        if title is not None:
            story.title = title
        if content is not None:
            story.content = content
        if is_public is not None:
            story.is_public = is_public

        await self.db.flush()
        await self.db.refresh(story)
        return story

    async def delete_story(self, story_id: int) -> None:
        """Delete a story; collaborators and comments go with it."""
        await self.db.execute(delete(Story).where(Story.id == story_id))
        await self.db.flush()
