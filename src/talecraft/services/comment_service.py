"""Comments on stories."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from talecraft.core.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from talecraft.models.comment import Comment
from talecraft.models.user import User


class CommentService:
    """Service for story comments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_comments(self, story_id: int) -> list[Row[tuple[Comment, User]]]:
        """Get (comment, author) rows for a story, newest first."""
        result = await self.db.execute(
            select(Comment, User)
            .join(User, Comment.user_id == User.id)
            .where(Comment.story_id == story_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.all())

    async def add_comment(self, story_id: int, user_id: int, content: str) -> Comment:
        comment = Comment(story_id=story_id, user_id=user_id, content=content)
        self.db.add(comment)
        await self.db.flush()
        await self.db.refresh(comment)
        return comment

    async def delete_comment(self, comment_id: int, principal_id: int | None) -> None:
        """Delete a comment on behalf of its author.

        Only the comment's author may delete it. Story roles play no part:
        neither the story author nor an editor can remove someone else's comment.

        Raises:
            UnauthenticatedError: No principal
            NotFoundError: Comment does not exist
            ForbiddenError: Principal did not write the comment
        """
        if principal_id is None:
            raise UnauthenticatedError()

        result = await self.db.execute(
            select(Comment.user_id).where(Comment.id == comment_id)
        )
        owner_id = result.scalar_one_or_none()

        if owner_id is None:
            raise NotFoundError("Comment not found.")
        if owner_id != principal_id:
            raise ForbiddenError("You can only delete your own comments")

        await self.db.execute(delete(Comment).where(Comment.id == comment_id))
        await self.db.flush()
