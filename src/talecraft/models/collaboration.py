"""Collaborator model for role-scoped story sharing."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .database import Base

if TYPE_CHECKING:
    from .story import Story
    from .user import User


class CollaboratorRole(str, Enum):
    """Roles a collaborator can hold on a story."""

    EDITOR = "editor"  # Can read and modify the story
    VIEWER = "viewer"  # Read-only access


class Collaborator(Base):
    """Junction table between stories and the users they are shared with.

    The composite primary key keeps at most one role per (story, user).
    """

    __tablename__ = "collaborators"

    story_id: Mapped[int] = mapped_column(
        ForeignKey("stories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role: Mapped[CollaboratorRole] = mapped_column(
        SQLEnum(
            CollaboratorRole,
            name="collaborator_role",
            values_callable=lambda roles: [r.value for r in roles],
        ),
        default=CollaboratorRole.VIEWER,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # Relationships
    story: Mapped[Story] = relationship("Story", back_populates="collaborators")
    user: Mapped[User] = relationship("User", back_populates="collaborations")

    def __repr__(self) -> str:
        return (
            f"<Collaborator(story_id={self.story_id}, user_id={self.user_id}, "
            f"role={self.role.value})>"
        )
