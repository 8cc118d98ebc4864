"""Database models for TaleCraft.

SQLAlchemy models for:
- Users
- Stories
- Collaborators (story sharing with editor/viewer roles)
- Comments
"""

from .collaboration import Collaborator, CollaboratorRole
from .comment import Comment
from .database import Base, close_db, get_engine, get_session, init_db
from .story import Story
from .user import User

__all__ = [
    # Database
    "Base",
    "init_db",
    "get_session",
    "get_engine",
    "close_db",
    # Models
    "User",
    "Story",
    "Collaborator",
    "CollaboratorRole",
    "Comment",
]
