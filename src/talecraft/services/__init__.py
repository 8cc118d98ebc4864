"""Backend services for TaleCraft.

Services:
- access_policy: decides who may read, modify or delete a story
- user_service: registration and credential checks
- story_service: story persistence
- collaboration_service: collaborator management
- comment_service: comments and comment-author-only deletion
"""

from .access_policy import (
    PermissionTier,
    SqlStoryAccessLookup,
    StoryAccess,
    StoryAccessLookup,
    StoryAccessRow,
    authorize_story_access,
    evaluate,
    parse_positive_id,
    parse_story_id,
    permission_tier,
)
from .collaboration_service import CollaborationService
from .comment_service import CommentService
from .story_service import StoryService
from .user_service import UserService

__all__ = [
    # Access policy
    "PermissionTier",
    "StoryAccess",
    "StoryAccessRow",
    "StoryAccessLookup",
    "SqlStoryAccessLookup",
    "authorize_story_access",
    "evaluate",
    "parse_positive_id",
    "parse_story_id",
    "permission_tier",
    # Services
    "UserService",
    "StoryService",
    "CollaborationService",
    "CommentService",
]
