"""API routers for different endpoint groups.

Routers:
- auth: Registration, login and token management
- health: Health check endpoints
- stories: Stories and collaborators
- comments: Story comments
"""

from .auth import router as auth_router
from .comments import router as comments_router
from .health import router as health_router
from .stories import router as stories_router

__all__ = [
    "auth_router",
    "comments_router",
    "health_router",
    "stories_router",
]
