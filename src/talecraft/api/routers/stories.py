"""Stories router for story and collaborator management.

Every route addressing a single story depends on ``StoryAccessGrant``, which
runs the access policy for the request's HTTP method before the handler body
executes. A denied request never reaches the service layer.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, status
from pydantic import Field, StringConstraints, model_validator

from talecraft.api.deps import Collaborators, Principal, Stories, StoryAccessGrant
from talecraft.api.schemas import CamelModel, Envelope
from talecraft.models.collaboration import Collaborator, CollaboratorRole
from talecraft.models.story import Story
from talecraft.models.user import User
from talecraft.services.access_policy import MAX_ID, parse_positive_id

router = APIRouter()

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Content = Annotated[str, StringConstraints(min_length=1, max_length=50_000)]


# =============================================================================
# Schemas
# =============================================================================


class StoryCreateRequest(CamelModel):
    """Request to create a new story."""

    title: Title
    content: Content
    is_public: bool = False


class StoryUpdateRequest(CamelModel):
    """Partial story update. At least one field is required."""

    title: Title | None = None
    content: Content | None = None
    is_public: bool | None = None

    @model_validator(mode="after")
    def require_one_field(self) -> "StoryUpdateRequest":
        if self.title is None and self.content is None and self.is_public is None:
            raise ValueError("At least one field must be provided for update")
        return self


class CollaboratorCreateRequest(CamelModel):
    """Request to add a collaborator (or change their role)."""

    user_id: int = Field(..., gt=0, le=MAX_ID, description="User to share the story with")
    role: CollaboratorRole = Field(default=CollaboratorRole.VIEWER)


class CollaboratorResponse(CamelModel):
    """Collaborator information."""

    user_id: int
    story_id: int
    role: CollaboratorRole
    added_at: datetime
    username: str | None = None
    email: str | None = None


class StoryResponse(CamelModel):
    """Story information response."""

    id: int
    title: str
    content: str
    author_id: int
    is_public: bool
    created_at: datetime
    updated_at: datetime
    author_username: str | None = None
    author_email: str | None = None
    collaborators: list[CollaboratorResponse] | None = None


class StoryData(CamelModel):
    story: StoryResponse


class StoryListData(CamelModel):
    stories: list[StoryResponse]


class CollaboratorData(CamelModel):
    collaborator: CollaboratorResponse


def story_response(
    story: Story,
    author: User | None = None,
    collaborators: list[CollaboratorResponse] | None = None,
) -> StoryResponse:
    return StoryResponse(
        id=story.id,
        title=story.title,
        content=story.content,
        author_id=story.author_id,
        is_public=story.is_public,
        created_at=story.created_at,
        updated_at=story.updated_at,
        author_username=author.username if author else None,
        author_email=author.email if author else None,
        collaborators=collaborators,
    )


def collaborator_response(collaborator: Collaborator, user: User | None = None) -> CollaboratorResponse:
    return CollaboratorResponse(
        user_id=collaborator.user_id,
        story_id=collaborator.story_id,
        role=collaborator.role,
        added_at=collaborator.added_at,
        username=user.username if user else None,
        email=user.email if user else None,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=Envelope[StoryListData], response_model_exclude_none=True)
async def list_stories(principal_id: Principal, stories: Stories) -> Envelope[StoryListData]:
    """List the caller's own stories, stories shared with them, and public stories."""
    rows = await stories.list_visible_stories(principal_id)
    return Envelope(
        data=StoryListData(stories=[story_response(story, author) for story, author in rows])
    )


@router.post(
    "",
    response_model=Envelope[StoryData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_story(
    request: StoryCreateRequest,
    principal_id: Principal,
    stories: Stories,
) -> Envelope[StoryData]:
    """Create a story authored by the caller."""
    story = await stories.create_story(
        author_id=principal_id,
        title=request.title,
        content=request.content,
        is_public=request.is_public,
    )
    return Envelope(
        data=StoryData(story=story_response(story)),
        message="Story created successfully",
    )


@router.get("/{story_id}", response_model=Envelope[StoryData], response_model_exclude_none=True)
async def get_story(
    story_id: str,
    access: StoryAccessGrant,
    stories: Stories,
    collaborators: Collaborators,
) -> Envelope[StoryData]:
    """Get a story with its collaborators."""
    story, author = await stories.get_story_with_author(access.story_id)
    shared_with = [
        collaborator_response(collaborator, user)
        for collaborator, user in await collaborators.list_collaborators(access.story_id)
    ]
    return Envelope(data=StoryData(story=story_response(story, author, shared_with)))


@router.put("/{story_id}", response_model=Envelope[StoryData], response_model_exclude_none=True)
async def update_story(
    story_id: str,
    request: StoryUpdateRequest,
    access: StoryAccessGrant,
    stories: Stories,
) -> Envelope[StoryData]:
    """Update a story. Allowed for the author and editors."""
    story = await stories.update_story(
        access.story_id,
        title=request.title,
        content=request.content,
        is_public=request.is_public,
    )
    return Envelope(
        data=StoryData(story=story_response(story)),
        message="Story updated successfully",
    )


@router.delete("/{story_id}", response_model=Envelope[None], response_model_exclude_none=True)
async def delete_story(
    story_id: str,
    access: StoryAccessGrant,
    stories: Stories,
) -> Envelope[None]:
    """Delete a story. Allowed for the author only."""
    await stories.delete_story(access.story_id)
    return Envelope(message="Story deleted successfully")


@router.post(
    "/{story_id}/collaborators",
    response_model=Envelope[CollaboratorData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_collaborator(
    story_id: str,
    request: CollaboratorCreateRequest,
    access: StoryAccessGrant,
    collaborators: Collaborators,
) -> Envelope[CollaboratorData]:
    """Add a collaborator or update an existing collaborator's role."""
    collaborator = await collaborators.add_collaborator(
        access.story_id, request.user_id, request.role
    )
    return Envelope(
        data=CollaboratorData(collaborator=collaborator_response(collaborator)),
        message="Collaborator added successfully",
    )


@router.delete(
    "/{story_id}/collaborators/{user_id}",
    response_model=Envelope[None],
    response_model_exclude_none=True,
)
async def remove_collaborator(
    story_id: str,
    user_id: str,
    access: StoryAccessGrant,
    collaborators: Collaborators,
) -> Envelope[None]:
    """Remove a collaborator. Allowed for the author only."""
    await collaborators.remove_collaborator(access.story_id, parse_positive_id(user_id, "user"))
    return Envelope(message="Collaborator removed successfully")
