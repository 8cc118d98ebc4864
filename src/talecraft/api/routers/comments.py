"""Comments router.

Listing and posting comments go through the story access policy (read and
modify tiers respectively). Deleting a comment does not: only the comment's
own author may delete it, whatever their role on the story.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, status
from pydantic import StringConstraints

from talecraft.api.deps import Comments, Principal, StoryAccessGrant
from talecraft.api.schemas import CamelModel, Envelope
from talecraft.models.comment import Comment
from talecraft.models.user import User
from talecraft.services.access_policy import parse_positive_id

router = APIRouter()


class CommentCreateRequest(CamelModel):
    """Request to create a comment."""

    content: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)
    ]


class CommentResponse(CamelModel):
    """Comment information."""

    id: int
    story_id: int
    user_id: int
    content: str
    created_at: datetime
    username: str | None = None
    email: str | None = None


class CommentData(CamelModel):
    comment: CommentResponse


class CommentListData(CamelModel):
    comments: list[CommentResponse]


def comment_response(comment: Comment, user: User | None = None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        story_id=comment.story_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        username=user.username if user else None,
        email=user.email if user else None,
    )


@router.get(
    "/stories/{story_id}/comments",
    response_model=Envelope[CommentListData],
    response_model_exclude_none=True,
)
async def list_comments(
    story_id: str,
    access: StoryAccessGrant,
    comments: Comments,
) -> Envelope[CommentListData]:
    """List a story's comments, newest first."""
    rows = await comments.list_comments(access.story_id)
    return Envelope(
        data=CommentListData(comments=[comment_response(c, user) for c, user in rows])
    )


@router.post(
    "/stories/{story_id}/comments",
    response_model=Envelope[CommentData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    story_id: str,
    request: CommentCreateRequest,
    access: StoryAccessGrant,
    comments: Comments,
) -> Envelope[CommentData]:
    """Comment on a story. Allowed for the author and editors."""
    comment = await comments.add_comment(access.story_id, access.principal_id, request.content)
    return Envelope(
        data=CommentData(comment=comment_response(comment)),
        message="Comment added successfully",
    )


@router.delete(
    "/comments/{comment_id}",
    response_model=Envelope[None],
    response_model_exclude_none=True,
)
async def delete_comment(
    comment_id: str,
    principal_id: Principal,
    comments: Comments,
) -> Envelope[None]:
    """Delete a comment. Only its author may do so."""
    await comments.delete_comment(parse_positive_id(comment_id, "comment"), principal_id)
    return Envelope(message="Comment deleted successfully")
