from typing import Optional

from fastapi import APIRouter, Depends, Query

from socialfeed.api.deps import (
    get_current_user,
    get_feed_service,
    get_interaction_service,
    get_post_service,
    get_session_context,
)
from socialfeed.exceptions import NotFound
from socialfeed.models import User
from socialfeed.schemas import (
    CommentCreate,
    CommentResponse,
    LikeResponse,
    MessageResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    SessionContext,
)
from socialfeed.services.feed import FeedService, PostService
from socialfeed.services.social import InteractionService, comment_to_dict

router = APIRouter(prefix="/posts", tags=["Posts"])


async def require_post(post_service: PostService, post_id: int) -> None:
    if not await post_service.get_post(post_id):
        raise NotFound("Post not found")


# ----- Post Endpoints -----
@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    request: PostCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Create a new post."""
    post = await post_service.create_post(
        author_id=current_user.id,
        content=request.content,
        image_url=request.image_url,
    )
    return PostResponse(**await feed_service.get_post(post.id, current_user.id))


@router.get("", response_model=list[PostResponse])
async def get_posts(
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    session: SessionContext = Depends(get_session_context),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Global feed: every post, newest first."""
    posts = await feed_service.get_posts(session.user_id, limit, offset)
    return [PostResponse(**p) for p in posts]


@router.get("/feed", response_model=list[PostResponse])
async def get_feed(
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Personalized feed: followed users plus the current user."""
    posts = await feed_service.get_feed(current_user.id, limit, offset)
    return [PostResponse(**p) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    session: SessionContext = Depends(get_session_context),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Get a single post by ID."""
    post = await feed_service.get_post(post_id, session.user_id)
    if not post:
        raise NotFound("Post not found")
    return PostResponse(**post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    request: PostUpdate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Edit a post (owner only)."""
    post = await post_service.update_post(
        post_id,
        current_user.id,
        content=request.content,
        image_url=request.image_url,
    )
    if not post:
        raise NotFound("Post not found or unauthorized")
    return PostResponse(**await feed_service.get_post(post.id, current_user.id))


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    """Delete a post (owner only)."""
    if not await post_service.delete_post(post_id, current_user.id):
        raise NotFound("Post not found or unauthorized")
    return MessageResponse(message="Post deleted successfully")


# ----- Like Endpoints -----
@router.post("/{post_id}/like", response_model=LikeResponse)
async def like_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
    interaction_service: InteractionService = Depends(get_interaction_service),
):
    """Like a post."""
    await require_post(post_service, post_id)
    like = await interaction_service.like(current_user.id, post_id)
    return LikeResponse.model_validate(like)


@router.delete("/{post_id}/like", response_model=MessageResponse)
async def unlike_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    interaction_service: InteractionService = Depends(get_interaction_service),
):
    """Unlike a post."""
    if not await interaction_service.unlike(current_user.id, post_id):
        raise NotFound("Like not found")
    return MessageResponse(message="Unliked successfully")


# ----- Comment Endpoints -----
@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    post_id: int,
    request: CommentCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
    interaction_service: InteractionService = Depends(get_interaction_service),
):
    """Add a comment to a post."""
    await require_post(post_service, post_id)
    comment = await interaction_service.add_comment(current_user.id, post_id, request.content)
    return CommentResponse(**comment_to_dict(comment, current_user))


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def get_comments(
    post_id: int,
    interaction_service: InteractionService = Depends(get_interaction_service),
):
    """Get comments for a post, newest first."""
    comments = await interaction_service.list_comments(post_id)
    return [CommentResponse(**comment_to_dict(c, author)) for c, author in comments]
