from typing import Optional

from fastapi import APIRouter, Depends, Query

from socialfeed.api.deps import (
    get_current_user,
    get_discovery_service,
    get_feed_service,
    get_session_context,
    get_social_service,
    get_user_service,
)
from socialfeed.exceptions import NotFound, ValidationFailed
from socialfeed.models import User
from socialfeed.schemas import (
    CurrentUserResponse,
    FollowResponse,
    MessageResponse,
    PostResponse,
    SessionContext,
    UserProfileResponse,
    UserResponse,
    UserSearchResult,
    UserUpdate,
)
from socialfeed.services.discovery import DiscoveryService
from socialfeed.services.feed import FeedService
from socialfeed.services.social import SocialService
from socialfeed.services.user import UserService

router = APIRouter(prefix="/users", tags=["Users"])


async def resolve_or_404(user_service: UserService, identifier: str) -> User:
    lookup = await user_service.resolve(identifier)
    if not lookup.found:
        raise NotFound("User not found")
    return lookup.user


@router.get("/suggested", response_model=list[UserResponse])
async def get_suggested_users(
    limit: Optional[int] = Query(default=None, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    discovery: DiscoveryService = Depends(get_discovery_service),
):
    """Users the current user does not follow yet."""
    users = await discovery.get_suggested_users(current_user.id, limit)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/search", response_model=list[UserSearchResult])
async def search_users(
    q: str = Query(default="", description="Search query"),
    limit: Optional[int] = Query(default=None),
    session: SessionContext = Depends(get_session_context),
    discovery: DiscoveryService = Depends(get_discovery_service),
):
    """Search users by username, first name or last name."""
    users = await discovery.search_users(q, session.user_id, limit)
    return [UserSearchResult(**u) for u in users]


@router.put("/me", response_model=CurrentUserResponse)
async def update_me(
    request: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    """
    Edit the current user's profile.
    An empty string for bio or profileImageUrl clears it.
    """
    changes = request.model_dump(exclude_unset=True)
    if "bio" in changes:
        changes["bio"] = changes["bio"] or None
    if "profile_image_url" in changes:
        changes["profile_image_url"] = changes["profile_image_url"] or None
    if "username" in changes and not changes["username"]:
        del changes["username"]

    user = await user_service.update_user(current_user.id, **changes)
    if not user:
        raise NotFound("User not found")
    return CurrentUserResponse.model_validate(user)


@router.get("/{identifier}", response_model=UserProfileResponse)
async def get_user_profile(
    identifier: str,
    session: SessionContext = Depends(get_session_context),
    discovery: DiscoveryService = Depends(get_discovery_service),
):
    """Get a profile by username or ID."""
    profile = await discovery.get_profile(identifier, session.user_id)
    if not profile:
        raise NotFound("User not found")
    return UserProfileResponse(**profile)


@router.get("/{identifier}/posts", response_model=list[PostResponse])
async def get_user_posts(
    identifier: str,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    session: SessionContext = Depends(get_session_context),
    user_service: UserService = Depends(get_user_service),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Get posts by a specific user."""
    user = await resolve_or_404(user_service, identifier)
    posts = await feed_service.get_user_posts(user.id, session.user_id, limit, offset)
    return [PostResponse(**p) for p in posts]


@router.get("/{identifier}/followers", response_model=list[UserResponse])
async def get_followers(
    identifier: str,
    user_service: UserService = Depends(get_user_service),
    social_service: SocialService = Depends(get_social_service),
):
    """Get followers of a user."""
    user = await resolve_or_404(user_service, identifier)
    followers = await social_service.list_followers(user.id)
    return [UserResponse.model_validate(u) for u in followers]


@router.get("/{identifier}/following", response_model=list[UserResponse])
async def get_following(
    identifier: str,
    user_service: UserService = Depends(get_user_service),
    social_service: SocialService = Depends(get_social_service),
):
    """Get users that this user follows."""
    user = await resolve_or_404(user_service, identifier)
    following = await social_service.list_following(user.id)
    return [UserResponse.model_validate(u) for u in following]


# ----- Follow Endpoints -----
@router.post("/{user_id}/follow", response_model=FollowResponse)
async def follow_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
    social_service: SocialService = Depends(get_social_service),
):
    """Follow a user."""
    if user_id == current_user.id:
        raise ValidationFailed("Cannot follow yourself")

    if not await user_service.get_user(user_id):
        raise NotFound("User not found")

    follow = await social_service.follow(current_user.id, user_id)
    return FollowResponse.model_validate(follow)


@router.delete("/{user_id}/follow", response_model=MessageResponse)
async def unfollow_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    social_service: SocialService = Depends(get_social_service),
):
    """Unfollow a user."""
    if not await social_service.unfollow(current_user.id, user_id):
        raise NotFound("Follow relationship not found")
    return MessageResponse(message="Unfollowed successfully")
