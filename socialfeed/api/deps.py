from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from socialfeed.auth.session import verify_session_token
from socialfeed.config import get_settings
from socialfeed.database import get_db
from socialfeed.exceptions import Unauthorized
from socialfeed.models import User
from socialfeed.schemas import SessionContext
from socialfeed.services.discovery import DiscoveryService
from socialfeed.services.feed import FeedService, PostService
from socialfeed.services.social import SocialService, InteractionService
from socialfeed.services.user import UserService

settings = get_settings()


async def get_feed_service(db: AsyncSession = Depends(get_db)) -> FeedService:
    """Dependency for FeedService."""
    return FeedService(db)


async def get_post_service(db: AsyncSession = Depends(get_db)) -> PostService:
    """Dependency for PostService."""
    return PostService(db)


async def get_social_service(db: AsyncSession = Depends(get_db)) -> SocialService:
    """Dependency for SocialService."""
    return SocialService(db)


async def get_interaction_service(db: AsyncSession = Depends(get_db)) -> InteractionService:
    """Dependency for InteractionService."""
    return InteractionService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Dependency for UserService."""
    return UserService(db)


async def get_discovery_service(db: AsyncSession = Depends(get_db)) -> DiscoveryService:
    """Dependency for DiscoveryService."""
    return DiscoveryService(db)


async def get_session_context(request: Request) -> SessionContext:
    """Read the session cookie. Anonymous requests get an empty context."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return SessionContext()
    return SessionContext(user_id=verify_session_token(token))


async def get_current_user(
    context: SessionContext = Depends(get_session_context),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Require a session whose user still exists."""
    if not context.is_authenticated:
        raise Unauthorized()

    user = await user_service.get_user(context.user_id)
    if not user:
        raise Unauthorized()
    return user
