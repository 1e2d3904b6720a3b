from typing import Optional

from sqlalchemy import false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialfeed.config import get_settings
from socialfeed.models import Follow, Post, User
from socialfeed.services.social import SocialService, following_ids
from socialfeed.services.user import UserService, user_to_dict

settings = get_settings()


def like_pattern(term: str) -> str:
    """Substring pattern that matches LIKE wildcards in the term literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DiscoveryService:
    """User-facing reads over accounts: suggestions, search and profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)
        self.social = SocialService(db)

    async def get_suggested_users(
        self, viewer_id: str, limit: Optional[int] = None
    ) -> list[User]:
        """
        Users the viewer does not follow yet, newest accounts first.
        The viewer is never suggested to themself.
        """
        if limit is None:
            limit = settings.suggested_limit_default

        result = await self.db.execute(
            select(User)
            .where(User.id != viewer_id, User.id.not_in(following_ids(viewer_id)))
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(max(limit, 1))
        )
        return list(result.scalars().all())

    async def search_users(
        self,
        query: str,
        viewer_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """Search users by username, first name or last name."""
        term = (query or "").strip()
        if not term:
            return []

        if limit is None:
            limit = settings.search_limit_default
        limit = min(max(limit, 1), settings.search_limit_max)

        pattern = like_pattern(term)
        followers_count = (
            select(func.count(Follow.id))
            .where(Follow.following_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        if viewer_id:
            is_following = (
                select(Follow.id)
                .where(Follow.follower_id == viewer_id, Follow.following_id == User.id)
                .correlate(User)
                .exists()
            )
        else:
            is_following = false()

        stmt = select(
            User,
            followers_count.label("followers_count"),
            is_following.label("is_following"),
        ).where(
            or_(
                User.username.ilike(pattern, escape="\\"),
                User.first_name.ilike(pattern, escape="\\"),
                User.last_name.ilike(pattern, escape="\\"),
            )
        )
        if viewer_id:
            stmt = stmt.where(User.id != viewer_id)

        result = await self.db.execute(
            stmt.order_by(User.created_at.desc(), User.id.desc()).limit(limit)
        )
        return [
            {
                **user_to_dict(row.User),
                "followers_count": row.followers_count,
                "is_following": bool(row.is_following),
            }
            for row in result
        ]

    async def get_profile(
        self, identifier: str, viewer_id: Optional[str] = None
    ) -> Optional[dict]:
        """Get a profile by username or ID with follower/following/post counts."""
        lookup = await self.users.resolve(identifier)
        if not lookup.found:
            return None
        user = lookup.user

        followers_count = await self._count(
            select(func.count(Follow.id)).where(Follow.following_id == user.id)
        )
        following_count = await self._count(
            select(func.count(Follow.id)).where(Follow.follower_id == user.id)
        )
        posts_count = await self._count(
            select(func.count(Post.id)).where(Post.user_id == user.id)
        )

        is_following = False
        if viewer_id and viewer_id != user.id:
            is_following = await self.social.is_following(viewer_id, user.id)

        return {
            **user_to_dict(user),
            "followers_count": followers_count,
            "following_count": following_count,
            "posts_count": posts_count,
            "is_following": is_following,
        }

    async def _count(self, stmt) -> int:
        result = await self.db.execute(stmt)
        return result.scalar_one()
