from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Select, delete, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialfeed.config import get_settings
from socialfeed.models import Comment, Like, Post, User
from socialfeed.services.base import ContentStore
from socialfeed.services.social import following_ids
from socialfeed.services.user import user_to_dict

settings = get_settings()


def clamp_page(limit: Optional[int], offset: Optional[int]) -> tuple[int, int]:
    """Apply the default page size and the upper bound on it."""
    if limit is None:
        limit = settings.feed_limit_default
    limit = min(max(limit, 1), settings.feed_limit_max)
    offset = max(offset or 0, 0)
    return limit, offset


class PostService(ContentStore):
    """Post storage. Updates and deletes only succeed for the author."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_post(
        self,
        author_id: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> Post:
        """Create a new post."""
        post = Post(user_id=author_id, content=content, image_url=image_url or None)
        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)
        return post

    async def get_post(self, post_id: int) -> Optional[Post]:
        return await self.db.get(Post, post_id)

    async def update_post(
        self,
        post_id: int,
        requester_id: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> Optional[Post]:
        """Replace content and image (owner only)."""
        post = await self._get_owned(post_id, requester_id)
        if not post:
            return None

        post.content = content
        post.image_url = image_url or None
        post.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(post)
        return post

    async def delete_post(self, post_id: int, requester_id: str) -> bool:
        """Delete a post with its likes and comments (owner only)."""
        post = await self._get_owned(post_id, requester_id)
        if not post:
            return False

        await self.db.execute(delete(Like).where(Like.post_id == post_id))
        await self.db.execute(delete(Comment).where(Comment.post_id == post_id))
        await self.db.delete(post)
        await self.db.commit()
        return True

    async def list_by_author(
        self, author_id: str, limit: int = 50, offset: int = 0
    ) -> list[Post]:
        """Get posts by a specific user, newest first."""
        result = await self.db.execute(
            select(Post)
            .where(Post.user_id == author_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def _get_owned(self, post_id: int, requester_id: str) -> Optional[Post]:
        result = await self.db.execute(
            select(Post).where(Post.id == post_id, Post.user_id == requester_id)
        )
        return result.scalar_one_or_none()


class FeedService:
    """
    Read views over posts.

    Every view joins the author, counts likes and comments with correlated
    subqueries and flags whether the viewer liked the post, all in a single
    query. Posts whose author record is missing are dropped by the join.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_posts(
        self,
        viewer_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[dict]:
        """Global feed: every post, newest first."""
        limit, offset = clamp_page(limit, offset)
        query = self._post_view(viewer_id).limit(limit).offset(offset)
        return await self._fetch(query)

    async def get_feed(
        self,
        user_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[dict]:
        """
        Personalized feed for a user.

        Authors are the users this user follows plus the user themself, so
        someone who follows nobody still sees their own posts.
        """
        limit, offset = clamp_page(limit, offset)
        query = (
            self._post_view(user_id)
            .where(or_(Post.user_id == user_id, Post.user_id.in_(following_ids(user_id))))
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch(query)

    async def get_user_posts(
        self,
        author_id: str,
        viewer_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[dict]:
        """Posts by one author, newest first."""
        limit, offset = clamp_page(limit, offset)
        query = (
            self._post_view(viewer_id)
            .where(Post.user_id == author_id)
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch(query)

    async def get_post(self, post_id: int, viewer_id: Optional[str] = None) -> Optional[dict]:
        """Get a single post by ID."""
        posts = await self._fetch(self._post_view(viewer_id).where(Post.id == post_id))
        return posts[0] if posts else None

    def _post_view(self, viewer_id: Optional[str]) -> Select:
        likes_count = (
            select(func.count(Like.id))
            .where(Like.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        comments_count = (
            select(func.count(Comment.id))
            .where(Comment.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        if viewer_id:
            is_liked = (
                select(Like.id)
                .where(Like.post_id == Post.id, Like.user_id == viewer_id)
                .correlate(Post)
                .exists()
            )
        else:
            is_liked = false()

        return (
            select(
                Post,
                User,
                likes_count.label("likes_count"),
                comments_count.label("comments_count"),
                is_liked.label("is_liked"),
            )
            .join(User, User.id == Post.user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )

    async def _fetch(self, query: Select) -> list[dict]:
        result = await self.db.execute(query)
        return [
            {
                "id": row.Post.id,
                "user_id": row.Post.user_id,
                "content": row.Post.content,
                "image_url": row.Post.image_url,
                "author": user_to_dict(row.User),
                "likes_count": row.likes_count,
                "comments_count": row.comments_count,
                "is_liked": bool(row.is_liked),
                "created_at": row.Post.created_at,
                "updated_at": row.Post.updated_at,
            }
            for row in result
        ]
