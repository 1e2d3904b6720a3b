from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialfeed.exceptions import Conflict, NotFound
from socialfeed.models import Comment, Follow, Like, Post, User
from socialfeed.services.base import EngagementStore, SocialGraphStore
from socialfeed.services.user import user_to_dict


def following_ids(user_id: str) -> Select:
    """Subquery selecting the IDs a user follows."""
    return select(Follow.following_id).where(Follow.follower_id == user_id)


def comment_to_dict(comment: Comment, author: User) -> dict:
    return {
        "id": comment.id,
        "user_id": comment.user_id,
        "post_id": comment.post_id,
        "content": comment.content,
        "author": user_to_dict(author),
        "created_at": comment.created_at,
    }


class SocialService(SocialGraphStore):
    """Social graph service (follow edges)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def follow(self, follower_id: str, following_id: str) -> Follow:
        """Follow a user. The unique pair constraint decides duplicates."""
        edge = Follow(follower_id=follower_id, following_id=following_id)
        self.db.add(edge)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Already following this user")

        await self.db.refresh(edge)
        return edge

    async def unfollow(self, follower_id: str, following_id: str) -> bool:
        """Unfollow a user. Returns False if there was no edge."""
        result = await self.db.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        """Check if a user is following another user."""
        result = await self.db.execute(
            select(Follow.id)
            .where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
            .limit(1)
        )
        return result.first() is not None

    async def list_followers(self, user_id: str) -> list[User]:
        """Get users who follow this user, most recent first."""
        result = await self.db.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
        )
        return list(result.scalars().all())

    async def list_following(self, user_id: str) -> list[User]:
        """Get users this user follows, most recent first."""
        result = await self.db.execute(
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
        )
        return list(result.scalars().all())


class InteractionService(EngagementStore):
    """Interaction service (likes, comments)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def like(self, user_id: str, post_id: int) -> Like:
        """Like a post."""
        like = Like(user_id=user_id, post_id=post_id)
        self.db.add(like)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # Foreign key failure: the post went away before the insert
            if not await self.db.get(Post, post_id):
                raise NotFound("Post not found")
            raise Conflict("Already liked this post")

        await self.db.refresh(like)
        return like

    async def unlike(self, user_id: str, post_id: int) -> bool:
        """Unlike a post. Returns False if it was not liked."""
        result = await self.db.execute(
            delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def is_liked(self, user_id: str, post_id: int) -> bool:
        result = await self.db.execute(
            select(Like.id)
            .where(Like.user_id == user_id, Like.post_id == post_id)
            .limit(1)
        )
        return result.first() is not None

    async def count_likes(self, post_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Like.id)).where(Like.post_id == post_id)
        )
        return result.scalar_one()

    async def count_comments(self, post_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Comment.id)).where(Comment.post_id == post_id)
        )
        return result.scalar_one()

    async def add_comment(self, user_id: str, post_id: int, content: str) -> Comment:
        """Add a comment to a post."""
        comment = Comment(user_id=user_id, post_id=post_id, content=content)
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def list_comments(self, post_id: int) -> list[tuple[Comment, User]]:
        """Get comments for a post with their authors, newest first."""
        result = await self.db.execute(
            select(Comment, User)
            .join(User, User.id == Comment.user_id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return [(row.Comment, row.User) for row in result]

    async def delete_comment(self, comment_id: int, requester_id: str) -> bool:
        """Delete a comment (owner only)."""
        result = await self.db.execute(
            delete(Comment).where(
                Comment.id == comment_id,
                Comment.user_id == requester_id,
            )
        )
        await self.db.commit()
        return result.rowcount > 0
