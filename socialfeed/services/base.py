from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import NamedTuple, Optional

from socialfeed.models import Comment, Follow, Like, Post, User


class LookupKind(str, Enum):
    USERNAME = "username"
    ID = "id"
    NOT_FOUND = "not_found"


class UserLookup(NamedTuple):
    """Result of resolving a path identifier that may be a username or an ID."""

    kind: LookupKind
    user: Optional[User] = None

    @property
    def found(self) -> bool:
        return self.user is not None


class IdentityStore(ABC):
    """
    Persistence contract for user records.
    Raises Conflict when a username or e-mail is already taken.
    """

    @abstractmethod
    async def create_user(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        raise NotImplementedError

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def update_user(self, user_id: str, **fields) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def resolve(self, identifier: str) -> UserLookup:
        raise NotImplementedError


class SocialGraphStore(ABC):
    """Persistence contract for directed follow edges."""

    @abstractmethod
    async def follow(self, follower_id: str, following_id: str) -> Follow:
        raise NotImplementedError

    @abstractmethod
    async def unfollow(self, follower_id: str, following_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def is_following(self, follower_id: str, following_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def list_followers(self, user_id: str) -> list[User]:
        raise NotImplementedError

    @abstractmethod
    async def list_following(self, user_id: str) -> list[User]:
        raise NotImplementedError


class EngagementStore(ABC):
    """Persistence contract for likes and comments."""

    @abstractmethod
    async def like(self, user_id: str, post_id: int) -> Like:
        raise NotImplementedError

    @abstractmethod
    async def unlike(self, user_id: str, post_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def is_liked(self, user_id: str, post_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def count_likes(self, post_id: int) -> int:
        raise NotImplementedError

    @abstractmethod
    async def count_comments(self, post_id: int) -> int:
        raise NotImplementedError

    @abstractmethod
    async def add_comment(self, user_id: str, post_id: int, content: str) -> Comment:
        raise NotImplementedError

    @abstractmethod
    async def list_comments(self, post_id: int) -> list[tuple[Comment, User]]:
        raise NotImplementedError

    @abstractmethod
    async def delete_comment(self, comment_id: int, requester_id: str) -> bool:
        raise NotImplementedError


class ContentStore(ABC):
    """Persistence contract for posts. Mutations are gated on authorship."""

    @abstractmethod
    async def create_post(
        self, author_id: str, content: str, image_url: Optional[str] = None
    ) -> Post:
        raise NotImplementedError

    @abstractmethod
    async def get_post(self, post_id: int) -> Optional[Post]:
        raise NotImplementedError

    @abstractmethod
    async def update_post(
        self,
        post_id: int,
        requester_id: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> Optional[Post]:
        raise NotImplementedError

    @abstractmethod
    async def delete_post(self, post_id: int, requester_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def list_by_author(
        self, author_id: str, limit: int = 50, offset: int = 0
    ) -> list[Post]:
        raise NotImplementedError
