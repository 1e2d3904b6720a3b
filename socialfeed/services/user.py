import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialfeed.exceptions import Conflict
from socialfeed.models import User
from socialfeed.services.base import IdentityStore, LookupKind, UserLookup

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"username", "first_name", "last_name", "bio", "profile_image_url"}


def user_to_dict(user: User) -> dict:
    """Public user fields, without e-mail or password hash."""
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "bio": user.bio,
        "profile_image_url": user.profile_image_url,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class UserService(IdentityStore):
    """User account storage."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        """Create a new user."""
        if username and await self.get_user_by_username(username):
            raise Conflict("Username is already taken")
        if email and await self.get_user_by_email(email):
            raise Conflict("Email is already registered")

        user = User(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Username or email already exists")

        await self.db.refresh(user)
        logger.info(f"Created user {user.id} ({user.username})")
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user by username."""
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def update_user(self, user_id: str, **fields) -> Optional[User]:
        """
        Update profile fields.
        Only keys in UPDATABLE_FIELDS are applied; None values are applied as-is
        so callers can clear a field.
        """
        user = await self.get_user(user_id)
        if not user:
            return None

        username = fields.get("username")
        if username and username != user.username:
            existing = await self.get_user_by_username(username)
            if existing and existing.id != user_id:
                raise Conflict("Username is already taken")

        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Username is already taken")

        await self.db.refresh(user)
        return user

    async def resolve(self, identifier: str) -> UserLookup:
        """Resolve a username first, falling back to an ID lookup."""
        user = await self.get_user_by_username(identifier)
        if user:
            return UserLookup(LookupKind.USERNAME, user)

        user = await self.get_user(identifier)
        if user:
            return UserLookup(LookupKind.ID, user)

        return UserLookup(LookupKind.NOT_FOUND)
