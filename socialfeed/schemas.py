from pydantic import AfterValidator, BaseModel, EmailStr, Field, HttpUrl, TypeAdapter
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, Literal, Union
from datetime import datetime

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"

_http_url = TypeAdapter(HttpUrl)


def check_url(value: str) -> str:
    """Validate as an http(s) URL but keep the string exactly as sent."""
    try:
        _http_url.validate_python(value)
    except ValueError:
        raise ValueError("Invalid URL")
    return value


ImageUrl = Annotated[str, AfterValidator(check_url)]


class CamelModel(BaseModel):
    """Serializes to camelCase, accepts camelCase or snake_case input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ----- User Schemas -----
class SignupRequest(CamelModel):
    email: Optional[EmailStr] = None
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=8, max_length=72)


class LoginRequest(CamelModel):
    identifier: str = Field(..., min_length=1, description="Email or username")
    password: Optional[str] = None


class UserUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    # Empty string clears the field
    bio: Optional[str] = Field(None, max_length=300)
    profile_image_url: Optional[Union[ImageUrl, Literal[""]]] = None


class UserResponse(CamelModel):
    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(UserResponse):
    email: Optional[str] = None


class UserProfileResponse(UserResponse):
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    is_following: bool = False


class UserSearchResult(UserResponse):
    followers_count: int = 0
    is_following: bool = False


# ----- Post Schemas -----
class PostCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=500)
    image_url: Optional[ImageUrl] = None


class PostUpdate(PostCreate):
    pass


class PostResponse(CamelModel):
    id: int
    user_id: str
    content: str
    image_url: Optional[str] = None
    author: UserResponse
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime


# ----- Follow Schemas -----
class FollowResponse(CamelModel):
    id: int
    follower_id: str
    following_id: str
    created_at: datetime


# ----- Like Schemas -----
class LikeResponse(CamelModel):
    id: int
    user_id: str
    post_id: int
    created_at: datetime


# ----- Comment Schemas -----
class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=500)


class CommentResponse(CamelModel):
    id: int
    user_id: str
    post_id: int
    content: str
    author: UserResponse
    created_at: datetime


# ----- Misc -----
class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
    version: str


# ----- Session Context -----
class SessionContext(BaseModel):
    """Identity derived from the session cookie, passed explicitly to handlers"""
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
