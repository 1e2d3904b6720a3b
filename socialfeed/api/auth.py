import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from socialfeed.api.deps import get_current_user, get_user_service
from socialfeed.auth.password import hash_password, verify_password
from socialfeed.auth.session import create_session_token
from socialfeed.config import get_settings
from socialfeed.exceptions import Unauthorized
from socialfeed.models import User
from socialfeed.schemas import (
    CurrentUserResponse,
    LoginRequest,
    MessageResponse,
    SignupRequest,
)
from socialfeed.services.user import UserService

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_session_cookie(response: Response, user_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user_id),
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


async def find_by_identifier(user_service: UserService, identifier: str) -> Optional[User]:
    """Look an account up by e-mail or username."""
    if "@" in identifier:
        user = await user_service.get_user_by_email(identifier)
        return user or await user_service.get_user_by_username(identifier)

    user = await user_service.get_user_by_username(identifier)
    return user or await user_service.get_user_by_email(identifier)


@router.post("/signup", response_model=CurrentUserResponse, status_code=201)
async def signup(
    request: SignupRequest,
    response: Response,
    user_service: UserService = Depends(get_user_service),
):
    """Create an account and start a session for it."""
    user = await user_service.create_user(
        username=request.username,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        password_hash=hash_password(request.password) if request.password else None,
    )
    set_session_cookie(response, user.id)
    return CurrentUserResponse.model_validate(user)


@router.post("/login", response_model=CurrentUserResponse)
async def login(
    request: LoginRequest,
    response: Response,
    user_service: UserService = Depends(get_user_service),
):
    """
    Start a session by e-mail or username.
    Accounts with a password credential must also present the password.
    """
    user = await find_by_identifier(user_service, request.identifier.strip())
    if not user:
        raise Unauthorized("Invalid credentials")

    if user.password_hash:
        if not request.password or not verify_password(request.password, user.password_hash):
            logger.warning(f"Failed password login for user {user.id}")
            raise Unauthorized("Invalid credentials")

    set_session_cookie(response, user.id)
    logger.info(f"User {user.id} logged in")
    return CurrentUserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """End the session by clearing its cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=CurrentUserResponse)
async def get_auth_user(current_user: User = Depends(get_current_user)):
    """Get the user of the current session."""
    return CurrentUserResponse.model_validate(current_user)
