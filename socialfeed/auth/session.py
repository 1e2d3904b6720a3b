from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from socialfeed.config import get_settings

settings = get_settings()


def create_session_token(
    user_id: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create the signed token stored in the session cookie"""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            days=settings.session_max_age_days
        )

    to_encode = {
        "sub": user_id,
        "exp": expire,
        "iat": datetime.now(timezone.utc)
    }

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm
    )


def verify_session_token(token: str) -> Optional[str]:
    """Return the user ID carried by a session token, or None if invalid"""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm]
        )
    except JWTError:
        return None
    return payload.get("sub")
