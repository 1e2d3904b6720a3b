from socialfeed.auth.password import hash_password, verify_password
from socialfeed.auth.session import create_session_token, verify_session_token

__all__ = [
    "hash_password",
    "verify_password",
    "create_session_token",
    "verify_session_token",
]
