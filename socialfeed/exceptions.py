"""Domain errors raised by the stores and the API layer.

They carry the HTTP status they map to, but only the handlers installed in
``socialfeed.main`` turn them into responses.
"""


class SocialFeedError(Exception):
    """Base class for all domain errors"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(SocialFeedError):
    """Raised when input is malformed"""

    status_code = 400
    default_message = "Invalid request"


class Unauthorized(SocialFeedError):
    """Raised when a protected route has no valid session"""

    status_code = 401
    default_message = "Unauthorized"


class NotFound(SocialFeedError):
    """Raised when an entity is missing or the requester does not own it"""

    status_code = 404
    default_message = "Not found"


class Conflict(SocialFeedError):
    """Raised when a uniqueness constraint is violated"""

    status_code = 400
    default_message = "Already exists"
