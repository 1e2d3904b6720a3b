"""Stores and read views."""

from socialfeed.services.discovery import DiscoveryService
from socialfeed.services.feed import FeedService, PostService
from socialfeed.services.social import InteractionService, SocialService
from socialfeed.services.user import UserService

__all__ = [
    "DiscoveryService",
    "FeedService",
    "InteractionService",
    "PostService",
    "SocialService",
    "UserService",
]
