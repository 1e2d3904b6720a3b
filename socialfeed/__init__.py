"""Social feed API: users, posts, follows, likes and comments."""

__version__ = "1.0.0"
