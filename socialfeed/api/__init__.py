from fastapi import APIRouter

from socialfeed.api import auth, comments, posts, users

router = APIRouter(prefix="/api")

router.include_router(auth.router)
router.include_router(users.router)
router.include_router(posts.router)
router.include_router(comments.router)
