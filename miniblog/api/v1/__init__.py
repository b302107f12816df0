"""API v1 routes."""

from fastapi import APIRouter

from miniblog.api.v1 import auth, health, posts, users

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(users.router, prefix="/v1/users", tags=["users"])
router.include_router(posts.router, prefix="/v1/posts", tags=["posts"])
