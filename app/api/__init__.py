"""
API package with centralized router
"""
from fastapi import APIRouter

from .conversations import router as conversations_router
from .sessions import router as sessions_router

# Routes are served from the site root, where the call UI expects them
api_router = APIRouter()

api_router.include_router(sessions_router)
api_router.include_router(conversations_router)

__all__ = ["api_router"]
