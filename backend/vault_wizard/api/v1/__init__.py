"""API v1 router configuration."""

from fastapi import APIRouter

from .auth import router as auth_router
from .secrets import router as secrets_router
from .sessions import router as sessions_router
from .upload import router as upload_router

# Main API v1 router
router = APIRouter()

# All wizard steps hang off /sessions/{session_id}
router.include_router(sessions_router, prefix="/sessions", tags=["Sessions"])
router.include_router(auth_router, prefix="/sessions", tags=["Authentication"])
router.include_router(secrets_router, prefix="/sessions", tags=["Secrets"])
router.include_router(upload_router, prefix="/sessions", tags=["Upload"])

__all__ = ["router"]
