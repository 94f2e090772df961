"""Album routes package.

This module aggregates the shared album API:
- albums: Album lifecycle and the caller's role
- pictures: Slot uploads, picture edits and tag search
"""
from fastapi import APIRouter

from . import albums, pictures

# Create main router with all routes
router = APIRouter(tags=["albums"])

# Include all sub-routers
router.include_router(albums.router)
router.include_router(pictures.router)

__all__ = ["router"]
