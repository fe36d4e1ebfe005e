"""
API router.

Aggregates all endpoints under /api.
"""

from fastapi import APIRouter

from . import auth, site, system

router = APIRouter()

# Include all route modules
router.include_router(auth.router, tags=["Authentication"])
router.include_router(site.router, tags=["Site"])
router.include_router(system.router, tags=["System"])
