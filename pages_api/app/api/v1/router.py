"""
Top‑level router for version 1 of the API.

This router aggregates the entity routers (pages, tracks, playlists),
the Cloudinary image proxy and the health/diagnostic routes under a
unified prefix.  When new endpoints are added, update this file to
include their routers.
"""

from fastapi import APIRouter

from .endpoints import health, images, pages, playlists, tracks

router = APIRouter()

router.include_router(pages.router, prefix="/pages", tags=["pages"])
router.include_router(tracks.router, prefix="/tracks", tags=["tracks"])
router.include_router(playlists.router, prefix="/playlists", tags=["playlists"])
router.include_router(images.router, prefix="/images", tags=["images"])
# Health routes define their own paths (``/health``, ``/test``, ``/data``).
router.include_router(health.router, tags=["health"])
