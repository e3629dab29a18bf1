"""
Cyber Kitchen Backend — Health Check Route
============================================

What:  Health check endpoint for monitoring and container probes.
How:   Checks that the recipes file is readable (when present) and that the
       media root is writable.

Status levels:
    - healthy:   recipes file readable or absent, media root writable
    - unhealthy: either check failed (HTTP 200 still; body says why)
"""

import logging
import os
import time

from fastapi import APIRouter, Depends

from cyberkitchen import __version__
from cyberkitchen.config import settings
from cyberkitchen.dependencies import get_media_manager
from cyberkitchen.schemas.recipe import HealthResponse
from cyberkitchen.services.media_service import MediaManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    media: MediaManager = Depends(get_media_manager),
) -> HealthResponse:
    overall = "healthy"

    recipes_file = settings.recipes_file
    if not recipes_file.exists():
        recipes_status = "absent"
    elif os.access(recipes_file, os.R_OK):
        recipes_status = "present"
    else:
        recipes_status = "unreadable"
        overall = "unhealthy"
        logger.warning("Health check: recipes file unreadable: %s", recipes_file)

    if media.media_root.is_dir() and os.access(media.media_root, os.W_OK):
        media_status = "writable"
    else:
        media_status = "unwritable"
        overall = "unhealthy"
        logger.warning("Health check: media root not writable: %s", media.media_root)

    return HealthResponse(
        status=overall,
        version=__version__,
        recipes_file=recipes_status,
        media_root=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
