"""
Top-level API router that aggregates all sub-routers.
"""

from fastapi import APIRouter

from ghcn_trends.api.stations import router as stations_router
from ghcn_trends.api.observations import router as observations_router
from ghcn_trends.api.trends import router as trends_router

router = APIRouter()
router.include_router(stations_router)
router.include_router(observations_router)
router.include_router(trends_router)
