"""
API routes for the return engine.
"""

from fastapi import APIRouter

from return_engine.api import calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
