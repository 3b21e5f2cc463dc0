"""
Liveness and status endpoints for the calculation engine.
"""

from fastapi import APIRouter

from valuecase.app.services.assumptions import INPUT_BOUNDS
from valuecase.app.services.scenarios import SCENARIO_MULTIPLIERS

ENGINE_NAME = "valuecase-engine"
ENGINE_VERSION = "0.1.0"

router = APIRouter()


@router.get("/healthz")
async def health_check():
    return {"ok": True}


@router.get("/v1/health/status")
async def health_status():
    """Engine version plus the scenario presets and bounded inputs it serves."""
    return {
        "status": "healthy",
        "service": ENGINE_NAME,
        "version": ENGINE_VERSION,
        "scenarios": sorted(SCENARIO_MULTIPLIERS),
        "bounded_inputs": len(INPUT_BOUNDS),
    }
