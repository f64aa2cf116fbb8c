"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version, and
the configuration readiness report) used for monitoring and deployment
verification.
"""

from fastapi import APIRouter

from thinky import __version__
from thinky.server.core import constant
from thinky.server.core.config import settings

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    return {"version": __version__}


@router.get(
    f"{constant.API_PREFIX}/_status",
    summary="Readiness Status",
    description="Which critical settings are missing. Never reveals secret values.",
    response_description="Readiness object.",
)
async def readiness_status():
    """
    Report configuration readiness.

    Stays reachable while the rest of the API answers "Server misconfigured",
    so operators can see which variables still have to be set.
    """
    missing = settings.missing_critical
    return {
        "serverReady": not missing,
        "missing": missing,
        "environment": settings.environment,
        "productionUrlPresent": bool(settings.production_url),
    }
