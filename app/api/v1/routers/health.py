"""
Health check endpoints for monitoring and diagnostics.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, status

from app.core.async_redis import async_redis_client
from app.core.config import ENVIRONMENT
from app.services.firebase import firebase_service

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

SERVICE_NAME = "Tenant Signup API"
SERVICE_VERSION = "1.0.0"


async def _check_redis() -> Dict[str, Any]:
    try:
        if await async_redis_client.ping():
            return {"status": "healthy", "message": "Connected"}
        return {"status": "unhealthy", "message": "Ping failed"}
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return {"status": "unhealthy", "message": "Unreachable"}


async def _check_firebase() -> Dict[str, Any]:
    try:
        if await firebase_service.health_check():
            return {"status": "healthy", "message": "Connected"}
        return {"status": "unhealthy", "message": "Failed to connect or query Firebase"}
    except Exception as e:
        logger.error(f"Firebase health check failed: {e}")
        return {"status": "unhealthy", "message": "Unreachable"}


# Register both with and without trailing slash
@router.get("", status_code=status.HTTP_200_OK)
@router.get("/", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns 200 OK if the service is running.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": ENVIRONMENT,
    }


@router.get("/detailed", status_code=status.HTTP_200_OK)
@router.get("/detailed/", status_code=status.HTTP_200_OK)
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check that tests the session registry and the document store.
    """
    components = {
        "redis": await _check_redis(),
        "firebase": await _check_firebase(),
    }
    overall_healthy = all(c["status"] == "healthy" for c in components.values())

    return {
        "status": "healthy" if overall_healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": ENVIRONMENT,
        "components": components,
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
@router.get("/ready/", status_code=status.HTTP_200_OK)
async def readiness_check() -> Dict[str, Any]:
    """
    Readiness probe for container orchestration.
    Signup needs Firestore and sessions need Redis, so both must answer.
    """
    checks = {
        "redis": (await _check_redis())["status"] == "healthy",
        "firebase": (await _check_firebase())["status"] == "healthy",
    }
    return {"status": "ready" if all(checks.values()) else "not_ready", "checks": checks}


@router.get("/live", status_code=status.HTTP_200_OK)
@router.get("/live/", status_code=status.HTTP_200_OK)
async def liveness_check() -> Dict[str, str]:
    """
    Liveness probe for container orchestration.
    Returns 200 if the service is alive (even if dependencies are down).
    """
    return {"status": "alive"}
