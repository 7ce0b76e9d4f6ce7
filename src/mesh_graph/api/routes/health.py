"""Health check endpoint.

GET /v1/health — reports service status and configured gateway.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Service health check.

    Returns "healthy" once the namespace gateway is attached to the app and
    "unhealthy" before startup completes.
    """
    gateway = getattr(request.app.state, "namespace_gateway", None)
    return {
        "status": "healthy" if gateway is not None else "unhealthy",
        "namespace_gateway": type(gateway).__name__ if gateway is not None else None,
        "version": "0.1.0",
    }
