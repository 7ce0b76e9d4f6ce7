"""FastAPI application factory.

Creates and configures the mesh graph API with lifespan management
for the namespace gateway connection.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from mesh_graph.adapters.kubernetes.namespaces import KubernetesNamespaceGateway
from mesh_graph.api.middleware import register_middleware
from mesh_graph.api.routes.graph import router as graph_router
from mesh_graph.api.routes.health import router as health_router
from mesh_graph.settings import Settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the Kubernetes client across the app lifecycle."""
    settings = Settings()

    # -- Startup: create gateway and attach to app state -------------------
    namespace_gateway = KubernetesNamespaceGateway.create(settings.kubernetes)

    app.state.settings = settings
    app.state.namespace_gateway = namespace_gateway

    logger.info(
        "app_started",
        kubernetes_api=settings.kubernetes.api_url,
        istio_namespace=settings.graph.istio_namespace,
    )

    yield

    # -- Shutdown: release connections -------------------------------------
    await namespace_gateway.close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Build and return the configured FastAPI application."""
    app = FastAPI(
        title="Mesh Graph API",
        description="Graph request resolution for a service mesh topology viewer",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_middleware(app)

    app.include_router(health_router, prefix="/v1")
    app.include_router(graph_router, prefix="/v1")

    return app
