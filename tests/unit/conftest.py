"""Unit test conftest with an in-memory namespace gateway for API testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from tests.fixtures.namespaces import InMemoryNamespaceGateway


@pytest.fixture()
def test_client(namespace_gateway: InMemoryNamespaceGateway) -> TestClient:
    """FastAPI TestClient with an in-memory gateway (no Kubernetes API needed)."""
    from fastapi import FastAPI
    from fastapi.responses import ORJSONResponse
    from fastapi.testclient import TestClient as _TestClient

    from mesh_graph.api.middleware import register_middleware
    from mesh_graph.api.routes.graph import router as graph_router
    from mesh_graph.api.routes.health import router as health_router
    from mesh_graph.settings import Settings

    app = FastAPI(default_response_class=ORJSONResponse)
    register_middleware(app)
    app.include_router(health_router, prefix="/v1")
    app.include_router(graph_router, prefix="/v1")

    # Wire stubs into app state
    app.state.settings = Settings()
    app.state.namespace_gateway = namespace_gateway

    return _TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    """Authorization header carrying a test bearer token."""
    return {"Authorization": "Bearer test-token"}
