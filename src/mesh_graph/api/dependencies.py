"""FastAPI dependency injection helpers.

Extracts shared resources from ``app.state`` so route handlers can
declare them via ``Depends()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TCH002 — runtime: FastAPI dependency injection

from mesh_graph.resolver import GraphOptionsResolver

if TYPE_CHECKING:
    from mesh_graph.ports.namespaces import NamespaceGateway
    from mesh_graph.settings import Settings


def get_settings(request: Request) -> Settings:
    """Return the application settings from app state."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_namespace_gateway(request: Request) -> NamespaceGateway:
    """Return the namespace gateway from app state."""
    return request.app.state.namespace_gateway  # type: ignore[no-any-return]


def get_resolver(request: Request) -> GraphOptionsResolver:
    """Build a resolver bound to the app's gateway and graph defaults."""
    return GraphOptionsResolver(
        gateway=get_namespace_gateway(request),
        settings=get_settings(request).graph,
    )


def get_token(request: Request) -> str | None:
    """Return the caller token placed in request state by the auth middleware."""
    return getattr(request.state, "token", None)
