"""Graph request endpoints.

GET /v1/namespaces/graph                                                — namespace-wide graph
GET /v1/namespaces/{namespace}/applications/{app}/graph                 — app node graph
GET /v1/namespaces/{namespace}/applications/{app}/versions/{version}/graph
GET /v1/namespaces/{namespace}/workloads/{workload}/graph               — workload node graph
GET /v1/namespaces/{namespace}/services/{service}/graph                 — service node graph

Each endpoint resolves the request into a ``GraphOptions`` descriptor and
returns it. Building and serializing the graph itself happens downstream.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from mesh_graph.api.dependencies import get_resolver, get_token
from mesh_graph.domain.duration import format_duration
from mesh_graph.domain.models import GraphOptions, NodeOptions  # noqa: TCH001 — runtime: response_model
from mesh_graph.resolver import GraphOptionsResolver  # noqa: TCH001 — runtime: Depends()

router = APIRouter(tags=["graph"])

ResolverDep = Annotated[GraphOptionsResolver, Depends(get_resolver)]
TokenDep = Annotated[str | None, Depends(get_token)]


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class NamespaceWindowOut(BaseModel):
    """A target namespace with its clamped lookback."""

    name: str
    duration: str
    duration_seconds: float


class GraphRequestResponse(BaseModel):
    """Resolved graph request descriptor."""

    graph_kind: str
    graph_type: str
    group_by: str
    vendor: str
    duration: str
    query_time: int
    include_istio: bool
    inject_service_nodes: bool
    node: NodeOptions
    namespaces: list[NamespaceWindowOut]
    appenders: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_options(cls, options: GraphOptions) -> GraphRequestResponse:
        vendor_options = options.vendor_options
        return cls(
            graph_kind=options.graph_kind,
            graph_type=vendor_options.graph_type,
            group_by=vendor_options.group_by,
            vendor=options.vendor,
            duration=format_duration(vendor_options.duration),
            query_time=vendor_options.query_time,
            include_istio=options.include_istio,
            inject_service_nodes=options.inject_service_nodes,
            node=options.node,
            namespaces=[
                NamespaceWindowOut(
                    name=window.name,
                    duration=format_duration(window.duration),
                    duration_seconds=window.duration.total_seconds(),
                )
                for window in options.namespaces.values()
            ],
            appenders=[appender.model_dump(mode="json") for appender in options.appenders],
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _resolve(
    request: Request,
    resolver: GraphOptionsResolver,
    token: str | None,
) -> GraphRequestResponse:
    """Resolve the request using its path variables and query parameters.

    A repeated query parameter resolves to its first value.
    """
    path_vars = {key: str(value) for key, value in request.path_params.items()}
    query = request.query_params
    params = {key: query.getlist(key)[0] for key in query}
    options = await resolver.resolve(path_vars, params, token)
    return GraphRequestResponse.from_options(options)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/namespaces/graph", response_model=GraphRequestResponse)
async def graph_namespaces(
    request: Request,
    resolver: ResolverDep,
    token: TokenDep,
) -> GraphRequestResponse:
    """Resolve a namespace-wide graph request.

    Namespaces come from the comma-separated ``namespaces`` parameter.
    """
    return await _resolve(request, resolver, token)


@router.get("/namespaces/{namespace}/applications/{app}/graph", response_model=GraphRequestResponse)
async def graph_app(
    request: Request,
    resolver: ResolverDep,
    token: TokenDep,
) -> GraphRequestResponse:
    """Resolve a node-detail graph request centred on an app."""
    return await _resolve(request, resolver, token)


@router.get(
    "/namespaces/{namespace}/applications/{app}/versions/{version}/graph",
    response_model=GraphRequestResponse,
)
async def graph_app_version(
    request: Request,
    resolver: ResolverDep,
    token: TokenDep,
) -> GraphRequestResponse:
    """Resolve a node-detail graph request centred on an app version."""
    return await _resolve(request, resolver, token)


@router.get(
    "/namespaces/{namespace}/workloads/{workload}/graph",
    response_model=GraphRequestResponse,
)
async def graph_workload(
    request: Request,
    resolver: ResolverDep,
    token: TokenDep,
) -> GraphRequestResponse:
    """Resolve a node-detail graph request centred on a workload."""
    return await _resolve(request, resolver, token)


@router.get(
    "/namespaces/{namespace}/services/{service}/graph",
    response_model=GraphRequestResponse,
)
async def graph_service(
    request: Request,
    resolver: ResolverDep,
    token: TokenDep,
) -> GraphRequestResponse:
    """Resolve a node-detail graph request centred on a service."""
    return await _resolve(request, resolver, token)
