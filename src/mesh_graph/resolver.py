"""Graph request resolver.

Turns a raw request (path variables, query parameters, caller token) into
an immutable ``GraphOptions`` descriptor:

  parameters -> accessible namespaces -> clamped windows -> appenders

Every step fails fast; no partial descriptor is returned.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from mesh_graph.domain.appenders import assemble_appenders
from mesh_graph.domain.errors import ForbiddenError, GraphInternalError
from mesh_graph.domain.models import GraphOptions
from mesh_graph.domain.namespaces import resolve_namespaces
from mesh_graph.domain.params import resolve_params

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from mesh_graph.ports.namespaces import NamespaceGateway
    from mesh_graph.settings import GraphSettings

log = structlog.get_logger(__name__)


class GraphOptionsResolver:
    """Resolves graph requests against an injected namespace gateway."""

    def __init__(self, gateway: NamespaceGateway, settings: GraphSettings) -> None:
        self._gateway = gateway
        self._settings = settings

    async def resolve(
        self,
        path_vars: Mapping[str, str],
        params: Mapping[str, str],
        token: str | None,
        now: datetime | None = None,
    ) -> GraphOptions:
        """Resolve one request. ``now`` pins the wall clock for tests."""
        graph_params = resolve_params(path_vars, params, self._settings, now=now)

        if token is None:
            msg = "token missing in request context"
            raise GraphInternalError(msg)
        if not isinstance(token, str):
            msg = "token is not of type string"
            raise GraphInternalError(msg)

        accessible = await self._gateway.get_namespaces(token)

        vendor_options = graph_params.vendor_options
        try:
            namespaces = resolve_namespaces(
                graph_params.namespace_names,
                accessible,
                vendor_options.duration,
                vendor_options.query_time,
                now,
            )
        except ForbiddenError as exc:
            log.warning("namespace_forbidden", detail=exc.message)
            raise

        appenders = assemble_appenders(
            params,
            graph_params,
            namespaces,
            accessible,
            self._settings.default_response_time_quantile,
        )

        options = GraphOptions(
            accessible_namespaces=accessible,
            namespaces=namespaces,
            node=graph_params.node,
            vendor_options=vendor_options,
            vendor=graph_params.vendor,
            include_istio=graph_params.include_istio,
            inject_service_nodes=graph_params.inject_service_nodes,
            istio_namespace=self._settings.istio_namespace,
            appenders=appenders,
        )
        log.info("graph_options_resolved", **options.summary())
        return options
