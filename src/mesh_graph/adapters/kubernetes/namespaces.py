"""Kubernetes NamespaceGateway adapter.

Implements the ``NamespaceGateway`` protocol by listing namespaces through
the Kubernetes API with the caller's own bearer token, so the cluster's
RBAC decides which namespaces are accessible.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx
import orjson
import structlog

from mesh_graph.domain.errors import GraphInternalError

if TYPE_CHECKING:
    from mesh_graph.settings import KubernetesSettings

log = structlog.get_logger(__name__)

NAMESPACES_PATH = "/api/v1/namespaces"


class NamespaceGatewayError(GraphInternalError):
    """Raised when the namespace inventory cannot be fetched."""


def parse_creation_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 ``creationTimestamp``; unknown values map to None."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        log.warning("namespace_timestamp_invalid", value=value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_namespace_list(payload: dict[str, Any]) -> dict[str, datetime | None]:
    """Map a ``NamespaceList`` document to ``{name: creation time}``."""
    namespaces: dict[str, datetime | None] = {}
    for item in payload.get("items") or []:
        metadata = item.get("metadata") or {}
        name = metadata.get("name")
        if not name:
            continue
        namespaces[name] = parse_creation_timestamp(metadata.get("creationTimestamp"))
    return namespaces


class KubernetesNamespaceGateway:
    """Lists namespaces visible to a token via the Kubernetes API."""

    def __init__(self, client: httpx.AsyncClient, settings: KubernetesSettings) -> None:
        self._client = client
        self._settings = settings

    # -- lifecycle ----------------------------------------------------------

    @classmethod
    def create(cls, settings: KubernetesSettings) -> KubernetesNamespaceGateway:
        """Factory: create a gateway with its own HTTP client."""
        client = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.timeout_seconds,
            verify=settings.verify_ssl,
        )
        return cls(client=client, settings=settings)

    async def close(self) -> None:
        """Release the HTTP connection pool."""
        await self._client.aclose()
        log.info("kubernetes_client_closed")

    # -- queries ------------------------------------------------------------

    async def get_namespaces(self, token: str) -> dict[str, datetime | None]:
        """Return ``{namespace: creation time}`` for every namespace the token can list."""
        try:
            response = await self._client.get(
                NAMESPACES_PATH,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            log.error("namespace_gateway_failed", error=str(exc))
            msg = f"Unable to list namespaces: {exc}"
            raise NamespaceGatewayError(msg) from exc

        if response.status_code != 200:
            log.error("namespace_gateway_failed", status_code=response.status_code)
            msg = f"Unable to list namespaces: HTTP {response.status_code}"
            raise NamespaceGatewayError(msg)

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            msg = "Unable to list namespaces: invalid response body"
            raise NamespaceGatewayError(msg) from exc
        if not isinstance(payload, dict):
            msg = "Unable to list namespaces: unexpected response body"
            raise NamespaceGatewayError(msg)

        namespaces = parse_namespace_list(payload)
        log.debug("namespaces_listed", count=len(namespaces))
        return namespaces
