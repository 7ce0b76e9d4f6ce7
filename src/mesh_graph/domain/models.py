"""Domain models for graph request resolution.

This module defines the shared contract between the request resolvers and
the graph builder. The descriptor (``GraphOptions``) and every sub-record is
frozen: it is built once per request and only read afterwards.

All models are pure Python + Pydantic v2. Zero framework imports.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, Field, PlainSerializer, field_validator

if TYPE_CHECKING:
    from mesh_graph.ports.appender import AppenderExecutor, TrafficMap

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GraphType(enum.StrEnum):
    """Node granularity of the generated graph."""

    APP = "app"
    SERVICE = "service"
    VERSIONED_APP = "versionedApp"
    WORKLOAD = "workload"


class GroupBy(enum.StrEnum):
    """Box grouping applied by the vendor serializer."""

    APP = "app"
    NONE = "none"
    VERSION = "version"


class Vendor(enum.StrEnum):
    """Supported graph serialization vendors."""

    CYTOSCAPE = "cytoscape"


class GraphKind(enum.StrEnum):
    """Namespace-wide graph or a graph centred on a single entity."""

    NAMESPACE = "namespace"
    NODE = "node"


class AppenderName(enum.StrEnum):
    """Names accepted by the ``appenders`` query parameter."""

    SERVICE_ENTRY = "serviceEntry"
    DEAD_NODE = "deadNode"
    RESPONSE_TIME = "responseTime"
    SECURITY_POLICY = "securityPolicy"
    UNUSED_NODE = "unusedNode"
    ISTIO = "istio"
    SIDECARS_CHECK = "sidecarsCheck"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class NamespaceWindow(BaseModel):
    """A namespace in scope for the request and its clamped lookback."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    # May be zero or negative when the namespace is younger than the
    # reference instant allows; consumers treat that as an empty window.
    duration: timedelta


class NodeOptions(BaseModel):
    """Path variables identifying the entity of a node-detail graph."""

    model_config = {"frozen": True}

    app: str = ""
    namespace: str = ""
    service: str = ""
    version: str = ""
    workload: str = ""

    @property
    def is_node_graph(self) -> bool:
        """True when the graph is centred on an app, workload or service.

        ``version`` alone does not count: a version is always qualified by
        its app.
        """
        return bool(self.app or self.workload or self.service)


class VendorOptions(BaseModel):
    """Options handed to the vendor-specific graph generator."""

    model_config = {"frozen": True}

    duration: timedelta
    graph_type: GraphType
    group_by: GroupBy
    query_time: int  # unix time in seconds


# ---------------------------------------------------------------------------
# Read-only mapping fields
# ---------------------------------------------------------------------------


def _read_only(value: dict[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(value)


def _as_dict(value: Mapping[str, Any]) -> dict[str, Any]:
    return dict(value)


# Validated as a fresh dict, then exposed through a read-only proxy
NamespaceWindows = Annotated[
    dict[str, NamespaceWindow],
    AfterValidator(_read_only),
    PlainSerializer(_as_dict, return_type=dict[str, NamespaceWindow]),
]
NamespaceCreationTimes = Annotated[
    dict[str, datetime | None],
    AfterValidator(_read_only),
    PlainSerializer(_as_dict, return_type=dict[str, datetime | None]),
]


# ---------------------------------------------------------------------------
# Appenders — tagged union over the stage name
# ---------------------------------------------------------------------------


class Appender(BaseModel):
    """Base for configured enrichment stages.

    Each stage carries its own configuration and exposes one invocation
    contract, ``append_graph``. The algorithms live behind the
    ``AppenderExecutor`` port.
    """

    model_config = {"frozen": True}

    name: str

    def append_graph(self, traffic_map: TrafficMap, executor: AppenderExecutor) -> None:
        """Enrich ``traffic_map`` in place using this stage's configuration."""
        executor.apply(self, traffic_map)


class ServiceEntryAppender(Appender):
    """Resolves service nodes backed by ServiceEntry definitions."""

    name: Literal["serviceEntry"] = "serviceEntry"
    accessible_namespaces: NamespaceCreationTimes = Field(
        default_factory=lambda: MappingProxyType({})
    )


class DeadNodeAppender(Appender):
    """Prunes nodes without traffic or backing workloads."""

    name: Literal["deadNode"] = "deadNode"


class ResponseTimeAppender(Appender):
    """Decorates edges with response time at the configured quantile."""

    name: Literal["responseTime"] = "responseTime"
    quantile: float
    graph_type: GraphType
    inject_service_nodes: bool
    include_istio: bool
    namespaces: NamespaceWindows
    query_time: int


class SecurityPolicyAppender(Appender):
    """Decorates edges with mTLS security information."""

    name: Literal["securityPolicy"] = "securityPolicy"
    graph_type: GraphType
    include_istio: bool
    inject_service_nodes: bool
    namespaces: NamespaceWindows
    query_time: int


class UnusedNodeAppender(Appender):
    """Adds nodes for defined but unused services and workloads."""

    name: Literal["unusedNode"] = "unusedNode"
    graph_type: GraphType
    is_node_graph: bool


class IstioAppender(Appender):
    """Flags Istio-specific configuration on nodes."""

    name: Literal["istio"] = "istio"


class SidecarsCheckAppender(Appender):
    """Flags workloads that are missing sidecars."""

    name: Literal["sidecarsCheck"] = "sidecarsCheck"


AppenderConfig = Annotated[
    ServiceEntryAppender
    | DeadNodeAppender
    | ResponseTimeAppender
    | SecurityPolicyAppender
    | UnusedNodeAppender
    | IstioAppender
    | SidecarsCheckAppender,
    Field(discriminator="name"),
]


# ---------------------------------------------------------------------------
# Graph request descriptor
# ---------------------------------------------------------------------------


class GraphOptions(BaseModel):
    """Immutable descriptor of a single graph generation request.

    Built once from validated inputs and consumed by the graph builder.
    ``namespaces`` must hold at least one entry.
    """

    model_config = {"frozen": True}

    accessible_namespaces: NamespaceCreationTimes
    namespaces: NamespaceWindows
    node: NodeOptions = Field(default_factory=NodeOptions)
    vendor_options: VendorOptions
    vendor: Vendor = Vendor.CYTOSCAPE
    include_istio: bool = False
    inject_service_nodes: bool = False
    istio_namespace: str = "istio-system"
    appenders: tuple[AppenderConfig, ...] = ()

    @field_validator("namespaces")
    @classmethod
    def _require_namespace(
        cls, value: Mapping[str, NamespaceWindow]
    ) -> Mapping[str, NamespaceWindow]:
        if not value:
            msg = "at least one target namespace is required"
            raise ValueError(msg)
        return value

    @property
    def graph_kind(self) -> GraphKind:
        """Classify the request by its node selector."""
        return classify_graph_kind(self.node)

    @property
    def appender_names(self) -> list[str]:
        return [a.name for a in self.appenders]

    def excludes_istio(self, namespace: str) -> bool:
        """Whether control-plane services are filtered out of ``namespace``.

        The ``include_istio`` flag is ignored when the control-plane
        namespace itself is being graphed.
        """
        if namespace == self.istio_namespace:
            return False
        return not self.include_istio

    def summary(self) -> dict[str, Any]:
        """Compact view used for structured log lines."""
        return {
            "namespaces": sorted(self.namespaces),
            "graph_kind": self.graph_kind.value,
            "graph_type": self.vendor_options.graph_type.value,
            "appenders": self.appender_names,
        }


def classify_graph_kind(node: NodeOptions) -> GraphKind:
    """Return NODE if any of app/version/workload/service is set."""
    if node.app or node.version or node.workload or node.service:
        return GraphKind.NODE
    return GraphKind.NAMESPACE
