"""Application settings via Pydantic BaseSettings.

All configuration uses the MG_ environment variable prefix.
Centralized here so request defaults are not hardcoded across the codebase.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from mesh_graph.domain.models import GraphType, GroupBy, Vendor


class GraphSettings(BaseSettings):
    """Defaults applied when a graph request omits a parameter."""

    model_config = {"env_prefix": "MG_GRAPH_"}

    default_duration: str = "10m"
    default_graph_type: GraphType = GraphType.WORKLOAD
    default_group_by: GroupBy = GroupBy.NONE
    default_vendor: Vendor = Vendor.CYTOSCAPE
    default_include_istio: bool = False
    default_inject_service_nodes: bool = False

    # Quantile used by the responseTime appender when the request does not
    # supply a parseable responseTimeQuantile
    default_response_time_quantile: float = 0.95

    # Control-plane namespace; includeIstio is ignored when graphing it
    istio_namespace: str = "istio-system"


class KubernetesSettings(BaseSettings):
    """Kubernetes API connection used to list the caller's namespaces."""

    model_config = {"env_prefix": "MG_KUBE_"}

    api_url: str = "https://kubernetes.default.svc"
    timeout_seconds: float = 10.0
    verify_ssl: bool = True


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "MG_"}

    app_name: str = "mesh-graph"
    debug: bool = False
    log_level: str = "INFO"

    graph: GraphSettings = Field(default_factory=GraphSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
