"""Appender pipeline assembly.

Selects which enrichment stages run, configures each from the resolved
request, and emits them in a fixed order. The request only decides
membership, never order:

1. serviceEntry    pre-processes service nodes the other stages rely on
2. deadNode        prunes inactive nodes to reduce later work
3. responseTime    only applies to used nodes
4. securityPolicy  only applies to used nodes
5. unusedNode      adds orphan services and workloads
6. istio           sees the full node set
7. sidecarsCheck   sees the full node set

Pure Python + Pydantic v2 — ZERO framework imports.
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

from mesh_graph.domain.errors import BadRequestError
from mesh_graph.domain.models import (
    Appender,
    AppenderName,
    DeadNodeAppender,
    IstioAppender,
    ResponseTimeAppender,
    SecurityPolicyAppender,
    ServiceEntryAppender,
    SidecarsCheckAppender,
    UnusedNodeAppender,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime

    from mesh_graph.domain.models import NamespaceWindow
    from mesh_graph.domain.params import GraphParams
    from mesh_graph.ports.appender import AppenderExecutor, TrafficMap

APPENDER_ORDER: tuple[AppenderName, ...] = (
    AppenderName.SERVICE_ENTRY,
    AppenderName.DEAD_NODE,
    AppenderName.RESPONSE_TIME,
    AppenderName.SECURITY_POLICY,
    AppenderName.UNUSED_NODE,
    AppenderName.ISTIO,
    AppenderName.SIDECARS_CHECK,
)

DEFAULT_QUANTILE = 0.95

# Hex mantissa requires a binary exponent, e.g. 0x1p-2 or 0x.8p0
_HEX_FLOAT_PATTERN = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_INFINITY_LITERALS = frozenset({"inf", "infinity"})


def select_appenders(requested: str | None) -> frozenset[AppenderName]:
    """Return the set of stages named by the ``appenders`` parameter.

    ``None`` (parameter absent) selects every known stage. Empty tokens are
    ignored; an unknown name raises BadRequestError.
    """
    if requested is None:
        return frozenset(APPENDER_ORDER)

    selected: set[AppenderName] = set()
    for token in requested.split(","):
        name = token.strip()
        if not name:
            continue
        try:
            selected.add(AppenderName(name))
        except ValueError:
            raise BadRequestError(f"Invalid appender [{name}]") from None
    return frozenset(selected)


def parse_quantile(raw: str | None, default: float = DEFAULT_QUANTILE) -> float:
    """Parse ``responseTimeQuantile``, falling back to ``default``.

    An unparseable value is not an error. Decimal and hexadecimal
    (``0x1p-2``) float literals are accepted, as are ``inf`` and ``nan``.
    A finite literal too large for a float falls back to ``default``.
    """
    if raw is None or raw != raw.strip() or "_" in raw:
        return default
    if _HEX_FLOAT_PATTERN.fullmatch(raw):
        try:
            return float.fromhex(raw)
        except (ValueError, OverflowError):
            return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if math.isinf(value) and raw.lstrip("+-").lower() not in _INFINITY_LITERALS:
        return default
    return value


def assemble_appenders(
    query: Mapping[str, str],
    graph_params: GraphParams,
    namespaces: dict[str, NamespaceWindow],
    accessible_namespaces: dict[str, datetime | None],
    default_quantile: float = DEFAULT_QUANTILE,
) -> tuple[Appender, ...]:
    """Build the configured appenders for a request, in execution order."""
    selected = select_appenders(query.get("appenders"))
    vendor_options = graph_params.vendor_options

    factories: dict[AppenderName, Callable[[], Appender]] = {
        AppenderName.SERVICE_ENTRY: lambda: ServiceEntryAppender(
            accessible_namespaces=accessible_namespaces,
        ),
        AppenderName.DEAD_NODE: DeadNodeAppender,
        AppenderName.RESPONSE_TIME: lambda: ResponseTimeAppender(
            quantile=parse_quantile(query.get("responseTimeQuantile"), default_quantile),
            graph_type=vendor_options.graph_type,
            inject_service_nodes=graph_params.inject_service_nodes,
            include_istio=graph_params.include_istio,
            namespaces=namespaces,
            query_time=vendor_options.query_time,
        ),
        AppenderName.SECURITY_POLICY: lambda: SecurityPolicyAppender(
            graph_type=vendor_options.graph_type,
            include_istio=graph_params.include_istio,
            inject_service_nodes=graph_params.inject_service_nodes,
            namespaces=namespaces,
            query_time=vendor_options.query_time,
        ),
        AppenderName.UNUSED_NODE: lambda: UnusedNodeAppender(
            graph_type=vendor_options.graph_type,
            is_node_graph=graph_params.node.is_node_graph,
        ),
        AppenderName.ISTIO: IstioAppender,
        AppenderName.SIDECARS_CHECK: SidecarsCheckAppender,
    }

    return tuple(factories[name]() for name in APPENDER_ORDER if name in selected)


def run_appenders(
    appenders: tuple[Appender, ...],
    traffic_map: TrafficMap,
    executor: AppenderExecutor,
) -> TrafficMap:
    """Apply ``appenders`` to ``traffic_map`` in order and return it."""
    for appender in appenders:
        appender.append_graph(traffic_map, executor)
    return traffic_map
