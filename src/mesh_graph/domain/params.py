"""Graph request parameter resolution.

Converts raw path variables and query parameters into typed, defaulted and
validated fields. Checks run in a fixed order and the first failure raises
``BadRequestError``; errors are never accumulated.

Pure Python + Pydantic v2 — ZERO framework imports.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel

from mesh_graph.domain.duration import parse_duration
from mesh_graph.domain.errors import BadRequestError
from mesh_graph.domain.models import (
    GraphKind,
    GraphType,
    GroupBy,
    NodeOptions,
    Vendor,
    VendorOptions,
    classify_graph_kind,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mesh_graph.settings import GraphSettings

# Literals accepted by Go's strconv.ParseBool, which clients already send
_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

PATH_VARIABLES = ("app", "namespace", "service", "version", "workload")

_E = TypeVar("_E", bound=StrEnum)


class GraphParams(BaseModel):
    """Typed request fields, before namespace authorization."""

    model_config = {"frozen": True}

    node: NodeOptions
    vendor_options: VendorOptions
    vendor: Vendor
    include_istio: bool
    inject_service_nodes: bool
    namespace_names: tuple[str, ...]


def parse_bool(value: str) -> bool:
    """Parse a boolean literal. Raises ValueError for anything else."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = f"invalid boolean: {value!r}"
    raise ValueError(msg)


def parse_int64(value: str) -> int:
    """Parse a signed base-10 integer in the int64 range."""
    if not _INT_PATTERN.fullmatch(value):
        msg = f"invalid integer: {value!r}"
        raise ValueError(msg)
    result = int(value)
    if not _INT64_MIN <= result <= _INT64_MAX:
        msg = f"integer out of range: {value!r}"
        raise ValueError(msg)
    return result


def split_csv(value: str) -> tuple[str, ...]:
    """Split a comma-separated list, trimming tokens and dropping empties.

    Duplicates are removed; first occurrence wins.
    """
    tokens = (token.strip() for token in value.split(","))
    return tuple(dict.fromkeys(token for token in tokens if token))


def _enum_param(enum_cls: type[_E], param: str, raw: str, default: _E) -> _E:
    if raw == "":
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        raise BadRequestError(f"Invalid {param} [{raw}]") from None


def _bool_param(param: str, raw: str, default: bool) -> bool:
    if raw == "":
        return default
    try:
        return parse_bool(raw)
    except ValueError:
        raise BadRequestError(f"Invalid {param} [{raw}]") from None


def _duration_param(raw: str, default: str) -> timedelta:
    value = raw or default
    try:
        duration = parse_duration(value)
    except ValueError:
        raise BadRequestError(f"Invalid duration [{value}]") from None
    if duration <= timedelta(0):
        raise BadRequestError(f"Invalid duration [{value}]")
    return duration


def resolve_params(
    path_vars: Mapping[str, str],
    params: Mapping[str, str],
    defaults: GraphSettings,
    *,
    now: datetime | None = None,
) -> GraphParams:
    """Resolve raw request values into ``GraphParams``.

    ``path_vars`` holds zero or more of app, namespace, service, version and
    workload. ``params`` holds the query parameters. Check order:
    duration, graphType, graphType vs. node selector, groupBy, includeIstio,
    injectServiceNodes, queryTime, vendor, namespaces.

    A node selector (app, version, workload or service) rejects only
    ``graphType=workload``. Kiali's graph handler is stricter and limits
    app selectors to app and versionedApp; this resolver additionally
    accepts ``service``.
    """
    node = NodeOptions(**{name: path_vars.get(name, "") for name in PATH_VARIABLES})

    duration = _duration_param(params.get("duration", ""), defaults.default_duration)

    graph_type = _enum_param(
        GraphType, "graphType", params.get("graphType", ""), defaults.default_graph_type
    )
    # Node detail graphs are built from app or service nodes
    if classify_graph_kind(node) is GraphKind.NODE and graph_type is GraphType.WORKLOAD:
        msg = (
            f"Invalid graphType [{graph_type}]. "
            "Node detail graphs do not support graphType workload."
        )
        raise BadRequestError(msg)

    group_by = _enum_param(GroupBy, "groupBy", params.get("groupBy", ""), defaults.default_group_by)

    include_istio = _bool_param(
        "includeIstio", params.get("includeIstio", ""), defaults.default_include_istio
    )
    inject_service_nodes = _bool_param(
        "injectServiceNodes",
        params.get("injectServiceNodes", ""),
        defaults.default_inject_service_nodes,
    )

    query_time_raw = params.get("queryTime", "")
    if query_time_raw == "":
        query_time = int((now or datetime.now(UTC)).timestamp())
    else:
        try:
            query_time = parse_int64(query_time_raw)
        except ValueError:
            raise BadRequestError(f"Invalid queryTime [{query_time_raw}]") from None

    vendor = _enum_param(Vendor, "vendor", params.get("vendor", ""), defaults.default_vendor)

    # A namespace path variable makes it the only relevant namespace
    namespaces_raw = node.namespace or params.get("namespaces", "")
    if namespaces_raw == "":
        msg = "At least one namespace must be specified via the namespaces query parameter."
        raise BadRequestError(msg)

    # Service graphs require service injection
    if graph_type is GraphType.SERVICE:
        inject_service_nodes = True

    return GraphParams(
        node=node,
        vendor_options=VendorOptions(
            duration=duration,
            graph_type=graph_type,
            group_by=group_by,
            query_time=query_time,
        ),
        vendor=vendor,
        include_istio=include_istio,
        inject_service_nodes=inject_service_nodes,
        namespace_names=split_csv(namespaces_raw),
    )
