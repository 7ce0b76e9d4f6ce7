"""Appender executor port.

The graph builder owns the enrichment algorithms. The request resolver only
selects, configures and orders stages; it hands each one to an executor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from mesh_graph.domain.models import Appender

# Graph under construction, keyed by node id. Its shape belongs to the
# graph builder.
TrafficMap = dict[str, Any]


class AppenderExecutor(Protocol):
    """Protocol for running a configured appender over a traffic map."""

    def apply(self, appender: Appender, traffic_map: TrafficMap) -> None:
        """Mutate ``traffic_map`` according to ``appender``'s configuration."""
        ...
