"""Shared pytest fixtures for the mesh-graph test suite.

This conftest provides graph defaults and namespace gateway fixtures that
wrap the helpers in ``tests.fixtures.namespaces``. No external service
dependencies are required.
"""

from __future__ import annotations

import pytest

from mesh_graph.settings import GraphSettings
from tests.fixtures.namespaces import (
    QUERY_INSTANT,
    InMemoryNamespaceGateway,
    make_accessible_namespaces,
)


@pytest.fixture()
def graph_settings() -> GraphSettings:
    """Default graph settings (10m duration, workload graph, cytoscape)."""
    return GraphSettings()


@pytest.fixture()
def accessible_namespaces():
    """The default accessible-namespace map."""
    return make_accessible_namespaces()


@pytest.fixture()
def namespace_gateway() -> InMemoryNamespaceGateway:
    """In-memory gateway over the default accessible-namespace map."""
    return InMemoryNamespaceGateway()


@pytest.fixture()
def query_instant():
    """The fixed reference instant used across tests."""
    return QUERY_INSTANT
