"""Unit tests for mesh_graph.domain.models."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from mesh_graph.domain.models import (
    DeadNodeAppender,
    GraphKind,
    GraphOptions,
    NamespaceWindow,
    NodeOptions,
    ResponseTimeAppender,
    ServiceEntryAppender,
    UnusedNodeAppender,
    classify_graph_kind,
)
from tests.fixtures.namespaces import make_graph_options


class TestGraphKind:
    """Tests for node-detail vs. namespace-wide classification."""

    def test_no_selector_is_namespace_graph(self) -> None:
        assert classify_graph_kind(NodeOptions()) is GraphKind.NAMESPACE

    def test_namespace_alone_is_namespace_graph(self) -> None:
        assert classify_graph_kind(NodeOptions(namespace="bookinfo")) is GraphKind.NAMESPACE

    @pytest.mark.parametrize("field", ["app", "version", "workload", "service"])
    def test_any_selector_is_node_graph(self, field: str) -> None:
        node = NodeOptions(namespace="bookinfo", **{field: "x"})
        assert classify_graph_kind(node) is GraphKind.NODE

    def test_descriptor_graph_kind(self) -> None:
        options = make_graph_options(node=NodeOptions(namespace="bookinfo", app="reviews"))
        assert options.graph_kind is GraphKind.NODE

    def test_is_node_graph_ignores_version(self) -> None:
        assert NodeOptions(version="v1").is_node_graph is False
        assert NodeOptions(service="reviews").is_node_graph is True


class TestGraphOptions:
    """Tests for the immutable graph request descriptor."""

    def test_requires_a_namespace(self) -> None:
        with pytest.raises(PydanticValidationError, match="at least one target namespace"):
            make_graph_options(namespaces={})

    def test_is_frozen(self) -> None:
        options = make_graph_options()
        with pytest.raises(PydanticValidationError):
            options.include_istio = True  # type: ignore[misc]

    def test_window_is_frozen(self) -> None:
        window = NamespaceWindow(name="bookinfo", duration=timedelta(minutes=1))
        with pytest.raises(PydanticValidationError):
            window.duration = timedelta(minutes=2)  # type: ignore[misc]

    def test_window_allows_negative_duration(self) -> None:
        window = NamespaceWindow(name="bookinfo", duration=timedelta(seconds=-30))
        assert window.duration < timedelta(0)

    def test_appender_names(self) -> None:
        options = make_graph_options(
            appenders=(
                DeadNodeAppender(),
                UnusedNodeAppender(graph_type="app", is_node_graph=False),
            )
        )
        assert options.appender_names == ["deadNode", "unusedNode"]

    def test_appenders_validate_from_tagged_dicts(self) -> None:
        options = make_graph_options(
            appenders=[
                {"name": "deadNode"},
                {"name": "unusedNode", "graph_type": "app", "is_node_graph": True},
            ]
        )
        assert isinstance(options.appenders[0], DeadNodeAppender)
        assert isinstance(options.appenders[1], UnusedNodeAppender)
        assert options.appenders[1].is_node_graph is True

    def test_unknown_appender_tag_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            make_graph_options(appenders=[{"name": "magic"}])

    def test_summary(self) -> None:
        summary = make_graph_options().summary()
        assert summary == {
            "namespaces": ["bookinfo"],
            "graph_kind": "namespace",
            "graph_type": "workload",
            "appenders": [],
        }


class TestReadOnlyMappings:
    """Mapping fields cannot be changed after construction."""

    def test_namespaces_reject_item_assignment(self) -> None:
        options = make_graph_options()
        window = NamespaceWindow(name="other", duration=timedelta(minutes=1))
        with pytest.raises(TypeError):
            options.namespaces["other"] = window  # type: ignore[index]

    def test_namespaces_cannot_be_cleared(self) -> None:
        options = make_graph_options()
        with pytest.raises(AttributeError):
            options.namespaces.clear()  # type: ignore[attr-defined]
        assert list(options.namespaces) == ["bookinfo"]

    def test_accessible_namespaces_reject_item_assignment(self) -> None:
        options = make_graph_options()
        with pytest.raises(TypeError):
            options.accessible_namespaces["other"] = None  # type: ignore[index]
        assert "other" not in options.accessible_namespaces

    def test_source_dict_is_not_shared(self) -> None:
        windows = {"bookinfo": NamespaceWindow(name="bookinfo", duration=timedelta(minutes=10))}
        options = make_graph_options(namespaces=windows)
        windows.clear()
        assert list(options.namespaces) == ["bookinfo"]

    def test_appender_namespaces_are_read_only(self) -> None:
        windows = {"bookinfo": NamespaceWindow(name="bookinfo", duration=timedelta(minutes=10))}
        appender = ResponseTimeAppender(
            quantile=0.95,
            graph_type="app",
            inject_service_nodes=False,
            include_istio=False,
            namespaces=windows,
            query_time=0,
        )
        with pytest.raises(TypeError):
            appender.namespaces["other"] = windows["bookinfo"]  # type: ignore[index]

    def test_service_entry_default_is_read_only(self) -> None:
        appender = ServiceEntryAppender()
        with pytest.raises(TypeError):
            appender.accessible_namespaces["other"] = None  # type: ignore[index]

    def test_dump_produces_plain_dicts(self) -> None:
        dumped = make_graph_options().model_dump(mode="json")
        assert isinstance(dumped["namespaces"], dict)
        assert dumped["namespaces"]["bookinfo"]["name"] == "bookinfo"
        assert isinstance(dumped["accessible_namespaces"], dict)


class TestExcludesIstio:
    """Tests for the includeIstio flag and the control-plane namespace."""

    def test_default_excludes_istio(self) -> None:
        assert make_graph_options().excludes_istio("bookinfo") is True

    def test_include_istio(self) -> None:
        assert make_graph_options(include_istio=True).excludes_istio("bookinfo") is False

    def test_ignored_for_control_plane_namespace(self) -> None:
        assert make_graph_options().excludes_istio("istio-system") is False

    def test_custom_control_plane_namespace(self) -> None:
        options = make_graph_options(istio_namespace="mesh-control")
        assert options.excludes_istio("istio-system") is True
        assert options.excludes_istio("mesh-control") is False


def test_graph_options_copy_equals_original() -> None:
    """Descriptors own no resources; a copy compares equal."""
    options = make_graph_options()
    copy = options.model_copy()
    assert copy == options
    assert isinstance(copy, GraphOptions)
