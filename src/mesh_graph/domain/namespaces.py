"""Namespace authorization and lookback clamping.

Intersects the requested namespaces with the caller's accessible set and
clamps each namespace's lookback window to the namespace's age, so no
telemetry predating the namespace is requested.

Pure Python + Pydantic v2 — ZERO framework imports.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from mesh_graph.domain.errors import BadRequestError, ForbiddenError
from mesh_graph.domain.models import NamespaceWindow

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_MAX_SECONDS = timedelta.max.total_seconds()


def _saturating_seconds(seconds: float) -> timedelta:
    """Convert seconds to a timedelta, saturating at the representable range."""
    if seconds >= _MAX_SECONDS:
        return timedelta.max
    if seconds <= -_MAX_SECONDS:
        return timedelta.min
    return timedelta(seconds=seconds)


def resolve_namespace_duration(
    ns_created: datetime | None,
    requested: timedelta,
    query_time: int,
    now: datetime | None = None,
) -> timedelta:
    """Clamp ``requested`` so the window does not start before ``ns_created``.

    The reference instant is ``query_time`` (unix seconds) when non-zero,
    else ``now``. An unknown creation time (``None``) leaves the duration
    unchanged. A namespace created after the reference instant yields a
    negative duration.
    """
    if ns_created is None:
        return requested
    if ns_created.tzinfo is None:
        ns_created = ns_created.replace(tzinfo=UTC)

    if query_time != 0:
        lifetime = _saturating_seconds(query_time - ns_created.timestamp())
    else:
        lifetime = (now or datetime.now(UTC)) - ns_created

    return min(lifetime, requested)


def resolve_namespaces(
    names: Iterable[str],
    accessible: Mapping[str, datetime | None],
    duration: timedelta,
    query_time: int,
    now: datetime | None = None,
) -> dict[str, NamespaceWindow]:
    """Build the target namespace map for a request.

    Raises ForbiddenError for the first requested namespace missing from
    ``accessible`` and BadRequestError when nothing is requested.
    """
    windows: dict[str, NamespaceWindow] = {}
    for raw_name in names:
        name = raw_name.strip()
        if not name:
            continue
        if name not in accessible:
            raise ForbiddenError(f"Requested namespace [{name}] is not accessible.")
        windows[name] = NamespaceWindow(
            name=name,
            duration=resolve_namespace_duration(accessible[name], duration, query_time, now),
        )

    if not windows:
        msg = "At least one namespace must be specified via the namespaces query parameter."
        raise BadRequestError(msg)
    return windows
