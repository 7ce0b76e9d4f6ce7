"""Namespace authorization gateway port.

Uses typing.Protocol for structural subtyping (not ABCs).
The Kubernetes adapter implements this protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime


class NamespaceGateway(Protocol):
    """Protocol for the namespace inventory visible to a caller."""

    async def get_namespaces(self, token: str) -> dict[str, datetime | None]:
        """Return every namespace the token may query.

        Each entry maps the namespace name to its creation timestamp, or
        ``None`` when the creation time is unknown.
        """
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
