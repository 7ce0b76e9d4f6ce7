"""Graph request error taxonomy.

Pure Python — zero framework imports. The API layer maps each error kind
to a distinct HTTP status code.
"""

from __future__ import annotations


class GraphRequestError(Exception):
    """Base class for failures while resolving a graph request."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(GraphRequestError):
    """Malformed, out-of-enum or missing client input."""

    status_code = 400


class ForbiddenError(GraphRequestError):
    """A requested namespace is not accessible to the caller."""

    status_code = 403


class GraphInternalError(GraphRequestError):
    """Failure not attributable to the request content.

    Raised for a missing caller token or a failing namespace gateway.
    """

    status_code = 500
