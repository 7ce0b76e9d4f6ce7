"""API middleware: error handling, caller token and request timing.

Registers exception handlers and middleware on the FastAPI app.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from mesh_graph.domain.errors import GraphRequestError

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

_BEARER_PREFIX = "bearer "


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def _graph_request_error_handler(
    _request: Request,
    exc: GraphRequestError,
) -> ORJSONResponse:
    """Map BadRequest/Forbidden/Internal graph errors to their status codes."""
    if exc.status_code >= 500:
        logger.error("graph_request_failed", error=exc.message, type=type(exc).__name__)
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


async def _generic_error_handler(
    _request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """Convert unhandled exceptions to a structured 500 response."""
    logger.error("unhandled_exception", exc_info=exc)
    return ORJSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": type(exc).__name__,
        },
    )


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """Copies the Authorization bearer token into ``request.state.token``.

    Requests without a bearer token leave the state unset.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        authorization = request.headers.get("authorization", "")
        if authorization.lower().startswith(_BEARER_PREFIX):
            token = authorization[len(_BEARER_PREFIX) :].strip()
            if token:
                request.state.token = token
        response: Response = await call_next(request)
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Adds an X-Request-Time-Ms header to every response."""

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        start_time = time.monotonic()
        response: Response = await call_next(request)
        elapsed_ms = (time.monotonic() - start_time) * 1000
        response.headers["X-Request-Time-Ms"] = f"{elapsed_ms:.1f}"
        return response


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_middleware(app: FastAPI) -> None:
    """Attach all middleware and exception handlers to the app."""
    app.add_exception_handler(GraphRequestError, _graph_request_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_error_handler)
    app.add_middleware(BearerTokenMiddleware)
    app.add_middleware(RequestTimingMiddleware)
