"""Request ID and access-log middleware.

Every request gets an X-Request-ID (the client's, or a fresh UUID) bound to
the structlog context, so the lines of one chat call can be joined: the
routing decision, the upstream request, and the stream close that happens
after the view has returned.

API calls are logged at INFO on completion with their duration; static
asset hits only at DEBUG.

Usage:
    from chat_proxy.middleware.request_id import init_request_id_middleware
    init_request_id_middleware(app)
"""
from __future__ import annotations

import time
import uuid

import structlog
from flask import Flask, g, request

API_PREFIX = "/api/"


def init_request_id_middleware(app: Flask) -> None:
    """Register before/after hooks for request ID tracing.

    Args:
        app: Flask application instance.
    """
    logger = structlog.get_logger(__name__)

    @app.before_request
    def inject_request_id() -> None:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_id = request_id
        g.request_started = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client=request.remote_addr,
        )

    @app.after_request
    def attach_request_id(response):
        """Attach request ID to response headers and log the outcome.

        For a streamed chat reply this fires once headers are ready, so the
        duration covers the wait for the upstream stream to open.
        """
        response.headers["X-Request-ID"] = g.get("request_id", "unknown")

        started = g.get("request_started")
        duration_ms = round((time.monotonic() - started) * 1000) if started else None
        log = logger.info if request.path.startswith(API_PREFIX) else logger.debug
        log(
            "request_completed",
            status=response.status_code,
            streamed=response.is_streamed,
            duration_ms=duration_ms,
        )
        return response
