"""Global Flask error handlers.

Routing errors (404, 405) are plain text, matching the router's own
responses. Anything unexpected becomes a logged JSON 500:
    { "error": "Internal server error" }

Usage:
    from chat_proxy.middleware.error_handlers import register_error_handlers
    register_error_handlers(app)
"""
from __future__ import annotations

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

import structlog

from chat_proxy.models.responses import ErrorResponse

logger = structlog.get_logger(__name__)


def text_error(message: str, code: int, headers: dict[str, str] | None = None) -> Response:
    """Create a plain-text error response."""
    return Response(message, status=code, mimetype="text/plain", headers=headers)


def _json_error(message: str, code: int):
    return jsonify(ErrorResponse(error=message).model_dump()), code


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers on the Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(404)
    def not_found(e):
        return text_error("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return text_error("Method not allowed", 405)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Catch any HTTPException not explicitly handled above."""
        return text_error(e.description or "Unknown error", e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        """Last resort handler for unhandled exceptions."""
        logger.error(
            "unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return _json_error("Internal server error", 500)
