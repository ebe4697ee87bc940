"""Top-level request router.

Routes (any HTTP method unless noted):
    /              → static assets
    /<non-api>     → static assets
    POST /api/chat → streamed chat completion
    /api/chat      → 405 Method not allowed for every other method
    /api/<other>   → 404 Not found

Usage:
    from chat_proxy.routes.router import init_router
    init_router(app)
"""
from __future__ import annotations

from flask import Flask, request
from werkzeug.routing import Rule

from chat_proxy.middleware.error_handlers import text_error
from chat_proxy.routes.assets import serve_asset
from chat_proxy.routes.chat import handle_chat

API_PREFIX = "/api/"
CHAT_PATH = "/api/chat"

DISPATCH_ENDPOINT = "dispatch"


def dispatch(path: str):
    """Send each request to static assets or the chat handler by path."""
    if request.path == "/" or not request.path.startswith(API_PREFIX):
        return serve_asset(path)

    if request.path == CHAT_PATH:
        if request.method == "POST":
            return handle_chat()
        return text_error("Method not allowed", 405, headers={"Allow": "POST"})

    return text_error("Not found", 404)


def init_router(app: Flask) -> None:
    """Register the catch-all dispatcher for every path and method.

    `app.add_url_rule` always gives a rule a method list, so the rules are
    added to the URL map directly with `methods=None`, which matches any
    method, WebDAV and TRACE included.

    Args:
        app: Flask application instance.
    """
    app.url_map.add(Rule("/", endpoint=DISPATCH_ENDPOINT, defaults={"path": ""}))
    app.url_map.add(Rule("/<path:path>", endpoint=DISPATCH_ENDPOINT))
    app.view_functions[DISPATCH_ENDPOINT] = dispatch
