"""Chat handler — relays a streamed completion as server-sent events.

Request JSON:
    {
        "messages": [{"role": "user", "content": "hi"}]   // optional
    }

Success: 200, `text/event-stream` body passed through from Workers AI.
Failure: 500, {"error": "Failed to process request"}.
"""
from __future__ import annotations

import structlog
from flask import Response, current_app, jsonify, request

from chat_proxy.models.responses import CHAT_FAILURE_MESSAGE, ErrorResponse

logger = structlog.get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    # Hop-by-hop header; gunicorn drops it and strict PEP 3333 validators reject it
    "Connection": "keep-alive",
}
SSE_CONTENT_TYPE = "text/event-stream; charset=utf-8"


def handle_chat():
    """Open an upstream generation and stream it back to the caller."""
    chat_service = current_app.config["CHAT_SERVICE"]
    try:
        data = request.get_json(force=True)
        stream = chat_service.open_stream(data)
    except Exception as e:
        logger.error(
            "chat_request_failed",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return jsonify(ErrorResponse(error=CHAT_FAILURE_MESSAGE).model_dump()), 500

    response = Response(
        stream.iter_bytes(),
        status=200,
        content_type=SSE_CONTENT_TYPE,
        headers=SSE_HEADERS,
    )
    # iter_bytes() never runs its cleanup if the client leaves before the first chunk
    response.call_on_close(stream.close)
    return response
