"""Custom exception hierarchy for the chat proxy.

The chat handler collapses every failure into one generic 500, so these
types carry diagnostic detail for the logs rather than HTTP statuses.

Hierarchy:
    ChatProxyError (base)
    ├── InvalidChatRequestError — Request body is not a chat request
    └── InferenceServiceError   — Workers AI / AI Gateway failures
"""
from __future__ import annotations


class ChatProxyError(Exception):
    """Base exception for the chat proxy."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidChatRequestError(ChatProxyError):
    """Raised when the request body does not have the chat request shape."""


class InferenceServiceError(ChatProxyError):
    """Raised when the inference service cannot open a response stream.

    Attributes:
        upstream_status: HTTP status returned by Workers AI, if it answered.
    """

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)
