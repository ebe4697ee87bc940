"""Chat handler logic: request parsing, system prompt injection, upstream call.

The chat view (`chat_proxy.routes.chat.handle_chat`) turns the returned InferenceStream
into a server-sent events response and maps any failure to a 500.
"""
from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from chat_proxy.models.requests import ChatRequest
from chat_proxy.services.inference_service import InferenceStream, WorkersAIClient
from chat_proxy.utils.exceptions import InvalidChatRequestError

logger = structlog.get_logger(__name__)


def parse_chat_request(data: Any) -> ChatRequest:
    """Validate a decoded JSON body as a chat request.

    Raises:
        InvalidChatRequestError: If the body is not an object or a message is malformed.
    """
    if not isinstance(data, dict):
        raise InvalidChatRequestError(
            f"Request body must be a JSON object, got {type(data).__name__}"
        )
    try:
        return ChatRequest.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        message = errors[0].get("msg", "Validation error") if errors else "Invalid request"
        raise InvalidChatRequestError(message) from e


def ensure_system_prompt(
    messages: list[dict[str, Any]], system_prompt: str
) -> list[dict[str, Any]]:
    """Return `messages` with a system message guaranteed.

    When no entry has role "system", the default prompt is placed at index 0.
    Otherwise the sequence comes back untouched, wherever the system entry sits.
    """
    if any(message.get("role") == "system" for message in messages):
        return messages
    return [{"role": "system", "content": system_prompt}, *messages]


class ChatService:
    """Forwards chat requests to the inference service.

    Args:
        inference_client: Client for the inference service.
        system_prompt: Prompt used when the caller sends no system message.
        max_tokens: Maximum tokens requested per reply.
    """

    def __init__(
        self,
        inference_client: WorkersAIClient,
        system_prompt: str,
        max_tokens: int = 1024,
    ) -> None:
        self._client = inference_client
        self._system_prompt = system_prompt
        self._max_tokens = max_tokens

    def open_stream(self, data: Any) -> InferenceStream:
        """Parse the request body and start a streamed generation.

        Args:
            data: Decoded JSON request body.

        Returns:
            The open upstream stream, ready to be relayed.
        """
        chat_request = parse_chat_request(data)
        messages = ensure_system_prompt(chat_request.message_dicts(), self._system_prompt)
        prompt_source = "default" if len(messages) > len(chat_request.messages) else "caller"

        # Bound for the rest of the request, stream close included
        structlog.contextvars.bind_contextvars(
            model=self._client.model,
            gateway=self._client.gateway_id,
            system_prompt=prompt_source,
        )
        logger.debug("chat_request_prepared", messages_count=len(messages))

        return self._client.run(messages, max_tokens=self._max_tokens, stream=True)
