"""Pydantic models for API request validation."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One conversation entry. Order within a request is significant.

    Keys beyond `role` and `content` (e.g. `name`) are kept and forwarded.
    """
    model_config = ConfigDict(extra="allow")

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Incoming chat request body.

    Attributes:
        messages: Conversation so far, oldest first. Missing means empty.
    """
    messages: list[ChatMessage] = Field(default_factory=list, description="Conversation messages")

    def message_dicts(self) -> list[dict[str, object]]:
        """Return the messages as the caller sent them, extra keys included."""
        return [message.model_dump() for message in self.messages]
