"""Workers AI client for streamed chat completions.

Handles all communication with the Cloudflare Workers AI REST API, either
directly or through an AI Gateway. Supports:
- Streamed text generation from a message list
- Optional AI Gateway routing with cache controls
- Structured logging of every upstream call

Usage:
    from chat_proxy.services.inference_service import WorkersAIClient

    client = WorkersAIClient(account_id="...", api_token="...")
    stream = client.run(messages, max_tokens=1024)
    for chunk in stream.iter_bytes():
        ...
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import httpx
import structlog

from chat_proxy.utils.exceptions import InferenceServiceError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GatewayOptions:
    """AI Gateway routing for inference calls.

    Attributes:
        id: Gateway name in the Cloudflare dashboard.
        skip_cache: Ask the gateway to bypass its cache.
        cache_ttl: Cache time-to-live in seconds, or None for the gateway default.
    """
    id: str
    skip_cache: bool = False
    cache_ttl: Optional[int] = None

    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.skip_cache:
            headers["cf-aig-skip-cache"] = "true"
        if self.cache_ttl is not None:
            headers["cf-aig-cache-ttl"] = str(self.cache_ttl)
        return headers


class InferenceStream:
    """An open upstream response whose body is relayed as raw bytes.

    The upstream connection is released once the body has been read to the
    end or `close()` is called, whichever comes first.
    """

    def __init__(self, response: httpx.Response, model: str) -> None:
        self._response = response
        self._model = model
        self._bytes_relayed = 0
        self._closed = False

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield body chunks as they arrive from the upstream service."""
        try:
            for chunk in self._response.iter_bytes():
                self._bytes_relayed += len(chunk)
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()
        logger.info(
            "inference_stream_closed",
            model=self._model,
            bytes_relayed=self._bytes_relayed,
        )


class WorkersAIClient:
    """Client for the Workers AI `ai/run` endpoint.

    Args:
        account_id: Cloudflare account ID.
        api_token: API token sent as a bearer credential.
        model: Workers AI model identifier.
        base_url: Cloudflare REST API base URL.
        gateway: AI Gateway routing; None calls Workers AI directly.
        gateway_base_url: AI Gateway base URL.
        timeout: Upstream timeout in seconds; None waits indefinitely.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        account_id: str,
        api_token: str,
        model: str = "@cf/meta/llama-4-scout-17b-16e-instruct",
        base_url: str = "https://api.cloudflare.com/client/v4",
        gateway: GatewayOptions | None = None,
        gateway_base_url: str = "https://gateway.ai.cloudflare.com/v1",
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._account_id = account_id
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._gateway = gateway
        self._gateway_base_url = gateway_base_url.rstrip("/")

        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def model(self) -> str:
        return self._model

    @property
    def gateway_id(self) -> str | None:
        return self._gateway.id if self._gateway is not None else None

    @property
    def run_url(self) -> str:
        """Endpoint that inference calls are posted to."""
        if self._gateway is not None:
            return (
                f"{self._gateway_base_url}/{self._account_id}/"
                f"{self._gateway.id}/workers-ai/{self._model}"
            )
        return f"{self._base_url}/accounts/{self._account_id}/ai/run/{self._model}"

    # ── Core API ──────────────────────────────────────────────────────

    def run(
        self,
        messages: list[dict[str, Any]],
        max_tokens: int = 1024,
        stream: bool = True,
    ) -> InferenceStream:
        """Start a generation and return once the upstream response begins.

        Args:
            messages: Conversation messages, system prompt included.
            max_tokens: Maximum tokens in the generated reply.
            stream: Ask the service for incremental server-sent events.

        Returns:
            InferenceStream over the upstream response body.

        Raises:
            InferenceServiceError: On transport failures or non-2xx replies.
        """
        payload: dict[str, Any] = {
            "messages": messages,
            "max_tokens": max_tokens,
            "stream": stream,
        }
        headers = self._gateway.headers() if self._gateway is not None else {}

        logger.info(
            "inference_request",
            model=self._model,
            messages_count=len(messages),
            max_tokens=max_tokens,
            gateway=self.gateway_id,
        )

        request = self._client.build_request("POST", self.run_url, json=payload, headers=headers)
        start = time.monotonic()
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error("inference_transport_error", model=self._model, error=str(e))
            raise InferenceServiceError(
                message=f"Workers AI request failed: {e}",
            ) from e
        duration_ms = round((time.monotonic() - start) * 1000)

        if response.status_code >= 400:
            try:
                error_body = response.read().decode("utf-8", errors="replace")
            finally:
                response.close()
            logger.error(
                "inference_error",
                model=self._model,
                status=response.status_code,
                body=error_body[:500],
                duration_ms=duration_ms,
            )
            raise InferenceServiceError(
                message=f"Workers AI error: {response.status_code} — {error_body[:200]}",
                upstream_status=response.status_code,
            )

        logger.info(
            "inference_stream_opened",
            model=self._model,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        return InferenceStream(response, self._model)
