"""Unit tests for the Workers AI client."""
import json

import httpx
import pytest

from chat_proxy.services.inference_service import GatewayOptions, InferenceStream, WorkersAIClient
from chat_proxy.utils.exceptions import InferenceServiceError

MESSAGES = [
    {"role": "system", "content": "Be helpful."},
    {"role": "user", "content": "Hi"},
]
SSE_CHUNKS = [b'data: {"response":"Hi"}\n\n', b"data: [DONE]\n\n"]


class RecordingHandler:
    """MockTransport handler that records requests and replays a response."""

    def __init__(self, status_code=200, chunks=None, body=None, error=None):
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._chunks = chunks if chunks is not None else SSE_CHUNKS
        self._body = body
        self._error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if self._body is not None:
            return httpx.Response(self._status_code, json=self._body)
        return httpx.Response(
            self._status_code,
            headers={"content-type": "text/event-stream"},
            content=iter(self._chunks),
        )


@pytest.fixture
def make_client():
    """Build WorkersAIClients over a MockTransport; all are closed at teardown."""
    clients = []

    def _make(handler, **kwargs):
        client = WorkersAIClient(
            account_id="acct",
            api_token="secret",
            model="@cf/test/model",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


class TestRun:
    """Tests for WorkersAIClient.run."""

    def test_posts_to_run_endpoint(self, make_client):
        handler = RecordingHandler()
        make_client(handler).run(MESSAGES, max_tokens=1024).close()

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == (
            "https://api.cloudflare.com/client/v4/accounts/acct/ai/run/@cf/test/model"
        )
        assert request.headers["Authorization"] == "Bearer secret"

    def test_payload(self, make_client):
        handler = RecordingHandler()
        make_client(handler).run(MESSAGES, max_tokens=1024, stream=True).close()

        payload = json.loads(handler.requests[0].content)
        assert payload == {"messages": MESSAGES, "max_tokens": 1024, "stream": True}

    def test_stream_relays_bytes_unmodified(self, make_client):
        stream = make_client(RecordingHandler()).run(MESSAGES)

        assert isinstance(stream, InferenceStream)
        assert b"".join(stream.iter_bytes()) == b"".join(SSE_CHUNKS)

    def test_stream_open_until_consumed(self, make_client):
        stream = make_client(RecordingHandler()).run(MESSAGES)

        assert not stream._response.is_closed
        list(stream.iter_bytes())
        assert stream._response.is_closed

    def test_close_is_idempotent(self, make_client):
        stream = make_client(RecordingHandler()).run(MESSAGES)
        stream.close()
        stream.close()
        assert stream._response.is_closed

    def test_error_status_raises(self, make_client):
        handler = RecordingHandler(status_code=401, body={"errors": [{"message": "Authentication error"}]})
        with pytest.raises(InferenceServiceError, match="401") as exc_info:
            make_client(handler).run(MESSAGES)

        assert exc_info.value.upstream_status == 401
        assert "Authentication error" in exc_info.value.message

    def test_transport_error_raises(self, make_client):
        handler = RecordingHandler(error=httpx.ConnectError("connection refused"))
        with pytest.raises(InferenceServiceError, match="connection refused") as exc_info:
            make_client(handler).run(MESSAGES)

        assert exc_info.value.upstream_status is None

    def test_no_retry_on_failure(self, make_client):
        handler = RecordingHandler(status_code=503, body={"errors": []})
        with pytest.raises(InferenceServiceError):
            make_client(handler).run(MESSAGES)
        assert len(handler.requests) == 1

    def test_close_releases_http_client(self, make_client):
        client = make_client(RecordingHandler())
        client.close()
        assert client._client.is_closed


class TestGateway:
    """Tests for AI Gateway routing."""

    def test_gateway_url(self, make_client):
        handler = RecordingHandler()
        client = make_client(handler, gateway=GatewayOptions(id="my-gw"))
        client.run(MESSAGES).close()

        assert client.gateway_id == "my-gw"
        assert str(handler.requests[0].url) == (
            "https://gateway.ai.cloudflare.com/v1/acct/my-gw/workers-ai/@cf/test/model"
        )

    def test_gateway_cache_headers(self, make_client):
        handler = RecordingHandler()
        gateway = GatewayOptions(id="my-gw", skip_cache=True, cache_ttl=3600)
        make_client(handler, gateway=gateway).run(MESSAGES).close()

        headers = handler.requests[0].headers
        assert headers["cf-aig-skip-cache"] == "true"
        assert headers["cf-aig-cache-ttl"] == "3600"

    def test_default_gateway_sends_no_cache_headers(self):
        assert GatewayOptions(id="gw").headers() == {}

    def test_direct_call_sends_no_gateway_headers(self, make_client):
        handler = RecordingHandler()
        client = make_client(handler)
        client.run(MESSAGES).close()

        assert client.gateway_id is None
        assert "cf-aig-skip-cache" not in handler.requests[0].headers
