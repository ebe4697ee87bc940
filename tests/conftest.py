"""Shared pytest fixtures for the chat proxy test suite.

Provides reusable fixtures for:
- Settings isolated from the environment and `.env`
- A mocked Workers AI client
- Flask app and test client
"""
from unittest.mock import MagicMock

import httpx
import pytest

from chat_proxy import create_app
from chat_proxy.config import Settings
from chat_proxy.services.inference_service import InferenceStream, WorkersAIClient

SSE_BODY_CHUNKS = [
    b'data: {"response":"Hel"}\n\n',
    b'data: {"response":"lo"}\n\n',
    b"data: [DONE]\n\n",
]


def make_stream(chunks=None, status_code=200):
    """Build an InferenceStream over an unread, chunked upstream response."""
    response = httpx.Response(
        status_code,
        headers={"content-type": "text/event-stream"},
        content=iter(chunks if chunks is not None else SSE_BODY_CHUNKS),
    )
    return InferenceStream(response, model="test-model")


@pytest.fixture
def assets_dir(tmp_path):
    """A static asset directory with a minimal frontend."""
    (tmp_path / "index.html").write_text("<html>chat</html>", encoding="utf-8")
    (tmp_path / "chat.js").write_text("console.log('chat');", encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(assets_dir):
    """Create test settings."""
    return Settings(
        _env_file=None,
        CLOUDFLARE_ACCOUNT_ID="test-account",
        CLOUDFLARE_API_TOKEN="test-token",
        SYSTEM_PROMPT="You are a test assistant.",
        MAX_TOKENS=1024,
        ASSETS_DIR=str(assets_dir),
        LOG_FORMAT="console",
    )


@pytest.fixture
def mock_inference():
    """Create a mock WorkersAIClient that returns a healthy stream."""
    client = MagicMock(spec=WorkersAIClient)
    client.run.side_effect = lambda *args, **kwargs: make_stream()
    return client


@pytest.fixture
def app(settings, mock_inference):
    """Create a Flask application instance for testing."""
    app = create_app(settings=settings, inference_client=mock_inference)
    app.config["TESTING"] = True
    yield app


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
