"""Workers AI Chat Proxy — Flask Application Package.

The `create_app()` factory function initializes the Flask application with
configuration, logging, middleware, the inference client, and the router.
"""
from __future__ import annotations

import atexit

import structlog
from flask import Flask

from chat_proxy.config import get_settings, Settings
from chat_proxy.utils.logger import setup_logging
from chat_proxy.middleware.request_id import init_request_id_middleware
from chat_proxy.middleware.error_handlers import register_error_handlers
from chat_proxy.services.inference_service import GatewayOptions, WorkersAIClient


def create_app(
    settings: Settings | None = None,
    inference_client: WorkersAIClient | None = None,
) -> Flask:
    """Application factory pattern.

    Creates and configures the Flask application with:
    - Pydantic-based configuration loading
    - Structured logging (structlog)
    - Request ID middleware
    - Global error handlers
    - Service initialization (Workers AI client, chat service)
    - Router registration

    Args:
        settings: Settings to use instead of the cached environment settings.
        inference_client: Client to use instead of building one from settings.
            The caller keeps ownership and closes it.

    Returns:
        Configured Flask application instance.
    """
    settings = settings or get_settings()

    # ── Logging (must be first so all subsequent logs are formatted) ──
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    logger = structlog.get_logger(__name__)

    # Assets are served by the router, not Flask's /static endpoint
    app = Flask(__name__, static_folder=None)
    app.config["FLASK_DEBUG"] = settings.FLASK_DEBUG
    app.config["SETTINGS"] = settings

    # ── Middleware ─────────────────────────────────────────────────────
    init_request_id_middleware(app)
    register_error_handlers(app)

    # ── Services ──────────────────────────────────────────────────────
    _init_services(app, settings, inference_client)

    # ── Router ────────────────────────────────────────────────────────
    from chat_proxy.routes.router import init_router
    init_router(app)

    logger.info(
        "app_started",
        env=settings.FLASK_ENV,
        model=settings.WORKERS_AI_MODEL,
        gateway=settings.AI_GATEWAY_ID,
        log_level=settings.LOG_LEVEL,
    )

    return app


def _build_inference_client(settings: Settings) -> WorkersAIClient:
    """Create a Workers AI client from settings, routed via AI Gateway if configured."""
    gateway = None
    if settings.AI_GATEWAY_ID:
        gateway = GatewayOptions(
            id=settings.AI_GATEWAY_ID,
            skip_cache=settings.AI_GATEWAY_SKIP_CACHE,
            cache_ttl=settings.AI_GATEWAY_CACHE_TTL,
        )
    return WorkersAIClient(
        account_id=settings.CLOUDFLARE_ACCOUNT_ID,
        api_token=settings.CLOUDFLARE_API_TOKEN,
        model=settings.WORKERS_AI_MODEL,
        base_url=settings.WORKERS_AI_BASE_URL,
        gateway=gateway,
        gateway_base_url=settings.AI_GATEWAY_BASE_URL,
        timeout=settings.HTTP_TIMEOUT,
    )


def _init_services(
    app: Flask,
    settings: Settings,
    inference_client: WorkersAIClient | None = None,
) -> None:
    """Initialize the Workers AI client and chat service.

    Both are stored on `app.config` for access via `current_app`. A client
    built here is closed when the process exits, releasing its pooled
    upstream connections.
    """
    from chat_proxy.services.chat_service import ChatService

    logger = structlog.get_logger(__name__)

    if inference_client is None:
        inference_client = _build_inference_client(settings)
        atexit.register(inference_client.close)

    chat_service = ChatService(
        inference_client,
        system_prompt=settings.SYSTEM_PROMPT,
        max_tokens=settings.MAX_TOKENS,
    )

    app.config["INFERENCE_CLIENT"] = inference_client
    app.config["CHAT_SERVICE"] = chat_service

    logger.info("services_initialized", gateway=settings.AI_GATEWAY_ID)
