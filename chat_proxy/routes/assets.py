"""Static asset delivery for the chat frontend.

Files are served from `Settings.ASSETS_DIR`. Directory paths resolve to
their `index.html`; anything missing is a plain 404.
"""
from __future__ import annotations

from flask import current_app, send_from_directory

INDEX_FILE = "index.html"


def serve_asset(path: str):
    """Return the asset at `path`, relative to the assets directory."""
    assets_dir = current_app.config["SETTINGS"].ASSETS_DIR
    if not path or path.endswith("/"):
        path = f"{path}{INDEX_FILE}"
    return send_from_directory(assets_dir, path)
