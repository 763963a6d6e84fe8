"""Access to the per-app shop store and auth client.

Both live in ``app.extensions`` so every Flask app owns its own instances;
there is no module-level store.
"""

from typing import Any

from flask import current_app

from shop.state import ShopStore

__all__ = ["get_store", "get_auth_client", "STORE_KEY", "AUTH_KEY"]

STORE_KEY = "shop"
AUTH_KEY = "shop_auth"


def get_store() -> ShopStore:
    """Return the store bound to the current app."""
    return current_app.extensions[STORE_KEY]


def get_auth_client() -> Any:
    """Return the auth client bound to the current app."""
    return current_app.extensions[AUTH_KEY]
