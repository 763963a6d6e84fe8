"""Flask web app for the jewelry catalog.

Serves the public storefront, the editor page and the JSON API. Each app
owns its own ``ShopStore``, created in ``create_app`` and closed at exit.
"""

import atexit
import logging
from typing import Any, Optional, Tuple, Union

from flask import Flask, abort, render_template, request

from shop.catalog import SORT_KEYS, filter_products, group_by_collection, sort_products
from shop.config import LOG_LEVEL, SENTINEL_COLLECTION
from shop.fallback import FallbackStore
from shop.logging_config import get_logger, setup_logging
from shop.remote import AuthClient, RemoteStoreClient
from shop.state import ShopStore

from .config import FLASK_DEBUG, FLASK_HOST, FLASK_PORT, LOAD_ON_START, SECRET_KEY
from .store_context import AUTH_KEY, STORE_KEY, get_store

logger = get_logger("web.app")


def create_app(
    store: Optional[ShopStore] = None,
    auth_client: Any = None,
    load: bool = LOAD_ON_START,
) -> Flask:
    """Build the Flask app.

    Args:
        store: Store to serve. A remote-backed store with a local fallback
            is created when omitted.
        auth_client: Sign-in backend (defaults to ``AuthClient()``).
        load: Whether to run ``store.load()`` now.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = SECRET_KEY

    if store is None:
        store = ShopStore(RemoteStoreClient(), fallback=FallbackStore())
        atexit.register(store.close)
    if auth_client is None:
        auth_client = AuthClient()
        atexit.register(auth_client.close)
    if load and not store.initialized:
        store.load()

    app.extensions[STORE_KEY] = store
    app.extensions[AUTH_KEY] = auth_client

    from .api import api
    from .auth import admin_required, auth

    app.register_blueprint(api)
    app.register_blueprint(auth)

    # ---------- FLASK ROUTES ----------

    @app.route("/", methods=["GET"])
    def index() -> str:
        """Catalog page, grouped by collection unless one is selected."""
        shop = get_store()
        collections = shop.collections
        names = [c.name for c in collections]

        selected = request.args.get("coleccion", SENTINEL_COLLECTION)
        if selected not in names:
            selected = SENTINEL_COLLECTION
        search = request.args.get("q", "").strip()
        order = request.args.get("orden", "newest")
        if order not in SORT_KEYS:
            order = "newest"

        products = filter_products(shop.products, collection=selected, search=search or None)
        products = sort_products(products, order)

        sections = []
        current = None
        if selected == SENTINEL_COLLECTION:
            sections = group_by_collection(products, collections)
        else:
            current = next(c for c in collections if c.name == selected)

        return render_template(
            "catalog.html",
            site=shop.site_config,
            collections=collections,
            selected=selected,
            current=current,
            sections=sections,
            products=products,
            search=search,
            order=order,
            sort_keys=SORT_KEYS,
        )

    @app.route("/producto/<product_id>", methods=["GET"])
    def product_detail(product_id: str) -> str:
        shop = get_store()
        product = shop.get_product(product_id)
        if product is None:
            abort(404)
        return render_template(
            "product.html",
            site=shop.site_config,
            collections=shop.collections,
            product=product,
        )

    @app.route("/editar", methods=["GET"])
    @admin_required
    def editor() -> str:
        shop = get_store()
        return render_template("editor.html", site=shop.site_config, snapshot=shop.snapshot())

    @app.errorhandler(404)
    def not_found(e: Exception) -> Union[Tuple[str, int], Tuple[Any, int]]:
        if request.path.startswith("/api/"):
            return {"error": "Not found"}, 404
        shop = get_store()
        return render_template("404.html", site=shop.site_config, collections=shop.collections), 404

    return app


if __name__ == "__main__":
    setup_logging(level=getattr(logging, LOG_LEVEL, logging.INFO))
    create_app().run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
