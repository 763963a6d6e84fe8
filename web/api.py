"""JSON API for the storefront and the editor.

Reads are public. Every other method goes through the admin gate and then
straight into the shop store, which applies the change optimistically and
rolls it back if the remote write fails.
"""

import time
from typing import Any, Dict, Mapping, Tuple, Union

from flask import Blueprint, Response, jsonify, request

from shop.exceptions import MutationError, NotFoundError, ValidationError
from shop.logging_config import get_logger
from shop.models import Classification, Product, SiteConfig

from .auth import check_admin
from .image_utils import process_product_image
from .store_context import get_store

__all__ = ["api"]

logger = get_logger("web.api")

api = Blueprint("api", __name__, url_prefix="/api")

KINDS = "any(collections, categories, materials)"

# JSON field -> Product attribute for bulk edits
_BULK_KEYS = {"imageUrl": "image_url"}

JsonResponse = Union[Response, Tuple[Response, int]]


@api.before_request
def require_admin_for_writes() -> Any:
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return None
    return check_admin()


@api.errorhandler(ValidationError)
def handle_validation_error(e: ValidationError) -> Tuple[Response, int]:
    return jsonify({"error": str(e)}), 400


@api.errorhandler(NotFoundError)
def handle_not_found(e: NotFoundError) -> Tuple[Response, int]:
    return jsonify({"error": str(e)}), 404


@api.errorhandler(MutationError)
def handle_mutation_error(e: MutationError) -> Tuple[Response, int]:
    # Local state is already rolled back; the message is safe to show as-is
    return jsonify({"error": str(e), "action": e.action}), 502


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _id_list(data: Mapping[str, Any]) -> list:
    ids = data.get("ids")
    if not isinstance(ids, list) or not ids:
        raise ValidationError("'ids' must be a non-empty list")
    return [str(pid) for pid in ids]


# ---------- READS ----------


@api.route("/products", methods=["GET"])
def list_products() -> Response:
    return jsonify({"products": [p.to_dict() for p in get_store().products]})


@api.route("/products/<product_id>", methods=["GET"])
def get_product(product_id: str) -> JsonResponse:
    product = get_store().get_product(product_id)
    if product is None:
        return jsonify({"error": "Producto no encontrado"}), 404
    return jsonify(product.to_dict())


@api.route(f"/<{KINDS}:kind>", methods=["GET"])
def list_classifications(kind: str) -> Response:
    return jsonify({kind: [c.to_dict() for c in get_store().classifications(kind)]})


@api.route("/config", methods=["GET"])
def get_config() -> Response:
    return jsonify(get_store().site_config.to_dict())


# ---------- PRODUCTS ----------


@api.route("/products", methods=["POST"])
def create_product() -> JsonResponse:
    """Create a product. A millisecond timestamp id is assigned when none is given."""
    data = _json_body()
    if not str(data.get("id") or "").strip():
        data["id"] = str(int(time.time() * 1000))
    product = Product.from_dict(data)
    get_store().add_product(product)
    return jsonify(product.to_dict()), 201


@api.route("/products/<product_id>", methods=["PUT"])
def replace_product(product_id: str) -> Response:
    data = _json_body()
    data["id"] = product_id
    product = Product.from_dict(data)
    get_store().update_product(product)
    return jsonify(product.to_dict())


@api.route("/products/<product_id>", methods=["DELETE"])
def delete_product(product_id: str) -> JsonResponse:
    store = get_store()
    if store.get_product(product_id) is None:
        return jsonify({"error": "Producto no encontrado"}), 404
    store.delete_product(product_id)
    return jsonify({"deleted": product_id})


@api.route("/products/bulk-update", methods=["POST"])
def bulk_update() -> JsonResponse:
    """Apply the same field changes to several products.

    Request JSON:
        {"ids": ["1", "2"], "changes": {"collection": "Aurora", "price": "$99"}}

    Responds 200 when every item was saved, 207 when some failed. Items that
    failed were reverted individually; the rest stay applied.
    """
    data = _json_body()
    ids = _id_list(data)
    changes = data.get("changes")
    if not isinstance(changes, dict):
        raise ValidationError("'changes' must be an object")
    changes = {_BULK_KEYS.get(key, key): value for key, value in changes.items()}

    result = get_store().bulk_update_products(ids, changes)
    return jsonify(result.to_dict()), 200 if result.ok else 207


@api.route("/products/bulk-delete", methods=["POST"])
def bulk_delete() -> JsonResponse:
    ids = _id_list(_json_body())
    result = get_store().bulk_delete_products(ids)
    return jsonify(result.to_dict()), 200 if result.ok else 207


# ---------- CLASSIFICATIONS ----------


@api.route(f"/<{KINDS}:kind>", methods=["POST"])
def create_classification(kind: str) -> JsonResponse:
    data = Classification.from_dict(_json_body())
    if not data.name.strip():
        raise ValidationError("El nombre es obligatorio")
    added = get_store().add_classification(kind, data)
    if not added:
        return jsonify({"added": False, "name": data.name.strip()})
    return jsonify({"added": True, "name": data.name.strip()}), 201


@api.route(f"/<{KINDS}:kind>/<name>", methods=["PUT"])
def update_classification(kind: str, name: str) -> Response:
    """Edit a classification. A changed name is cascaded to its products."""
    data = Classification.from_dict(_json_body())
    if not data.name.strip():
        data.name = name
    updated = get_store().update_classification(kind, name, data)
    return jsonify({"updated": updated})


@api.route(f"/<{KINDS}:kind>/<name>", methods=["DELETE"])
def delete_classification(kind: str, name: str) -> Response:
    deleted = get_store().delete_classification(kind, name)
    return jsonify({"deleted": deleted})


# ---------- SITE ----------


@api.route("/config", methods=["PUT"])
def update_config() -> Response:
    config = SiteConfig.from_dict(_json_body())
    get_store().update_site_config(config)
    return jsonify(config.to_dict())


@api.route("/reset", methods=["POST"])
def reset() -> JsonResponse:
    """Wipe the catalog and restore the built-in defaults.

    Requires ``{"confirm": true}`` in the body.
    """
    data = _json_body()
    if data.get("confirm") is not True:
        return jsonify({"error": "Confirmación requerida"}), 400
    get_store().reset_to_default(confirm=True)
    logger.warning("Catalog reset to defaults from the editor")
    return jsonify({"reset": True})


@api.route("/images", methods=["POST"])
def upload_image() -> JsonResponse:
    """Turn an upload into a data URL for ``imageUrl``/``logoUrl``.

    Accepts a multipart ``image`` file or JSON ``{"image": "<base64 or data URL>"}``.
    """
    upload = request.files.get("image")
    if upload is not None:
        payload: Any = upload.read()
    else:
        data = request.get_json(silent=True)
        payload = data.get("image") if isinstance(data, dict) else None

    data_url, error = process_product_image(payload)
    if error:
        return jsonify({"error": error}), 400
    return jsonify({"dataUrl": data_url})
