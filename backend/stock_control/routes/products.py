# Overview: Flask API routes for products operations; parses input and returns JSON responses.

"""
Product management routes.

SECURITY: All routes require authentication.
- Listing requires "products" or "new-transfer" (the transfer form needs the list)
- Write operations require "products"
"""
from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import get_store
from ..services import catalog_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("products", "new-transfer")
def list_products():
    return jsonify(catalog_service.list_products(get_store())), 200


@products_bp.get("/<product_id>")
@require_auth
@require_permission("products", "new-transfer")
def get_product(product_id: str):
    try:
        return jsonify(catalog_service.get_product(get_store(), product_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@products_bp.post("")
@require_auth
@require_permission("products")
def create_product():
    """
    Create a product.

    Request body:
    {
        "code": str,
        "name": str,
        "category": str,
        "unit": str (one of PRODUCT_UNITS)
    }
    """
    try:
        product = catalog_service.create_product(
            get_store(),
            request.get_json(silent=True),
            units=current_app.config["PRODUCT_UNITS"],
        )
        return jsonify(product), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.patch("/<product_id>")
@require_auth
@require_permission("products")
def update_product(product_id: str):
    try:
        product = catalog_service.update_product(
            get_store(),
            product_id,
            request.get_json(silent=True),
            units=current_app.config["PRODUCT_UNITS"],
        )
        return jsonify(product), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<product_id>")
@require_auth
@require_permission("products")
def delete_product(product_id: str):
    try:
        catalog_service.delete_product(get_store(), product_id)
        return jsonify({"success": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500
