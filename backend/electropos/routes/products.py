# Overview: Flask API routes for inventory products; parses input and returns JSON responses.

"""
Product Routes

Inventory screen plus the product picker used by billing.
Stock only goes up through a manual edit or a purchase order receipt.
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import inventory_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    """
    Query parameters:
    - search: name, serial number, specifications, custom id, brand, model or category
    - in_stock: only products with stock > 0 (default: false)
    """
    search = request.args.get("search")
    in_stock = request.args.get("in_stock", "false").lower() == "true"
    try:
        products = inventory_service.list_products(get_data_store(), search=search, in_stock_only=in_stock)
        return jsonify({"items": [p.to_dict() for p in products], "count": len(products)})
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/categories")
def list_categories_route():
    try:
        return jsonify({"items": inventory_service.categories(get_data_store())})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@products_bp.get("/low-stock")
def low_stock_route():
    threshold = request.args.get("threshold", current_app.config["LOW_STOCK_THRESHOLD"], type=int)
    try:
        products = inventory_service.low_stock_products(get_data_store(), threshold)
        return jsonify({"items": [p.to_dict() for p in products], "threshold": threshold})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@products_bp.get("/worth")
def inventory_worth_route():
    try:
        return jsonify({"inventoryWorth": inventory_service.inventory_worth(get_data_store())})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@products_bp.get("/<product_id>")
def get_product_route(product_id: str):
    try:
        return jsonify(inventory_service.get_product(get_data_store(), product_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@products_bp.post("")
def create_product_route():
    """
    Request body:
    {
        "name": "...", "serialNo": "...", "category": "...",   // required
        "buyPrice": 100, "sellPrice": 150,                      // required
        "stock": 3, "brand": "...", "model": "...", ...         // optional
    }
    """
    data = request.get_json(silent=True)
    try:
        product = inventory_service.create_product(get_data_store(), data)
        return jsonify(product.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.patch("/<product_id>")
def update_product_route(product_id: str):
    data = request.get_json(silent=True)
    try:
        product = inventory_service.update_product(get_data_store(), product_id, data)
        return jsonify(product.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<product_id>")
def delete_product_route(product_id: str):
    try:
        inventory_service.delete_product(get_data_store(), product_id)
        return "", 204
    except DOMAIN_ERRORS as e:
        return error_response(e)
