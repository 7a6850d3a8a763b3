# Overview: Flask API routes for invoices; listing and collecting dues.

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..models.sales import METHOD_CASH
from ..services import payment_service, sales_service


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
def list_sales_route():
    """
    Query parameters:
    - filter: ALL (default), DUE or PAID
    - search: invoice number or customer name
    """
    status_filter = request.args.get("filter", sales_service.FILTER_ALL).upper()
    try:
        sales = sales_service.list_sales(get_data_store(), status_filter, request.args.get("search"))
        return jsonify({"items": [s.to_dict() for s in sales], "count": len(sales)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@sales_bp.get("/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        return jsonify(sales_service.get_sale(get_data_store(), sale_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@sales_bp.post("/<sale_id>/payments")
def add_payment_route(sale_id: str):
    """
    Request body:
    {"amount": 500, "method": "CASH", "note": "..."}
    """
    data = request.get_json(silent=True) or {}
    try:
        sale = payment_service.add_payment(
            get_data_store(),
            sale_id,
            data.get("amount"),
            method=data.get("method") or METHOD_CASH,
            note=data.get("note"),
        )
        return jsonify(sale.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add payment")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/<sale_id>/settle")
def settle_sale_route(sale_id: str):
    data = request.get_json(silent=True) or {}
    try:
        sale = payment_service.settle_sale(get_data_store(), sale_id, method=data.get("method") or METHOD_CASH)
        return jsonify(sale.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to settle sale")
        return jsonify({"error": "Internal server error"}), 500
