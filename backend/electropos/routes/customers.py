# Overview: Flask API routes for customers; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import customer_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def list_customers_route():
    try:
        customers = customer_service.list_customers(get_data_store(), request.args.get("search"))
        return jsonify({"items": [c.to_dict() for c in customers], "count": len(customers)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@customers_bp.get("/<customer_id>")
def get_customer_route(customer_id: str):
    try:
        return jsonify(customer_service.get_customer(get_data_store(), customer_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@customers_bp.get("/<customer_id>/history")
def customer_history_route(customer_id: str):
    try:
        return jsonify(customer_service.customer_history(get_data_store(), customer_id))
    except DOMAIN_ERRORS as e:
        return error_response(e)


@customers_bp.post("")
def create_customer_route():
    data = request.get_json(silent=True)
    try:
        customer = customer_service.create_customer(get_data_store(), data)
        return jsonify(customer.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.patch("/<customer_id>")
def update_customer_route(customer_id: str):
    data = request.get_json(silent=True)
    try:
        customer = customer_service.update_customer(get_data_store(), customer_id, data)
        return jsonify(customer.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@customers_bp.delete("/<customer_id>")
def delete_customer_route(customer_id: str):
    try:
        customer_service.delete_customer(get_data_store(), customer_id)
        return "", 204
    except DOMAIN_ERRORS as e:
        return error_response(e)
