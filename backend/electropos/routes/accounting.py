# Overview: Flask API routes for expenses and the accounting summary.

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import accounting_service


accounting_bp = Blueprint("accounting", __name__, url_prefix="/api/accounting")


@accounting_bp.get("/expenses")
def list_expenses_route():
    try:
        expenses = accounting_service.list_expenses(get_data_store())
        return jsonify({"items": [e.to_dict() for e in expenses], "count": len(expenses)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@accounting_bp.post("/expenses")
def add_expense_route():
    """
    Request body:
    {"title": "Shop rent", "amount": 15000, "category": "RENT", "date": "...", "notes": "..."}
    """
    data = request.get_json(silent=True)
    try:
        expense = accounting_service.add_expense(get_data_store(), data)
        return jsonify(expense.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add expense")
        return jsonify({"error": "Internal server error"}), 500


@accounting_bp.delete("/expenses/<expense_id>")
def delete_expense_route(expense_id: str):
    try:
        accounting_service.delete_expense(get_data_store(), expense_id)
        return "", 204
    except DOMAIN_ERRORS as e:
        return error_response(e)


@accounting_bp.get("/summary")
def accounting_summary_route():
    try:
        return jsonify(accounting_service.accounting_summary(get_data_store()))
    except DOMAIN_ERRORS as e:
        return error_response(e)
