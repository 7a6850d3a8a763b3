# Overview: Flask API routes for suppliers and their ledgers; parses input and returns JSON responses.

"""
Supplier Routes

- Supplier directory CRUD
- Running balance (recomputed from the transaction log)
- Order ledger per supplier with search, date window and status filters
- Payments to a supplier, in general or against one bill
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..models.suppliers import SUPPLIER_METHOD_CASH, TX_PAYMENT
from ..services import supplier_service


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
def list_suppliers_route():
    store = get_data_store()
    try:
        suppliers = supplier_service.list_suppliers(store, request.args.get("search"))
        balances = supplier_service.supplier_balances(store)
        return jsonify({
            "items": [
                {**s.to_dict(), "balance": balances.get(s.id, 0.0)}
                for s in suppliers
            ],
            "count": len(suppliers),
        })
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.get("/<supplier_id>")
def get_supplier_route(supplier_id: str):
    try:
        return jsonify(supplier_service.supplier_summary(get_data_store(), supplier_id))
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.post("")
def create_supplier_route():
    data = request.get_json(silent=True)
    try:
        supplier = supplier_service.create_supplier(get_data_store(), data)
        return jsonify(supplier.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return jsonify({"error": "Internal server error"}), 500


@suppliers_bp.patch("/<supplier_id>")
def update_supplier_route(supplier_id: str):
    data = request.get_json(silent=True)
    try:
        supplier = supplier_service.update_supplier(get_data_store(), supplier_id, data)
        return jsonify(supplier.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.delete("/<supplier_id>")
def delete_supplier_route(supplier_id: str):
    try:
        supplier_service.delete_supplier(get_data_store(), supplier_id)
        return "", 204
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.get("/<supplier_id>/balance")
def supplier_balance_route(supplier_id: str):
    store = get_data_store()
    try:
        supplier_service.get_supplier(store, supplier_id)
        return jsonify({"supplierId": supplier_id, "balance": supplier_service.supplier_balance(store, supplier_id)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.get("/<supplier_id>/transactions")
def supplier_transactions_route(supplier_id: str):
    store = get_data_store()
    try:
        supplier_service.get_supplier(store, supplier_id)
        entries = supplier_service.list_transactions(store, supplier_id)
        return jsonify({"items": [t.to_dict() for t in entries], "count": len(entries)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.get("/<supplier_id>/orders")
def supplier_orders_route(supplier_id: str):
    """
    Query parameters:
    - search: bill number or item name
    - from / to: YYYY-MM-DD, inclusive, on the order's creation date
    - status: ALL (default), SETTLED or PENDING
    """
    store = get_data_store()
    try:
        supplier_service.get_supplier(store, supplier_id)
        orders = supplier_service.list_purchase_orders(
            store,
            supplier_id,
            search=request.args.get("search"),
            date_from=request.args.get("from"),
            date_to=request.args.get("to"),
            status_filter=request.args.get("status", supplier_service.LEDGER_FILTER_ALL).upper(),
        )
        return jsonify({"items": [o.to_dict() for o in orders], "count": len(orders)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@suppliers_bp.post("/<supplier_id>/payments")
def supplier_payment_route(supplier_id: str):
    """
    Request body:
    {
        "amount": 500,
        "type": "PAYMENT",          // PAYMENT, SETTLEMENT or DISCOUNT_CREDIT
        "method": "CASH",           // CASH, BANK, WALLET or OTHER
        "orderId": "...",           // optional: pay against one bill
        "description": "..."        // optional
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        entry, order = supplier_service.record_supplier_payment(
            get_data_store(),
            supplier_id,
            data.get("amount"),
            tx_type=data.get("type") or TX_PAYMENT,
            method=data.get("method") or SUPPLIER_METHOD_CASH,
            order_id=data.get("orderId"),
            description=data.get("description"),
        )
        return jsonify({
            "transaction": entry.to_dict(),
            "order": order.to_dict() if order else None,
        }), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record supplier payment")
        return jsonify({"error": "Internal server error"}), 500
