# Overview: Flask API routes for purchase orders; ordering, settlement and receipt.

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..models.suppliers import SUPPLIER_METHOD_CASH
from ..services import receive_service, supplier_service


purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


@purchase_orders_bp.get("")
def list_purchase_orders_route():
    """
    Query parameters:
    - pending: only orders not yet received, by expected arrival (default: false)
    """
    store = get_data_store()
    pending = request.args.get("pending", "false").lower() == "true"
    try:
        if pending:
            orders = supplier_service.pending_arrivals(store)
        else:
            orders = supplier_service.list_purchase_orders(store)
        return jsonify({"items": [o.to_dict() for o in orders], "count": len(orders)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@purchase_orders_bp.get("/<order_id>")
def get_purchase_order_route(order_id: str):
    try:
        return jsonify(supplier_service.get_purchase_order(get_data_store(), order_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@purchase_orders_bp.post("/restock")
def create_restock_order_route():
    """
    Request body:
    {
        "supplierId": "...",
        "items": [{"productId": "...", "quantity": 5, "buyPrice": 100}],
        "billNumber": "...",    // optional, DRC-XXXXXX by default
        "billDate": "2024-03-01",
        "arrivalDate": "2024-03-05",
        "paidAmount": 200,
        "notes": "..."
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        order = supplier_service.create_restock_order(
            get_data_store(),
            data.get("supplierId"),
            data.get("items"),
            bill_number=data.get("billNumber"),
            bill_date=data.get("billDate"),
            arrival_date=data.get("arrivalDate"),
            paid_amount=data.get("paidAmount", 0),
            notes=data.get("notes") or "",
        )
        return jsonify(order.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create restock order")
        return jsonify({"error": "Internal server error"}), 500


@purchase_orders_bp.post("/new-product")
def create_new_product_order_route():
    """
    Request body:
    {
        "supplierId": "...",
        "product": {"name": "...", "category": "...", "serialNo": "...",
                    "buyPrice": 100, "sellPrice": 150, ...},
        "quantity": 10,
        "billNumber": "...",    // optional, NEW-XXXXXX by default
        "billDate": "...", "arrivalDate": "...", "paidAmount": 0, "notes": "..."
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        order = supplier_service.create_new_product_order(
            get_data_store(),
            data.get("supplierId"),
            data.get("product"),
            data.get("quantity"),
            bill_number=data.get("billNumber"),
            bill_date=data.get("billDate"),
            arrival_date=data.get("arrivalDate"),
            paid_amount=data.get("paidAmount", 0),
            notes=data.get("notes") or "",
        )
        return jsonify(order.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create new product order")
        return jsonify({"error": "Internal server error"}), 500


@purchase_orders_bp.post("/<order_id>/settle")
def settle_purchase_order_route(order_id: str):
    data = request.get_json(silent=True) or {}
    try:
        entry, order = supplier_service.settle_purchase_order(
            get_data_store(), order_id, method=data.get("method") or SUPPLIER_METHOD_CASH
        )
        return jsonify({"transaction": entry.to_dict(), "order": order.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to settle purchase order")
        return jsonify({"error": "Internal server error"}), 500


@purchase_orders_bp.post("/<order_id>/receive")
def receive_purchase_order_route(order_id: str):
    """
    Request body (optional):
    {"receivedAt": "2024-03-05T10:00:00Z"}

    Returns:
        200: {"order": PurchaseOrder, "products": [Product]}
        409: already received
    """
    data = request.get_json(silent=True) or {}
    try:
        order, products = receive_service.receive_order(get_data_store(), order_id, data.get("receivedAt"))
        return jsonify({"order": order.to_dict(), "products": [p.to_dict() for p in products]})
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to receive purchase order")
        return jsonify({"error": "Internal server error"}), 500
