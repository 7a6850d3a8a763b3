# Overview: Flask API routes for the billing counter; quote and checkout.

# backend/electropos/routes/billing.py
"""
Billing API Routes

The cart lives on the client. Each request posts the cart lines and the
server rebuilds a Cart from the current product records before pricing it.

Request body (both endpoints):
{
    "items": [{"productId": "...", "quantity": 2}, ...],
    "discount": 50,               // absolute amount, optional
    "discountPercent": 10,        // or a percent, never both
    "paidAmount": "1000",         // blank / missing = paid in full
    "paymentMethod": "CASH",      // checkout only
    "customerId": "..."           // checkout only, optional (walk-in)
}
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import sales_service


billing_bp = Blueprint("billing", __name__, url_prefix="/api/billing")


@billing_bp.post("/quote")
def quote_route():
    data = request.get_json(silent=True) or {}
    try:
        cart = sales_service.build_cart(get_data_store(), data.get("items"))
        return jsonify(sales_service.quote(
            cart,
            discount_amount=data.get("discount"),
            discount_percent=data.get("discountPercent"),
            paid_amount=data.get("paidAmount"),
        ))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to quote cart")
        return jsonify({"error": "Internal server error"}), 500


@billing_bp.post("/checkout")
def checkout_route():
    """
    Returns:
        201: {"sale": Sale, "complete": bool, "failures": [str]}
             complete is false when the sale was stored but a stock or
             customer update did not go through
        400: invalid cart or payment input (nothing stored)
        502: the sale could not be stored
    """
    data = request.get_json(silent=True) or {}
    store = get_data_store()
    try:
        cart = sales_service.build_cart(store, data.get("items"))
        result = sales_service.checkout(
            store,
            cart,
            payment_method=data.get("paymentMethod"),
            discount_amount=data.get("discount"),
            discount_percent=data.get("discountPercent"),
            paid_amount=data.get("paidAmount"),
            customer_id=data.get("customerId"),
            loyalty_point_unit=current_app.config["LOYALTY_POINT_UNIT"],
        )
        if not result.complete:
            current_app.logger.warning(
                "Checkout %s stored with follow-up failures: %s", result.sale.invoice_no, result.failures
            )
        return jsonify(result.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to check out")
        return jsonify({"error": "Internal server error"}), 500
