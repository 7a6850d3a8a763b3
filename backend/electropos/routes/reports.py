# Overview: Flask API routes for reports and the dashboard.

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/sales")
def sales_report_route():
    """
    Query parameters:
    - range: TODAY, WEEK (default), MONTH, YEAR or CUSTOM
    - start / end: YYYY-MM-DD, required for CUSTOM
    """
    range_type = request.args.get("range", reporting_service.RANGE_WEEK).upper()
    try:
        return jsonify(reporting_service.sales_report(
            get_data_store(),
            range_type,
            start=request.args.get("start"),
            end=request.args.get("end"),
        ))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to build sales report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/dashboard")
def dashboard_route():
    try:
        return jsonify(reporting_service.dashboard(
            get_data_store(),
            low_stock_threshold=current_app.config["LOW_STOCK_THRESHOLD"],
        ))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to build dashboard")
        return jsonify({"error": "Internal server error"}), 500
