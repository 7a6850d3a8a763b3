# Overview: Flask API routes for repair job cards; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import repair_service


repairs_bp = Blueprint("repairs", __name__, url_prefix="/api/repairs")


@repairs_bp.get("")
def list_repairs_route():
    """
    Query parameters:
    - search: customer name, serial number or job id
    - filter: ALL (default), ACTIVE or READY
    """
    status_filter = request.args.get("filter", repair_service.REPAIR_FILTER_ALL).upper()
    try:
        jobs = repair_service.list_repairs(get_data_store(), request.args.get("search"), status_filter)
        return jsonify({"items": [j.to_dict() for j in jobs], "count": len(jobs)})
    except DOMAIN_ERRORS as e:
        return error_response(e)


@repairs_bp.get("/<repair_id>")
def get_repair_route(repair_id: str):
    try:
        return jsonify(repair_service.get_repair(get_data_store(), repair_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@repairs_bp.post("")
def create_repair_route():
    data = request.get_json(silent=True)
    try:
        job = repair_service.create_repair(get_data_store(), data)
        return jsonify(job.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create repair job")
        return jsonify({"error": "Internal server error"}), 500


@repairs_bp.patch("/<repair_id>")
def update_repair_route(repair_id: str):
    data = request.get_json(silent=True)
    try:
        job = repair_service.update_repair(get_data_store(), repair_id, data)
        return jsonify(job.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@repairs_bp.post("/<repair_id>/status")
def repair_status_route(repair_id: str):
    """
    Request body:
    {"status": "in-progress"}
    """
    data = request.get_json(silent=True) or {}
    try:
        job = repair_service.transition_repair(get_data_store(), repair_id, data.get("status"))
        return jsonify(job.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@repairs_bp.delete("/<repair_id>")
def delete_repair_route(repair_id: str):
    try:
        repair_service.delete_repair(get_data_store(), repair_id)
        return "", 204
    except DOMAIN_ERRORS as e:
        return error_response(e)
