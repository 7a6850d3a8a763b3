# Overview: Flask API routes for shop settings, backup/restore and factory reset.

"""
Settings Routes

Destructive operations (restore, factory reset) require
{"confirm": true} in the request body.
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import DOMAIN_ERRORS, error_response
from ..extensions import get_data_store
from ..services import backup_service, settings_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
def get_settings_route():
    return jsonify(settings_service.get_shop_details(get_data_store()))


@settings_bp.patch("")
def update_settings_route():
    data = request.get_json(silent=True)
    try:
        return jsonify(settings_service.update_shop_details(get_data_store(), data))
    except DOMAIN_ERRORS as e:
        return error_response(e)


@settings_bp.get("/backup")
def export_backup_route():
    try:
        document = backup_service.export_backup(get_data_store())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    response = jsonify(document)
    response.headers["Content-Disposition"] = f'attachment; filename="{backup_service.backup_filename()}"'
    return response


@settings_bp.post("/backup")
def import_backup_route():
    """
    Request body:
    {"confirm": true, "backup": {...exported document...}}

    Overwrites every collection except users.
    """
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is not True:
        return jsonify({"error": "Restoring a backup overwrites all data; send confirm: true"}), 400
    try:
        restored = backup_service.import_backup(get_data_store(), data.get("backup"))
        return jsonify({"restored": restored})
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to import backup")
        return jsonify({"error": "Internal server error"}), 500


@settings_bp.post("/reset")
def factory_reset_route():
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is not True:
        return jsonify({"error": "Factory reset deletes all data; send confirm: true"}), 400
    try:
        removed = backup_service.factory_reset(get_data_store())
        current_app.logger.warning("Factory reset: %s", removed)
        return jsonify({"removed": removed})
    except DOMAIN_ERRORS as e:
        return error_response(e)
